from typing import List
from pydantic import BaseModel, ConfigDict, Field


class _SourceModel(BaseModel):
    # Only the fields copied into the message are described, everything else is ignored
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class HumanNameSource(_SourceModel):
    given: List[str] | None = None
    family: str | None = None


class PractitionerSource(_SourceModel):
    resource_type: str | None = Field(default=None, alias="resourceType")
    id: str | None = None
    name: List[HumanNameSource] | None = None


class PatientSource(_SourceModel):
    resource_type: str | None = Field(default=None, alias="resourceType")
    id: str | None = None
    name: List[HumanNameSource] | None = None
    # Kept as received, the source does not always hold valid dates
    birth_date: str | None = Field(default=None, alias="birthDate")
    gender: str | None = None
