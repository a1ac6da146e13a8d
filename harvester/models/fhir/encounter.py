from typing import Any, List
from pydantic import BaseModel, ConfigDict, Field


class _SourceModel(BaseModel):
    # The source server is inconsistent, only the fields we read are described here
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EncounterReference(_SourceModel):
    reference: str | None = None


class EncounterClass(_SourceModel):
    system: str | None = None
    code: str | None = None


class EncounterPeriod(_SourceModel):
    start: str | None = None
    end: str | None = None


class EncounterParticipant(_SourceModel):
    individual: EncounterReference | None = None


class EncounterCandidate(_SourceModel):
    resource_type: str | None = Field(default=None, alias="resourceType")
    id: str | None = None
    status: str | None = None
    encounter_class: EncounterClass | None = Field(default=None, alias="class")
    period: EncounterPeriod | None = None
    participant: List[EncounterParticipant] | None = None
    subject: EncounterReference | None = None


class EncounterBundleEntry(_SourceModel):
    full_url: str | None = Field(default=None, alias="fullUrl")
    # Decoded per entry by the enrichment pipeline so one bad entry cannot fail the day
    resource: Any = None


class EncounterBundle(_SourceModel):
    resource_type: str | None = Field(default=None, alias="resourceType")
    total: int | None = None
    entry: List[EncounterBundleEntry] | None = None
