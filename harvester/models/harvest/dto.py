from datetime import date
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _MessageModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PeriodDto(_MessageModel):
    start: str | None = None
    end: str | None = None


class EncounterDto(_MessageModel):
    fhir_id: str | None = Field(alias="fhirId")
    full_url: str = Field(alias="fullUrl")
    status: str
    class_code: str = Field(alias="class")
    period: PeriodDto
    practitioner_id: str = Field(alias="practitionerId")
    patient_id: str = Field(alias="patientId")


class PractitionerDto(_MessageModel):
    fhir_id: str | None = Field(alias="fhirId")
    given_name: str = Field(alias="givenName")
    family_name: str | None = Field(alias="familyName")


class PatientDto(_MessageModel):
    fhir_id: str | None = Field(alias="id")
    given_name: str = Field(alias="givenName")
    family_name: str | None = Field(alias="familyName")
    birth_date: str | None = Field(alias="birthDate")
    gender: str | None = None


class EnrichedMessage(_MessageModel):
    encounter: EncounterDto
    practitioner: PractitionerDto
    patient: PatientDto

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class EnrichmentOutcome(str, Enum):
    PUBLISHED = "published"
    QUARANTINED = "quarantined"
    ERROR = "error"


class DayResult(BaseModel):
    day: date
    entries: int = 0
    published: int = 0
    quarantined: int = 0
    errors: int = 0


class HarvestResult(BaseModel):
    start_date: date
    end_date: date
    days: List[DayResult] = []
    # Day whose batch could not be fetched, the cursor was left before it
    halted_on: date | None = None

    @property
    def completed(self) -> bool:
        return self.halted_on is None

    @property
    def published(self) -> int:
        return sum(d.published for d in self.days)

    @property
    def quarantined(self) -> int:
        return sum(d.quarantined for d in self.days)
