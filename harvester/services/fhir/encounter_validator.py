from typing import Any, List

from pydantic import ValidationError

from harvester.exceptions import EncounterValidationError
from harvester.models.fhir.encounter import EncounterCandidate


def _blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def missing_required_fields(candidate: EncounterCandidate, source_url: str | None) -> List[str]:
    missing = []
    if _blank(candidate.status):
        missing.append("status")
    if candidate.encounter_class is None or _blank(candidate.encounter_class.code):
        missing.append("class.code")
    if not candidate.participant:
        missing.append("participant")
    if candidate.subject is None or _blank(candidate.subject.reference):
        missing.append("subject.reference")
    if _blank(source_url):
        missing.append("fullUrl")
    return missing


def validate_encounter(resource: Any, source_url: str | None) -> EncounterCandidate:
    """
    Decodes a raw encounter payload and checks the fields needed to enrich and route it.
    """
    if not isinstance(resource, dict):
        raise EncounterValidationError("Encounter resource is not a JSON object")

    try:
        candidate = EncounterCandidate.model_validate(resource)
    except ValidationError as e:
        raise EncounterValidationError(f"Failed to decode encounter: {e}") from e

    missing = missing_required_fields(candidate, source_url)
    if missing:
        raise EncounterValidationError(f"Encounter is missing required fields: {', '.join(missing)}")

    return candidate
