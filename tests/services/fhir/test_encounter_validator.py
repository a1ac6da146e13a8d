from typing import Any, Dict

import pytest

from harvester.exceptions import EncounterValidationError
from harvester.services.fhir.encounter_validator import validate_encounter

FULL_URL = "http://example.com/fhir/Encounter/encounter-1"


def test_validate_encounter_should_return_candidate(mock_encounter: Dict[str, Any]) -> None:
    candidate = validate_encounter(mock_encounter, FULL_URL)

    assert candidate.id == "encounter-1"
    assert candidate.status == "finished"
    assert candidate.encounter_class is not None
    assert candidate.encounter_class.code == "AMB"
    assert candidate.subject is not None
    assert candidate.subject.reference == "Patient/patient-1"


def test_validate_encounter_should_ignore_unknown_fields(mock_encounter: Dict[str, Any]) -> None:
    mock_encounter["serviceProvider"] = {"reference": "Organization/1"}
    mock_encounter["meta"] = {"versionId": "3"}

    assert validate_encounter(mock_encounter, FULL_URL).id == "encounter-1"


@pytest.mark.parametrize(
    "field, value, expected",
    [
        ("status", None, "status"),
        ("status", "", "status"),
        ("class", None, "class.code"),
        ("class", {"system": "x"}, "class.code"),
        ("participant", None, "participant"),
        ("participant", [], "participant"),
        ("subject", None, "subject.reference"),
        ("subject", {"display": "Jane"}, "subject.reference"),
    ],
)
def test_validate_encounter_should_reject_missing_fields(
    mock_encounter: Dict[str, Any], field: str, value: Any, expected: str
) -> None:
    if value is None:
        del mock_encounter[field]
    else:
        mock_encounter[field] = value

    with pytest.raises(EncounterValidationError, match=expected):
        validate_encounter(mock_encounter, FULL_URL)


@pytest.mark.parametrize("full_url", [None, ""])
def test_validate_encounter_should_require_full_url(
    mock_encounter: Dict[str, Any], full_url: str | None
) -> None:
    with pytest.raises(EncounterValidationError, match="fullUrl"):
        validate_encounter(mock_encounter, full_url)


def test_validate_encounter_should_reject_undecodable_shapes(mock_encounter: Dict[str, Any]) -> None:
    mock_encounter["participant"] = "Practitioner/1"

    with pytest.raises(EncounterValidationError, match="Failed to decode"):
        validate_encounter(mock_encounter, FULL_URL)


def test_validate_encounter_should_reject_non_objects() -> None:
    with pytest.raises(EncounterValidationError):
        validate_encounter(["Encounter"], FULL_URL)
