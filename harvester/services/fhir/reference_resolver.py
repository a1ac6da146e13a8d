import json
import logging
from typing import List

from harvester.exceptions import ReferenceValidationError
from harvester.models.fhir.person import HumanNameSource, PatientSource, PractitionerSource
from harvester.models.fhir.types import ReferenceHandle, ResolvableResources
from harvester.models.harvest.dto import PatientDto, PractitionerDto
from harvester.services.api.fhir_api import FhirApi
from harvester.services.fhir.resources import create_resource

logger = logging.getLogger(__name__)


def _first_name(names: List[HumanNameSource] | None) -> tuple[str, str | None] | None:
    """
    Returns the first given name and the family name of the first HumanName, or None when
    there is no name entry with at least one given name.
    """
    if not names:
        return None
    given = names[0].given
    if not given:
        return None
    return given[0], names[0].family


class ReferenceResolver:
    """
    Dereferences the practitioner and patient of an encounter through the source API. Any
    decoding or validity problem is reported as a ReferenceValidationError, fetch failures
    propagate as FetchError.
    """

    def __init__(self, fhir_api: FhirApi) -> None:
        self.__fhir_api = fhir_api

    def resolve_practitioner(self, handle: ReferenceHandle) -> PractitionerDto:
        resource = self.__resolve(handle, ResolvableResources.PRACTITIONER)
        assert isinstance(resource, PractitionerSource)

        name = _first_name(resource.name)
        if name is None:
            raise ReferenceValidationError(f"Practitioner {handle.route} has no given name")

        return PractitionerDto(
            fhir_id=resource.id or handle.id,
            given_name=name[0],
            family_name=name[1],
        )

    def resolve_patient(self, handle: ReferenceHandle) -> PatientDto:
        resource = self.__resolve(handle, ResolvableResources.PATIENT)
        assert isinstance(resource, PatientSource)

        name = _first_name(resource.name)
        if name is None:
            raise ReferenceValidationError(f"Patient {handle.route} has no given name")

        return PatientDto(
            fhir_id=resource.id or handle.id,
            given_name=name[0],
            family_name=name[1],
            birth_date=resource.birth_date,
            gender=resource.gender,
        )

    def __resolve(
        self, handle: ReferenceHandle, expected: ResolvableResources
    ) -> PractitionerSource | PatientSource:
        if handle.resource_type != expected.value:
            raise ReferenceValidationError(
                f"Expected a {expected.value} reference, got {handle.route}"
            )

        logger.info("Fetching %s", handle.route)
        data = self.__fhir_api.get_resource(handle)

        try:
            payload = json.loads(data)
        except ValueError as e:
            logger.warning("Failed to decode JSON of %s: %s", handle.route, e)
            raise ReferenceValidationError(f"Failed to decode {handle.route}: {e}") from e

        if not isinstance(payload, dict) or payload.get("resourceType") != expected.value:
            raise ReferenceValidationError(f"{handle.route} did not return a {expected.value}")

        try:
            return create_resource(payload)
        except ValueError as e:
            logger.warning("Invalid %s %s: %s", expected.value, handle.route, e)
            raise ReferenceValidationError(f"Invalid {expected.value} {handle.route}: {e}") from e
