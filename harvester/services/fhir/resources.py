from typing import Dict, Any

from harvester.models.fhir.person import PatientSource, PractitionerSource
from harvester.models.fhir.types import ResolvableResources


def get_resource_type(data: Dict[str, Any]) -> str | None:
    resource_type = data.get("resourceType")
    return resource_type if isinstance(resource_type, str) else None


def create_resource(data: Dict[str, Any]) -> PractitionerSource | PatientSource:
    """
    Decodes one of the resources referenced by an encounter. Only the fields the message
    needs are read; raises ValueError (pydantic's ValidationError included) when one of
    those has the wrong shape.
    """
    resource_type = get_resource_type(data)
    if resource_type is None:
        raise ValueError("Model is not a valid FHIR model")

    match resource_type:
        case ResolvableResources.PRACTITIONER.value:
            return PractitionerSource.model_validate(data)

        case ResolvableResources.PATIENT.value:
            return PatientSource.model_validate(data)

        case _:
            raise ValueError(f"Unable to create model for {resource_type}")
