from enum import Enum
from pydantic import BaseModel, ConfigDict


class ResolvableResources(Enum):
    PRACTITIONER = "Practitioner"
    PATIENT = "Patient"


class ReferenceHandle(BaseModel):
    """
    Relative pointer to a resource on the source server, in the form <resourceType>/<id>
    """

    model_config = ConfigDict(frozen=True)

    resource_type: str
    id: str

    @property
    def route(self) -> str:
        return f"{self.resource_type}/{self.id}"
