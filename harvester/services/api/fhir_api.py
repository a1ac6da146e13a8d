from datetime import date
import json
import logging

from pydantic import ValidationError

from harvester.exceptions import BatchDecodeError
from harvester.models.fhir.encounter import EncounterBundle
from harvester.models.fhir.types import ReferenceHandle
from harvester.services.api.api_service import HttpService

logger = logging.getLogger(__name__)


class FhirApi(HttpService):
    def __init__(
        self,
        base_url: str,
        timeout: int,
        backoff: float,
        retries: int,
    ):
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            backoff=backoff,
            retries=retries,
        )

    def get_encounters_for_date(self, day: date) -> EncounterBundle:
        """
        Fetch all encounters for the given day. Raises FetchError when the source could not be
        reached and BatchDecodeError when the returned payload is not a searchset bundle.
        """
        data = self.fetch(sub_route="Encounter", params={"date": day.isoformat()})
        try:
            payload = json.loads(data)
        except ValueError as e:
            raise BatchDecodeError(f"Failed to decode encounter bundle for {day}: {e}") from e

        if not isinstance(payload, dict):
            raise BatchDecodeError(f"Encounter bundle for {day} is not a JSON object")

        try:
            return EncounterBundle.model_validate(payload)
        except ValidationError as e:
            raise BatchDecodeError(f"Invalid encounter bundle for {day}: {e}") from e

    def get_resource(self, handle: ReferenceHandle) -> bytes:
        """
        Dereference a relative reference against the source server and return the raw payload.
        """
        return self.fetch(sub_route=handle.route)
