import logging
from typing import Any

from harvester.exceptions import (
    FetchError,
    HarvestValidationError,
    PublishError,
)
from harvester.models.fhir.encounter import EncounterCandidate
from harvester.models.harvest.dto import (
    EncounterDto,
    EnrichedMessage,
    EnrichmentOutcome,
    PeriodDto,
)
from harvester.services.checkpoint.checkpoint_store import CheckpointStore
from harvester.services.fhir.encounter_validator import validate_encounter
from harvester.services.fhir.reference_resolver import ReferenceResolver
from harvester.services.fhir.references import build_reference_handle
from harvester.services.publisher.publisher import Publisher
from harvester.stats import Stats

logger = logging.getLogger(__name__)


class EnrichmentService:
    """
    Turns one raw encounter into an enriched message and publishes it.

    Every failure (invalid encounter, unresolvable practitioner or patient, rejected
    publish) ends with the encounter's URL in the invalid encounters quarantine. Nothing
    is retried here beyond what the fetcher does for each request.
    """

    def __init__(
        self,
        resolver: ReferenceResolver,
        publisher: Publisher,
        checkpoint_store: CheckpointStore,
        base_url: str,
        stats: Stats,
    ) -> None:
        self.__resolver = resolver
        self.__publisher = publisher
        self.__checkpoint_store = checkpoint_store
        self.__base_url = base_url
        self.__stats = stats

    def process(self, resource: Any, source_url: str | None, group_key: str) -> EnrichmentOutcome:
        try:
            candidate = validate_encounter(resource, source_url)
        except HarvestValidationError as e:
            logger.warning("Invalid encounter %s: %s", source_url, e)
            return self.__quarantine(source_url)

        # validate_encounter guarantees a non-empty URL from here on
        assert source_url is not None

        try:
            message = self.__enrich(candidate, source_url)
        except (FetchError, HarvestValidationError) as e:
            logger.warning("Failed to enrich encounter %s: %s", source_url, e)
            return self.__quarantine(source_url)

        logger.debug("Message being sent: %s", message.to_json())
        try:
            self.__publisher.publish(message, group_key)
        except PublishError as e:
            logger.error("Failed to publish encounter %s: %s", source_url, e)
            return self.__quarantine(source_url)

        self.__stats.inc("harvest.encounters.published")
        return EnrichmentOutcome.PUBLISHED

    def __enrich(self, candidate: EncounterCandidate, source_url: str) -> EnrichedMessage:
        # The validator guarantees at least one participant and a subject
        participant = candidate.participant[0]  # type: ignore[index]
        practitioner_ref = participant.individual.reference if participant.individual else None
        practitioner_handle = build_reference_handle(practitioner_ref, self.__base_url)
        patient_handle = build_reference_handle(
            candidate.subject.reference,  # type: ignore[union-attr]
            self.__base_url,
        )

        practitioner = self.__resolver.resolve_practitioner(practitioner_handle)
        patient = self.__resolver.resolve_patient(patient_handle)

        period = candidate.period
        encounter = EncounterDto(
            fhir_id=candidate.id,
            full_url=source_url,
            status=candidate.status,  # type: ignore[arg-type]
            class_code=candidate.encounter_class.code,  # type: ignore[union-attr]
            period=PeriodDto(
                start=period.start if period else None,
                end=period.end if period else None,
            ),
            practitioner_id=practitioner_handle.id,
            patient_id=patient_handle.id,
        )

        return EnrichedMessage(
            encounter=encounter,
            practitioner=practitioner,
            patient=patient,
        )

    def __quarantine(self, source_url: str | None) -> EnrichmentOutcome:
        self.__stats.inc("harvest.encounters.quarantined")
        if not source_url:
            # Nothing identifies this entry, so there is nothing to put in the set
            logger.error("Encounter without fullUrl could not be processed and was not quarantined")
            return EnrichmentOutcome.QUARANTINED

        try:
            self.__checkpoint_store.add_invalid_encounter(source_url)
        except Exception:
            logger.exception("Failed to add %s to invalid encounters", source_url)
        return EnrichmentOutcome.QUARANTINED
