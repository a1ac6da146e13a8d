from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, timedelta

from harvester.exceptions import BatchDecodeError, FetchError
from harvester.models.fhir.encounter import EncounterBundleEntry
from harvester.models.harvest.dto import DayResult, EnrichmentOutcome, HarvestResult
from harvester.services.api.fhir_api import FhirApi
from harvester.services.checkpoint.checkpoint_store import CheckpointStore
from harvester.services.harvest.enrichment_service import EnrichmentService
from harvester.stats import Stats

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class DateCursorService:
    """
    Walks the harvest window one day at a time.

    The cursor holds the last day whose batch was fetched. A run resumes on the day
    after it (or on start_date when there is none), fetches the day's encounters, fans
    them out to the enrichment pipeline, waits for all of them and only then stores the
    day as the new cursor. A day whose batch cannot be fetched is quarantined and the run
    stops there, leaving the cursor on the day before so the next run tries it again.
    """

    def __init__(
        self,
        fhir_api: FhirApi,
        enrichment_service: EnrichmentService,
        checkpoint_store: CheckpointStore,
        start_date: date,
        end_date: date,
        stats: Stats,
        max_concurrent_encounters: int | None = None,
        even_group_key: str = "001",
        odd_group_key: str = "002",
    ) -> None:
        self.__fhir_api = fhir_api
        self.__enrichment_service = enrichment_service
        self.__checkpoint_store = checkpoint_store
        self.__start_date = start_date
        self.__end_date = end_date
        self.__stats = stats
        self.__max_concurrent_encounters = max_concurrent_encounters
        self.__group_keys = (even_group_key, odd_group_key)

    def resume_date(self) -> date:
        """
        Returns the first day this run has to process. Raises CursorError when the stored
        cursor is not a date.
        """
        cursor = self.__checkpoint_store.get_cursor()
        if cursor is None:
            logger.info("No last processed date found, starting from %s", self.__start_date)
            return self.__start_date

        logger.info("Resuming after last processed date %s", cursor)
        return cursor + ONE_DAY

    def group_key(self, index: int) -> str:
        return self.__group_keys[index % 2]

    def run(self) -> HarvestResult:
        result = HarvestResult(start_date=self.__start_date, end_date=self.__end_date)
        current = self.resume_date()

        while current <= self.__end_date:
            with self.__stats.timer("harvest.day"):
                day_result = self.process_date(current)

            if day_result is None:
                result.halted_on = current
                logger.error(
                    "Stopping at %s, cursor left at %s. The date will be retried on the next run",
                    current,
                    current - ONE_DAY,
                )
                return result

            result.days.append(day_result)
            self.__advance(current)
            current += ONE_DAY

        logger.info("Reached end date %s, stopping processing", self.__end_date)
        return result

    def process_date(self, day: date) -> DayResult | None:
        """
        Processes one day. Returns None when the batch could not be fetched, in which case
        the day has been added to the unprocessed dates.
        """
        logger.info("Processing date: %s", day)
        try:
            bundle = self.__fhir_api.get_encounters_for_date(day)
        except (FetchError, BatchDecodeError) as e:
            logger.error("Failed to fetch encounters for %s: %s", day, e)
            self.__quarantine_date(day)
            return None

        entries = bundle.entry or []
        day_result = DayResult(day=day, entries=len(entries))
        if not entries:
            logger.info("No encounters found for date: %s", day)
            return day_result

        for outcome in self.__fan_out(entries):
            match outcome:
                case EnrichmentOutcome.PUBLISHED:
                    day_result.published += 1
                case EnrichmentOutcome.QUARANTINED:
                    day_result.quarantined += 1
                case _:
                    day_result.errors += 1

        logger.info(
            "Finished %s: %d entries, %d published, %d quarantined, %d errors",
            day,
            day_result.entries,
            day_result.published,
            day_result.quarantined,
            day_result.errors,
        )
        return day_result

    def __fan_out(self, entries: list[EncounterBundleEntry]) -> list[EnrichmentOutcome]:
        max_workers = self.__max_concurrent_encounters or len(entries)
        outcomes: list[EnrichmentOutcome] = []

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(
                    self.__enrichment_service.process,
                    entry.resource,
                    entry.full_url,
                    self.group_key(index),
                ): entry
                for index, entry in enumerate(entries)
            }
            for future in as_completed(future_map):
                try:
                    outcomes.append(future.result())
                except Exception:
                    entry = future_map[future]
                    logger.exception("Unhandled exception while processing encounter %s", entry.full_url)
                    outcomes.append(EnrichmentOutcome.ERROR)

        return outcomes

    def __advance(self, day: date) -> None:
        try:
            self.__checkpoint_store.set_cursor(day)
        except Exception:
            logger.exception("Failed to update last processed date to %s", day)
            return
        self.__stats.inc("harvest.dates.processed")

    def __quarantine_date(self, day: date) -> None:
        self.__stats.inc("harvest.dates.unprocessed")
        try:
            self.__checkpoint_store.add_unprocessed_date(day)
        except Exception:
            logger.exception("Failed to add %s to unprocessed dates", day)
