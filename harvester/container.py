import inject

from harvester.config import get_config
from harvester.services.api.fhir_api import FhirApi
from harvester.services.checkpoint.checkpoint_store import CheckpointStore
from harvester.services.checkpoint.provider import CheckpointStoreProvider
from harvester.services.fhir.reference_resolver import ReferenceResolver
from harvester.services.harvest.date_cursor_service import DateCursorService
from harvester.services.harvest.enrichment_service import EnrichmentService
from harvester.services.publisher.publisher import Publisher
from harvester.services.publisher.sqs_publisher import SqsPublisher, create_sqs_client
from harvester.stats import get_stats


def container_config(binder: inject.Binder) -> None:
    config = get_config()

    checkpoint_store = CheckpointStoreProvider(config=config.checkpoint).create()
    binder.bind(CheckpointStore, checkpoint_store)

    fhir_api = FhirApi(
        base_url=config.source_api.base_url,
        timeout=config.source_api.timeout,
        backoff=config.source_api.backoff,
        retries=config.source_api.retries,
    )
    binder.bind(FhirApi, fhir_api)

    sqs_client = create_sqs_client(
        region=config.queue.region,
        endpoint_url=config.queue.endpoint_url,
        access_key_id=config.queue.access_key_id,
        secret_access_key=config.queue.secret_access_key,
    )
    publisher = SqsPublisher(
        client=sqs_client,
        queue_url=config.queue.queue_url,
        content_based_deduplication=config.queue.content_based_deduplication,
    )
    binder.bind(Publisher, publisher)

    enrichment_service = EnrichmentService(
        resolver=ReferenceResolver(fhir_api),
        publisher=publisher,
        checkpoint_store=checkpoint_store,
        base_url=config.source_api.base_url,
        stats=get_stats(),
    )
    binder.bind(EnrichmentService, enrichment_service)

    date_cursor_service = DateCursorService(
        fhir_api=fhir_api,
        enrichment_service=enrichment_service,
        checkpoint_store=checkpoint_store,
        start_date=config.harvest.start_date,
        end_date=config.harvest.end_date,
        stats=get_stats(),
        max_concurrent_encounters=config.harvest.max_concurrent_encounters,
        even_group_key=config.harvest.even_group_key,
        odd_group_key=config.harvest.odd_group_key,
    )
    binder.bind(DateCursorService, date_cursor_service)


def get_checkpoint_store() -> CheckpointStore:
    return inject.instance(CheckpointStore)  # type: ignore[type-abstract]


def get_date_cursor_service() -> DateCursorService:
    return inject.instance(DateCursorService)


def setup_container() -> None:
    inject.configure(container_config, once=True)
