import copy
from collections.abc import Generator
from typing import Any, Dict
from unittest.mock import MagicMock

import inject
import pytest

from harvester.config import reset_config
from harvester.services.api.fhir_api import FhirApi
from harvester.services.checkpoint.in_memory import InMemoryCheckpointStore
from harvester.services.fhir.reference_resolver import ReferenceResolver
from harvester.services.harvest.enrichment_service import EnrichmentService
from harvester.services.publisher.publisher import Publisher
from harvester.stats import MemoryClient, Statsd, reset_stats
from tests.mock_data import BASE_URL, encounter, patient, practitioner


@pytest.fixture(autouse=True)
def clean_globals() -> Generator[None, None, None]:
    yield
    reset_config()
    reset_stats()
    inject.clear()


@pytest.fixture()
def base_url() -> str:
    return BASE_URL


@pytest.fixture()
def mock_encounter() -> Dict[str, Any]:
    return copy.deepcopy(encounter)


@pytest.fixture()
def mock_practitioner() -> Dict[str, Any]:
    return copy.deepcopy(practitioner)


@pytest.fixture()
def mock_patient() -> Dict[str, Any]:
    return copy.deepcopy(patient)


@pytest.fixture()
def checkpoint_store() -> InMemoryCheckpointStore:
    return InMemoryCheckpointStore()


@pytest.fixture()
def memory_client() -> MemoryClient:
    return MemoryClient()


@pytest.fixture()
def stats(memory_client: MemoryClient) -> Statsd:
    return Statsd(memory_client)


@pytest.fixture()
def fhir_api(base_url: str) -> FhirApi:
    return FhirApi(base_url=base_url, timeout=1, backoff=0, retries=3)


@pytest.fixture()
def mock_fhir_api() -> MagicMock:
    return MagicMock(spec=FhirApi)


@pytest.fixture()
def mock_publisher() -> MagicMock:
    return MagicMock(spec=Publisher)


@pytest.fixture()
def enrichment_service(
    mock_fhir_api: MagicMock,
    mock_publisher: MagicMock,
    checkpoint_store: InMemoryCheckpointStore,
    base_url: str,
    stats: Statsd,
) -> EnrichmentService:
    return EnrichmentService(
        resolver=ReferenceResolver(mock_fhir_api),
        publisher=mock_publisher,
        checkpoint_store=checkpoint_store,
        base_url=base_url,
        stats=stats,
    )
