from datetime import date
from unittest.mock import MagicMock, patch

from harvester import application
from harvester.config import set_config
from harvester.container import get_checkpoint_store, get_date_cursor_service, setup_container
from harvester.models.fhir.encounter import EncounterBundle
from harvester.services.checkpoint.in_memory import InMemoryCheckpointStore
from harvester.services.harvest.date_cursor_service import DateCursorService
from tests.test_config import get_test_config

PATCHED_MODULE = "harvester.services.publisher.sqs_publisher.boto3.client"


@patch(PATCHED_MODULE)
def test_setup_container_wires_services(mock_client: MagicMock) -> None:
    set_config(get_test_config())

    setup_container()

    assert isinstance(get_checkpoint_store(), InMemoryCheckpointStore)
    assert isinstance(get_date_cursor_service(), DateCursorService)
    mock_client.assert_called_once()


@patch("harvester.services.api.fhir_api.FhirApi.get_encounters_for_date")
@patch(PATCHED_MODULE)
def test_run_walks_the_configured_window(mock_client: MagicMock, mock_get: MagicMock) -> None:
    set_config(get_test_config())
    mock_get.return_value = EncounterBundle.model_validate({"resourceType": "Bundle", "total": 0})

    result = application.run()

    assert result.completed
    assert [d.day for d in result.days] == [date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)]
    mock_client.return_value.send_message.assert_not_called()
