from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from redis import ConnectionError

from harvester.exceptions import CursorError
from harvester.services.checkpoint.external import ExternalCheckpointStore

PATCHED_MODULE = "harvester.services.checkpoint.external.Redis"


@pytest.fixture()
def external_store() -> ExternalCheckpointStore:
    return ExternalCheckpointStore(host="localhost", port=6379)


@patch(f"{PATCHED_MODULE}.get")
def test_get_cursor_should_return_none_on_fresh_start(
    mock_get: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_get.return_value = None

    assert external_store.get_cursor() is None
    mock_get.assert_called_once_with("last_processed_date")


@patch(f"{PATCHED_MODULE}.get")
def test_get_cursor_should_parse_stored_date(
    mock_get: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_get.return_value = "2025-01-01"

    assert external_store.get_cursor() == date(2025, 1, 1)


@patch(f"{PATCHED_MODULE}.get")
def test_get_cursor_should_raise_on_garbage(
    mock_get: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_get.return_value = "yesterday"

    with pytest.raises(CursorError):
        external_store.get_cursor()


@patch(f"{PATCHED_MODULE}.set")
def test_set_cursor_should_store_iso_date(
    mock_set: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    external_store.set_cursor(date(2025, 1, 2))

    mock_set.assert_called_once_with("last_processed_date", "2025-01-02")


@patch(f"{PATCHED_MODULE}.sadd")
def test_quarantine_should_add_to_sets(
    mock_sadd: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    external_store.add_unprocessed_date(date(2025, 1, 2))
    external_store.add_invalid_encounter("http://example.com/fhir/Encounter/1")

    assert mock_sadd.call_args_list[0].args == ("unprocessed_dates", "2025-01-02")
    assert mock_sadd.call_args_list[1].args == (
        "invalid_encounters",
        "http://example.com/fhir/Encounter/1",
    )


@patch(f"{PATCHED_MODULE}.sadd")
@patch(f"{PATCHED_MODULE}.set")
@patch(f"{PATCHED_MODULE}.get")
def test_custom_key_names_should_be_used(
    mock_get: MagicMock,
    mock_set: MagicMock,
    mock_sadd: MagicMock,
) -> None:
    store = ExternalCheckpointStore(
        host="localhost",
        port=6379,
        cursor_key="harvest:cursor",
        unprocessed_dates_key="harvest:dates",
        invalid_encounters_key="harvest:encounters",
    )
    mock_get.return_value = None

    store.get_cursor()
    store.set_cursor(date(2025, 1, 1))
    store.add_unprocessed_date(date(2025, 1, 2))

    mock_get.assert_called_once_with("harvest:cursor")
    mock_set.assert_called_once_with("harvest:cursor", "2025-01-01")
    mock_sadd.assert_called_once_with("harvest:dates", "2025-01-02")


@patch(f"{PATCHED_MODULE}.smembers")
def test_get_quarantines_should_return_sets(
    mock_smembers: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_smembers.return_value = {"2025-01-02"}

    assert external_store.get_unprocessed_dates() == {"2025-01-02"}
    mock_smembers.assert_called_once_with("unprocessed_dates")


@patch(f"{PATCHED_MODULE}.ping")
def test_is_healthy_should_return_true_if_connection_exists(
    mock_ping: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_ping.return_value = True

    assert external_store.is_healthy() is True


@patch(f"{PATCHED_MODULE}.ping")
def test_is_healthy_should_return_false_if_connection_is_down(
    mock_ping: MagicMock, external_store: ExternalCheckpointStore
) -> None:
    mock_ping.side_effect = ConnectionError("Failed to connect")

    assert external_store.is_healthy() is False
    mock_ping.assert_called_once()
