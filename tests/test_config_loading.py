from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from harvester.config import LogLevel, get_config

CONFIG = """
[app]
loglevel=debug

[harvest]
start_date=2025-01-01
end_date=2025-01-31
max_concurrent_encounters=

[source_api]
base_url=http://hapi:8080/fhir/

[checkpoint]
host=valkey
port=6379

[queue]
queue_url=http://localstack:4566/000000000000/fhir-ingestion.fifo
content_based_deduplication=false

[stats]
enabled=true
"""


@pytest.fixture()
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.delenv("START_DATE", raising=False)
    monkeypatch.delenv("END_DATE", raising=False)
    path = tmp_path / "app.conf"
    path.write_text(CONFIG)
    return path


def test_get_config_reads_ini_file(config_file: Path) -> None:
    config = get_config(str(config_file))

    assert config.app.loglevel == LogLevel.debug
    assert config.harvest.start_date == date(2025, 1, 1)
    assert config.harvest.end_date == date(2025, 1, 31)
    assert config.harvest.max_concurrent_encounters is None
    assert config.harvest.even_group_key == "001"
    assert config.source_api.base_url == "http://hapi:8080/fhir"
    assert config.source_api.timeout == 20
    assert config.source_api.retries == 3
    assert config.checkpoint.host == "valkey"
    assert config.checkpoint.cursor_key == "last_processed_date"
    assert config.queue.region == "sa-east-1"
    assert config.queue.content_based_deduplication is False
    assert config.stats.enabled is True


def test_get_config_is_cached(config_file: Path) -> None:
    assert get_config(str(config_file)) is get_config()


def test_environment_overrides_harvest_window(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("START_DATE", "2025-01-10")
    monkeypatch.setenv("END_DATE", "2025-01-12")

    config = get_config(str(config_file))

    assert config.harvest.start_date == date(2025, 1, 10)
    assert config.harvest.end_date == date(2025, 1, 12)


def test_end_date_before_start_date_is_rejected(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("END_DATE", "2024-12-31")

    with pytest.raises(ValidationError):
        get_config(str(config_file))


def test_invalid_date_is_rejected(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("START_DATE", "01-01-2025")

    with pytest.raises(ValidationError):
        get_config(str(config_file))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        get_config(str(tmp_path / "missing.conf"))
