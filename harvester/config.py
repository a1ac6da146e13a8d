from enum import Enum
import configparser
from datetime import date
from os import environ
from os.path import exists
from typing import Any
import logging

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

_PATH = "app{suffix}.conf"
_CONFIG = None


def _empty(v: Any) -> bool:
    return v in (None, "", " ")


def _to_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.lower() in ("yes", "true", "t", "1")
    return bool(v)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class ConfigApp(BaseModel):
    loglevel: LogLevel = Field(default=LogLevel.info)
    log_file: str | None = Field(default=None)
    log_retention_days: int = Field(default=3, ge=1)

    @field_validator("log_file", mode="before")
    def validate_log_file(cls, v: Any) -> str | None:
        if _empty(v):
            return None
        return str(v)

    @field_validator("log_retention_days", mode="before")
    def validate_log_retention_days(cls, v: Any) -> int:
        if _empty(v):
            return 3
        return int(v)


class ConfigHarvest(BaseModel):
    start_date: date
    end_date: date
    # Upper bound for encounters enriched in parallel within one day, None means one worker per entry
    max_concurrent_encounters: int | None = Field(default=None, ge=1)
    even_group_key: str = Field(default="001", min_length=1)
    odd_group_key: str = Field(default="002", min_length=1)

    @field_validator("max_concurrent_encounters", mode="before")
    def validate_max_concurrent_encounters(cls, v: Any) -> int | None:
        if _empty(v):
            return None
        return int(v)

    @model_validator(mode="after")
    def validate_date_window(self) -> "ConfigHarvest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ConfigSourceApi(BaseModel):
    base_url: str = Field(default="https://hapi.fhir.org/baseR4")
    timeout: int = Field(default=20, gt=0)
    retries: int = Field(default=3, ge=1)
    backoff: float = Field(default=1.0, ge=0)

    @field_validator("base_url", mode="before")
    def validate_base_url(cls, v: Any) -> str:
        if _empty(v):
            return "https://hapi.fhir.org/baseR4"
        return str(v).rstrip("/")

    @field_validator("timeout", mode="before")
    def validate_timeout(cls, v: Any) -> int:
        if _empty(v):
            return 20
        return int(v)

    @field_validator("retries", mode="before")
    def validate_retries(cls, v: Any) -> int:
        if _empty(v):
            return 3
        return int(v)

    @field_validator("backoff", mode="before")
    def validate_backoff(cls, v: Any) -> float:
        if _empty(v):
            return 1.0
        return float(v)


class ConfigCheckpoint(BaseModel):
    host: str | None = Field(default=None)
    port: int = Field(default=6379, gt=0, lt=65536)
    db: int = Field(default=0, ge=0)
    password: str | None = Field(default=None)
    ssl: bool = Field(default=False)
    cursor_key: str = Field(default="last_processed_date")
    unprocessed_dates_key: str = Field(default="unprocessed_dates")
    invalid_encounters_key: str = Field(default="invalid_encounters")

    @field_validator("host", "password", mode="before")
    def validate_optional_str(cls, v: Any) -> str | None:
        if _empty(v):
            return None
        return str(v)

    @field_validator("port", mode="before")
    def validate_port(cls, v: Any) -> int:
        if _empty(v):
            return 6379
        return int(v)

    @field_validator("db", mode="before")
    def validate_db(cls, v: Any) -> int:
        if _empty(v):
            return 0
        return int(v)

    @field_validator("ssl", mode="before")
    def validate_ssl(cls, v: Any) -> bool:
        if _empty(v):
            return False
        return _to_bool(v)


class ConfigQueue(BaseModel):
    queue_url: str = Field(min_length=1)
    region: str = Field(default="sa-east-1")
    endpoint_url: str | None = Field(default=None)
    access_key_id: str | None = Field(default=None)
    secret_access_key: str | None = Field(default=None)
    content_based_deduplication: bool = Field(default=True)

    @field_validator("endpoint_url", "access_key_id", "secret_access_key", mode="before")
    def validate_optional_str(cls, v: Any) -> str | None:
        if _empty(v):
            return None
        return str(v)

    @field_validator("content_based_deduplication", mode="before")
    def validate_content_based_deduplication(cls, v: Any) -> bool:
        if _empty(v):
            return True
        return _to_bool(v)


class ConfigStats(BaseModel):
    enabled: bool = Field(default=False)
    host: str | None = Field(default=None)
    port: int | None = Field(default=None)
    module_name: str | None = Field(default=None)

    @field_validator("enabled", mode="before")
    def validate_enabled(cls, v: Any) -> bool:
        if _empty(v):
            return False
        return _to_bool(v)

    @field_validator("host", mode="before")
    def validate_host(cls, v: Any) -> str | None:
        if _empty(v):
            return None
        return str(v)

    @field_validator("port", mode="before")
    def validate_port(cls, v: Any) -> int | None:
        if _empty(v):
            return None
        return int(v)


class Config(BaseModel):
    app: ConfigApp
    harvest: ConfigHarvest
    source_api: ConfigSourceApi
    checkpoint: ConfigCheckpoint
    queue: ConfigQueue
    stats: ConfigStats


def read_ini_file(path: str) -> Any:
    ini_data = configparser.ConfigParser()
    ini_data.read(path)

    ret = {}
    for section in ini_data.sections():
        ret[section] = dict(ini_data[section])

    return ret


def apply_env_overrides(ini_data: dict[str, Any]) -> dict[str, Any]:
    """
    The harvest window may be given through START_DATE and END_DATE, which take precedence
    over the values in the configuration file.
    """
    harvest = ini_data.setdefault("harvest", {})
    for env_name, key in (("START_DATE", "start_date"), ("END_DATE", "end_date")):
        value = environ.get(env_name, "")
        if value:
            harvest[key] = value

    return ini_data


def reset_config() -> None:
    global _CONFIG
    _CONFIG = None


def set_config(config: Config) -> None:
    global _CONFIG
    _CONFIG = config


def get_config(path: str | None = None) -> Config:
    global _CONFIG
    global _PATH

    if _CONFIG is not None:
        return _CONFIG

    if path is None:
        suffix = environ.get("APP_ENV", "")
        if suffix:
            suffix = f".{suffix}"
        path = _PATH.replace("{suffix}", suffix)
        logger.info(f"Reading configuration using file: {path}")

    if not exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    ini_data = apply_env_overrides(read_ini_file(path))
    # Sections with only defaults may be left out of the file
    for section in ("app", "source_api", "checkpoint", "stats"):
        ini_data.setdefault(section, {})

    try:
        _CONFIG = Config(**ini_data)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e}")
        raise e

    return _CONFIG
