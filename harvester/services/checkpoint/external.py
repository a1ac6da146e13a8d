from __future__ import annotations

from datetime import date

from redis import ConnectionError, Redis

from harvester.exceptions import CursorError
from harvester.services.checkpoint.checkpoint_store import CheckpointStore


class ExternalCheckpointStore(CheckpointStore):
    """
    Redis (or Valkey) backed checkpoint store.

    The cursor is a plain string key holding an ISO date, the quarantines are
    Redis sets so repeated additions of the same day or URL are harmless.
    """

    def __init__(
        self,
        host: str,
        port: int,
        db: int = 0,
        password: str | None = None,
        ssl: bool = False,
        cursor_key: str = "last_processed_date",
        unprocessed_dates_key: str = "unprocessed_dates",
        invalid_encounters_key: str = "invalid_encounters",
    ) -> None:
        super().__init__(
            cursor_key=cursor_key,
            unprocessed_dates_key=unprocessed_dates_key,
            invalid_encounters_key=invalid_encounters_key,
        )
        self.__redis = Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            ssl=ssl,
            decode_responses=True,
        )

    def get_cursor(self) -> date | None:
        value = self.__redis.get(self.cursor_key)
        if value is None or value == "":
            return None
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise CursorError(f"Invalid cursor value in {self.cursor_key}: {value!r}") from e

    def set_cursor(self, day: date) -> None:
        self.__redis.set(self.cursor_key, day.isoformat())

    def add_unprocessed_date(self, day: date) -> None:
        self.__redis.sadd(self.unprocessed_dates_key, day.isoformat())

    def add_invalid_encounter(self, url: str) -> None:
        self.__redis.sadd(self.invalid_encounters_key, url)

    def get_unprocessed_dates(self) -> set[str]:
        return set(self.__redis.smembers(self.unprocessed_dates_key))

    def get_invalid_encounters(self) -> set[str]:
        return set(self.__redis.smembers(self.invalid_encounters_key))

    def is_healthy(self) -> bool:
        try:
            return bool(self.__redis.ping())
        except ConnectionError:
            return False

    def close(self) -> None:
        self.__redis.close()
