from datetime import date
from threading import Lock

from harvester.services.checkpoint.checkpoint_store import CheckpointStore


class InMemoryCheckpointStore(CheckpointStore):
    def __init__(self, cursor: date | None = None) -> None:
        super().__init__()
        self.__lock = Lock()
        self.__cursor = cursor
        self.__unprocessed_dates: set[str] = set()
        self.__invalid_encounters: set[str] = set()

    def get_cursor(self) -> date | None:
        return self.__cursor

    def set_cursor(self, day: date) -> None:
        self.__cursor = day

    def add_unprocessed_date(self, day: date) -> None:
        with self.__lock:
            self.__unprocessed_dates.add(day.isoformat())

    def add_invalid_encounter(self, url: str) -> None:
        with self.__lock:
            self.__invalid_encounters.add(url)

    def get_unprocessed_dates(self) -> set[str]:
        with self.__lock:
            return set(self.__unprocessed_dates)

    def get_invalid_encounters(self) -> set[str]:
        with self.__lock:
            return set(self.__invalid_encounters)

    def is_healthy(self) -> bool:
        return True
