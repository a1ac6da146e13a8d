from abc import ABC, abstractmethod
from datetime import date


class CheckpointStore(ABC):
    """
    Abstract base class for the durable harvest state.

    Holds the cursor (the last day whose batch was fetched) and two append-only
    quarantine sets: identifying URLs of encounters that could not be enriched and
    days whose batch could not be fetched. Every operation is independent, so
    concurrent enrichment tasks may call them without coordination.
    """

    def __init__(
        self,
        cursor_key: str = "last_processed_date",
        unprocessed_dates_key: str = "unprocessed_dates",
        invalid_encounters_key: str = "invalid_encounters",
    ) -> None:
        self.cursor_key = cursor_key
        self.unprocessed_dates_key = unprocessed_dates_key
        self.invalid_encounters_key = invalid_encounters_key

    @abstractmethod
    def get_cursor(self) -> date | None:
        """Return the persisted cursor, None on a fresh start."""
        ...

    @abstractmethod
    def set_cursor(self, day: date) -> None: ...

    @abstractmethod
    def add_unprocessed_date(self, day: date) -> None: ...

    @abstractmethod
    def add_invalid_encounter(self, url: str) -> None: ...

    @abstractmethod
    def get_unprocessed_dates(self) -> set[str]: ...

    @abstractmethod
    def get_invalid_encounters(self) -> set[str]: ...

    @abstractmethod
    def is_healthy(self) -> bool: ...

    def close(self) -> None:
        """Release any held connections."""
        return None
