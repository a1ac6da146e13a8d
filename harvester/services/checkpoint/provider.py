import logging

from harvester.config import ConfigCheckpoint
from harvester.services.checkpoint.checkpoint_store import CheckpointStore
from harvester.services.checkpoint.external import ExternalCheckpointStore
from harvester.services.checkpoint.in_memory import InMemoryCheckpointStore

logger = logging.getLogger(__name__)


class CheckpointStoreProvider:
    """
    Factory class to create a checkpoint store based on the provided configuration.

    - If a Redis host is configured, use Redis. It must be reachable, otherwise the
      harvest cannot be resumed later and startup fails.
    - Otherwise fall back to an in-memory store, which forgets the cursor on exit.
    """

    def __init__(self, config: ConfigCheckpoint) -> None:
        self.__config = config

    def create(self) -> CheckpointStore:
        if self.__config.host is None:
            logger.warning(
                "No checkpoint store configured; using in-memory store, progress will not survive a restart"
            )
            return InMemoryCheckpointStore()

        store = ExternalCheckpointStore(
            host=self.__config.host,
            port=self.__config.port,
            db=self.__config.db,
            password=self.__config.password,
            ssl=self.__config.ssl,
            cursor_key=self.__config.cursor_key,
            unprocessed_dates_key=self.__config.unprocessed_dates_key,
            invalid_encounters_key=self.__config.invalid_encounters_key,
        )
        if not store.is_healthy():
            raise ConnectionError(
                f"Checkpoint store at {self.__config.host}:{self.__config.port} is not reachable"
            )

        logger.info(
            "Using external checkpoint store. host=%s port=%s db=%s",
            self.__config.host,
            self.__config.port,
            self.__config.db,
        )
        return store
