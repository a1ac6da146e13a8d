from abc import ABC, abstractmethod

from harvester.models.harvest.dto import EnrichedMessage


class Publisher(ABC):
    """
    Delivers enriched messages to an ordered downstream queue. Messages sharing a group key
    are delivered in submission order; there is no ordering across keys.
    """

    @abstractmethod
    def publish(self, message: EnrichedMessage, group_key: str) -> None:
        """
        Raises PublishError when the queue rejected the message or could not be reached.
        There is no retry at this level, the caller quarantines the source record.
        """
        ...
