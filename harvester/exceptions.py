class HarvesterError(Exception):
    """
    Base class for all errors raised by the harvester.
    """


class FetchError(HarvesterError):
    """
    Raised when a GET against the source API failed on every attempt. The last
    underlying failure is kept in ``last_error`` and chained as ``__cause__``.
    """

    def __init__(self, url: str, attempts: int, last_error: Exception | None = None) -> None:
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {last_error}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class HarvestValidationError(HarvesterError):
    pass


class EncounterValidationError(HarvestValidationError):
    pass


class ReferenceValidationError(HarvestValidationError):
    pass


class PublishError(HarvesterError):
    pass


class CursorError(HarvesterError):
    pass


class BatchDecodeError(HarvesterError):
    pass
