
class HarvestError(Exception):
    """Base class for every failure raised by the ingestion pipeline."""


class FetchError(HarvestError):
    """A page request to the video search API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransientFetchError(FetchError):
    """Network or server failure; the current pass is aborted."""


class QuotaExceededError(FetchError):
    """The API refused the request because of quota or rate limits."""


class RecordPersistError(HarvestError):
    """A single record could not be written to the store."""

    def __init__(self, record_id: str, message: str):
        super().__init__(f"{record_id}: {message}")
        self.record_id = record_id


class SinkIOError(HarvestError):
    """A JSON sink file could not be written."""


class ConfigAbsentError(HarvestError):
    """The search config file does not exist or cannot be parsed."""


class MissingInputError(HarvestError):
    """Neither a search name nor a video id was supplied."""
