"""Error taxonomy shared by the worker, ingestion and enrichment stages."""


class ScoutError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(ScoutError):
    """A required credential or setting is missing.

    Raised before any external call is made, so a job fails fast with a
    readable message instead of a downstream HTTP error.
    """


class TransientExternalError(ScoutError):
    """An external collaborator (platform API, media tool, LLM) failed.

    Caught per item or per stage; never escalates past the job boundary.
    """


class NoAudioStreamError(TransientExternalError):
    """The downloaded media has no audio track to extract."""


class InvalidJobTransitionError(ScoutError):
    """A sync job status change would move backwards or skip running."""

    def __init__(self, job_id: int, current: str, requested: str) -> None:
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(f"Job {job_id} cannot move from {current} to {requested}")


class JobNotFoundError(ScoutError):
    """No sync job exists with the given id."""
