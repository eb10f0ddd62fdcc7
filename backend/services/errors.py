"""Error types shared by the catalog, planner, job store and processor."""


class ClipMosaicError(Exception):
    """Base class for application errors."""


class ConfigError(ClipMosaicError):
    """Invalid or missing configuration value."""


class NoMatchingClipsError(ClipMosaicError):
    """No catalog clip matches the requested location/time/season."""


class PlanningError(ClipMosaicError):
    """The sequence planner produced an invalid segment."""


class PersistenceError(ClipMosaicError):
    """Job or catalog storage failed; safe to retry."""


class RenderError(ClipMosaicError):
    """The renderer could not materialise a plan into an output file."""


class JobNotFoundError(ClipMosaicError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job {job_id!r} not found")
        self.job_id = job_id


class InvalidTransitionError(ClipMosaicError):
    """A job status change that would leave a terminal state or skip one."""
