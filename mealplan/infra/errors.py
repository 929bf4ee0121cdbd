"""Storage error kinds raised at the blob store boundary.

Only blob store calls raise these; the plan engine catches them and turns them
into reported outcomes (log record + event) instead of letting them escape.
"""


class PlanStoreError(Exception):
    """Base class for storage failures."""

    def __init__(self, message: str, filename: str = ""):
        super().__init__(message)
        self.filename = filename


class StorageUnavailable(PlanStoreError):
    """The store cannot be reached at all. Fatal for the session."""


class ReadMalformed(PlanStoreError):
    """A file exists but is not valid JSON. Treated as absent."""


class WriteFailed(PlanStoreError):
    """A write or delete did not go through. Transient, retried later."""


class NotFound(PlanStoreError):
    """The named file does not exist (anymore)."""


__all__ = ['PlanStoreError', 'StorageUnavailable', 'ReadMalformed', 'WriteFailed', 'NotFound']
