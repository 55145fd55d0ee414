"""Exception taxonomy for attachment and proposal operations."""


class AttachmentError(Exception):
    """Base exception for attachment and proposal errors."""

    pass


class ValidationError(AttachmentError):
    """Raised when a selection is empty, identity is missing or the quota is exhausted."""

    pass


class DraftCreationError(AttachmentError):
    """Raised when a draft project could not be created to obtain an identifier."""

    pass


class OwnershipError(AttachmentError):
    """Raised when a project identifier belongs to a different owner."""

    pass


class StorageWriteError(AttachmentError):
    """Raised when an object could not be written to storage."""

    pass


class StorageDeleteError(AttachmentError):
    """Raised when one or more objects could not be removed from storage."""

    def __init__(self, message: str, failed_paths=None):
        super().__init__(message)
        self.failed_paths = list(failed_paths or [])


class MetadataWriteError(AttachmentError):
    """Raised when attachment metadata rows could not be inserted."""

    pass


class MetadataDeleteError(AttachmentError):
    """Raised when an attachment metadata row could not be deleted."""

    pass


class DeletionError(AttachmentError):
    """Raised when the combined object + metadata removal did not fully succeed."""

    pass


class ProjectStoreError(AttachmentError):
    """Raised when the project table could not be read or written."""

    pass
