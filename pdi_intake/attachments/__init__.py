"""Attachment upload, deletion and draft materialization."""

from .draft import ensure_project_id
from .orchestrator import (
    DEFAULT_QUOTA,
    AttachmentUploadOrchestrator,
    DeletionResult,
    SelectedFile,
    UploadResult,
    UploadState,
)
from .remote import RemoteAttachmentRemover

__all__ = [
    "AttachmentUploadOrchestrator",
    "DeletionResult",
    "SelectedFile",
    "UploadResult",
    "UploadState",
    "RemoteAttachmentRemover",
    "ensure_project_id",
    "DEFAULT_QUOTA",
]
