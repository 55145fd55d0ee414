"""Storage module for project attachments, projects and budget tables."""

from .attachment_index import AttachmentIndex
from .gateway import AttachmentStoreGateway
from .models import Attachment, PendingAttachment, Project
from .project_repository import ProjectRepository, display_title
from .s3_attachment_store import S3AttachmentStore, build_storage_path

__all__ = [
    "AttachmentStoreGateway",
    "S3AttachmentStore",
    "AttachmentIndex",
    "ProjectRepository",
    "Attachment",
    "PendingAttachment",
    "Project",
    "build_storage_path",
    "display_title",
]
