"""Single entry point for attachment storage: S3 objects plus DynamoDB metadata."""

import logging
from typing import Iterable, List, Optional

from ..errors import DeletionError, MetadataDeleteError, StorageDeleteError
from ..settings import Settings
from .attachment_index import AttachmentIndex
from .models import Attachment, PendingAttachment
from .s3_attachment_store import S3AttachmentStore

logger = logging.getLogger(__name__)


class AttachmentStoreGateway:
    """The only component that talks to object storage and the attachment table."""

    def __init__(self, object_store: S3AttachmentStore, index: AttachmentIndex):
        self.object_store = object_store
        self.index = index

    @classmethod
    def from_settings(cls, settings: Settings, s3_client=None, dynamodb=None) -> "AttachmentStoreGateway":
        object_store = S3AttachmentStore(
            settings.attachments_bucket, s3_client=s3_client, region_name=settings.aws_region
        )
        index = AttachmentIndex(
            table_name=settings.attachments_table,
            project_index=settings.attachments_project_index,
            dynamodb=dynamodb,
            region_name=settings.aws_region,
        )
        return cls(object_store, index)

    def put_object(
        self, owner_id: str, project_id: str, file_name: str, content: bytes, mime_type: str = ""
    ) -> str:
        return self.object_store.put_object(owner_id, project_id, file_name, content, mime_type)

    def remove_objects(self, paths: Iterable[str]) -> None:
        self.object_store.remove_objects(paths)

    def insert_metadata(self, rows: List[PendingAttachment]) -> List[Attachment]:
        return self.index.insert(rows)

    def delete_metadata(self, attachment_id: str) -> None:
        self.index.delete(attachment_id)

    def list_by_project(self, project_id: str) -> List[Attachment]:
        return self.index.list_by_project(project_id)

    def remove_attachment(self, attachment: Attachment) -> None:
        """Remove the stored object, then its metadata row.

        Both steps are always attempted; any failure is raised afterwards as a
        DeletionError.
        """
        self.remove_stored_file(attachment.id, attachment.storage_path)

    def remove_stored_file(self, attachment_id: str, storage_path: str) -> None:
        errors = []
        try:
            self.object_store.remove_objects([storage_path])
        except StorageDeleteError as e:
            logger.error(f"Object removal failed for attachment {attachment_id}: {str(e)}")
            errors.append(str(e))

        try:
            self.index.delete(attachment_id)
        except MetadataDeleteError as e:
            logger.error(f"Metadata removal failed for attachment {attachment_id}: {str(e)}")
            errors.append(str(e))

        if errors:
            raise DeletionError("; ".join(errors))
        logger.info(f"Removed attachment {attachment_id} ({storage_path})")

    def remove_project_attachments(self, project_id: str, attachments: Optional[List[Attachment]] = None) -> None:
        """Remove every object and row of a project, continuing past individual failures.

        Args:
            project_id: Project ID
            attachments: Rows already fetched by the caller, to avoid a second lookup

        Raises:
            DeletionError: if any object or row could not be removed
        """
        if attachments is None:
            attachments = self.list_by_project(project_id)
        if not attachments:
            return

        errors = []
        try:
            self.object_store.remove_objects([a.storage_path for a in attachments])
        except StorageDeleteError as e:
            logger.error(f"Error deleting objects of project {project_id}: {str(e)}")
            errors.append(str(e))

        for attachment in attachments:
            try:
                self.index.delete(attachment.id)
            except MetadataDeleteError as e:
                errors.append(str(e))

        if errors:
            raise DeletionError(f"Failed to remove attachments of project {project_id}: {'; '.join(errors)}")
        logger.info(f"Removed {len(attachments)} attachment(s) of project {project_id}")
