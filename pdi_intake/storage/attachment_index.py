"""DynamoDB-based metadata index for project attachments."""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import AttachmentError, MetadataDeleteError, MetadataWriteError
from .models import Attachment, PendingAttachment

logger = logging.getLogger(__name__)


class AttachmentIndex:
    """Manages attachment metadata rows in DynamoDB."""

    def __init__(
        self,
        table_name: str = "project_attachments",
        project_index: str = "project_id-index",
        dynamodb=None,
        region_name: Optional[str] = None,
    ):
        """Initialize with DynamoDB table.

        Args:
            table_name: Name of the DynamoDB table
            project_index: Global secondary index keyed on project_id
            dynamodb: Optional DynamoDB resource (for testing)
            region_name: AWS region used when creating the default resource
        """
        self.dynamodb = dynamodb or boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name
        self.project_index = project_index

    def insert(self, rows: List[PendingAttachment]) -> List[Attachment]:
        """Insert all rows in one transaction; either every row is written or none is.

        IDs are assigned here, never by the caller.

        Args:
            rows: Metadata for objects already in storage

        Returns:
            Inserted Attachment records, in input order
        """
        now = datetime.now(timezone.utc).isoformat()
        attachments = [
            Attachment(
                id=str(uuid.uuid4()),
                project_id=row.project_id,
                user_id=row.user_id,
                file_name=row.file_name,
                storage_path=row.storage_path,
                mime_type=row.mime_type,
                size_bytes=row.size_bytes,
                created_at=now,
            )
            for row in rows
        ]
        if not attachments:
            return []

        try:
            self.dynamodb.meta.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.table_name,
                            "Item": attachment.to_item(),
                            "ConditionExpression": "attribute_not_exists(id)",
                        }
                    }
                    for attachment in attachments
                ]
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error inserting {len(attachments)} attachment row(s): {str(e)}")
            raise MetadataWriteError(f"Failed to save attachment metadata: {str(e)}") from e

        logger.info(
            f"Recorded {len(attachments)} attachment(s) for project {attachments[0].project_id}"
        )
        return attachments

    def delete(self, attachment_id: str) -> None:
        try:
            self.table.delete_item(Key={"id": attachment_id})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting attachment row {attachment_id}: {str(e)}")
            raise MetadataDeleteError(f"Failed to delete attachment metadata: {str(e)}") from e
        logger.info(f"Deleted attachment row {attachment_id}")

    def list_by_project(self, project_id: str) -> List[Attachment]:
        """List every attachment row of a project, oldest first.

        Args:
            project_id: Project ID

        Returns:
            List of Attachment records
        """
        items = []
        query = {
            "IndexName": self.project_index,
            "KeyConditionExpression": Key("project_id").eq(project_id),
        }
        try:
            while True:
                response = self.table.query(**query)
                items.extend(response.get("Items", []))
                if "LastEvaluatedKey" not in response:
                    break
                query["ExclusiveStartKey"] = response["LastEvaluatedKey"]
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing attachments for {project_id}: {str(e)}")
            raise AttachmentError(f"Failed to list attachments: {str(e)}") from e

        attachments = [Attachment.from_item(item) for item in items]
        attachments.sort(key=lambda a: (a.created_at, a.storage_path))
        return attachments
