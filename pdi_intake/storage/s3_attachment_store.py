"""S3 storage operations for project attachment files."""

import logging
import time
from typing import Iterable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageDeleteError, StorageWriteError
from .filenames import sanitize

logger = logging.getLogger(__name__)


def build_storage_path(owner_id: str, project_id: str, file_name: str, timestamp_ms: int) -> str:
    """Build the object key ``{owner}/{project}/{unix_millis}-{sanitized_name}``."""
    return f"{owner_id}/{project_id}/{timestamp_ms}-{sanitize(file_name)}"


class S3AttachmentStore:
    """Manages attachment objects in S3."""

    def __init__(self, bucket_name: str, s3_client=None, region_name: Optional[str] = None, clock=None):
        """Initialize S3 store.

        Args:
            bucket_name: S3 bucket name
            s3_client: Optional S3 client (for testing)
            region_name: AWS region used when creating the default client
            clock: Optional callable returning epoch seconds (for testing)
        """
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client("s3", region_name=region_name)
        self.clock = clock or time.time

    def put_object(
        self,
        owner_id: str,
        project_id: str,
        file_name: str,
        content: bytes,
        mime_type: str = "application/octet-stream",
    ) -> str:
        """Write a new attachment object; never overwrites an existing key.

        Args:
            owner_id: Owner (user) ID
            project_id: Project ID
            file_name: Original filename
            content: File bytes
            mime_type: Content type stored with the object

        Returns:
            The storage path (object key)
        """
        storage_path = build_storage_path(owner_id, project_id, file_name, int(self.clock() * 1000))
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_path,
                Body=content,
                ContentType=mime_type or "application/octet-stream",
                CacheControl="max-age=3600",
                IfNoneMatch="*",
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("PreconditionFailed", "ConditionalRequestConflict"):
                raise StorageWriteError(f"Object already exists: {storage_path}") from e
            raise StorageWriteError(f"Failed to upload {file_name}: {str(e)}") from e
        except BotoCoreError as e:
            raise StorageWriteError(f"Failed to upload {file_name}: {str(e)}") from e

        logger.info(f"Stored attachment at s3://{self.bucket_name}/{storage_path}")
        return storage_path

    def remove_objects(self, paths: Iterable[str]) -> None:
        """Delete objects one by one; a failure on one key does not stop the others.

        Raises:
            StorageDeleteError: listing every key that could not be removed
        """
        failed: List[str] = []
        for path in paths:
            try:
                self.s3_client.delete_object(Bucket=self.bucket_name, Key=path)
                logger.info(f"Deleted s3://{self.bucket_name}/{path}")
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Error deleting s3://{self.bucket_name}/{path}: {str(e)}")
                failed.append(path)

        if failed:
            raise StorageDeleteError(
                f"Failed to delete {len(failed)} object(s): {', '.join(failed)}", failed_paths=failed
            )
