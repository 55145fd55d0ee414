"""Data models for attachment and project storage."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PendingAttachment:
    """Metadata for an object already written to storage but not yet indexed."""

    project_id: str
    user_id: str
    file_name: str
    storage_path: str
    mime_type: str
    size_bytes: int


@dataclass
class Attachment:
    """An uploaded file bound to a project: metadata row plus stored object."""

    id: str
    project_id: str
    user_id: str
    file_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    created_at: str = ""

    def to_item(self) -> Dict[str, Any]:
        """Get the DynamoDB item for this attachment."""
        return {
            "id": self.id,
            "project_id": self.project_id,
            "user_id": self.user_id,
            "file_name": self.file_name,
            "storage_path": self.storage_path,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Attachment":
        return cls(
            id=item["id"],
            project_id=item["project_id"],
            user_id=item.get("user_id", ""),
            file_name=item.get("file_name", ""),
            storage_path=item["storage_path"],
            mime_type=item.get("mime_type", ""),
            size_bytes=int(item.get("size_bytes", 0)),
            created_at=item.get("created_at", ""),
        )


@dataclass
class Project:
    """A proposal record, either an implicit draft or a saved/submitted proposal."""

    id: str
    user_id: str
    created_at: str
    updated_at: str
    project_name: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    submitted_at: Optional[str] = None

    @property
    def is_submitted(self) -> bool:
        return bool(self.submitted_at)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Project":
        return cls(
            id=item["id"],
            user_id=item["user_id"],
            created_at=item.get("created_at", ""),
            updated_at=item.get("updated_at", ""),
            project_name=item.get("project_name"),
            fields=dict(item.get("fields") or {}),
            submitted_at=item.get("submitted_at"),
        )
