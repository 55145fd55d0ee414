#!/usr/bin/env python3
"""
Shared test configuration and fixtures for pdi-intake.
"""

import sys
from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

# Add project root to path so scripts/ is importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pdi_intake.errors import (  # noqa: E402
    DeletionError,
    MetadataWriteError,
    StorageDeleteError,
    StorageWriteError,
)
from pdi_intake.storage.filenames import sanitize  # noqa: E402
from pdi_intake.storage.models import Attachment  # noqa: E402


@pytest.fixture(autouse=True)
def _no_network(monkeypatch, tmp_path):
    """Mock AWS clients and keep delivery logs inside the test's temp dir."""
    monkeypatch.setenv("WEBHOOK_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr("boto3.client", lambda *args, **kwargs: MagicMock())
    monkeypatch.setattr("boto3.resource", lambda *args, **kwargs: MagicMock())


class FakeGateway:
    """In-memory stand-in for AttachmentStoreGateway that records every call."""

    def __init__(self, existing=None, fail_put=(), fail_insert=False, fail_remove=False, fail_delete=False):
        self.rows: List[Attachment] = list(existing or [])
        self.objects: Dict[str, bytes] = {a.storage_path: b"" for a in self.rows}
        self.fail_put = set(fail_put)
        self.fail_insert = fail_insert
        self.fail_remove = fail_remove
        self.fail_delete = fail_delete
        self.calls = []
        self.insert_batches = []
        self._clock = 1700000000000

    def put_object(self, owner_id, project_id, file_name, content, mime_type=""):
        self.calls.append(("put_object", file_name))
        if file_name in self.fail_put:
            raise StorageWriteError(f"Failed to upload {file_name}")
        self._clock += 1
        path = f"{owner_id}/{project_id}/{self._clock}-{sanitize(file_name)}"
        self.objects[path] = content
        return path

    def remove_objects(self, paths):
        paths = list(paths)
        self.calls.append(("remove_objects", paths))
        if self.fail_remove:
            raise StorageDeleteError("Failed to delete objects", failed_paths=paths)
        for path in paths:
            self.objects.pop(path, None)

    def insert_metadata(self, rows):
        self.calls.append(("insert_metadata", len(rows)))
        self.insert_batches.append(list(rows))
        if self.fail_insert:
            raise MetadataWriteError("Failed to save attachment metadata: throttled")
        inserted = [
            Attachment(
                id=f"att-{len(self.rows) + i + 1}",
                project_id=row.project_id,
                user_id=row.user_id,
                file_name=row.file_name,
                storage_path=row.storage_path,
                mime_type=row.mime_type,
                size_bytes=row.size_bytes,
                created_at="2026-01-01T00:00:00+00:00",
            )
            for i, row in enumerate(rows)
        ]
        self.rows.extend(inserted)
        return inserted

    def delete_metadata(self, attachment_id):
        self.calls.append(("delete_metadata", attachment_id))
        self.rows = [r for r in self.rows if r.id != attachment_id]

    def list_by_project(self, project_id):
        self.calls.append(("list_by_project", project_id))
        return [r for r in self.rows if r.project_id == project_id]

    def remove_attachment(self, attachment):
        self.calls.append(("remove_attachment", attachment.id))
        if self.fail_delete:
            raise DeletionError("Failed to delete attachment metadata: denied")
        self.objects.pop(attachment.storage_path, None)
        self.rows = [r for r in self.rows if r.id != attachment.id]


def make_attachment(index: int, project_id: str = "proj-1", user_id: str = "user-1") -> Attachment:
    return Attachment(
        id=f"existing-{index}",
        project_id=project_id,
        user_id=user_id,
        file_name=f"quadro_{index}.pdf",
        storage_path=f"{user_id}/{project_id}/16000000000{index:02d}-quadro_{index}.pdf",
        mime_type="application/pdf",
        size_bytes=1024 * index,
        created_at=f"2026-01-0{index}T00:00:00+00:00",
    )


@pytest.fixture
def fake_gateway_cls():
    return FakeGateway


@pytest.fixture
def attachment_factory():
    return make_attachment
