"""Attachment upload orchestration.

Maps a file selection to stored objects plus metadata rows for one project:

    IDLE -> VALIDATING -> (REJECTED | MATERIALIZING) -> UPLOADING
         -> (ALL_FAILED | [PARTIAL_FAILURE ->] COMMITTING_METADATA)
         -> (NOTIFYING -> DONE) | FAILED

Objects are written before metadata. If the metadata insert fails, the objects
written by the same call are removed again; that is the only compensating action.
"""

import logging
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..errors import (
    AttachmentError,
    MetadataWriteError,
    OwnershipError,
    StorageDeleteError,
    StorageWriteError,
    ValidationError,
)
from ..storage.models import Attachment, PendingAttachment
from .draft import ensure_project_id

logger = logging.getLogger(__name__)

DEFAULT_QUOTA = 5


class UploadState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    MATERIALIZING = "materializing"
    UPLOADING = "uploading"
    PARTIAL_FAILURE = "partial_failure"
    ALL_FAILED = "all_failed"
    COMMITTING_METADATA = "committing_metadata"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SelectedFile:
    """A file picked by the user, held in memory until uploaded."""

    name: str
    content: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path) -> "SelectedFile":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content=path.read_bytes(), mime_type=mime_type or "application/octet-stream")


@dataclass
class UploadResult:
    state: UploadState
    message: str
    project_id: Optional[str] = None
    processed: int = 0
    successful_uploads: int = 0
    attachments: List[Attachment] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == UploadState.DONE

    @property
    def partial_failure(self) -> bool:
        return self.ok and bool(self.failed_files)


@dataclass
class DeletionResult:
    ok: bool
    message: str
    attachment: Optional[Attachment] = None
    cancelled: bool = False


class AttachmentUploadOrchestrator:
    """Runs uploads and deletions for one session and keeps the visible list.

    The visible list (``attachments``) is a projection of the store for
    ``project_id``; it is resynchronized with ``refresh`` and updated only after an
    operation succeeded. One operation runs at a time; a call made while another is
    in flight is rejected.
    """

    def __init__(
        self,
        gateway,
        notifier=None,
        save_draft: Optional[Callable[[], Optional[str]]] = None,
        projects=None,
        remover=None,
        quota: int = DEFAULT_QUOTA,
    ):
        """Initialize the orchestrator.

        Args:
            gateway: AttachmentStoreGateway (or compatible) for objects and metadata
            notifier: Object with ``notify(project_id)``; failures are only logged
            save_draft: Default routine creating a draft project, returns its ID
            projects: Optional ProjectRepository used to verify project ownership
            remover: Object with ``remove_attachment(attachment)``; defaults to gateway
            quota: Maximum live attachments per project
        """
        self.gateway = gateway
        self.notifier = notifier
        self.save_draft = save_draft
        self.projects = projects
        self.remover = remover or gateway
        self.quota = quota

        self.project_id: Optional[str] = None
        self.attachments: List[Attachment] = []
        self.pending_selection: List[SelectedFile] = []
        self.state = UploadState.IDLE
        self.is_uploading = False
        self.is_deleting = False

    @property
    def remaining_slots(self) -> int:
        return max(self.quota - len(self.attachments), 0)

    def select(self, files: Iterable[SelectedFile]) -> None:
        """Replace the pending file selection."""
        self.pending_selection = list(files)

    def refresh(self, project_id: Optional[str] = None) -> List[Attachment]:
        """Reload the visible list from the store.

        Args:
            project_id: Project to load; defaults to the current project

        Returns:
            The refreshed list
        """
        project_id = project_id or self.project_id
        if not project_id:
            self.attachments = []
            return self.attachments

        self.attachments = list(self.gateway.list_by_project(project_id))
        self.project_id = project_id
        return self.attachments

    def upload(
        self,
        selection: Optional[Iterable[SelectedFile]] = None,
        owner_id: Optional[str] = None,
        current_project_id: Optional[str] = None,
        save_draft: Optional[Callable[[], Optional[str]]] = None,
    ) -> UploadResult:
        """Upload a selection of files to a project.

        Args:
            selection: Files to upload; defaults to the pending selection
            owner_id: Authenticated user ID
            current_project_id: Project ID known to the form, or None for unsaved forms
            save_draft: Routine creating a draft project; overrides the default one

        Returns:
            UploadResult describing the terminal state
        """
        self.state = UploadState.VALIDATING
        files = list(selection) if selection is not None else list(self.pending_selection)

        try:
            processed, warnings = self._validate(files, owner_id)
        except ValidationError as e:
            logger.warning(f"Upload rejected: {str(e)}")
            return self._finish(UploadResult(state=UploadState.REJECTED, message=str(e)))

        self.is_uploading = True
        try:
            return self._run_upload(processed, warnings, owner_id, current_project_id, save_draft)
        finally:
            self.is_uploading = False

    def delete(self, attachment: Attachment, confirm: Optional[Callable[[Attachment], bool]] = None) -> DeletionResult:
        """Remove an attachment's object and metadata row.

        Args:
            attachment: Attachment to remove
            confirm: Optional confirmation callback; returning False cancels

        Returns:
            DeletionResult; the visible list only changes when ``ok`` is True
        """
        if self.is_uploading or self.is_deleting:
            return DeletionResult(ok=False, message="Another operation is in progress.", attachment=attachment)

        if attachment.project_id != self.project_id:
            logger.warning(f"Refusing to delete attachment {attachment.id} outside project {self.project_id}")
            return DeletionResult(
                ok=False,
                message=f"{attachment.file_name} does not belong to the current project.",
                attachment=attachment,
            )

        if confirm is not None and not confirm(attachment):
            return DeletionResult(ok=False, message="Deletion cancelled.", attachment=attachment, cancelled=True)

        self.is_deleting = True
        try:
            self.remover.remove_attachment(attachment)
        except AttachmentError as e:
            logger.error(f"Error deleting attachment {attachment.id}: {str(e)}")
            return DeletionResult(ok=False, message=f"Failed to delete {attachment.file_name}: {str(e)}", attachment=attachment)
        finally:
            self.is_deleting = False

        self.attachments = [a for a in self.attachments if a.id != attachment.id]
        self._notify(self.project_id)
        return DeletionResult(ok=True, message=f"{attachment.file_name} deleted.", attachment=attachment)

    def _validate(self, files: List[SelectedFile], owner_id: Optional[str]):
        if self.is_uploading or self.is_deleting:
            raise ValidationError("Another operation is in progress.")
        if not files:
            raise ValidationError("No files selected for upload.")
        if not owner_id:
            raise ValidationError("You must be signed in to upload files.")

        remaining = self.quota - len(self.attachments)
        if remaining <= 0:
            raise ValidationError(
                f"Attachment limit reached ({len(self.attachments)}/{self.quota}). "
                "Delete an attachment before uploading another."
            )

        warnings = []
        if len(files) > remaining:
            warnings.append(
                f"Only {remaining} of {len(files)} selected file(s) will be uploaded "
                f"(limit of {self.quota} attachments per project)."
            )
            logger.warning(warnings[-1])
            files = files[:remaining]
        return files, warnings

    def _materialize(self, owner_id: str, current_project_id: Optional[str], save_draft) -> str:
        self.state = UploadState.MATERIALIZING
        known_id = current_project_id or self.project_id
        project_id = ensure_project_id(known_id, save_draft or self.save_draft)

        if known_id and self.projects is not None:
            owner = self.projects.get_owner(project_id)
            if owner != owner_id:
                raise OwnershipError(f"Project {project_id} does not belong to the current user.")

        if project_id != self.project_id:
            if known_id:
                # visible list does not reflect this project yet
                self.refresh(project_id)
            self.project_id = project_id
        return project_id

    def _run_upload(
        self,
        files: List[SelectedFile],
        warnings: List[str],
        owner_id: str,
        current_project_id: Optional[str],
        save_draft,
    ) -> UploadResult:
        try:
            project_id = self._materialize(owner_id, current_project_id, save_draft)
        except AttachmentError as e:
            logger.error(f"Upload aborted before any file was sent: {str(e)}")
            return self._finish(
                UploadResult(state=UploadState.FAILED, message=f"Upload failed: {str(e)}", warnings=warnings)
            )

        # Quota may have changed if the list was just loaded from the store
        if len(files) > self.remaining_slots:
            if self.remaining_slots == 0:
                return self._finish(
                    UploadResult(
                        state=UploadState.REJECTED,
                        message=f"Attachment limit reached ({len(self.attachments)}/{self.quota}).",
                        project_id=project_id,
                        warnings=warnings,
                    )
                )
            warnings.append(f"Only {self.remaining_slots} of {len(files)} file(s) will be uploaded.")
            files = files[: self.remaining_slots]

        self.state = UploadState.UPLOADING
        uploaded = []
        failed_files = []
        for selected in files:
            try:
                storage_path = self.gateway.put_object(
                    owner_id, project_id, selected.name, selected.content, selected.mime_type
                )
            except StorageWriteError as e:
                logger.error(f"Upload of {selected.name} failed: {str(e)}")
                failed_files.append(selected.name)
                continue
            uploaded.append((selected, storage_path))

        result = UploadResult(
            state=UploadState.UPLOADING,
            message="",
            project_id=project_id,
            processed=len(files),
            successful_uploads=len(uploaded),
            failed_files=failed_files,
            warnings=warnings,
        )

        if not uploaded:
            result.state = UploadState.ALL_FAILED
            result.message = "Upload failed: no file was uploaded successfully."
            return self._finish(result)

        if failed_files:
            self.state = UploadState.PARTIAL_FAILURE
            warnings.append(f"{len(failed_files)} file(s) failed to upload: {', '.join(failed_files)}")

        self.state = UploadState.COMMITTING_METADATA
        rows = [
            PendingAttachment(
                project_id=project_id,
                user_id=owner_id,
                file_name=selected.name,
                storage_path=storage_path,
                mime_type=selected.mime_type,
                size_bytes=selected.size,
            )
            for selected, storage_path in uploaded
        ]
        try:
            inserted = self.gateway.insert_metadata(rows)
        except MetadataWriteError as e:
            self._compensate([path for _, path in uploaded])
            result.state = UploadState.FAILED
            result.message = f"Upload failed: {str(e)}"
            return self._finish(result)

        self.state = UploadState.NOTIFYING
        self._notify(project_id)

        self.attachments.extend(inserted)
        self.pending_selection = []
        result.attachments = list(inserted)
        result.state = UploadState.DONE
        result.message = f"{len(inserted)} file(s) uploaded successfully."
        logger.info(f"Uploaded {len(inserted)} attachment(s) to project {project_id}")
        return self._finish(result)

    def _compensate(self, paths: List[str]) -> None:
        logger.warning(f"Metadata insert failed, removing {len(paths)} uploaded object(s)")
        try:
            self.gateway.remove_objects(paths)
        except StorageDeleteError as e:
            logger.error(f"Could not remove uploaded objects after metadata failure: {str(e)}")

    def _notify(self, project_id: Optional[str]) -> None:
        if self.notifier is None or not project_id:
            return
        try:
            self.notifier.notify(project_id)
        except Exception as e:
            logger.error(f"Notification for project {project_id} failed: {str(e)}")

    def _finish(self, result: UploadResult) -> UploadResult:
        self.state = result.state
        return result
