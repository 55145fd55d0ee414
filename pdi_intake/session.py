"""Proposal editing session: one user, one project, its attachments and budget."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .attachments import (
    AttachmentUploadOrchestrator,
    DeletionResult,
    RemoteAttachmentRemover,
    SelectedFile,
    UploadResult,
)
from .common import RemoteFunctionClient
from .errors import OwnershipError, ValidationError
from .notifications import AttachmentWebhookNotifier, RemoteFunctionNotifier, SubmissionWebhookNotifier
from .settings import Settings
from .storage import Attachment, AttachmentStoreGateway, ProjectRepository
from .storage.budget_table import BudgetRow, decode, encode

logger = logging.getLogger(__name__)

BUDGET_FIELD = "proposta-orcamento"


class ProposalSession:
    """Binds the signed-in user to a project and the services acting on it."""

    def __init__(
        self,
        current_user_id: Callable[[], Optional[str]],
        projects: ProjectRepository,
        orchestrator: AttachmentUploadOrchestrator,
        submission_notifier: Optional[SubmissionWebhookNotifier] = None,
    ):
        """Initialize the session.

        Args:
            current_user_id: Returns the authenticated user ID, or None when signed out
            projects: Project repository
            orchestrator: Attachment orchestrator for this session
            submission_notifier: Notifier called when the proposal is submitted
        """
        self.current_user_id = current_user_id
        self.projects = projects
        self.orchestrator = orchestrator
        self.submission_notifier = submission_notifier
        self.project_id: Optional[str] = None
        self.fields: Dict[str, Any] = {}
        self.project_name: Optional[str] = None

        if orchestrator.save_draft is None:
            orchestrator.save_draft = self.save_draft
        if orchestrator.projects is None:
            orchestrator.projects = projects

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        current_user_id: Callable[[], Optional[str]],
        use_remote_functions: bool = False,
        s3_client=None,
        dynamodb=None,
        lambda_client=None,
    ) -> "ProposalSession":
        """Wire a session against the configured AWS resources.

        With ``use_remote_functions`` deletions and attachment notifications go through
        the deployed functions instead of talking to storage and the webhook directly.
        """
        gateway = AttachmentStoreGateway.from_settings(settings, s3_client=s3_client, dynamodb=dynamodb)
        projects = ProjectRepository(
            table_name=settings.projects_table,
            owner_index=settings.projects_owner_index,
            dynamodb=dynamodb,
            region_name=settings.aws_region,
        )

        if use_remote_functions:
            client = RemoteFunctionClient(
                settings.function_prefix, lambda_client=lambda_client, region_name=settings.aws_region
            )
            notifier = RemoteFunctionNotifier(client)
            remover = RemoteAttachmentRemover(client)
        else:
            notifier = AttachmentWebhookNotifier(
                gateway,
                settings.attachments_webhook_url,
                timeout=settings.webhook_timeout,
                log_dir=settings.webhook_log_dir,
            )
            remover = gateway

        orchestrator = AttachmentUploadOrchestrator(
            gateway, notifier=notifier, remover=remover, quota=settings.attachment_quota
        )
        submission_notifier = SubmissionWebhookNotifier(
            gateway,
            settings.submission_webhook_url,
            timeout=settings.webhook_timeout,
            log_dir=settings.webhook_log_dir,
        )
        return cls(current_user_id, projects, orchestrator, submission_notifier)

    @property
    def owner_id(self) -> Optional[str]:
        return self.current_user_id()

    @property
    def attachments(self) -> List[Attachment]:
        return self.orchestrator.attachments

    def _require_owner(self) -> str:
        owner_id = self.owner_id
        if not owner_id:
            raise ValidationError("You must be signed in.")
        return owner_id

    def open(self, project_id: str) -> None:
        """Load an existing project of the signed-in user and its attachments."""
        owner_id = self._require_owner()
        project = self.projects.get(project_id)
        if project is None or project.user_id != owner_id:
            raise OwnershipError(f"Project {project_id} not found for the current user.")

        self.project_id = project.id
        self.project_name = project.project_name
        self.fields = dict(project.fields)
        self.orchestrator.refresh(project.id)

    def save(self, fields: Optional[Dict[str, Any]] = None, project_name: Optional[str] = None) -> str:
        """Save the form; the first save creates the project, later saves update it."""
        owner_id = self._require_owner()
        if fields:
            self.fields.update(fields)
        if project_name is not None:
            self.project_name = project_name

        self.project_id = self.projects.save(
            owner_id, self.fields, project_id=self.project_id, project_name=self.project_name
        )
        self.orchestrator.project_id = self.project_id
        return self.project_id

    def save_draft(self) -> Optional[str]:
        return self.save()

    def upload(self, files: Iterable[SelectedFile]) -> UploadResult:
        result = self.orchestrator.upload(files, self.owner_id, self.project_id)
        if result.project_id:
            self.project_id = result.project_id
        return result

    def delete(self, attachment: Attachment, confirm: Optional[Callable[[Attachment], bool]] = None) -> DeletionResult:
        return self.orchestrator.delete(attachment, confirm=confirm)

    def budget_rows(self) -> List[BudgetRow]:
        return decode(self.fields.get(BUDGET_FIELD) or "")

    def set_budget(self, rows: List[BudgetRow]) -> str:
        markdown = encode(rows)
        self.fields[BUDGET_FIELD] = markdown
        return markdown

    def submit(self) -> str:
        """Save, mark the proposal as submitted and send the submission webhook."""
        owner_id = self._require_owner()
        project_id = self.save()
        self.projects.mark_submitted(project_id, owner_id)
        if self.submission_notifier is not None:
            self.submission_notifier.notify(project_id, owner_id)
        logger.info(f"Project {project_id} submitted by {owner_id}")
        return project_id
