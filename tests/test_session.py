"""Tests for the proposal editing session."""

from unittest.mock import MagicMock

import pytest

from pdi_intake.attachments import AttachmentUploadOrchestrator, SelectedFile
from pdi_intake.errors import OwnershipError, ValidationError
from pdi_intake.notifications import AttachmentWebhookNotifier, RemoteFunctionNotifier
from pdi_intake.session import BUDGET_FIELD, ProposalSession
from pdi_intake.settings import Settings
from pdi_intake.storage import AttachmentStoreGateway
from pdi_intake.storage.budget_table import BudgetRow
from pdi_intake.storage.models import Project


@pytest.fixture
def projects():
    repository = MagicMock()
    repository.save.side_effect = lambda owner_id, fields, project_id=None, project_name=None: project_id or "proj-new"
    return repository


@pytest.fixture
def session_factory(projects, fake_gateway_cls):
    def factory(user_id="user-1", gateway=None, submission_notifier=None):
        gateway = gateway or fake_gateway_cls()
        orchestrator = AttachmentUploadOrchestrator(gateway, notifier=MagicMock())
        return ProposalSession(lambda: user_id, projects, orchestrator, submission_notifier)

    return factory


class TestProposalSession:
    """Test ProposalSession."""

    def test_upload_on_unsaved_form_creates_one_draft(self, session_factory, projects):
        """The first upload saves the form as a draft and reuses it afterwards."""
        session = session_factory()

        first = session.upload([SelectedFile("a.pdf", b"1", "application/pdf")])
        projects.get_owner.return_value = "user-1"
        second = session.upload([SelectedFile("b.pdf", b"2", "application/pdf")])

        assert first.ok and second.ok
        assert projects.save.call_count == 1
        assert session.project_id == "proj-new"
        assert len(session.attachments) == 2

    def test_save_updates_same_project(self, session_factory, projects):
        session = session_factory()

        first_id = session.save({"contextualizacao": "Texto"})
        second_id = session.save({"objetivos": "Mais"})

        assert first_id == second_id == "proj-new"
        last_call = projects.save.call_args
        assert last_call[1]["project_id"] == "proj-new"
        assert last_call[0][1] == {"contextualizacao": "Texto", "objetivos": "Mais"}

    def test_save_requires_sign_in(self, session_factory):
        session = session_factory(user_id=None)

        with pytest.raises(ValidationError):
            session.save()

    def test_open_loads_fields_and_attachments(self, session_factory, projects, fake_gateway_cls, attachment_factory):
        projects.get.return_value = Project(
            id="proj-1", user_id="user-1", created_at="", updated_at="", fields={"a": "b"}
        )
        session = session_factory(gateway=fake_gateway_cls(existing=[attachment_factory(1)]))

        session.open("proj-1")

        assert session.project_id == "proj-1"
        assert session.fields == {"a": "b"}
        assert len(session.attachments) == 1

    def test_open_foreign_project(self, session_factory, projects):
        projects.get.return_value = Project(id="proj-1", user_id="someone-else", created_at="", updated_at="")
        session = session_factory()

        with pytest.raises(OwnershipError):
            session.open("proj-1")

    def test_budget_round_trip_through_fields(self, session_factory):
        session = session_factory()
        rows = [BudgetRow("Bolsas", "Pesquisadores", "120000")]

        markdown = session.set_budget(rows)

        assert session.fields[BUDGET_FIELD] == markdown
        assert session.budget_rows() == rows

    def test_submit_saves_marks_and_notifies(self, session_factory, projects):
        submission_notifier = MagicMock()
        session = session_factory(submission_notifier=submission_notifier)

        project_id = session.submit()

        assert project_id == "proj-new"
        projects.mark_submitted.assert_called_once_with("proj-new", "user-1")
        submission_notifier.notify.assert_called_once_with("proj-new", "user-1")

    def test_from_settings_wires_direct_services(self):
        session = ProposalSession.from_settings(
            Settings(attachment_quota=3), lambda: "user-1", s3_client=MagicMock(), dynamodb=MagicMock()
        )

        assert isinstance(session.orchestrator.gateway, AttachmentStoreGateway)
        assert isinstance(session.orchestrator.notifier, AttachmentWebhookNotifier)
        assert session.orchestrator.remover is session.orchestrator.gateway
        assert session.orchestrator.quota == 3
        assert session.orchestrator.projects is session.projects

    def test_from_settings_with_remote_functions(self):
        session = ProposalSession.from_settings(
            Settings(),
            lambda: "user-1",
            use_remote_functions=True,
            s3_client=MagicMock(),
            dynamodb=MagicMock(),
            lambda_client=MagicMock(),
        )

        assert isinstance(session.orchestrator.notifier, RemoteFunctionNotifier)
        assert session.orchestrator.remover is not session.orchestrator.gateway
