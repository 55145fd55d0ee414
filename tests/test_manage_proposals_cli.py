"""Tests for the proposal management CLI."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from pdi_intake.attachments import UploadResult, UploadState
from pdi_intake.errors import OwnershipError, ProjectStoreError
from scripts.manage_proposals import cli


class TestBudgetCommands:
    """Test the budget conversion commands."""

    def test_budget_encode(self, tmp_path):
        rows_file = tmp_path / "rows.json"
        rows_file.write_text(json.dumps([{"item": "Bolsas", "description": "Pesquisadores", "value": "120000"}]))

        result = CliRunner().invoke(cli, ["budget-encode", str(rows_file)])

        assert result.exit_code == 0
        assert "| Item | Descrição | Valor (R$) |" in result.output
        assert "| Bolsas | Pesquisadores | 120000 |" in result.output

    def test_budget_decode(self, tmp_path):
        markdown_file = tmp_path / "budget.md"
        markdown_file.write_text(
            "| Item | Descrição | Valor (R$) |\n| --- | --- | --- |\n| Viagens | Congresso | 5000 |\n",
            encoding="utf-8",
        )

        result = CliRunner().invoke(cli, ["budget-decode", str(markdown_file)])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"id": 1, "item": "Viagens", "description": "Congresso", "value": "5000"}
        ]


class TestUploadCommand:
    """Test the upload command."""

    @patch("scripts.manage_proposals.ProposalSession")
    def test_upload_reports_result(self, mock_session_cls, tmp_path):
        file_path = tmp_path / "plano.pdf"
        file_path.write_bytes(b"%PDF")
        session = mock_session_cls.from_settings.return_value
        session.upload.return_value = UploadResult(
            state=UploadState.DONE, message="1 file(s) uploaded successfully.", project_id="proj-1"
        )

        result = CliRunner().invoke(cli, ["upload", "--user-id", "user-1", str(file_path)])

        assert result.exit_code == 0
        assert "uploaded successfully" in result.output
        selected = session.upload.call_args[0][0]
        assert selected[0].name == "plano.pdf"
        assert selected[0].mime_type == "application/pdf"

    @patch("scripts.manage_proposals.ProposalSession")
    def test_rejected_upload_exits_non_zero(self, mock_session_cls, tmp_path):
        file_path = tmp_path / "plano.pdf"
        file_path.write_bytes(b"%PDF")
        mock_session_cls.from_settings.return_value.upload.return_value = UploadResult(
            state=UploadState.REJECTED, message="Attachment limit reached (5/5)."
        )

        result = CliRunner().invoke(cli, ["upload", "--user-id", "user-1", str(file_path)])

        assert result.exit_code == 1
        assert "Attachment limit reached" in result.output

    def test_user_id_is_required(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PDI_USER_ID", raising=False)

        result = CliRunner().invoke(cli, ["upload"])

        assert result.exit_code != 0


class TestEnvFile:
    """Test environment file loading."""

    @patch("scripts.manage_proposals.load_dotenv")
    def test_env_file_is_loaded_when_present(self, mock_load_dotenv, tmp_path):
        env_file = tmp_path / ".env.staging"
        env_file.write_text("ATTACHMENTS_BUCKET=staging-uploads\n")
        rows_file = tmp_path / "rows.json"
        rows_file.write_text("[]")

        result = CliRunner().invoke(cli, ["--env-file", str(env_file), "budget-encode", str(rows_file)])

        assert result.exit_code == 0
        mock_load_dotenv.assert_called_once_with(env_file)

    @patch("scripts.manage_proposals.load_dotenv")
    def test_missing_env_file_is_ignored(self, mock_load_dotenv, tmp_path):
        rows_file = tmp_path / "rows.json"
        rows_file.write_text("[]")

        result = CliRunner().invoke(cli, ["--env-file", str(tmp_path / "absent"), "budget-encode", str(rows_file)])

        assert result.exit_code == 0
        mock_load_dotenv.assert_not_called()


class TestProjectErrors:
    """Test that project lookup failures are reported without a traceback."""

    @patch("scripts.manage_proposals.ProposalSession")
    def test_foreign_project_is_reported(self, mock_session_cls):
        mock_session_cls.from_settings.return_value.open.side_effect = OwnershipError(
            "Project proj-9 not found for the current user."
        )

        result = CliRunner().invoke(cli, ["list", "--user-id", "user-1", "--project-id", "proj-9"])

        assert result.exit_code == 1
        assert "❌ Could not open project proj-9" in result.output
        assert "not found for the current user" in result.output
        assert not isinstance(result.exception, OwnershipError)

    @patch("scripts.manage_proposals.ProposalSession")
    def test_store_failure_on_delete_is_reported(self, mock_session_cls):
        mock_session_cls.from_settings.return_value.open.side_effect = ProjectStoreError("table missing")

        result = CliRunner().invoke(
            cli,
            ["delete", "--user-id", "user-1", "--project-id", "proj-1", "--attachment-id", "att-1", "--yes"],
        )

        assert result.exit_code == 1
        assert "table missing" in result.output
        mock_session_cls.from_settings.return_value.delete.assert_not_called()

    @patch("scripts.manage_proposals.ProposalSession")
    def test_project_listing_failure_is_reported(self, mock_session_cls):
        session = mock_session_cls.from_settings.return_value
        session.projects.list_by_owner.side_effect = ProjectStoreError("throttled")

        result = CliRunner().invoke(cli, ["list", "--user-id", "user-1"])

        assert result.exit_code == 1
        assert "❌ Could not list projects: throttled" in result.output
