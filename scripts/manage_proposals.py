#!/usr/bin/env python3
"""Command line access to proposal projects, attachments and budget tables."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from pdi_intake.attachments import SelectedFile
from pdi_intake.errors import AttachmentError
from pdi_intake.session import ProposalSession
from pdi_intake.settings import load_settings
from pdi_intake.storage import display_title
from pdi_intake.storage.budget_table import BudgetRow, decode, encode

logger = logging.getLogger(__name__)


def _open_session(user_id: str, project_id: Optional[str], config: Optional[str], remote: bool) -> ProposalSession:
    settings = load_settings(config)
    session = ProposalSession.from_settings(settings, lambda: user_id, use_remote_functions=remote)
    if project_id:
        try:
            session.open(project_id)
        except AttachmentError as e:
            click.echo(f"❌ Could not open project {project_id}: {str(e)}")
            sys.exit(1)
    return session


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=".env", show_default=True, help="Environment file with deployment settings")
def cli(verbose: bool, env_file: str):
    """PD&I proposal intake CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded environment from: {env_path}")


@cli.command()
@click.option("--user-id", envvar="PDI_USER_ID", required=True, help="Owner user ID")
@click.option("--project-id", help="Existing project ID (a draft is created if omitted)")
@click.option("--config", help="YAML settings file")
@click.option("--remote", is_flag=True, help="Use the deployed functions for notifications")
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
def upload(user_id: str, project_id: Optional[str], config: Optional[str], remote: bool, files: Tuple[str, ...]):
    """Upload attachment FILES to a project."""
    session = _open_session(user_id, project_id, config, remote)
    result = session.upload([SelectedFile.from_path(path) for path in files])

    for warning in result.warnings:
        click.echo(f"⚠️  {warning}")

    if not result.ok:
        click.echo(f"❌ {result.message}")
        sys.exit(1)

    click.echo(f"✅ {result.message}")
    click.echo(f"   Project: {result.project_id}")
    for attachment in result.attachments:
        click.echo(f"   • {attachment.file_name} ({attachment.size_bytes} bytes) -> {attachment.storage_path}")


@cli.command(name="list")
@click.option("--user-id", envvar="PDI_USER_ID", required=True, help="Owner user ID")
@click.option("--project-id", help="Project whose attachments to list")
@click.option("--config", help="YAML settings file")
def list_command(user_id: str, project_id: Optional[str], config: Optional[str]):
    """List the user's projects, or the attachments of one project."""
    session = _open_session(user_id, project_id, config, remote=False)

    if project_id:
        attachments = session.attachments
        click.echo(f"\n{len(attachments)}/{session.orchestrator.quota} attachments:\n")
        for attachment in attachments:
            click.echo(f"• {attachment.file_name}")
            click.echo(f"  ID: {attachment.id}")
            click.echo(f"  Size: {attachment.size_bytes} bytes ({attachment.mime_type})")
        return

    try:
        projects = session.projects.list_by_owner(user_id)
    except AttachmentError as e:
        click.echo(f"❌ Could not list projects: {str(e)}")
        sys.exit(1)

    if not projects:
        click.echo("No projects found")
        return
    for project in projects:
        status = "submitted" if project.is_submitted else "draft"
        click.echo(f"• {display_title(project)} [{status}]")
        click.echo(f"  ID: {project.id}  Created: {project.created_at}")


@cli.command()
@click.option("--user-id", envvar="PDI_USER_ID", required=True, help="Owner user ID")
@click.option("--project-id", required=True, help="Project ID")
@click.option("--attachment-id", required=True, help="Attachment to delete")
@click.option("--config", help="YAML settings file")
@click.option("--remote", is_flag=True, help="Delete through the deployed function")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def delete(user_id: str, project_id: str, attachment_id: str, config: Optional[str], remote: bool, yes: bool):
    """Delete one attachment."""
    session = _open_session(user_id, project_id, config, remote)
    attachment = next((a for a in session.attachments if a.id == attachment_id), None)
    if attachment is None:
        click.echo(f"❌ Attachment {attachment_id} not found in project {project_id}")
        sys.exit(1)

    def confirm(a):
        return yes or click.confirm(f"Delete {a.file_name}?")

    result = session.delete(attachment, confirm=confirm)
    if result.cancelled:
        click.echo("Cancelled")
        return
    if not result.ok:
        click.echo(f"❌ {result.message}")
        sys.exit(1)
    click.echo(f"✅ {result.message}")


@cli.command()
@click.option("--user-id", envvar="PDI_USER_ID", required=True, help="Owner user ID")
@click.option("--project-id", required=True, help="Project ID")
@click.option("--config", help="YAML settings file")
def submit(user_id: str, project_id: str, config: Optional[str]):
    """Submit a proposal and notify the automation endpoint."""
    session = _open_session(user_id, project_id, config, remote=False)
    try:
        session.submit()
    except Exception as e:
        click.echo(f"\n❌ Submission Failed: {str(e)}")
        sys.exit(1)
    click.echo(f"✅ Project {project_id} submitted")


@cli.command(name="budget-encode")
@click.argument("rows_file", type=click.File("r"))
def budget_encode(rows_file):
    """Convert a JSON list of {item, description, value} objects to a markdown table."""
    rows = [
        BudgetRow(item=r.get("item", ""), description=r.get("description", ""), value=r.get("value", ""))
        for r in json.load(rows_file)
    ]
    click.echo(encode(rows))


@cli.command(name="budget-decode")
@click.argument("markdown_file", type=click.File("r"))
def budget_decode(markdown_file):
    """Convert a markdown budget table to JSON rows."""
    rows = decode(markdown_file.read())
    click.echo(
        json.dumps(
            [{"id": r.id, "item": r.item, "description": r.description, "value": r.value} for r in rows],
            ensure_ascii=False,
            indent=2,
        )
    )


if __name__ == "__main__":
    cli()
