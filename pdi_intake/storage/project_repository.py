"""DynamoDB persistence for proposal projects (drafts and submissions)."""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import OwnershipError, ProjectStoreError
from .models import Project

logger = logging.getLogger(__name__)

TITLE_PREVIEW_CHARS = 80


def _to_dynamo(value: Dict[str, Any]) -> Dict[str, Any]:
    # DynamoDB rejects floats
    return json.loads(json.dumps(value, default=str), parse_float=Decimal)


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def display_title(project: Project) -> str:
    """Title shown in project listings.

    Falls back to the start of the context section, then to a short form of the id.
    """
    if project.project_name:
        return project.project_name
    context = project.fields.get("contextualizacao")
    if context:
        return context[:TITLE_PREVIEW_CHARS] + "..."
    return f"Projeto sem título ({project.id[:8]})"


class ProjectRepository:
    """Reads and writes project records; every write is scoped to the owner."""

    def __init__(
        self,
        table_name: str = "projects",
        owner_index: str = "user_id-index",
        dynamodb=None,
        region_name: Optional[str] = None,
    ):
        self.dynamodb = dynamodb or boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name
        self.owner_index = owner_index

    def save(
        self,
        owner_id: str,
        fields: Optional[Dict[str, Any]] = None,
        project_id: Optional[str] = None,
        project_name: Optional[str] = None,
    ) -> str:
        """Insert a project the first time, update the same record afterwards.

        Args:
            owner_id: Owner (user) ID
            fields: Proposal form fields; an empty map creates a bare draft
            project_id: Existing project ID, or None to create one
            project_name: Optional display name

        Returns:
            The project ID
        """
        now = datetime.now(timezone.utc).isoformat()
        fields = _to_dynamo(fields or {})

        if project_id is None:
            project_id = str(uuid.uuid4())
            item = {
                "id": project_id,
                "user_id": owner_id,
                "fields": fields,
                "created_at": now,
                "updated_at": now,
            }
            if project_name:
                item["project_name"] = project_name
            try:
                self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(id)")
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Error creating project for {owner_id}: {str(e)}")
                raise ProjectStoreError(f"Failed to create project: {str(e)}") from e
            logger.info(f"Created project {project_id} for owner {owner_id}")
            return project_id

        update_expression = "SET #fields = :fields, updated_at = :updated"
        values = {":fields": fields, ":updated": now, ":owner": owner_id}
        if project_name is not None:
            update_expression += ", project_name = :name"
            values[":name"] = project_name
        try:
            self.table.update_item(
                Key={"id": project_id},
                UpdateExpression=update_expression,
                ConditionExpression="attribute_exists(id) AND user_id = :owner",
                ExpressionAttributeNames={"#fields": "fields"},
                ExpressionAttributeValues=values,
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise OwnershipError(f"Project {project_id} does not belong to {owner_id}") from e
            raise ProjectStoreError(f"Failed to update project: {str(e)}") from e
        except BotoCoreError as e:
            raise ProjectStoreError(f"Failed to update project: {str(e)}") from e

        logger.info(f"Updated project {project_id}")
        return project_id

    def get(self, project_id: str) -> Optional[Project]:
        try:
            response = self.table.get_item(Key={"id": project_id})
        except (ClientError, BotoCoreError) as e:
            raise ProjectStoreError(f"Failed to read project {project_id}: {str(e)}") from e
        if "Item" not in response:
            return None
        return Project.from_item(response["Item"])

    def get_owner(self, project_id: str) -> Optional[str]:
        project = self.get(project_id)
        return project.user_id if project else None

    def list_by_owner(self, owner_id: str) -> List[Project]:
        """List the owner's projects, newest first."""
        try:
            response = self.table.query(
                IndexName=self.owner_index,
                KeyConditionExpression=Key("user_id").eq(owner_id),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing projects for {owner_id}: {str(e)}")
            raise ProjectStoreError(f"Failed to list projects: {str(e)}") from e

        projects = [Project.from_item(item) for item in response.get("Items", [])]
        projects.sort(key=lambda p: p.created_at, reverse=True)
        return projects

    def mark_submitted(self, project_id: str, owner_id: str) -> str:
        submitted_at = datetime.now(timezone.utc).isoformat()
        try:
            self.table.update_item(
                Key={"id": project_id},
                UpdateExpression="SET submitted_at = :submitted, updated_at = :submitted",
                ConditionExpression="attribute_exists(id) AND user_id = :owner",
                ExpressionAttributeValues={":submitted": submitted_at, ":owner": owner_id},
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise OwnershipError(f"Project {project_id} does not belong to {owner_id}") from e
            raise ProjectStoreError(f"Failed to submit project: {str(e)}") from e
        except BotoCoreError as e:
            raise ProjectStoreError(f"Failed to submit project: {str(e)}") from e

        logger.info(f"Marked project {project_id} as submitted")
        return submitted_at

    def delete(self, project_id: str, owner_id: str) -> None:
        try:
            self.table.delete_item(
                Key={"id": project_id},
                ConditionExpression="user_id = :owner",
                ExpressionAttributeValues={":owner": owner_id},
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise OwnershipError(f"Project {project_id} does not belong to {owner_id}") from e
            raise ProjectStoreError(f"Failed to delete project: {str(e)}") from e
        except BotoCoreError as e:
            raise ProjectStoreError(f"Failed to delete project: {str(e)}") from e

        logger.info(f"Deleted project {project_id}")
