"""Lambda handler deleting a project together with all of its attachments."""

import logging
from typing import Any, Dict

from ..errors import AttachmentError, DeletionError, OwnershipError
from ..settings import load_settings
from ..storage import AttachmentStoreGateway, ProjectRepository
from .responses import is_preflight, json_response, parse_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("[Delete Project] Function started.")
    settings = load_settings()
    origin = settings.cors_origin

    if is_preflight(event):
        return json_response(200, None, origin)

    try:
        body = parse_body(event)
        project_id = body.get("project_id")
        user_id = body.get("user_id")
        logger.info(f"[Delete Project] Payload received: project_id={project_id}, user_id={user_id}")

        if not project_id or not user_id:
            return json_response(400, {"error": "project_id and user_id are required"}, origin)

        projects = ProjectRepository(
            table_name=settings.projects_table,
            owner_index=settings.projects_owner_index,
            region_name=settings.aws_region,
        )
        if projects.get_owner(project_id) != user_id:
            return json_response(403, {"error": "Project not found for this user"}, origin)

        gateway = AttachmentStoreGateway.from_settings(settings)
        try:
            attachments = gateway.list_by_project(project_id)
        except AttachmentError as e:
            logger.error(f"[Delete Project] Error fetching attachments: {str(e)}")
            attachments = []

        try:
            gateway.remove_project_attachments(project_id, attachments)
        except DeletionError as e:
            # Project removal continues; leftovers are reported in the log
            logger.error(f"[Delete Project] {str(e)}")

        projects.delete(project_id, user_id)
        logger.info(f"[Delete Project] Project deleted: {project_id}")

        return json_response(
            200, {"message": "Project and associated files deleted successfully"}, origin
        )

    except OwnershipError as e:
        return json_response(403, {"error": str(e)}, origin)
    except Exception as e:
        logger.error(f"[Delete Project] Function error: {str(e)}", exc_info=True)
        return json_response(500, {"error": str(e)}, origin)
