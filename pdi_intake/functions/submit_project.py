"""Lambda handler for the final proposal submission."""

import logging
from typing import Any, Dict

from ..errors import OwnershipError
from ..notifications import SubmissionWebhookNotifier
from ..settings import load_settings
from ..storage import AttachmentStoreGateway, ProjectRepository
from .responses import is_preflight, json_response, parse_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("[Submit Project] Function started.")
    settings = load_settings()
    origin = settings.cors_origin

    if is_preflight(event):
        return json_response(200, None, origin)

    try:
        body = parse_body(event)
        project_id = body.get("project_id")
        user_id = body.get("user_id")
        logger.info(f"[Submit Project] Payload received: project_id={project_id}, user_id={user_id}")

        if not project_id or not user_id:
            return json_response(400, {"error": "project_id and user_id are required"}, origin)

        projects = ProjectRepository(
            table_name=settings.projects_table,
            owner_index=settings.projects_owner_index,
            region_name=settings.aws_region,
        )
        projects.mark_submitted(project_id, user_id)

        notifier = SubmissionWebhookNotifier(
            AttachmentStoreGateway.from_settings(settings),
            settings.submission_webhook_url,
            timeout=settings.webhook_timeout,
            log_dir=settings.webhook_log_dir,
        )
        status = notifier.notify(project_id, user_id)

        return json_response(200, {"message": "Webhook sent successfully", "webhook_status": status}, origin)

    except OwnershipError as e:
        return json_response(403, {"error": str(e)}, origin)
    except Exception as e:
        logger.error(f"[Submit Project] Function error: {str(e)}", exc_info=True)
        return json_response(500, {"error": str(e)}, origin)
