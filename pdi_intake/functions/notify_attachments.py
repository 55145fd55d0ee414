"""Lambda handler sending the attachment-change webhook for a project."""

import logging
from typing import Any, Dict

from ..notifications import AttachmentWebhookNotifier
from ..settings import load_settings
from ..storage import AttachmentStoreGateway
from .responses import is_preflight, json_response, parse_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("[Notify Attachments Webhook] Function started.")
    settings = load_settings()
    origin = settings.cors_origin

    if is_preflight(event):
        return json_response(200, None, origin)

    try:
        body = parse_body(event)
        project_id = body.get("project_id")
        logger.info(f"[Notify Attachments Webhook] Payload received: project_id={project_id}")

        if not project_id:
            return json_response(400, {"error": "project_id is required"}, origin)

        gateway = AttachmentStoreGateway.from_settings(settings)
        attachments = gateway.list_by_project(project_id)

        notifier = AttachmentWebhookNotifier(
            gateway,
            settings.attachments_webhook_url,
            timeout=settings.webhook_timeout,
            log_dir=settings.webhook_log_dir,
        )
        status = notifier.send(project_id, attachments)

        # Webhook failures are logged by the notifier and still reported as sent
        return json_response(200, {"message": "Webhook sent successfully", "webhook_status": status}, origin)

    except Exception as e:
        logger.error(f"[Notify Attachments Webhook] Function error: {str(e)}", exc_info=True)
        return json_response(500, {"error": str(e)}, origin)
