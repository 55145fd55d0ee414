"""Lambda handler removing one attachment: stored object first, then its row."""

import logging
from typing import Any, Dict

from ..errors import DeletionError
from ..settings import load_settings
from ..storage import AttachmentStoreGateway
from .responses import is_preflight, json_response, parse_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("[Delete Attachment] Function started.")
    settings = load_settings()
    origin = settings.cors_origin

    if is_preflight(event):
        return json_response(200, None, origin)

    try:
        body = parse_body(event)
        storage_path = body.get("storage_path")
        attachment_id = body.get("attachment_id")
        logger.info(f"[Delete Attachment] Payload received: path={storage_path}, id={attachment_id}")

        if not storage_path or not attachment_id:
            return json_response(400, {"error": "storage_path and attachment_id are required"}, origin)

        gateway = AttachmentStoreGateway.from_settings(settings)
        gateway.remove_stored_file(attachment_id, storage_path)

        return json_response(200, {"message": "Attachment deleted successfully"}, origin)

    except DeletionError as e:
        logger.error(f"[Delete Attachment] {str(e)}")
        return json_response(500, {"error": f"Failed to delete attachment: {str(e)}"}, origin)
    except Exception as e:
        logger.error(f"[Delete Attachment] Function error: {str(e)}", exc_info=True)
        return json_response(500, {"error": str(e)}, origin)
