"""Lambda handler polishing a free-text proposal answer."""

import logging
from typing import Any, Dict

from .responses import get_header, is_preflight, json_response, parse_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)

MIN_TEXT_LENGTH = 10
TOO_SHORT_MESSAGE = "O texto é muito curto para aprimoramento. Por favor, escreva mais."
ENHANCEMENT_SUFFIX = " Além disso, a clareza e o foco foram aprimorados pela IA."


def enhance_text(original_text: str) -> str:
    text = (original_text or "").strip()
    if len(text) < MIN_TEXT_LENGTH:
        return TOO_SHORT_MESSAGE

    capitalized = text[0].upper() + text[1:]
    if not capitalized.endswith("."):
        capitalized += "."
    return capitalized + ENHANCEMENT_SUFFIX


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("[AI Enhance Text] Function started.")

    if is_preflight(event):
        return json_response(200, None)

    try:
        if not get_header(event, "Authorization"):
            return json_response(401, {"error": "Unauthorized"})

        body = parse_body(event)
        text = body.get("text")
        if not isinstance(text, str):
            return json_response(400, {"error": "The 'text' field is required and must be a string."})

        logger.info(f"[AI Enhance Text] Enhancing text of length: {len(text)}")
        return json_response(200, {"enhanced_text": enhance_text(text)})

    except Exception as e:
        logger.error(f"[AI Enhance Text] Function error: {str(e)}", exc_info=True)
        return json_response(500, {"error": str(e)})
