"""Request/response helpers shared by the Lambda handlers."""

import json
from typing import Any, Dict, Optional

ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"


def cors_headers(origin: str = "*") -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": "POST,OPTIONS",
    }


def json_response(status_code: int, body: Optional[Dict[str, Any]], origin: str = "*") -> Dict[str, Any]:
    headers = cors_headers(origin)
    if body is None:
        return {"statusCode": status_code, "headers": headers, "body": ""}
    headers["Content-Type"] = "application/json"
    return {"statusCode": status_code, "headers": headers, "body": json.dumps(body, default=str)}


def is_preflight(event: Dict[str, Any]) -> bool:
    return (event.get("httpMethod") or "").upper() == "OPTIONS"


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the JSON request body; raises ValueError on malformed input."""
    body = event.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, dict):
        return body
    parsed = json.loads(body)
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object")
    return parsed


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None
