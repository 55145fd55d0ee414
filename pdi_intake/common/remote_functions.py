"""Client for invoking the intake Lambda functions by name."""

import json
import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class RemoteFunctionClient:
    """Invokes deployed functions and unwraps their HTTP-style responses.

    ``invoke`` never raises; it returns ``(data, error)`` where exactly one is set.
    """

    def __init__(self, function_prefix: str = "", lambda_client=None, region_name: Optional[str] = None):
        self.function_prefix = function_prefix
        self.lambda_client = lambda_client or boto3.client("lambda", region_name=region_name)

    def invoke(self, name: str, body: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """Invoke ``{prefix}{name}`` synchronously with ``body``.

        Args:
            name: Function name without prefix, e.g. ``delete-attachment``
            body: JSON-serializable request body

        Returns:
            Tuple of (data, error_message)
        """
        function_name = f"{self.function_prefix}{name}"
        try:
            response = self.lambda_client.invoke(
                FunctionName=function_name,
                InvocationType="RequestResponse",
                Payload=json.dumps({"httpMethod": "POST", "body": json.dumps(body)}),
            )
            raw_response = response["Payload"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error invoking {function_name}: {str(e)}")
            return None, f"Failed to invoke {name}: {str(e)}"

        try:
            payload = json.loads(raw_response) if raw_response else {}
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from {function_name}: {raw_response[:500]!r}")
            return None, f"Invalid JSON response from {name}: {str(e)}"

        if response.get("FunctionError"):
            message = payload.get("errorMessage", "Unknown function error") if isinstance(payload, dict) else str(payload)
            logger.error(f"{function_name} failed: {message}")
            return None, message

        if not isinstance(payload, dict) or "statusCode" not in payload:
            return payload, None

        status = int(payload["statusCode"])
        try:
            data = json.loads(payload.get("body") or "{}")
        except json.JSONDecodeError:
            data = {"raw": payload.get("body")}

        if 200 <= status < 300:
            return data, None

        error = data.get("error") if isinstance(data, dict) else None
        logger.error(f"{function_name} returned {status}: {error}")
        return None, error or f"{name} returned status {status}"
