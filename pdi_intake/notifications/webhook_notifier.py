"""Fire-and-forget webhook notifications to the external automation endpoint.

Notification failures are logged and never propagated: the proposal and attachment
workflow must not fail because the webhook receiver is unavailable.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..common.remote_functions import RemoteFunctionClient
from ..storage.models import Attachment
from .delivery_log import log_delivery

logger = logging.getLogger(__name__)

NO_ATTACHMENTS_MESSAGE = "Nenhum anexo encontrado ou erro na busca."


def build_attachments_payload(project_id: str, attachments: List[Attachment]) -> Dict[str, Any]:
    """Payload for the attachment-change webhook."""
    attachment_ids = [a.id for a in attachments]
    return {
        "project_id": project_id,
        "attachment_ids": attachment_ids,
        "attachment_names": [a.file_name for a in attachments],
        "count": len(attachment_ids),
    }


def build_submission_payload(project_id: str, user_id: str, file_names: Optional[List[str]]) -> Dict[str, Any]:
    """Payload for the final submission webhook; ``None`` means the lookup failed."""
    return {
        "user_id": user_id,
        "project_id": project_id,
        "nome_dos_arquivos": ", ".join(file_names) if file_names is not None else NO_ATTACHMENTS_MESSAGE,
    }


class WebhookSender:
    """POSTs JSON payloads to one webhook URL and logs every delivery."""

    endpoint = "webhook"

    def __init__(self, url: str, timeout: float = 10.0, log_dir: Optional[str] = None):
        self.url = url
        self.timeout = timeout
        self.log_dir = log_dir

    @log_delivery
    def _post(self, endpoint: str, payload: Dict[str, Any]) -> requests.Response:
        return requests.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def deliver(self, payload: Dict[str, Any]) -> Optional[int]:
        """Send ``payload``; returns the HTTP status, or None if nothing was received."""
        if not self.url:
            logger.warning(f"No URL configured for {self.endpoint} webhook, skipping delivery")
            return None

        logger.info(f"Sending {self.endpoint} webhook: {payload}")
        try:
            response = self._post(self.endpoint, payload)
        except requests.RequestException as e:
            logger.error(f"{self.endpoint} webhook request failed: {str(e)}")
            return None

        if not response.ok:
            logger.error(
                f"{self.endpoint} webhook failed: Status {response.status_code}. Response: {response.text}"
            )
        else:
            logger.info(f"{self.endpoint} webhook successful: Status {response.status_code}")
        return response.status_code


class AttachmentWebhookNotifier(WebhookSender):
    """Notifies the automation endpoint that a project's attachments changed."""

    endpoint = "attachments"

    def __init__(self, gateway, url: str, timeout: float = 10.0, log_dir: Optional[str] = None):
        super().__init__(url, timeout=timeout, log_dir=log_dir)
        self.gateway = gateway

    def send(self, project_id: str, attachments: List[Attachment]) -> Optional[int]:
        return self.deliver(build_attachments_payload(project_id, attachments))

    def notify(self, project_id: str) -> Optional[int]:
        """Look up the project's attachments and send the change notification.

        Never raises.
        """
        try:
            attachments = self.gateway.list_by_project(project_id)
            return self.send(project_id, attachments)
        except Exception as e:
            logger.error(f"Attachment notification for {project_id} failed: {str(e)}")
            return None


class SubmissionWebhookNotifier(WebhookSender):
    """Notifies the automation endpoint that a proposal was submitted."""

    endpoint = "submission"

    def __init__(self, gateway, url: str, timeout: float = 10.0, log_dir: Optional[str] = None):
        super().__init__(url, timeout=timeout, log_dir=log_dir)
        self.gateway = gateway

    def notify(self, project_id: str, user_id: str) -> Optional[int]:
        """Send the submission notification with the comma-joined file names.

        A failed attachment lookup still sends the notification, with a placeholder
        text instead of the file names. Never raises.
        """
        try:
            try:
                file_names = [a.file_name for a in self.gateway.list_by_project(project_id)]
            except Exception as e:
                logger.error(f"Error fetching attachments for {project_id}: {str(e)}")
                file_names = None
            return self.deliver(build_submission_payload(project_id, user_id, file_names))
        except Exception as e:
            logger.error(f"Submission notification for {project_id} failed: {str(e)}")
            return None


class RemoteFunctionNotifier:
    """Attachment notifier that delegates to the deployed notification function."""

    function_name = "notify-attachments-webhook"

    def __init__(self, client: RemoteFunctionClient):
        self.client = client

    def notify(self, project_id: str) -> Optional[int]:
        data, error = self.client.invoke(self.function_name, {"project_id": project_id})
        if error:
            logger.error(f"Attachment notification for {project_id} failed: {error}")
            return None
        return (data or {}).get("webhook_status")
