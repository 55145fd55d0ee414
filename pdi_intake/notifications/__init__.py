"""Outbound webhook notifications."""

from .webhook_notifier import (
    AttachmentWebhookNotifier,
    RemoteFunctionNotifier,
    SubmissionWebhookNotifier,
    build_attachments_payload,
    build_submission_payload,
)

__all__ = [
    "AttachmentWebhookNotifier",
    "SubmissionWebhookNotifier",
    "RemoteFunctionNotifier",
    "build_attachments_payload",
    "build_submission_payload",
]
