"""Attachment removal through the deployed ``delete-attachment`` function."""

import logging

from ..common.remote_functions import RemoteFunctionClient
from ..errors import DeletionError
from ..storage.models import Attachment

logger = logging.getLogger(__name__)


class RemoteAttachmentRemover:
    """Removes attachments server-side, where the function holds storage credentials."""

    function_name = "delete-attachment"

    def __init__(self, client: RemoteFunctionClient):
        self.client = client

    def remove_attachment(self, attachment: Attachment) -> None:
        _, error = self.client.invoke(
            self.function_name,
            {"storage_path": attachment.storage_path, "attachment_id": attachment.id},
        )
        if error:
            raise DeletionError(error)
        logger.info(f"Remote removal of attachment {attachment.id} succeeded")
