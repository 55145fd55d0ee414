"""Draft materialization: obtain a project ID before binding attachments."""

import logging
from typing import Callable, Optional

from ..errors import DraftCreationError

logger = logging.getLogger(__name__)


def ensure_project_id(current_id: Optional[str], save_draft: Optional[Callable[[], Optional[str]]]) -> str:
    """Return ``current_id`` or create a draft project to obtain one.

    ``save_draft`` is called at most once and only when ``current_id`` is empty.

    Args:
        current_id: Project ID already known to the session, if any
        save_draft: Routine that saves the form as a draft and returns its project ID

    Returns:
        A project ID

    Raises:
        DraftCreationError: if no save routine is available, it raised, or returned None
    """
    if current_id:
        return current_id

    if save_draft is None:
        raise DraftCreationError("Project has not been saved yet. Save the project first.")

    try:
        project_id = save_draft()
    except Exception as e:
        logger.error(f"Draft creation failed: {str(e)}")
        raise DraftCreationError(f"Could not save the project draft: {str(e)}") from e

    if not project_id:
        raise DraftCreationError("Could not save the project draft: no project ID returned")

    logger.info(f"Created draft project {project_id} for attachment upload")
    return project_id
