"""Folder index: the flat set of every folder the user owns."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloud_drive.remote.models import Entry
    from cloud_drive.remote.service import FileService

logger = logging.getLogger(__name__)


class FolderIndex:
    """Sidebar folder list, independent of the open folder.

    The index is flat: it holds every folder regardless of nesting depth
    and is never filtered by parent.
    """

    def __init__(self, service: FileService) -> None:
        self._service = service
        self._folders: tuple[Entry, ...] = ()
        self._issued = 0
        self._applied = 0

    @property
    def folders(self) -> tuple[Entry, ...]:
        return self._folders

    async def refresh(self) -> bool:
        """Replace the index with the service's current folder set.

        The replacement is wholesale, so folders deleted elsewhere disappear.
        A response is discarded if a refresh issued after it has already
        been applied.

        Returns:
            True if the response was applied, False if it was discarded.

        Raises:
            Exception: Whatever the service raised. The previous index is kept.
        """
        self._issued += 1
        ticket = self._issued
        folders = await self._service.list_all_folders()
        if ticket < self._applied:
            logger.debug(
                "[refresh] discarding out-of-order folder index; ticket:%d;applied:%d",
                ticket,
                self._applied,
            )
            return False

        self._folders = tuple(f for f in folders if f.is_folder)
        self._applied = ticket
        logger.info("[refresh] folder index replaced; folder_count:%d", len(self._folders))
        return True
