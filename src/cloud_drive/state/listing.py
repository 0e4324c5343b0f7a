"""Listing cache: the entries of the open folder."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloud_drive.remote.models import Entry
    from cloud_drive.remote.service import FileService
    from cloud_drive.state.navigation import Navigator

logger = logging.getLogger(__name__)


class ListingCache:
    """Holds the entries of the open folder, refreshed from the service.

    Each refresh is tagged with the navigation state it was issued under
    and with a ticket number. A response is applied only if navigation has
    not moved on and no later-issued refresh has been applied in the
    meantime; anything else is a stale result and is dropped.
    """

    def __init__(self, service: FileService, navigator: Navigator) -> None:
        self._service = service
        self._navigator = navigator
        self._entries: tuple[Entry, ...] = ()
        self._loaded = False
        self._folder_id: str | None = None
        self._issued = 0
        self._applied = 0

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Entries of the open folder, or nothing while that folder has not loaded yet.

        Entries belonging to a previously open folder are never returned.
        """
        if not self.is_loaded:
            return ()
        return self._entries

    @property
    def is_loaded(self) -> bool:
        """Whether the cached entries belong to the open folder."""
        return self._loaded and self._navigator.is_current(self._folder_id)

    async def refresh(self) -> bool:
        """Fetch the open folder's entries and replace the cache.

        Returns:
            True if the response was applied, False if it arrived stale and
            was discarded.

        Raises:
            Exception: Whatever the service raised. The previous entries are
                kept.
        """
        issued = self._navigator.state
        self._issued += 1
        ticket = self._issued

        entries = await self._service.list_folder_contents(issued.folder_id)

        if self._navigator.is_stale(issued):
            logger.debug(
                "[refresh] discarding stale listing; folder_id:%s;issued_version:%d;"
                "current_version:%d",
                issued.folder_id,
                issued.version,
                self._navigator.state.version,
            )
            return False
        if ticket < self._applied:
            logger.debug(
                "[refresh] discarding out-of-order listing; folder_id:%s;ticket:%d;applied:%d",
                issued.folder_id,
                ticket,
                self._applied,
            )
            return False

        self._apply(issued.folder_id, entries)
        self._applied = ticket
        return True

    def _apply(self, folder_id: str | None, entries: list[Entry]) -> None:
        kept = tuple(e for e in entries if e.parent_id == folder_id)
        dropped = len(entries) - len(kept)
        if dropped:
            logger.warning(
                "[_apply] dropped entries outside the requested folder; folder_id:%s;dropped:%d",
                folder_id,
                dropped,
            )
        self._entries = kept
        self._folder_id = folder_id
        self._loaded = True
        logger.info(
            "[_apply] listing replaced; folder_id:%s;entry_count:%d", folder_id, len(kept)
        )
