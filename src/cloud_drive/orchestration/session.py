"""Drive session: wires navigation, caches, projection and mutations together."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from cloud_drive.orchestration.coordinator import (
    NOOP_RESULT,
    MutationCoordinator,
    OperationResult,
    UploadFile,
)
from cloud_drive.remote.service import FileService, http_file_service_from_config
from cloud_drive.state.folder_index import FolderIndex
from cloud_drive.state.listing import ListingCache
from cloud_drive.state.navigation import HOME_FOLDER_NAME, NavigationState, Navigator
from cloud_drive.state.projection import (
    EMPTY_VIEW_MESSAGE,
    RECENT_LIMIT,
    SortKey,
    ViewSettings,
    project,
    recent,
)

if TYPE_CHECKING:
    import os

    from cloud_drive.config import AppConfig
    from cloud_drive.remote.models import Entry

logger = logging.getLogger(__name__)


class DriveSession:
    """Everything a presentation layer needs to drive one user's file view.

    Navigation is the single trigger for reloading: every navigation
    refreshes the listing for the new folder and the sidebar folder index.
    Display sequences are recomputed from the listing on every read.
    """

    def __init__(
        self,
        service: FileService,
        home_folder_name: str = HOME_FOLDER_NAME,
        download_dir: str | os.PathLike[str] = "downloads",
        recent_limit: int = RECENT_LIMIT,
    ) -> None:
        """Initialise the session at the root folder.

        Args:
            service: Remote file service.
            home_folder_name: Display name of the root folder.
            download_dir: Directory where downloaded files are written.
            recent_limit: Number of entries in the recent view.
        """
        self.navigator = Navigator(home_folder_name)
        self.listing = ListingCache(service, self.navigator)
        self.folder_index = FolderIndex(service)
        self.coordinator = MutationCoordinator(
            service,
            self.navigator,
            self.listing,
            self.folder_index,
            download_dir=download_dir,
        )
        self.settings = ViewSettings()
        self._recent_limit = recent_limit

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def state(self) -> NavigationState:
        return self.navigator.state

    async def open(self) -> None:
        """Load the open folder and the folder index for the first time."""
        await self._reload()

    async def navigate_to(self, folder_id: str | None, folder_name: str) -> None:
        """Open a folder and reload the listing and folder index.

        Raises:
            Exception: The first refresh failure, after both refreshes finish.
        """
        self.navigator.navigate_to(folder_id, folder_name)
        await self._reload()

    async def navigate_home(self) -> None:
        """Open the root folder."""
        self.navigator.navigate_home()
        await self._reload()

    async def open_folder(self, entry: Entry) -> None:
        """Open a folder entry from the listing. Files are ignored."""
        if not entry.is_folder:
            logger.debug("[open_folder] entry is not a folder; entry_id:%s", entry.id)
            return
        await self.navigate_to(entry.id, entry.name)

    async def _reload(self) -> None:
        results = await asyncio.gather(
            self.listing.refresh(),
            self.folder_index.refresh(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                logger.error(
                    "[_reload] refresh failed; folder_id:%s;error:%s",
                    self.navigator.state.folder_id,
                    result,
                )
                raise result

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def folders(self) -> tuple[Entry, ...]:
        return self.folder_index.folders

    def set_search_text(self, text: str) -> None:
        self.settings.search_text = text

    def set_sort_key(self, sort_key: SortKey) -> None:
        self.settings.sort_key = sort_key

    def visible_entries(self) -> list[Entry]:
        """Entries of the open folder after search and sort."""
        return project(self.listing.entries, self.settings)

    def recent_entries(self) -> list[Entry]:
        return recent(self.listing.entries, self.settings, limit=self._recent_limit)

    def is_empty_view(self) -> bool:
        """Whether the main view has nothing to show (the "No files found" state)."""
        return not self.visible_entries()

    def empty_view_message(self) -> str | None:
        """Placeholder text for the main view, or None when there are entries to show."""
        return EMPTY_VIEW_MESSAGE if self.is_empty_view() else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def upload(self, file: UploadFile | None) -> OperationResult:
        return await self.coordinator.upload(file)

    async def create_folder(self, name: str | None) -> OperationResult:
        return await self.coordinator.create_folder(name)

    async def rename(self, entry_id: str, new_name: str | None) -> OperationResult:
        return await self.coordinator.rename(entry_id, new_name)

    async def remove(self, entry_id: str, name: str, confirmed: bool) -> OperationResult:
        return await self.coordinator.remove(entry_id, name, confirmed)

    async def download(self, entry: Entry | None) -> OperationResult:
        if entry is None:
            return NOOP_RESULT
        return await self.coordinator.download(entry)


def drive_session_from_config(config: AppConfig) -> DriveSession:
    """Construct a DriveSession over the HTTP file service.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveSession at the root folder.
    """
    return DriveSession(
        http_file_service_from_config(config),
        home_folder_name=config.home_folder_name,
        download_dir=config.download_dir,
        recent_limit=config.recent_limit,
    )
