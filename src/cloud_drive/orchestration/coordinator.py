"""Mutation coordinator: remote mutations and the refreshes that follow them."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
import aiofiles.os

from cloud_drive.remote.client import DriveError
from cloud_drive.remote.models import EntryParseError

if TYPE_CHECKING:
    from cloud_drive.remote.models import Entry
    from cloud_drive.remote.service import FileService
    from cloud_drive.state.folder_index import FolderIndex
    from cloud_drive.state.listing import ListingCache
    from cloud_drive.state.navigation import Navigator

logger = logging.getLogger(__name__)

# Failures an operation reports instead of raising
REMOTE_ERRORS = (DriveError, EntryParseError, OSError)

DEFAULT_DOWNLOAD_DIR = "downloads"


class Outcome(Enum):
    NOOP = "noop"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class OperationResult:
    """What a user-facing operation did, for notification purposes.

    Attributes:
        outcome: Silent no-op, success or failure. Never ambiguous.
        message: Notification text. Empty for no-ops.
        entry: Entry returned by the service, when the operation produced one.
        error: The remote failure, when ``outcome`` is FAILURE.
        refresh_error: Failure of the follow-up refresh after a successful
            mutation. The mutation itself still succeeded.
        path: Where a download was written.
    """

    outcome: Outcome
    message: str = ""
    entry: Entry | None = None
    error: Exception | None = None
    refresh_error: Exception | None = None
    path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


NOOP_RESULT = OperationResult(Outcome.NOOP)


@dataclass(frozen=True)
class UploadFile:
    """A file the user picked or dropped."""

    filename: str
    content: bytes


def delete_confirmation_prompt(name: str) -> str:
    """Text to show before a destructive delete of ``name``."""
    return f'Are you sure you want to delete "{name}"?\nThis action cannot be undone.'


def _clean_name(name: str | None) -> str | None:
    """Return the stripped name, or None for cancelled or blank input."""
    if name is None:
        return None
    return name.strip() or None


class MutationCoordinator:
    """Runs upload, create-folder, rename, delete and download.

    Each mutation is a single remote call. Only when it succeeds is the
    affected cache refreshed; a failed call leaves every cache untouched
    and comes back as a FAILURE result.
    """

    def __init__(
        self,
        service: FileService,
        navigator: Navigator,
        listing: ListingCache,
        folder_index: FolderIndex,
        download_dir: str | os.PathLike[str] = DEFAULT_DOWNLOAD_DIR,
    ) -> None:
        """Initialise the coordinator.

        Args:
            service: Remote file service.
            navigator: Source of the open folder, used as the mutation target.
            listing: Listing cache to refresh after mutations.
            folder_index: Folder index to refresh after folder creation.
            download_dir: Directory where downloaded files are written.
        """
        self._service = service
        self._navigator = navigator
        self._listing = listing
        self._folder_index = folder_index
        self._download_dir = Path(download_dir)

    async def upload(self, file: UploadFile | None) -> OperationResult:
        """Upload ``file`` into the open folder.

        No file, or an empty one, is a silent no-op.
        """
        if file is None or not file.content:
            logger.debug("[upload] no file selected; skipping")
            return NOOP_RESULT

        target = self._navigator.state
        try:
            entry = await self._service.create_entry(file.filename, file.content, target.folder_id)
        except REMOTE_ERRORS as exc:
            return self._failed("upload", "Upload", exc)

        refresh_error = await self._refresh_listing_if_current(target.folder_id)
        return OperationResult(
            Outcome.SUCCESS,
            f"Uploaded to {target.folder_name}",
            entry=entry,
            refresh_error=refresh_error,
        )

    async def create_folder(self, name: str | None) -> OperationResult:
        """Create a folder named ``name`` inside the open folder.

        A cancelled (None) or blank name is a silent no-op.
        """
        folder_name = _clean_name(name)
        if folder_name is None:
            logger.debug("[create_folder] no folder name entered; skipping")
            return NOOP_RESULT

        target = self._navigator.state
        try:
            entry = await self._service.create_folder_entry(folder_name, target.folder_id)
        except REMOTE_ERRORS as exc:
            return self._failed("create_folder", "Create folder", exc)

        refresh_error = await self._refresh_folder_index()
        listing_error = await self._refresh_listing_if_current(target.folder_id)
        return OperationResult(
            Outcome.SUCCESS,
            f"Created folder {folder_name}",
            entry=entry,
            refresh_error=refresh_error or listing_error,
        )

    async def rename(self, entry_id: str, new_name: str | None) -> OperationResult:
        """Rename an entry. A cancelled (None) or blank name is a silent no-op."""
        clean = _clean_name(new_name)
        if clean is None:
            logger.debug("[rename] no new name entered; skipping; entry_id:%s", entry_id)
            return NOOP_RESULT

        try:
            entry = await self._service.rename_entry(entry_id, clean)
        except REMOTE_ERRORS as exc:
            return self._failed("rename", "Rename", exc)

        refresh_error = await self._refresh_listing()
        return OperationResult(
            Outcome.SUCCESS, f"Renamed to {clean}", entry=entry, refresh_error=refresh_error
        )

    async def remove(self, entry_id: str, name: str, confirmed: bool) -> OperationResult:
        """Delete an entry once the user has confirmed.

        Args:
            entry_id: Id of the entry to delete.
            name: Display name, used in the confirmation prompt and logs.
            confirmed: Whether the user accepted ``delete_confirmation_prompt(name)``.
        """
        if not confirmed:
            logger.debug("[remove] delete not confirmed; skipping; entry_id:%s", entry_id)
            return NOOP_RESULT

        try:
            await self._service.delete_entry(entry_id)
        except REMOTE_ERRORS as exc:
            return self._failed("remove", "Delete", exc)

        logger.info("[remove] deleted; entry_id:%s;name:%s", entry_id, name)
        refresh_error = await self._refresh_listing()
        return OperationResult(
            Outcome.SUCCESS, "Deleted successfully", refresh_error=refresh_error
        )

    async def download(self, entry: Entry) -> OperationResult:
        """Download a file entry. Folders have no content and are a no-op."""
        if entry.is_folder:
            logger.debug("[download] entry is a folder; skipping; entry_id:%s", entry.id)
            return NOOP_RESULT
        return await self.download_url(entry.content_url, entry.name)

    async def download_url(self, content_url: str | None, filename: str) -> OperationResult:
        """Fetch the bytes behind ``content_url`` and save them as ``filename``.

        Nothing is refreshed: downloading does not change the store. A
        failed fetch or write leaves no file behind.
        """
        if not content_url or not filename:
            logger.debug("[download_url] no content locator or filename; skipping")
            return NOOP_RESULT

        try:
            content = await self._service.fetch_bytes(content_url)
            path = await self._save(filename, content)
        except REMOTE_ERRORS as exc:
            logger.error("[download_url] download failed; filename:%s;error:%s", filename, exc)
            return OperationResult(Outcome.FAILURE, "Download failed", error=exc)

        logger.info("[download_url] saved download; path:%s;size:%d", path, len(content))
        return OperationResult(Outcome.SUCCESS, f"Downloaded {path.name}", path=path)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _refresh_listing(self) -> Exception | None:
        try:
            await self._listing.refresh()
        except REMOTE_ERRORS as exc:
            logger.warning("[_refresh_listing] follow-up listing refresh failed; error:%s", exc)
            return exc
        return None

    async def _refresh_listing_if_current(self, folder_id: str | None) -> Exception | None:
        # Navigation away already refreshed the listing for the new folder.
        if not self._navigator.is_current(folder_id):
            logger.debug(
                "[_refresh_listing_if_current] target folder no longer open; folder_id:%s",
                folder_id,
            )
            return None
        return await self._refresh_listing()

    async def _refresh_folder_index(self) -> Exception | None:
        try:
            await self._folder_index.refresh()
        except REMOTE_ERRORS as exc:
            logger.warning(
                "[_refresh_folder_index] follow-up folder index refresh failed; error:%s", exc
            )
            return exc
        return None

    @staticmethod
    def _failed(operation: str, label: str, exc: Exception) -> OperationResult:
        logger.error("[%s] remote call failed; error:%s", operation, exc)
        return OperationResult(Outcome.FAILURE, f"{label} failed: {exc}", error=exc)

    async def _save(self, filename: str, content: bytes) -> Path:
        """Write ``content`` into the download directory without clobbering files.

        The bytes go to a temporary file first. Once fully written, the file is
        linked under its final name and the temporary name is removed.
        """
        await asyncio.to_thread(self._download_dir.mkdir, parents=True, exist_ok=True)
        # Only the final component; a service-supplied name must not escape the directory.
        safe_name = Path(filename).name
        if safe_name in ("", ".."):
            safe_name = "download"
        tmp_path = self._download_dir / f".{safe_name}.{uuid.uuid4().hex}.part"
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(content)
            return await _link_unique(tmp_path, self._download_dir, safe_name)
        finally:
            with contextlib.suppress(FileNotFoundError):
                await aiofiles.os.remove(tmp_path)


async def _link_unique(source: Path, directory: Path, filename: str) -> Path:
    """Link ``source`` as ``directory/filename``, adding " (n)" before the suffix on clashes.

    Linking fails when the name already exists, so a name is only ever
    claimed by one download.
    """
    candidate = directory / filename
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while True:
        try:
            await aiofiles.os.link(source, candidate)
        except FileExistsError:
            candidate = directory / f"{stem} ({counter}){suffix}"
            counter += 1
        else:
            return candidate
