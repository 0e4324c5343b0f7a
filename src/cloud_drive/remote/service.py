"""Remote file service contract and its HTTP implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

from cloud_drive.remote.client import DriveApiClient, drive_api_client_from_config
from cloud_drive.remote.models import (
    FIELD_NAME,
    FIELD_PARENT_ID,
    Entry,
    EntryParseError,
    parse_entries,
    parse_entry,
)

if TYPE_CHECKING:
    from cloud_drive.config import AppConfig

logger = logging.getLogger(__name__)

# Service routes
FILES_PATH = "/files"
FOLDERS_PATH = "/files/folders"
UPLOAD_PATH = "/files/upload"
CREATE_FOLDER_PATH = "/files/folder"

# Query and form parameter names
PARAM_PARENT = "parent"
UPLOAD_FILE_FIELD = "file"


class FileService(Protocol):
    """Operations the navigation core needs from the remote file store.

    Every method is a suspension point: callers must assume other work
    (including navigation) can happen before it resolves.
    """

    async def list_folder_contents(self, parent_id: str | None) -> list[Entry]: ...

    async def list_all_folders(self) -> list[Entry]: ...

    async def create_entry(
        self, filename: str, content: bytes, parent_id: str | None
    ) -> Entry: ...

    async def create_folder_entry(self, name: str, parent_id: str | None) -> Entry: ...

    async def rename_entry(self, entry_id: str, new_name: str) -> Entry: ...

    async def delete_entry(self, entry_id: str) -> None: ...

    async def fetch_bytes(self, content_url: str) -> bytes: ...


class HttpFileService:
    """FileService backed by the REST API through a DriveApiClient.

    The client is blocking, so each call runs in a worker thread.
    """

    def __init__(self, client: DriveApiClient) -> None:
        self._client = client

    async def list_folder_contents(self, parent_id: str | None) -> list[Entry]:
        """List every entry whose parent is ``parent_id`` (None for the root)."""
        params = {PARAM_PARENT: parent_id} if parent_id is not None else None
        raw = await asyncio.to_thread(self._client.get, FILES_PATH, params)
        entries = parse_entries(_expect_list(raw, FILES_PATH))
        logger.info(
            "[list_folder_contents] listed folder; parent_id:%s;entry_count:%d",
            parent_id,
            len(entries),
        )
        return entries

    async def list_all_folders(self) -> list[Entry]:
        """List every folder the user owns, at any depth."""
        raw = await asyncio.to_thread(self._client.get, FOLDERS_PATH)
        folders = parse_entries(_expect_list(raw, FOLDERS_PATH))
        logger.info("[list_all_folders] listed folders; folder_count:%d", len(folders))
        return folders

    async def create_entry(self, filename: str, content: bytes, parent_id: str | None) -> Entry:
        """Upload a file into ``parent_id``.

        The parent field is omitted for the root, matching what the service
        expects from browser form uploads.
        """
        fields = {FIELD_PARENT_ID: parent_id} if parent_id is not None else {}
        raw = await asyncio.to_thread(
            self._client.post_multipart,
            UPLOAD_PATH,
            fields,
            UPLOAD_FILE_FIELD,
            filename,
            content,
        )
        entry = parse_entry(_expect_object(raw, UPLOAD_PATH))
        logger.info(
            "[create_entry] uploaded file; entry_id:%s;parent_id:%s;size:%d",
            entry.id,
            parent_id,
            len(content),
        )
        return entry

    async def create_folder_entry(self, name: str, parent_id: str | None) -> Entry:
        """Create a folder named ``name`` under ``parent_id``."""
        payload = {FIELD_NAME: name, FIELD_PARENT_ID: parent_id}
        raw = await asyncio.to_thread(self._client.post_json, CREATE_FOLDER_PATH, payload)
        entry = parse_entry(_expect_object(raw, CREATE_FOLDER_PATH))
        logger.info(
            "[create_folder_entry] created folder; entry_id:%s;parent_id:%s",
            entry.id,
            parent_id,
        )
        return entry

    async def rename_entry(self, entry_id: str, new_name: str) -> Entry:
        """Rename an entry; its id is unchanged."""
        path = _entry_path(entry_id)
        raw = await asyncio.to_thread(self._client.put_json, path, {FIELD_NAME: new_name})
        entry = parse_entry(_expect_object(raw, path))
        logger.info("[rename_entry] renamed entry; entry_id:%s", entry.id)
        return entry

    async def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Folder contents are removed by the service."""
        await asyncio.to_thread(self._client.delete, _entry_path(entry_id))
        logger.info("[delete_entry] deleted entry; entry_id:%s", entry_id)

    async def fetch_bytes(self, content_url: str) -> bytes:
        """Fetch the bytes behind a content locator."""
        return await asyncio.to_thread(self._client.fetch_url, content_url)


def _entry_path(entry_id: str) -> str:
    return f"{FILES_PATH}/{quote(entry_id, safe='')}"


def _expect_list(raw: Any, path: str) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        raise EntryParseError(f"Expected a list from {path}, got {type(raw).__name__}")
    return raw


def _expect_object(raw: Any, path: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise EntryParseError(f"Expected an object from {path}, got {type(raw).__name__}")
    return raw


def http_file_service_from_config(config: AppConfig) -> HttpFileService:
    """Construct an HttpFileService from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured HttpFileService instance.
    """
    return HttpFileService(drive_api_client_from_config(config))
