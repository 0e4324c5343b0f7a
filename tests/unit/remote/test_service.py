"""Unit tests for remote/service.py: HttpFileService request mapping."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from cloud_drive.config import AppConfig
from cloud_drive.remote.client import DriveApiError
from cloud_drive.remote.models import EntryParseError
from cloud_drive.remote.service import HttpFileService, http_file_service_from_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_service() -> tuple[HttpFileService, MagicMock]:
    """Return (service, mock_client)."""
    mock_client = MagicMock()
    return HttpFileService(mock_client), mock_client


def _raw(id: str, parent: str | None = None, is_folder: bool = False) -> dict[str, object]:
    return {
        "_id": id,
        "name": f"{id}.txt",
        "isFolder": is_folder,
        "parentId": parent,
        "createdAt": "2024-01-01T00:00:00Z",
        "url": f"https://cdn.example.com/{id}",
    }


# ---------------------------------------------------------------------------
# Listing tests
# ---------------------------------------------------------------------------


class TestListFolderContents:
    def test_passes_parent_query_parameter(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.return_value = [_raw("a", "p1"), _raw("b", "p1")]

        entries = asyncio.run(service.list_folder_contents("p1"))

        mock_client.get.assert_called_once_with("/files", {"parent": "p1"})
        assert [e.id for e in entries] == ["a", "b"]

    def test_root_sends_no_parent_parameter(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.return_value = []

        asyncio.run(service.list_folder_contents(None))

        mock_client.get.assert_called_once_with("/files", None)

    def test_non_list_response_raises_parse_error(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.return_value = {"error": "unexpected"}

        with pytest.raises(EntryParseError):
            asyncio.run(service.list_folder_contents(None))

    def test_non_object_item_raises_parse_error(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.return_value = [_raw("a"), "garbage"]

        with pytest.raises(EntryParseError):
            asyncio.run(service.list_folder_contents(None))

    def test_client_errors_propagate(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.side_effect = DriveApiError(500, "boom")

        with pytest.raises(DriveApiError):
            asyncio.run(service.list_folder_contents("p1"))


class TestListAllFolders:
    def test_calls_folders_route(self) -> None:
        service, mock_client = _make_service()
        mock_client.get.return_value = [_raw("f1", None, True), _raw("f2", "f1", True)]

        folders = asyncio.run(service.list_all_folders())

        mock_client.get.assert_called_once_with("/files/folders")
        assert [f.id for f in folders] == ["f1", "f2"]


# ---------------------------------------------------------------------------
# Mutation tests
# ---------------------------------------------------------------------------


class TestCreateEntry:
    def test_uploads_multipart_with_parent(self) -> None:
        service, mock_client = _make_service()
        mock_client.post_multipart.return_value = _raw("new", "p1")

        entry = asyncio.run(service.create_entry("notes.txt", b"hello", "p1"))

        mock_client.post_multipart.assert_called_once_with(
            "/files/upload", {"parentId": "p1"}, "file", "notes.txt", b"hello"
        )
        assert entry.id == "new"

    def test_root_upload_omits_parent_field(self) -> None:
        service, mock_client = _make_service()
        mock_client.post_multipart.return_value = _raw("new")

        asyncio.run(service.create_entry("notes.txt", b"hello", None))

        assert mock_client.post_multipart.call_args[0][1] == {}


class TestCreateFolderEntry:
    def test_posts_name_and_parent(self) -> None:
        service, mock_client = _make_service()
        mock_client.post_json.return_value = _raw("f9", None, True)

        entry = asyncio.run(service.create_folder_entry("Invoices", None))

        mock_client.post_json.assert_called_once_with(
            "/files/folder", {"name": "Invoices", "parentId": None}
        )
        assert entry.is_folder is True


class TestRenameEntry:
    def test_puts_new_name(self) -> None:
        service, mock_client = _make_service()
        mock_client.put_json.return_value = _raw("x1", "p1")

        entry = asyncio.run(service.rename_entry("x1", "renamed.txt"))

        mock_client.put_json.assert_called_once_with("/files/x1", {"name": "renamed.txt"})
        assert entry.id == "x1"

    def test_entry_id_is_url_quoted(self) -> None:
        service, mock_client = _make_service()
        mock_client.put_json.return_value = _raw("a/b")

        asyncio.run(service.rename_entry("a/b", "n"))

        assert mock_client.put_json.call_args[0][0] == "/files/a%2Fb"


class TestDeleteEntry:
    def test_deletes_entry_route(self) -> None:
        service, mock_client = _make_service()

        asyncio.run(service.delete_entry("x1"))

        mock_client.delete.assert_called_once_with("/files/x1")


class TestFetchBytes:
    def test_fetches_absolute_locator(self) -> None:
        service, mock_client = _make_service()
        mock_client.fetch_url.return_value = b"%PDF-1.7"

        result = asyncio.run(service.fetch_bytes("https://cdn.example.com/report.pdf"))

        mock_client.fetch_url.assert_called_once_with("https://cdn.example.com/report.pdf")
        assert result == b"%PDF-1.7"


# ---------------------------------------------------------------------------
# Factory tests
# ---------------------------------------------------------------------------


class TestHttpFileServiceFromConfig:
    def test_wires_client_from_config(self) -> None:
        config = AppConfig(
            api_base_url="https://drive.example.com/api",
            client_id="cid",
            client_secret="cs",
            tenant_id="tid",
            api_scope="api://drive/.default",
        )
        with patch("cloud_drive.remote.service.drive_api_client_from_config") as mock_factory:
            service = http_file_service_from_config(config)

        mock_factory.assert_called_once_with(config)
        assert service._client is mock_factory.return_value
