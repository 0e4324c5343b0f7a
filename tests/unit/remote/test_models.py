"""Unit tests for remote/models.py: Entry and response parsing."""

from datetime import UTC, datetime

import pytest

from cloud_drive.remote.models import Entry, EntryParseError, parse_entries, parse_entry
from cloud_drive.state.projection import SortKey, ViewSettings, project


def _raw_file(**overrides: object) -> dict[str, object]:
    raw: dict[str, object] = {
        "_id": "f1",
        "name": "report.pdf",
        "isFolder": False,
        "parentId": "folder-1",
        "createdAt": "2024-03-01T10:15:00.000Z",
        "url": "https://cdn.example.com/report.pdf",
    }
    raw.update(overrides)
    return raw


class TestParseEntry:
    def test_parses_file_fields(self) -> None:
        entry = parse_entry(_raw_file())

        assert entry == Entry(
            id="f1",
            name="report.pdf",
            is_folder=False,
            parent_id="folder-1",
            created_at=datetime(2024, 3, 1, 10, 15, tzinfo=UTC),
            content_url="https://cdn.example.com/report.pdf",
        )

    def test_folder_never_has_content_url(self) -> None:
        entry = parse_entry(_raw_file(isFolder=True, url="https://cdn.example.com/ignored"))

        assert entry.is_folder is True
        assert entry.content_url is None

    def test_missing_is_folder_means_file(self) -> None:
        raw = _raw_file()
        del raw["isFolder"]

        assert parse_entry(raw).is_folder is False

    @pytest.mark.parametrize("parent", [None, ""])
    def test_null_or_empty_parent_means_root(self, parent: object) -> None:
        assert parse_entry(_raw_file(parentId=parent)).parent_id is None

    def test_missing_parent_means_root(self) -> None:
        raw = _raw_file()
        del raw["parentId"]

        assert parse_entry(raw).parent_id is None

    def test_missing_id_raises(self) -> None:
        raw = _raw_file()
        del raw["_id"]

        with pytest.raises(EntryParseError, match="_id"):
            parse_entry(raw)

    def test_invalid_created_at_raises(self) -> None:
        with pytest.raises(EntryParseError, match="createdAt"):
            parse_entry(_raw_file(createdAt="yesterday"))

    def test_timestamp_without_offset_is_utc(self) -> None:
        entry = parse_entry(_raw_file(createdAt="2024-01-02T00:00:00"))

        assert entry.created_at == datetime(2024, 1, 2, tzinfo=UTC)

    def test_mixed_offsets_sort_by_recency(self) -> None:
        entries = parse_entries(
            [
                _raw_file(_id="aware", createdAt="2024-01-01T00:00:00Z"),
                _raw_file(_id="naive", createdAt="2024-01-02T00:00:00"),
            ]
        )

        result = project(entries, ViewSettings(sort_key=SortKey.BY_RECENCY))

        assert [e.id for e in result] == ["naive", "aware"]

    @pytest.mark.parametrize("raw", ["garbage", None, 42, ["f1"]])
    def test_non_object_item_raises(self, raw: object) -> None:
        with pytest.raises(EntryParseError, match="not an object"):
            parse_entry(raw)  # type: ignore[arg-type]

    @pytest.mark.parametrize("name", [None, 7, ["a"]])
    def test_non_string_name_raises(self, name: object) -> None:
        with pytest.raises(EntryParseError, match="name"):
            parse_entry(_raw_file(name=name))

    def test_missing_name_is_empty(self) -> None:
        raw = _raw_file()
        del raw["name"]

        assert parse_entry(raw).name == ""

    def test_parse_error_is_a_value_error(self) -> None:
        assert issubclass(EntryParseError, ValueError)


class TestParseEntries:
    def test_preserves_response_order(self) -> None:
        entries = parse_entries([_raw_file(_id="b"), _raw_file(_id="a"), _raw_file(_id="c")])

        assert [e.id for e in entries] == ["b", "a", "c"]


class TestEntry:
    def test_is_immutable(self) -> None:
        entry = parse_entry(_raw_file())

        with pytest.raises(AttributeError):
            entry.name = "other"  # type: ignore[misc]
