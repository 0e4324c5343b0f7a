"""Data models for file and folder entries returned by the remote file service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Remote service JSON field names
FIELD_ID = "_id"
FIELD_NAME = "name"
FIELD_IS_FOLDER = "isFolder"
FIELD_PARENT_ID = "parentId"
FIELD_CREATED_AT = "createdAt"
FIELD_URL = "url"


class EntryParseError(ValueError):
    """Raised when a service response does not match the entry shape."""


@dataclass(frozen=True)
class Entry:
    """A single file or folder record as known to the remote service.

    Attributes:
        id: Opaque identifier, stable for the entry's lifetime (including renames).
        name: Display name. Uniqueness is not enforced client-side.
        is_folder: Whether the entry is a folder.
        parent_id: Identifier of the containing folder, or None for the root.
        created_at: Creation timestamp, used for recency ordering and display.
        content_url: Locator for the file bytes. Always None for folders.
    """

    id: str
    name: str
    is_folder: bool
    parent_id: str | None
    created_at: datetime
    content_url: str | None = None


def parse_entry(raw: dict[str, Any]) -> Entry:
    """Map a raw service item dict to an Entry.

    A creation timestamp without a UTC offset is taken to be UTC, so every
    parsed entry carries an aware ``created_at``.

    Args:
        raw: One item from a service response.

    Returns:
        Parsed Entry.

    Raises:
        EntryParseError: If the item is not an object, the id is missing, the
            name is not a string or the creation timestamp is unreadable.
    """
    if not isinstance(raw, dict):
        raise EntryParseError(f"Entry is not an object: {raw!r}")

    entry_id = raw.get(FIELD_ID)
    if not entry_id:
        raise EntryParseError(f"Entry has no {FIELD_ID!r} field: {raw!r}")

    name = raw.get(FIELD_NAME, "")
    if not isinstance(name, str):
        raise EntryParseError(f"Entry {entry_id} has a non-string {FIELD_NAME!r}: {name!r}")

    created_raw = raw.get(FIELD_CREATED_AT)
    try:
        created_at = datetime.fromisoformat(str(created_raw))
    except ValueError as exc:
        raise EntryParseError(
            f"Entry {entry_id} has an invalid {FIELD_CREATED_AT!r}: {created_raw!r}"
        ) from exc
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    is_folder = bool(raw.get(FIELD_IS_FOLDER, False))
    return Entry(
        id=str(entry_id),
        name=name,
        is_folder=is_folder,
        # Empty string and null both mean the root.
        parent_id=raw.get(FIELD_PARENT_ID) or None,
        created_at=created_at,
        content_url=None if is_folder else raw.get(FIELD_URL),
    )


def parse_entries(raw_items: list[dict[str, Any]]) -> list[Entry]:
    """Parse a list of raw service items, preserving response order."""
    return [parse_entry(raw) for raw in raw_items]
