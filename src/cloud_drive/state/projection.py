"""Derived, read-only views over the listing: search, sort, recent, labels."""

from __future__ import annotations

import locale
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloud_drive.remote.models import Entry

RECENT_LIMIT = 4
EMPTY_VIEW_MESSAGE = "No files found"


class SortKey(Enum):
    BY_NAME = "name"
    BY_RECENCY = "recency"


@dataclass
class ViewSettings:
    """UI-local display settings. Never persisted or sent to the service."""

    search_text: str = ""
    sort_key: SortKey = SortKey.BY_RECENCY


def filter_entries(entries: Iterable[Entry], search_text: str) -> list[Entry]:
    """Keep entries whose name contains ``search_text``, ignoring case.

    An empty search matches everything.
    """
    needle = search_text.casefold()
    return [e for e in entries if needle in e.name.casefold()]


def sort_entries(entries: Iterable[Entry], sort_key: SortKey) -> list[Entry]:
    """Order entries for display.

    ``BY_RECENCY`` puts the newest first; ``BY_NAME`` compares casefolded names using
    the current locale's collation. Both sorts are stable, so equal keys
    keep their listing order.
    """
    if sort_key is SortKey.BY_RECENCY:
        return sorted(entries, key=lambda e: e.created_at, reverse=True)
    return sorted(entries, key=lambda e: locale.strxfrm(e.name.casefold()))


def project(entries: Iterable[Entry], settings: ViewSettings) -> list[Entry]:
    """Filter then sort ``entries`` according to ``settings``."""
    return sort_entries(filter_entries(entries, settings.search_text), settings.sort_key)


def recent(
    entries: Iterable[Entry],
    settings: ViewSettings,
    limit: int = RECENT_LIMIT,
) -> list[Entry]:
    """Return the newest ``limit`` entries that match the current search.

    Always ordered by recency, whatever sort key the main view uses.
    """
    matching = filter_entries(entries, settings.search_text)
    return sort_entries(matching, SortKey.BY_RECENCY)[:limit]


def file_type_label(name: str) -> str:
    """Upper-cased text after the last dot, e.g. ``"PDF"`` for ``"report.pdf"``.

    A name without a dot is returned whole, upper-cased.
    """
    return name.rsplit(".", 1)[-1].upper()


def format_created_date(entry: Entry) -> str:
    """Creation date for display, in local time when the timestamp is zone-aware."""
    created = entry.created_at
    if created.tzinfo is not None:
        created = created.astimezone()
    return created.strftime("%Y-%m-%d")
