"""Recent-search suggestions: stores, lookup and surfacing policy."""

from __future__ import annotations

import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from autosuggest.search.client import BackendError
from autosuggest.suggest.composer import Section, Templates

RECENT_SOURCE_ID = "recentSearchesPlugin"
DEFAULT_RECENT_LIMIT = 5
NON_EMPTY_QUERY_LIMIT = 2


@dataclass(slots=True)
class RecentSearchEntry:
    """A previously issued query."""

    query: str
    at_ms: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecentSearchEntry":
        if not isinstance(data, dict):
            raise ValueError("recent search entry must be an object")
        query = str(data.get("query", "")).strip()
        if not query:
            raise ValueError("recent search query is required")
        return cls(query=query, at_ms=int(data.get("at_ms", 0) or 0))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RecentSearchStore(Protocol):
    limit: int

    def items(self) -> list[RecentSearchEntry]: ...

    def add(self, query: str) -> None: ...


class InMemoryRecentSearchStore:
    """Most-recent-first, de-duplicated list capped at ``limit``."""

    def __init__(self, limit: int = DEFAULT_RECENT_LIMIT):
        self.limit = limit
        self._entries: list[RecentSearchEntry] = []

    def items(self) -> list[RecentSearchEntry]:
        return list(self._entries)

    def add(self, query: str) -> None:
        query = query.strip()
        if not query:
            return
        entries = [entry for entry in self._entries if entry.query != query]
        entries.insert(0, RecentSearchEntry(query=query, at_ms=int(time.time() * 1000)))
        self._entries = entries[: max(1, self.limit)]


class JsonRecentSearchStore(InMemoryRecentSearchStore):
    """Recent searches persisted to a JSON file."""

    def __init__(self, path: Path, limit: int = DEFAULT_RECENT_LIMIT):
        super().__init__(limit)
        self.path = path
        self._loaded = False

    def items(self) -> list[RecentSearchEntry]:
        self._load()
        return super().items()

    def add(self, query: str) -> None:
        self._load()
        super().add(query)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(f"{self.path.name}.tmp")
            tmp_path.write_text(
                json.dumps([entry.to_dict() for entry in self._entries], ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(self.path)
        except OSError as e:
            raise BackendError(f"failed to write recent searches to {self.path}: {e}") from e

    def _load(self) -> None:
        if self._loaded:
            return
        if not self.path.exists():
            self._loaded = True
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BackendError(f"failed to read recent searches from {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise BackendError(f"recent searches file {self.path} must hold a list")

        entries: list[RecentSearchEntry] = []
        for item in raw:
            try:
                entries.append(RecentSearchEntry.from_dict(item))
            except ValueError:
                continue
        self._entries = entries[: max(1, self.limit)]
        self._loaded = True


def search_recent(
    query: str,
    items: list[RecentSearchEntry],
    limit: int,
) -> list[RecentSearchEntry]:
    """Entries whose query contains ``query`` (case-insensitive), up to ``limit``."""
    needle = query.lower()
    return [item for item in items if needle in item.query.lower()][:limit]


class RecentSearchPolicy:
    """Decide which recent searches to surface for the current query."""

    def __init__(
        self,
        store: RecentSearchStore,
        *,
        non_empty_limit: int = NON_EMPTY_QUERY_LIMIT,
    ):
        self.store = store
        self.non_empty_limit = non_empty_limit

    def filter(self, query: str, results: list[RecentSearchEntry]) -> list[RecentSearchEntry]:
        # A lone entry equal to what is typed is useless as a suggestion.
        if len(results) == 1 and results[0].query == query:
            return []
        if query != "":
            return results[: self.non_empty_limit]
        return results

    def suggestions(self, query: str) -> list[RecentSearchEntry]:
        try:
            items = self.store.items()
        except BackendError as e:
            logger.warning("Recent searches unavailable: {}", e)
            return []
        return self.filter(query, search_recent(query, items, self.store.limit))

    def record(self, query: str) -> None:
        try:
            self.store.add(query)
        except BackendError as e:
            logger.warning("Could not record recent search {!r}: {}", query, e)


class RecentSearchSection(Section):
    """Recent searches. Selecting one keeps the panel open and searches again."""

    source_id = RECENT_SOURCE_ID
    keeps_panel_open = True

    def __init__(
        self,
        items: list[RecentSearchEntry],
        on_pick: Callable[[str], Awaitable[None]],
    ):
        super().__init__(items)
        self._on_pick = on_pick

    def render_item(self, templates: Templates, item: RecentSearchEntry) -> Any:
        return templates.recent_search(item)

    async def on_select(self, item: RecentSearchEntry) -> None:
        await self._on_pick(item.query)
