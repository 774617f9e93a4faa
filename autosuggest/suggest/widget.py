"""Suggestion widget: one query-change cycle from keystroke to render."""

from __future__ import annotations

import secrets
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol
from urllib.parse import quote

from loguru import logger

from autosuggest.config.schema import Config
from autosuggest.search.client import BackendError, SearchClient
from autosuggest.search.models import Hit
from autosuggest.suggest.analytics import AnalyticsSink, ClickAnnotator, InsightsSink
from autosuggest.suggest.answers import AnswerCandidate, AnswerFetcher
from autosuggest.suggest.composer import ResultComposer, Section, SourceList, Templates
from autosuggest.suggest.panel import KeyboardShortcut, KeyEvent, PanelStateTracker
from autosuggest.suggest.recent import (
    InMemoryRecentSearchStore,
    RecentSearchPolicy,
    RecentSearchSection,
    RecentSearchStore,
)

DEFAULT_TRANSLATIONS = {
    "bestAnswer": "Best answer",
    "placeholder": "Search the help center",
}


class ConfigurationError(Exception):
    """Raised when the widget cannot be bound to its input at mount time."""


class Node(Protocol):
    tag_name: str
    parent: "Node | None"


class MountHost(Protocol):
    """Page access needed to locate the search input."""

    def select_all(self, selector: str) -> Sequence[Node]: ...

    def replace_with_container(self, form: Node) -> Any: ...


class Renderer(Protocol):
    def render(
        self,
        sections: list[Section],
        templates: Templates,
        state: "PanelState",
        footer: Any,
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class PanelState:
    query: str = ""
    is_open: bool = False


def default_translate(key: str) -> str:
    return DEFAULT_TRANSLATIONS.get(key, key)


class Autocomplete:
    """Search-as-you-type widget bound to one help-center index."""

    def __init__(
        self,
        config: Config,
        *,
        templates: Templates,
        renderer: Renderer,
        backend: SearchClient | None = None,
        recent_store: RecentSearchStore | None = None,
        analytics_sink: AnalyticsSink | None = None,
        translate: Callable[[str], str] = default_translate,
    ):
        self.config = config
        self.enabled = config.autocomplete.enabled
        self.templates = templates
        self.renderer = renderer
        self.translate = translate
        self.container: Any = None
        self.state = PanelState()
        self.sources: SourceList | None = None
        self.sections: list[Section] = []
        self._cycle = 0
        self._last_hits: tuple[str, list[Hit]] | None = None

        if not self.enabled:
            return

        self.backend = backend or SearchClient(config)
        self.annotator = ClickAnnotator(self._make_sink(analytics_sink))
        self.composer = ResultComposer(
            build_url=self.article_url,
            annotator=self.annotator,
            answer_title=translate("bestAnswer"),
        )
        self.recent = RecentSearchPolicy(
            recent_store or InMemoryRecentSearchStore(config.autocomplete.recent_search_limit)
        )
        self.answers: AnswerFetcher | None = None
        if config.autocomplete.best_article:
            self.answers = AnswerFetcher(
                self.backend.answers,
                language=config.language,
                build_url=self.article_url,
                delay_s=config.autocomplete.answers_debounce_ms / 1000,
                on_accept=self._on_answer,
            )
        self.tracker = PanelStateTracker(self.set_is_open)
        self.shortcut: KeyboardShortcut | None = None
        if config.autocomplete.keyboard_shortcut:
            self.shortcut = KeyboardShortcut(self.tracker, on_toggle=self._render)

    @property
    def placeholder(self) -> str:
        return self.translate("placeholder")

    @property
    def is_open(self) -> bool:
        return self.enabled and self.tracker.is_open

    def article_url(self, hit: Hit) -> str:
        return f"{self.config.base_url}{self.config.locale}/articles/{hit.article_id}"

    def mount(self, host: MountHost) -> Any:
        """Bind to the configured input and replace its form with a container."""
        if not self.enabled:
            return None

        selector = self.config.autocomplete.input_selector
        inputs = list(host.select_all(selector))
        if not inputs:
            raise ConfigurationError(f"Couldn't find any input matching inputSelector '{selector}'.")
        if len(inputs) > 1:
            raise ConfigurationError(
                f"Too many inputs ({len(inputs)}) matching inputSelector '{selector}'."
            )

        form: Node | None = inputs[0]
        while form is not None and form.tag_name.upper() != "FORM":
            form = form.parent
        if form is None:
            raise ConfigurationError(
                f"Couldn't find the parent container of inputSelector '{selector}'"
            )

        self.container = host.replace_with_container(form)
        logger.info("Autocomplete mounted on {} (index {})", selector, self.config.index_name)
        return self.container

    def set_is_open(self, is_open: bool) -> None:
        self._set_state(replace(self.state, is_open=is_open))

    def focus(self) -> None:
        if self.enabled:
            self.set_is_open(True)

    def dismiss(self) -> None:
        """Outside click or blur. Debug mode keeps the panel open for inspection."""
        if self.enabled and not self.config.debug:
            self.set_is_open(False)

    def handle_key(self, event: KeyEvent) -> bool:
        """Escape always closes an open panel. Cmd/Ctrl+K needs keyboardShortcut."""
        if not self.enabled:
            return False
        if self.shortcut is not None:
            return self.shortcut.handle(event)
        if event.is_escape and self.tracker.handle_escape():
            self._render()
            return True
        return False

    async def set_query(self, query: str) -> SourceList | None:
        """Apply a query change and recompute its sections."""
        if not self.enabled:
            return None
        self._set_state(replace(self.state, query=query))
        return await self.refresh_sources(query)

    async def refresh_sources(self, query: str | None = None) -> SourceList | None:
        """Fetch instant hits and compose. Returns None if superseded meanwhile."""
        if not self.enabled:
            return None
        query = self.state.query if query is None else query
        self._cycle += 1
        cycle = self._cycle

        try:
            page = await self.backend.hits(query)
            hits = page.hits
        except BackendError as e:
            logger.warning("Instant search failed for {!r}: {}", query, e)
            hits = []

        if cycle != self._cycle:
            logger.debug("Discarding hits for {!r} (cycle {}, current {})", query, cycle, self._cycle)
            return None

        self._last_hits = (query, hits)
        return self._compose(query, hits)

    async def select(self, section: Section, item: Any) -> str | None:
        """Handle a selection. Returns the URL to navigate to, if any."""
        if not self.enabled:
            return None
        await section.on_select(item)
        if section.keeps_panel_open:
            return None
        self.recent.record(self.state.query)
        self.set_is_open(False)
        return section.item_url(item)

    def submit(self) -> str:
        """Search page URL for the current query."""
        query = self.state.query
        if self.enabled:
            self.recent.record(query)
        return f"{self.config.base_url}{self.config.locale}/search?utf8=✓&query={quote(query, safe='')}"

    async def wait_idle(self) -> None:
        if self.enabled and self.answers is not None:
            await self.answers.wait_idle()

    def close(self) -> None:
        if self.enabled and self.answers is not None:
            self.answers.cancel()

    async def _search_recent(self, query: str) -> None:
        self.set_is_open(True)
        await self.set_query(query)

    def _set_state(self, state: PanelState) -> None:
        prev, self.state = self.state, state
        self._on_state_change(prev, state)

    def _on_state_change(self, prev: PanelState, state: PanelState) -> None:
        self.tracker.sync(state.is_open)

        if self.answers is None or prev.query == state.query:
            return
        self.answers.schedule(state.query)

    def _on_answer(self, candidate: AnswerCandidate) -> None:
        if self._last_hits is None:
            return
        query, hits = self._last_hits
        if query != candidate.query or query != self.state.query:
            return
        self._compose(query, hits)

    def _compose(self, query: str, hits: list[Hit]) -> SourceList:
        candidate = self.answers.current_hit if self.answers else None
        self.sources = self.composer.compose(query, hits, candidate)

        sections: list[Section] = []
        entries = self.recent.suggestions(query)
        if entries:
            sections.append(RecentSearchSection(entries, self._search_recent))
        sections.extend(self.sources)
        self.sections = sections
        self._render()
        return self.sources

    def _render(self) -> None:
        footer = self.templates.footer(self.config.subdomain, self.config.powered_by)
        self.renderer.render(self.sections, self.templates, self.state, footer)

    def _make_sink(self, sink: AnalyticsSink | None) -> AnalyticsSink | None:
        if not self.config.click_analytics:
            return None
        if sink is not None:
            return sink
        return InsightsSink(
            application_id=self.config.application_id,
            api_key=self.config.api_key,
            index_name=self.config.index_name,
            user_token=self.config.user_token or f"anonymous-{secrets.token_hex(8)}",
        )
