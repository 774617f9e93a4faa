import asyncio
from dataclasses import dataclass

import pytest

from autosuggest.config.schema import AutocompleteConfig, Config
from autosuggest.search.client import BackendError
from autosuggest.search.models import AnswerExtract, Hit, SearchPage
from autosuggest.suggest.composer import AnswerSection, NoResultsSection
from autosuggest.suggest.panel import KeyEvent
from autosuggest.suggest.recent import InMemoryRecentSearchStore, RecentSearchSection
from autosuggest.suggest.widget import Autocomplete, ConfigurationError, PanelState


@dataclass
class FakeNode:
    tag_name: str
    parent: "FakeNode | None" = None


class FakeHost:
    def __init__(self, inputs: list[FakeNode]):
        self.inputs = inputs
        self.replaced: list[FakeNode] = []

    def select_all(self, selector: str) -> list[FakeNode]:
        return self.inputs

    def replace_with_container(self, form: FakeNode) -> str:
        self.replaced.append(form)
        return "container"


class Templates:
    def articles_header(self, title, items):
        return title

    def answer(self, item):
        return item.object_id

    def article(self, item):
        return item.object_id

    def no_results(self, query):
        return f"no results for {query}"

    def recent_search(self, item):
        return item.query

    def footer(self, subdomain, powered_by):
        return subdomain


class RecordingRenderer:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def render(self, sections, templates, state, footer) -> None:
        self.calls.append(([section.source_id for section in sections], state, footer))


class StubBackend:
    def __init__(self, hits: dict[str, list[Hit]] | None = None, answers: dict[str, list[Hit]] | None = None):
        self._hits = hits or {}
        self._answers = answers or {}
        self.hit_queries: list[str] = []
        self.answer_queries: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}

    async def hits(self, query: str) -> SearchPage:
        self.hit_queries.append(query)
        if query in self.gates:
            await self.gates[query].wait()
        return SearchPage(hits=list(self._hits.get(query, [])), query_id=f"qid-{query}")

    async def answers(self, query: str, language: str) -> SearchPage:
        self.answer_queries.append(query)
        return SearchPage(hits=list(self._answers.get(query, [])), query_id=f"ans-{query}")


def _hit(object_id: str, category: str = "General", section: str = "FAQ", **kwargs) -> Hit:
    return Hit(
        object_id=object_id,
        article_id=f"a{object_id}",
        title=f"Article {object_id}",
        category_title=category,
        section_title=section,
        **kwargs,
    )


def _config(**autocomplete) -> Config:
    return Config(
        application_id="APPID",
        api_key="key",
        subdomain="acme",
        base_url="https://help.acme.test/hc/",
        locale="en-us",
        autocomplete=AutocompleteConfig(answers_debounce_ms=1, **autocomplete),
    )


def _widget(backend: StubBackend, **autocomplete) -> tuple[Autocomplete, RecordingRenderer]:
    renderer = RecordingRenderer()
    widget = Autocomplete(
        _config(**autocomplete),
        templates=Templates(),
        renderer=renderer,
        backend=backend,
    )
    return widget, renderer


def test_mount_rejects_missing_or_ambiguous_input() -> None:
    widget, _ = _widget(StubBackend())

    with pytest.raises(ConfigurationError, match="Couldn't find any input"):
        widget.mount(FakeHost([]))
    with pytest.raises(ConfigurationError, match=r"Too many inputs \(2\)"):
        widget.mount(FakeHost([FakeNode("INPUT"), FakeNode("INPUT")]))

    orphan = FakeHost([FakeNode("INPUT", parent=FakeNode("DIV"))])
    with pytest.raises(ConfigurationError, match="parent container"):
        widget.mount(orphan)
    assert orphan.replaced == []


def test_mount_replaces_enclosing_form() -> None:
    form = FakeNode("form")
    host = FakeHost([FakeNode("INPUT", parent=FakeNode("DIV", parent=form))])
    widget, _ = _widget(StubBackend())

    assert widget.mount(host) == "container"
    assert host.replaced == [form]


@pytest.mark.asyncio
async def test_query_cycle_merges_best_answer_and_dedupes() -> None:
    best = _hit("2", "Billing", "Refunds", answer=AnswerExtract("Refunds take 5 days", "body_safe"))
    backend = StubBackend(
        hits={"refund": [_hit("1", "Billing", "Invoices"), _hit("2", "Billing", "Refunds"), _hit("3", "Billing", "Invoices")]},
        answers={"refund": [best]},
    )
    widget, renderer = _widget(backend)

    first = await widget.set_query("refund")
    assert first.answer.items == []
    assert [section.title for section in first.grouped] == ["Billing - Invoices", "Billing - Refunds"]

    await widget.wait_idle()

    sources = widget.sources
    assert sources.answer.items[0].object_id == "2"
    assert sources.answer.items[0].snippet == "Refunds take 5 days"
    assert sources.answer.items[0].url == "https://help.acme.test/hc/en-us/articles/a2"
    assert [section.title for section in sources.grouped] == ["Billing - Invoices"]
    assert backend.hit_queries == ["refund"]
    assert backend.answer_queries == ["refund"]
    assert renderer.calls[-1][0] == ["Answers", "Billing - Invoices"]
    assert renderer.calls[-1][2] == "acme"


@pytest.mark.asyncio
async def test_stale_hit_response_never_overwrites_newer_query() -> None:
    backend = StubBackend(hits={"a": [_hit("old")], "ab": [_hit("new")]})
    backend.gates = {"a": asyncio.Event(), "ab": asyncio.Event()}
    widget, _ = _widget(backend, best_article=False)

    older = asyncio.create_task(widget.set_query("a"))
    await asyncio.sleep(0)
    newer = asyncio.create_task(widget.set_query("ab"))
    await asyncio.sleep(0)

    backend.gates["ab"].set()
    assert (await newer).query == "ab"
    backend.gates["a"].set()
    assert await older is None

    assert widget.sources.query == "ab"
    assert widget.sources.grouped[0].items[0].object_id == "new"


@pytest.mark.asyncio
async def test_backend_failure_degrades_to_no_results() -> None:
    class FailingBackend(StubBackend):
        async def hits(self, query: str) -> SearchPage:
            raise BackendError("down")

    widget, renderer = _widget(FailingBackend(), best_article=False)

    sources = await widget.set_query("anything")

    assert sources.is_no_results
    assert isinstance(widget.sections[0], NoResultsSection)
    assert renderer.calls[-1][0] == ["NoResults"]


@pytest.mark.asyncio
async def test_selecting_hit_closes_panel_and_records_query() -> None:
    store = InMemoryRecentSearchStore()
    backend = StubBackend(hits={"invoice": [_hit("1")]})
    renderer = RecordingRenderer()
    widget = Autocomplete(
        _config(best_article=False),
        templates=Templates(),
        renderer=renderer,
        backend=backend,
        recent_store=store,
    )
    widget.focus()
    sources = await widget.set_query("invoice")

    section = sources.grouped[0]
    url = await widget.select(section, section.items[0])

    assert url == "https://help.acme.test/hc/en-us/articles/a1"
    assert widget.is_open is False
    assert [entry.query for entry in store.items()] == ["invoice"]


@pytest.mark.asyncio
async def test_selecting_recent_search_keeps_panel_open_and_searches() -> None:
    store = InMemoryRecentSearchStore()
    store.add("refund policy")
    backend = StubBackend(hits={"refund policy": [_hit("9")]})
    widget = Autocomplete(
        _config(best_article=False),
        templates=Templates(),
        renderer=RecordingRenderer(),
        backend=backend,
        recent_store=store,
    )
    widget.focus()
    await widget.set_query("")

    recent = widget.sections[0]
    assert isinstance(recent, RecentSearchSection)
    assert isinstance(widget.sections[1], NoResultsSection)

    url = await widget.select(recent, recent.items[0])

    assert url is None
    assert widget.is_open is True
    assert widget.state.query == "refund policy"
    assert backend.hit_queries == ["", "refund policy"]
    assert isinstance(widget.sections[0], AnswerSection)


@pytest.mark.asyncio
async def test_keyboard_shortcut_mirrors_panel_state() -> None:
    widget, renderer = _widget(StubBackend(), keyboard_shortcut=True)

    assert widget.handle_key(KeyEvent(key="k", meta=True)) is True
    assert widget.is_open is True
    assert widget.state.is_open is True
    assert renderer.calls[-1][1].is_open is True

    assert widget.handle_key(KeyEvent(key_code=27)) is True
    assert widget.is_open is False
    assert widget.state.is_open is False
    assert widget.handle_key(KeyEvent(key_code=27)) is False


def test_keyboard_shortcut_disabled_by_default() -> None:
    widget, _ = _widget(StubBackend())

    assert widget.handle_key(KeyEvent(key="k", ctrl=True)) is False
    assert widget.is_open is False


def test_submit_builds_search_page_url() -> None:
    widget, _ = _widget(StubBackend())
    widget.state = PanelState(query="reset password")

    assert widget.submit() == (
        "https://help.acme.test/hc/en-us/search?utf8=✓&query=reset%20password"
    )


@pytest.mark.asyncio
async def test_disabled_widget_does_nothing() -> None:
    backend = StubBackend()
    widget, renderer = _widget(backend, enabled=False)

    assert widget.mount(FakeHost([])) is None
    assert await widget.set_query("anything") is None
    assert backend.hit_queries == []
    assert renderer.calls == []


def test_dismiss_closes_panel_unless_debugging() -> None:
    widget, _ = _widget(StubBackend())
    widget.focus()
    widget.dismiss()
    assert widget.is_open is False

    debug_widget = Autocomplete(
        _config().model_copy(update={"debug": True}),
        templates=Templates(),
        renderer=RecordingRenderer(),
        backend=StubBackend(),
    )
    debug_widget.focus()
    debug_widget.dismiss()
    assert debug_widget.is_open is True


def test_translations_feed_placeholder_and_answer_title() -> None:
    labels = {"placeholder": "Rechercher", "bestAnswer": "Meilleure réponse"}
    widget = Autocomplete(
        _config(),
        templates=Templates(),
        renderer=RecordingRenderer(),
        backend=StubBackend(),
        translate=lambda key: labels.get(key, key),
    )

    assert widget.placeholder == "Rechercher"
    assert widget.composer.answer_title == "Meilleure réponse"


def test_escape_closes_panel_without_keyboard_shortcut() -> None:
    widget, renderer = _widget(StubBackend())
    widget.focus()

    assert widget.handle_key(KeyEvent(key="Escape", key_code=27)) is True
    assert widget.is_open is False
    assert widget.state.is_open is False
    assert renderer.calls[-1][1].is_open is False
    assert widget.handle_key(KeyEvent(key="Escape", key_code=27)) is False


@pytest.mark.asyncio
async def test_refresh_sources_on_disabled_widget_returns_none() -> None:
    backend = StubBackend()
    widget, _ = _widget(backend, enabled=False)

    assert await widget.refresh_sources("anything") is None
    assert backend.hit_queries == []
