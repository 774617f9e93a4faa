"""Merge instant hits and the best answer into ordered sections."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Protocol

from autosuggest.search.models import Hit

if TYPE_CHECKING:
    from autosuggest.suggest.analytics import ClickAnnotator

ANSWERS_SOURCE_ID = "Answers"
NO_RESULTS_SOURCE_ID = "NoResults"


class Templates(Protocol):
    """Rendering hooks supplied by the host page."""

    def articles_header(self, title: str, items: list[Any]) -> Any: ...

    def answer(self, item: Hit) -> Any: ...

    def article(self, item: Hit) -> Any: ...

    def no_results(self, query: str) -> Any: ...

    def recent_search(self, item: Any) -> Any: ...

    def footer(self, subdomain: str, powered_by: bool) -> Any: ...


class Section:
    """A named, ordered bucket of items with its rendering hooks."""

    source_id: str = ""
    keeps_panel_open = False

    def __init__(self, items: list[Any] | None = None):
        self.items: list[Any] = list(items or [])

    def render_header(self, templates: Templates) -> Any:
        return None

    def render_item(self, templates: Templates, item: Any) -> Any:
        return None

    def render_no_results(self, templates: Templates, query: str) -> Any:
        return None

    def item_url(self, item: Any) -> str | None:
        return None

    async def on_select(self, item: Any) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_id!r}, items={len(self.items)})"


class _TrackedSection(Section):
    def __init__(self, items: list[Hit], annotator: "ClickAnnotator | None" = None):
        super().__init__(items)
        self._annotator = annotator

    def item_url(self, item: Hit) -> str | None:
        return item.url

    async def on_select(self, item: Hit) -> None:
        if self._annotator is not None:
            await self._annotator.track_click(item)


class AnswerSection(_TrackedSection):
    """Best answer, always the first section. Header hidden when empty."""

    source_id = ANSWERS_SOURCE_ID

    def __init__(self, items: list[Hit], title: str, annotator: "ClickAnnotator | None" = None):
        super().__init__(items, annotator)
        self.title = title

    def render_header(self, templates: Templates) -> Any:
        if not self.items:
            return None
        return templates.articles_header(self.title, self.items)

    def render_item(self, templates: Templates, item: Hit) -> Any:
        return templates.answer(item)


class HitSection(_TrackedSection):
    """Hits sharing one category and section."""

    def __init__(self, title: str, items: list[Hit], annotator: "ClickAnnotator | None" = None):
        super().__init__(items, annotator)
        self.title = title
        self.source_id = title

    def render_header(self, templates: Templates) -> Any:
        return templates.articles_header(self.title, self.items)

    def render_item(self, templates: Templates, item: Hit) -> Any:
        return templates.article(item)


class NoResultsSection(Section):
    """Item-less pseudo-section that only triggers the no-results hook."""

    source_id = NO_RESULTS_SOURCE_ID

    def __init__(self):
        super().__init__([])

    def render_no_results(self, templates: Templates, query: str) -> Any:
        return templates.no_results(query)


@dataclass(slots=True)
class SourceList:
    """Ordered sections produced for one query."""

    query: str
    sections: list[Section] = field(default_factory=list)

    def __iter__(self) -> Iterator[Section]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    @property
    def is_no_results(self) -> bool:
        return len(self.sections) == 1 and isinstance(self.sections[0], NoResultsSection)

    @property
    def answer(self) -> AnswerSection | None:
        if self.sections and isinstance(self.sections[0], AnswerSection):
            return self.sections[0]
        return None

    @property
    def grouped(self) -> list[HitSection]:
        return [section for section in self.sections if isinstance(section, HitSection)]


class ResultComposer:
    """Build the SourceList from raw hits and the current best answer."""

    def __init__(
        self,
        *,
        build_url: Callable[[Hit], str],
        annotator: "ClickAnnotator | None" = None,
        answer_title: str = "Best answer",
    ):
        self._build_url = build_url
        self._annotator = annotator
        self.answer_title = answer_title

    def compose(self, query: str, hits: list[Hit], candidate: Hit | None = None) -> SourceList:
        if candidate is not None:
            hits = [hit for hit in hits if hit.object_id != candidate.object_id]

        if candidate is None and not hits:
            return SourceList(query=query, sections=[NoResultsSection()])

        groups: dict[tuple[str, str], list[Hit]] = {}
        for hit in hits:
            groups.setdefault((hit.category_title, hit.section_title), []).append(hit)

        sections: list[Section] = [
            AnswerSection(
                [candidate] if candidate is not None else [],
                self.answer_title,
                self._annotator,
            )
        ]
        for (category_title, section_title), members in groups.items():
            sections.append(
                HitSection(
                    f"{category_title} - {section_title}",
                    [self._annotate(hit, position) for position, hit in enumerate(members)],
                    self._annotator,
                )
            )
        return SourceList(query=query, sections=sections)

    def _annotate(self, hit: Hit, position: int) -> Hit:
        return replace(hit, url=self._build_url(hit), position=position)
