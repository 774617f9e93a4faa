"""Debounced best-answer lookup with last-query-wins acceptance."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from autosuggest.search.client import BackendError
from autosuggest.search.models import Hit, SearchPage

AnswerLookup = Callable[[str, str], Awaitable[SearchPage]]

DEFAULT_DEBOUNCE_S = 0.2


@dataclass(frozen=True, slots=True)
class AnswerCandidate:
    """The best answer (if any) for the query tagged by ``sequence``."""

    query: str
    sequence: int
    hit: Hit | None = None


class AnswerFetcher:
    """
    Fetch at most one best answer per settled query.

    Each ``schedule()`` call bumps a sequence number and replaces any pending
    debounce timer. Once the timer fires the lookup is dispatched and runs to
    completion; its result is written only if its sequence is still the
    latest one, so responses arriving out of order are dropped.
    """

    def __init__(
        self,
        lookup: AnswerLookup,
        *,
        language: str,
        build_url: Callable[[Hit], str],
        delay_s: float = DEFAULT_DEBOUNCE_S,
        on_accept: Callable[[AnswerCandidate], None] | None = None,
    ):
        self._lookup = lookup
        self.language = language
        self._build_url = build_url
        self.delay_s = delay_s
        self._on_accept = on_accept
        self._sequence = 0
        self._query = ""
        self._candidate: AnswerCandidate | None = None
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def query(self) -> str:
        return self._query

    @property
    def candidate(self) -> AnswerCandidate | None:
        """Accepted candidate for the current query, never an older one."""
        candidate = self._candidate
        if candidate is None or candidate.sequence != self._sequence:
            return None
        return candidate

    @property
    def current_hit(self) -> Hit | None:
        candidate = self.candidate
        return candidate.hit if candidate else None

    def schedule(self, query: str) -> None:
        """Register a query change and (re)start the debounce timer."""
        self._sequence += 1
        self._query = query

        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
            logger.debug("Answer lookup debounced, superseded by seq {}", self._sequence)
        self._timer = None

        if not query.strip():
            return

        self._timer = asyncio.create_task(self._dispatch_after_delay(query, self._sequence))

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no lookup is in flight."""
        while True:
            pending = [
                task
                for task in (self._timer, *self._inflight)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def cancel(self) -> None:
        """Drop the pending timer. In-flight lookups finish and go stale."""
        self._sequence += 1
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _dispatch_after_delay(self, query: str, sequence: int) -> None:
        await asyncio.sleep(self.delay_s)
        task = asyncio.create_task(self._run(query, sequence))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, query: str, sequence: int) -> None:
        try:
            page = await self._lookup(query, self.language)
        except BackendError as e:
            logger.warning("Best answer lookup failed for {!r}: {}", query, e)
            page = SearchPage()

        if sequence != self._sequence:
            logger.debug(
                "Discarding answer for {!r} (seq {}, current {})",
                query,
                sequence,
                self._sequence,
            )
            return

        self._candidate = AnswerCandidate(
            query=query,
            sequence=sequence,
            hit=self._annotate(page),
        )
        if self._on_accept:
            self._on_accept(self._candidate)

    def _annotate(self, page: SearchPage) -> Hit | None:
        if not page.hits:
            return None
        hit = page.hits[0]
        if hit.answer is not None and hit.answer.extract_attribute == "body_safe":
            hit.snippet = hit.answer.extract
        hit.position = 0
        hit.url = self._build_url(hit)
        return hit
