"""Shared search models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger


@dataclass(slots=True)
class AnswerExtract:
    """Extracted answer attached to a hit by the answers endpoint."""

    extract: str
    extract_attribute: str
    score: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnswerExtract":
        return cls(
            extract=str(data.get("extract", "")),
            extract_attribute=str(data.get("extractAttribute", "")),
            score=float(data.get("score", 0.0) or 0.0),
        )


@dataclass(slots=True)
class Hit:
    """Normalized article hit.

    ``url``, ``position`` and ``query_id`` start empty and are each filled by
    exactly one stage: the backend page sets ``query_id``, and the answer
    fetcher (best answers) or the composer (grouped hits) sets ``url`` and
    ``position``.
    """

    object_id: str
    article_id: str
    title: str
    category_title: str
    section_title: str
    snippet: str = ""
    answer: AnswerExtract | None = None
    url: str | None = None
    position: int | None = None
    query_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, query_id: str | None = None) -> "Hit":
        if not isinstance(data, dict):
            raise ValueError("hit must be an object")

        object_id = str(data.get("objectID", "")).strip()
        if not object_id:
            raise ValueError("hit objectID is required")

        category = data.get("category") or {}
        section = data.get("section") or {}
        snippet_result = (data.get("_snippetResult") or {}).get("body_safe") or {}
        answer_raw = data.get("_answer")

        return cls(
            object_id=object_id,
            article_id=str(data.get("id", object_id)),
            title=str(data.get("title", "")),
            category_title=str(category.get("title", "")),
            section_title=str(section.get("title", "")),
            snippet=str(snippet_result.get("value", "")),
            answer=AnswerExtract.from_dict(answer_raw) if isinstance(answer_raw, dict) else None,
            query_id=query_id,
            raw=data,
        )


@dataclass(slots=True)
class SearchPage:
    """One backend response: hits plus the per-query tracking identifier."""

    hits: list[Hit] = field(default_factory=list)
    query_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchPage":
        if not isinstance(data, dict):
            raise ValueError("search response must be an object")
        raw_hits = data.get("hits", [])
        if not isinstance(raw_hits, list):
            raise ValueError("hits must be an array")
        query_id = data.get("queryID")
        query_id = str(query_id) if query_id else None
        hits: list[Hit] = []
        for item in raw_hits:
            try:
                hits.append(Hit.from_dict(item, query_id=query_id))
            except ValueError as e:
                logger.debug("Skipping malformed hit: {}", e)
        return cls(hits=hits, query_id=query_id)
