"""Search client bound to one help-center article index."""

from typing import Any

from autosuggest import __version__
from autosuggest.config.schema import Config
from autosuggest.search.algolia import find_answers, search_hits
from autosuggest.search.models import SearchPage


class BackendError(Exception):
    """Raised when the search backend or a recent-search store fails."""


class SearchClient:
    """Issues instant-hit and answer-extraction requests for a configured index."""

    def __init__(self, config: Config, base_url: str | None = None):
        self.config = config
        self.base_url = (base_url or f"https://{config.application_id}-dsn.algolia.net").rstrip("/")

    @property
    def index_name(self) -> str:
        return self.config.index_name

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-Algolia-Application-Id": self.config.application_id,
            "X-Algolia-API-Key": self.config.api_key,
            "X-Algolia-Agent": f"Autosuggest Integration ({__version__})",
        }

    def hit_params(self) -> dict[str, Any]:
        """Parameters for the fast per-keystroke query."""
        cfg = self.config
        return {
            "analytics": cfg.analytics,
            "hitsPerPage": cfg.autocomplete.hits_per_page,
            "facetFilters": cfg.locale_facet_filters,
            "attributesToSnippet": ["body_safe:30"],
            "snippetEllipsisText": "…",
            "clickAnalytics": cfg.click_analytics,
            "queryLanguages": [cfg.language],
            "removeStopWords": True,
            "ignorePlurals": True,
        }

    def answer_params(self) -> dict[str, Any]:
        return {
            "facetFilters": self.config.locale_facet_filters,
            "clickAnalytics": self.config.click_analytics,
        }

    async def hits(self, query: str) -> SearchPage:
        """Fetch instant hits for ``query``."""
        self._ensure_credentials()
        try:
            return await search_hits(
                query=query,
                params=self.hit_params(),
                base_url=self.base_url,
                index_name=self.index_name,
                headers=self.headers,
            )
        except Exception as e:
            raise BackendError(f"hit search failed for {query!r}: {e}") from e

    async def answers(self, query: str, language: str | None = None) -> SearchPage:
        """Fetch the best-answer candidates for ``query``."""
        self._ensure_credentials()
        try:
            return await find_answers(
                query=query,
                language=language or self.config.language,
                params=self.answer_params(),
                base_url=self.base_url,
                index_name=self.index_name,
                headers=self.headers,
            )
        except Exception as e:
            raise BackendError(f"answer extraction failed for {query!r}: {e}") from e

    def _ensure_credentials(self) -> None:
        if not self.config.application_id or not self.config.api_key:
            raise BackendError(
                "search backend not configured (set applicationId and apiKey)"
            )
