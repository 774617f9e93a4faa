"""Suggestion pipeline: answers, composition, recents, analytics and panel state."""

from autosuggest.suggest.analytics import ClickAnnotator, InsightsSink, NullAnalyticsSink
from autosuggest.suggest.answers import AnswerCandidate, AnswerFetcher
from autosuggest.suggest.composer import (
    AnswerSection,
    HitSection,
    NoResultsSection,
    ResultComposer,
    Section,
    SourceList,
)
from autosuggest.suggest.panel import KeyboardShortcut, KeyEvent, PanelStateTracker
from autosuggest.suggest.recent import (
    InMemoryRecentSearchStore,
    JsonRecentSearchStore,
    RecentSearchEntry,
    RecentSearchPolicy,
)
from autosuggest.suggest.widget import Autocomplete, ConfigurationError, PanelState

__all__ = [
    "AnswerCandidate",
    "AnswerFetcher",
    "AnswerSection",
    "Autocomplete",
    "ClickAnnotator",
    "ConfigurationError",
    "HitSection",
    "InMemoryRecentSearchStore",
    "InsightsSink",
    "JsonRecentSearchStore",
    "KeyEvent",
    "KeyboardShortcut",
    "NoResultsSection",
    "NullAnalyticsSink",
    "PanelState",
    "PanelStateTracker",
    "RecentSearchEntry",
    "RecentSearchPolicy",
    "ResultComposer",
    "Section",
    "SourceList",
]
