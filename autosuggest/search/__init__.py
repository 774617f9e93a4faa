"""Search backend access."""

from autosuggest.search.client import BackendError, SearchClient
from autosuggest.search.models import AnswerExtract, Hit, SearchPage

__all__ = ["AnswerExtract", "BackendError", "Hit", "SearchClient", "SearchPage"]
