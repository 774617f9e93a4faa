"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AutocompleteConfig(Base):
    """Suggestion panel behaviour."""

    enabled: bool = True
    best_article: bool = True
    hits_per_page: int = 5
    input_selector: str = "#query"
    keyboard_shortcut: bool = False
    recent_search_limit: int = 5
    answers_debounce_ms: int = 200


class Config(Base):
    """Root configuration for autosuggest."""

    application_id: str = ""
    api_key: str = ""
    index_prefix: str = "zendesk_"
    subdomain: str = ""
    locale: str = "en-us"
    base_url: str = "/hc/"
    facet_filters: str | None = None
    analytics: bool = True
    click_analytics: bool = False
    debug: bool = False
    powered_by: bool = True
    user_token: str | None = None
    autocomplete: AutocompleteConfig = Field(default_factory=AutocompleteConfig)

    @property
    def index_name(self) -> str:
        return f"{self.index_prefix}{self.subdomain}_articles"

    @property
    def language(self) -> str:
        """Two-letter language tag derived from the locale."""
        return self.locale.split("-")[0]

    @property
    def locale_facet_filters(self) -> str:
        return self.facet_filters or f'["locale.locale:{self.locale}"]'
