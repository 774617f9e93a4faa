import copy
import json

from autosuggest.config.loader import _migrate_config, load_config, save_config
from autosuggest.config.schema import Config


def test_migrate_moves_legacy_panel_options_under_autocomplete() -> None:
    raw = {"bestArticle": False, "hitsPerPage": 8, "autocomplete": {"enabled": True}}

    migrated = _migrate_config(copy.deepcopy(raw))

    assert "bestArticle" not in migrated
    assert migrated["autocomplete"] == {"enabled": True, "bestArticle": False, "hitsPerPage": 8}


def test_migrate_does_not_override_new_autocomplete_keys() -> None:
    raw = {"hitsPerPage": 8, "autocomplete": {"hitsPerPage": 3}}

    migrated = _migrate_config(copy.deepcopy(raw))

    assert migrated["autocomplete"]["hitsPerPage"] == 3


def test_migrate_recent_searches_limit_and_base_url() -> None:
    raw = {"recentSearches": {"limit": 7}, "baseUrl": "https://help.acme.test/hc"}

    migrated = _migrate_config(copy.deepcopy(raw))

    assert migrated["autocomplete"]["recentSearchLimit"] == 7
    assert migrated["baseUrl"] == "https://help.acme.test/hc/"


def test_load_config_reads_camel_case_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "applicationId": "APPID",
                "locale": "pt-br",
                "clickAnalytics": True,
                "autocomplete": {"keyboardShortcut": True, "answersDebounceMs": 300},
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.application_id == "APPID"
    assert config.language == "pt"
    assert config.locale_facet_filters == '["locale.locale:pt-br"]'
    assert config.click_analytics is True
    assert config.autocomplete.keyboard_shortcut is True
    assert config.autocomplete.answers_debounce_ms == 300


def test_load_config_falls_back_to_defaults_on_invalid_json(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")

    assert load_config(path) == Config()


def test_save_config_writes_aliases(tmp_path) -> None:
    path = tmp_path / "nested" / "config.json"
    save_config(Config(subdomain="acme"), path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["subdomain"] == "acme"
    assert data["autocomplete"]["recentSearchLimit"] == 5
    assert load_config(path).index_name == "zendesk_acme_articles"
