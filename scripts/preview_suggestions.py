#!/usr/bin/env python3
"""Run one suggestion cycle against the configured index and print the sections."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

from autosuggest.config.loader import get_data_dir, load_config
from autosuggest.suggest.composer import Section
from autosuggest.suggest.recent import JsonRecentSearchStore
from autosuggest.suggest.widget import Autocomplete, PanelState


class TextTemplates:
    def articles_header(self, title: str, items: list[Any]) -> str:
        return f"== {title} ({len(items)})"

    def answer(self, item: Any) -> str:
        return f"  * {item.title}\n    {item.snippet}\n    {item.url}"

    def article(self, item: Any) -> str:
        return f"  - {item.title}\n    {item.url}"

    def no_results(self, query: str) -> str:
        return f"No results for '{query}'"

    def recent_search(self, item: Any) -> str:
        return f"  ~ {item.query}"

    def footer(self, subdomain: str, powered_by: bool) -> str:
        return f"-- {subdomain}" + (" (search by Algolia)" if powered_by else "")


class PrintRenderer:
    def __init__(self) -> None:
        self.output = ""

    def render(
        self,
        sections: list[Section],
        templates: TextTemplates,
        state: PanelState,
        footer: Any,
    ) -> None:
        lines: list[str] = []
        for section in sections:
            header = section.render_header(templates)
            if header:
                lines.append(header)
            lines.extend(section.render_item(templates, item) for item in section.items)
            empty = section.render_no_results(templates, state.query)
            if empty:
                lines.append(empty)
        lines.append(footer)
        self.output = "\n".join(lines)


async def preview(config_path: Path | None, query: str) -> str:
    config = load_config(config_path)
    renderer = PrintRenderer()
    recent_store = JsonRecentSearchStore(
        get_data_dir() / "recent_searches.json",
        limit=config.autocomplete.recent_search_limit,
    )
    widget = Autocomplete(
        config,
        templates=TextTemplates(),
        renderer=renderer,
        recent_store=recent_store,
    )
    if not widget.enabled:
        return "autocomplete is disabled in this configuration"

    widget.focus()
    await widget.set_query(query)
    await widget.wait_idle()
    return renderer.output


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", help="Query to preview")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    args = parser.parse_args()

    print(asyncio.run(preview(args.config, args.query)))


if __name__ == "__main__":
    main()
