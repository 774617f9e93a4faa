"""Algolia REST API adapter."""

import json
from typing import Any
from urllib.parse import urlencode

import httpx

from autosuggest.search.models import SearchPage

ANSWER_ATTRIBUTES = ["title", "body_safe"]


def encode_params(params: dict[str, Any]) -> str:
    """Encode search parameters the way the query endpoint expects them."""
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, dict, bool)):
            encoded[key] = json.dumps(value, ensure_ascii=False)
        else:
            encoded[key] = str(value)
    return urlencode(encoded)


async def search_hits(
    *,
    query: str,
    params: dict[str, Any],
    base_url: str,
    index_name: str,
    headers: dict[str, str],
    timeout: float = 10.0,
) -> SearchPage:
    """Run an instant search query and normalize hits."""
    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"{base_url}/1/indexes/{index_name}/query",
            json={"params": encode_params({"query": query, **params})},
            headers=headers,
            timeout=timeout,
        )
        response.raise_for_status()

    return SearchPage.from_dict(response.json())


async def find_answers(
    *,
    query: str,
    language: str,
    params: dict[str, Any],
    base_url: str,
    index_name: str,
    headers: dict[str, str],
    nb_hits: int = 1,
    timeout: float = 10.0,
) -> SearchPage:
    """Ask the answers endpoint for the best extract matching ``query``."""
    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"{base_url}/1/answers/{index_name}/prediction",
            json={
                "query": query,
                "queryLanguages": [language],
                "attributesForPrediction": ANSWER_ATTRIBUTES,
                "nbHits": nb_hits,
                "params": params,
            },
            headers=headers,
            timeout=timeout,
        )
        response.raise_for_status()

    return SearchPage.from_dict(response.json())
