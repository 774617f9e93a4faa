"""Click-conversion tracking for selected hits."""

from __future__ import annotations

from typing import Protocol

import httpx
from loguru import logger

from autosuggest.search.models import Hit

INSIGHTS_URL = "https://insights.algolia.io/1/events"
CLICK_EVENT_NAME = "Article Clicked"


class AnalyticsSink(Protocol):
    """Receives (hit id, position, query id) triples on selection."""

    async def send_click(self, *, object_id: str, position: int, query_id: str) -> None: ...


class NullAnalyticsSink:
    """Sink used when click analytics is disabled."""

    async def send_click(self, *, object_id: str, position: int, query_id: str) -> None:
        return None


class InsightsSink:
    """Post click-after-search events to the Insights API."""

    def __init__(
        self,
        *,
        application_id: str,
        api_key: str,
        index_name: str,
        user_token: str,
        url: str = INSIGHTS_URL,
    ):
        self.application_id = application_id
        self.api_key = api_key
        self.index_name = index_name
        self.user_token = user_token
        self.url = url

    def build_event(self, *, object_id: str, position: int, query_id: str) -> dict:
        # Insights positions are 1-based; hit positions are 0-based.
        return {
            "eventType": "click",
            "eventName": CLICK_EVENT_NAME,
            "index": self.index_name,
            "userToken": self.user_token,
            "objectIDs": [object_id],
            "positions": [position + 1],
            "queryID": query_id,
        }

    async def send_click(self, *, object_id: str, position: int, query_id: str) -> None:
        event = self.build_event(object_id=object_id, position=position, query_id=query_id)
        async with httpx.AsyncClient() as client:
            response = await client.post(
                self.url,
                json={"events": [event]},
                headers={
                    "X-Algolia-Application-Id": self.application_id,
                    "X-Algolia-API-Key": self.api_key,
                },
                timeout=5.0,
            )
            response.raise_for_status()


class ClickAnnotator:
    """Forward a selected hit's tracking identifiers to the analytics sink.

    Position and query id are read from the hit as assigned when it was built.
    Sink failures are logged and never reach the selection path.
    """

    def __init__(self, sink: AnalyticsSink | None = None):
        self.sink = sink or NullAnalyticsSink()

    @property
    def enabled(self) -> bool:
        return not isinstance(self.sink, NullAnalyticsSink)

    async def track_click(self, hit: Hit) -> bool:
        if not self.enabled:
            return False
        if hit.position is None or not hit.query_id:
            logger.debug("Hit {} has no tracking identifiers, click not sent", hit.object_id)
            return False
        try:
            await self.sink.send_click(
                object_id=hit.object_id,
                position=hit.position,
                query_id=hit.query_id,
            )
        except Exception as e:
            logger.warning("Click tracking failed for {}: {}", hit.object_id, e)
            return False
        return True
