"""
Web intelligence - Dappier threat search and live threat feed.
"""

from typing import List

from cafe_intel import synthetic
from cafe_intel.context import ServiceContext, request_json
from cafe_intel.credentials import Provider
from cafe_intel.fallback import ProviderAttempt, attempt_in_order
from cafe_intel.models import DappierThreatResult, FeedItem
from cafe_intel.normalize import normalize_dappier_feed, normalize_dappier_search
from cafe_intel.ratelimit import PROVIDER_LIMITS


DAPPIER_URL = "https://api.dappier.com/app/dataapi/v1"

SEARCH_TERMS = "scam fraud dating romance threat"
SEARCH_LIMIT = 10
SEARCH_SOURCES = ["news", "forums", "social", "security_reports"]
SEARCH_TIMEFRAME = "30d"


class WebIntelService:
    def __init__(self, context: ServiceContext):
        self.context = context

    def _headers(self) -> dict:
        api_key = self.context.credentials.key_for(Provider.DAPPIER)
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _attempt(self, invoke) -> ProviderAttempt:
        return ProviderAttempt(
            name="dappier",
            invoke=invoke,
            provider=Provider.DAPPIER,
            rate_limit=PROVIDER_LIMITS["dappier"],
        )

    async def search_threats(self, query: str) -> DappierThreatResult:
        """
        Recent web reports mentioning a profile or entity alongside scam terms.

        Args:
            query: Profile name, handle or entity

        Returns:
            Threat signals with a clamped 0-100 risk score
        """
        return await attempt_in_order(
            "search_threats",
            [self._attempt(lambda: self._search(query))],
            lambda: synthetic.threat_search(query, self.context.rng),
            context=self.context,
            mock_mode=self.context.credentials.mock_mode.web_intel,
        )

    async def get_live_threat_feed(self) -> List[FeedItem]:
        """Latest threat headlines, at most five."""
        return await attempt_in_order(
            "get_live_threat_feed",
            [self._attempt(self._feed)],
            synthetic.live_feed,
            context=self.context,
            mock_mode=self.context.credentials.mock_mode.web_intel,
        )

    async def _search(self, query: str) -> DappierThreatResult:
        async with self.context.http_client() as client:
            payload = await request_json(
                client,
                "dappier",
                "POST",
                f"{DAPPIER_URL}/search",
                headers=self._headers(),
                json={
                    "query": f"{query} {SEARCH_TERMS}",
                    "limit": SEARCH_LIMIT,
                    "sources": SEARCH_SOURCES,
                    "timeframe": SEARCH_TIMEFRAME,
                },
            )
        return normalize_dappier_search(payload, query)

    async def _feed(self) -> List[FeedItem]:
        async with self.context.http_client() as client:
            payload = await request_json(
                client, "dappier", "GET", f"{DAPPIER_URL}/feed", headers=self._headers()
            )
        return normalize_dappier_feed(payload)
