"""
IntelAggregator - the public operation surface of the aggregation layer.
"""

import random
from typing import List, Optional

import httpx

from cafe_intel.assistant import AIAssistant
from cafe_intel.blockchain import BlockchainService
from cafe_intel.config import get_http_timeout
from cafe_intel.context import ErrorReporter, ServiceContext
from cafe_intel.credentials import CredentialRegistry
from cafe_intel.models import (
    AIResponse,
    BlockchainData,
    ChatMessage,
    DappierThreatResult,
    IdentityType,
    FeedItem,
    LiveThreatData,
    ThreatAnalysis,
    Transaction,
    VerificationResult,
    WalletAnalysis,
)
from cafe_intel.ratelimit import RateLimiter
from cafe_intel.threat_intel import ThreatIntelService
from cafe_intel.web_intel import WebIntelService


class IntelAggregator:
    """
    Entry point for callers.

    Every operation resolves with a result of its documented shape whether a
    live provider or a synthetic generator answered. Only CallerInputError
    is raised, for input that is invalid before any provider is tried.

    Args:
        credentials: Provider credentials (default: read once from configuration)
        rate_limiter: Shared admission control (default: a fresh limiter)
        rng: Random source for synthetic data (default: unseeded)
        timeout: Provider HTTP timeout in milliseconds (default: from configuration)
        transport: httpx transport override, e.g. httpx.MockTransport in tests
        reporter: Callback receiving every failed or rate-limited provider attempt
    """

    def __init__(
        self,
        credentials: Optional[CredentialRegistry] = None,
        rate_limiter: Optional[RateLimiter] = None,
        rng: Optional[random.Random] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        reporter: Optional[ErrorReporter] = None,
    ):
        self.context = ServiceContext(
            credentials=credentials if credentials is not None else CredentialRegistry.from_config(),
            rate_limiter=rate_limiter or RateLimiter(),
            rng=rng or random.Random(),
            timeout=timeout if timeout is not None else get_http_timeout(),
            transport=transport,
            reporter=reporter,
        )
        self.assistant = AIAssistant(self.context)
        self.threat_intel = ThreatIntelService(self.context)
        self.blockchain = BlockchainService(self.context)
        self.web_intel = WebIntelService(self.context)

    @property
    def credentials(self) -> CredentialRegistry:
        return self.context.credentials

    # AI assistant

    async def send_message(self, text: str) -> AIResponse:
        return await self.assistant.send_message(text)

    def get_conversation_history(self) -> List[ChatMessage]:
        return self.assistant.get_conversation_history()

    def clear_history(self) -> None:
        self.assistant.clear_history()

    # Threat intelligence

    async def analyze_url(self, url: str) -> ThreatAnalysis:
        return await self.threat_intel.analyze_url(url)

    async def analyze_ip(self, ip: str) -> ThreatAnalysis:
        return await self.threat_intel.analyze_ip(ip)

    async def analyze_email(self, email: str) -> ThreatAnalysis:
        return await self.threat_intel.analyze_email(email)

    async def analyze_file(self, name: str, content: Optional[bytes] = None) -> ThreatAnalysis:
        return await self.threat_intel.analyze_file(name, content)

    async def get_live_threat_data(self) -> LiveThreatData:
        return await self.threat_intel.get_live_threat_data()

    # Blockchain

    async def get_network_data(self, network: str) -> BlockchainData:
        return await self.blockchain.get_network_data(network)

    async def verify_identity(
        self,
        identity_type: IdentityType,
        value: str,
        network: Optional[str] = None,
    ) -> VerificationResult:
        return await self.blockchain.verify_identity(identity_type, value, network)

    async def analyze_wallet(self, address: str, network: str) -> WalletAnalysis:
        return await self.blockchain.analyze_wallet(address, network)

    async def get_recent_transactions(self, network: str, limit: int = 10) -> List[Transaction]:
        return await self.blockchain.get_recent_transactions(network, limit)

    # Web intelligence

    async def search_threats(self, query: str) -> DappierThreatResult:
        return await self.web_intel.search_threats(query)

    async def get_live_threat_feed(self) -> List[FeedItem]:
        return await self.web_intel.get_live_threat_feed()
