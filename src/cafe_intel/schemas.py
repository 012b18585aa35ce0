"""
Pydantic schemas for raw provider payloads.

Only the fields the normalizers read are declared; unknown fields are
ignored. A payload that fails validation becomes a ProviderPayloadError.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cafe_intel.errors import ProviderPayloadError


class ProviderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# OpenAI chat completions

class OpenAIMessage(ProviderPayload):
    content: Optional[str] = None


class OpenAIChoice(ProviderPayload):
    message: OpenAIMessage = Field(default_factory=OpenAIMessage)


class OpenAIChatCompletion(ProviderPayload):
    choices: List[OpenAIChoice]


# Gemini generateContent

class GeminiPart(ProviderPayload):
    text: Optional[str] = None


class GeminiContent(ProviderPayload):
    parts: List[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(ProviderPayload):
    content: GeminiContent = Field(default_factory=GeminiContent)


class GeminiResponse(ProviderPayload):
    candidates: List[GeminiCandidate] = Field(default_factory=list)


# VirusTotal v3 URL / file objects

class AnalysisStats(ProviderPayload):
    harmless: int = 0
    malicious: int = 0
    suspicious: int = 0
    undetected: int = 0
    timeout: int = 0


class EngineResult(ProviderPayload):
    category: Optional[str] = None
    result: Optional[str] = None


class VirusTotalAttributes(ProviderPayload):
    last_analysis_stats: AnalysisStats
    last_analysis_results: Dict[str, EngineResult] = Field(default_factory=dict)
    categories: Dict[str, str] = Field(default_factory=dict)
    last_analysis_date: Optional[int] = None


class VirusTotalObject(ProviderPayload):
    attributes: VirusTotalAttributes


class VirusTotalResponse(ProviderPayload):
    data: VirusTotalObject


# AbuseIPDB v2 check

class AbuseReport(ProviderPayload):
    categories: List[int] = Field(default_factory=list)


class AbuseIPData(ProviderPayload):
    abuse_confidence_percentage: int = Field(alias="abuseConfidencePercentage", ge=0, le=100)
    country_code: Optional[str] = Field(default=None, alias="countryCode")
    isp: Optional[str] = None
    reports: List[AbuseReport] = Field(default_factory=list)


class AbuseIPDBResponse(ProviderPayload):
    data: AbuseIPData


# CoinGecko simple/price entry for one coin

class CoinGeckoPrice(ProviderPayload):
    usd: float = Field(ge=0)
    usd_24h_change: Optional[float] = None
    usd_24h_vol: Optional[float] = None
    usd_market_cap: Optional[float] = None


# Etherscan

class EtherscanResult(ProviderPayload):
    """Account module response; status "0" carries an error text in result."""
    status: Optional[str] = None
    message: Optional[str] = None
    result: Any = None


class EtherscanProxyResult(ProviderPayload):
    """JSON-RPC proxy response; result is a hex quantity or data string."""
    result: str


class EtherscanTx(ProviderPayload):
    time_stamp: str = Field(alias="timeStamp")
    hash: Optional[str] = None


class GasOracle(ProviderPayload):
    propose_gas_price: str = Field(alias="ProposeGasPrice")


class BlockTransaction(ProviderPayload):
    hash: str
    from_address: str = Field(alias="from")
    to_address: Optional[str] = Field(default=None, alias="to")
    value: str = "0x0"


class Block(ProviderPayload):
    number: str
    timestamp: str
    transactions: List[Union[BlockTransaction, str]] = Field(default_factory=list)


class EtherscanBlockResult(ProviderPayload):
    result: Block


# Dappier

class DappierSearchHit(ProviderPayload):
    content: Optional[str] = None
    title: Optional[str] = None
    source: Optional[str] = None
    timestamp: Optional[str] = None


class DappierSearchResponse(ProviderPayload):
    results: List[DappierSearchHit] = Field(default_factory=list)


class DappierFeedEntry(ProviderPayload):
    title: Optional[str] = None
    content: Optional[str] = None
    timestamp: Optional[str] = None


class DappierFeedResponse(ProviderPayload):
    feed: List[DappierFeedEntry] = Field(default_factory=list)


SchemaT = TypeVar("SchemaT", bound=ProviderPayload)


def parse_payload(schema: Type[SchemaT], payload: Any, provider: str) -> SchemaT:
    """
    Validate a decoded JSON payload against a provider schema.

    Raises:
        ProviderPayloadError: If the payload does not match
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ProviderPayloadError(
            provider, f"unexpected {schema.__name__} payload: {e.error_count()} error(s)"
        ) from e
