"""
Domain result shapes returned by the public operations.

Live and synthetic paths produce the same dataclasses with the same range
invariants, so callers cannot tell which one answered.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional


ThreatLevel = Literal["low", "medium", "high", "critical"]
Severity = Literal["low", "medium", "high"]
VerificationStatus = Literal["verified", "pending", "failed"]
TransactionStatus = Literal["confirmed", "pending", "failed"]
IdentityType = Literal["email", "phone", "social", "wallet"]


@dataclass
class ThreatSignal:
    """Keyword or provider derived threat assessment"""
    threat_level: ThreatLevel
    confidence: int  # 0-100
    indicators: List[str] = field(default_factory=list)


@dataclass
class AIResponse:
    """Reply from the AI assistant"""
    message: str
    suggestions: List[str] = field(default_factory=list)  # at most 3 on live replies
    analysis: Optional[ThreatSignal] = None


@dataclass
class ChatMessage:
    """One turn of assistant conversation history"""
    id: str
    content: str
    role: Literal["user", "assistant"]
    timestamp: datetime


@dataclass
class URLAnalysis:
    safe: bool
    categories: List[str]
    reputation: int  # 0-100
    malware_detected: bool
    phishing_detected: bool


@dataclass
class IPAnalysis:
    reputation: int  # 0-100
    country: str
    isp: str
    threat_types: List[str]
    blacklisted: bool


@dataclass
class EmailAnalysis:
    safe: bool
    disposable: bool
    reputation: int  # 0-100
    domain: str


@dataclass
class FileAnalysis:
    safe: bool
    detection_ratio: str  # "<detections>/<engines>"
    threat_types: List[str]
    scan_date: datetime


@dataclass
class ThreatAnalysis:
    """At most one field is set: the one matching the analyzed input kind"""
    url: Optional[URLAnalysis] = None
    ip: Optional[IPAnalysis] = None
    email: Optional[EmailAnalysis] = None
    file: Optional[FileAnalysis] = None


@dataclass
class BlockchainData:
    price: float  # >= 0
    change: float  # signed percent over 24h
    volume: str
    market_cap: str
    network: str
    block_height: int  # >= 0
    gas_price: Optional[int] = None  # gwei, ethereum only


@dataclass
class VerificationResult:
    trust_score: int  # 0-100
    blockchain_hash: str  # "0x" + 64 hex chars
    network: str
    block_height: int
    timestamp: str  # ISO-8601
    status: VerificationStatus
    type: IdentityType
    value: str  # always masked
    confidence: int  # 0-100


@dataclass
class WalletAnalysis:
    address: str
    balance: str
    transaction_count: int
    first_seen: datetime  # <= last_activity
    last_activity: datetime
    risk_score: int  # 0-100
    labels: List[str]
    is_contract: bool


@dataclass
class Transaction:
    hash: str
    block: int
    from_address: str
    to_address: str
    value: str
    timestamp: datetime
    status: TransactionStatus


@dataclass
class ThreatItem:
    """One web-intelligence threat signal"""
    type: str
    severity: Severity
    description: str
    source: str
    timestamp: str


@dataclass
class DappierThreatResult:
    threats: List[ThreatItem]
    risk_score: int  # 0-100, clamped
    summary: str


@dataclass
class FeedItem:
    id: str
    title: str
    severity: Severity
    timestamp: str
    category: str


@dataclass
class ThreatData:
    """Dashboard entry for a recently observed threat"""
    id: str
    type: Literal["scam", "phishing", "malware", "fraud"]
    title: str
    description: str
    severity: ThreatLevel
    timestamp: datetime
    source: str
    indicators: List[str]


@dataclass
class ThreatStatistics:
    total_threats: int
    blocked_attacks: int
    active_users: int
    global_coverage: float


@dataclass
class CategoryCount:
    name: str
    count: int
    change: int


@dataclass
class CountryCount:
    country: str
    threats: int
    flag: str


@dataclass
class LiveThreatData:
    recent_threats: List[ThreatData]
    statistics: ThreatStatistics
    threats_by_category: List[CategoryCount]
    top_countries: List[CountryCount]
