"""
Synthetic generators used when no live provider answers.

Every generator takes a random.Random so output is reproducible under a
seed, performs no I/O, and cannot fail. Values respect the same ranges as
live provider data.
"""

import random
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from cafe_intel.masking import mask_sensitive_value
from cafe_intel.models import (
    AIResponse,
    BlockchainData,
    CategoryCount,
    CountryCount,
    DappierThreatResult,
    EmailAnalysis,
    FeedItem,
    FileAnalysis,
    IdentityType,
    IPAnalysis,
    LiveThreatData,
    ThreatData,
    ThreatItem,
    ThreatSignal,
    ThreatStatistics,
    Transaction,
    URLAnalysis,
    VerificationResult,
    WalletAnalysis,
)
from cafe_intel.normalize import format_large_number
from cafe_intel.scoring import aggregate_threat_risk, calculate_wallet_risk_score


BASE_BLOCK_HEIGHT = 18_500_000
BASE_PRICES = {"ethereum": 2800.0, "bitcoin": 45000.0}
DEFAULT_BASE_PRICE = 1.2

FILE_THREAT_TYPES = ["Trojan", "Adware", "Spyware", "Malware", "PUP", "Ransomware"]
COMMON_EMAIL_DOMAINS = {"gmail.com", "yahoo.com", "outlook.com", "hotmail.com"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def random_hex(rng: random.Random, length: int) -> str:
    return "".join(rng.choice("0123456789abcdef") for _ in range(length))


def random_hash(rng: random.Random) -> str:
    """32-byte hash, 0x-prefixed."""
    return "0x" + random_hex(rng, 64)


def synthetic_block_height(rng: random.Random) -> int:
    return BASE_BLOCK_HEIGHT + rng.randrange(100_000)


def synthetic_gas_price(rng: random.Random) -> int:
    return rng.randrange(50) + 20


# AI assistant

DATING_REPLY = """**Dating Safety Analysis**

Based on your inquiry about dating safety, here are key red flags to watch for:

- **Profile inconsistencies** - Multiple photos that don't match or look professional
- **Too good to be true** - Extremely attractive profiles with minimal information
- **Fast emotional connection** - Professing love very quickly
- **Avoiding video calls** - Always having excuses not to meet or video chat
- **Financial requests** - Any request for money, gifts, or financial information

**Recommended Actions:**
- Always verify identity through video calls
- Do reverse image searches on profile photos
- Check social media presence across platforms
- Meet in public places for first dates
- Trust your instincts - if something feels off, it probably is

Would you like me to analyze a specific profile or conversation for potential red flags?"""

BLOCKCHAIN_REPLY = """**Blockchain Verification Insights**

**Identity Verification:**
- Cryptographic proof of identity authenticity
- Immutable records on distributed ledger
- Multi-network support (Ethereum, Bitcoin, Polygon)

**Trust Score Factors:**
- Historical transaction patterns
- Wallet age and activity
- Cross-platform verification
- Community reputation scores

Would you like to initiate a blockchain verification for a specific identity or wallet address?"""

THREAT_REPLY = """**Threat Intelligence Analysis**

**Current High Priority Threats:**
- Sophisticated phishing campaigns targeting crypto wallets
- AI-generated deepfake romance scams
- Supply chain attacks on open-source packages
- Social engineering via fake tech support

**Protection Strategies:**
- Enable 2FA on all critical accounts
- Use hardware security keys when possible
- Verify sender identity before clicking links
- Keep software and systems updated

Would you like me to analyze a specific URL, email, or file for potential threats?"""

DEFAULT_REPLY = """**Welcome to the OSINT Cafe AI Assistant!**

I can help with:

- **Investigation & Analysis:** dating profile verification, background checks, threat intelligence
- **Blockchain & Crypto:** identity verification, wallet security, transaction monitoring
- **Security & Safety:** phishing detection, malware analysis, privacy protection
- **Education:** cybersecurity best practices, threat awareness, safe online dating

What specific area would you like to explore?"""


def chat_reply(message: str) -> AIResponse:
    """Canned assistant reply chosen by topic keywords."""
    lower = message.lower()

    if any(word in lower for word in ("dating", "romance", "scam")):
        return AIResponse(
            message=DATING_REPLY,
            suggestions=[
                "Upload a profile photo for reverse image analysis",
                "Share conversation screenshots for analysis",
                "Learn about our blockchain verification tools",
            ],
            analysis=ThreatSignal("medium", 85, ["Dating safety inquiry", "Potential scam awareness needed"]),
        )

    if any(word in lower for word in ("blockchain", "crypto", "verification")):
        return AIResponse(
            message=BLOCKCHAIN_REPLY,
            suggestions=[
                "Start a new blockchain verification",
                "Check live network status",
                "View recent verification history",
            ],
            analysis=ThreatSignal("low", 95, ["Blockchain verification inquiry", "Educational request"]),
        )

    if any(word in lower for word in ("threat", "malware", "phishing")):
        return AIResponse(
            message=THREAT_REPLY,
            suggestions=[
                "Submit a URL for threat analysis",
                "Upload a suspicious file for scanning",
                "Check the latest threat intelligence feeds",
            ],
            analysis=ThreatSignal("high", 92, ["Threat intelligence inquiry", "Active threat awareness needed"]),
        )

    return AIResponse(
        message=DEFAULT_REPLY,
        suggestions=[
            "Ask about dating safety verification",
            "Learn about blockchain verification",
            "Explore threat intelligence features",
        ],
        analysis=ThreatSignal("low", 100, ["General inquiry", "Information seeking"]),
    )


# Threat intelligence

def url_analysis(url: str, rng: random.Random) -> URLAnalysis:
    suspicious = "suspicious" in url or rng.random() > 0.8
    return URLAnalysis(
        safe=not suspicious,
        categories=["phishing", "malware"] if suspicious else ["safe"],
        reputation=rng.randrange(30) if suspicious else rng.randrange(30) + 70,
        malware_detected=suspicious and rng.random() > 0.5,
        phishing_detected=suspicious and rng.random() > 0.6,
    )


def ip_analysis(ip: str, rng: random.Random) -> IPAnalysis:
    countries = ["US", "CN", "RU", "DE", "FR", "GB", "JP", "CA"]
    isps = ["CloudFlare", "Amazon", "Google", "Microsoft", "Akamai", "Unknown ISP"]
    threats = ["spam", "scanning", "malware", "botnet"]

    is_threat = rng.random() > 0.7
    return IPAnalysis(
        reputation=rng.randrange(40) if is_threat else rng.randrange(30) + 70,
        country=rng.choice(countries),
        isp=rng.choice(isps),
        threat_types=threats[:rng.randrange(3) + 1] if is_threat else [],
        blacklisted=is_threat and rng.random() > 0.5,
    )


def email_analysis(email: str, rng: random.Random) -> EmailAnalysis:
    domain = email.split("@")[1] if "@" in email else ""
    common = domain.lower() in COMMON_EMAIL_DOMAINS
    return EmailAnalysis(
        safe=common or rng.random() > 0.2,
        disposable=not common and rng.random() > 0.8,
        reputation=rng.randrange(20) + 80 if common else rng.randrange(60) + 20,
        domain=domain,
    )


def file_threat_types(rng: random.Random) -> List[str]:
    return FILE_THREAT_TYPES[:rng.randrange(3)]


def file_analysis(name: str, rng: random.Random) -> FileAnalysis:
    is_threat = "virus" in name.lower() or rng.random() > 0.9
    return FileAnalysis(
        safe=not is_threat,
        detection_ratio=f"{rng.randrange(10) + 5}/70" if is_threat else "0/70",
        threat_types=file_threat_types(rng) if is_threat else [],
        scan_date=_now(),
    )


def live_threat_data(rng: random.Random) -> LiveThreatData:
    """Dashboard snapshot of recent threats and aggregate statistics."""
    now = _now()
    titles = [
        "Cryptocurrency Investment Scam Detected",
        "Phishing Email Campaign Targeting Banks",
        "Malware Distribution via Social Media",
        "Romance Scam on Dating Platform",
        "Tech Support Fraud Phone Calls",
    ]
    recent = [
        ThreatData(
            id=f"threat-{i}",
            type=rng.choice(["scam", "phishing", "malware", "fraud"]),
            title=rng.choice(titles),
            description="Automated threat detection system identified suspicious activity "
                        "matching known attack patterns.",
            severity=rng.choice(["low", "medium", "high", "critical"]),
            timestamp=now - timedelta(milliseconds=rng.random() * 86_400_000),
            source=rng.choice(["VirusTotal", "AbuseIPDB", "OSINT Cafe Community", "AI Analysis"]),
            indicators=["Suspicious domain", "Known malicious IP", "Social engineering tactics"],
        )
        for i in range(10)
    ]

    def category(name: str, base: int, spread: int) -> CategoryCount:
        return CategoryCount(name=name, count=base + rng.randrange(spread), change=rng.randrange(20) - 10)

    return LiveThreatData(
        recent_threats=recent,
        statistics=ThreatStatistics(
            total_threats=1247 + rng.randrange(100),
            blocked_attacks=1189 + rng.randrange(100),
            active_users=8432 + rng.randrange(200),
            global_coverage=99.9,
        ),
        threats_by_category=[
            category("Phishing", 350, 50),
            category("Malware", 280, 40),
            category("Scams", 220, 30),
            category("Fraud", 150, 20),
        ],
        top_countries=[
            CountryCount("United States", 245, "US"),
            CountryCount("China", 198, "CN"),
            CountryCount("Russia", 167, "RU"),
            CountryCount("Germany", 134, "DE"),
            CountryCount("United Kingdom", 123, "GB"),
        ],
    )


# Blockchain

def network_data(network: str, rng: random.Random) -> BlockchainData:
    base_price = BASE_PRICES.get(network, DEFAULT_BASE_PRICE)
    variance = base_price * 0.05
    return BlockchainData(
        price=base_price + (rng.random() - 0.5) * variance,
        change=(rng.random() - 0.5) * 10,
        volume=format_large_number(rng.random() * 50_000_000_000),
        market_cap=format_large_number(rng.random() * 1_000_000_000_000),
        network=network,
        block_height=synthetic_block_height(rng),
        gas_price=synthetic_gas_price(rng) if network == "ethereum" else None,
    )


def verification_result(
    identity_type: IdentityType,
    value: str,
    network: Optional[str],
    rng: random.Random,
) -> VerificationResult:
    return VerificationResult(
        trust_score=rng.randrange(30) + 70,
        blockchain_hash=random_hash(rng),
        network=network or "ethereum",
        block_height=synthetic_block_height(rng),
        timestamp=_now().isoformat(),
        status="verified" if rng.random() > 0.1 else "pending",
        type=identity_type,
        value=mask_sensitive_value(value),
        confidence=rng.randrange(20) + 80,
    )


def format_balance(balance: float, network: str) -> str:
    if network == "ethereum":
        return f"{balance:.4f} ETH"
    if network == "bitcoin":
        return f"{balance / 50:.8f} BTC"
    return f"{balance:.2f} {network.upper()}"


def wallet_analysis(address: str, network: str, rng: random.Random) -> WalletAnalysis:
    now = _now()
    balance = rng.random() * 1000
    transaction_count = rng.randrange(500)
    first_seen = now - timedelta(days=rng.randrange(1000))
    last_activity = max(first_seen, now - timedelta(days=rng.randrange(30)))

    return WalletAnalysis(
        address=address,
        balance=format_balance(balance, network),
        transaction_count=transaction_count,
        first_seen=first_seen,
        last_activity=last_activity,
        risk_score=calculate_wallet_risk_score(transaction_count, balance),
        labels=["Active Wallet", "High Value" if balance > 100 else "Regular User"],
        is_contract=rng.random() > 0.8,
    )


def transactions(limit: int, rng: random.Random) -> List[Transaction]:
    now = _now()
    result = []
    for i in range(limit):
        roll = rng.random()
        if roll > 0.05:
            status = "confirmed"
        else:
            status = "pending" if rng.random() > 0.5 else "failed"
        result.append(Transaction(
            hash=random_hash(rng),
            block=BASE_BLOCK_HEIGHT + rng.randrange(1000) - i,
            from_address="0x" + random_hex(rng, 40),
            to_address="0x" + random_hex(rng, 40),
            value=f"{rng.random() * 10:.6f}",
            timestamp=now - timedelta(minutes=i),
            status=status,
        ))
    return result


# Web intelligence

def threat_search(query: str, rng: random.Random) -> DappierThreatResult:
    """Pattern-based threat signals for a profile or entity name."""
    now = _now()
    lower = query.lower()

    threats = [ThreatItem(
        type="Live Intelligence",
        severity="low",
        description="Web intelligence scan completed",
        source="Dappier Network",
        timestamp=now.isoformat(),
    )]

    if "dating" in lower or "romance" in lower:
        threats.append(ThreatItem(
            type="Romance Scam",
            severity="medium",
            description="Recent reports of romance scam activities detected in web intelligence feeds",
            source="Security Forum",
            timestamp=(now - timedelta(milliseconds=rng.random() * 7 * 86_400_000)).isoformat(),
        ))

    if len(query) < 5:
        threats.append(ThreatItem(
            type="Generic Profile",
            severity="low",
            description="Short profile names often associated with fake accounts",
            source="Pattern Analysis",
            timestamp=now.isoformat(),
        ))

    if re.search(r"\d{3,}", query):
        threats.append(ThreatItem(
            type="Suspicious Pattern",
            severity="medium",
            description="Number patterns in profiles may indicate automated account creation",
            source="Behavioral Analysis",
            timestamp=now.isoformat(),
        ))

    severities = [threat.severity for threat in threats]

    surge_signals = 0
    if rng.random() > 0.7:
        threats.append(ThreatItem(
            type="Current Threat",
            severity="high",
            description="Recent surge in romance scam activities reported across multiple platforms",
            source="Threat Intelligence",
            timestamp=now.isoformat(),
        ))
        surge_signals = 1

    risk_score = aggregate_threat_risk(severities, surge_signals=surge_signals)
    return DappierThreatResult(
        threats=threats,
        risk_score=risk_score,
        summary=f"Dappier Intelligence: {len(threats)} signals detected (Risk: {risk_score}/100)",
    )




SIMULATED_FEED = [
    ("New romance scam pattern targeting social media users", "high", 30, "Romance Scam"),
    ("Increased phishing attempts via dating apps reported", "medium", 120, "Phishing Attack"),
    ("Security researchers identify new deepfake techniques", "medium", 240, "Technology Threat"),
    ("Dappier intelligence network expanded with new sources", "low", 360, "System Update"),
]


def live_feed() -> List[FeedItem]:
    """Fixed headline feed, timestamped relative to now."""
    now = _now()
    return [
        FeedItem(
            id=f"feed-{index}",
            title=title,
            severity=severity,
            timestamp=(now - timedelta(minutes=minutes_ago)).isoformat(),
            category=category,
        )
        for index, (title, severity, minutes_ago, category) in enumerate(SIMULATED_FEED, start=1)
    ]
