"""
Provider adapters: validated raw JSON -> domain result shapes.

Every adapter validates through a schema first, so a missing or mistyped
field surfaces as ProviderPayloadError instead of leaking into a result.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from cafe_intel.errors import ProviderPayloadError
from cafe_intel.models import (
    BlockchainData,
    DappierThreatResult,
    FeedItem,
    FileAnalysis,
    IPAnalysis,
    ThreatItem,
    Transaction,
    URLAnalysis,
    WalletAnalysis,
)
from cafe_intel.schemas import (
    AbuseIPDBResponse,
    CoinGeckoPrice,
    DappierFeedResponse,
    DappierSearchResponse,
    EtherscanBlockResult,
    EtherscanProxyResult,
    EtherscanResult,
    EtherscanTx,
    GasOracle,
    GeminiResponse,
    OpenAIChatCompletion,
    VirusTotalResponse,
    parse_payload,
)
from cafe_intel.scoring import (
    assess_threat_severity,
    calculate_reputation,
    calculate_wallet_risk_score,
    categorize_threat,
    generate_wallet_labels,
    score_search_results,
)


FALLBACK_AI_MESSAGE = "I apologize, but I couldn't generate a proper response."

WEI_DECIMALS = 18
BLOCKED_IP_THRESHOLD = 75  # abuse confidence above this counts as blacklisted
FEED_LIMIT = 5
HEX_BYTES = re.compile(r"0x[0-9a-fA-F]*")

# AbuseIPDB report category ids
ABUSEIPDB_CATEGORIES = {
    1: "DNS Compromise", 2: "DNS Poisoning", 3: "Fraud Orders", 4: "DDoS Attack",
    5: "FTP Brute-Force", 6: "Ping of Death", 7: "Phishing", 8: "Fraud VoIP",
    9: "Open Proxy", 10: "Web Spam", 11: "Email Spam", 12: "Blog Spam",
    13: "VPN IP", 14: "Port Scan", 15: "Hacking", 16: "SQL Injection",
    17: "Spoofing", 18: "Brute-Force", 19: "Bad Web Bot", 20: "Exploited Host",
    21: "Web App Attack", 22: "SSH", 23: "IoT Targeted",
}


def format_large_number(num: float) -> str:
    """
    Compact currency/volume formatting.

    >= 1e9 -> "1.2B", >= 1e6 -> "3.4M", >= 1e3 -> "5.6K", else the bare integer.
    """
    if num >= 1e9:
        return f"{num / 1e9:.1f}B"
    if num >= 1e6:
        return f"{num / 1e6:.1f}M"
    if num >= 1e3:
        return f"{num / 1e3:.1f}K"
    return str(int(num))


def base_units_to_native(value: int, decimals: int = WEI_DECIMALS) -> float:
    """Convert an integer base-unit amount (e.g. wei) to native units (e.g. ETH)."""
    return value / 10 ** decimals


def parse_hex_quantity(value: Any, provider: str) -> int:
    """Parse a JSON-RPC hex quantity such as "0x1b4"."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ProviderPayloadError(provider, f"expected hex quantity, got {value!r}")
    try:
        return int(value, 16)
    except ValueError:
        raise ProviderPayloadError(provider, f"invalid hex quantity {value!r}")


def parse_epoch_seconds(value: Any, provider: str) -> datetime:
    """UTC datetime from a Unix timestamp given as an int or a decimal string."""
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        raise ProviderPayloadError(provider, f"invalid timestamp {value!r}")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# AI providers

def normalize_openai(payload: Any) -> str:
    completion = parse_payload(OpenAIChatCompletion, payload, "openai")
    if completion.choices and completion.choices[0].message.content:
        return completion.choices[0].message.content
    return FALLBACK_AI_MESSAGE


def normalize_gemini(payload: Any) -> str:
    response = parse_payload(GeminiResponse, payload, "gemini")
    if response.candidates:
        parts = response.candidates[0].content.parts
        if parts and parts[0].text:
            return parts[0].text
    return FALLBACK_AI_MESSAGE


# Threat intelligence

def normalize_virustotal_url(payload: Any) -> URLAnalysis:
    attributes = parse_payload(VirusTotalResponse, payload, "virustotal").data.attributes
    stats = attributes.last_analysis_stats

    return URLAnalysis(
        safe=stats.malicious == 0 and stats.suspicious == 0,
        categories=list(attributes.categories.keys()),
        reputation=calculate_reputation(stats.model_dump()),
        malware_detected=stats.malicious > 0,
        phishing_detected=any(
            result.category == "phishing"
            for result in attributes.last_analysis_results.values()
        ),
    )


def normalize_virustotal_file(payload: Any) -> FileAnalysis:
    attributes = parse_payload(VirusTotalResponse, payload, "virustotal").data.attributes
    stats = attributes.last_analysis_stats
    engines = stats.harmless + stats.malicious + stats.suspicious + stats.undetected

    threat_types: List[str] = []
    for result in attributes.last_analysis_results.values():
        if result.category == "malicious" and result.result and result.result not in threat_types:
            threat_types.append(result.result)

    if attributes.last_analysis_date:
        scan_date = parse_epoch_seconds(attributes.last_analysis_date, "virustotal")
    else:
        scan_date = datetime.now(timezone.utc)

    return FileAnalysis(
        safe=stats.malicious == 0 and stats.suspicious == 0,
        detection_ratio=f"{stats.malicious}/{engines}",
        threat_types=threat_types[:3],
        scan_date=scan_date,
    )


def normalize_abuseipdb(payload: Any) -> IPAnalysis:
    data = parse_payload(AbuseIPDBResponse, payload, "abuseipdb").data

    threat_types: List[str] = []
    for report in data.reports:
        for category in report.categories:
            name = ABUSEIPDB_CATEGORIES.get(category, f"Category {category}")
            if name not in threat_types:
                threat_types.append(name)

    return IPAnalysis(
        reputation=100 - data.abuse_confidence_percentage,
        country=data.country_code or "Unknown",
        isp=data.isp or "Unknown ISP",
        threat_types=threat_types,
        blacklisted=data.abuse_confidence_percentage > BLOCKED_IP_THRESHOLD,
    )


# Blockchain

def normalize_coingecko(
    payload: Any,
    coin_id: str,
    network: str,
    block_height: int,
    gas_price: Optional[int] = None,
) -> BlockchainData:
    if not isinstance(payload, dict) or coin_id not in payload:
        raise ProviderPayloadError("coingecko", f"no price entry for '{coin_id}'")
    quote = parse_payload(CoinGeckoPrice, payload[coin_id], "coingecko")

    return BlockchainData(
        price=quote.usd,
        change=quote.usd_24h_change or 0.0,
        volume=format_large_number(quote.usd_24h_vol or 0),
        market_cap=format_large_number(quote.usd_market_cap or 0),
        network=network,
        block_height=block_height,
        gas_price=gas_price,
    )


def normalize_etherscan_balance(payload: Any) -> int:
    """Account balance in wei."""
    response = parse_payload(EtherscanResult, payload, "etherscan")
    result = response.result
    if not isinstance(result, str) or not (result.isascii() and result.isdecimal()):
        raise ProviderPayloadError("etherscan", f"balance unavailable: {result!r}")
    return int(result)


def normalize_etherscan_txlist(payload: Any) -> List[EtherscanTx]:
    """Transactions newest first; an empty account yields an empty list."""
    response = parse_payload(EtherscanResult, payload, "etherscan")
    if not isinstance(response.result, list):
        raise ProviderPayloadError("etherscan", f"txlist unavailable: {response.result!r}")
    return [parse_payload(EtherscanTx, entry, "etherscan") for entry in response.result]


def normalize_hex_result(payload: Any) -> int:
    """eth_blockNumber / eth_getTransactionCount style proxy responses."""
    response = parse_payload(EtherscanProxyResult, payload, "etherscan")
    return parse_hex_quantity(response.result, "etherscan")


def normalize_contract_code(payload: Any) -> bool:
    """eth_getCode: anything other than empty bytecode means a contract."""
    response = parse_payload(EtherscanProxyResult, payload, "etherscan")
    if not HEX_BYTES.fullmatch(response.result):
        raise ProviderPayloadError("etherscan", f"code unavailable: {response.result!r}")
    return response.result not in ("0x", "0x0")


def normalize_gas_oracle(payload: Any) -> int:
    response = parse_payload(EtherscanResult, payload, "etherscan")
    oracle = parse_payload(GasOracle, response.result, "etherscan")
    try:
        gwei = float(oracle.propose_gas_price)
    except ValueError:
        raise ProviderPayloadError("etherscan", f"invalid gas price {oracle.propose_gas_price!r}")
    if not math.isfinite(gwei) or gwei < 0:
        raise ProviderPayloadError("etherscan", f"gas price out of range {oracle.propose_gas_price!r}")
    return int(gwei)


def normalize_latest_block(payload: Any, limit: int) -> List[Transaction]:
    """Most recent transactions from an eth_getBlockByNumber(latest, true) response."""
    block = parse_payload(EtherscanBlockResult, payload, "etherscan").result
    number = parse_hex_quantity(block.number, "etherscan")
    mined_at = parse_epoch_seconds(parse_hex_quantity(block.timestamp, "etherscan"), "etherscan")

    transactions = []
    for tx in block.transactions:
        if isinstance(tx, str):
            raise ProviderPayloadError("etherscan", "block returned hashes without transaction bodies")
        if len(transactions) >= limit:
            break
        wei = parse_hex_quantity(tx.value, "etherscan")
        transactions.append(Transaction(
            hash=tx.hash,
            block=number,
            from_address=tx.from_address,
            to_address=tx.to_address or "",
            value=f"{base_units_to_native(wei):.6f}",
            timestamp=mined_at,
            status="confirmed",
        ))
    return transactions


def build_wallet_analysis(
    address: str,
    balance_wei: int,
    transaction_count: int,
    transactions: List[EtherscanTx],
    is_contract: bool,
) -> WalletAnalysis:
    """Assemble an Ethereum wallet analysis from the individual Etherscan answers."""
    balance = base_units_to_native(balance_wei)
    now = datetime.now(timezone.utc)

    timestamps = [parse_epoch_seconds(tx.time_stamp, "etherscan") for tx in transactions]

    first_seen = min(timestamps) if timestamps else now
    last_activity = max(timestamps) if timestamps else now

    return WalletAnalysis(
        address=address,
        balance=f"{balance:.4f} ETH",
        transaction_count=transaction_count,
        first_seen=first_seen,
        last_activity=last_activity,
        risk_score=calculate_wallet_risk_score(transaction_count, balance),
        labels=generate_wallet_labels(transaction_count, balance),
        is_contract=is_contract,
    )


# Web intelligence

def normalize_dappier_search(payload: Any, query: str) -> DappierThreatResult:
    response = parse_payload(DappierSearchResponse, payload, "dappier")

    threats = []
    for hit in response.results:
        content = hit.content or hit.title or ""
        severity = assess_threat_severity(content)
        if severity == "low":
            continue
        threats.append(ThreatItem(
            type=categorize_threat(content),
            severity=severity,
            description=content[:200] + "...",
            source=hit.source or "web",
            timestamp=hit.timestamp or _now_iso(),
        ))

    risk_score = score_search_results(threat.severity for threat in threats)
    return DappierThreatResult(
        threats=threats,
        risk_score=risk_score,
        summary=f'Found {len(threats)} potential threats for "{query}" (Risk: {risk_score}/100)',
    )


def normalize_dappier_feed(payload: Any) -> List[FeedItem]:
    response = parse_payload(DappierFeedResponse, payload, "dappier")

    items = []
    for index, entry in enumerate(response.feed[:FEED_LIMIT]):
        content = entry.content or ""
        items.append(FeedItem(
            id=f"feed-{index}",
            title=entry.title or content[:100],
            severity=assess_threat_severity(content),
            timestamp=entry.timestamp or _now_iso(),
            category=categorize_threat(content),
        ))
    return items
