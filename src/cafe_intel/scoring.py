"""
Risk and trust scoring from normalized signals.

Pure functions only. The weights are illustrative heuristics kept stable
for compatibility, not calibrated fraud signals.
"""

import re
from typing import Iterable, List, Mapping

from cafe_intel.models import ThreatSignal


# Free-text keywords counted by the assistant's threat analysis
MESSAGE_THREAT_KEYWORDS = [
    "scam", "fraud", "suspicious", "help", "emergency", "hack", "steal", "money",
]

HIGH_RISK_KEYWORDS = ["scam", "fraud", "stolen", "fake", "phishing", "identity theft"]
MEDIUM_RISK_KEYWORDS = ["suspicious", "report", "warning", "caution", "verify"]

# Format: (keywords, category) - first match wins
THREAT_CATEGORIES = [
    (("romance", "dating"), "Romance Scam"),
    (("financial", "money"), "Financial Fraud"),
    (("identity", "personal"), "Identity Theft"),
    (("phishing", "email"), "Phishing Attack"),
]
DEFAULT_THREAT_CATEGORY = "General Threat"

# Aggregate feed risk: per-severity contribution, anything else counts OTHER
SEVERITY_WEIGHTS = {"medium": 15, "low": 5}
OTHER_SEVERITY_WEIGHT = 10
SURGE_SIGNAL_WEIGHT = 20

# Live search results only keep medium/high hits
SEARCH_HIGH_WEIGHT = 30
SEARCH_OTHER_WEIGHT = 15

DISPOSABLE_EMAIL_DOMAINS = {
    "10minutemail.com", "tempmail.org", "guerrillamail.com",
    "mailinator.com", "throwaway.email", "temp-mail.org",
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SUSPICIOUS_EMAIL_PATTERNS = [
    re.compile(r"[0-9]{8,}"),   # long digit runs
    re.compile(r"[a-z]{20,}"),  # very long letter runs
    re.compile(r"[.\-_]{3,}"),  # stacked separators
]


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, value)))


def analyze_message_for_threats(text: str) -> ThreatSignal:
    """
    Keyword-count threat assessment of a user message.

    3+ matches is high (90), 2 is medium (80), otherwise low (70).
    """
    lower = text.lower()
    matches = [keyword for keyword in MESSAGE_THREAT_KEYWORDS if keyword in lower]

    if len(matches) >= 3:
        level, confidence = "high", 90
    elif len(matches) >= 2:
        level, confidence = "medium", 80
    else:
        level, confidence = "low", 70

    return ThreatSignal(
        threat_level=level,
        confidence=confidence,
        indicators=[f"Keyword detected: {keyword}" for keyword in matches],
    )


def generate_suggestions(text: str) -> List[str]:
    """Follow-up suggestions for an assistant reply, at most three."""
    lower = text.lower()
    suggestions: List[str] = []

    if "dating" in lower or "profile" in lower:
        suggestions.append("Upload profile image for reverse search")
        suggestions.append("Run dating safety verification")

    if "email" in lower or "phone" in lower:
        suggestions.append("Verify contact information")
        suggestions.append("Check social media presence")

    if "url" in lower or "link" in lower:
        suggestions.append("Analyze URL for threats")
        suggestions.append("Check domain reputation")

    if not suggestions:
        suggestions = [
            "Ask about specific security concerns",
            "Explore our verification tools",
            "Learn about threat prevention",
        ]

    return suggestions[:3]


def calculate_reputation(stats: Mapping[str, int]) -> int:
    """
    Reputation from scanner detection counts.

    Args:
        stats: Counts keyed harmless/malicious/suspicious/undetected

    Returns:
        50 when no engine reported, else the clamped safe-minus-threat ratio
    """
    harmless = stats.get("harmless", 0)
    malicious = stats.get("malicious", 0)
    suspicious = stats.get("suspicious", 0)
    undetected = stats.get("undetected", 0)

    total = harmless + malicious + suspicious + undetected
    if total == 0:
        return 50

    safe_ratio = harmless / total
    threat_ratio = (malicious + suspicious) / total
    return clamp(round((safe_ratio - threat_ratio) * 100))


def calculate_wallet_risk_score(transaction_count: int, balance: float) -> int:
    """
    Additive wallet risk.

    +20 for more than 1000 transactions (bot-like volume), +10 for a balance
    above 100 native units, +15 for fewer than 10 transactions.
    """
    risk = 0
    if transaction_count > 1000:
        risk += 20
    if balance > 100:
        risk += 10
    if transaction_count < 10:
        risk += 15
    return min(100, risk)


def generate_wallet_labels(transaction_count: int, balance: float) -> List[str]:
    labels = []
    if transaction_count > 1000:
        labels.append("High Activity")
    if transaction_count < 10:
        labels.append("Low Activity")
    if balance > 1000:
        labels.append("High Value")
    if balance < 0.01:
        labels.append("Low Balance")
    return labels


def aggregate_threat_risk(severities: Iterable[str], surge_signals: int = 0) -> int:
    """
    Risk score for a synthesized threat feed.

    Medium signals add 15, low add 5, any other severity adds 10.
    Each surge ("Current Threat") signal adds 20. Clamped to [0, 100].
    """
    risk = sum(SEVERITY_WEIGHTS.get(severity, OTHER_SEVERITY_WEIGHT) for severity in severities)
    risk += SURGE_SIGNAL_WEIGHT * surge_signals
    return clamp(risk)


def score_search_results(severities: Iterable[str]) -> int:
    """Risk score for live search hits: high adds 30, others 15, capped at 100."""
    risk = sum(
        SEARCH_HIGH_WEIGHT if severity == "high" else SEARCH_OTHER_WEIGHT
        for severity in severities
    )
    return clamp(risk)


def assess_threat_severity(content: str) -> str:
    """Classify free text as high/medium/low by keyword containment."""
    lower = content.lower()
    if any(keyword in lower for keyword in HIGH_RISK_KEYWORDS):
        return "high"
    if any(keyword in lower for keyword in MEDIUM_RISK_KEYWORDS):
        return "medium"
    return "low"


def categorize_threat(content: str) -> str:
    lower = content.lower()
    for keywords, category in THREAT_CATEGORIES:
        if any(keyword in lower for keyword in keywords):
            return category
    return DEFAULT_THREAT_CATEGORY


def is_email_safe(email: str) -> bool:
    """Syntactic sanity plus a few patterns common in throwaway addresses."""
    if not EMAIL_PATTERN.match(email):
        return False
    return not any(pattern.search(email) for pattern in SUSPICIOUS_EMAIL_PATTERNS)


def is_disposable_email(domain: str) -> bool:
    return domain.lower() in DISPOSABLE_EMAIL_DOMAINS


def calculate_email_reputation(email: str) -> int:
    score = 100
    if "noreply" in email or "donotreply" in email:
        score -= 20
    if re.search(r"\d{6,}", email):
        score -= 15
    if len(email.split("@")[0]) > 20:
        score -= 10
    return max(0, score)
