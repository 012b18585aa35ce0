"""
Threat intelligence - URL, IP, email and file reputation.

URL and file lookups go to VirusTotal, IP lookups to AbuseIPDB; email
analysis is local. Each falls back to synthetic analysis.
"""

import base64
import hashlib
from typing import Optional
from urllib.parse import quote

import httpx

from cafe_intel import synthetic
from cafe_intel.context import ServiceContext, request_json
from cafe_intel.credentials import Provider
from cafe_intel.errors import ProviderError, ProviderHTTPError
from cafe_intel.fallback import ProviderAttempt, attempt_in_order
from cafe_intel.logger import get_logger
from cafe_intel.models import (
    EmailAnalysis,
    FileAnalysis,
    IPAnalysis,
    LiveThreatData,
    ThreatAnalysis,
    URLAnalysis,
)
from cafe_intel.normalize import normalize_abuseipdb, normalize_virustotal_file, normalize_virustotal_url
from cafe_intel.ratelimit import PROVIDER_LIMITS
from cafe_intel.scoring import calculate_email_reputation, is_disposable_email, is_email_safe


VIRUSTOTAL_URL = "https://www.virustotal.com/api/v3"
ABUSEIPDB_URL = "https://api.abuseipdb.com/api/v2"

logger = get_logger(__name__)


def virustotal_url_id(url: str) -> str:
    """URL identifier for /urls/{id}: unpadded URL-safe base64 of the URL."""
    return base64.urlsafe_b64encode(url.encode()).decode().rstrip("=")


def analyze_email_locally(email: str) -> EmailAnalysis:
    domain = email.split("@")[1] if "@" in email else ""
    return EmailAnalysis(
        safe=is_email_safe(email),
        disposable=is_disposable_email(domain),
        reputation=calculate_email_reputation(email),
        domain=domain,
    )


class ThreatIntelService:
    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def _mock_mode(self) -> bool:
        return self.context.credentials.mock_mode.threat_intel

    async def analyze_url(self, url: str) -> ThreatAnalysis:
        """Reputation of a URL. VirusTotal, then synthetic."""
        analysis = await attempt_in_order(
            "analyze_url",
            [
                ProviderAttempt(
                    name="virustotal",
                    invoke=lambda: self._url_with_virustotal(url),
                    provider=Provider.VIRUSTOTAL,
                    rate_limit=PROVIDER_LIMITS["virustotal"],
                ),
            ],
            lambda: synthetic.url_analysis(url, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )
        return ThreatAnalysis(url=analysis)

    async def analyze_ip(self, ip: str) -> ThreatAnalysis:
        """Abuse reputation of an IP address. AbuseIPDB, then synthetic."""
        analysis = await attempt_in_order(
            "analyze_ip",
            [
                ProviderAttempt(
                    name="abuseipdb",
                    invoke=lambda: self._ip_with_abuseipdb(ip),
                    provider=Provider.ABUSEIPDB,
                    rate_limit=PROVIDER_LIMITS["abuseipdb"],
                ),
            ],
            lambda: synthetic.ip_analysis(ip, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )
        return ThreatAnalysis(ip=analysis)

    async def analyze_email(self, email: str) -> ThreatAnalysis:
        """Heuristic email analysis; needs no credential but honors mock mode."""

        async def local() -> EmailAnalysis:
            return analyze_email_locally(email)

        analysis = await attempt_in_order(
            "analyze_email",
            [ProviderAttempt(name="email-heuristics", invoke=local)],
            lambda: synthetic.email_analysis(email, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )
        return ThreatAnalysis(email=analysis)

    async def analyze_file(self, name: str, content: Optional[bytes] = None) -> ThreatAnalysis:
        """
        Scan verdict for a file.

        With content, the SHA-256 is looked up on VirusTotal; without it, or
        when the hash is unknown, the verdict is synthetic.

        Args:
            name: File name
            content: File bytes, optional
        """
        attempts = []
        if content is not None:
            digest = hashlib.sha256(content).hexdigest()
            attempts.append(ProviderAttempt(
                name="virustotal",
                invoke=lambda: self._file_with_virustotal(digest),
                provider=Provider.VIRUSTOTAL,
                rate_limit=PROVIDER_LIMITS["virustotal-file"],
            ))

        analysis = await attempt_in_order(
            "analyze_file",
            attempts,
            lambda: synthetic.file_analysis(name, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )
        return ThreatAnalysis(file=analysis)

    async def get_live_threat_data(self) -> LiveThreatData:
        """Dashboard statistics. No live aggregate source exists, always synthetic."""
        return synthetic.live_threat_data(self.context.rng)

    async def _url_with_virustotal(self, url: str) -> URLAnalysis:
        api_key = self.context.credentials.key_for(Provider.VIRUSTOTAL)
        async with self.context.http_client(headers={"x-apikey": api_key}) as client:
            try:
                payload = await request_json(
                    client, "virustotal", "GET", f"{VIRUSTOTAL_URL}/urls/{virustotal_url_id(url)}"
                )
            except ProviderHTTPError as e:
                if e.status == 404:
                    # Unknown URL: queue it so the next lookup has a verdict
                    await self._submit_url(client, url)
                raise

        return normalize_virustotal_url(payload)

    async def _submit_url(self, client: httpx.AsyncClient, url: str) -> None:
        try:
            await request_json(
                client,
                "virustotal",
                "POST",
                f"{VIRUSTOTAL_URL}/urls",
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                content=f"url={quote(url, safe='')}",
            )
        except ProviderError as e:
            logger.warning("virustotal_submit_failed", url=url, reason=e.reason)

    async def _file_with_virustotal(self, sha256: str) -> FileAnalysis:
        api_key = self.context.credentials.key_for(Provider.VIRUSTOTAL)
        async with self.context.http_client(headers={"x-apikey": api_key}) as client:
            payload = await request_json(client, "virustotal", "GET", f"{VIRUSTOTAL_URL}/files/{sha256}")
        return normalize_virustotal_file(payload)

    async def _ip_with_abuseipdb(self, ip: str) -> IPAnalysis:
        api_key = self.context.credentials.key_for(Provider.ABUSEIPDB)
        async with self.context.http_client() as client:
            payload = await request_json(
                client,
                "abuseipdb",
                "GET",
                f"{ABUSEIPDB_URL}/check?ipAddress={quote(ip, safe='')}&maxAgeInDays=90&verbose",
                headers={"Key": api_key, "Accept": "application/json"},
            )
        return normalize_abuseipdb(payload)
