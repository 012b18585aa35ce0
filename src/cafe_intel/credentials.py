"""
Provider credential registry and per-domain mock-mode flags.

The registry is a snapshot: keys are read once when it is built and the
derived flags never change afterwards. Build a fresh registry to pick up
new configuration.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional

from cafe_intel.config import get_api_key


class Provider(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    VIRUSTOTAL = "virustotal"
    ABUSEIPDB = "abuseipdb"
    ETHERSCAN = "etherscan"
    COINGECKO = "coingecko"
    GOOGLE_VISION = "google_vision"
    HUNTER_IO = "hunter_io"
    CLEARBIT = "clearbit"
    DAPPIER = "dappier"


@dataclass(frozen=True)
class CredentialSet:
    """Whether a provider has a configured credential."""
    provider: Provider
    present: bool


@dataclass(frozen=True)
class MockMode:
    """Capability domains that must skip live calls entirely."""
    ai_assistant: bool
    threat_intel: bool
    blockchain: bool
    image_analysis: bool
    verification: bool
    web_intel: bool


class CredentialRegistry:
    """Immutable view of which providers are configured."""

    def __init__(self, keys: Mapping[Provider, Optional[str]]):
        self._keys: Dict[Provider, str] = {
            provider: value for provider, value in keys.items() if value
        }
        self.mock_mode = self._derive_mock_mode()

    @classmethod
    def from_config(cls) -> "CredentialRegistry":
        """Build a registry from environment, secrets.json and config.toml."""
        return cls({provider: get_api_key(provider.value) for provider in Provider})

    @classmethod
    def empty(cls) -> "CredentialRegistry":
        """Registry with no credentials: every domain runs in mock mode."""
        return cls({})

    def has_credential(self, provider: Provider) -> bool:
        return provider in self._keys

    def key_for(self, provider: Provider) -> Optional[str]:
        return self._keys.get(provider)

    def credential_set(self) -> List[CredentialSet]:
        return [CredentialSet(provider, provider in self._keys) for provider in Provider]

    def _derive_mock_mode(self) -> MockMode:
        has = self.has_credential
        return MockMode(
            ai_assistant=not has(Provider.OPENAI) and not has(Provider.GEMINI),
            threat_intel=not has(Provider.VIRUSTOTAL) and not has(Provider.ABUSEIPDB),
            blockchain=not has(Provider.ETHERSCAN) and not has(Provider.COINGECKO),
            image_analysis=not has(Provider.GOOGLE_VISION),
            verification=not has(Provider.HUNTER_IO) and not has(Provider.CLEARBIT),
            web_intel=not has(Provider.DAPPIER),
        )
