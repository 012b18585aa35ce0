"""
Configuration management - TOML config file, secrets.json, and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Optional

import tomli

from cafe_intel.logger import get_logger


CONFIG_DIR = Path.home() / ".cafe-intel"
CONFIG_PATH = CONFIG_DIR / "config.toml"
SECRETS_PATH = Path.cwd() / "secrets.json"

DEFAULT_TIMEOUT_MS = 10000

logger = get_logger(__name__)

# Service name -> environment variables, checked in order
ENV_MAP = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "virustotal": ("VIRUSTOTAL_API_KEY",),
    "abuseipdb": ("ABUSEIPDB_API_KEY",),
    "etherscan": ("ETHERSCAN_API_KEY",),
    "coingecko": ("COINGECKO_API_KEY",),
    "google_vision": ("GOOGLE_VISION_API_KEY",),
    "hunter_io": ("HUNTER_IO_API_KEY",),
    "clearbit": ("CLEARBIT_API_KEY",),
    "dappier": ("DAPPIER_API_KEY",),
}


def ensure_config_dir() -> None:
    """Create ~/.cafe-intel/ directory if it doesn't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> dict:
    """
    Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables (resolved in get_api_key)
    2. secrets.json in the working directory (dev mode)
    3. ~/.cafe-intel/config.toml (user config)

    Returns:
        Merged configuration dictionary
    """
    config = {}

    if CONFIG_PATH.exists():
        with open(CONFIG_PATH, "rb") as f:
            toml_config = tomli.load(f)
            config.update(_flatten_config(toml_config))

    if SECRETS_PATH.exists():
        with open(SECRETS_PATH) as f:
            secrets = json.load(f)
            secrets.pop("comment", None)
            config.update(secrets)

    return config


def _flatten_config(toml_config: dict) -> dict:
    """Flatten nested TOML config to simple key-value pairs."""
    result = {}

    # [api] section: "<service>_key" -> "<service>_api_key"
    if "api" in toml_config:
        for key, value in toml_config["api"].items():
            if key.endswith("_key"):
                result[f"{key[:-4]}_api_key"] = value

    if "defaults" in toml_config:
        result.update(toml_config["defaults"])

    return result


def get_api_key(service: str) -> Optional[str]:
    """
    Get API key for a provider.

    Priority: environment variable > secrets.json > config.toml

    Args:
        service: Provider name (e.g. "openai", "virustotal", "dappier")

    Returns:
        API key string or None if not found or empty
    """
    service_lower = service.lower()

    for env_var in ENV_MAP.get(service_lower, ()):
        env_value = os.getenv(env_var)
        if env_value:
            return env_value

    config = load_config()
    value = config.get(f"{service_lower}_api_key")
    if value:
        return value

    return None


def get_http_timeout() -> int:
    """
    Get the provider HTTP timeout in milliseconds.

    CAFE_INTEL_TIMEOUT_MS overrides [defaults] timeout in config.toml.
    A value that is not a positive integer falls back to DEFAULT_TIMEOUT_MS.
    """
    env_value = os.getenv("CAFE_INTEL_TIMEOUT_MS")
    if env_value:
        return _parse_timeout(env_value, "CAFE_INTEL_TIMEOUT_MS")

    value = load_config().get("timeout")
    if value is None:
        return DEFAULT_TIMEOUT_MS
    return _parse_timeout(value, str(CONFIG_PATH))


def _parse_timeout(value, source: str) -> int:
    try:
        timeout = int(value)
    except (TypeError, ValueError, OverflowError):
        timeout = 0
    if isinstance(value, bool) or timeout <= 0:
        logger.warning("invalid_timeout", source=source, value=repr(value), default=DEFAULT_TIMEOUT_MS)
        return DEFAULT_TIMEOUT_MS
    return timeout


def get_log_settings() -> dict:
    """
    Get logging settings.

    CAFE_INTEL_LOG_LEVEL sets the level (default WARNING so CLI output stays
    clean), CAFE_INTEL_LOG_JSON=1 switches to JSON lines.

    Returns:
        Dict with 'log_level' and 'json_output'
    """
    config = load_config()
    level = os.getenv("CAFE_INTEL_LOG_LEVEL") or config.get("log_level", "WARNING")
    json_env = os.getenv("CAFE_INTEL_LOG_JSON")
    if json_env is not None:
        json_output = json_env.lower() in ("1", "true", "yes")
    else:
        json_output = bool(config.get("log_json", False))

    return {"log_level": str(level).upper(), "json_output": json_output}


def setup_config() -> None:
    """
    Interactive configuration setup on first run.

    Prompts for provider API keys and writes ~/.cafe-intel/config.toml.
    Every key is optional: a provider without a key is served by synthetic data.
    """
    print("cafe-intel Configuration Setup")
    print("=" * 40)
    print("Press Enter to skip a provider.")
    print()

    ensure_config_dir()

    prompts = [
        ("openai", "OpenAI (AI assistant)"),
        ("gemini", "Google Gemini (AI assistant fallback)"),
        ("virustotal", "VirusTotal (URL and file scanning)"),
        ("abuseipdb", "AbuseIPDB (IP reputation)"),
        ("etherscan", "Etherscan (wallets, blocks, gas)"),
        ("coingecko", "CoinGecko (market data)"),
        ("google_vision", "Google Vision (image analysis)"),
        ("hunter_io", "Hunter.io (verification)"),
        ("clearbit", "Clearbit (verification)"),
        ("dappier", "Dappier (web threat intelligence)"),
    ]

    keys = {}
    for service, label in prompts:
        value = input(f"  {label} API key: ").strip()
        if value:
            keys[service] = value

    config_content = """# cafe-intel Configuration
# Generated by: cafe-intel setup

[api]
"""
    for service, value in keys.items():
        config_content += f'{service}_key = "{value}"\n'

    config_content += f"""
[defaults]
timeout = {DEFAULT_TIMEOUT_MS}
log_level = "WARNING"
"""

    with open(CONFIG_PATH, "w") as f:
        f.write(config_content)

    print()
    print(f"Configuration saved to: {CONFIG_PATH}")
    print("You can edit this file directly to change settings.")
