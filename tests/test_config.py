"""
Tests for configuration management.
"""

import json

import pytest

from cafe_intel import config


class TestLoadConfig:
    """Test suite for load_config() and config file handling."""

    def test_load_empty_config(self, isolated_config):
        """Test loading when no config files exist."""
        result = config.load_config()
        assert result == {}

    def test_load_secrets_json(self, isolated_config):
        """Test loading from secrets.json."""
        (isolated_config / "secrets.json").write_text(json.dumps({
            "virustotal_api_key": "vt-test-key-123",
            "dappier_api_key": "dp-test-456",
            "comment": "This should be ignored"
        }))

        result = config.load_config()
        assert result["virustotal_api_key"] == "vt-test-key-123"
        assert result["dappier_api_key"] == "dp-test-456"
        assert "comment" not in result

    def test_load_toml_config(self, isolated_config):
        """Test loading from config.toml."""
        (isolated_config / "config.toml").write_text("""
[api]
openai_key = "sk-toml-key"
etherscan_key = "es-toml-key"

[defaults]
timeout = 5000
log_level = "INFO"
""")

        result = config.load_config()
        assert result["openai_api_key"] == "sk-toml-key"
        assert result["etherscan_api_key"] == "es-toml-key"
        assert result["timeout"] == 5000
        assert result["log_level"] == "INFO"

    def test_secrets_overrides_toml(self, isolated_config):
        """Test that secrets.json takes priority over config.toml."""
        (isolated_config / "config.toml").write_text("""
[api]
openai_key = "sk-toml-key"
""")
        (isolated_config / "secrets.json").write_text(json.dumps({
            "openai_api_key": "sk-secrets-key"
        }))

        result = config.load_config()
        assert result["openai_api_key"] == "sk-secrets-key"


class TestGetApiKey:
    """Test suite for get_api_key() priority chain."""

    def test_env_var_highest_priority(self, isolated_config, monkeypatch):
        """Test that environment variables take highest priority."""
        (isolated_config / "secrets.json").write_text(json.dumps({
            "abuseipdb_api_key": "from-secrets"
        }))
        monkeypatch.setenv("ABUSEIPDB_API_KEY", "from-env")

        assert config.get_api_key("abuseipdb") == "from-env"

    def test_secrets_json_when_no_env(self, isolated_config):
        """Test that secrets.json is used when no env var."""
        (isolated_config / "secrets.json").write_text(json.dumps({
            "abuseipdb_api_key": "from-secrets"
        }))

        assert config.get_api_key("abuseipdb") == "from-secrets"

    def test_gemini_accepts_google_api_key(self, isolated_config, monkeypatch):
        """Test that GOOGLE_API_KEY is a fallback name for Gemini."""
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert config.get_api_key("gemini") == "google-key"

        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert config.get_api_key("gemini") == "gemini-key"

    def test_empty_value_is_missing(self, isolated_config, monkeypatch):
        """Test that an empty env var or config value counts as absent."""
        monkeypatch.setenv("DAPPIER_API_KEY", "")
        (isolated_config / "secrets.json").write_text(json.dumps({"dappier_api_key": ""}))

        assert config.get_api_key("dappier") is None

    def test_returns_none_when_missing(self, isolated_config):
        """Test that None is returned when key not configured."""
        assert config.get_api_key("clearbit") is None

    def test_case_insensitive_service_name(self, isolated_config, monkeypatch):
        """Test that service names are case-insensitive."""
        monkeypatch.setenv("VIRUSTOTAL_API_KEY", "vt-test")

        assert config.get_api_key("VirusTotal") == "vt-test"
        assert config.get_api_key("VIRUSTOTAL") == "vt-test"
        assert config.get_api_key("virustotal") == "vt-test"


class TestHttpTimeout:
    """Test suite for get_http_timeout()."""

    def test_default(self, isolated_config):
        """Test the default timeout."""
        assert config.get_http_timeout() == config.DEFAULT_TIMEOUT_MS

    def test_from_config_file(self, isolated_config):
        """Test the timeout from config.toml."""
        (isolated_config / "config.toml").write_text("[defaults]\ntimeout = 2500\n")
        assert config.get_http_timeout() == 2500

    def test_env_overrides_config_file(self, isolated_config, monkeypatch):
        """Test that the env timeout wins over config.toml."""
        (isolated_config / "config.toml").write_text("[defaults]\ntimeout = 2500\n")
        monkeypatch.setenv("CAFE_INTEL_TIMEOUT_MS", "750")
        assert config.get_http_timeout() == 750

    @pytest.mark.parametrize("value", ["abc", "1.5s", "0", "-200"])
    def test_invalid_env_falls_back_to_default(self, isolated_config, monkeypatch, value):
        """Test that a malformed env timeout uses the default instead of raising."""
        monkeypatch.setenv("CAFE_INTEL_TIMEOUT_MS", value)
        assert config.get_http_timeout() == config.DEFAULT_TIMEOUT_MS

    @pytest.mark.parametrize("toml_value", ['"soon"', "true", "-1", "[1, 2]"])
    def test_invalid_config_file_value_falls_back_to_default(self, isolated_config, toml_value):
        """Test that a malformed config.toml timeout uses the default instead of raising."""
        (isolated_config / "config.toml").write_text(f"[defaults]\ntimeout = {toml_value}\n")
        assert config.get_http_timeout() == config.DEFAULT_TIMEOUT_MS


class TestLogSettings:
    """Test suite for get_log_settings()."""

    def test_defaults(self, isolated_config):
        """Test default log settings."""
        assert config.get_log_settings() == {"log_level": "WARNING", "json_output": False}

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("YES", True), ("0", False), ("off", False),
    ])
    def test_json_env(self, isolated_config, monkeypatch, value, expected):
        """Test truthy and falsy CAFE_INTEL_LOG_JSON values."""
        monkeypatch.setenv("CAFE_INTEL_LOG_JSON", value)
        assert config.get_log_settings()["json_output"] is expected

    def test_level_is_uppercased(self, isolated_config, monkeypatch):
        """Test that the log level is uppercased."""
        monkeypatch.setenv("CAFE_INTEL_LOG_LEVEL", "debug")
        assert config.get_log_settings()["log_level"] == "DEBUG"


class TestEnsureConfigDir:
    """Test suite for ensure_config_dir()."""

    def test_creates_directory(self, tmp_path, monkeypatch):
        """Test that config directory is created."""
        config_dir = tmp_path / "test_cafe_intel"
        monkeypatch.setattr(config, "CONFIG_DIR", config_dir)

        assert not config_dir.exists()
        config.ensure_config_dir()
        assert config_dir.exists()

    def test_idempotent(self, tmp_path, monkeypatch):
        """Test that ensure_config_dir can be called multiple times."""
        config_dir = tmp_path / "test_cafe_intel"
        monkeypatch.setattr(config, "CONFIG_DIR", config_dir)

        config.ensure_config_dir()
        config.ensure_config_dir()  # Should not raise
        assert config_dir.exists()


class TestSetupConfig:
    """Test suite for the interactive setup."""

    def test_writes_only_answered_keys(self, isolated_config, monkeypatch):
        """Test that skipped providers are left out of config.toml."""
        answers = iter(["sk-openai", "", "vt-key", "", "", "", "", "", "", ""])
        monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

        config.setup_config()

        result = config.load_config()
        assert result["openai_api_key"] == "sk-openai"
        assert result["virustotal_api_key"] == "vt-key"
        assert "gemini_api_key" not in result
        assert result["timeout"] == config.DEFAULT_TIMEOUT_MS
