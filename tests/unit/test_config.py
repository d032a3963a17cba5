"""Unit tests for configuration management."""

import pytest
from pathlib import Path

import solrbridge.config
from solrbridge.config import (
    load_config,
    get_config,
    reload_config,
    Config,
    EndpointConfig,
    LoggingConfig,
    SolrConfig,
    _find_config_file,
    _apply_env_overrides,
    _dict_to_config
)


class TestConfigDataclasses:
    """Tests for configuration dataclasses."""

    def test_logging_config_defaults(self):
        """Test LoggingConfig with default values."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.console_enabled is True
        assert config.file_enabled is False
        assert config.json_enabled is False
        assert config.log_dir == "logs"

    def test_logging_config_validation(self):
        """Test LoggingConfig validates log level."""
        for level in ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config = LoggingConfig(level=level)
            assert config.level == level

        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(level="INVALID")

    def test_logging_config_case_insensitive(self):
        """Test LoggingConfig normalizes log level to uppercase."""
        config = LoggingConfig(level="debug")
        assert config.level == "DEBUG"

    def test_solr_config_defaults(self):
        """Test SolrConfig defaults."""
        config = SolrConfig()
        assert config.engine == "solr"
        assert config.batch_size == 0
        assert config.timeout_seconds == 30.0
        assert isinstance(config.endpoint, EndpointConfig)

    def test_solr_config_validation(self):
        """Test SolrConfig rejects bad values."""
        with pytest.raises(ValueError, match="Unknown engine"):
            SolrConfig(engine="elasticsearch")
        with pytest.raises(ValueError, match="Batch size"):
            SolrConfig(batch_size=-10)
        with pytest.raises(ValueError, match="timeout_seconds"):
            SolrConfig(timeout_seconds=0)

    def test_config_main_container(self):
        """Test Config main container."""
        config = Config()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.solr, SolrConfig)
        assert "collection1" in repr(config)


class TestEndpointConfig:
    """Tests for Solr endpoint resolution."""

    def test_default_base_url(self):
        """Test default endpoint URL."""
        assert EndpointConfig().base_url == "http://localhost:8983/solr/collection1"

    def test_host_path_prefix(self):
        """Test the host path prefix comes before path and core."""
        endpoint = EndpointConfig(
            host="https://search.example.com/internal", port=443, path="/solr", core="articles"
        )
        assert endpoint.base_url == "https://search.example.com:443/internal/solr/articles"

    def test_host_without_scheme(self):
        """Test a bare host name defaults to http."""
        endpoint = EndpointConfig(host="solr.internal", port=8080, path="solr/", core="docs")
        assert endpoint.base_url == "http://solr.internal:8080/solr/docs"

    def test_empty_core(self):
        """Test an empty core leaves the path as-is."""
        assert EndpointConfig(core="").base_url == "http://localhost:8983/solr"

    def test_invalid_scheme(self):
        """Test non-HTTP schemes are rejected."""
        with pytest.raises(ValueError, match="must be http or https"):
            EndpointConfig(host="ftp://solr.internal")

    @pytest.mark.parametrize("port", [0, 70000, "8983", True])
    def test_invalid_port(self, port):
        """Test ports outside 1-65535 are rejected."""
        with pytest.raises(ValueError, match="Invalid port"):
            EndpointConfig(port=port)


class TestConfigFileDiscovery:
    """Tests for configuration file discovery."""

    def test_find_explicit_path(self, tmp_path):
        """Test finding config with explicit path."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[logging]\nlevel = 'INFO'\n")

        found = _find_config_file(config_file)
        assert found == config_file

    def test_find_explicit_path_not_found(self):
        """Test explicit path that doesn't exist."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            _find_config_file(Path("/nonexistent/config.toml"))

    def test_find_via_env_var(self, tmp_path, monkeypatch):
        """Test finding config via SOLRBRIDGE_CONFIG env var."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[logging]\nlevel = 'INFO'\n")

        monkeypatch.setenv("SOLRBRIDGE_CONFIG", str(config_file))
        found = _find_config_file()
        assert found == config_file

    def test_find_local_config(self, tmp_path, monkeypatch):
        """Test ./config.toml is picked up."""
        (tmp_path / "config.toml").write_text("[solr]\nengine = 'mock'\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SOLRBRIDGE_CONFIG", raising=False)

        assert _find_config_file() == Path("config.toml")

    def test_find_no_config(self, tmp_path, monkeypatch):
        """Test error when no config file found."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("SOLRBRIDGE_CONFIG", raising=False)

        with pytest.raises(FileNotFoundError, match="No configuration file found"):
            _find_config_file()


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_apply_string_override(self, monkeypatch):
        """Test applying string env override."""
        monkeypatch.setenv("SOLRBRIDGE_LOGGING_LEVEL", "DEBUG")

        result = _apply_env_overrides({"logging": {"level": "INFO"}})
        assert result["logging"]["level"] == "DEBUG"

    def test_apply_bool_override(self, monkeypatch):
        """Test applying boolean env override."""
        monkeypatch.setenv("SOLRBRIDGE_LOGGING_CONSOLE_ENABLED", "false")

        result = _apply_env_overrides({"logging": {"console": {"enabled": True}}})
        assert result["logging"]["console"]["enabled"] is False

    def test_apply_int_override(self, monkeypatch):
        """Test applying integer env override."""
        monkeypatch.setenv("SOLRBRIDGE_SOLR_BATCH_SIZE", "500")

        result = _apply_env_overrides({"solr": {"batch_size": 100}})
        assert result["solr"]["batch_size"] == 500

    def test_apply_float_override(self, monkeypatch):
        """Test applying float env override."""
        monkeypatch.setenv("SOLRBRIDGE_SOLR_TIMEOUT_SECONDS", "2.5")

        result = _apply_env_overrides({})
        assert result["solr"]["timeout_seconds"] == 2.5

    def test_endpoint_override(self, monkeypatch):
        """Test nested endpoint keys are reachable."""
        monkeypatch.setenv("SOLRBRIDGE_SOLR_ENDPOINT_PORT", "8984")
        monkeypatch.setenv("SOLRBRIDGE_SOLR_ENDPOINT_HOST", "https://solr.prod")

        result = _apply_env_overrides({"solr": {"endpoint": {"port": 8983}}})
        assert result["solr"]["endpoint"] == {"port": 8984, "host": "https://solr.prod"}

    def test_textual_fields_stay_strings(self, monkeypatch):
        """Test numeric-looking values for textual keys are not converted."""
        monkeypatch.setenv("SOLRBRIDGE_SOLR_ENDPOINT_CORE", "2024")

        result = _apply_env_overrides({})
        assert result["solr"]["endpoint"]["core"] == "2024"

    def test_ignore_non_solrbridge_env_vars(self, monkeypatch):
        """Test that non-SOLRBRIDGE env vars are ignored."""
        monkeypatch.setenv("OTHER_VAR", "VALUE")

        result = _apply_env_overrides({"logging": {"level": "INFO"}})
        assert "other" not in result


class TestDictToConfig:
    """Tests for dictionary to Config conversion."""

    def test_minimal_config(self):
        """Test conversion with minimal config."""
        config = _dict_to_config({})

        assert isinstance(config, Config)
        assert config.logging.level == "INFO"
        assert config.solr.engine == "solr"
        assert config.solr.endpoint.core == "collection1"

    def test_full_logging_section(self):
        """Test conversion with full logging section."""
        config_dict = {
            "logging": {
                "level": "DEBUG",
                "console": {"enabled": False},
                "file": {"enabled": True, "dir": "custom_logs", "backup_count": 14},
                "json": {"enabled": True},
            }
        }

        config = _dict_to_config(config_dict)
        assert config.logging.level == "DEBUG"
        assert config.logging.console_enabled is False
        assert config.logging.file_enabled is True
        assert config.logging.log_dir == "custom_logs"
        assert config.logging.backup_count == 14
        assert config.logging.json_enabled is True

    def test_full_solr_section(self):
        """Test conversion with full solr section."""
        config_dict = {
            "solr": {
                "engine": "mock",
                "batch_size": 250,
                "timeout_seconds": 10,
                "endpoint": {
                    "id": "primary",
                    "host": "http://solr.internal",
                    "port": 8080,
                    "path": "/search",
                    "core": "articles",
                },
            }
        }

        config = _dict_to_config(config_dict)
        assert config.solr.engine == "mock"
        assert config.solr.batch_size == 250
        assert config.solr.endpoint.id == "primary"
        assert config.solr.endpoint.base_url == "http://solr.internal:8080/search/articles"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_from_file(self, tmp_path, monkeypatch):
        """Test loading config from TOML file."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("""
[logging]
level = "DEBUG"

[solr]
engine = "mock"
batch_size = 50
""")

        monkeypatch.chdir(tmp_path)
        config = load_config(str(config_file))

        assert config.logging.level == "DEBUG"
        assert config.solr.engine == "mock"
        assert config.solr.batch_size == 50

    def test_load_with_env_overrides(self, tmp_path, monkeypatch):
        """Test loading config with env var overrides."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("""
[logging]
level = "INFO"

[solr]
batch_size = 100
""")

        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SOLRBRIDGE_LOGGING_LEVEL", "TRACE")
        monkeypatch.setenv("SOLRBRIDGE_SOLR_BATCH_SIZE", "0")

        config = load_config(str(config_file))

        assert config.logging.level == "TRACE"  # Overridden
        assert config.solr.batch_size == 0  # Overridden

    def test_load_invalid_toml(self, tmp_path):
        """Test loading invalid TOML raises error."""
        config_file = tmp_path / "bad.toml"
        config_file.write_text("invalid toml [[[")

        with pytest.raises(ValueError, match="Invalid TOML configuration"):
            load_config(str(config_file))

    def test_load_invalid_values(self, tmp_path):
        """Test invalid values fail at load time."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[solr]\nbatch_size = -1\n")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(str(config_file))

    def test_get_config_before_load(self, monkeypatch):
        """Test get_config raises error if not loaded."""
        monkeypatch.setattr(solrbridge.config, "_config", None)

        with pytest.raises(RuntimeError, match="Configuration not loaded"):
            get_config()

    def test_get_config_after_load(self, tmp_path, monkeypatch):
        """Test get_config returns loaded config."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[logging]\nlevel = 'INFO'\n")

        monkeypatch.chdir(tmp_path)
        loaded = load_config(str(config_file))
        retrieved = get_config()

        assert retrieved is loaded
        assert retrieved.logging.level == "INFO"

    def test_reload_config(self, tmp_path, monkeypatch):
        """Test reload_config reloads from file."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[solr]\nbatch_size = 10\n")

        monkeypatch.chdir(tmp_path)
        config1 = load_config(str(config_file))
        assert config1.solr.batch_size == 10

        config_file.write_text("[solr]\nbatch_size = 20\n")

        config2 = reload_config(str(config_file))
        assert config2.solr.batch_size == 20


class TestConfigIntegration:
    """Integration tests for full configuration workflow."""

    def test_example_config_loads(self, monkeypatch):
        """Test the shipped example configuration is valid."""
        example = Path(__file__).parent.parent.parent / "config.example.toml"
        monkeypatch.chdir(example.parent)

        config = load_config(str(example))

        assert config.solr.batch_size == 100
        assert config.solr.endpoint.base_url == "http://localhost:8983/solr/collection1"
