"""
Configuration management for solrbridge.

Loads configuration from a TOML file with environment variable overrides
and validates it eagerly, so a bad endpoint or batch size fails at load time
rather than in the middle of an indexing run.

Usage:
    from solrbridge.config import load_config, get_config

    config = load_config()                  # default locations
    config = load_config("indexing.toml")   # explicit file

    config.solr.batch_size
    config.solr.endpoint.base_url           # http://localhost:8983/solr/collection1

    # Environment variable override: SOLRBRIDGE_SOLR_BATCH_SIZE=500
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from solrbridge.indexing.batch import validate_batch_size
from solrbridge.logger import get_logger, reconfigure_logger

logger = get_logger(__name__)

ENV_PREFIX = "SOLRBRIDGE_"
SUPPORTED_ENGINES = ("solr", "mock")
VALID_LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    console_enabled: bool = True
    file_enabled: bool = False
    json_enabled: bool = False
    log_dir: str = "logs"
    backup_count: int = 7

    def __post_init__(self):
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}. Must be one of {VALID_LOG_LEVELS}")
        self.level = self.level.upper()


@dataclass
class EndpointConfig:
    """
    Location of one Solr core.

    ``host`` may carry a scheme and a path prefix; ``path`` is appended to that
    prefix and ``core`` comes last.

    Example:
        >>> EndpointConfig(host="https://search.example.com/internal", path="/solr",
        ...                port=443, core="articles").base_url
        'https://search.example.com:443/internal/solr/articles'
    """
    id: str = "default"
    host: str = "http://localhost"
    port: int = 8983
    path: str = "/solr"
    core: str = "collection1"

    def __post_init__(self):
        parts = urlsplit(self.host if "://" in self.host else f"http://{self.host}")
        if parts.scheme not in ("http", "https"):
            raise ValueError(f"Invalid endpoint scheme '{parts.scheme}' for {self.id}: must be http or https")
        if not parts.hostname:
            raise ValueError(f"Endpoint {self.id} has no host name: {self.host!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ValueError(f"Invalid port for endpoint {self.id}: {self.port!r}")

    @property
    def base_url(self) -> str:
        parts = urlsplit(self.host if "://" in self.host else f"http://{self.host}")
        path = parts.path.rstrip("/") + "/" + self.path.strip("/")
        if self.core:
            path = path.rstrip("/") + "/" + self.core.strip("/")
        return f"{parts.scheme}://{parts.hostname}:{self.port}{path.rstrip('/')}"


@dataclass
class SolrConfig:
    """Search backend and indexing configuration."""
    engine: str = "solr"  # solr, mock
    batch_size: int = 0
    timeout_seconds: float = 30.0
    endpoint: EndpointConfig = field(default_factory=EndpointConfig)

    def __post_init__(self):
        if self.engine not in SUPPORTED_ENGINES:
            raise ValueError(f"Unknown engine '{self.engine}'. Must be one of {list(SUPPORTED_ENGINES)}")
        self.batch_size = validate_batch_size(self.batch_size)
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds}")


@dataclass
class Config:
    """Main configuration container."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    solr: SolrConfig = field(default_factory=SolrConfig)

    def __repr__(self) -> str:
        return (
            f"Config(log_level={self.logging.level}, "
            f"engine={self.solr.engine}, "
            f"endpoint={self.solr.endpoint.base_url}, "
            f"batch_size={self.solr.batch_size})"
        )


_config: Optional[Config] = None


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Find configuration file.

    Search order:
    1. Provided path
    2. SOLRBRIDGE_CONFIG environment variable
    3. ./config.toml
    4. ~/.solrbridge/config.toml

    Raises:
        FileNotFoundError: If no config file found
    """
    if config_path:
        if config_path.exists():
            return config_path
        raise FileNotFoundError(f"Config file not found: {config_path}")

    env_path = os.getenv("SOLRBRIDGE_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path
        logger.warning(f"SOLRBRIDGE_CONFIG points to non-existent file: {env_path}")

    local_config = Path("config.toml")
    if local_config.exists():
        return local_config

    home_config = Path.home() / ".solrbridge" / "config.toml"
    if home_config.exists():
        return home_config

    raise FileNotFoundError(
        "No configuration file found. Searched:\n"
        "  - SOLRBRIDGE_CONFIG environment variable\n"
        "  - ./config.toml\n"
        "  - ~/.solrbridge/config.toml"
    )


def _parse_env_value(raw: str) -> Any:
    if raw.lower() in ("true", "yes"):
        return True
    if raw.lower() in ("false", "no"):
        return False
    if raw.lstrip('-').isdigit():
        return int(raw)
    if '.' in raw:
        try:
            return float(raw)
        except ValueError:
            return raw
    return raw


def _apply_env_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to config.

    Format: SOLRBRIDGE_<SECTION>_<SUBSECTION>_<KEY>=value

    Examples:
        SOLRBRIDGE_LOGGING_LEVEL=DEBUG        -> logging.level
        SOLRBRIDGE_SOLR_BATCH_SIZE=500        -> solr.batch_size
        SOLRBRIDGE_SOLR_ENDPOINT_PORT=8984    -> solr.endpoint.port
    """
    # More specific prefixes first
    mappings = [
        ("SOLRBRIDGE_LOGGING_CONSOLE_", ["logging", "console"]),
        ("SOLRBRIDGE_LOGGING_FILE_", ["logging", "file"]),
        ("SOLRBRIDGE_LOGGING_JSON_", ["logging", "json"]),
        ("SOLRBRIDGE_LOGGING_", ["logging"]),
        ("SOLRBRIDGE_SOLR_ENDPOINT_", ["solr", "endpoint"]),
        ("SOLRBRIDGE_SOLR_", ["solr"]),
    ]

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        for prefix, path_parts in mappings:
            if not env_key.startswith(prefix):
                continue

            field_name = env_key[len(prefix):].lower()
            current = config_dict
            for part in path_parts:
                current = current.setdefault(part, {})

            value = _parse_env_value(env_value)
            # Numeric-looking strings stay strings where the field is textual
            if field_name in ("host", "path", "core", "id", "level", "engine", "dir"):
                value = env_value
            current[field_name] = value
            logger.debug(f"Applied env override: {env_key} -> {'.'.join(path_parts + [field_name])}")
            break
        else:
            logger.debug(f"Ignored unmapped env var: {env_key}")

    return config_dict


def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
    """
    Convert a configuration dictionary to a validated Config object.

    Raises:
        ValueError: If a value is invalid
    """
    logging_dict = config_dict.get("logging", {})
    solr_dict = config_dict.get("solr", {})
    endpoint_dict = solr_dict.get("endpoint", {})

    logging_config = LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        console_enabled=logging_dict.get("console", {}).get("enabled", True),
        file_enabled=logging_dict.get("file", {}).get("enabled", False),
        json_enabled=logging_dict.get("json", {}).get("enabled", False),
        log_dir=logging_dict.get("file", {}).get("dir", "logs"),
        backup_count=logging_dict.get("file", {}).get("backup_count", 7),
    )

    endpoint_config = EndpointConfig(
        id=endpoint_dict.get("id", "default"),
        host=endpoint_dict.get("host", "http://localhost"),
        port=endpoint_dict.get("port", 8983),
        path=endpoint_dict.get("path", "/solr"),
        core=endpoint_dict.get("core", "collection1"),
    )

    solr_config = SolrConfig(
        engine=solr_dict.get("engine", "solr"),
        batch_size=solr_dict.get("batch_size", 0),
        timeout_seconds=solr_dict.get("timeout_seconds", 30.0),
        endpoint=endpoint_config,
    )

    return Config(logging=logging_config, solr=solr_config)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from TOML file with environment overrides.

    Args:
        config_path: Optional path to config file. If None, searches default locations.

    Returns:
        Config object with validated settings

    Raises:
        FileNotFoundError: If config file not found
        ValueError: If the TOML is invalid or validation fails
    """
    global _config

    path = _find_config_file(Path(config_path) if config_path else None)
    logger.info(f"Loading configuration from: {path}")

    try:
        with open(path, "rb") as f:
            config_dict = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.error(f"Failed to parse TOML: {e}")
        raise ValueError(f"Invalid TOML configuration: {e}") from e

    config_dict = _apply_env_overrides(config_dict)

    try:
        config = _dict_to_config(config_dict)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to build config: {e}")
        raise ValueError(f"Configuration validation failed: {e}") from e

    _config = config
    logger.info(f"Configuration loaded: {_config}")

    reconfigure_logger(
        level=config.logging.level,
        console=config.logging.console_enabled,
        file=config.logging.file_enabled,
        json_file=config.logging.json_enabled,
        log_dir=config.logging.log_dir,
        backup_count=config.logging.backup_count,
    )
    return config


def get_config() -> Config:
    """
    Get current configuration.

    Raises:
        RuntimeError: If config not yet loaded
    """
    if _config is None:
        raise RuntimeError("Configuration not loaded. Call load_config() first.")
    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """Reload configuration from file."""
    global _config
    _config = None
    return load_config(config_path)
