"""Connection configuration management."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Environment variable -> config key
ENV_VARS = {
    'POSTGRES_HOST': 'host',
    'POSTGRES_PORT': 'port',
    'POSTGRES_USER': 'user',
    'POSTGRES_PASSWORD': 'password',
    'POSTGRES_DB': 'database',
}

REQUIRED_FIELDS = ('host', 'user', 'database')


class ConnectionConfigError(ValueError):
    """Raised when connection configuration loading fails."""


def default_config_path() -> Path:
    """Location of the per-user connection file."""
    return Path.home() / '.rustgres' / 'postgres.yaml'


def load_connection_config(conn_file: Optional[str] = None) -> Dict[str, Any]:
    """Load PostgreSQL connection configuration.

    Loads configuration with the following priority:
    1. Explicit --conn-file path (highest priority)
    2. ~/.rustgres/postgres.yaml
    3. POSTGRES_* environment variables
    4. Defaults (localhost:5432)

    Args:
        conn_file: Optional explicit connection file path

    Returns:
        Dictionary with connection configuration

    Raises:
        ConnectionConfigError: If configuration file is invalid
    """
    config = _get_defaults()

    if conn_file:
        config.update(_load_yaml_config(conn_file))
        logger.info("Loaded connection config from: %s", conn_file)
        return _normalize(config)

    default_path = default_config_path()
    if default_path.exists():
        config.update(_load_yaml_config(str(default_path)))
        logger.info("Loaded connection config from: %s", default_path)
        return _normalize(config)

    env_config = _load_from_env()
    if env_config:
        config.update(env_config)
        logger.info("Loaded connection config from environment variables")
        return _normalize(config)

    logger.debug("No connection config found. Using defaults.")
    return _normalize(config)


def apply_overrides(config: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    """Return a copy of config with every non-empty override applied."""
    merged = dict(config)
    for key, value in overrides.items():
        if value not in (None, ''):
            merged[key] = value
    return _normalize(merged)


def _load_yaml_config(file_path: str) -> Dict[str, Any]:
    """Load YAML configuration file.

    Args:
        file_path: Path to YAML config file

    Returns:
        Parsed configuration dictionary

    Raises:
        ConnectionConfigError: If file is invalid or missing
    """
    try:
        if not os.path.exists(file_path):
            raise ConnectionConfigError(f"Configuration file not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ConnectionConfigError(
                f"Configuration file must contain a YAML dictionary: {file_path}"
            )

        return config

    except yaml.YAMLError as e:
        raise ConnectionConfigError(
            f"Invalid YAML configuration: {file_path}\n{e}"
        ) from e
    except OSError as e:
        raise ConnectionConfigError(
            f"Error reading configuration file: {file_path}\n{e}"
        ) from e


def _load_from_env() -> Optional[Dict[str, Any]]:
    """Load configuration from POSTGRES_* environment variables."""
    config = {}
    for env_key, config_key in ENV_VARS.items():
        value = os.getenv(env_key)
        if value:
            config[config_key] = value

    return config if config else None


def _get_defaults() -> Dict[str, Any]:
    return {
        'host': 'localhost',
        'port': 5432,
        'user': '',
        'password': '',
        'database': ''
    }


def _normalize(config: Dict[str, Any]) -> Dict[str, Any]:
    port = config.get('port')
    if port not in (None, ''):
        try:
            config['port'] = int(port)
        except (TypeError, ValueError) as e:
            raise ConnectionConfigError(f"Invalid port: {port!r}") from e
    return config


def validate_connection_config(config: Dict[str, Any]) -> bool:
    """Validate that required connection parameters are present.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration has required parameters

    Raises:
        ConnectionConfigError: If required parameters are missing
    """
    missing_fields = [f for f in REQUIRED_FIELDS if f not in config or not config[f]]

    if missing_fields:
        raise ConnectionConfigError(
            f"Missing required connection parameters: "
            f"{', '.join(missing_fields)}. "
            f"Provide via --conn-file, ~/.rustgres/postgres.yaml, "
            f"POSTGRES_* environment variables or command-line flags"
        )

    return True
