"""Configuration management."""
from rustgres.config.connection import (
    ConnectionConfigError,
    apply_overrides,
    load_connection_config,
    validate_connection_config,
)
from rustgres.config.generator import GeneratorConfig

__all__ = [
    'ConnectionConfigError',
    'GeneratorConfig',
    'apply_overrides',
    'load_connection_config',
    'validate_connection_config',
]
