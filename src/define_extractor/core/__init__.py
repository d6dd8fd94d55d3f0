"""Core infrastructure: configuration and the exception hierarchy."""

from define_extractor.core.config import ExtractorConfig, load_config
from define_extractor.core.exceptions import (
    ConfigError,
    DefineExtractorError,
    DiscoveryError,
    ScanError,
)

__all__ = [
    "ExtractorConfig",
    "load_config",
    "ConfigError",
    "DefineExtractorError",
    "DiscoveryError",
    "ScanError",
]
