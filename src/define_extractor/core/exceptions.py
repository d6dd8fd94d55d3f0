"""Custom exception hierarchy for define-extractor.

All custom exceptions inherit from DefineExtractorError to enable:
- Unified exception handling in the CLI
- Clear distinction from built-in exceptions

Per-file problems (unreadable files, unbalanced nesting) are never raised;
the scanners resolve them locally. Only configuration, discovery and
whole-scan failures surface through this hierarchy.
"""

__all__ = [
    "DefineExtractorError",
    "ConfigError",
    "DiscoveryError",
    "ScanError",
]


class DefineExtractorError(Exception):
    """Base exception for all define-extractor errors."""

    pass


class ConfigError(DefineExtractorError):
    """Configuration loading or validation error.

    Raised when:
    - The config file does not exist or cannot be read
    - The YAML is malformed or is not a mapping
    - Pydantic validation of the merged settings fails
    """

    pass


class DiscoveryError(DefineExtractorError):
    """Header or source discovery found nothing usable.

    Raised when:
    - No header file for the selected profile exists under the root
    - The header declares no symbols (after blacklist filtering)
    - No source files of the selected dialect exist under the root
    """

    pass


class ScanError(DefineExtractorError):
    """Core-wide scan failure.

    Raised when the scheduler itself cannot complete, e.g. workers could
    not be started. Individual file failures never produce this error.
    """

    pass
