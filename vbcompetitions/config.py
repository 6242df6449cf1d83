"""
Package configuration.

Loads settings from environment variables with sensible defaults.
"""

import os


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


# =============================================================================
# DOCUMENT SETTINGS
# =============================================================================
# The only document version this package reads and writes
SUPPORTED_VERSION = '1.0.0'

# How many schema violations are reported in a single DocumentError
MAX_SCHEMA_ERRORS = _get_int('VBC_MAX_SCHEMA_ERRORS', 5)

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# Directory holding competition JSON files
DATA_DIR = _get_str('VBC_DATA_DIR', 'data')

# Indentation used when writing competition files (0 writes compact JSON)
WRITE_INDENT = _get_int('VBC_WRITE_INDENT', 4)

# Validate the whole competition (not just the schema) before writing an update
VALIDATE_ON_SAVE = _get_bool('VBC_VALIDATE_ON_SAVE', True)

# =============================================================================
# CALENDAR SETTINGS
# =============================================================================
CALENDAR_PRODID = _get_str('VBC_CALENDAR_PRODID', '-//Volleyball Competitions//vbcompetitions//EN')

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')
