"""Default configuration values for Structura.

This module centralizes the hard-coded numbers (intervals, retry budgets,
size ceilings, timeouts) into a single location. Modules import these
constants instead of hard-coding values.

Usage:
    from structura.config.defaults import (
        RATELIMIT_MIN_INTERVAL_SECONDS,
        RETRY_MAX_RETRIES,
    )
"""

from __future__ import annotations

# =============================================================================
# Rate Limiter Defaults
# =============================================================================

# Minimum spacing between two dispatches from one executor
RATELIMIT_MIN_INTERVAL_SECONDS = 1.0


# =============================================================================
# Retry Defaults
# =============================================================================

RETRY_MAX_RETRIES = 3
RETRY_BACKOFF_UNIT_SECONDS = 1.0  # backoff = unit * 2**attempt


# =============================================================================
# Timeout Defaults
# =============================================================================

HTTP_CONNECT_TIMEOUT_SECONDS = 10.0
HTTP_READ_TIMEOUT_SECONDS = 120.0


# =============================================================================
# File Source Defaults
# =============================================================================

FILE_MAX_BYTES = 5 * 1024 * 1024  # bodies above this are read as empty


# =============================================================================
# Prompt Defaults
# =============================================================================

PROMPT_MAX_CHARS = 100_000
PROMPT_TRUNCATION_MARKER = "\n... [truncated] ..."


# =============================================================================
# Output Defaults
# =============================================================================

OUTPUT_SUFFIX = ".md"
PROJECT_STRUCTURE_FILENAME = "PROJECT_STRUCTURE.md"
PROJECT_SETUP_FILENAME = "PROJECT_SETUP.md"


# =============================================================================
# User Config
# =============================================================================

USER_CONFIG_DIRNAME = ".structura"
USER_CONFIG_FILENAME = "config.yaml"
