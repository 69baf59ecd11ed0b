"""Structura configuration: defaults and the immutable session config."""

from structura.config.session import (
    ConfigError,
    SessionConfig,
    load_user_config,
    resolve_session_config,
    user_config_path,
)

__all__ = [
    "ConfigError",
    "SessionConfig",
    "load_user_config",
    "resolve_session_config",
    "user_config_path",
]
