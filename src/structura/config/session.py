"""Immutable session configuration.

One SessionConfig is resolved per run and passed explicitly into the
provider client and the resilient executor. Values are layered, lowest
precedence first:

1. Built-in defaults (structura.config.defaults)
2. ``~/.structura/config.yaml`` (``session:`` section)
3. Environment variables (``STRUCTURA_*`` plus the provider key variables)
4. Explicit overrides (CLI flags)
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from structura.config.defaults import (
    FILE_MAX_BYTES,
    HTTP_CONNECT_TIMEOUT_SECONDS,
    HTTP_READ_TIMEOUT_SECONDS,
    PROMPT_MAX_CHARS,
    RATELIMIT_MIN_INTERVAL_SECONDS,
    RETRY_BACKOFF_UNIT_SECONDS,
    RETRY_MAX_RETRIES,
    USER_CONFIG_DIRNAME,
    USER_CONFIG_FILENAME,
)
from structura.llm.types import (
    PROVIDER_ENDPOINTS,
    PROVIDER_KEY_ENV,
    PROVIDER_MODELS,
    ProviderIdentity,
    default_model,
)

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when configuration values are missing or invalid."""


# STRUCTURA_* env var -> SessionConfig field
_ENV_FIELDS = {
    "STRUCTURA_PROVIDER": "provider",
    "STRUCTURA_MODEL": "model",
    "STRUCTURA_ENDPOINT": "endpoint",
    "STRUCTURA_MIN_INTERVAL": "min_interval",
    "STRUCTURA_MAX_RETRIES": "max_retries",
    "STRUCTURA_BACKOFF_UNIT": "backoff_unit",
    "STRUCTURA_CONNECT_TIMEOUT": "connect_timeout",
    "STRUCTURA_READ_TIMEOUT": "read_timeout",
    "STRUCTURA_MAX_PROMPT_CHARS": "max_prompt_chars",
    "STRUCTURA_MAX_FILE_BYTES": "max_file_bytes",
}

_FLOAT_FIELDS = ("min_interval", "backoff_unit", "connect_timeout", "read_timeout")
_INT_FIELDS = ("max_retries", "max_prompt_chars", "max_file_bytes")


@dataclass(frozen=True)
class SessionConfig:
    """Provider selection and request tuning for one session."""

    provider: ProviderIdentity = ProviderIdentity.DEEPSEEK
    model: str = ""
    api_key: str = ""
    endpoint: str = ""
    min_interval: float = RATELIMIT_MIN_INTERVAL_SECONDS
    max_retries: int = RETRY_MAX_RETRIES
    backoff_unit: float = RETRY_BACKOFF_UNIT_SECONDS
    connect_timeout: float = HTTP_CONNECT_TIMEOUT_SECONDS
    read_timeout: float = HTTP_READ_TIMEOUT_SECONDS
    max_prompt_chars: int = PROMPT_MAX_CHARS
    max_file_bytes: int = FILE_MAX_BYTES

    def __post_init__(self):
        try:
            provider = ProviderIdentity(self.provider)
        except ValueError:
            choices = ", ".join(p.value for p in ProviderIdentity)
            raise ConfigError(f"Unknown provider '{self.provider}'. Choose one of: {choices}")
        object.__setattr__(self, "provider", provider)

        if not self.model:
            object.__setattr__(self, "model", default_model(provider))
        if self.model not in PROVIDER_MODELS[provider]:
            raise ConfigError(
                f"Model '{self.model}' is not available for {provider.value}. "
                f"Supported models: {list(PROVIDER_MODELS[provider])}"
            )
        if not self.endpoint:
            object.__setattr__(self, "endpoint", PROVIDER_ENDPOINTS[provider])

        if self.max_retries < 1:
            raise ConfigError("max_retries must be at least 1")
        for name in ("min_interval", "backoff_unit", "connect_timeout", "read_timeout"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.max_prompt_chars < 1:
            raise ConfigError("max_prompt_chars must be positive")
        if self.max_file_bytes < 0:
            raise ConfigError("max_file_bytes must not be negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionConfig":
        """Create config from dict, ignoring unknown keys."""
        return cls(**_coerce({k: v for k, v in data.items() if k in cls.__dataclass_fields__}))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionConfig":
        """Create config from environment variables only."""
        env = environ if environ is not None else os.environ
        values = _coerce(_values_from_env(env, {}))
        provider = values.get("provider", ProviderIdentity.DEEPSEEK)
        values["api_key"] = _key_from_env(provider, env)
        return cls.from_dict(values)

    def with_overrides(self, **overrides: Any) -> "SessionConfig":
        """Return a copy with the non-None overrides applied.

        Switching provider resets model, endpoint and key to the new
        provider's defaults unless they are overridden too.
        """
        values = _coerce({k: v for k, v in overrides.items() if v is not None})
        if "provider" in values and values["provider"] is not self.provider:
            values.setdefault("model", "")
            values.setdefault("endpoint", "")
            values.setdefault("api_key", "")
        return replace(self, **values)

    @property
    def masked_key(self) -> str:
        if not self.api_key:
            return "(not set)"
        if len(self.api_key) <= 8:
            return "*" * len(self.api_key)
        return f"{self.api_key[:4]}...{self.api_key[-4:]}"

    def to_dict(self, mask_key: bool = True) -> dict:
        """Convert config to dict."""
        data = asdict(self)
        data["provider"] = self.provider.value
        if mask_key:
            data["api_key"] = self.masked_key
        return data


def user_config_path() -> Path:
    return Path.home() / USER_CONFIG_DIRNAME / USER_CONFIG_FILENAME


def load_user_config(path: Optional[Path] = None) -> dict:
    """Load the ``session:`` section of the user config file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError: If the file is not valid YAML or has the wrong shape
    """
    config_path = path or user_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the root")
    section = data.get("session") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'session' in {config_path} must be a mapping")
    logger.debug(f"Loaded user config from {config_path}")
    return section


def resolve_session_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> SessionConfig:
    """Layer user config, environment and explicit overrides into one SessionConfig."""
    env = environ if environ is not None else os.environ
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    user = dict(load_user_config(config_path))
    user_key = str(user.pop("api_key", "") or "")
    user_provider = user.get("provider")

    values = _values_from_env(env, user)
    values.update(overrides)

    provider = _coerce({"provider": values.get("provider", ProviderIdentity.DEEPSEEK)})["provider"]
    # A model from a lower layer may belong to a different provider
    model = values.get("model")
    if model and "model" not in overrides and model not in PROVIDER_MODELS[provider]:
        logger.info(f"Model '{model}' does not belong to {provider.value}; using {default_model(provider)}")
        values["model"] = ""
    if "provider" in overrides and "endpoint" not in overrides and "endpoint" in user:
        if _coerce({"provider": user_provider or ProviderIdentity.DEEPSEEK})["provider"] is not provider:
            values.pop("endpoint")

    if not values.get("api_key"):
        key = _key_from_env(provider, env)
        if not key and user_key:
            key_owner = _coerce({"provider": user_provider})["provider"] if user_provider else provider
            if key_owner is provider:
                key = user_key
        values["api_key"] = key
    return SessionConfig.from_dict(values)


def _values_from_env(environ: Mapping[str, str], base: dict) -> dict:
    values = dict(base)
    for env_name, field_name in _ENV_FIELDS.items():
        raw = environ.get(env_name)
        if raw:
            values[field_name] = raw
    return values


def _key_from_env(provider: ProviderIdentity, environ: Mapping[str, str]) -> str:
    for name in PROVIDER_KEY_ENV[provider]:
        key = environ.get(name, "").strip()
        if key:
            return key
    return ""


def _coerce(values: dict) -> dict:
    out = dict(values)
    if "provider" in out and not isinstance(out["provider"], ProviderIdentity):
        try:
            out["provider"] = ProviderIdentity(str(out["provider"]).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in ProviderIdentity)
            raise ConfigError(f"Unknown provider '{out['provider']}'. Choose one of: {choices}")
    for name in _FLOAT_FIELDS:
        if name in out:
            try:
                out[name] = float(out[name])
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a number, got {out[name]!r}")
    for name in _INT_FIELDS:
        if name in out:
            try:
                out[name] = int(out[name])
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be an integer, got {out[name]!r}")
    for name in ("model", "api_key", "endpoint"):
        if name in out and out[name] is not None:
            out[name] = str(out[name]).strip()
    return out
