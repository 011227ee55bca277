"""Configuration parsing and validation for the session registry."""

from dataclasses import dataclass
from datetime import timedelta
import logging
import math
import numbers
import os
from typing import Callable, Mapping, Optional, Union

from .ids import DEFAULT_ID_LENGTH
from .models import NEVER, Lifetime

logger = logging.getLogger("session_registry")

DEFAULT_LIFETIME_MINUTES = 30
MS_PER_MINUTE = 60 * 1000
MAX_LIFETIME_MS = timedelta.max // timedelta(milliseconds=1)

LIFETIME_ENV = "SESSION_REGISTRY_LIFETIME_MINUTES"
ID_LENGTH_ENV = "SESSION_REGISTRY_ID_LENGTH"
MAX_SESSIONS_ENV = "SESSION_REGISTRY_MAX_SESSIONS"

LifetimeInput = Union[int, float, str, timedelta, Lifetime]
LifetimeMs = Union[int, Lifetime]


class InvalidConfigurationError(ValueError):
    """Raised when a lifetime or id length cannot be used."""


@dataclass
class RegistrySettings:
    lifetime: LifetimeInput = DEFAULT_LIFETIME_MINUTES
    id_length: int = DEFAULT_ID_LENGTH
    max_sessions: Optional[int] = None


def normalize_lifetime(value: LifetimeInput) -> LifetimeMs:
    """Convert a lifetime to whole milliseconds, or return ``NEVER``.

    Numbers are minutes. ``"never"`` in any case maps to the sentinel.
    """
    if value is NEVER:
        return NEVER
    if isinstance(value, str):
        if value.strip().lower() == NEVER.value:
            return NEVER
        raise InvalidConfigurationError(
            f"lifetime must be a positive number of minutes or 'never', got {value!r}"
        )
    if isinstance(value, timedelta):
        ms = round(value.total_seconds() * 1000)
    elif isinstance(value, numbers.Real) and not isinstance(value, bool):
        if not math.isfinite(value):
            raise InvalidConfigurationError(f"lifetime must be finite, got {value!r}")
        ms = round(value * MS_PER_MINUTE)
    else:
        raise InvalidConfigurationError(
            f"lifetime must be a positive number of minutes or 'never', got {value!r}"
        )
    if ms <= 0:
        raise InvalidConfigurationError(f"lifetime must be positive, got {value!r}")
    if ms > MAX_LIFETIME_MS:
        raise InvalidConfigurationError(
            f"lifetime {value!r} exceeds the largest representable duration; use 'never' instead"
        )
    return ms


def check_id_length(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigurationError(f"id length must be a positive integer, got {value!r}")
    return value


def load_registry_settings(env: Optional[Mapping[str, str]] = None) -> RegistrySettings:
    """Read registry settings from ``env`` (defaults to ``os.environ``).

    Malformed values are logged and replaced by their defaults.
    """
    env = _ensure_env(env)
    return RegistrySettings(
        lifetime=_parse_lifetime(env.get(LIFETIME_ENV)),
        id_length=_parse_int_setting(env.get(ID_LENGTH_ENV), ID_LENGTH_ENV, DEFAULT_ID_LENGTH, check_id_length),
        max_sessions=_parse_int_setting(env.get(MAX_SESSIONS_ENV), MAX_SESSIONS_ENV, None, _check_max_sessions),
    )


def _ensure_env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return env if env is not None else os.environ


def _parse_lifetime(value: Optional[str]) -> LifetimeInput:
    if value is None or not value.strip():
        return DEFAULT_LIFETIME_MINUTES
    if value.strip().lower() == NEVER.value:
        return NEVER
    try:
        minutes = float(value)
        normalize_lifetime(minutes)
        return minutes
    except (ValueError, InvalidConfigurationError) as exc:
        logger.warning("Ignoring %s=%r (%s); using default %s", LIFETIME_ENV, value, exc, DEFAULT_LIFETIME_MINUTES)
        return DEFAULT_LIFETIME_MINUTES


def _parse_int_setting(
    value: Optional[str], env_key: str, default: Optional[int], check: Callable[[int], int]
) -> Optional[int]:
    if value is None or not value.strip():
        return default
    try:
        return check(int(value))
    except (ValueError, InvalidConfigurationError) as exc:
        logger.warning("Ignoring %s=%r (%s); using default %s", env_key, value, exc, default)
        return default


def _check_max_sessions(value: int) -> int:
    if value <= 0:
        raise InvalidConfigurationError(f"max sessions must be a positive integer, got {value!r}")
    return value


__all__ = [
    "DEFAULT_LIFETIME_MINUTES",
    "InvalidConfigurationError",
    "MAX_LIFETIME_MS",
    "RegistrySettings",
    "check_id_length",
    "load_registry_settings",
    "normalize_lifetime",
]
