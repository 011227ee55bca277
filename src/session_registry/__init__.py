"""In-process session registry: opaque ids bound to application users."""

import logging
from typing import Mapping, Optional

from .config import (
    InvalidConfigurationError,
    RegistrySettings,
    load_registry_settings,
    normalize_lifetime,
)
from .ids import ID_ALPHABET, generate_id
from .models import NEVER, Lifetime, Session
from .registry import Clock, SessionRegistry

logger = logging.getLogger("session_registry")


def create_session_registry(
    env: Optional[Mapping[str, str]] = None,
    *,
    clock: Optional[Clock] = None,
    settings: Optional[RegistrySettings] = None,
) -> SessionRegistry:
    """Create a registry configured from ``env`` (defaults to ``os.environ``)."""
    settings = settings or load_registry_settings(env)
    lifetime = normalize_lifetime(settings.lifetime)

    logger.info(
        "Using in-memory session registry (lifetime=%s id_length=%s max_sessions=%s)",
        "never" if lifetime is NEVER else f"{lifetime}ms",
        settings.id_length,
        settings.max_sessions,
    )

    return SessionRegistry(
        settings.lifetime,
        settings.id_length,
        clock=clock,
        max_sessions=settings.max_sessions,
    )


__all__ = [
    "Clock",
    "ID_ALPHABET",
    "InvalidConfigurationError",
    "Lifetime",
    "NEVER",
    "RegistrySettings",
    "Session",
    "SessionRegistry",
    "create_session_registry",
    "generate_id",
    "load_registry_settings",
]
