"""Tests for registry configuration parsing and validation."""

from datetime import timedelta
import logging

import pytest

import session_registry
import session_registry.config as config
from session_registry import NEVER, InvalidConfigurationError, SessionRegistry


def test_defaults():
    registry = SessionRegistry()
    assert registry.get_lifetime() == timedelta(minutes=30)
    assert registry.lifetime_ms == 30 * 60 * 1000
    assert registry.get_id_length() == 64


@pytest.mark.parametrize("value", ["never", "NEVER", " Never ", NEVER])
def test_never_is_stored_as_sentinel(value):
    registry = SessionRegistry(lifetime_minutes=value)
    assert registry.lifetime_ms is NEVER
    assert registry.get_lifetime() is NEVER


@pytest.mark.parametrize(
    "value, expected_ms",
    [
        (1, 60_000),
        (0.5, 30_000),
        (timedelta(seconds=90), 90_000),
    ],
)
def test_lifetime_normalised_to_milliseconds(value, expected_ms):
    assert config.normalize_lifetime(value) == expected_ms


@pytest.mark.parametrize("value", [0, -5, float("nan"), float("inf"), "forever", "30", None, True, timedelta(0)])
def test_invalid_lifetime_rejected(value):
    with pytest.raises(InvalidConfigurationError):
        SessionRegistry(lifetime_minutes=value)


@pytest.mark.parametrize("value", [0, -1, 1.5, "64", None, False])
def test_invalid_id_length_rejected(value):
    with pytest.raises(InvalidConfigurationError):
        SessionRegistry(id_length=value)


def test_setters_validate_and_keep_previous_value():
    registry = SessionRegistry(lifetime_minutes=10, id_length=20)

    with pytest.raises(InvalidConfigurationError):
        registry.set_lifetime(-1)
    with pytest.raises(InvalidConfigurationError):
        registry.set_id_length(0)

    assert registry.get_lifetime() == timedelta(minutes=10)
    assert registry.get_id_length() == 20


def test_invalid_configuration_error_is_value_error():
    assert issubclass(InvalidConfigurationError, ValueError)


def test_load_registry_settings_defaults():
    settings = config.load_registry_settings({})
    assert settings == config.RegistrySettings()


def test_load_registry_settings_reads_env():
    env = {
        "SESSION_REGISTRY_LIFETIME_MINUTES": "15",
        "SESSION_REGISTRY_ID_LENGTH": "32",
        "SESSION_REGISTRY_MAX_SESSIONS": "1000",
    }
    settings = config.load_registry_settings(env)

    assert settings.lifetime == 15.0
    assert settings.id_length == 32
    assert settings.max_sessions == 1000


def test_load_registry_settings_never():
    settings = config.load_registry_settings({"SESSION_REGISTRY_LIFETIME_MINUTES": "Never"})
    assert settings.lifetime is NEVER


@pytest.mark.parametrize(
    "env, message",
    [
        ({"SESSION_REGISTRY_LIFETIME_MINUTES": "soon"}, "SESSION_REGISTRY_LIFETIME_MINUTES"),
        ({"SESSION_REGISTRY_LIFETIME_MINUTES": "-3"}, "SESSION_REGISTRY_LIFETIME_MINUTES"),
        ({"SESSION_REGISTRY_LIFETIME_MINUTES": "1e15"}, "largest representable duration"),
        ({"SESSION_REGISTRY_ID_LENGTH": "0"}, "Ignoring SESSION_REGISTRY_ID_LENGTH='0'"),
        ({"SESSION_REGISTRY_ID_LENGTH": "long"}, "Ignoring SESSION_REGISTRY_ID_LENGTH='long'"),
        ({"SESSION_REGISTRY_MAX_SESSIONS": "-4"}, "max sessions must be a positive integer"),
    ],
)
def test_load_registry_settings_falls_back_on_bad_values(env, message, caplog):
    caplog.set_level(logging.WARNING, "session_registry")

    settings = config.load_registry_settings(env)

    assert settings == config.RegistrySettings()
    assert message in caplog.text


def test_load_registry_settings_uses_os_environ(monkeypatch):
    monkeypatch.setenv("SESSION_REGISTRY_ID_LENGTH", "24")
    assert config.load_registry_settings().id_length == 24


def test_create_session_registry_from_env(clock, caplog):
    caplog.set_level(logging.INFO, "session_registry")
    env = {"SESSION_REGISTRY_LIFETIME_MINUTES": "never", "SESSION_REGISTRY_ID_LENGTH": "16"}

    registry = session_registry.create_session_registry(env, clock=clock)

    assert isinstance(registry, SessionRegistry)
    assert registry.get_lifetime() is NEVER
    assert len(registry.start("u")) == 16
    assert "lifetime=never id_length=16" in caplog.text


def test_create_session_registry_with_explicit_settings():
    settings = config.RegistrySettings(lifetime=5, id_length=12)
    registry = session_registry.create_session_registry(settings=settings)

    assert registry.get_lifetime() == timedelta(minutes=5)
    assert registry.get_id_length() == 12


@pytest.mark.parametrize("value", [10**13, 1e300, timedelta.max])
def test_lifetime_beyond_timedelta_range_rejected(value):
    with pytest.raises(InvalidConfigurationError, match="largest representable duration"):
        SessionRegistry(lifetime_minutes=value)


def test_largest_lifetime_is_usable(clock):
    registry = SessionRegistry(lifetime_minutes=timedelta(days=999_999_999), clock=clock)

    assert registry.get_lifetime() == timedelta(days=999_999_999)
    assert registry.lifetime_ms <= config.MAX_LIFETIME_MS

    session_id = registry.start("u")
    assert registry.validate(session_id) == "u"
