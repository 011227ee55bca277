"""In-memory session registry."""

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Generic, Optional, Union

from .config import (
    DEFAULT_LIFETIME_MINUTES,
    InvalidConfigurationError,
    LifetimeInput,
    LifetimeMs,
    check_id_length,
    normalize_lifetime,
)
from .ids import DEFAULT_ID_LENGTH, generate_id, redact_id
from .models import NEVER, Lifetime, Session, UserT

logger = logging.getLogger("session_registry")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry(Generic[UserT]):
    """Issues session ids and tracks which user each one is bound to.

    Expiry is enforced lazily: ``validate`` refuses an expired session but
    leaves it in place until ``end``, ``destroy_all`` or ``purge_expired``
    removes it. Nothing runs in the background.

    The registry holds no locks. Callers sharing one instance across threads
    must serialise access themselves, e.g. one registry per worker or an
    external mutex around every call.
    """

    def __init__(
        self,
        lifetime_minutes: LifetimeInput = DEFAULT_LIFETIME_MINUTES,
        id_length: int = DEFAULT_ID_LENGTH,
        *,
        clock: Optional[Clock] = None,
        max_sessions: Optional[int] = None,
    ) -> None:
        self._lifetime_ms: LifetimeMs = normalize_lifetime(lifetime_minutes)
        self._id_length = check_id_length(id_length)
        self._clock: Clock = clock or utc_now
        self._sessions: dict[str, Session[UserT]] = {}
        self._max_sessions = max_sessions if max_sessions and max_sessions > 0 else None
        self._over_max = False

    # Configuration

    @property
    def lifetime_ms(self) -> LifetimeMs:
        return self._lifetime_ms

    def set_lifetime(self, value: LifetimeInput) -> None:
        """Change the lifetime used by future ``start`` and ``renew`` calls."""
        self._lifetime_ms = normalize_lifetime(value)
        logger.info("Session lifetime set to %s", self._describe_lifetime())

    def get_lifetime(self) -> Union[timedelta, Lifetime]:
        if self._lifetime_ms is NEVER:
            return NEVER
        return timedelta(milliseconds=self._lifetime_ms)

    def set_id_length(self, length: int) -> None:
        self._id_length = check_id_length(length)
        logger.info("Session id length set to %s", length)

    def get_id_length(self) -> int:
        return self._id_length

    def generate_id(self) -> str:
        return generate_id(self._id_length)

    # Lifecycle

    def start(self, user: UserT) -> str:
        """Bind ``user`` to a new unique session id and return the id."""
        _require_user(user)

        session_id = self.generate_id()
        while session_id in self._sessions:
            logger.debug("Session id collision on %s; regenerating", redact_id(session_id))
            session_id = self.generate_id()

        self._sessions[session_id] = Session(
            id=session_id,
            expires_at=self._next_expiry(),
            user=user,
        )
        logger.debug("Started session %s (%s active)", redact_id(session_id), len(self._sessions))
        self._check_size()
        return session_id

    def end(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.debug("Ended session %s", redact_id(session_id))
        self._check_size()
        return True

    def renew(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        if self._lifetime_ms is not NEVER:
            session.expires_at = self._next_expiry()
        return True

    def validate(self, session_id: str) -> Optional[UserT]:
        """Return the bound user if the session is live, renewing it.

        Expired sessions yield ``None`` and stay registered.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._lifetime_ms is not NEVER and session.is_expired(self._clock()):
            logger.debug("Session %s is expired", redact_id(session_id))
            return None
        self.renew(session_id)
        return session.user

    def get_user(self, session_id: str) -> Optional[UserT]:
        session = self._sessions.get(session_id)
        return session.user if session is not None else None

    def update_user(self, session_id: str, user: UserT) -> bool:
        _require_user(user)
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.user = user
        return True

    def get_session_id(self, user: UserT) -> Optional[str]:
        """Return the first session id (in start order) bound to ``user``.

        Sessions holding ``user`` itself are found first; only then are bound
        users compared with ``==``, and errors raised by that comparison
        propagate.
        """
        for session in self._sessions.values():
            if session.user is user:
                return session.id
        for session in self._sessions.values():
            if session.user == user:
                return session.id
        return None

    def get_all(self) -> list[Session[UserT]]:
        return list(self._sessions.values())

    def destroy_all(self) -> None:
        count = len(self._sessions)
        self._sessions.clear()
        logger.info("Destroyed %s sessions", count)
        self._check_size()

    def purge_expired(self) -> int:
        """Remove sessions whose expiry has passed and return how many went."""
        if self._lifetime_ms is NEVER:
            return 0
        now = self._clock()
        expired = [sid for sid, session in self._sessions.items() if session.is_expired(now)]
        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info("Purged %s expired sessions", len(expired))
        self._check_size()
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _next_expiry(self) -> Optional[datetime]:
        if self._lifetime_ms is NEVER:
            return None
        now = self._clock()
        try:
            return now + timedelta(milliseconds=self._lifetime_ms)
        except OverflowError:
            return datetime.max.replace(tzinfo=now.tzinfo)

    def _describe_lifetime(self) -> str:
        if self._lifetime_ms is NEVER:
            return "never"
        return f"{self._lifetime_ms}ms"

    def _check_size(self) -> None:
        """Log once each time the registry grows past ``max_sessions``."""
        if self._max_sessions is None:
            return
        count = len(self._sessions)
        if count <= self._max_sessions:
            self._over_max = False
            return
        if self._over_max:
            return

        self._over_max = True
        if self._lifetime_ms is NEVER:
            expired = 0
        else:
            now = self._clock()
            expired = sum(1 for session in self._sessions.values() if session.is_expired(now))
        logger.warning(
            "Session registry holds %s sessions, above max_sessions=%s (%s live, %s expired); "
            "expired sessions stay until purge_expired, end or destroy_all",
            count,
            self._max_sessions,
            count - expired,
            expired,
        )


def _require_user(user: object) -> None:
    if user is None:
        raise ValueError("user must not be None")


__all__ = ["Clock", "InvalidConfigurationError", "SessionRegistry", "utc_now"]
