"""Session record and lifetime sentinel."""

from dataclasses import dataclass
from datetime import datetime
import enum
from typing import Generic, Optional, TypeVar

UserT = TypeVar("UserT")


class Lifetime(enum.Enum):
    """Distinguished lifetime values that are not durations."""

    NEVER = "never"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


NEVER = Lifetime.NEVER


@dataclass(eq=False)
class Session(Generic[UserT]):
    """A time-bounded binding between an opaque id and a user value.

    ``expires_at`` is ``None`` for sessions issued while the registry lifetime
    was ``NEVER``.
    """

    id: str
    expires_at: Optional[datetime]
    user: UserT

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= now


__all__ = ["Lifetime", "NEVER", "Session", "UserT"]
