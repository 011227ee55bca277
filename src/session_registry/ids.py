"""Session identifier generation."""

import secrets
import string

# 26 + 26 + 10 + 30 = 92 symbols; no double quote or backslash.
ID_ALPHABET = (
    string.ascii_uppercase
    + string.ascii_lowercase
    + string.digits
    + "".join(ch for ch in string.punctuation if ch not in "\"\\")
)

DEFAULT_ID_LENGTH = 64


def generate_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """Return ``length`` characters drawn independently from ``ID_ALPHABET``.

    Each position is a fresh uniform draw from the OS CSPRNG; repeats are
    allowed. Uniqueness against live sessions is the caller's job.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise ValueError(f"id length must be a positive integer, got {length!r}")
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def redact_id(session_id: str) -> str:
    """Shorten an id for log output."""
    return f"{session_id[:8]}***"


__all__ = ["DEFAULT_ID_LENGTH", "ID_ALPHABET", "generate_id", "redact_id"]
