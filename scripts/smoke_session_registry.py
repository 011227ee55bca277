"""Quick smoke test for the in-memory session registry.

Uses a short real lifetime so expiry is observed against the wall clock.
"""

from __future__ import annotations

import sys
import time

from session_registry import SessionRegistry


class SmokeFailure(RuntimeError):
    pass


def run_smoke(lifetime_seconds: float) -> None:
    registry = SessionRegistry(lifetime_minutes=lifetime_seconds / 60, id_length=32)

    user = {"name": "smoke-user"}
    session_id = registry.start(user)
    if registry.validate(session_id) is not user:
        raise SmokeFailure("validate did not return the bound user right after start")
    if registry.get_session_id(user) != session_id:
        raise SmokeFailure("reverse lookup returned a different id")
    print(f"[+] Session {session_id[:8]}*** started and validated")

    time.sleep(lifetime_seconds / 2)
    if registry.validate(session_id) is not user:
        raise SmokeFailure("session expired before its lifetime elapsed")
    print("[+] Session renewed by validate")

    print("[+] Waiting for lifetime to expire...")
    time.sleep(lifetime_seconds + 0.5)

    if registry.validate(session_id) is not None:
        raise SmokeFailure("validate accepted an expired session")
    if registry.get_user(session_id) is not user:
        raise SmokeFailure("expired session was evicted without an explicit purge")
    print("[+] Expired session refused but still registered")

    removed = registry.purge_expired()
    if removed != 1 or len(registry) != 0:
        raise SmokeFailure(f"purge_expired removed {removed}, {len(registry)} left")
    if registry.end(session_id):
        raise SmokeFailure("end reported removal of a purged session")
    print("[+] Purge removed the expired session")

    print("[✓] Session registry smoke test passed")


def main() -> int:
    try:
        run_smoke(lifetime_seconds=2.0)
    except SmokeFailure as exc:
        print(f"SMOKE FAILURE: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
