"""Explicit session state: registry of signed-in identities and the per-request current user."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from laundry_app.application.identity_provider import Identity
from laundry_app.domain.models.user import LoginAttempt, Role, UserProfile, parse_role

AuthStateListener = Callable[[str, Optional[Identity]], None]

# Trust window before a registered token is checked with the provider again.
DEFAULT_SESSION_TTL_SECONDS = 300


def merge_user_profile(identity: Identity, record: Optional[Dict[str, Any]]) -> UserProfile:
    """
    Join provider identity with the stored user record.
    Record fields take precedence on conflict; without a record there is no role.
    """
    record = record or {}
    created_at = record.get("created_at")
    last_change = record.get("last_password_change")
    return UserProfile(
        uid=identity.uid,
        email=record.get("email") or identity.email,
        display_name=record.get("full_name") or identity.display_name,
        role=parse_role(record.get("role")) if record else None,
        created_at=created_at if isinstance(created_at, datetime) else None,
        last_password_change=last_change if isinstance(last_change, datetime) else None,
        last_login_attempt=LoginAttempt.from_dict(record.get("last_login_attempt")),
    )


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller of one request: provider identity plus merged profile."""

    identity: Identity
    profile: UserProfile

    @property
    def uid(self) -> str:
        return self.identity.uid

    @property
    def email(self) -> str:
        return self.profile.email

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role


@dataclass(frozen=True)
class _OpenSession:
    identity: Identity
    expires_at: float


class SessionRegistry:
    """
    Observable store of open sessions keyed by bearer token.
    Lifecycle: created at app start, open() on sign-in, close() on sign-out,
    close_all() at shutdown. Listeners receive (token, identity) on open and
    (token, None) on close or expiry.
    A session is trusted for the shorter of ttl_seconds and the token lifetime
    reported by the provider; after that get() returns None and the caller has
    to ask the provider again.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        *,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: Dict[str, _OpenSession] = {}
        self._listeners: list[AuthStateListener] = []
        self._logger = logger or logging.getLogger(__name__)
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def open(self, identity: Identity) -> None:
        self.prune()
        ttl = self._ttl_seconds
        if identity.expires_in is not None:
            ttl = min(ttl, identity.expires_in)
        self._sessions[identity.id_token] = _OpenSession(identity, self._clock() + ttl)
        self._notify(identity.id_token, identity)

    def get(self, token: str) -> Optional[Identity]:
        session = self._sessions.get(token)
        if session is None:
            return None
        if self._clock() >= session.expires_at:
            self.close(token)
            return None
        return session.identity

    def replace(self, old_token: str, identity: Identity) -> None:
        """Swap a session's identity after the provider reissued its token."""
        if old_token != identity.id_token:
            self.close(old_token)
        self.open(identity)

    def close(self, token: str) -> None:
        if self._sessions.pop(token, None) is not None:
            self._notify(token, None)

    def close_all(self) -> None:
        for token in list(self._sessions):
            self.close(token)

    def prune(self) -> int:
        """Close every expired session. Returns how many were dropped."""
        now = self._clock()
        expired = [token for token, session in self._sessions.items() if now >= session.expires_at]
        for token in expired:
            self.close(token)
        return len(expired)

    def _notify(self, token: str, identity: Optional[Identity]) -> None:
        for listener in list(self._listeners):
            try:
                listener(token, identity)
            except Exception as e:
                # A broken listener must not block sign-in or sign-out.
                self._logger.error("auth_state_listener_failed", extra={"error": str(e)})
