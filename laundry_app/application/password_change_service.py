"""Credential hygiene: in-session password change with cooldown and strength rules."""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from laundry_app.application.document_store import USERS_COLLECTION, DocumentStore
from laundry_app.application.exceptions import ApplicationError
from laundry_app.application.identity_provider import Identity, IdentityError, IdentityProvider
from laundry_app.application.session import CurrentUser
from laundry_app.audit.logger import AuditLogger
from laundry_app.domain.validators.account_validator import WEAK_PASSWORD_MESSAGE, is_strong_password

ACTION_PASSWORD_CHANGE = "password_change"

_CURRENT_PASSWORD_REJECTED_CODES = frozenset({"auth/invalid-credential", "auth/wrong-password"})


class PasswordChangeFailure(str, Enum):
    COOLDOWN = "cooldown"
    WEAK_PASSWORD = "weak_password"
    SAME_AS_CURRENT = "same_as_current"
    CURRENT_PASSWORD_INCORRECT = "current_password_incorrect"
    PROVIDER_WEAK_PASSWORD = "provider_weak_password"
    FAILED = "failed"


_FAILURE_MESSAGES: dict[PasswordChangeFailure, str] = {
    PasswordChangeFailure.WEAK_PASSWORD: WEAK_PASSWORD_MESSAGE,
    PasswordChangeFailure.SAME_AS_CURRENT: "New password cannot be the same as the current password.",
    PasswordChangeFailure.CURRENT_PASSWORD_INCORRECT: "Current password is incorrect.",
    PasswordChangeFailure.PROVIDER_WEAK_PASSWORD: "New password is too weak. Please choose a stronger password.",
    PasswordChangeFailure.FAILED: "Failed to change password. Please try again.",
}


def cooldown_message(cooldown: timedelta) -> str:
    hours = int(cooldown.total_seconds() // 3600)
    return f"You must wait at least {hours} hours before changing your password again."


class PasswordChangeRejectedError(ApplicationError):
    """Exactly one fixed user-facing message per failing step."""

    def __init__(self, failure: PasswordChangeFailure, message: str) -> None:
        super().__init__(message)
        self.failure = failure


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class PasswordChangeService:
    """
    Checks in order, stopping at the first failure:
    cooldown since last_password_change, strength pattern, differs from the
    entered current password. Then re-authenticates, updates the credential
    and stamps last_password_change.
    """

    def __init__(
        self,
        documents: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLogger,
        *,
        cooldown: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._identity = identity
        self._audit = audit
        self._cooldown = cooldown
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def _message(self, failure: PasswordChangeFailure) -> str:
        if failure is PasswordChangeFailure.COOLDOWN:
            return cooldown_message(self._cooldown)
        return _FAILURE_MESSAGES[failure]

    def _reject(
        self,
        user: CurrentUser,
        failure: PasswordChangeFailure,
        *,
        validation: bool = False,
        detail: Optional[str] = None,
    ) -> PasswordChangeRejectedError:
        record = self._audit.validation if validation else self._audit.auth
        record(
            ACTION_PASSWORD_CHANGE,
            success=False,
            actor_id=user.uid,
            actor_email=user.email,
            error_message=detail or failure.value,
            details={"reason": failure.value},
        )
        return PasswordChangeRejectedError(failure, self._message(failure))

    async def change_password(
        self,
        user: CurrentUser,
        current_password: str,
        new_password: str,
    ) -> Identity:
        """Returns the identity reissued by the provider. Raises PasswordChangeRejectedError."""
        now = self._clock()

        # Step 1: Cooldown
        try:
            document = await self._documents.get(USERS_COLLECTION, user.uid)
        except Exception as e:
            self._logger.error("password_change_profile_read_failed", extra={"error": str(e)})
            raise self._reject(user, PasswordChangeFailure.FAILED, detail=str(e)) from e
        last_change = document.data.get("last_password_change") if document else None
        if isinstance(last_change, datetime) and now - _as_utc(last_change) < self._cooldown:
            raise self._reject(user, PasswordChangeFailure.COOLDOWN, validation=True)

        # Step 2: Strength
        if not is_strong_password(new_password):
            raise self._reject(user, PasswordChangeFailure.WEAK_PASSWORD, validation=True)

        # Step 3: Distinct from the entered current password
        if current_password == new_password:
            raise self._reject(user, PasswordChangeFailure.SAME_AS_CURRENT, validation=True)

        # Step 4: Re-authenticate and change the credential
        try:
            confirmed = await self._identity.reauthenticate(user.identity, current_password)
        except IdentityError as e:
            failure = (
                PasswordChangeFailure.CURRENT_PASSWORD_INCORRECT
                if e.code in _CURRENT_PASSWORD_REJECTED_CODES
                else PasswordChangeFailure.FAILED
            )
            raise self._reject(user, failure, detail=e.code) from e
        except Exception as e:
            self._logger.error("password_change_reauth_failed", extra={"error": str(e)})
            raise self._reject(user, PasswordChangeFailure.FAILED, detail=str(e)) from e

        try:
            updated = await self._identity.update_password(confirmed, new_password)
        except IdentityError as e:
            failure = (
                PasswordChangeFailure.PROVIDER_WEAK_PASSWORD
                if e.code == "auth/weak-password"
                else PasswordChangeFailure.FAILED
            )
            raise self._reject(user, failure, detail=e.code) from e
        except Exception as e:
            self._logger.error("password_change_update_failed", extra={"error": str(e)})
            raise self._reject(user, PasswordChangeFailure.FAILED, detail=str(e)) from e

        # Step 5: Stamp the change; the credential is already replaced
        try:
            await self._documents.update(USERS_COLLECTION, user.uid, {"last_password_change": now})
        except Exception as e:
            self._logger.error(
                "password_change_timestamp_failed",
                extra={"uid": user.uid, "error": str(e)},
            )
            self._audit.error(
                "password_change_timestamp",
                success=False,
                actor_id=user.uid,
                actor_email=user.email,
                error_message=str(e),
            )

        self._audit.auth(
            ACTION_PASSWORD_CHANGE,
            success=True,
            actor_id=user.uid,
            actor_email=user.email,
        )
        return updated
