"""Account application service: signup, login, logout and bearer-token resolution."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from laundry_app.application.document_store import (
    SECURITY_QUESTIONS_COLLECTION,
    SERVER_TIMESTAMP,
    USERS_COLLECTION,
    DocumentStore,
)
from laundry_app.application.exceptions import (
    AuthenticationFailedError,
    BackendUnavailableError,
    IdentityRejectedError,
    NotAuthenticatedError,
)
from laundry_app.application.identity_provider import (
    Identity,
    IdentityError,
    IdentityProvider,
    friendly_auth_message,
)
from laundry_app.application.session import CurrentUser, SessionRegistry, merge_user_profile
from laundry_app.audit.logger import AuditLogger
from laundry_app.domain.exceptions import DomainValidationError
from laundry_app.domain.models.credential import SecurityCredentialRecord
from laundry_app.domain.models.user import DEFAULT_ROLE, LoginAttempt
from laundry_app.domain.validators.account_validator import (
    normalize_email,
    validate_email,
    validate_signup,
)
from laundry_app.security.answer_hashing import hash_answer

ACTION_SIGNUP = "user_signup"
ACTION_LOGIN_SUCCESS = "login_success"
ACTION_LOGIN_FAILURE = "login_failure"
ACTION_LOGOUT = "logout"
ACTION_PROFILE_UPDATE = "profile_update"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountService:
    """
    Orchestrates the identity provider and the document store for account lifecycle.
    Provider rejections surface as generic messages; technical detail goes to the audit trail.
    """

    def __init__(
        self,
        documents: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLogger,
        sessions: SessionRegistry,
        *,
        clock: Callable[[], datetime] = _utcnow,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._identity = identity
        self._audit = audit
        self._sessions = sessions
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    async def _load_user(self, identity: Identity) -> CurrentUser:
        try:
            document = await self._documents.get(USERS_COLLECTION, identity.uid)
        except Exception as e:
            self._logger.error("profile_read_failed", extra={"uid": identity.uid, "error": str(e)})
            raise BackendUnavailableError() from e
        return CurrentUser(
            identity=identity,
            profile=merge_user_profile(identity, document.data if document else None),
        )

    async def sign_up(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        security_question: str,
        security_answer: str,
    ) -> CurrentUser:
        """
        Validate locally, create the account, then write the user record
        (role Customer) and the email-keyed security credential record.
        """
        try:
            normalized = validate_email(email)
            validate_signup(
                display_name=display_name,
                password=password,
                security_question=security_question,
                security_answer=security_answer,
            )
        except DomainValidationError as e:
            self._audit.validation(
                ACTION_SIGNUP,
                success=False,
                actor_email=normalize_email(email) or None,
                error_message=e.message,
            )
            raise

        name = display_name.strip()
        try:
            created = await self._identity.create_account(normalized, password)
            created = await self._identity.update_display_name(created, name)
            await self._documents.set(
                USERS_COLLECTION,
                created.uid,
                {
                    "email": normalized,
                    "full_name": name,
                    "role": DEFAULT_ROLE.value,
                    "created_at": SERVER_TIMESTAMP,
                    "last_password_change": None,
                    "last_login_attempt": None,
                },
            )
            credential = SecurityCredentialRecord(
                email=normalized,
                question=security_question,
                answer_hash=hash_answer(security_answer),
            )
            await self._documents.set(
                SECURITY_QUESTIONS_COLLECTION, normalized, credential.to_document()
            )
        except IdentityError as e:
            self._audit.auth(
                ACTION_SIGNUP, success=False, actor_email=normalized, error_message=e.code
            )
            raise IdentityRejectedError(friendly_auth_message(e.code), e.code) from e
        except Exception as e:
            self._logger.error("signup_failed", extra={"error": str(e)})
            self._audit.auth(
                ACTION_SIGNUP, success=False, actor_email=normalized, error_message=str(e)
            )
            raise BackendUnavailableError() from e

        user = await self._load_user(created)
        self._sessions.open(created)
        self._audit.auth(
            ACTION_SIGNUP, success=True, actor_id=created.uid, actor_email=normalized
        )
        return user

    async def _record_login_attempt(self, success: bool, *, uid: Optional[str], email: str) -> None:
        """Overwrite last_login_attempt. Best-effort: the login outcome does not depend on it."""
        attempt = LoginAttempt(timestamp=self._clock(), success=success).to_dict()
        try:
            if uid is not None:
                await self._documents.update(USERS_COLLECTION, uid, {"last_login_attempt": attempt})
                return
            matches = await self._documents.query(USERS_COLLECTION, "email", email)
            for document in matches:
                await self._documents.update(
                    USERS_COLLECTION, document.doc_id, {"last_login_attempt": attempt}
                )
        except Exception as e:
            self._logger.warning("login_attempt_not_recorded", extra={"error": str(e)})

    async def log_in(self, email: str, password: str) -> CurrentUser:
        normalized = normalize_email(email)
        if not normalized or not password:
            self._audit.validation(
                ACTION_LOGIN_FAILURE,
                success=False,
                actor_email=normalized or None,
                error_message="missing-credentials",
            )
            raise DomainValidationError("Please enter your email and password.")

        try:
            signed_in = await self._identity.sign_in(normalized, password)
        except IdentityError as e:
            await self._record_login_attempt(False, uid=None, email=normalized)
            self._audit.auth(
                ACTION_LOGIN_FAILURE, success=False, actor_email=normalized, error_message=e.code
            )
            raise AuthenticationFailedError(friendly_auth_message(e.code), e.code) from e
        except Exception as e:
            self._logger.error("login_failed", extra={"error": str(e)})
            self._audit.auth(
                ACTION_LOGIN_FAILURE, success=False, actor_email=normalized, error_message=str(e)
            )
            raise BackendUnavailableError() from e

        await self._record_login_attempt(True, uid=signed_in.uid, email=normalized)
        user = await self._load_user(signed_in)
        self._sessions.open(signed_in)
        self._audit.auth(
            ACTION_LOGIN_SUCCESS, success=True, actor_id=signed_in.uid, actor_email=normalized
        )
        return user

    async def log_out(self, user: CurrentUser) -> None:
        try:
            await self._identity.sign_out(user.identity)
        except Exception as e:
            # The local session is torn down regardless.
            self._logger.warning("provider_sign_out_failed", extra={"error": str(e)})
        self._sessions.close(user.identity.id_token)
        self._audit.auth(ACTION_LOGOUT, success=True, actor_id=user.uid, actor_email=user.email)

    async def resolve_token(self, token: Optional[str]) -> CurrentUser:
        """Bearer token to CurrentUser: registry first, provider lookup otherwise. Profile is read per call."""
        if not token:
            raise NotAuthenticatedError("Not authenticated")
        identity = self._sessions.get(token)
        if identity is None:
            try:
                identity = await self._identity.lookup(token)
            except IdentityError as e:
                raise NotAuthenticatedError("Invalid or expired session") from e
            except Exception as e:
                self._logger.error("token_lookup_failed", extra={"error": str(e)})
                raise BackendUnavailableError() from e
            self._sessions.open(identity)
        return await self._load_user(identity)

    async def update_display_name(self, user: CurrentUser, display_name: str) -> CurrentUser:
        name = (display_name or "").strip()
        if not name:
            raise DomainValidationError("Please enter your full name.")
        try:
            identity = await self._identity.update_display_name(user.identity, name)
            await self._documents.update(USERS_COLLECTION, user.uid, {"full_name": name})
        except Exception as e:
            self._logger.error("profile_update_failed", extra={"uid": user.uid, "error": str(e)})
            self._audit.auth(
                ACTION_PROFILE_UPDATE,
                success=False,
                actor_id=user.uid,
                actor_email=user.email,
                error_message=str(e),
            )
            raise BackendUnavailableError() from e
        self._sessions.replace(user.identity.id_token, identity)
        self._audit.auth(
            ACTION_PROFILE_UPDATE, success=True, actor_id=user.uid, actor_email=user.email
        )
        return await self._load_user(identity)
