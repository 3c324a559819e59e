"""Credential recovery: security-question check before a provider password-reset email."""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from laundry_app.application.document_store import SECURITY_QUESTIONS_COLLECTION, DocumentStore
from laundry_app.application.exceptions import (
    AccountNotFoundError,
    BackendUnavailableError,
    IncorrectAnswerError,
    InvalidRecoveryStateError,
)
from laundry_app.application.identity_provider import IdentityProvider
from laundry_app.audit.logger import AuditLogger
from laundry_app.domain.exceptions import DomainValidationError
from laundry_app.domain.models.credential import SecurityCredentialRecord
from laundry_app.domain.models.recovery import RecoveryState, validate_transition
from laundry_app.domain.validators.account_validator import normalize_email
from laundry_app.security.answer_hashing import answer_matches

ACCOUNT_NOT_FOUND_MESSAGE = "No account found with that email address."
INCORRECT_ANSWER_MESSAGE = "The answer to the security question is incorrect."
RESET_EMAIL_SENT_MESSAGE = "Verification successful. A password reset link has been sent to your email."

ACTION_EMAIL_CHECK = "recovery_email_check"
ACTION_ANSWER_CHECK = "recovery_answer_check"
ACTION_RESET_DISPATCH = "recovery_reset_dispatch"
ACTION_SUCCESS = "recovery_success"


@dataclass(frozen=True)
class RecoverySnapshot:
    """Flow-local state. answer_hash stays on the server."""

    recovery_id: str
    state: RecoveryState
    email: Optional[str] = None
    question: Optional[str] = None
    answer_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recovery_id": self.recovery_id,
            "state": self.state.value,
            "email": self.email,
            "question": self.question,
            "answer_hash": self.answer_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecoverySnapshot":
        return cls(
            recovery_id=data["recovery_id"],
            state=RecoveryState(data["state"]),
            email=data.get("email"),
            question=data.get("question"),
            answer_hash=data.get("answer_hash"),
        )


class RecoveryFlow:
    """
    AWAITING_EMAIL -> AWAITING_ANSWER -> COMPLETED.
    Failures keep the current state and may be retried without limit.
    The raw answer is hashed and compared, never stored or logged.
    """

    def __init__(
        self,
        documents: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLogger,
        *,
        recovery_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._identity = identity
        self._audit = audit
        self._logger = logger or logging.getLogger(__name__)
        self.recovery_id = recovery_id or str(uuid.uuid4())
        self._state = RecoveryState.AWAITING_EMAIL
        self._email: Optional[str] = None
        self._question: Optional[str] = None
        self._answer_hash: Optional[str] = None

    @classmethod
    def resume(
        cls,
        snapshot: RecoverySnapshot,
        documents: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLogger,
        logger: Optional[logging.Logger] = None,
    ) -> "RecoveryFlow":
        flow = cls(documents, identity, audit, recovery_id=snapshot.recovery_id, logger=logger)
        flow._state = snapshot.state
        flow._email = snapshot.email
        flow._question = snapshot.question
        flow._answer_hash = snapshot.answer_hash
        return flow

    @property
    def state(self) -> RecoveryState:
        return self._state

    @property
    def email(self) -> Optional[str]:
        return self._email

    @property
    def question(self) -> Optional[str]:
        return self._question

    def snapshot(self) -> RecoverySnapshot:
        return RecoverySnapshot(
            recovery_id=self.recovery_id,
            state=self._state,
            email=self._email,
            question=self._question,
            answer_hash=self._answer_hash,
        )

    def _transition(self, new_state: RecoveryState) -> None:
        validate_transition(self._state, new_state)
        self._state = new_state

    def reset(self) -> None:
        """Go back from AWAITING_ANSWER to AWAITING_EMAIL, forgetting the looked-up record."""
        self._transition(RecoveryState.AWAITING_EMAIL)
        self._email = None
        self._question = None
        self._answer_hash = None

    async def submit_email(self, raw_email: str) -> str:
        """
        Look up the security credential record for the normalized email.
        Returns the question text and moves to AWAITING_ANSWER.
        Raises AccountNotFoundError / BackendUnavailableError and stays in AWAITING_EMAIL.
        """
        if self._state is not RecoveryState.AWAITING_EMAIL:
            raise InvalidRecoveryStateError(
                f"Email can only be submitted while awaiting email (state is {self._state.value})"
            )
        email = normalize_email(raw_email)
        if not email:
            self._audit.validation(
                ACTION_EMAIL_CHECK, success=False, error_message="missing-email"
            )
            raise DomainValidationError("Please enter your email address.")

        try:
            document = await self._documents.get(SECURITY_QUESTIONS_COLLECTION, email)
            record = (
                SecurityCredentialRecord.from_document(email, document.data) if document else None
            )
        except Exception as e:
            self._logger.error(
                "recovery_lookup_failed",
                extra={"recovery_id": self.recovery_id, "error": str(e)},
            )
            self._audit.auth(
                ACTION_EMAIL_CHECK, success=False, actor_email=email, error_message=str(e)
            )
            raise BackendUnavailableError() from e

        if record is None:
            self._audit.auth(
                ACTION_EMAIL_CHECK,
                success=False,
                actor_email=email,
                error_message="account-not-found",
            )
            raise AccountNotFoundError(ACCOUNT_NOT_FOUND_MESSAGE)

        self._email = record.email
        self._question = record.question
        self._answer_hash = record.answer_hash
        self._transition(RecoveryState.AWAITING_ANSWER)
        self._logger.info("recovery_question_issued", extra={"recovery_id": self.recovery_id})
        return record.question

    async def submit_answer(self, answer: str) -> None:
        """
        Compare the answer's digest with the stored one; on match dispatch the
        reset email and move to COMPLETED. Raises IncorrectAnswerError /
        BackendUnavailableError and stays in AWAITING_ANSWER.
        """
        if self._state is not RecoveryState.AWAITING_ANSWER:
            raise InvalidRecoveryStateError(
                f"Answer can only be submitted while awaiting answer (state is {self._state.value})"
            )
        if not answer or not answer.strip():
            self._audit.validation(
                ACTION_ANSWER_CHECK,
                success=False,
                actor_email=self._email,
                error_message="missing-answer",
            )
            raise DomainValidationError("Please answer the security question.")

        if not answer_matches(answer, self._answer_hash or ""):
            self._audit.auth(
                ACTION_ANSWER_CHECK,
                success=False,
                actor_email=self._email,
                error_message="incorrect-answer",
            )
            raise IncorrectAnswerError(INCORRECT_ANSWER_MESSAGE)

        try:
            await self._identity.send_password_reset_email(self._email)
        except Exception as e:
            self._logger.error(
                "recovery_reset_dispatch_failed",
                extra={"recovery_id": self.recovery_id, "error": str(e)},
            )
            self._audit.auth(
                ACTION_RESET_DISPATCH,
                success=False,
                actor_email=self._email,
                error_message=str(e),
            )
            raise BackendUnavailableError() from e

        self._transition(RecoveryState.COMPLETED)
        self._logger.info("recovery_completed", extra={"recovery_id": self.recovery_id})
        self._audit.auth(ACTION_SUCCESS, success=True, actor_email=self._email)
