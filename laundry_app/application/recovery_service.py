"""Recovery application service. Keeps RecoveryFlow state between HTTP requests."""

import logging
from typing import Optional, Protocol

from laundry_app.application.document_store import DocumentStore
from laundry_app.application.exceptions import BackendUnavailableError, RecoverySessionNotFoundError
from laundry_app.application.identity_provider import IdentityProvider
from laundry_app.application.recovery_flow import RecoveryFlow, RecoverySnapshot
from laundry_app.audit.logger import AuditLogger
from laundry_app.domain.models.recovery import RecoveryState

RECOVERY_EXPIRED_MESSAGE = "This recovery request has expired. Please start again."


class RecoverySessionStore(Protocol):
    """Short-lived storage for in-progress recovery flows."""

    async def save(self, snapshot: RecoverySnapshot, ttl_seconds: int) -> None:
        ...

    async def get(self, recovery_id: str) -> Optional[RecoverySnapshot]:
        ...

    async def delete(self, recovery_id: str) -> None:
        ...


class RecoveryService:
    """
    start(): email step; stores the snapshot only when a question was issued.
    answer(): resumes the stored flow; completed flows are removed, failed
    attempts leave the snapshot in AWAITING_ANSWER.
    """

    def __init__(
        self,
        documents: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLogger,
        sessions: RecoverySessionStore,
        *,
        ttl_seconds: int = 900,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._identity = identity
        self._audit = audit
        self._sessions = sessions
        self._ttl = ttl_seconds
        self._logger = logger or logging.getLogger(__name__)

    async def start(self, email: str) -> RecoverySnapshot:
        flow = RecoveryFlow(self._documents, self._identity, self._audit, logger=self._logger)
        await flow.submit_email(email)
        snapshot = flow.snapshot()
        try:
            await self._sessions.save(snapshot, self._ttl)
        except Exception as e:
            self._logger.error(
                "recovery_session_save_failed",
                extra={"recovery_id": snapshot.recovery_id, "error": str(e)},
            )
            raise BackendUnavailableError() from e
        return snapshot

    async def answer(self, recovery_id: str, answer: str) -> RecoverySnapshot:
        try:
            stored = await self._sessions.get(recovery_id)
        except Exception as e:
            self._logger.error(
                "recovery_session_load_failed",
                extra={"recovery_id": recovery_id, "error": str(e)},
            )
            raise BackendUnavailableError() from e
        if stored is None:
            raise RecoverySessionNotFoundError(RECOVERY_EXPIRED_MESSAGE)

        flow = RecoveryFlow.resume(stored, self._documents, self._identity, self._audit, logger=self._logger)
        await flow.submit_answer(answer)

        if flow.state is RecoveryState.COMPLETED:
            try:
                await self._sessions.delete(recovery_id)
            except Exception as e:
                # The reset email is already sent; a stale snapshot only expires later.
                self._logger.warning(
                    "recovery_session_delete_failed",
                    extra={"recovery_id": recovery_id, "error": str(e)},
                )
        return flow.snapshot()
