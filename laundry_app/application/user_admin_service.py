"""Administration: user roles and the security log viewer."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from laundry_app.application.authorization import authorize
from laundry_app.application.document_store import USERS_COLLECTION, DocumentStore
from laundry_app.application.exceptions import BackendUnavailableError, ResourceNotFoundError
from laundry_app.application.session import CurrentUser
from laundry_app.audit.logger import AuditLogger
from laundry_app.audit.models import AuditLogEntry
from laundry_app.audit.repository import AuditRepository
from laundry_app.domain.exceptions import DomainValidationError
from laundry_app.domain.models.user import Role, parse_role
from laundry_app.security import rbac as permissions
from laundry_app.security.rbac import RBACService

ACTION_ROLE_CHANGE = "role_change"


@dataclass(frozen=True)
class UserSummary:
    uid: str
    email: Optional[str]
    full_name: Optional[str]
    role: Optional[Role]
    created_at: Optional[datetime]


class UserAdminService:
    """Only administrators list users, change roles and read the audit trail."""

    def __init__(
        self,
        documents: DocumentStore,
        audit: AuditLogger,
        audit_repository: AuditRepository,
        rbac: RBACService,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._audit = audit
        self._audit_repository = audit_repository
        self._rbac = rbac
        self._logger = logger or logging.getLogger(__name__)

    async def list_users(self, actor: CurrentUser) -> List[UserSummary]:
        authorize(self._rbac, self._audit, actor, permissions.MANAGE_ROLES)
        try:
            documents = await self._documents.query(USERS_COLLECTION)
        except Exception as e:
            self._logger.error("user_list_failed", extra={"error": str(e)})
            raise BackendUnavailableError("Failed to load users.") from e
        summaries = [
            UserSummary(
                uid=d.doc_id,
                email=d.data.get("email"),
                full_name=d.data.get("full_name"),
                role=parse_role(d.data.get("role")),
                created_at=d.data.get("created_at") if isinstance(d.data.get("created_at"), datetime) else None,
            )
            for d in documents
        ]
        return sorted(summaries, key=lambda s: (s.email or "", s.uid))

    async def change_role(self, actor: CurrentUser, target_uid: str, role: str) -> Role:
        authorize(self._rbac, self._audit, actor, permissions.MANAGE_ROLES)
        new_role = parse_role(role)
        if new_role is None:
            allowed = ", ".join(r.value for r in Role)
            raise DomainValidationError(f"Unknown role '{role}'. Allowed: {allowed}")
        try:
            target = await self._documents.get(USERS_COLLECTION, target_uid)
            if target is None:
                raise ResourceNotFoundError("User not found")
            previous = target.data.get("role")
            await self._documents.update(USERS_COLLECTION, target_uid, {"role": new_role.value})
        except ResourceNotFoundError:
            raise
        except Exception as e:
            self._logger.error("role_change_failed", extra={"target_uid": target_uid, "error": str(e)})
            self._audit.access(
                ACTION_ROLE_CHANGE,
                success=False,
                actor_id=actor.uid,
                actor_email=actor.email,
                error_message=str(e),
                details={"target_uid": target_uid, "role": new_role.value},
            )
            raise BackendUnavailableError("Failed to update user role.") from e

        self._audit.access(
            ACTION_ROLE_CHANGE,
            success=True,
            actor_id=actor.uid,
            actor_email=actor.email,
            details={"target_uid": target_uid, "previous_role": previous, "role": new_role.value},
        )
        return new_role

    async def list_logs(self, actor: CurrentUser, limit: int = 100) -> List[AuditLogEntry]:
        authorize(self._rbac, self._audit, actor, permissions.VIEW_LOGS)
        try:
            return await self._audit_repository.list_recent(limit)
        except Exception as e:
            self._logger.error("audit_log_read_failed", extra={"error": str(e)})
            raise BackendUnavailableError("Failed to fetch security logs.") from e
