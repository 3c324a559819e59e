"""Role checks with an access-control audit trail. Shared by role-gated services."""

from laundry_app.application.session import CurrentUser
from laundry_app.audit.logger import AuditLogger
from laundry_app.security.exceptions import AuthorizationError
from laundry_app.security.rbac import RBACService

ACTION_ACCESS_DENIED = "access_denied"


def authorize(rbac: RBACService, audit: AuditLogger, user: CurrentUser, action: str) -> None:
    """Raises AuthorizationError after recording the denial."""
    try:
        rbac.check_permission(user.role, action)
    except AuthorizationError as e:
        audit.access(
            ACTION_ACCESS_DENIED,
            success=False,
            actor_id=user.uid,
            actor_email=user.email,
            error_message=e.message,
            details={"action": action, "role": user.role.value if user.role else None},
        )
        raise
