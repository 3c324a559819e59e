"""Role-based access control. No FastAPI."""

from typing import Optional

from laundry_app.domain.models.user import Role
from laundry_app.security.exceptions import AuthorizationError

PLACE_ORDER = "place_order"
VIEW_OWN_ORDERS = "view_own_orders"
VIEW_ALL_ORDERS = "view_all_orders"
UPDATE_ORDER_STATUS = "update_order_status"
MANAGE_ROLES = "manage_roles"
VIEW_LOGS = "view_logs"

# Permission matrix:
# Role           PlaceOrder  OwnOrders  AllOrders  OrderStatus  Roles  Logs
# CUSTOMER       ✓           ✓          ✗          ✗            ✗      ✗
# MANAGER        ✗           ✓          ✓          ✓            ✗      ✗
# ADMINISTRATOR  ✗           ✓          ✓          ✓            ✓      ✓

_ACTION_PERMISSIONS: dict[tuple[Role, str], bool] = {
    (Role.CUSTOMER, PLACE_ORDER): True,
    (Role.CUSTOMER, VIEW_OWN_ORDERS): True,
    (Role.CUSTOMER, VIEW_ALL_ORDERS): False,
    (Role.CUSTOMER, UPDATE_ORDER_STATUS): False,
    (Role.CUSTOMER, MANAGE_ROLES): False,
    (Role.CUSTOMER, VIEW_LOGS): False,
    (Role.MANAGER, PLACE_ORDER): False,
    (Role.MANAGER, VIEW_OWN_ORDERS): True,
    (Role.MANAGER, VIEW_ALL_ORDERS): True,
    (Role.MANAGER, UPDATE_ORDER_STATUS): True,
    (Role.MANAGER, MANAGE_ROLES): False,
    (Role.MANAGER, VIEW_LOGS): False,
    (Role.ADMINISTRATOR, PLACE_ORDER): False,
    (Role.ADMINISTRATOR, VIEW_OWN_ORDERS): True,
    (Role.ADMINISTRATOR, VIEW_ALL_ORDERS): True,
    (Role.ADMINISTRATOR, UPDATE_ORDER_STATUS): True,
    (Role.ADMINISTRATOR, MANAGE_ROLES): True,
    (Role.ADMINISTRATOR, VIEW_LOGS): True,
}


class RBACService:
    """Check permission for role and action. Raise AuthorizationError if invalid."""

    def has_permission(self, role: Optional[Role], action: str) -> bool:
        if role is None:
            return False
        return _ACTION_PERMISSIONS.get((role, action), False)

    def check_permission(self, role: Optional[Role], action: str) -> None:
        """Raises AuthorizationError if role does not have permission for action. No role means no access."""
        if role is None:
            raise AuthorizationError(
                f"Your role is not recognized; action '{action}' is not permitted"
            )
        if not self.has_permission(role, action):
            raise AuthorizationError(
                f"Role {role.value} does not have permission for action '{action}'"
            )
