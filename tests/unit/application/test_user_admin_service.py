"""Unit tests for UserAdminService: role changes and log access, administrator only."""

import pytest

from laundry_app.application.document_store import USERS_COLLECTION
from laundry_app.application.exceptions import ResourceNotFoundError
from laundry_app.application.identity_provider import Identity
from laundry_app.application.session import CurrentUser, merge_user_profile
from laundry_app.application.user_admin_service import UserAdminService
from laundry_app.domain.exceptions import DomainValidationError
from laundry_app.domain.models.user import Role
from laundry_app.security.exceptions import AuthorizationError
from laundry_app.security.rbac import RBACService


def _user(uid: str, role: str) -> CurrentUser:
    identity = Identity(uid=uid, email=f"{uid}@example.com", id_token=f"token-{uid}")
    return CurrentUser(
        identity=identity,
        profile=merge_user_profile(identity, {"email": identity.email, "role": role}),
    )


@pytest.fixture
async def service(document_store, audit_logger, audit_repository):
    await document_store.set(USERS_COLLECTION, "cust-1", {"email": "b@example.com", "full_name": "Bea", "role": "Customer"})
    await document_store.set(USERS_COLLECTION, "admin-1", {"email": "a@example.com", "full_name": "Al", "role": "Administrator"})
    return UserAdminService(document_store, audit_logger, audit_repository, RBACService())


async def test_list_users_sorted_by_email(service):
    users = await service.list_users(_user("admin-1", "Administrator"))
    assert [u.email for u in users] == ["a@example.com", "b@example.com"]
    assert users[1].role is Role.CUSTOMER


async def test_change_role_updates_record_and_audits(service, document_store, audit_repository, audit_logger):
    role = await service.change_role(_user("admin-1", "Administrator"), "cust-1", "Manager")
    assert role is Role.MANAGER
    document = await document_store.get(USERS_COLLECTION, "cust-1")
    assert document.data["role"] == "Manager"
    await audit_logger.drain()
    entry = audit_repository.entries[-1]
    assert entry.event_action == "role_change"
    assert entry.details == {"target_uid": "cust-1", "previous_role": "Customer", "role": "Manager"}


async def test_change_role_rejections(service):
    admin = _user("admin-1", "Administrator")
    with pytest.raises(DomainValidationError):
        await service.change_role(admin, "cust-1", "Owner")
    with pytest.raises(ResourceNotFoundError):
        await service.change_role(admin, "nobody", "Manager")
    with pytest.raises(AuthorizationError):
        await service.change_role(_user("mgr-1", "Manager"), "cust-1", "Administrator")


async def test_list_logs_requires_administrator(service, audit_logger):
    audit_logger.auth("login_success", success=True, actor_id="cust-1")
    await audit_logger.drain()
    entries = await service.list_logs(_user("admin-1", "Administrator"))
    assert entries[0].event_action == "login_success"
    with pytest.raises(AuthorizationError):
        await service.list_logs(_user("cust-1", "Customer"))
