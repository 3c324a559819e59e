"""Admin API router: user roles and the security log viewer. Administrator only."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from laundry_app.api.dependencies import get_current_user, get_user_admin_service
from laundry_app.application.session import CurrentUser
from laundry_app.application.user_admin_service import UserAdminService
from laundry_app.domain.schemas.audit import (
    AuditLogResponse,
    RoleChangeRequest,
    RoleChangeResponse,
    UserSummaryResponse,
)

router = APIRouter()


@router.get("/users", response_model=List[UserSummaryResponse])
async def list_users(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    admin_service: Annotated[UserAdminService, Depends(get_user_admin_service)],
):
    users = await admin_service.list_users(user)
    return [UserSummaryResponse.model_validate(u) for u in users]


@router.patch("/users/{uid}/role", response_model=RoleChangeResponse)
async def change_role(
    uid: str,
    body: RoleChangeRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    admin_service: Annotated[UserAdminService, Depends(get_user_admin_service)],
):
    role = await admin_service.change_role(user, uid, body.role)
    return RoleChangeResponse(uid=uid, role=role)


@router.get("/logs", response_model=List[AuditLogResponse])
async def list_logs(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    admin_service: Annotated[UserAdminService, Depends(get_user_admin_service)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """Newest first."""
    entries = await admin_service.list_logs(user, limit)
    return [AuditLogResponse.model_validate(e) for e in entries]
