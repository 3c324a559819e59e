"""Auth API router: signup, login/logout, profile, password change."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from laundry_app.api.dependencies import (
    get_account_service,
    get_current_user,
    get_password_change_service,
    get_session_registry,
)
from laundry_app.application.account_service import AccountService
from laundry_app.application.password_change_service import PasswordChangeService
from laundry_app.application.session import CurrentUser, SessionRegistry
from laundry_app.domain.models.credential import random_security_question
from laundry_app.domain.schemas.account import (
    DisplayNameUpdateRequest,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    PasswordChangeResponse,
    ProfileResponse,
    SecurityQuestionResponse,
    SessionResponse,
    SignupRequest,
)

PASSWORD_CHANGED_MESSAGE = "Password changed successfully."
SIGNED_OUT_MESSAGE = "You have been signed out."

router = APIRouter()


def _session_response(user: CurrentUser) -> SessionResponse:
    return SessionResponse(
        token=user.identity.id_token,
        profile=ProfileResponse.from_profile(user.profile),
    )


@router.get("/security-question", response_model=SecurityQuestionResponse)
async def security_question():
    """One question drawn from the fixed pool for the signup form."""
    return SecurityQuestionResponse(question=random_security_question())


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    account_service: Annotated[AccountService, Depends(get_account_service)],
):
    user = await account_service.sign_up(
        email=body.email,
        password=body.password,
        display_name=body.display_name,
        security_question=body.security_question,
        security_answer=body.security_answer,
    )
    return _session_response(user)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    account_service: Annotated[AccountService, Depends(get_account_service)],
):
    user = await account_service.log_in(body.email, body.password)
    return _session_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
):
    await account_service.log_out(user)
    return MessageResponse(message=SIGNED_OUT_MESSAGE)


@router.get("/me", response_model=ProfileResponse)
async def me(user: Annotated[CurrentUser, Depends(get_current_user)]):
    return ProfileResponse.from_profile(user.profile)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: DisplayNameUpdateRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
):
    updated = await account_service.update_display_name(user, body.display_name)
    return ProfileResponse.from_profile(updated.profile)


@router.post("/password", response_model=PasswordChangeResponse)
async def change_password(
    body: PasswordChangeRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[PasswordChangeService, Depends(get_password_change_service)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
):
    """Rejections answer 400 with the step's fixed message. Success swaps the bearer token."""
    updated = await service.change_password(user, body.current_password, body.new_password)
    sessions.replace(user.identity.id_token, updated)
    return PasswordChangeResponse(message=PASSWORD_CHANGED_MESSAGE, token=updated.id_token)
