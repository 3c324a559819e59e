"""Identity provider protocol. Application layer depends on this; infrastructure implements it."""

from dataclasses import dataclass, replace
from typing import Optional, Protocol

INVALID_CREDENTIALS_MESSAGE = "Invalid username and/or password."
EMAIL_IN_USE_MESSAGE = "An account with this email address already exists."
WEAK_PASSWORD_PROVIDER_MESSAGE = "The password is too weak. Please choose a stronger password."
UNEXPECTED_AUTH_MESSAGE = "An unexpected error occurred. Please try again."

# Deliberately one message for unknown user and wrong password.
_FRIENDLY_MESSAGES: dict[str, str] = {
    "auth/invalid-email": INVALID_CREDENTIALS_MESSAGE,
    "auth/user-not-found": INVALID_CREDENTIALS_MESSAGE,
    "auth/wrong-password": INVALID_CREDENTIALS_MESSAGE,
    "auth/invalid-credential": INVALID_CREDENTIALS_MESSAGE,
    "auth/email-already-in-use": EMAIL_IN_USE_MESSAGE,
    "auth/weak-password": WEAK_PASSWORD_PROVIDER_MESSAGE,
}


def friendly_auth_message(code: Optional[str]) -> str:
    """Map a provider error code to one of the generic user-facing messages."""
    return _FRIENDLY_MESSAGES.get(code or "", UNEXPECTED_AUTH_MESSAGE)


class IdentityError(Exception):
    """Typed identity provider failure. code is in the auth/<kebab-case> family."""

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or code
        super().__init__(self.message)


@dataclass(frozen=True)
class Identity:
    """Signed-in account as issued by the provider. id_token is the bearer token."""

    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: str = ""
    refresh_token: Optional[str] = None
    # Token lifetime in seconds as reported by the provider, when known
    expires_in: Optional[int] = None

    def with_display_name(self, display_name: Optional[str]) -> "Identity":
        return replace(self, display_name=display_name)


class IdentityProvider(Protocol):
    """Password-based credential issuance and management. Raises IdentityError on rejection."""

    async def create_account(self, email: str, password: str) -> Identity:
        ...

    async def sign_in(self, email: str, password: str) -> Identity:
        ...

    async def sign_out(self, identity: Identity) -> None:
        ...

    async def reauthenticate(self, identity: Identity, password: str) -> Identity:
        """Confirm the current password of identity's account. Returns a fresh identity."""
        ...

    async def update_password(self, identity: Identity, new_password: str) -> Identity:
        """Returns the identity with the tokens issued for the new credential."""
        ...

    async def send_password_reset_email(self, email: str) -> None:
        ...

    async def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        ...

    async def lookup(self, id_token: str) -> Identity:
        """Resolve a bearer token to its identity."""
        ...
