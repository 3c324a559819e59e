"""Identity provider over the Identity Toolkit REST API (accounts:* endpoints) using httpx."""

import logging
from typing import Any, Dict, Optional

import httpx

from laundry_app.application.identity_provider import Identity, IdentityError

NETWORK_ERROR_CODE = "auth/network-request-failed"
USER_MISMATCH_CODE = "auth/user-mismatch"
INTERNAL_ERROR_CODE = "auth/internal-error"

_PROVIDER_ERROR_CODES: Dict[str, str] = {
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "USER_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_PASSWORD": "auth/missing-password",
    "WEAK_PASSWORD": "auth/weak-password",
    "USER_DISABLED": "auth/user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "INVALID_ID_TOKEN": "auth/invalid-user-token",
    "TOKEN_EXPIRED": "auth/user-token-expired",
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": "auth/requires-recent-login",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
}


def map_provider_error(message: str) -> str:
    """
    Translate a REST error message to an auth/* code.
    Messages may carry detail after the code, e.g. "WEAK_PASSWORD : Password should be at least 6 characters".
    """
    key = (message or "").split(":", 1)[0].strip()
    return _PROVIDER_ERROR_CODES.get(key, INTERNAL_ERROR_CODE)


def _expires_in(value: Any) -> Optional[int]:
    """expiresIn arrives as a string of seconds, e.g. "3600"."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RestIdentityProvider:
    """
    Implements IdentityProvider. Tokens are stateless on the provider side,
    so sign_out only logs; the session registry drops the token.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://identitytoolkit.googleapis.com/v1",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._logger = logger or logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                f"/accounts:{endpoint}",
                params={"key": self._api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            self._logger.warning(
                "identity_request_failed",
                extra={"endpoint": endpoint, "error": str(e)},
            )
            raise IdentityError(NETWORK_ERROR_CODE, str(e)) from e

        if response.status_code >= 400:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = f"HTTP {response.status_code}"
            code = map_provider_error(message)
            self._logger.info(
                "identity_request_rejected",
                extra={"endpoint": endpoint, "code": code},
            )
            raise IdentityError(code, message)
        return response.json()

    @staticmethod
    def _identity_from(data: Dict[str, Any], fallback: Optional[Identity] = None) -> Identity:
        return Identity(
            uid=data.get("localId") or (fallback.uid if fallback else ""),
            email=data.get("email") or (fallback.email if fallback else ""),
            display_name=data.get("displayName") or (fallback.display_name if fallback else None),
            id_token=data.get("idToken") or (fallback.id_token if fallback else ""),
            refresh_token=data.get("refreshToken") or (fallback.refresh_token if fallback else None),
            expires_in=_expires_in(data.get("expiresIn")) or (fallback.expires_in if fallback else None),
        )

    async def create_account(self, email: str, password: str) -> Identity:
        data = await self._call(
            "signUp", {"email": email, "password": password, "returnSecureToken": True}
        )
        return self._identity_from(data)

    async def sign_in(self, email: str, password: str) -> Identity:
        data = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._identity_from(data)

    async def sign_out(self, identity: Identity) -> None:
        self._logger.info("identity_signed_out", extra={"uid": identity.uid})

    async def reauthenticate(self, identity: Identity, password: str) -> Identity:
        confirmed = await self.sign_in(identity.email, password)
        if confirmed.uid != identity.uid:
            raise IdentityError(USER_MISMATCH_CODE, "Credential belongs to a different account")
        return confirmed

    async def update_password(self, identity: Identity, new_password: str) -> Identity:
        data = await self._call(
            "update",
            {"idToken": identity.id_token, "password": new_password, "returnSecureToken": True},
        )
        return self._identity_from(data, fallback=identity)

    async def send_password_reset_email(self, email: str) -> None:
        await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        data = await self._call(
            "update",
            {"idToken": identity.id_token, "displayName": display_name, "returnSecureToken": False},
        )
        return self._identity_from(data, fallback=identity).with_display_name(display_name)

    async def lookup(self, id_token: str) -> Identity:
        data = await self._call("lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise IdentityError("auth/user-not-found", "No account for token")
        account = users[0]
        return Identity(
            uid=account["localId"],
            email=account.get("email", ""),
            display_name=account.get("displayName"),
            id_token=id_token,
        )
