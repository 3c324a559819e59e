"""Shared fixtures: in-memory document store, recording audit sink, fake identity provider."""

from typing import Dict, List, Optional

import pytest

from laundry_app.application.identity_provider import Identity, IdentityError
from laundry_app.audit.logger import AuditLogger
from laundry_app.audit.models import AuditLogEntry
from laundry_app.infrastructure.documents.memory_store import InMemoryDocumentStore


class FakeIdentityProvider:
    """In-memory identity provider. fail_with[op] makes the named operation raise."""

    def __init__(self):
        self.accounts: Dict[str, dict] = {}
        self.tokens: Dict[str, str] = {}
        self.reset_emails: List[str] = []
        self.signed_out: List[str] = []
        self.fail_with: Dict[str, Exception] = {}
        self.calls: List[str] = []
        self._issued = 0

    def _check(self, op: str) -> None:
        self.calls.append(op)
        error = self.fail_with.get(op)
        if error is not None:
            raise error

    def _by_uid(self, uid: str) -> Optional[dict]:
        for account in self.accounts.values():
            if account["uid"] == uid:
                return account
        return None

    def _issue(self, account: dict) -> Identity:
        self._issued += 1
        token = f"token-{account['uid']}-{self._issued}"
        self.tokens[token] = account["uid"]
        return Identity(
            uid=account["uid"],
            email=account["email"],
            display_name=account.get("display_name"),
            id_token=token,
        )

    async def create_account(self, email: str, password: str) -> Identity:
        self._check("create_account")
        if email in self.accounts:
            raise IdentityError("auth/email-already-in-use")
        account = {"uid": f"uid-{len(self.accounts) + 1}", "email": email, "password": password}
        self.accounts[email] = account
        return self._issue(account)

    async def sign_in(self, email: str, password: str) -> Identity:
        self._check("sign_in")
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise IdentityError("auth/invalid-credential")
        return self._issue(account)

    async def sign_out(self, identity: Identity) -> None:
        self._check("sign_out")
        self.signed_out.append(identity.uid)

    async def reauthenticate(self, identity: Identity, password: str) -> Identity:
        self._check("reauthenticate")
        account = self._by_uid(identity.uid)
        if account is None or account["password"] != password:
            raise IdentityError("auth/wrong-password")
        return self._issue(account)

    async def update_password(self, identity: Identity, new_password: str) -> Identity:
        self._check("update_password")
        account = self._by_uid(identity.uid)
        account["password"] = new_password
        return self._issue(account)

    async def send_password_reset_email(self, email: str) -> None:
        self._check("send_password_reset_email")
        self.reset_emails.append(email)

    async def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        self._check("update_display_name")
        self._by_uid(identity.uid)["display_name"] = display_name
        return identity.with_display_name(display_name)

    async def lookup(self, id_token: str) -> Identity:
        self._check("lookup")
        uid = self.tokens.get(id_token)
        account = self._by_uid(uid) if uid else None
        if account is None:
            raise IdentityError("auth/invalid-user-token")
        return Identity(
            uid=account["uid"],
            email=account["email"],
            display_name=account.get("display_name"),
            id_token=id_token,
        )


class RecordingAuditRepository:
    """Keeps appended entries in order. fail=True makes append raise."""

    def __init__(self):
        self.entries: List[AuditLogEntry] = []
        self.fail = False

    async def append(self, entry: AuditLogEntry) -> str:
        if self.fail:
            raise ConnectionError("audit sink unavailable")
        self.entries.append(entry)
        return f"log-{len(self.entries)}"

    async def list_recent(self, limit: int = 100) -> List[AuditLogEntry]:
        return list(reversed(self.entries))[:limit]

    def actions(self) -> List[str]:
        return [e.event_action for e in self.entries]


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def audit_repository():
    return RecordingAuditRepository()


@pytest.fixture
def audit_logger(audit_repository):
    return AuditLogger(repository=audit_repository)
