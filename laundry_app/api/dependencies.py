"""FastAPI dependency injection: backends, services, current user, client metadata."""

import asyncio
import logging
from datetime import timedelta
from typing import Annotated, Optional, Set

from fastapi import Depends, Request
from starlette.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from laundry_app.application.account_service import AccountService
from laundry_app.application.document_store import DocumentStore
from laundry_app.application.error_boundary import ErrorBoundary
from laundry_app.application.exceptions import NotAuthenticatedError
from laundry_app.application.identity_provider import IdentityProvider
from laundry_app.application.order_service import OrderService
from laundry_app.application.password_change_service import PasswordChangeService
from laundry_app.application.recovery_service import RecoveryService, RecoverySessionStore
from laundry_app.application.session import CurrentUser, SessionRegistry
from laundry_app.application.user_admin_service import UserAdminService
from laundry_app.audit.logger import AuditLogger, drain_pending_writes
from laundry_app.audit.models import ClientMetadata
from laundry_app.audit.repository import AuditRepository
from laundry_app.config.settings import get_settings
from laundry_app.core.context import actor_id_ctx
from laundry_app.infrastructure.cache.recovery_store_memory import InMemoryRecoverySessionStore
from laundry_app.infrastructure.cache.recovery_store_redis import RedisRecoverySessionStore
from laundry_app.infrastructure.cache.redis_client import RedisClient
from laundry_app.infrastructure.database.audit_repository_db import DbAuditRepository
from laundry_app.infrastructure.database.session import build_sessionmaker, get_engine
from laundry_app.infrastructure.documents.audit_repository import DocumentAuditRepository
from laundry_app.infrastructure.documents.memory_store import InMemoryDocumentStore
from laundry_app.infrastructure.documents.redis_store import RedisDocumentStore
from laundry_app.infrastructure.identity.rest_identity_provider import RestIdentityProvider
from laundry_app.security.rbac import RBACService

FORWARDED_FOR_HEADER = "X-Forwarded-For"
AUDIT_DRAIN_TIMEOUT_SECONDS = 5.0

logger = logging.getLogger(__name__)

_redis_client: RedisClient | None = None
_document_store: DocumentStore | None = None
_identity_provider: RestIdentityProvider | None = None
_db_audit_repository: DbAuditRepository | None = None
_recovery_sessions: RecoverySessionStore | None = None

# Audit writes scheduled by every AuditLogger built here; drained at shutdown.
audit_writes: Set[asyncio.Task] = set()

_bearer = HTTPBearer(auto_error=False)


def get_redis_client() -> RedisClient:
    """Return singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


def get_document_store() -> DocumentStore:
    """Return singleton document store for the configured backend."""
    global _document_store
    if _document_store is None:
        if get_settings().document_backend == "redis":
            _document_store = RedisDocumentStore(get_redis_client())
        else:
            _document_store = InMemoryDocumentStore()
    return _document_store


def get_identity_provider() -> IdentityProvider:
    """Return singleton identity provider client."""
    global _identity_provider
    if _identity_provider is None:
        settings = get_settings()
        _identity_provider = RestIdentityProvider(
            settings.identity_api_key,
            base_url=settings.identity_base_url,
            timeout=settings.identity_timeout_seconds,
        )
    return _identity_provider


def get_audit_repository(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> AuditRepository:
    """Audit sink per settings: the logs collection, or the audit_logs table."""
    global _db_audit_repository
    if get_settings().audit_sink == "database":
        if _db_audit_repository is None:
            _db_audit_repository = DbAuditRepository(build_sessionmaker(get_engine()))
        return _db_audit_repository
    return DocumentAuditRepository(documents)


def get_recovery_session_store() -> RecoverySessionStore:
    """Return singleton recovery session store; Redis when documents live in Redis."""
    global _recovery_sessions
    if _recovery_sessions is None:
        if get_settings().document_backend == "redis":
            _recovery_sessions = RedisRecoverySessionStore(get_redis_client())
        else:
            _recovery_sessions = InMemoryRecoverySessionStore()
    return _recovery_sessions


def build_session_registry() -> SessionRegistry:
    return SessionRegistry(ttl_seconds=get_settings().session_ttl_seconds)


def get_session_registry(connection: HTTPConnection) -> SessionRegistry:
    """Session registry owned by the application; created and closed by its lifespan."""
    return connection.app.state.session_registry


def get_rbac_service() -> RBACService:
    return RBACService()


def get_audit_logger(
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
) -> AuditLogger:
    return AuditLogger(repository, logger=logging.getLogger("laundry_app.audit"), pending=audit_writes)


async def get_account_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> AccountService:
    return AccountService(documents, identity, audit, sessions, logger=logging.getLogger(__name__))


async def get_password_change_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> PasswordChangeService:
    return PasswordChangeService(
        documents,
        identity,
        audit,
        cooldown=timedelta(hours=get_settings().password_change_cooldown_hours),
        logger=logging.getLogger(__name__),
    )


async def get_recovery_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    sessions: Annotated[RecoverySessionStore, Depends(get_recovery_session_store)],
) -> RecoveryService:
    return RecoveryService(
        documents,
        identity,
        audit,
        sessions,
        ttl_seconds=get_settings().recovery_session_ttl_seconds,
        logger=logging.getLogger(__name__),
    )


async def get_order_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    rbac: Annotated[RBACService, Depends(get_rbac_service)],
) -> OrderService:
    return OrderService(documents, audit, rbac, logger=logging.getLogger(__name__))


async def get_user_admin_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
    rbac: Annotated[RBACService, Depends(get_rbac_service)],
) -> UserAdminService:
    return UserAdminService(documents, audit, repository, rbac, logger=logging.getLogger(__name__))


def get_client_metadata(request: Request) -> ClientMetadata:
    """IP and user-agent as observed by this server. First X-Forwarded-For hop wins over the socket peer."""
    forwarded = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        ip_address = forwarded.split(",")[0].strip() or None
    else:
        ip_address = request.client.host if request.client else None
    return ClientMetadata(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> CurrentUser:
    """Resolve the bearer token; sets the actor id for logging. 401 without a valid session."""
    token = credentials.credentials if credentials else None
    user = await account_service.resolve_token(token)
    request.state.actor_id = user.uid
    actor_id_ctx.set(user.uid)
    return user


async def get_optional_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous callers (or stale tokens) yield None."""
    if credentials is None:
        return None
    try:
        return await get_current_user(request, credentials, account_service)
    except NotAuthenticatedError:
        return None


def build_error_boundary(request: Request) -> ErrorBoundary:
    """
    ErrorBoundary for middleware, outside the dependency graph.
    Honors app.dependency_overrides for the audit sink and document store.
    """
    overrides = request.app.dependency_overrides
    repository_factory = overrides.get(get_audit_repository)
    if repository_factory is not None:
        repository = repository_factory()
    else:
        documents = overrides.get(get_document_store, get_document_store)()
        repository = get_audit_repository(documents)
    audit = AuditLogger(repository, logger=logging.getLogger("laundry_app.audit"), pending=audit_writes)
    return ErrorBoundary(audit, logger=logging.getLogger("laundry_app.error_boundary"))


async def shutdown_backends() -> None:
    """Let scheduled audit writes finish, then close network clients created by this module."""
    global _identity_provider, _redis_client
    try:
        await asyncio.wait_for(drain_pending_writes(audit_writes), timeout=AUDIT_DRAIN_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("audit_drain_timeout", extra={"pending": len(audit_writes)})
    if _identity_provider is not None:
        await _identity_provider.aclose()
        _identity_provider = None
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None
