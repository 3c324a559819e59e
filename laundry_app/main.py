# laundry_app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from laundry_app.api.dependencies import build_session_registry, shutdown_backends
from laundry_app.api.middleware import (
    CorrelationIdMiddleware,
    ErrorBoundaryMiddleware,
    RequestAuditMiddleware,
)
from laundry_app.api.routers import admin, auth, health, logs, orders, recovery
from laundry_app.application.exceptions import (
    ApplicationError,
    AuthenticationFailedError,
    BackendUnavailableError,
    IdentityRejectedError,
    IncorrectAnswerError,
    InvalidRecoveryStateError,
    NotAuthenticatedError,
    ResourceNotFoundError,
)
from laundry_app.application.password_change_service import PasswordChangeRejectedError
from laundry_app.config.logging import configure_logging
from laundry_app.config.settings import get_settings
from laundry_app.domain.exceptions import DomainError, DomainValidationError
from laundry_app.infrastructure.database.session import get_engine, init_models
from laundry_app.security.exceptions import SecurityError

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.audit_sink == "database":
        await init_models(get_engine())
    app.state.session_registry = build_session_registry()
    logger.info("startup_complete")
    yield
    app.state.session_registry.close_all()
    await shutdown_backends()
    logger.info("shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestAudit -> ErrorBoundary.
app.add_middleware(ErrorBoundaryMiddleware)
app.add_middleware(RequestAuditMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(SecurityError)
async def security_error_handler(request, exc: SecurityError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_error_handler(request, exc: NotAuthenticatedError):
    return JSONResponse(
        status_code=401,
        content={"detail": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(AuthenticationFailedError)
async def authentication_failed_error_handler(request, exc: AuthenticationFailedError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(ResourceNotFoundError)
async def not_found_error_handler(request, exc: ResourceNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(IdentityRejectedError)
@app.exception_handler(IncorrectAnswerError)
@app.exception_handler(PasswordChangeRejectedError)
async def rejected_input_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(InvalidRecoveryStateError)
async def invalid_state_error_handler(request, exc: InvalidRecoveryStateError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(BackendUnavailableError)
async def backend_unavailable_error_handler(request, exc: BackendUnavailableError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


# Routers: /health, /auth, /auth/recovery, /orders, /admin, /logs
app.include_router(health.router)
app.include_router(auth.router, prefix="/auth")
app.include_router(recovery.router, prefix="/auth/recovery")
app.include_router(orders.router, prefix="/orders")
app.include_router(admin.router, prefix="/admin")
app.include_router(logs.router, prefix="/logs")
