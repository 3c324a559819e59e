# Application layer: services that orchestrate domain, audit and external collaborators.

from laundry_app.application.account_service import AccountService
from laundry_app.application.document_store import (
    SERVER_TIMESTAMP,
    Document,
    DocumentNotFoundError,
    DocumentStore,
)
from laundry_app.application.error_boundary import ErrorBoundary, Incident
from laundry_app.application.exceptions import (
    AccountNotFoundError,
    ApplicationError,
    AuthenticationFailedError,
    BackendUnavailableError,
    IdentityRejectedError,
    IncorrectAnswerError,
    InvalidRecoveryStateError,
    NotAuthenticatedError,
    RecoverySessionNotFoundError,
    ResourceNotFoundError,
)
from laundry_app.application.identity_provider import Identity, IdentityError, IdentityProvider
from laundry_app.application.order_service import OrderFeed, OrderService
from laundry_app.application.password_change_service import (
    PasswordChangeFailure,
    PasswordChangeRejectedError,
    PasswordChangeService,
)
from laundry_app.application.recovery_flow import RecoveryFlow, RecoverySnapshot
from laundry_app.application.recovery_service import RecoveryService, RecoverySessionStore
from laundry_app.application.session import CurrentUser, SessionRegistry, merge_user_profile
from laundry_app.application.user_admin_service import UserAdminService

__all__ = [
    "AccountService",
    "SERVER_TIMESTAMP",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "ErrorBoundary",
    "Incident",
    "AccountNotFoundError",
    "ApplicationError",
    "AuthenticationFailedError",
    "BackendUnavailableError",
    "IdentityRejectedError",
    "IncorrectAnswerError",
    "InvalidRecoveryStateError",
    "NotAuthenticatedError",
    "RecoverySessionNotFoundError",
    "ResourceNotFoundError",
    "Identity",
    "IdentityError",
    "IdentityProvider",
    "OrderFeed",
    "OrderService",
    "PasswordChangeFailure",
    "PasswordChangeRejectedError",
    "PasswordChangeService",
    "RecoveryFlow",
    "RecoverySnapshot",
    "RecoveryService",
    "RecoverySessionStore",
    "CurrentUser",
    "SessionRegistry",
    "merge_user_profile",
    "UserAdminService",
]
