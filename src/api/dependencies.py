"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and the authenticated account into routes. Infrastructure (store, email
sender, mail executor, settings) is created in the app lifespan and kept
on app.state.
"""

from concurrent.futures import Executor

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from src.config.settings import Settings
from src.domain.accounts import AccountRepository
from src.domain.activation import ActivationService, TokenIssuer
from src.domain.authentication import AuthenticationGate
from src.domain.data import DataService
from src.domain.exceptions import AuthenticationFailed, MalformedAuthHeader, StorageError
from src.domain.models import Account
from src.domain.ports import EmailSender, KeyValueStore


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_store(request: Request) -> KeyValueStore:
    """
    Get key-value store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_mail_executor(request: Request) -> Executor:
    return request.app.state.mail_executor


def get_account_repository(request: Request) -> AccountRepository:
    """Create account repository over the app's store."""
    settings = get_app_settings(request)
    return AccountRepository(store=get_store(request), max_attempts=settings.merge_max_attempts)


def get_token_issuer(request: Request) -> TokenIssuer:
    """
    Create token issuer with injected dependencies.

    Wires together the store, email sender and background executor.
    """
    return TokenIssuer(
        store=get_store(request),
        email_sender=get_email_sender(request),
        executor=get_mail_executor(request),
        public_url=get_app_settings(request).public_url,
    )


def get_activation_service(request: Request) -> ActivationService:
    return ActivationService(store=get_store(request), accounts=get_account_repository(request))


def get_authentication_gate(request: Request) -> AuthenticationGate:
    return AuthenticationGate(accounts=get_account_repository(request))


def get_data_service(request: Request) -> DataService:
    return DataService(store=get_store(request))


# Authorization header scheme for OpenAPI documentation.
# auto_error=False so the gate sees missing headers and answers 401, not 403.
api_key_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="ApiKey <email>:<key>",
)


def decode_header_value(value: str | None) -> str | None:
    """
    Recover the UTF-8 text of a header value.

    Starlette decodes header bytes as latin-1, so a UTF-8 email arrives as
    mojibake. Re-encoding gives back the raw bytes.

    Raises:
        MalformedAuthHeader: If the raw bytes are not valid UTF-8
    """
    if value is None:
        return None
    try:
        return value.encode("latin-1").decode("utf-8")
    except UnicodeError:
        raise MalformedAuthHeader("No valid authorization header provided") from None


def get_current_account(
    authorization: str | None = Depends(api_key_header),
    gate: AuthenticationGate = Depends(get_authentication_gate),
) -> Account:
    """
    Resolve the account for the request's Authorization header.

    Returns:
        The authenticated Account, available to the route for this request

    Raises:
        HTTPException: 401 for any authentication failure, 500 if the
            account could not be read
    """
    try:
        return gate.authenticate(decode_header_value(authorization))
    except AuthenticationFailed as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "ApiKey"},
        ) from None
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {e}",
        ) from None
