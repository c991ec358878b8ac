"""
API routes - Key request, activation and data endpoints.

This module defines the HTTP endpoints:
- POST /auth - Request an api key for a device
- GET /activate/{token} - Activate a requested api key
- GET / - Fetch the account's data blob
- PUT / - Replace the account's data blob
"""

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

from src.api.dependencies import (
    get_activation_service,
    get_current_account,
    get_data_service,
    get_token_issuer,
)
from src.api.models import DeviceKeyResponse, ErrorResponse
from src.domain.activation import ActivationService, TokenIssuer
from src.domain.data import DataService
from src.domain.exceptions import DataNotFound, StorageError, TokenNotValid
from src.domain.models import Account

router = APIRouter(tags=["sync"])


def storage_failure(e: StorageError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error: {e}",
    )


@router.post(
    "/auth",
    response_model=DeviceKeyResponse,
    responses={500: {"model": ErrorResponse, "description": "Storage error"}},
    summary="Request an api key",
    description="Generate an api key for a device. The key stays inactive until "
    "the activation link emailed to the given address is opened.",
)
def request_api_key(
    request: Request,
    email: str = Form(""),
    device_name: str = Form(""),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> DeviceKeyResponse:
    """
    Request a new api key.

    - **email**: Account email address (receives the activation link)
    - **device_name**: Label of the device the key is for

    The response contains the key even though it is not active yet.
    Email delivery happens in the background and never fails the request.
    """
    try:
        device_key = issuer.request_key(email, device_name, host=request.url.netloc)
    except StorageError as e:
        raise storage_failure(e) from None
    return DeviceKeyResponse.from_device_key(device_key)


@router.get(
    "/activate/{token}",
    response_class=PlainTextResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Token not valid"},
        500: {"model": ErrorResponse, "description": "Storage error"},
    },
    summary="Activate an api key",
)
def activate_api_key(
    token: str,
    service: ActivationService = Depends(get_activation_service),
) -> str:
    """Activate the api key the token was issued for."""
    try:
        return service.activate(token)
    except TokenNotValid:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Token not valid",
        ) from None
    except StorageError as e:
        raise storage_failure(e) from None


@router.get(
    "/",
    response_class=Response,
    responses={
        200: {"content": {"application/octet-stream": {}}},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "No data stored yet"},
        500: {"model": ErrorResponse, "description": "Storage error"},
    },
    summary="Fetch data",
)
def get_data(
    account: Account = Depends(get_current_account),
    service: DataService = Depends(get_data_service),
) -> Response:
    """Return the account's data blob exactly as it was stored."""
    try:
        data = service.get(account)
    except DataNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Could not find data for {account.email}",
        ) from None
    except StorageError as e:
        raise storage_failure(e) from None
    return Response(content=data, media_type="application/octet-stream")


@router.put(
    "/",
    response_class=Response,
    responses={
        200: {"content": {"application/octet-stream": {}}},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        500: {"model": ErrorResponse, "description": "Storage error"},
    },
    summary="Replace data",
)
async def put_data(
    request: Request,
    account: Account = Depends(get_current_account),
    service: DataService = Depends(get_data_service),
) -> Response:
    """Replace the account's data blob with the raw request body and echo it."""
    body = await request.body()
    try:
        data = await run_in_threadpool(service.put, account, body)
    except StorageError as e:
        raise storage_failure(e) from None
    return Response(content=data, media_type="application/octet-stream")
