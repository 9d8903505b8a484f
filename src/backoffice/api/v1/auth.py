"""Authentication endpoints: one-time codes and token rotation."""

from fastapi import APIRouter, Response, status
from starlette.requests import Request

from src.backoffice.api.dependencies import (
    CodeServiceDep,
    CurrentPrincipal,
    TokenServiceDep,
)
from src.backoffice.core.config import get_settings
from src.backoffice.core.exceptions import InvalidToken
from src.backoffice.core.rate_limit import (
    CODE_REQUEST_LIMIT,
    CODE_VERIFY_LIMIT,
    TOKEN_REFRESH_LIMIT,
    limiter,
)
from src.backoffice.models import utc_now
from src.backoffice.schemas import (
    AccessTokenResponse,
    CodeRequest,
    CodeRequestResponse,
    CodeVerifyRequest,
    GrantRead,
    LogoutResponse,
    PrincipalRead,
    RefreshRequest,
)
from src.backoffice.services import TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: Response, pair: TokenPair) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=pair.refresh_token,
        max_age=settings.refresh_token_ttl_seconds,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
        path="/api/v1/auth",
    )


def _clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
        path="/api/v1/auth",
    )


def _token_response(pair: TokenPair) -> AccessTokenResponse:
    return AccessTokenResponse(
        access_token=pair.access_token,
        expires_in=get_settings().access_token_expire_minutes * 60,
    )


def _presented_refresh_token(request: Request, body: RefreshRequest | None) -> str | None:
    """Cookie first, then the JSON body."""
    cookie = request.cookies.get(get_settings().refresh_cookie_name)
    return cookie or (body.refresh_token if body else None)


def _require_refresh_token(request: Request, body: RefreshRequest | None) -> str:
    token = _presented_refresh_token(request, body)
    if not token:
        raise InvalidToken("Refresh token missing")
    return token


@router.post(
    "/otp/request",
    response_model=CodeRequestResponse,
    responses={503: {"description": "The code could not be delivered"}},
)
@limiter.limit(CODE_REQUEST_LIMIT)
async def request_code(
    request: Request, data: CodeRequest, service: CodeServiceDep
) -> CodeRequestResponse:
    """Send a one-time login code to a phone.

    While a code is still valid, asking again neither creates nor resends one.
    The code itself is never part of the response.
    """
    code = await service.request_code(data.phone)
    remaining = max(int((code.expires_at - utc_now()).total_seconds()), 0)
    return CodeRequestResponse(expires_in=remaining)


@router.post(
    "/otp/verify",
    response_model=AccessTokenResponse,
    responses={401: {"description": "Wrong, expired or already used code"}},
)
@limiter.limit(CODE_VERIFY_LIMIT)
async def verify_code(
    request: Request,
    response: Response,
    data: CodeVerifyRequest,
    service: CodeServiceDep,
    token_service: TokenServiceDep,
) -> AccessTokenResponse:
    """Exchange a code for tokens, creating the account on first login.

    The access token is returned in the body; the refresh token is set as an
    HTTP-only, SameSite=Strict cookie.
    """
    account = await service.verify_code(data.phone, data.code)
    pair = await token_service.issue(account)
    _set_refresh_cookie(response, pair)
    return _token_response(pair)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    responses={401: {"description": "Invalid, expired or already used refresh token"}},
)
@limiter.limit(TOKEN_REFRESH_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    token_service: TokenServiceDep,
    data: RefreshRequest | None = None,
) -> AccessTokenResponse:
    """Rotate the refresh token. The presented token stops working immediately."""
    pair, _ = await token_service.rotate(_require_refresh_token(request, data))
    _set_refresh_cookie(response, pair)
    return _token_response(pair)


@router.post("/logout", response_model=LogoutResponse, status_code=status.HTTP_200_OK)
async def logout(
    request: Request,
    response: Response,
    token_service: TokenServiceDep,
    data: RefreshRequest | None = None,
) -> LogoutResponse:
    """Revoke the refresh token and clear the cookie. Unknown tokens are ignored."""
    token = _presented_refresh_token(request, data)
    if token:
        await token_service.revoke(token)
    _clear_refresh_cookie(response)
    return LogoutResponse()


@router.get("/me", response_model=PrincipalRead)
async def me(principal: CurrentPrincipal) -> PrincipalRead:
    """The authenticated caller and its active role grants."""
    return PrincipalRead(
        account_id=principal.account_id,
        phone=principal.phone,
        is_super=principal.is_super,
        active_roles=[GrantRead.model_validate(grant) for grant in principal.active_roles],
    )
