"""Auth Routes — sign-up, login, token refresh, logout and login history.

Invariants:
    - Login records client IP and User-Agent on every attempt
    - Logout requires the access token being revoked
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from promptserver.api.dependencies import (
    get_auth_service, get_bearer_token, get_client_ip, get_current_user,
)
from promptserver.core.commands import SignUpCommand, LoginCommand
from promptserver.models.user import User
from promptserver.schemas.auth import (
    SignUpRequest, SignUpResponse, LoginRequest, RefreshRequest,
    TokenResponse, LoginHistoryResponse,
)
from promptserver.services.auth_service import AuthService, TokenPair

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
    )


@router.post(
    "/signup", response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(body: SignUpRequest, auth: AuthService = Depends(get_auth_service)):
    user = await auth.sign_up(
        SignUpCommand(email=body.email, password=body.password, name=body.name),
    )
    return SignUpResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    command = LoginCommand(
        email=body.email,
        password=body.password,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return _token_response(await auth.login(command))


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    return _token_response(await auth.refresh(body.refresh_token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.logout(token)


@router.get("/login-history", response_model=list[LoginHistoryResponse])
async def login_history(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """The caller's most recent login attempts, newest first."""
    rows = await auth.login_history(user.id, limit)
    return [LoginHistoryResponse.model_validate(row) for row in rows]
