"""
Auth router: signup, login, refresh-token rotation, logout.

Endpoints:
    POST /auth/signup   create account, returns token pair (201)
    POST /auth/login    email + password, returns token pair
    POST /auth/refresh  rotate a refresh token
    GET  /auth/me       current user
    POST /auth/logout   revoke one session or all of them
"""

from __future__ import annotations

from fastapi import APIRouter, Body, status

from notebridge.api.deps import CurrentUser, DbSession, Settings
from notebridge.api.schemas.auth import (
    LoginRequest,
    LogoutRequest,
    MeResponse,
    MessageResponse,
    RefreshRequest,
    SignupRequest,
    TokenResponse,
    UserOut,
)
from notebridge.services.auth import AuthService, IssuedTokens

router = APIRouter(prefix="/auth")


def _tokens(issued: IssuedTokens) -> TokenResponse:
    return TokenResponse(
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
        refresh_token_expires_at=issued.refresh_token_expires_at,
        user=UserOut.model_validate(issued.user),
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, db: DbSession, settings: Settings) -> TokenResponse:
    issued = AuthService(db, settings).signup(
        body.email,
        body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return _tokens(issued)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: DbSession, settings: Settings) -> TokenResponse:
    return _tokens(AuthService(db, settings).login(body.email, body.password))


@router.post("/refresh", response_model=TokenResponse)
def refresh(body: RefreshRequest, db: DbSession, settings: Settings) -> TokenResponse:
    return _tokens(AuthService(db, settings).refresh(body.refresh_token))


@router.get("/me", response_model=MeResponse)
def me(user: CurrentUser, db: DbSession, settings: Settings) -> MeResponse:
    record = AuthService(db, settings).get_user(user.user_id)
    return MeResponse(user=UserOut.model_validate(record))


@router.post("/logout", response_model=MessageResponse)
def logout(
    user: CurrentUser,
    db: DbSession,
    settings: Settings,
    body: LogoutRequest | None = Body(default=None),
) -> MessageResponse:
    body = body or LogoutRequest()
    everywhere = body.all_devices or not body.refresh_token
    AuthService(db, settings).logout(
        user.user_id,
        refresh_token=body.refresh_token,
        all_devices=everywhere,
    )
    return MessageResponse(message="Logged out from all devices" if everywhere else "Logged out")
