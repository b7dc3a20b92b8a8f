"""Authentication service - signup, login, refresh rotation, logout."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from notebridge.core.enums import UserRole
from notebridge.core.errors import AuthenticationError, ConflictError, NotFoundError
from notebridge.core.logging import get_logger
from notebridge.core.orm import ProfileTable, SessionTable, UserTable
from notebridge.core.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    hash_refresh_token,
    refresh_token_expiry,
    verify_password,
)
from notebridge.core.settings import NotebridgeSettings
from notebridge.core.time import utc_now_naive

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True, slots=True)
class IssuedTokens:
    """Access/refresh pair returned by signup, login and refresh."""

    access_token: str
    refresh_token: str
    refresh_token_expires_at: datetime
    user: UserTable


class AuthService:
    """User accounts and refresh-token sessions."""

    def __init__(self, session: Session, settings: NotebridgeSettings):
        self.session = session
        self.settings = settings

    # ── Users ────────────────────────────────────────────────────────────

    def _find_by_email(self, email: str) -> UserTable | None:
        stmt = (
            select(UserTable)
            .options(selectinload(UserTable.profile))
            .where(UserTable.email == email.strip().lower())
        )
        return self.session.scalars(stmt).first()

    def get_user(self, user_id: str) -> UserTable:
        stmt = select(UserTable).options(selectinload(UserTable.profile)).where(UserTable.id == user_id)
        user = self.session.scalars(stmt).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create_user(
        self,
        email: str,
        password: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        role: UserRole = UserRole.CLINICIAN,
    ) -> UserTable:
        """Create a user with an attached profile; duplicate email raises ``ConflictError``."""
        normalized = email.strip().lower()
        if self._find_by_email(normalized) is not None:
            raise ConflictError("Email already registered")

        user = UserTable(
            email=normalized,
            password_hash=hash_password(password, rounds=self.settings.bcrypt_rounds),
            role=role.value,
        )
        user.profile = ProfileTable(first_name=first_name, last_name=last_name)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # concurrent signup with the same email
            raise ConflictError("Email already registered", cause=exc) from exc

        logger.info("user_created", user_id=user.id, role=user.role)
        return user

    # ── Tokens ───────────────────────────────────────────────────────────

    def _issue(self, user: UserTable) -> IssuedTokens:
        refresh_token = generate_refresh_token()
        expires_at = refresh_token_expiry(self.settings)
        self.session.add(
            SessionTable(
                user_id=user.id,
                refresh_token_hash=hash_refresh_token(refresh_token),
                expires_at=expires_at,
            )
        )
        self.session.flush()
        access_token = create_access_token(
            self.settings, user_id=user.id, email=user.email, role=user.role
        )
        return IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            refresh_token_expires_at=expires_at,
            user=user,
        )

    def signup(
        self,
        email: str,
        password: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> IssuedTokens:
        user = self.create_user(email, password, first_name=first_name, last_name=last_name)
        return self._issue(user)

    def login(self, email: str, password: str) -> IssuedTokens:
        user = self._find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login_failed")
            raise AuthenticationError(INVALID_CREDENTIALS)
        logger.info("login_succeeded", user_id=user.id)
        return self._issue(user)

    def refresh(self, refresh_token: str) -> IssuedTokens:
        """Revoke the presented session and issue a fresh pair."""
        now = utc_now_naive()
        stmt = (
            select(SessionTable)
            .options(selectinload(SessionTable.user).selectinload(UserTable.profile))
            .where(SessionTable.refresh_token_hash == hash_refresh_token(refresh_token))
        )
        current = self.session.scalars(stmt).first()
        if current is None or current.revoked_at is not None or current.expires_at <= now:
            raise AuthenticationError("Invalid refresh token")

        current.revoked_at = now
        logger.info("session_rotated", user_id=current.user_id, session_id=current.id)
        return self._issue(current.user)

    def logout(
        self,
        user_id: str,
        *,
        refresh_token: str | None = None,
        all_devices: bool = False,
    ) -> int:
        """Revoke sessions of *user_id*; returns how many were revoked."""
        stmt = (
            update(SessionTable)
            .where(SessionTable.user_id == user_id, SessionTable.revoked_at.is_(None))
            .values(revoked_at=utc_now_naive())
        )
        if refresh_token and not all_devices:
            stmt = stmt.where(SessionTable.refresh_token_hash == hash_refresh_token(refresh_token))

        revoked = self.session.execute(stmt).rowcount or 0
        logger.info("sessions_revoked", user_id=user_id, count=revoked, all_devices=all_devices)
        return revoked
