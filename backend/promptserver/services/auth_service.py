"""Auth Service — sign-up, login, token refresh, logout and login history.

Invariants:
    - Duplicate email -> DuplicateResourceError (409); bad credentials -> AuthenticationError (401)
    - Every login attempt against a known or unknown email writes a LoginHistory row
    - Refresh tokens are honored only while stored and unexpired
    - Logout blacklists the access token jti until its expiry and drops the user's refresh tokens
    - Failed-login error message never reveals whether the email exists
    - Successful login and logout purge blacklist and refresh-token rows past expiry

Design Decisions:
    - Blacklist in the database: works without Redis; expired rows are purged on
      login/logout instead of by a scheduled job
    - Failed attempts are committed before raising so the audit row survives the error
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.config import Settings
from promptserver.core.commands import SignUpCommand, LoginCommand
from promptserver.core.domain_types import LoginStatus, TokenType, UserStatus
from promptserver.core.errors import AuthenticationError, DuplicateResourceError
from promptserver.infrastructure.database import unique_violation_as_conflict
from promptserver.infrastructure.security import (
    hash_password, verify_password, create_token, decode_token,
)
from promptserver.models.auth_token import RefreshToken, TokenBlacklist
from promptserver.models.login_history import LoginHistory
from promptserver.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


class AuthService:
    """Authentication use cases over users, tokens and login history."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    # ─── Sign-up / login ─────────────────────────────────────────

    async def sign_up(self, command: SignUpCommand) -> User:
        if await self._email_taken(command.email):
            raise DuplicateResourceError("User", "Email is already registered")

        user = User(
            email=command.email,
            password_hash=hash_password(command.password),
            name=command.name,
            status=UserStatus.ACTIVE.value,
        )
        self.db.add(user)
        async with unique_violation_as_conflict(
            self.db, "User", "Email is already registered",
        ):
            await self.db.commit()
        await self.db.refresh(user)
        logger.info("User signed up", extra={"user_id": user.id})
        return user

    async def _email_taken(self, email: str) -> bool:
        return await self.db.scalar(select(User.id).where(User.email == email)) is not None

    async def login(self, command: LoginCommand) -> TokenPair:
        user = await self.db.scalar(select(User).where(User.email == command.email))
        if (
            user is None
            or user.status != UserStatus.ACTIVE.value
            or not verify_password(command.password, user.password_hash)
        ):
            await self._record_login(command, user, LoginStatus.FAILED)
            logger.warning(
                "Login failed", extra={"user_id": user.id if user else None},
            )
            raise AuthenticationError("Invalid email or password", "INVALID_CREDENTIALS")

        access, access_claims = self._issue(user, TokenType.ACCESS)
        refresh, refresh_claims = self._issue(user, TokenType.REFRESH)
        self.db.add(RefreshToken(
            user_id=user.id, token=refresh, expires_at=refresh_claims.expires_at,
        ))
        await self._purge_expired_tokens()
        await self._record_login(command, user, LoginStatus.SUCCESS)
        logger.info("User logged in", extra={"user_id": user.id})
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            expires_in=int((access_claims.expires_at - access_claims.issued_at).total_seconds()),
        )

    async def _record_login(
        self, command: LoginCommand, user: User | None, status: LoginStatus,
    ) -> None:
        self.db.add(LoginHistory(
            user_id=user.id if user else None,
            email=command.email,
            ip_address=command.ip_address,
            user_agent=command.user_agent,
            status=status.value,
        ))
        await self.db.commit()

    # ─── Tokens ──────────────────────────────────────────────────

    def _issue(self, user: User, token_type: TokenType):
        if token_type == TokenType.ACCESS:
            ttl = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)
        else:
            ttl = timedelta(days=self.settings.jwt_refresh_token_expire_days)
        return create_token(
            str(user.uuid), token_type, ttl,
            self.settings.jwt_secret_key, self.settings.jwt_algorithm,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Mint a new access token; the refresh token itself is returned unchanged."""
        claims = decode_token(
            refresh_token, TokenType.REFRESH,
            self.settings.jwt_secret_key, self.settings.jwt_algorithm,
        )
        now = datetime.now(timezone.utc)
        stored = await self.db.scalar(
            select(RefreshToken)
            .where(RefreshToken.token == refresh_token)
            .where(RefreshToken.expires_at > now),
        )
        if stored is None:
            raise AuthenticationError("Refresh token is not recognized", "INVALID_TOKEN")

        user = await self._active_user_by_uuid(claims.subject)
        access, access_claims = self._issue(user, TokenType.ACCESS)
        return TokenPair(
            access_token=access,
            refresh_token=refresh_token,
            expires_in=int((access_claims.expires_at - access_claims.issued_at).total_seconds()),
        )

    async def logout(self, access_token: str) -> None:
        claims = decode_token(
            access_token, TokenType.ACCESS,
            self.settings.jwt_secret_key, self.settings.jwt_algorithm,
        )
        user = await self._active_user_by_uuid(claims.subject)
        already = await self.db.scalar(
            select(TokenBlacklist.id).where(TokenBlacklist.jti == claims.jti),
        )
        if already is None:
            self.db.add(TokenBlacklist(jti=claims.jti, expires_at=claims.expires_at))
        await self.db.execute(
            delete(RefreshToken).where(RefreshToken.user_id == user.id),
        )
        await self._purge_expired_tokens()
        await self.db.commit()
        logger.info("User logged out", extra={"user_id": user.id})

    async def _purge_expired_tokens(self) -> None:
        now = datetime.now(timezone.utc)
        for model in (TokenBlacklist, RefreshToken):
            await self.db.execute(
                delete(model)
                .where(model.expires_at < now)
                .execution_options(synchronize_session=False),
            )

    async def authenticate(self, access_token: str) -> User:
        """Resolve the user behind a bearer access token."""
        claims = decode_token(
            access_token, TokenType.ACCESS,
            self.settings.jwt_secret_key, self.settings.jwt_algorithm,
        )
        revoked = await self.db.scalar(
            select(TokenBlacklist.id).where(TokenBlacklist.jti == claims.jti),
        )
        if revoked is not None:
            raise AuthenticationError("Token has been revoked", "TOKEN_REVOKED")
        return await self._active_user_by_uuid(claims.subject)

    async def _active_user_by_uuid(self, subject: str) -> User:
        try:
            user_uuid = UUID(subject)
        except ValueError:
            raise AuthenticationError("Invalid token subject", "INVALID_TOKEN")
        user = await self.db.scalar(select(User).where(User.uuid == user_uuid))
        if user is None or user.status != UserStatus.ACTIVE.value:
            raise AuthenticationError("User is not active", "INVALID_TOKEN")
        return user

    # ─── History ─────────────────────────────────────────────────

    async def login_history(self, user_id: int, limit: int = 20) -> list[LoginHistory]:
        result = await self.db.execute(
            select(LoginHistory)
            .where(LoginHistory.user_id == user_id)
            .order_by(LoginHistory.login_at.desc(), LoginHistory.id.desc())
            .limit(limit),
        )
        return list(result.scalars().all())
