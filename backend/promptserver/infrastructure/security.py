"""Security Primitives — password hashing and JWT encode/decode.

Invariants:
    - Raw passwords never leave this module (only werkzeug hashes are stored)
    - Every token carries sub, jti, type, iat, exp
    - Expired or malformed tokens raise AuthenticationError, never jwt exceptions

Design Decisions:
    - werkzeug.security hashes: salted, self-describing method prefix
    - PyJWT HS256 with a shared secret from Settings
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
from werkzeug.security import generate_password_hash, check_password_hash

from promptserver.core.domain_types import TokenType
from promptserver.core.errors import AuthenticationError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    jti: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime


def create_token(
    subject: str,
    token_type: TokenType,
    expires_in: timedelta,
    secret: str,
    algorithm: str = "HS256",
) -> tuple[str, TokenClaims]:
    """Encode a signed token and return it with its claims."""
    now = datetime.now(timezone.utc)
    claims = TokenClaims(
        subject=subject,
        jti=uuid4().hex,
        token_type=token_type,
        issued_at=now,
        expires_at=now + expires_in,
    )
    payload = {
        "sub": subject,
        "jti": claims.jti,
        "type": token_type.value,
        "iat": now,
        "exp": claims.expires_at,
    }
    return jwt.encode(payload, secret, algorithm=algorithm), claims


def decode_token(
    token: str,
    expected_type: TokenType,
    secret: str,
    algorithm: str = "HS256",
) -> TokenClaims:
    """Verify signature, expiry and token type."""
    try:
        payload = jwt.decode(
            token, secret, algorithms=[algorithm],
            options={"require": ["exp", "iat", "sub", "jti"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired", "TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
        raise AuthenticationError("Invalid token", "INVALID_TOKEN")

    if payload.get("type") != expected_type.value:
        raise AuthenticationError("Wrong token type", "INVALID_TOKEN")
    return TokenClaims(
        subject=payload["sub"],
        jti=payload["jti"],
        token_type=expected_type,
        issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
    )
