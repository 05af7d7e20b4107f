"""User Rules — email format and password policy.

Invariants:
    - Emails match ^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$ and are stored lower-cased
    - Passwords: >= 8 chars with at least one letter, one digit and one of !@#$%^&*()
"""

import re

from promptserver.core.domain_types import PASSWORD_MIN_LENGTH
from promptserver.core.errors import InvalidCommandError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$")
PASSWORD_SPECIAL_CHARS = "!@#$%^&*()"


def normalize_email(email: str | None) -> str:
    """Validate and lower-case an email address."""
    if email is None or not email.strip():
        raise InvalidCommandError("Email must not be blank", "email")
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise InvalidCommandError("Invalid email format", "email")
    return email.lower()


def validate_password(password: str | None) -> str:
    if password is None or len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidCommandError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters", "password",
        )
    if not any(c.isalpha() for c in password):
        raise InvalidCommandError("Password must contain a letter", "password")
    if not any(c.isdigit() for c in password):
        raise InvalidCommandError("Password must contain a digit", "password")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        raise InvalidCommandError(
            f"Password must contain one of {PASSWORD_SPECIAL_CHARS}", "password",
        )
    return password
