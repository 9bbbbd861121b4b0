"""
DesignOS: JWT Handler

Responsibilities:
- Issue access / refresh tokens for a session (identity provider side)
- Verify and decode tokens
- Map PyJWT failures onto TokenExpiredError / InvalidTokenError

Uses:
- HS256 symmetric signing
- `jti` claim as the session id
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from dotenv import load_dotenv


# ============================================================
# LOAD ENVIRONMENT VARIABLES
# ============================================================

load_dotenv()


# ============================================================
# CONFIGURATION
# ============================================================

JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", 15))
JWT_REFRESH_EXPIRATION_DAYS = int(os.getenv("JWT_REFRESH_EXPIRATION_DAYS", 7))

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET must be set in environment variables.")


# ============================================================
# CUSTOM EXCEPTIONS
# ============================================================

class TokenExpiredError(Exception):
    """Raised when JWT token has expired."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.session_id = session_id


class InvalidTokenError(Exception):
    """Raised when JWT token is invalid."""
    pass


# ============================================================
# CREATE TOKENS
# ============================================================

def _encode_token(payload: dict) -> str:
    return jwt.encode(
        payload,
        JWT_SECRET,
        algorithm=JWT_ALGORITHM
    )


def _session_payload(
    user_id: str,
    username: str,
    role: Optional[str],
    super_admin: bool,
    session_id: Optional[str],
    token_type: str,
    lifetime: timedelta
) -> dict:
    now = datetime.now(timezone.utc)
    return {
        "user_id": user_id,
        "username": username,
        "role": role,
        "super_admin": bool(super_admin),
        "jti": session_id or uuid.uuid4().hex,
        "token_type": token_type,
        "iat": now,
        "exp": now + lifetime
    }


def create_access_token(
    user_id: str,
    username: str,
    role: Optional[str],
    super_admin: bool = False,
    session_id: Optional[str] = None,
    expires_in: Optional[timedelta] = None
) -> str:
    """
    Generate signed JWT access token.
    `role` may be None while the identity provider is still resolving it.
    """

    lifetime = expires_in if expires_in is not None else timedelta(minutes=JWT_EXPIRATION_MINUTES)
    payload = _session_payload(
        user_id, username, role, super_admin, session_id, "access", lifetime
    )
    return _encode_token(payload)


def create_refresh_token(
    user_id: str,
    username: str,
    role: Optional[str],
    super_admin: bool = False,
    session_id: Optional[str] = None
) -> str:
    lifetime = timedelta(days=JWT_REFRESH_EXPIRATION_DAYS)
    payload = _session_payload(
        user_id, username, role, super_admin, session_id, "refresh", lifetime
    )
    return _encode_token(payload)


# ============================================================
# VERIFY TOKEN
# ============================================================

def _expired_session_id(token: str) -> Optional[str]:
    # signature is still checked; only the expiry is ignored
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"verify_exp": False}
        )
    except jwt.InvalidTokenError:
        return None
    return payload.get("jti")


def verify_token(token: str, expected_type: Optional[str] = None) -> dict:
    """
    Decode and verify JWT token.
    Returns payload if valid.
    Raises custom exceptions if invalid.
    """

    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM]
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired.", session_id=_expired_session_id(token))

    except jwt.InvalidTokenError:
        raise InvalidTokenError("Invalid token.")

    if expected_type and payload.get("token_type") != expected_type:
        raise InvalidTokenError("Invalid token type.")

    if not payload.get("jti"):
        raise InvalidTokenError("Token carries no session id.")

    return payload
