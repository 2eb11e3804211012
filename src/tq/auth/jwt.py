"""
JWT access-token verification.

Tokens are issued by the identity service. HS* algorithms verify with the
shared secret; RS*/ES* algorithms verify with the public key on disk.
``create_access_token`` exists for symmetric setups (tests, local dev).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt

from tq.config import get_settings

_public_key: str | None = None


def _is_symmetric(algorithm: str) -> bool:
    return algorithm.upper().startswith("HS")


def _verification_key() -> str:
    """Shared secret or cached public key, depending on the algorithm."""
    global _public_key  # noqa: PLW0603
    settings = get_settings()
    if _is_symmetric(settings.jwt_algorithm):
        return settings.jwt_secret
    if _public_key is None:
        _public_key = Path(settings.jwt_public_key_path).read_text()
    return _public_key


def reset_keys() -> None:
    """Reset cached keys (useful for testing)."""
    global _public_key  # noqa: PLW0603
    _public_key = None


def create_access_token(account_id: int, role: str = "member") -> str:
    """
    Create a short-lived access token signed with the shared secret.

    Args:
        account_id: The account's database ID.
        role: "member" or "supervisor".

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    if not _is_symmetric(settings.jwt_algorithm):
        msg = f"Cannot issue tokens locally with {settings.jwt_algorithm}"
        raise RuntimeError(msg)
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(account_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or wrong type.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _verification_key(),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload
