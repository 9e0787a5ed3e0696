"""JWT helpers used to identify push and API clients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from hrnotify.config import get_settings

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenIdentity:
    """Identity asserted by a verified access token."""

    user_id: int
    role: str


def create_access_token(
    user_id: int, role: str, expires_delta: timedelta | None = None
) -> str:
    settings = get_settings()
    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenIdentity:
    """Verify ``token`` and return the identity it carries.

    Raises ``ValueError`` when the signature, expiry or claims are invalid.
    """

    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc

    subject = claims.get("sub")
    role = claims.get("role")
    if subject is None or not isinstance(role, str) or not role:
        raise ValueError("Token is missing the subject or role claim")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise ValueError("Token subject is not a user id") from exc
    return TokenIdentity(user_id=user_id, role=role)


__all__ = ["ALGORITHM", "TokenIdentity", "create_access_token", "decode_access_token"]
