import base64
import hashlib
import hmac
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Response

from buddyworks.errors import Forbidden, InvalidToken, Unauthenticated, raise_http_error

DEFAULT_TOKEN_TTL_HOURS = 1
TOKEN_COOKIE_NAME = "token"


def _read_ttl_hours() -> int:
    try:
        value = int(os.getenv("AUTH_TOKEN_TTL_HOURS", str(DEFAULT_TOKEN_TTL_HOURS)))
    except ValueError:
        return DEFAULT_TOKEN_TTL_HOURS
    return value if value > 0 else DEFAULT_TOKEN_TTL_HOURS


def _read_samesite() -> str:
    value = os.getenv("AUTH_COOKIE_SAMESITE", "none").strip().lower()
    return value if value in {"lax", "strict", "none"} else "none"


TOKEN_TTL_HOURS = _read_ttl_hours()
COOKIE_SECURE = os.getenv("AUTH_COOKIE_SECURE", "true").lower() in {"1", "true", "yes"}
COOKIE_SAMESITE = _read_samesite()
_AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-insecure-secret-change-me")


@dataclass(frozen=True)
class AuthenticatedIdentity:
    email: str


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("utf-8").rstrip("=")


def _b64urldecode(value: str) -> bytes:
    padding = "=" * ((4 - len(value) % 4) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


def _sign(payload: bytes) -> bytes:
    return hmac.new(_AUTH_SECRET.encode("utf-8"), payload, hashlib.sha256).digest()


def create_access_token(email: str, ttl_hours: Optional[int] = None) -> tuple[str, str]:
    expiry = datetime.now(timezone.utc) + timedelta(hours=ttl_hours or TOKEN_TTL_HOURS)
    payload = f"{email}|{int(expiry.timestamp())}".encode("utf-8")
    token = f"{_b64url(payload)}.{_b64url(_sign(payload))}"
    return token, expiry.isoformat()


def verify_access_token(token: str) -> Optional[str]:
    try:
        payload_part, sig_part = token.split(".", 1)
        payload = _b64urldecode(payload_part)
        sent_sig = _b64urldecode(sig_part)
        if not hmac.compare_digest(sent_sig, _sign(payload)):
            return None
        # rsplit: the email itself may contain "|"
        email, expiry_ts = payload.decode("utf-8").rsplit("|", 1)
        if datetime.now(timezone.utc).timestamp() > int(expiry_ts):
            return None
        return email or None
    except (ValueError, UnicodeDecodeError):
        return None


def verify_identity(token: Optional[str]) -> AuthenticatedIdentity:
    if not token:
        raise Unauthenticated("Unauthorized")
    email = verify_access_token(token)
    if not email:
        raise InvalidToken("Invalid or expired token")
    return AuthenticatedIdentity(email=email)


def require_identity(token: Optional[str] = Cookie(default=None)) -> AuthenticatedIdentity:
    try:
        return verify_identity(token)
    except (Unauthenticated, InvalidToken) as exc:
        raise_http_error(exc)


def issue_token_cookie(response: Response, email: str) -> str:
    token, _ = create_access_token(email)
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        max_age=TOKEN_TTL_HOURS * 3600,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
    )
    return token


def clear_token_cookie(response: Response) -> None:
    response.delete_cookie(
        TOKEN_COOKIE_NAME,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
    )


def authorize_owner(identity: AuthenticatedIdentity, owner_email: Optional[str]) -> None:
    if not owner_email or owner_email != identity.email:
        raise Forbidden("Forbidden")


def authorize_self(identity: AuthenticatedIdentity, requested_email: Optional[str]) -> None:
    if not requested_email or requested_email != identity.email:
        raise Forbidden("Unauthorized access")
