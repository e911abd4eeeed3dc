from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SessionCheck:
    ok: bool
    user_id: str = ""
    reason: str = ""


def _sign(user_id: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), user_id.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_session_token(*, user_id: str, secret: str) -> str:
    """Token format: '{user_id}.{hex hmac-sha256(user_id)}'."""
    return f"{user_id}.{_sign(user_id, secret)}"


def verify_session_token(*, token: Optional[str], secret: str) -> SessionCheck:
    if not token:
        return SessionCheck(ok=False, reason="missing_session_token")

    user_id, sep, sig = token.strip().rpartition(".")
    if not sep or not user_id or not sig:
        return SessionCheck(ok=False, reason="invalid_session_token_format")

    if not hmac.compare_digest(_sign(user_id, secret), sig):
        return SessionCheck(ok=False, reason="session_signature_mismatch")
    return SessionCheck(ok=True, user_id=user_id)


def token_from_headers(*, session_header: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if session_header:
        return session_header
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None
