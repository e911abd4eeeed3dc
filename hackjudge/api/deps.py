from __future__ import annotations

from typing import Any, Optional

from fastapi import Depends, Header, HTTPException

from hackjudge.schemas.meeting import Meeting
from hackjudge.settings import Settings, get_settings
from hackjudge.util.security import token_from_headers, verify_session_token


def require_session(
    x_session_token: Optional[str] = Header(None, alias="X-Session-Token"),
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the caller's user id from a signed session token."""
    token = token_from_headers(session_header=x_session_token, authorization=authorization)
    check = verify_session_token(token=token, secret=settings.SESSION_SECRET)
    if not check.ok:
        raise HTTPException(status_code=401, detail=f"Unauthorized: {check.reason}")
    return check.user_id


def submission_link(meeting_id: str, settings: Settings) -> str:
    return f"{settings.BASE_URL.rstrip('/')}/submit/{meeting_id}"


def meeting_payload(meeting: Meeting, settings: Settings) -> dict[str, Any]:
    return {**meeting.model_dump(), "submissionLink": submission_link(meeting.id, settings)}
