from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from hackjudge.schemas.meeting import SessionRequest
from hackjudge.services.meeting_store_service import new_id
from hackjudge.settings import Settings, get_settings
from hackjudge.util.security import issue_session_token

router = APIRouter()


@router.post("/session")
async def create_session(
    request: Optional[SessionRequest] = None,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Issue a signed session for an opaque organizer id.

    Browsers that already hold an id (from local storage) pass it to keep
    their meetings; otherwise a fresh one is minted.
    """
    user_id = (request.userId.strip() if request else "") or new_id()
    return {
        "success": True,
        "userId": user_id,
        "token": issue_session_token(user_id=user_id, secret=settings.SESSION_SECRET),
    }
