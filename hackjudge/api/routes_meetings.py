from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from hackjudge.api.deps import meeting_payload, require_session
from hackjudge.schemas.meeting import CreateMeetingRequest, Meeting, UpdateMeetingRequest
from hackjudge.services.meeting_store_service import (
    ConcurrentUpdateError,
    MeetingNotFound,
    create_meeting,
    delete_meeting,
    get_meeting,
    list_meetings,
    update_meeting,
)
from hackjudge.settings import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter()


def _parse_participant_count(value: Any) -> int:
    # Lenient like a form field: "12" -> 12, junk/0/missing/infinite -> 1.
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return count or 1


@router.post("/meetings")
async def create_meeting_endpoint(
    request: CreateMeetingRequest,
    user_id: str = Depends(require_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    if not request.title or not request.agenda:
        raise HTTPException(status_code=400, detail="Title and agenda are required")

    try:
        meeting = create_meeting(
            title=request.title,
            agenda=request.agenda,
            participant_count=_parse_participant_count(request.participantCount),
            user_id=user_id,
        )
    except Exception as e:  # noqa: BLE001
        logger.exception("Failed to create meeting")
        raise HTTPException(status_code=500, detail="Failed to create meeting") from e

    return {"success": True, "meeting": meeting_payload(meeting, settings)}


@router.get("/meetings")
async def list_meetings_endpoint(
    userId: Optional[str] = Query(default=None),
    user_id: str = Depends(require_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    # userId is accepted for older clients but must match the session.
    if userId and userId != user_id:
        raise HTTPException(status_code=403, detail="userId does not match session")

    try:
        meetings = list_meetings(user_id)
    except Exception as e:  # noqa: BLE001
        logger.exception("Failed to fetch meetings. user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch meetings") from e

    return {"success": True, "meetings": [meeting_payload(m, settings) for m in meetings]}


@router.get("/meetings/{meeting_id}")
async def get_meeting_endpoint(meeting_id: str, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    meeting = get_meeting(meeting_id)
    if meeting is None:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return {"success": True, "meeting": meeting_payload(meeting, settings)}


@router.put("/meetings/{meeting_id}")
async def update_meeting_endpoint(
    meeting_id: str,
    request: UpdateMeetingRequest,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Partial update. Scalar fields are applied only when truthy, so an empty
    title or a participantCount of 0 leaves the stored value untouched.
    A submissions list replaces the stored one whenever it is sent, even empty.
    """

    def mutate(meeting: Meeting) -> None:
        if request.title:
            meeting.title = request.title
        if request.agenda:
            meeting.agenda = request.agenda
        if request.participantCount:
            meeting.participantCount = request.participantCount
        if request.status:
            meeting.status = request.status
        if request.submissions is not None:
            meeting.submissions = request.submissions

    try:
        meeting = update_meeting(meeting_id, mutate)
    except MeetingNotFound as e:
        raise HTTPException(status_code=404, detail="Meeting not found") from e
    except ConcurrentUpdateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return {"success": True, "meeting": meeting_payload(meeting, settings)}


@router.delete("/meetings/{meeting_id}")
async def delete_meeting_endpoint(meeting_id: str) -> dict[str, Any]:
    if not delete_meeting(meeting_id):
        raise HTTPException(status_code=404, detail="Meeting not found")
    return {"success": True, "message": "Meeting deleted successfully"}
