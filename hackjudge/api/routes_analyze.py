from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from hackjudge.api.deps import meeting_payload
from hackjudge.schemas.meeting import AnalyzeRequest, Meeting
from hackjudge.services.llm_service import analyze_presentation
from hackjudge.services.meeting_store_service import ConcurrentUpdateError, MeetingNotFound, get_meeting, update_meeting
from hackjudge.settings import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/analyze")
async def analyze_endpoint(request: AnalyzeRequest, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """
    Analyze a live presentation transcript into pros, cons and follow-up
    questions, and store it under meeting.analysis[submissionId].
    Re-analyzing a submission replaces its previous entry.
    """
    if not request.transcript or not request.meetingId or not request.submissionId:
        raise HTTPException(status_code=400, detail="Missing required fields")

    if get_meeting(request.meetingId) is None:
        raise HTTPException(status_code=404, detail="Meeting not found")

    try:
        analysis = await run_in_threadpool(analyze_presentation, request.transcript)
    except Exception as e:  # noqa: BLE001
        logger.error("Analysis error. meeting_id=%s submission_id=%s: %s", request.meetingId, request.submissionId, e)
        raise HTTPException(status_code=500, detail="Failed to analyze presentation") from e

    def store(meeting: Meeting) -> None:
        meeting.analysis[request.submissionId] = analysis.model_copy(deep=True)

    try:
        updated = update_meeting(request.meetingId, store)
    except MeetingNotFound as e:
        raise HTTPException(status_code=404, detail="Meeting not found") from e
    except ConcurrentUpdateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    logger.info(
        "Presentation analyzed. meeting_id=%s submission_id=%s pros=%d cons=%d questions=%d",
        request.meetingId,
        request.submissionId,
        len(analysis.pros),
        len(analysis.cons),
        len(analysis.suggestedQuestions),
    )
    return {
        "success": True,
        "analysis": analysis.model_dump(),
        "updatedMeeting": meeting_payload(updated, settings),
    }
