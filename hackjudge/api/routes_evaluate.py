from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from hackjudge.schemas.meeting import EvaluateRequest, Meeting
from hackjudge.services.evaluation_service import evaluate_submissions, rank_evaluations
from hackjudge.services.meeting_store_service import ConcurrentUpdateError, MeetingNotFound, get_meeting, update_meeting

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/evaluate")
async def evaluate_endpoint(request: EvaluateRequest) -> dict[str, Any]:
    """
    Score every submission against the judging rubric and mark the meeting
    analyzed. Individual scoring failures come back as score 0.
    """
    if not request.meetingId or not request.submissions or request.analysis is None:
        raise HTTPException(status_code=400, detail="Missing required fields")

    if get_meeting(request.meetingId) is None:
        raise HTTPException(status_code=404, detail="Meeting not found")

    try:
        evaluations = await run_in_threadpool(evaluate_submissions, request.submissions, request.analysis)
    except Exception as e:  # noqa: BLE001
        logger.exception("Evaluation error. meeting_id=%s", request.meetingId)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to evaluate submissions") from e

    def mark_analyzed(meeting: Meeting) -> None:
        meeting.status = "analyzed"

    try:
        update_meeting(request.meetingId, mark_analyzed)
    except MeetingNotFound as e:
        raise HTTPException(status_code=404, detail="Meeting not found") from e
    except ConcurrentUpdateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    zero_scores = sum(1 for e in evaluations if e.score == 0)
    logger.info("Meeting evaluated. meeting_id=%s submissions=%d zero_scores=%d", request.meetingId, len(evaluations), zero_scores)
    return {
        "success": True,
        "evaluations": [e.model_dump() for e in evaluations],
        "leaderboard": [entry.model_dump() for entry in rank_evaluations(evaluations)],
    }
