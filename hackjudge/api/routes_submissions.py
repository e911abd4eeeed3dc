from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from hackjudge.jobs.summary_jobs import mark_summary_failed
from hackjudge.schemas.meeting import Meeting, Submission, SubmissionInfo, placeholder_submission_info
from hackjudge.services.meeting_store_service import ConcurrentUpdateError, MeetingNotFound, get_meeting, new_id, update_meeting
from hackjudge.services.rq_service import get_queue
from hackjudge.services.upload_service import delete_uploads, mock_pdf_url, save_upload
from hackjudge.settings import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter()

SUMMARY_JOB = "hackjudge.jobs.summary_jobs.process_submission_summary"


@router.post("/submissions")
async def create_submission(
    teamName: str = Form(default=""),
    meetingId: str = Form(default=""),
    pdf: Optional[UploadFile] = File(default=None),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Accept a team's proposal, append a placeholder submission and queue the
    OCR + summary job. The response does not wait for the summary.
    """
    if not teamName or not meetingId or pdf is None or not pdf.filename:
        raise HTTPException(status_code=400, detail="Missing required fields")

    content = await pdf.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")

    if get_meeting(meetingId) is None:
        raise HTTPException(status_code=404, detail="Meeting not found")

    submission = Submission(
        id=new_id(),
        teamName=teamName,
        pdfUrl=mock_pdf_url(pdf.filename),
        submittedAt=datetime.now(timezone.utc).isoformat(),
        submissionInfo=SubmissionInfo.model_validate(placeholder_submission_info()),
        summaryStatus="pending",
    )

    def append(meeting: Meeting) -> None:
        meeting.submissions.append(submission.model_copy(deep=True))

    try:
        save_upload(submission_id=submission.id, filename=pdf.filename, content=content)
        update_meeting(meetingId, append)
    except MeetingNotFound as e:
        delete_uploads([submission.id])
        raise HTTPException(status_code=404, detail="Meeting not found") from e
    except ConcurrentUpdateError as e:
        delete_uploads([submission.id])
        raise HTTPException(status_code=409, detail=str(e)) from e
    except Exception as e:  # noqa: BLE001
        logger.exception("Submission error. meeting_id=%s team=%s", meetingId, teamName)
        delete_uploads([submission.id])
        raise HTTPException(status_code=500, detail=str(e) or "Failed to submit presentation") from e

    summary_status = "pending"
    try:
        q = get_queue()
        q.enqueue(SUMMARY_JOB, meetingId, submission.id, job_id=f"summary:{submission.id}")
    except Exception as e:  # noqa: BLE001
        logger.exception("Failed to enqueue summary job. meeting_id=%s submission_id=%s", meetingId, submission.id)
        mark_summary_failed(meetingId, submission.id, f"enqueue_failed: {e}")
        summary_status = "failed"

    logger.info("Submission accepted. meeting_id=%s submission_id=%s team=%s", meetingId, submission.id, teamName)
    return {
        "success": True,
        "submissionId": submission.id,
        "submissionInfo": placeholder_submission_info(),
        "summaryStatus": summary_status,
    }
