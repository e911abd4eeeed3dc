from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

from hackjudge.schemas.meeting import Meeting, SubmissionInfo
from hackjudge.services.document_service import parse_document, to_submission_info
from hackjudge.services.meeting_store_service import ConcurrentUpdateError, MeetingNotFound, update_meeting
from hackjudge.services.upload_service import delete_uploads, load_upload

logger = logging.getLogger(__name__)


def _set_summary_state(meeting_id: str, submission_id: str, *, status: str, error: str = "", info: dict[str, Any] | None = None) -> bool:
    """Write the job outcome onto the submission. Returns False if the submission is gone."""
    found = False

    def mutate(meeting: Meeting) -> None:
        nonlocal found
        sub = meeting.find_submission(submission_id)
        found = sub is not None
        if sub is None:
            return
        sub.summaryStatus = status
        sub.summaryError = error
        if info is not None:
            sub.submissionInfo = SubmissionInfo.model_validate(info)

    try:
        update_meeting(meeting_id, mutate)
    except MeetingNotFound:
        logger.warning("Meeting deleted before summary was stored. meeting_id=%s submission_id=%s", meeting_id, submission_id)
        return False
    if not found:
        logger.warning("Submission no longer on meeting. meeting_id=%s submission_id=%s", meeting_id, submission_id)
    return found


def mark_summary_failed(meeting_id: str, submission_id: str, error: str) -> None:
    try:
        _set_summary_state(meeting_id, submission_id, status="failed", error=error)
    except (ConcurrentUpdateError, RedisError):
        logger.exception("Could not record summary failure. meeting_id=%s submission_id=%s", meeting_id, submission_id)


def process_submission_summary(meeting_id: str, submission_id: str) -> None:
    """
    RQ job: OCR and summarize an uploaded proposal, then merge the result into
    the submission. Failures are recorded on the submission and never re-raised,
    so the placeholder info stays and RQ does not retry.
    """
    logger.info("Summarizing submission. meeting_id=%s submission_id=%s", meeting_id, submission_id)

    upload = load_upload(submission_id)
    if upload is None:
        mark_summary_failed(meeting_id, submission_id, "upload_missing: file expired or was never stored")
        return
    filename, content = upload

    try:
        summary = parse_document(filename=filename, content=content)
    except Exception as e:  # noqa: BLE001
        logger.exception("Document parsing failed. meeting_id=%s submission_id=%s", meeting_id, submission_id)
        mark_summary_failed(meeting_id, submission_id, str(e) or e.__class__.__name__)
        return

    try:
        stored = _set_summary_state(meeting_id, submission_id, status="done", info=to_submission_info(summary))
    except ConcurrentUpdateError as e:
        logger.exception("Could not store summary. meeting_id=%s submission_id=%s", meeting_id, submission_id)
        mark_summary_failed(meeting_id, submission_id, str(e))
        return

    delete_uploads([submission_id])
    if stored:
        logger.info(
            "Submission summary stored. meeting_id=%s submission_id=%s idea=%s",
            meeting_id,
            submission_id,
            summary.projectTitle,
        )
