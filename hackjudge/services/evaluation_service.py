from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from hackjudge.schemas.meeting import EvaluateSubmission, LeaderboardEntry, SubmissionEvaluation
from hackjudge.services.llm_service import judge_submission
from hackjudge.settings import get_settings

logger = logging.getLogger(__name__)

EVALUATION_ERROR_FEEDBACK = "Error evaluating submission"


def coerce_score(value: Any) -> int:
    """Round and clamp a model-provided score into [0, 100]. Raises ValueError if it is not a number."""
    if isinstance(value, bool):
        raise ValueError(f"score is not a number: {value!r}")
    number = float(value)
    if math.isnan(number):
        raise ValueError("score is NaN")
    return max(0, min(100, int(round(number))))


def _analysis_for(submission: EvaluateSubmission, analysis: dict[str, Any]) -> Any:
    # Judge against the submission's own entry when the map has one.
    if submission.id and submission.id in analysis:
        return analysis[submission.id]
    return analysis


def evaluate_one(submission: EvaluateSubmission, analysis: dict[str, Any]) -> SubmissionEvaluation:
    try:
        judged = judge_submission(
            submission_info=submission.submissionInfo or {},
            analysis=_analysis_for(submission, analysis),
        )
        return SubmissionEvaluation(
            teamName=submission.teamName,
            score=coerce_score(judged.score),
            feedback=judged.feedback,
        )
    except Exception:  # noqa: BLE001
        logger.exception("Error evaluating submission. team=%s submission_id=%s", submission.teamName, submission.id)
        return SubmissionEvaluation(teamName=submission.teamName, score=0, feedback=EVALUATION_ERROR_FEEDBACK)


def evaluate_submissions(submissions: list[EvaluateSubmission], analysis: dict[str, Any]) -> list[SubmissionEvaluation]:
    """
    Judge every submission concurrently. One failed judgement never fails the
    batch; it shows up as a zero score. Results keep the input order.
    """
    if not submissions:
        return []
    settings = get_settings()
    workers = min(settings.EVALUATION_MAX_WORKERS, len(submissions))
    logger.info("Evaluating submissions. count=%d workers=%d", len(submissions), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="judge") as pool:
        return list(pool.map(lambda sub: evaluate_one(sub, analysis), submissions))


def rank_evaluations(evaluations: list[SubmissionEvaluation]) -> list[LeaderboardEntry]:
    """Descending by score; ties keep submission order (sorted() is stable)."""
    ordered = sorted(evaluations, key=lambda e: e.score, reverse=True)
    return [LeaderboardEntry(rank=idx, **e.model_dump()) for idx, e in enumerate(ordered, start=1)]
