from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# Field names mirror the stored JSON document and the wire format.

MeetingStatus = Literal["pending", "presented", "analyzed"]
SummaryStatus = Literal["pending", "done", "failed"]

PLACEHOLDER_IDEA_NAME = "Processing..."


def placeholder_submission_info() -> dict[str, Any]:
    return {"ideaName": PLACEHOLDER_IDEA_NAME, "docSummary": {}}


class SubmissionInfo(BaseModel):
    ideaName: str = Field(default=PLACEHOLDER_IDEA_NAME)
    docSummary: dict[str, Any] = Field(default_factory=dict)


class Submission(BaseModel):
    id: str
    teamName: str
    pdfUrl: str = Field(default="")
    submittedAt: str = Field(default="")
    submissionInfo: Optional[SubmissionInfo] = None
    summaryStatus: SummaryStatus = Field(default="pending")
    summaryError: str = Field(default="")


class PresentationAnalysis(BaseModel):
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    suggestedQuestions: list[str] = Field(default_factory=list)


class Meeting(BaseModel):
    id: str
    title: str
    agenda: str
    participantCount: Optional[int] = None
    userId: str = Field(default="")
    status: MeetingStatus = Field(default="pending")
    createdAt: str = Field(default="")
    submissions: list[Submission] = Field(default_factory=list)
    analysis: dict[str, PresentationAnalysis] = Field(default_factory=dict)
    version: int = Field(default=0)

    def find_submission(self, submission_id: str) -> Optional[Submission]:
        for sub in self.submissions:
            if sub.id == submission_id:
                return sub
        return None


class SubmissionEvaluation(BaseModel):
    teamName: str
    score: int = Field(default=0, ge=0, le=100)
    feedback: str = Field(default="")


class LeaderboardEntry(SubmissionEvaluation):
    rank: int


# Request bodies


class CreateMeetingRequest(BaseModel):
    title: str = Field(default="")
    agenda: str = Field(default="")
    # Accepts "12" as well as 12; parsed leniently like a form field.
    participantCount: Any = Field(default=None)


class UpdateMeetingRequest(BaseModel):
    title: Optional[str] = None
    agenda: Optional[str] = None
    participantCount: Optional[int] = None
    status: Optional[MeetingStatus] = None
    submissions: Optional[list[Submission]] = None


class AnalyzeRequest(BaseModel):
    transcript: str = Field(default="")
    meetingId: str = Field(default="")
    submissionId: str = Field(default="")


class EvaluateSubmission(BaseModel):
    """Submission as sent by the evaluation page; only the fields the judge prompt needs."""

    id: str = Field(default="")
    teamName: str = Field(default="")
    submissionInfo: Optional[dict[str, Any]] = None


class EvaluateRequest(BaseModel):
    meetingId: str = Field(default="")
    submissions: list[EvaluateSubmission] = Field(default_factory=list)
    analysis: Optional[dict[str, Any]] = None


class SessionRequest(BaseModel):
    userId: str = Field(default="")
