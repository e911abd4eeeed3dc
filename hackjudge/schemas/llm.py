from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class DocumentSummary(BaseModel):
    """Structured summary of a hackathon proposal document. Any field may be missing from the model output."""

    projectTitle: str = Field(default="")
    problemStatement: Optional[str] = None
    projectSummary: str = Field(default="")
    keyFeatures: Optional[list[str]] = None
    technicalStack: Optional[list[str]] = None
    targetAudience: Optional[str] = None
    innovationAspects: Optional[str] = None
    potentialImpact: Optional[str] = None
    rawSummary: Optional[str] = None
    error: Optional[str] = None

    def as_doc_summary(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JudgeScore(BaseModel):
    score: Any = Field(default=None)  # coerced and clamped by the evaluator
    feedback: str = Field(default="")
