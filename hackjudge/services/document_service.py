from __future__ import annotations

import logging
from typing import Any

from hackjudge.schemas.llm import DocumentSummary
from hackjudge.services.llm_service import summarize_document
from hackjudge.services.ocr_service import run_ocr
from hackjudge.util.text_format import flatten_ocr_response

logger = logging.getLogger(__name__)


def parse_document(*, filename: str, content: bytes) -> DocumentSummary:
    """OCR -> flatten -> summarize. Raises OCRError; summary failures are folded into the result."""
    ocr = run_ocr(filename=filename, content=content)
    text = flatten_ocr_response(ocr)
    logger.info("Flattened OCR text. filename=%s chars=%d", filename, len(text))
    return summarize_document(text)


def to_submission_info(summary: DocumentSummary) -> dict[str, Any]:
    return {"ideaName": summary.projectTitle, "docSummary": summary.as_doc_summary()}
