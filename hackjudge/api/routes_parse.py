from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from hackjudge.services.document_service import parse_document
from hackjudge.settings import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/parse")
async def parse_endpoint(
    file: Optional[UploadFile] = File(default=None),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    OCR and summarize one document synchronously.

    Example:
        curl -F file=@proposal.pdf http://localhost:8000/parse
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")

    try:
        summary = await run_in_threadpool(parse_document, filename=file.filename, content=content)
    except Exception as e:  # noqa: BLE001
        logger.error("Document parsing failed for %s: %s", file.filename, e)
        raise HTTPException(status_code=500, detail=str(e) or "Unknown error") from e

    return {"success": True, "title": summary.projectTitle, "summary": summary.as_doc_summary()}
