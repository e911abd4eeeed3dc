from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from hackjudge.settings import get_settings

logger = logging.getLogger(__name__)


class OCRError(Exception):
    pass


def _headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Accept": "application/json"}


def run_ocr(*, filename: str, content: bytes) -> dict[str, Any]:
    """
    OCR a document with Mistral: upload the file, get a signed URL for it,
    then run the OCR model against that URL. Returns the raw OCR response.
    """
    settings = get_settings()
    if not settings.MISTRAL_API_KEY:
        raise OCRError("MISTRAL_API_KEY not configured")

    base = settings.MISTRAL_API_BASE.rstrip("/")
    headers = _headers(settings.MISTRAL_API_KEY)
    start_time = time.time()
    logger.info("Running OCR. filename=%s bytes=%d model=%s", filename, len(content), settings.MISTRAL_OCR_MODEL)

    try:
        with httpx.Client(timeout=settings.LLM_TIMEOUT_SECONDS, headers=headers) as client:
            upload = client.post(
                f"{base}/files",
                data={"purpose": "ocr"},
                files={"file": (filename, content, "application/pdf")},
            )
            upload.raise_for_status()
            file_id = upload.json()["id"]

            signed = client.get(f"{base}/files/{file_id}/url", params={"expiry": 1})
            signed.raise_for_status()
            document_url = signed.json()["url"]

            ocr = client.post(
                f"{base}/ocr",
                json={
                    "model": settings.MISTRAL_OCR_MODEL,
                    "document": {"type": "document_url", "document_url": document_url},
                },
            )
            ocr.raise_for_status()
            body = ocr.json()
    except httpx.HTTPStatusError as e:
        raise OCRError(f"Mistral HTTP {e.response.status_code}: {e.response.text[:300]}") from e
    except httpx.HTTPError as e:
        raise OCRError(f"Mistral request failed: {e}") from e
    except (KeyError, ValueError) as e:
        raise OCRError(f"Unexpected Mistral response: {e}") from e

    if not isinstance(body, dict):
        raise OCRError("Unexpected Mistral OCR response shape")

    logger.info(
        "OCR complete. filename=%s pages=%d elapsed=%.2fs",
        filename,
        len(body.get("pages") or []),
        time.time() - start_time,
    )
    return body
