from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from hackjudge.services.redis_client import get_redis_bytes
from hackjudge.settings import get_settings

logger = logging.getLogger(__name__)


def _upload_key(submission_id: str) -> str:
    return f"upload:{submission_id}"


def _name_key(submission_id: str) -> str:
    return f"upload_name:{submission_id}"


def mock_pdf_url(filename: str) -> str:
    # Real file storage is not wired up; the URL only has to be unique and readable.
    return f"/uploads/{uuid4()}-{filename}"


def save_upload(*, submission_id: str, filename: str, content: bytes) -> None:
    settings = get_settings()
    r = get_redis_bytes()
    r.set(_upload_key(submission_id), content, ex=settings.UPLOAD_TTL_SECONDS)
    r.set(_name_key(submission_id), filename.encode("utf-8"), ex=settings.UPLOAD_TTL_SECONDS)
    logger.debug("Stored upload. submission_id=%s bytes=%d", submission_id, len(content))


def load_upload(submission_id: str) -> Optional[tuple[str, bytes]]:
    r = get_redis_bytes()
    content = r.get(_upload_key(submission_id))
    if content is None:
        return None
    name = r.get(_name_key(submission_id)) or b"document.pdf"
    return name.decode("utf-8"), content


def delete_uploads(submission_ids: list[str]) -> None:
    r = get_redis_bytes()
    for submission_id in submission_ids:
        r.delete(_upload_key(submission_id))
        r.delete(_name_key(submission_id))
