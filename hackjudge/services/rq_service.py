from __future__ import annotations

from rq import Queue

from hackjudge.services.redis_client import get_redis_bytes
from hackjudge.settings import get_settings

# OCR plus a long-context summary can take a few minutes on large decks.
SUMMARY_JOB_TIMEOUT = 600


def get_queue() -> Queue:
    settings = get_settings()
    return Queue(
        name=settings.RQ_QUEUE_NAME,
        connection=get_redis_bytes(),
        default_timeout=SUMMARY_JOB_TIMEOUT,
    )
