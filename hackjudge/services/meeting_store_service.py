from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from redis.exceptions import WatchError

from hackjudge.schemas.meeting import Meeting
from hackjudge.services.redis_client import get_redis_str
from hackjudge.services.upload_service import delete_uploads
from hackjudge.settings import get_settings

logger = logging.getLogger(__name__)


class MeetingNotFound(Exception):
    pass


class ConcurrentUpdateError(Exception):
    """The meeting kept changing underneath us; the caller may resubmit."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid4().hex


def meeting_key(meeting_id: str) -> str:
    return f"meeting:{meeting_id}"


def user_index_key(user_id: str) -> str:
    return f"meetings_by_user:{user_id}"


def _dump(meeting: Meeting) -> str:
    return meeting.model_dump_json()


def create_meeting(
    *,
    title: str,
    agenda: str,
    participant_count: Optional[int],
    user_id: str,
) -> Meeting:
    meeting = Meeting(
        id=new_id(),
        title=title,
        agenda=agenda,
        participantCount=participant_count,
        userId=user_id,
        status="pending",
        createdAt=_now_iso(),
        submissions=[],
        analysis={},
        version=1,
    )
    r = get_redis_str()
    r.set(meeting_key(meeting.id), _dump(meeting))
    if user_id:
        r.zadd(user_index_key(user_id), {meeting.id: time.time()})
    logger.info("Meeting created. meeting_id=%s user_id=%s", meeting.id, user_id)
    return meeting


def get_meeting(meeting_id: str) -> Optional[Meeting]:
    if not meeting_id:
        return None
    raw = get_redis_str().get(meeting_key(meeting_id))
    if raw is None:
        return None
    return Meeting.model_validate_json(raw)


def list_meetings(user_id: str) -> list[Meeting]:
    """Meetings owned by user_id, newest first."""
    r = get_redis_str()
    meetings: list[Meeting] = []
    for meeting_id in r.zrevrange(user_index_key(user_id), 0, -1):
        meeting = get_meeting(meeting_id)
        if meeting is None:
            # Index entry outlived its document
            r.zrem(user_index_key(user_id), meeting_id)
            continue
        meetings.append(meeting)
    return meetings


def update_meeting(meeting_id: str, mutate: Callable[[Meeting], None]) -> Meeting:
    """
    Read-modify-write a meeting document under optimistic concurrency.

    `mutate` is applied to a freshly loaded copy and may be called more than once
    if another writer commits first, so it must not have side effects outside the
    meeting it is given. Raises MeetingNotFound or ConcurrentUpdateError.
    """
    settings = get_settings()
    r = get_redis_str()
    key = meeting_key(meeting_id)

    for attempt in range(1, settings.MEETING_CAS_ATTEMPTS + 1):
        with r.pipeline() as pipe:
            try:
                pipe.watch(key)
                raw = pipe.get(key)
                if raw is None:
                    pipe.unwatch()
                    raise MeetingNotFound(meeting_id)
                meeting = Meeting.model_validate_json(raw)
                mutate(meeting)
                meeting.version += 1
                pipe.multi()
                pipe.set(key, _dump(meeting))
                pipe.execute()
                return meeting
            except WatchError:
                logger.info("Meeting changed during update; retrying. meeting_id=%s attempt=%d", meeting_id, attempt)

    raise ConcurrentUpdateError(
        f"Meeting {meeting_id} was modified concurrently {settings.MEETING_CAS_ATTEMPTS} times"
    )


def delete_meeting(meeting_id: str) -> bool:
    meeting = get_meeting(meeting_id)
    if meeting is None:
        return False
    r = get_redis_str()
    r.delete(meeting_key(meeting_id))
    if meeting.userId:
        r.zrem(user_index_key(meeting.userId), meeting_id)
    delete_uploads([sub.id for sub in meeting.submissions])
    logger.info("Meeting deleted. meeting_id=%s submissions=%d", meeting_id, len(meeting.submissions))
    return True
