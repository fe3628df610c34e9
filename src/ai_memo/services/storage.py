"""
Storage Service

Per-user key-value persistence in Redis for two kinds of short-lived data:

    - Drafts: one unsent note per user (``draft-note-{user_id}``).
    - AI history: the last three summary / tag regenerations per note,
      one Redis list per user and note (``ai-summary-history:{user_id}:{note_id}``),
      newest entry at the head.

Entries expire through a Redis TTL and are also checked against their own
timestamp on read. Redis failures are logged and reported as ``False`` or
empty results; they never reach the caller as exceptions.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from pydantic import ValidationError
from redis.asyncio import Redis

from ai_memo.core.config import settings
from ai_memo.schemas.storage import DraftNote, SummaryHistory, TagHistory

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "draft-note-"
SUMMARY_HISTORY_PREFIX = "ai-summary-history"
TAG_HISTORY_PREFIX = "ai-tag-history"
MAX_HISTORY_SIZE = 3

HistoryEntry = TypeVar("HistoryEntry", SummaryHistory, TagHistory)


def _now() -> datetime:
    return datetime.now(UTC)


def draft_key(user_id: str) -> str:
    return f"{DRAFT_KEY_PREFIX}{user_id}"


def summary_history_key(user_id: str, note_id: str) -> str:
    return f"{SUMMARY_HISTORY_PREFIX}:{user_id}:{note_id}"


def tag_history_key(user_id: str, note_id: str) -> str:
    return f"{TAG_HISTORY_PREFIX}:{user_id}:{note_id}"


def _entry_id(note_id: str, now: datetime) -> str:
    return f"{note_id}-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"


# ============================================================================
# Drafts
# ============================================================================


async def save_draft(client: Redis, user_id: str, title: str, content: str) -> bool:
    """Store (or overwrite) the user's draft."""
    draft = DraftNote(title=title, content=content, saved_at=_now())
    try:
        await client.set(
            draft_key(user_id),
            draft.model_dump_json(),
            ex=settings.DRAFT_TTL_SECONDS,
        )
    except Exception as e:
        logger.error(f"Draft save failed for user {user_id}: {e}")
        return False
    return True


async def load_draft(client: Redis, user_id: str) -> DraftNote | None:
    """
    Load the user's draft.

    Returns None when no draft exists. Corrupt or expired drafts are
    removed and also reported as None.
    """
    key = draft_key(user_id)
    try:
        raw = await client.get(key)
        if raw is None:
            return None

        try:
            draft = DraftNote.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Discarding corrupt draft for user {user_id}")
            await client.delete(key)
            return None

        if draft.saved_at < _now() - timedelta(seconds=settings.DRAFT_TTL_SECONDS):
            await client.delete(key)
            return None
        return draft
    except Exception as e:
        logger.error(f"Draft load failed for user {user_id}: {e}")
        return None


async def clear_draft(client: Redis, user_id: str) -> bool:
    try:
        await client.delete(draft_key(user_id))
    except Exception as e:
        logger.error(f"Draft clear failed for user {user_id}: {e}")
        return False
    return True


# ============================================================================
# AI history
# ============================================================================


def _is_fresh(timestamp: datetime, now: datetime) -> bool:
    return timestamp >= now - timedelta(seconds=settings.AI_HISTORY_TTL_SECONDS)


async def _read_entries(
    client: Redis, key: str, model: type[HistoryEntry]
) -> list[HistoryEntry]:
    """Parse a history list, skipping corrupt and expired entries."""
    now = _now()
    entries = []
    for raw in await client.lrange(key, 0, MAX_HISTORY_SIZE - 1):
        try:
            entry = model.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Skipping corrupt history entry in {key}")
            continue
        if _is_fresh(entry.timestamp, now):
            entries.append(entry)
    return entries


async def _push_entry(client: Redis, key: str, entry: HistoryEntry) -> None:
    """Prepend an entry, trim to MAX_HISTORY_SIZE and refresh the TTL atomically."""
    async with client.pipeline(transaction=True) as pipe:
        pipe.lpush(key, entry.model_dump_json())
        pipe.ltrim(key, 0, MAX_HISTORY_SIZE - 1)
        pipe.expire(key, settings.AI_HISTORY_TTL_SECONDS)
        await pipe.execute()


async def save_summary_history(
    client: Redis,
    user_id: str,
    note_id: str,
    content: str,
    style: str,
    length: str,
) -> bool:
    """
    Prepend a summary regeneration to the note's history.

    Only the newest MAX_HISTORY_SIZE entries are kept. Concurrent saves for
    the same note are all recorded.
    """
    now = _now()
    entry = SummaryHistory(
        id=_entry_id(note_id, now),
        content=content,
        style=style,
        length=length,
        timestamp=now,
    )
    try:
        await _push_entry(client, summary_history_key(user_id, note_id), entry)
    except Exception as e:
        logger.error(f"Summary history save failed for note {note_id}: {e}")
        return False
    return True


async def get_summary_history(
    client: Redis, user_id: str, note_id: str
) -> list[SummaryHistory]:
    """Summary history of a note, newest first."""
    try:
        return await _read_entries(client, summary_history_key(user_id, note_id), SummaryHistory)
    except Exception as e:
        logger.error(f"Summary history load failed for note {note_id}: {e}")
        return []


async def save_tag_history(
    client: Redis,
    user_id: str,
    note_id: str,
    tags: list[str],
    count: int | None = None,
) -> bool:
    """Prepend a tag regeneration to the note's history."""
    now = _now()
    entry = TagHistory(
        id=_entry_id(note_id, now),
        tags=tags,
        count=count if count is not None else len(tags),
        timestamp=now,
    )
    try:
        await _push_entry(client, tag_history_key(user_id, note_id), entry)
    except Exception as e:
        logger.error(f"Tag history save failed for note {note_id}: {e}")
        return False
    return True


async def get_tag_history(client: Redis, user_id: str, note_id: str) -> list[TagHistory]:
    """Tag history of a note, newest first."""
    try:
        return await _read_entries(client, tag_history_key(user_id, note_id), TagHistory)
    except Exception as e:
        logger.error(f"Tag history load failed for note {note_id}: {e}")
        return []


async def clear_summary_history(client: Redis, user_id: str, note_id: str) -> bool:
    try:
        await client.delete(summary_history_key(user_id, note_id))
    except Exception as e:
        logger.error(f"Summary history clear failed for note {note_id}: {e}")
        return False
    return True


async def clear_tag_history(client: Redis, user_id: str, note_id: str) -> bool:
    try:
        await client.delete(tag_history_key(user_id, note_id))
    except Exception as e:
        logger.error(f"Tag history clear failed for note {note_id}: {e}")
        return False
    return True


async def clear_all_history(client: Redis, user_id: str, note_id: str) -> bool:
    """Remove both summary and tag history of one note."""
    try:
        await client.delete(
            summary_history_key(user_id, note_id), tag_history_key(user_id, note_id)
        )
    except Exception as e:
        logger.error(f"History clear failed for note {note_id}: {e}")
        return False
    return True


async def clear_all_histories(client: Redis, user_id: str) -> bool:
    """Remove every history entry of the user, across all notes."""
    try:
        keys = []
        for prefix in (SUMMARY_HISTORY_PREFIX, TAG_HISTORY_PREFIX):
            async for key in client.scan_iter(match=f"{prefix}:{user_id}:*"):
                keys.append(key)
        if keys:
            await client.delete(*keys)
    except Exception as e:
        logger.error(f"History clear failed for user {user_id}: {e}")
        return False
    return True


def get_relative_time(timestamp: str | datetime, now: datetime | None = None) -> str:
    """
    Korean relative time label for a history entry.

    Examples:
        30 seconds ago -> "방금 전", 5 minutes ago -> "5분 전",
        3 hours ago -> "3시간 전", 2 days ago -> "2일 전".
        Unparsable input -> "알 수 없음".
    """
    if isinstance(timestamp, datetime):
        moment = timestamp
    else:
        try:
            moment = datetime.fromisoformat(str(timestamp))
        except ValueError:
            return "알 수 없음"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)

    diff_seconds = int(((now or _now()) - moment).total_seconds())
    if diff_seconds < 60:
        return "방금 전"
    if diff_seconds < 3600:
        return f"{diff_seconds // 60}분 전"
    if diff_seconds < 86400:
        return f"{diff_seconds // 3600}시간 전"
    return f"{diff_seconds // 86400}일 전"
