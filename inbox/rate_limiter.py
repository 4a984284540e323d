"""
Fixed-window rate limiting for direct messages.

Two limits apply to every send: a per-recipient hourly limit and a global
daily limit per sender. Counts live in ``dm_rate_limits`` buckets keyed by
the fixed window start. The check sums every bucket whose window started
within the trailing interval, which approximates a sliding window without
storing per-message timestamps.

``check_and_record`` must run inside the caller's transaction so the read
and the increment commit together.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from .clock import HOUR_MS, DAY_MS, window_start
from .config import HOURLY_LIMIT, DAILY_LIMIT
from .models.rate_limits import RateLimitBucket, HOURLY_PER_RECIPIENT, DAILY_GLOBAL

logger = logging.getLogger(__name__)

SCOPE_HOURLY = 'hourly'
SCOPE_DAILY = 'daily'


@dataclass(frozen=True)
class RateLimits:
    hourly: int = HOURLY_LIMIT
    daily: int = DAILY_LIMIT


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    scope: Optional[str] = None
    reason: Optional[str] = None


ALLOWED = RateDecision(allowed=True)


async def _hourly_count(session: AsyncSession, sender_id: int, recipient_id: int, now: int) -> int:
    res = await session.execute(
        select(func.coalesce(func.sum(RateLimitBucket.message_count), 0)).where(
            RateLimitBucket.user_id == sender_id,
            RateLimitBucket.recipient_id == recipient_id,
            RateLimitBucket.limit_type == HOURLY_PER_RECIPIENT,
            RateLimitBucket.window_start >= now - HOUR_MS,
        )
    )
    return int(res.scalar_one())


async def _daily_count(session: AsyncSession, sender_id: int, now: int) -> int:
    res = await session.execute(
        select(func.coalesce(func.sum(RateLimitBucket.message_count), 0)).where(
            RateLimitBucket.user_id == sender_id,
            RateLimitBucket.limit_type == DAILY_GLOBAL,
            RateLimitBucket.window_start >= now - DAY_MS,
        )
    )
    return int(res.scalar_one())


async def _increment(session: AsyncSession, sender_id: int, recipient_id: Optional[int], limit_type: str, start: int):
    q = select(RateLimitBucket.id).where(
        RateLimitBucket.user_id == sender_id,
        RateLimitBucket.limit_type == limit_type,
        RateLimitBucket.window_start == start,
    )
    if recipient_id is None:
        q = q.where(RateLimitBucket.recipient_id.is_(None))
    else:
        q = q.where(RateLimitBucket.recipient_id == recipient_id)
    bucket_id = (await session.execute(q)).scalars().first()
    if bucket_id is None:
        session.add(RateLimitBucket(
            user_id=sender_id,
            recipient_id=recipient_id,
            limit_type=limit_type,
            window_start=start,
            message_count=1,
        ))
        await session.flush()
        return
    await session.execute(
        update(RateLimitBucket)
        .where(RateLimitBucket.id == bucket_id)
        .values(message_count=RateLimitBucket.message_count + 1)
    )


async def check_and_record(session: AsyncSession, sender_id: int, recipient_id: int, now: int,
                           limits: RateLimits = None) -> RateDecision:
    """Deny if either limit is reached, otherwise count this send against both."""
    limits = limits or RateLimits()

    hourly = await _hourly_count(session, sender_id, recipient_id, now)
    if hourly >= limits.hourly:
        logger.info({'msg': 'dm_rate_limited', 'scope': SCOPE_HOURLY, 'sender_id': sender_id,
                     'recipient_id': recipient_id, 'count': hourly})
        return RateDecision(False, SCOPE_HOURLY,
                            f'Rate limit: Maximum {limits.hourly} messages per hour to this user')

    daily = await _daily_count(session, sender_id, now)
    if daily >= limits.daily:
        logger.info({'msg': 'dm_rate_limited', 'scope': SCOPE_DAILY, 'sender_id': sender_id, 'count': daily})
        return RateDecision(False, SCOPE_DAILY, f'Rate limit: Maximum {limits.daily} messages per day')

    await _increment(session, sender_id, recipient_id, HOURLY_PER_RECIPIENT, window_start(now, HOUR_MS))
    await _increment(session, sender_id, None, DAILY_GLOBAL, window_start(now, DAY_MS))
    return ALLOWED
