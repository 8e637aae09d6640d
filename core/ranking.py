"""Time-decayed popularity scores for comments and articles."""

import math
from datetime import UTC, datetime
from typing import Optional

COMMENT_DECAY_HOURS = 24.0
ARTICLE_DECAY_HOURS = 48.0
HIGHLY_LIKED_THRESHOLD = 100


def hours_since(moment: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Hours elapsed since ``moment``. Naive datetimes are taken as UTC."""
    if moment is None:
        return 0.0
    now = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return max((now - moment).total_seconds() / 3600.0, 0.0)


def comment_hot_score(
    like_count: int,
    dislike_count: int,
    reply_count: int,
    created_at: Optional[datetime],
    is_author: bool = False,
    now: Optional[datetime] = None,
) -> float:
    """
    Score a comment for "hot" ordering.

    (likes*0.6 - dislikes*0.1 + replies*0.3) decays with a 24 hour time
    constant and is scaled by 10. Highly liked comments get x1.2 and
    comments by the target's author x1.3.
    """
    base = like_count * 0.6 - dislike_count * 0.1 + reply_count * 0.3
    decay = math.exp(-hours_since(created_at, now) / COMMENT_DECAY_HOURS) * 10.0
    score = base * decay
    if like_count > HIGHLY_LIKED_THRESHOLD:
        score *= 1.2
    if is_author:
        score *= 1.3
    return score


def article_hot_score(
    view_count: int,
    like_count: int,
    comment_count: int,
    favorite_count: int,
    published_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> float:
    """Weighted engagement with a 48 hour exponential decay."""
    base = view_count * 0.1 + like_count * 0.5 + comment_count * 0.3 + favorite_count * 0.1
    return base * math.exp(-hours_since(published_at, now) / ARTICLE_DECAY_HOURS)


def read_time_minutes(word_count: int, chars_per_minute: int = 300) -> int:
    """Estimated reading time, never below one minute."""
    return max(1, math.ceil(word_count / chars_per_minute))
