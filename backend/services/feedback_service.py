"""Service for lyric feedback.

Every feedback event is appended to the history. Likes and dislikes also nudge
the lyric's satisfaction score and weight, saturating at fixed bounds.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from backend.services.store import LyricStore
from lyric_studio.core.models import (
    MAX_SATISFACTION_SCORE,
    MAX_WEIGHT,
    MIN_SATISFACTION_SCORE,
    MIN_WEIGHT,
    FeedbackHistory,
    FeedbackType,
)

logger = logging.getLogger(__name__)

SCORE_STEP = 1
WEIGHT_STEP = 0.05


def apply_feedback(score: int, weight: float, feedback_type: FeedbackType) -> tuple[int, float]:
    """Compute the new (score, weight) after one feedback event.

    Args:
        score: Current satisfaction score.
        weight: Current weight.
        feedback_type: like, dislike or neutral.

    Returns:
        Tuple of (new_score, new_weight). Neutral leaves both unchanged.
    """
    if feedback_type == "like":
        score = min(MAX_SATISFACTION_SCORE, score + SCORE_STEP)
        weight = min(MAX_WEIGHT, weight + WEIGHT_STEP)
    elif feedback_type == "dislike":
        score = max(MIN_SATISFACTION_SCORE, score - SCORE_STEP)
        weight = max(MIN_WEIGHT, weight - WEIGHT_STEP)

    # Rounding keeps repeated steps from drifting off the bounds
    return score, round(weight, 4)


class FeedbackService:
    """Records feedback and applies the scoring rule.

    Holds one lock per lyric so concurrent feedback on the same lyric cannot
    lose updates. A lock lives only while someone holds or awaits it. A single
    instance must be shared by all requests.
    """

    def __init__(self, store: LyricStore):
        """Initialize the feedback service.

        Args:
            store: Persistence store.
        """
        self.store = store
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}

    @asynccontextmanager
    async def _lyric_lock(self, lyric_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(lyric_id, asyncio.Lock())
        self._lock_users[lyric_id] = self._lock_users.get(lyric_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[lyric_id] -= 1
            if self._lock_users[lyric_id] == 0:
                del self._lock_users[lyric_id]
                del self._locks[lyric_id]

    async def submit_feedback(
        self,
        user_id: int,
        lyric_id: int,
        feedback_type: FeedbackType,
        comment: str | None = None,
    ) -> FeedbackHistory:
        """Record feedback and update the lyric's score and weight.

        The history entry is always written. The score update is skipped when
        the lyric does not exist or belongs to another user.

        Args:
            user_id: User giving the feedback.
            lyric_id: Lyric the feedback is about.
            feedback_type: like, dislike or neutral.
            comment: Optional free-text comment.

        Returns:
            The stored feedback record.
        """
        feedback = await self.store.create_feedback(
            user_id=user_id,
            lyric_id=lyric_id,
            feedback_type=feedback_type,
            comment=comment,
        )

        if feedback_type == "neutral":
            return feedback

        async with self._lyric_lock(lyric_id):
            lyric = await self.store.get_lyric(lyric_id)
            if lyric is None or lyric.user_id != user_id:
                logger.info(f"Feedback {feedback.id} recorded for unavailable lyric {lyric_id}; score not updated")
                return feedback

            score, weight = apply_feedback(lyric.satisfaction_score, lyric.weight, feedback_type)
            await self.store.update_lyric(
                lyric_id,
                {"satisfaction_score": score, "weight": weight},
            )

        logger.info(f"Lyric {lyric_id} {feedback_type}d: score={score}, weight={weight}")
        return feedback

    async def list_for_lyric(self, lyric_id: int, user_id: int) -> list[FeedbackHistory]:
        """The caller's feedback on one lyric, newest first."""
        return await self.store.list_feedback_for_lyric(lyric_id, user_id=user_id)

    async def list_for_user(self, user_id: int) -> list[FeedbackHistory]:
        """All of the caller's feedback, newest first."""
        return await self.store.list_feedback_for_user(user_id)
