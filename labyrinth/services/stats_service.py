"""Maze statistics service using Redis.

Aggregates completion records per profile: totals, personal bests per
size/difficulty pair, and the streak of perfect games (no hints, shortest
route).
"""

import asyncio
import logging
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError

from labyrinth.config import get_settings
from labyrinth.core.profiles import config_key
from labyrinth.db.redis import get_redis
from labyrinth.schemas.stats import CompletionRecord, MazeStats

logger = logging.getLogger(__name__)


class StatsService:
    """Service for aggregating maze statistics in Redis."""

    # Redis key pattern
    STATS_KEY = "{prefix}:stats:{profile_id}"

    def __init__(self, prefix: Optional[str] = None):
        self._redis: Optional[redis.Redis] = None
        self._prefix = prefix or get_settings().redis_key_prefix
        self._lock = asyncio.Lock()

    async def _get_redis(self) -> redis.Redis:
        """Get Redis client."""
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    def _key(self, profile_id: str) -> str:
        return self.STATS_KEY.format(prefix=self._prefix, profile_id=profile_id)

    async def get_stats(self, profile_id: str) -> MazeStats:
        """Get a profile's statistics; defaults when none are stored."""
        r = await self._get_redis()
        raw = await r.get(self._key(profile_id))
        if raw is None:
            return MazeStats()

        try:
            return MazeStats.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Resetting unreadable stats for profile {profile_id}: {e}")
            return MazeStats()

    async def record_completion(self, profile_id: str, record: CompletionRecord) -> MazeStats:
        """
        Fold a completed game into the profile's statistics.

        Args:
            profile_id: Owner of the statistics.
            record: Completion record from the game session.

        Returns:
            Updated statistics.
        """
        async with self._lock:
            stats = await self.get_stats(profile_id)
            key = record.config_key

            stats.games_played += 1
            stats.games_completed += 1
            stats.total_time += record.elapsed_seconds
            stats.total_moves += record.move_count
            stats.hints_used += record.hints_used

            best_time = stats.best_time_by_config.get(key)
            if best_time is None or record.elapsed_seconds < best_time:
                stats.best_time_by_config[key] = record.elapsed_seconds

            least_moves = stats.least_moves_by_config.get(key)
            if least_moves is None or record.move_count < least_moves:
                stats.least_moves_by_config[key] = record.move_count

            if record.is_perfect:
                stats.perfect_games += 1
                stats.current_streak += 1
                stats.longest_streak = max(stats.longest_streak, stats.current_streak)
            else:
                stats.current_streak = 0

            r = await self._get_redis()
            await r.set(self._key(profile_id), stats.model_dump_json())

        logger.info(
            f"Recorded {key} completion for profile {profile_id}: "
            f"{record.move_count} moves, {record.elapsed_seconds:.1f}s, hints={record.hints_used}"
        )
        return stats

    async def get_best_time(self, profile_id: str, size: str, difficulty: str) -> Optional[float]:
        stats = await self.get_stats(profile_id)
        return stats.best_time_by_config.get(config_key(size, difficulty))

    async def get_least_moves(self, profile_id: str, size: str, difficulty: str) -> Optional[int]:
        stats = await self.get_stats(profile_id)
        return stats.least_moves_by_config.get(config_key(size, difficulty))

    async def get_total_games_played(self, profile_id: str) -> int:
        stats = await self.get_stats(profile_id)
        return stats.games_played


# Singleton instance
_stats_service: Optional[StatsService] = None


def get_stats_service() -> StatsService:
    """Get singleton stats service."""
    global _stats_service
    if _stats_service is None:
        _stats_service = StatsService()
    return _stats_service
