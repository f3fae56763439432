"""Active-game persistence using Redis.

One in-progress game per profile. The profile id is always passed in by the
caller; the store has no notion of a "current" profile.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError

from labyrinth.config import get_settings
from labyrinth.db.redis import get_redis
from labyrinth.schemas.session import SessionSnapshot

logger = logging.getLogger(__name__)


class GameStore:
    """Save, load and clear a profile's active maze game."""

    # Redis key pattern
    GAME_KEY = "{prefix}:game:{profile_id}"

    def __init__(self, prefix: Optional[str] = None):
        self._redis: Optional[redis.Redis] = None
        self._prefix = prefix or get_settings().redis_key_prefix

    async def _get_redis(self) -> redis.Redis:
        """Get Redis client."""
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    def _key(self, profile_id: str) -> str:
        return self.GAME_KEY.format(prefix=self._prefix, profile_id=profile_id)

    async def save_game(self, profile_id: str, snapshot: dict) -> None:
        """
        Store a session snapshot as the profile's active game.

        Args:
            profile_id: Owner of the game.
            snapshot: Output of ``serialize_session``.

        Raises:
            pydantic.ValidationError: If snapshot is not a valid session snapshot.
        """
        payload = SessionSnapshot.model_validate(snapshot).model_dump_json()
        r = await self._get_redis()
        await r.set(self._key(profile_id), payload)

    async def get_active_game(self, profile_id: str) -> Optional[dict]:
        """
        Load the profile's active game.

        Returns:
            Snapshot dict ready for ``deserialize_session``, or None when
            nothing is stored or the stored payload cannot be decoded.
        """
        r = await self._get_redis()
        raw = await r.get(self._key(profile_id))
        if raw is None:
            return None

        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable game for profile {profile_id}: {e}")
            return None
        return snapshot.model_dump(mode="json")

    async def clear_active_game(self, profile_id: str) -> bool:
        """Remove the profile's active game; True if one existed."""
        r = await self._get_redis()
        removed = await r.delete(self._key(profile_id))
        return bool(removed)


# Singleton instance
_game_store: Optional[GameStore] = None


def get_game_store() -> GameStore:
    """Get singleton game store."""
    global _game_store
    if _game_store is None:
        _game_store = GameStore()
    return _game_store
