"""
Redis Repository Base Class

Provides JSON documents, guarded counters and sorted-set indexes on top of
a Redis client. Implements the repository pattern for Redis-based
metadata storage.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with atomic operations and index helpers."""

    # Increments KEYS[2] only while KEYS[1] exists, so a counter never
    # outlives the document it belongs to. Returns -1 when KEYS[1] is gone.
    INCREMENT_IF_EXISTS_SCRIPT = """
    if redis.call('EXISTS', KEYS[1]) == 0 then
        return -1
    end
    return redis.call('INCRBY', KEYS[2], ARGV[1])
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._increment_script = self.redis.register_script(
            self.INCREMENT_IF_EXISTS_SCRIPT
        )

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @staticmethod
    def _decode(value: Any) -> Any:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Args:
            key: Redis key

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        data = self.redis.get(self._make_key(key))
        if data is None:
            return None

        try:
            return json.loads(self._decode(data))
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON stored at key {key}: {e}")
            return None

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """
        Fetch several JSON documents in one round trip.

        Returns:
            One entry per key, None where the key is missing or corrupt
        """
        if not keys:
            return []

        values = self.redis.mget([self._make_key(key) for key in keys])
        documents = []
        for key, value in zip(keys, values):
            if value is None:
                documents.append(None)
                continue
            try:
                documents.append(json.loads(self._decode(value)))
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt JSON stored at key {key}: {e}")
                documents.append(None)
        return documents

    def get_many_counters(self, keys: List[str]) -> List[int]:
        """Read integer counters in one round trip; a missing counter reads 0."""
        if not keys:
            return []
        values = self.redis.mget([self._make_key(key) for key in keys])
        return [int(value) if value is not None else 0 for value in values]

    def increment_if_exists(
        self, guard_key: str, counter_key: str, amount: int = 1
    ) -> Optional[int]:
        """
        Atomically add to a counter, but only while guard_key exists.

        Args:
            guard_key: Key that must exist for the increment to happen
            counter_key: Integer counter to increment
            amount: Amount to add

        Returns:
            The new counter value, or None if guard_key does not exist
        """
        result = self._increment_script(
            keys=[self._make_key(guard_key), self._make_key(counter_key)],
            args=[amount],
        )
        result = int(result)
        return None if result < 0 else result

    def sorted_set_remove(self, key: str, *members: str) -> None:
        if members:
            self.redis.zrem(self._make_key(key), *members)

    def sorted_set_members(self, key: str) -> List[str]:
        """All members, lowest score first (lexicographic among equal scores)."""
        members = self.redis.zrange(self._make_key(key), 0, -1)
        return [self._decode(member) for member in members]

    def sorted_set_below(self, key: str, max_score: float) -> List[str]:
        """
        Members with a score strictly below max_score, lowest first.
        """
        members = self.redis.zrangebyscore(
            self._make_key(key), "-inf", f"({max_score!r}"
        )
        return [self._decode(member) for member in members]

    def sorted_set_size(self, key: str) -> int:
        return int(self.redis.zcard(self._make_key(key)))

    def pipeline(self):
        """Transactional pipeline for multi-key writes."""
        return self.redis.pipeline(transaction=True)

    def make_key(self, key: str) -> str:
        """Prefixed form of a key, for use inside a pipeline."""
        return self._make_key(key)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, decode_responses: bool = False,
                 password: Optional[str] = None):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisConnectionError:
            return False
