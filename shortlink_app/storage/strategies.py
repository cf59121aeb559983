"""
Link store strategies using Strategy Pattern.

Allows switching between persistence backends without touching the
service layer:
- Redis: production (shared source of truth for code uniqueness)
- In-memory: development and testing

Persisted layout (store-agnostic):
- one record per code holding {original_url, created_at, clicks}
- one set holding every active code
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Set

import redis.asyncio as redis

from shortlink_app.exceptions import LinkNotFoundError, StorageError
from shortlink_app.models.link import Link

logger = logging.getLogger(__name__)

URL_KEY_PREFIX = "url:"
URL_CODES_KEY = "url:codes"


class LinkStore(ABC):
    """
    Abstract base class for link stores.

    Every operation is keyed by short code and safe to call from many
    concurrent coroutines. Failures of the backend itself surface as
    StorageError.
    """

    async def connect(self) -> None:
        """Open connections (no-op for backends without any)."""

    async def close(self) -> None:
        """Release connections (no-op for backends without any)."""

    @abstractmethod
    async def save(self, link: Link) -> None:
        """
        Insert or overwrite a link and add its code to the index.

        Must not fail because the code already exists: the allocator
        checks existence separately, so a concurrent duplicate is resolved
        last-writer-wins.
        """
        pass

    @abstractmethod
    async def create_if_absent(self, link: Link) -> bool:
        """
        Atomically store a link only if its code is unused.

        Returns:
            True if the link was stored, False if the code was taken
        """
        pass

    @abstractmethod
    async def find_by_code(self, code: str) -> Link:
        """
        Load a link.

        Raises:
            LinkNotFoundError: If no record exists for code
        """
        pass

    @abstractmethod
    async def exists(self, code: str) -> bool:
        """Check whether a record exists for code."""
        pass

    @abstractmethod
    async def increment_clicks(self, code: str) -> None:
        """Atomically add one click. A missing record is left missing."""
        pass

    @abstractmethod
    async def list_codes(self) -> List[str]:
        """Return every code in the index."""
        pass

    @abstractmethod
    async def delete(self, code: str) -> None:
        """
        Remove a link and its index entry.

        Raises:
            LinkNotFoundError: If no record exists for code
        """
        pass

    async def find_all(self) -> List[Link]:
        """
        Resolve every indexed code to a link.

        Codes that fail to resolve (e.g. deleted between the index read and
        the lookup) are skipped instead of failing the whole listing.
        """
        links = []
        for code in await self.list_codes():
            try:
                links.append(await self.find_by_code(code))
            except (LinkNotFoundError, StorageError) as e:
                logger.debug("Skipping unresolvable code %s: %s", code, e)
        return links


# Create the record only when the key is unused; index it in the same step
CREATE_IF_ABSENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], 'original_url', ARGV[1], 'created_at', ARGV[2], 'clicks', ARGV[3])
redis.call('SADD', KEYS[2], ARGV[4])
return 1
"""

# HINCRBY alone would re-create a deleted record holding only a counter
INCREMENT_IF_EXISTS_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return nil
end
return redis.call('HINCRBY', KEYS[1], 'clicks', 1)
"""


class RedisLinkStore(LinkStore):
    """
    Redis implementation of the link store.

    Layout:
    - url:<code>  hash {original_url, created_at, clicks}
    - url:codes   set of all active codes

    Atomicity comes from Redis itself: HINCRBY inside a Lua script for
    clicks, MULTI/EXEC pipelines for the record+index pairs.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        connect_attempts: int = 30,
        connect_interval: float = 1.0,
    ):
        """
        Initialize Redis link store.

        Args:
            redis_client: redis.asyncio client created with decode_responses=True
            connect_attempts: Pings tried by connect() before giving up
            connect_interval: Seconds to wait between pings
        """
        self.redis = redis_client
        self.connect_attempts = connect_attempts
        self.connect_interval = connect_interval
        self._create_if_absent = self.redis.register_script(CREATE_IF_ABSENT_SCRIPT)
        self._increment_if_exists = self.redis.register_script(INCREMENT_IF_EXISTS_SCRIPT)

    @staticmethod
    def _key(code: str) -> str:
        return URL_KEY_PREFIX + code

    async def connect(self) -> None:
        """Ping Redis until it answers or the attempts run out."""
        last_error = None
        for attempt in range(1, self.connect_attempts + 1):
            try:
                await self.redis.ping()
                logger.info("Connected to Redis")
                return
            except redis.RedisError as e:
                last_error = e
                logger.info(
                    "Waiting for Redis... attempt %d/%d", attempt, self.connect_attempts
                )
                if attempt < self.connect_attempts:
                    await asyncio.sleep(self.connect_interval)

        raise StorageError(
            f"Failed to connect to Redis after {self.connect_attempts} attempts: {last_error}"
        )

    async def close(self) -> None:
        await self.redis.aclose()

    async def save(self, link: Link) -> None:
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(self._key(link.short_code), mapping=link.to_hash())
                pipe.sadd(URL_CODES_KEY, link.short_code)
                await pipe.execute()
        except redis.RedisError as e:
            raise StorageError(f"Failed to save link: {e}") from e

    async def create_if_absent(self, link: Link) -> bool:
        record = link.to_hash()
        try:
            created = await self._create_if_absent(
                keys=[self._key(link.short_code), URL_CODES_KEY],
                args=[
                    record["original_url"],
                    record["created_at"],
                    record["clicks"],
                    link.short_code,
                ],
            )
        except redis.RedisError as e:
            raise StorageError(f"Failed to save link: {e}") from e
        return bool(created)

    async def find_by_code(self, code: str) -> Link:
        try:
            data = await self.redis.hgetall(self._key(code))
        except redis.RedisError as e:
            raise StorageError(f"Failed to retrieve link: {e}") from e

        if not data:
            raise LinkNotFoundError(code)

        try:
            return Link.from_hash(code, data)
        except (KeyError, ValueError) as e:
            raise StorageError(f"Corrupt record for {code}: {e}") from e

    async def exists(self, code: str) -> bool:
        try:
            return await self.redis.exists(self._key(code)) > 0
        except redis.RedisError as e:
            raise StorageError(f"Failed to check existence: {e}") from e

    async def increment_clicks(self, code: str) -> None:
        try:
            await self._increment_if_exists(keys=[self._key(code)])
        except redis.RedisError as e:
            raise StorageError(f"Failed to increment clicks: {e}") from e

    async def list_codes(self) -> List[str]:
        try:
            return list(await self.redis.smembers(URL_CODES_KEY))
        except redis.RedisError as e:
            raise StorageError(f"Failed to retrieve link codes: {e}") from e

    async def delete(self, code: str) -> None:
        if not await self.exists(code):
            raise LinkNotFoundError(code)

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(self._key(code))
                pipe.srem(URL_CODES_KEY, code)
                await pipe.execute()
        except redis.RedisError as e:
            raise StorageError(f"Failed to delete link: {e}") from e


class InMemoryLinkStore(LinkStore):
    """
    In-memory link store using Python dict and set.

    Pros:
    - Simple (no external dependencies)
    - Fast (no network overhead)
    - Good for development and testing

    Cons:
    - Not persistent (lost on restart)
    - Not shared (each process has its own links)

    No method awaits in the middle of a mutation, so every operation is
    atomic with respect to other coroutines on the same loop.
    """

    def __init__(self):
        """Initialize empty records and index"""
        self._records: Dict[str, Link] = {}
        self._codes: Set[str] = set()

    async def save(self, link: Link) -> None:
        self._records[link.short_code] = link.model_copy()
        self._codes.add(link.short_code)

    async def create_if_absent(self, link: Link) -> bool:
        if link.short_code in self._records:
            return False
        self._records[link.short_code] = link.model_copy()
        self._codes.add(link.short_code)
        return True

    async def find_by_code(self, code: str) -> Link:
        link = self._records.get(code)
        if link is None:
            raise LinkNotFoundError(code)
        # Callers get a snapshot, never the live record
        return link.model_copy()

    async def exists(self, code: str) -> bool:
        return code in self._records

    async def increment_clicks(self, code: str) -> None:
        link = self._records.get(code)
        if link is not None:
            link.clicks += 1

    async def list_codes(self) -> List[str]:
        return list(self._codes)

    async def delete(self, code: str) -> None:
        if code not in self._records:
            raise LinkNotFoundError(code)
        del self._records[code]
        self._codes.discard(code)
