"""Redis client configuration and the cross-instance run lock."""

import redis
import structlog
from redis.exceptions import LockError, RedisError
from redis.lock import Lock

from noshow.config import settings

logger = structlog.get_logger(__name__)

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """
    Check if Redis connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        client = get_redis_client()
        client.ping()
        return True
    except Exception:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class DistributedRunLock:
    """
    Redis lock held for the duration of one job run.

    Keeps several service instances from reconciling the same tick. If Redis
    cannot be reached the lock fails open: the caller proceeds and relies on
    its in-process guard and the conditional status update.
    """

    def __init__(self, redis_client: redis.Redis, name: str, ttl: int):
        """Initialize lock with Redis client, key name and expiry in seconds."""
        self.redis = redis_client
        self.name = name
        self.ttl = ttl
        self._lock: Lock | None = None

    def acquire(self) -> bool:
        """
        Try to take the lock without waiting.

        Returns:
            True if this process may run, False if another holder has it
        """
        try:
            lock = self.redis.lock(self.name, timeout=self.ttl, blocking=False)
            if not lock.acquire():
                return False
        except RedisError as e:
            logger.warning("run_lock_unavailable", lock=self.name, error=str(e))
            self._lock = None
            return True

        self._lock = lock
        return True

    def release(self) -> None:
        """Release the lock if this process still owns it."""
        if self._lock is None:
            return
        try:
            self._lock.release()
        except LockError:
            # Expired before the run finished; someone else may own it now
            logger.warning("run_lock_expired", lock=self.name, ttl=self.ttl)
        except RedisError as e:
            logger.warning("run_lock_release_failed", lock=self.name, error=str(e))
        finally:
            self._lock = None
