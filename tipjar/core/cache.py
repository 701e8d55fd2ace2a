from __future__ import annotations

# expiring key-value store: redis when configured, in-memory otherwise
import hashlib
import inspect
import json
import logging
import threading
import time
from functools import wraps
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple, get_args, get_origin

from redis import Connection, ConnectionPool, Redis, SSLConnection

from tipjar.core.config import settings

logger = logging.getLogger(__name__)

CacheTTLFactory = Callable[[], Optional[int]]


def _static_ttl(seconds: int) -> CacheTTLFactory:
    def factory() -> int:
        return max(int(seconds), 0)

    return factory


CACHE_TYPE: Dict[str, Dict[str, CacheTTLFactory]] = {
    'no-exp': {
        'ttl_factory': lambda: None,
    },
    'in-1m': {
        'ttl_factory': _static_ttl(60),
    },
    'in-5m': {
        'ttl_factory': _static_ttl(300),
    },
    'in-30m': {
        'ttl_factory': _static_ttl(1800),
    },
    'in-1h': {
        'ttl_factory': _static_ttl(3600),
    },
}


_COMPARE_AND_DELETE = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def resolve_cache_ttl(cache_type: str) -> Optional[int]:
    """Resolve cache type to TTL in seconds"""
    config = CACHE_TYPE.get(cache_type)
    if not config:
        return None

    ttl = config['ttl_factory']()
    if ttl is None:
        return None

    return max(int(ttl), 0)


class HybridCacheManager:
    """Expiring key-value store with Redis + in-memory fallback.

    Values are JSON encoded. Expiry is enforced lazily on read and, for the
    in-memory side, by an optional reaper thread (``start_reaper``). Redis
    expires its own keys.
    """

    def __init__(
        self,
        redis_host: Optional[str] = settings.REDIS_HOST,
        redis_port: Optional[int] = settings.REDIS_PORT,
        max_size: int = settings.MEMORY_CACHE_MAX_SIZE,
    ):
        self.memory_cache: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self._memory_cache_size = 0
        self._memory_lock = Lock()
        self._max_size = max_size
        self._last_redis_check: Optional[float] = None
        self.redis_available = False

        self._reaper_running = False
        self._reaper_stop = threading.Event()
        self._reaper_thread: Optional[threading.Thread] = None

        if redis_host is None or redis_host.strip() == "":
            self.pool = None
            return
        self.pool = ConnectionPool(
            host=redis_host,
            port=redis_port,
            socket_connect_timeout=0.05,
            socket_timeout=5,
            retry_on_timeout=False,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            connection_class=SSLConnection if settings.REDIS_SSL else Connection
        )

    def redis_connect(self) -> Optional[Redis]:
        """Connect to Redis, with a cooldown when unavailable"""
        if self.pool is None:
            return None

        # If Redis was available, try immediately
        if self.redis_available:
            try:
                rc = Redis(connection_pool=self.pool)
                if rc.ping():
                    return rc
                self.redis_available = False
                self._last_redis_check = time.time()
            except Exception:
                self.redis_available = False
                self._last_redis_check = time.time()
                logger.warning("Redis unavailable, falling back to memory store")
            return None

        # If Redis is unavailable, only recheck after the cooldown
        now = time.time()
        if self._last_redis_check is not None:
            if now - self._last_redis_check < settings.REDIS_RECHECK_INTERVAL:
                return None

        self._last_redis_check = now
        try:
            rc = Redis(connection_pool=self.pool)
            if rc.ping():
                self.redis_available = True
                return rc
        except Exception:
            logger.warning("Redis unreachable at %s", self.pool.connection_kwargs.get("host"))

        return None

    def get(self, key: str) -> Optional[Any]:
        """Get cached value, deserializing from JSON"""
        result = self._get_redis(key)
        if result is None:
            result = self._get_memory(key)
        if result is None:
            return None
        try:
            return json.loads(result)
        except json.JSONDecodeError:
            return None

    def set(
        self,
        key: str,
        value: Any,
        cache_type: Optional[str] = 'in-5m',
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """Set cached value, serializing to JSON.

        An explicit ``ttl_seconds`` wins over ``cache_type``.
        """
        try:
            data = json.dumps(value, default=str).encode('utf-8')
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize cache value for %s: %s", key, e)
            return False

        if ttl_seconds is None and cache_type is not None:
            ttl_seconds = resolve_cache_ttl(cache_type)

        if self._set_redis(key, data, ttl_seconds):
            return True

        self._set_memory(key, data, ttl_seconds)
        return True

    def delete(self, key: str) -> None:
        """Remove a key from both Redis and memory"""
        rc = self.redis_connect()
        if rc is not None:
            try:
                rc.delete(key)
            except Exception as e:
                logger.warning("Failed to delete %s from redis: %s", key, e)
            finally:
                rc.close()
        with self._memory_lock:
            cached = self.memory_cache.pop(key, None)
            if cached is not None:
                self._memory_cache_size -= len(cached[0])

    def consume(self, key: str, expected: Any) -> bool:
        """Delete ``key`` only if it currently holds ``expected``.

        Compare and delete happen as one step (a Lua script on Redis, the
        memory lock otherwise), so of several concurrent callers at most one
        gets True.
        """
        try:
            data = json.dumps(expected, default=str).encode('utf-8')
        except (TypeError, ValueError):
            return False

        rc = self.redis_connect()
        if rc is not None:
            try:
                return bool(rc.eval(_COMPARE_AND_DELETE, 1, key, data))
            except Exception as e:
                logger.warning("Failed to consume %s from redis: %s", key, e)
            finally:
                rc.close()

        now = time.time()
        with self._memory_lock:
            cached = self.memory_cache.get(key)
            if cached is None:
                return False
            value, expires_at = cached
            if expires_at is not None and expires_at <= now:
                self.memory_cache.pop(key, None)
                self._memory_cache_size -= len(value)
                return False
            if value != data:
                return False
            self.memory_cache.pop(key)
            self._memory_cache_size -= len(value)
            return True

    def clear(self) -> None:
        """Clear the in-memory side"""
        with self._memory_lock:
            self.memory_cache.clear()
            self._memory_cache_size = 0

    def purge_expired(self) -> int:
        """Drop expired in-memory entries, returns how many were removed"""
        now = time.time()
        with self._memory_lock:
            expired_keys = [
                k for k, (_, exp) in self.memory_cache.items()
                if exp is not None and exp <= now
            ]
            for k in expired_keys:
                old_data, _ = self.memory_cache.pop(k)
                self._memory_cache_size -= len(old_data)
        return len(expired_keys)

    def _set_redis(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> bool:
        rc = self.redis_connect()
        if rc is None:
            return False
        try:
            if ttl_seconds is not None and ttl_seconds > 0:
                rc.set(key, data, ex=ttl_seconds)
            else:
                rc.set(key, data)
            return True
        except Exception:
            return False
        finally:
            rc.close()

    def _get_redis(self, key: str) -> Optional[bytes]:
        rc = self.redis_connect()
        if rc is None:
            return None
        try:
            result = rc.get(key)
            if result is not None and result != b'':
                return result
            return None
        except Exception:
            return None
        finally:
            rc.close()

    def _set_memory(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> None:
        """Set memory entry, evicting when over the size limit"""
        expires_at = None if ttl_seconds is None else time.time() + ttl_seconds
        data_size = len(data)

        with self._memory_lock:
            if key in self.memory_cache:
                old_data, _ = self.memory_cache.pop(key)
                self._memory_cache_size -= len(old_data)

            while self._memory_cache_size + data_size > self._max_size and self.memory_cache:
                # evict the entry closest to expiry
                oldest_key = min(
                    self.memory_cache.keys(),
                    key=lambda k: self.memory_cache[k][1] or float('inf')
                )
                old_data, _ = self.memory_cache.pop(oldest_key)
                self._memory_cache_size -= len(old_data)

            self.memory_cache[key] = (data, expires_at)
            self._memory_cache_size += data_size

    def _get_memory(self, key: str) -> Optional[bytes]:
        """Get from memory cache, removing expired entries"""
        now = time.time()
        with self._memory_lock:
            cached = self.memory_cache.get(key)
            if cached is None:
                return None
            value, expires_at = cached
            if expires_at is not None and expires_at <= now:
                self.memory_cache.pop(key, None)
                self._memory_cache_size -= len(value)
                return None
            return value

    def _reaper_loop(self, interval: float) -> None:
        while not self._reaper_stop.wait(interval):
            try:
                removed = self.purge_expired()
                if removed:
                    logger.debug("Reaped %d expired entries", removed)
            except Exception:
                logger.exception("Error in cache reaper loop")

    def start_reaper(self, interval: float = settings.NONCE_SWEEP_INTERVAL_SECONDS) -> None:
        """Start the background sweep of expired in-memory entries"""
        if self._reaper_running:
            return
        self._reaper_running = True
        self._reaper_stop.clear()
        self._reaper_thread = threading.Thread(
            target=self._reaper_loop,
            args=(max(float(interval), 1.0),),
            daemon=True,
            name="CacheReaper",
        )
        self._reaper_thread.start()

    def stop_reaper(self) -> None:
        self._reaper_running = False
        self._reaper_stop.set()
        if self._reaper_thread:
            self._reaper_thread.join(timeout=5)
            self._reaper_thread = None


# Global process instance
cache_manager = HybridCacheManager()


def _make_cache_key(func_name: str, args: tuple, kwargs: dict) -> str:
    """Generate cache key from function name and arguments"""
    key_parts = [func_name]

    for arg in args:
        if isinstance(arg, (str, int, float, bool, type(None))):
            key_parts.append(str(arg))
        else:
            key_parts.append(str(hash(str(arg))))

    for k, v in sorted(kwargs.items()):
        if isinstance(v, (str, int, float, bool, type(None))):
            key_parts.append(f"{k}:{v}")
        else:
            key_parts.append(f"{k}:{hash(str(v))}")

    key_str = "|".join(key_parts)
    return f"cache:{hashlib.md5(key_str.encode()).hexdigest()}"


def cache(cache_type: str = 'in-5m', key_prefix: Optional[str] = None, value_type: Any = None):
    """
    Decorator for caching function results in the process cache manager.

    Args:
        cache_type: Cache type from CACHE_TYPE (e.g., 'in-1m', 'in-5m', 'in-1h')
        key_prefix: Optional prefix for cache key (defaults to function name)
        value_type: Optional type used to rebuild cached payloads (pydantic model or List[Model])

    ``None`` results are not cached.
    """
    def decorator(func: Callable) -> Callable:
        func_name = key_prefix or f"{func.__module__}.{func.__name__}"

        def _serialize_value(value: Any) -> Any:
            if hasattr(value, "model_dump"):
                return value.model_dump()
            if isinstance(value, (list, tuple)):
                return [_serialize_value(item) for item in value]
            if isinstance(value, dict):
                return {key: _serialize_value(val) for key, val in value.items()}
            return value

        def _deserialize_single(target: Any, data: Any) -> Any:
            if target is None:
                return data
            if isinstance(target, type) and hasattr(target, "model_validate"):
                return target.model_validate(data)
            if callable(target):
                return target(data)
            return data

        def _deserialize_value(payload: Any) -> Any:
            if payload is None or value_type is None:
                return payload

            origin = get_origin(value_type)
            if origin in (list, tuple):
                inner_type = get_args(value_type)[0] if get_args(value_type) else None
                converted = [_deserialize_single(inner_type, item) for item in payload]
                return converted if origin is list else tuple(converted)

            return _deserialize_single(value_type, payload)

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            cache_key = _make_cache_key(func_name, args, kwargs)
            cached = cache_manager.get(cache_key)
            if cached is not None:
                return _deserialize_value(cached)

            result = await func(*args, **kwargs)
            if result is not None:
                cache_manager.set(cache_key, _serialize_value(result), cache_type)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            cache_key = _make_cache_key(func_name, args, kwargs)
            cached = cache_manager.get(cache_key)
            if cached is not None:
                return _deserialize_value(cached)

            result = func(*args, **kwargs)
            if result is not None:
                cache_manager.set(cache_key, _serialize_value(result), cache_type)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
