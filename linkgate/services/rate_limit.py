import math
import threading
import time

import redis

from ..logging_conf import get_logger

logger = get_logger('linkgate.ratelimit')


class RateLimitExceeded(ValueError):
    def __init__(self, ip: str, limit: int, retry_after: int = 60):
        super().__init__(f'rate exceeded for {ip} (limit {limit}/window)')
        self.ip = ip
        self.limit = limit
        self.retry_after = retry_after


class MemCounterStore:
    """Expiring counters for a single process."""

    def __init__(self, clock=time.time):
        self._data = {}
        self._exp = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _cleanup(self):
        now = self._clock()
        expired = [k for k, ts in self._exp.items() if ts <= now]
        for k in expired:
            self._data.pop(k, None)
            self._exp.pop(k, None)

    def incr(self, key):
        with self._lock:
            self._cleanup()
            v = self._data.get(key, 0) + 1
            self._data[key] = v
            return v

    def expire(self, key, ttl):
        with self._lock:
            self._exp[key] = self._clock() + ttl

    def __len__(self):
        with self._lock:
            self._cleanup()
            return len(self._data)


def make_counter_store(url=None):
    """Redis client when `url` answers a ping, else an in-memory store."""
    if url:
        try:
            client = redis.from_url(url, decode_responses=True)
            client.ping()
            logger.info('ratelimit.backend', extra={'event': 'ratelimit_backend', 'backend': 'redis'})
            return client
        except redis.RedisError as e:
            logger.warning('ratelimit.redis_unavailable',
                           extra={'event': 'ratelimit_redis_unavailable', 'error': str(e)})
    return MemCounterStore()


class RateLimiter:
    """Fixed-window per-IP request counter. limit <= 0 disables it.

    If the counter backend fails mid-flight (Redis gone away) the limiter
    moves to in-memory counters rather than failing the request.
    """

    def __init__(self, store, limit: int = 60, window: int = 60, clock=time.time):
        self.store = store
        self.limit = limit
        self.window = window
        self._clock = clock

    def check(self, ip: str) -> int:
        if self.limit <= 0:
            return 0
        now = self._clock()
        k = f'rl:ip:{ip}:{int(now // self.window)}'
        try:
            v = self._count(k)
        except redis.RedisError as e:
            logger.warning('ratelimit.redis_unavailable',
                           extra={'event': 'ratelimit_redis_unavailable', 'error': str(e)})
            self.store = MemCounterStore(clock=self._clock)
            v = self._count(k)
        if v > self.limit:
            retry_after = max(1, math.ceil(self.window - (now % self.window)))
            raise RateLimitExceeded(ip, self.limit, retry_after)
        return v

    def _count(self, key) -> int:
        v = int(self.store.incr(key))
        if v == 1:
            self.store.expire(key, self.window)
        return v
