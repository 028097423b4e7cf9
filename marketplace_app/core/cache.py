import logging
import urllib.parse
from typing import Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential

from .breaker import CircuitBreaker, CircuitOpenError
from .settings import Settings, settings

logger = logging.getLogger(__name__)

# malformed replies (bad JSON, non-numeric INCR) count as misses too
CACHE_ERRORS = (httpx.HTTPError, ConnectionError, CircuitOpenError, ValueError, TypeError)


class Cache:
    def __init__(
        self,
        redis_url: str | None,
        redis_token: str | None,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 3.0,
    ):
        self.redis_url = (redis_url or "").rstrip("/")
        self.redis_token = redis_token
        self.breaker = breaker or CircuitBreaker(name="upstash", failure_threshold=5)
        self.transport = transport
        self.timeout = timeout

        self.headers = {
            "Authorization": f"Bearer {self.redis_token}",
            "Content-Type": "application/json",
        }

        if not self.enabled:
            logger.warning("Upstash Redis is not configured; caching disabled.")

    @classmethod
    def from_settings(cls, config: Settings) -> "Cache":
        return cls(config.UPSTASH_REDIS_URL, config.UPSTASH_REDIS_TOKEN)

    @property
    def enabled(self) -> bool:
        return bool(self.redis_url and self.redis_token)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    def _url(self, command: str, key: str) -> str:
        return f"{self.redis_url}/{command}/{urllib.parse.quote(str(key), safe='')}"

    @retry(
        stop=stop_after_attempt(2), wait=wait_exponential(multiplier=1, min=1, max=10)
    )
    async def connect(self):
        if not self.enabled:
            return

        logger.info("Connecting to Upstash Redis...")
        if not await self.ping():
            raise ConnectionError("Upstash Redis ping failed.")
        logger.info("Connected to Upstash Redis.")

    @staticmethod
    def _result(res: httpx.Response):
        body = res.json()
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected Upstash reply: {body!r}")
        return body.get("result")

    async def get(self, key: str) -> Optional[str]:
        if not self.enabled:
            return None

        async def handler():
            async with self._client() as client:
                res = await client.get(self._url("get", key), headers=self.headers)
                if res.status_code == 200:
                    return self._result(res)
                if res.status_code == 404:
                    return None
                raise ConnectionError(f"Redis GET failed ({res.status_code})")

        try:
            return await self.breaker.call(handler)
        except CACHE_ERRORS as e:
            logger.warning("Redis GET failed for key %s: %s", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        if key is None or value is None:
            raise ValueError("Cache key and value cannot be None")
        if not self.enabled:
            return False

        async def handler():
            async with self._client() as client:
                res = await client.post(
                    f"{self._url('set', key)}?ex={ttl}",
                    headers=self.headers,
                    content=value,
                )
                if res.status_code == 200:
                    logger.debug("Cache set successfully for key: %s", key)
                    return True
                raise ConnectionError(f"Redis SET failed ({res.status_code})")

        try:
            return await self.breaker.call(handler)
        except CACHE_ERRORS as e:
            logger.warning("Redis SET failed for key %s: %s", key, e)
            return False

    async def incr(self, key: str) -> Optional[int]:
        if not self.enabled:
            return None

        async def handler():
            async with self._client() as client:
                res = await client.post(self._url("incr", key), headers=self.headers)
                if res.status_code == 200:
                    return int(self._result(res))
                raise ConnectionError(f"Redis INCR failed ({res.status_code})")

        try:
            return await self.breaker.call(handler)
        except CACHE_ERRORS as e:
            logger.error("Redis INCR failed for key %s: %s", key, e)
            return None

    async def ping(self) -> bool:
        try:
            async with self._client() as client:
                res = await client.get(f"{self.redis_url}/ping", headers=self.headers)
                return res.status_code == 200 and self._result(res) == "PONG"
        except (httpx.HTTPError, ValueError):
            return False


cache = Cache.from_settings(settings)
