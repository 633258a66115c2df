# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Implementation of the store interface using redis-py's asyncio client.
"""
from contextlib import contextmanager
import logging
from typing import Any, Iterator, Optional, Sequence

import redis.asyncio as redis
from redis import exceptions as redis_exceptions

from redstruct.errors import (
    ScriptNotCachedError,
    StoreConnectionError,
    StoreResponseError,
)
from .interface import StoreInterface

logger = logging.getLogger(__name__)

# Redis answers EVALSHA for an unknown digest with an error starting with this.
NOSCRIPT_PREFIX = "NOSCRIPT"


@contextmanager
def _translate_errors(command: str) -> Iterator[None]:
    """Maps redis-py exceptions onto the redstruct error hierarchy."""
    try:
        yield
    except redis_exceptions.NoScriptError as e:
        raise ScriptNotCachedError(str(e)) from e
    except (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError) as e:
        logger.warning(f"Connection error while running {command}: {e}")
        raise StoreConnectionError(f"{command} failed: {e}") from e
    except redis_exceptions.ResponseError as e:
        if str(e).startswith(NOSCRIPT_PREFIX):
            raise ScriptNotCachedError(str(e)) from e
        raise StoreResponseError(f"{command} failed: {e}") from e
    except redis_exceptions.RedisError as e:
        raise StoreResponseError(f"{command} failed: {e}") from e


class RedisStore(StoreInterface):
    """
    A store backed by a `redis.asyncio.Redis` client.

    The client must be created with `decode_responses=True`; tokens and script
    digests are handled as `str` throughout redstruct.
    """

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: Optional[float] = None) -> "RedisStore":
        """
        Creates a RedisStore from a connection URL.

        Example:
            store = RedisStore.from_url("redis://localhost:6379/0")

        Args:
            url: A redis:// or rediss:// connection URL.
            socket_timeout: Optional per-command socket timeout in seconds.
        """
        client = redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)
        return cls(client)

    @property
    def client(self) -> redis.Redis:
        return self._client

    async def evalsha(self, sha1: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        with _translate_errors("EVALSHA"):
            return await self._client.evalsha(sha1, len(keys), *keys, *args)

    async def eval(self, source: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        with _translate_errors("EVAL"):
            return await self._client.eval(source, len(keys), *keys, *args)

    async def script_load(self, source: str) -> str:
        with _translate_errors("SCRIPT LOAD"):
            return await self._client.script_load(source)

    async def script_exists(self, sha1: str) -> bool:
        with _translate_errors("SCRIPT EXISTS"):
            result = await self._client.script_exists(sha1)
        return bool(result and result[0])

    async def get(self, key: str) -> Optional[str]:
        with _translate_errors("GET"):
            return await self._client.get(key)

    async def set(
        self, key: str, value: str, ttl_ms: Optional[int] = None, nx: bool = False
    ) -> bool:
        with _translate_errors("SET"):
            result = await self._client.set(key, value, px=ttl_ms, nx=nx)
        return bool(result)

    async def blocking_pop(self, key: str, timeout: float) -> Optional[str]:
        # Whole seconds are sent as integers for servers without float timeouts.
        if float(timeout).is_integer():
            timeout = int(timeout)
        with _translate_errors("BRPOP"):
            result = await self._client.brpop([key], timeout=timeout)
        if not result:
            return None
        _, value = result
        return value

    async def pop(self, key: str) -> Optional[str]:
        with _translate_errors("RPOP"):
            return await self._client.rpop(key)

    async def length(self, key: str) -> int:
        with _translate_errors("LLEN"):
            return await self._client.llen(key)

    async def expire(self, key: str, ttl_ms: int) -> bool:
        with _translate_errors("PEXPIRE"):
            return bool(await self._client.pexpire(key, ttl_ms))

    async def ttl(self, key: str) -> Optional[int]:
        with _translate_errors("PTTL"):
            remaining = await self._client.pttl(key)
        if remaining is None or remaining < 0:
            return None
        return remaining

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with _translate_errors("DEL"):
            return await self._client.delete(*keys)

    async def close(self) -> None:
        await self._client.aclose()
