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

from typing import Optional

import redis.asyncio as redis

from redstruct.config import RedstructConfig
from redstruct.errors import ConfigurationError
from redstruct.script import Script, ScriptRegistry
from redstruct.store.interface import StoreInterface
from redstruct.store.redis_store import RedisStore

from .lock import Lock

# Distinguishes "use the configured timeout" from an explicit None (non-blocking).
_DEFAULT = object()


class LockFactory:
    def __init__(
        self,
        config: Optional[RedstructConfig] = None,
        client: Optional[redis.Redis] = None,
        store: Optional[StoreInterface] = None,
    ):
        self._config = config or RedstructConfig()
        if store is not None:
            self._store = store
        elif client is not None:
            self._store = RedisStore(client)
        elif self._config.redis_url:
            self._store = RedisStore.from_url(
                self._config.redis_url, socket_timeout=self._config.socket_timeout
            )
        else:
            raise ConfigurationError("LockFactory requires a store, a client or a redis_url")
        self._scripts = ScriptRegistry(self._store)

    @classmethod
    def from_env(cls) -> "LockFactory":
        return cls(config=RedstructConfig.from_env())

    @property
    def config(self) -> RedstructConfig:
        return self._config

    @property
    def store(self) -> StoreInterface:
        return self._store

    @property
    def scripts(self) -> ScriptRegistry:
        return self._scripts

    def create_lock(
        self,
        resource: str,
        expiry: Optional[float] = None,
        timeout=_DEFAULT,
        reentrant: bool = False,
    ) -> Lock:
        return Lock(
            resource,
            store=self._store,
            scripts_registry=self._scripts,
            expiry=self._config.lock_expiry if expiry is None else expiry,
            timeout=self._config.lock_timeout if timeout is _DEFAULT else timeout,
            reentrant=reentrant,
        )

    def script(self, script_id: str, source: str) -> Script:
        """Registers an additional Lua procedure sharing this factory's store."""
        return self._scripts.register(script_id, source)

    async def close(self) -> None:
        await self._store.close()
