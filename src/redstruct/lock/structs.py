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
The two remote structures a lock is built from.

Neither structure offers an unconditional write: the lease and the hand-off
queue are only ever mutated by the lock's Lua procedures.
"""
from typing import Optional, Protocol, runtime_checkable

from redstruct.store.interface import StoreInterface


@runtime_checkable
class Keyed(Protocol):
    """Anything backed by a single remote key."""

    @property
    def key(self) -> str: ...


class LeaseKey:
    """A string key holding the token of the current lock holder."""

    def __init__(self, store: StoreInterface, key: str):
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def get(self) -> Optional[str]:
        return await self._store.get(self._key)

    async def ttl(self) -> Optional[int]:
        return await self._store.ttl(self._key)


class WaiterQueue:
    """
    A list of hand-off tokens.

    Tokens are pushed at the head and popped from the tail, so the oldest
    hand-off is served first.
    """

    def __init__(self, store: StoreInterface, key: str):
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def pop(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Pops the oldest token.

        Args:
            timeout: None pops without waiting; otherwise waits up to `timeout`
                     seconds for a token, 0 meaning forever.
        """
        if timeout is None:
            return await self._store.pop(self._key)
        return await self._store.blocking_pop(self._key, timeout)

    async def length(self) -> int:
        return await self._store.length(self._key)
