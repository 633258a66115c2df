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
Defines the abstract interface to the remote key-value store.

`StoreInterface` is the narrow capability set the lock and script layers rely
on: script execution, string get/set with expiry, list pops (optionally
blocking), key expiry and deletion. Implementations translate driver errors
into the `redstruct.errors.StoreError` hierarchy so callers never depend on a
specific driver's exception types.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class StoreInterface(ABC):
    """
    An asynchronous client for the remote key-value store.

    All methods raise `StoreConnectionError` on network failures and
    `StoreResponseError` when the server rejects a command.
    """

    @abstractmethod
    async def evalsha(self, sha1: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """
        Executes a server-cached script by its SHA1 digest.

        Raises:
            ScriptNotCachedError: If the server does not know the digest.
        """
        pass

    @abstractmethod
    async def eval(self, source: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """Executes a script by sending its full source."""
        pass

    @abstractmethod
    async def script_load(self, source: str) -> str:
        """Caches a script on the server and returns its SHA1 digest."""
        pass

    @abstractmethod
    async def script_exists(self, sha1: str) -> bool:
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(
        self, key: str, value: str, ttl_ms: Optional[int] = None, nx: bool = False
    ) -> bool:
        """
        Sets a string key.

        Args:
            ttl_ms: Optional expiry in milliseconds.
            nx: Only set the key if it does not already exist.

        Returns:
            True if the key was written.
        """
        pass

    @abstractmethod
    async def blocking_pop(self, key: str, timeout: float) -> Optional[str]:
        """
        Pops from the tail of a list, waiting up to `timeout` seconds for an item.

        A timeout of 0 waits forever.

        Returns:
            The popped value, or None if the timeout elapsed.
        """
        pass

    @abstractmethod
    async def pop(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def length(self, key: str) -> int:
        pass

    @abstractmethod
    async def expire(self, key: str, ttl_ms: int) -> bool:
        pass

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """
        Returns the remaining time to live in milliseconds.

        Returns:
            None if the key does not exist or has no expiry.
        """
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
