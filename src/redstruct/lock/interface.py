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
Defines the abstract interface for a distributed, asynchronous lock.

A lock guards a named resource with a lease that expires on its own, so a
crashed holder cannot keep the resource forever. Losing a race for a lock is
not an error: `acquire` and `release` report it by returning False. Exceptions
are raised only for invalid configuration (`ConfigurationError`) and for store
failures (`StoreError`).
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable


class LockInterface(ABC):
    """
    An interface for a distributed, asynchronous, advisory lock.
    """

    @property
    @abstractmethod
    def blocking(self) -> bool:
        """Whether `acquire` waits for a release when the lock is held."""
        pass

    @abstractmethod
    async def acquire(self) -> bool:
        """
        Attempts to acquire the lock.

        Non-blocking locks return immediately. Blocking locks wait up to their
        timeout for the current holder to hand the lock off.

        Returns:
            True if the lock is now held by this instance.
        """
        pass

    @abstractmethod
    async def release(self) -> bool:
        """
        Releases the lock if this instance still holds its lease.

        Returns:
            True if released, False if nothing was held or the lease was lost.
        """
        pass

    @abstractmethod
    async def locked(self, action: Callable[[], Awaitable[Any]]) -> bool:
        """
        Runs `action` while holding the lock.

        The action runs only if the lock was acquired, and the lock is released
        afterwards even if the action raises.

        Returns:
            True if the action ran.
        """
        pass

    @abstractmethod
    async def delete(self) -> bool:
        """Removes all remote state of the lock, regardless of who holds it."""
        pass
