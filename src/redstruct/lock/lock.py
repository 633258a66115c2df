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
Implementation of the lock interface on top of the Redis store.
"""
import logging
import math
from typing import Any, Awaitable, Callable, Optional
from uuid import uuid4

from redstruct.errors import ConfigurationError
from redstruct.script import ScriptRegistry
from redstruct.store.interface import StoreInterface
from redstruct.utils.atomic_counter import AtomicCounter

from . import scripts
from .data import LeaseState
from .interface import LockInterface
from .structs import LeaseKey, WaiterQueue

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return str(uuid4())


class Lock(LockInterface):
    """
    A distributed, leased mutual-exclusion lock over a named resource.

    **Core Mechanism**

    The lock uses two keys derived from the resource name:
    - `<resource>:lease`: a string holding the token of the current holder.
    - `<resource>:tokens`: a list of hand-off tokens for blocked waiters.

    Acquiring sets the lease to a fresh token if it is free. Releasing replaces
    the lease with a new random token and pushes that token onto the list; the
    next caller to pop it becomes the holder. Both steps are Lua procedures, so
    no other client can observe the keys half-updated.

    **Lease**

    The lease expires `expiry` seconds after it was last acquired. The lock does
    not renew it in the background: keep critical sections shorter than the
    expiry, or call `acquire()` again while holding the lock to refresh it.

    **Reentrancy**

    With `reentrant=True`, nested acquires on the same instance only bump a
    local counter and the lease is released by the outermost `release()`.
    Different `Lock` instances always compete, even inside one process.

    Without `reentrant=True`, a nested `locked()` on the same instance still
    succeeds (the inner acquire only refreshes the lease), but the inner
    release frees the remote lease while the outer block is still running.
    """

    DEFAULT_EXPIRY = 1.0
    DEFAULT_TIMEOUT = None

    def __init__(
        self,
        resource: str,
        store: StoreInterface,
        scripts_registry: Optional[ScriptRegistry] = None,
        expiry: float = DEFAULT_EXPIRY,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        reentrant: bool = False,
    ):
        """
        Initializes the Lock.

        Args:
            resource: The name of the resource to lock.
            store: The store holding the lock keys.
            scripts_registry: Registry caching the lock procedures; a private one
                              is created when omitted.
            expiry: The lease duration in seconds; 0 disables key expiry.
            timeout: None for a non-blocking lock; otherwise the number of
                     seconds `acquire()` waits for a hand-off, 0 or infinity
                     meaning forever.
            reentrant: Whether nested acquires on this instance are counted.

        Raises:
            ConfigurationError: If an argument is missing or out of range.
        """
        if store is None:
            raise ConfigurationError("Lock requires a store")
        if not resource:
            raise ConfigurationError("Lock requires a resource name")
        if expiry is None or not math.isfinite(expiry) or expiry < 0:
            raise ConfigurationError(f"Invalid lock expiry {expiry!r}")
        if timeout is not None:
            if math.isnan(timeout) or timeout < 0:
                raise ConfigurationError(f"Invalid lock timeout {timeout!r}")
            if math.isinf(timeout):
                timeout = 0

        self._resource = resource
        self._store = store
        self._expiry = expiry
        self._timeout = timeout
        self._reentrant = reentrant
        self._token: Optional[str] = None
        self._acquired = AtomicCounter()

        self._lease = LeaseKey(store, f"{resource}:lease")
        self._tokens = WaiterQueue(store, f"{resource}:tokens")

        registry = scripts_registry if scripts_registry is not None else ScriptRegistry(store)
        self._acquire_script = registry.register(scripts.ACQUIRE_SCRIPT_ID, scripts.ACQUIRE_SCRIPT)
        self._release_script = registry.register(scripts.RELEASE_SCRIPT_ID, scripts.RELEASE_SCRIPT)
        self._delete_script = registry.register(scripts.DELETE_SCRIPT_ID, scripts.DELETE_SCRIPT)

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def expiry(self) -> float:
        return self._expiry

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    @property
    def reentrant(self) -> bool:
        return self._reentrant

    @property
    def blocking(self) -> bool:
        return self._timeout is not None

    @property
    def keys(self) -> list:
        return [self._lease.key, self._tokens.key]

    def _expiry_ms(self) -> int:
        return int(math.ceil(self._expiry * 1000))

    async def acquire(self) -> bool:
        """
        Attempts to acquire the lock.

        First tries to claim the lease (or adopt a pending hand-off) without
        waiting. If that fails and the lock is blocking, waits on the hand-off
        queue and re-validates the adopted token, which also refreshes the
        lease expiry.
        """
        if self._reentrant and self._token is not None and self._acquired.value > 0:
            self._acquired.increment()
            return True

        token = await self._acquire_lease(self._token or generate_token())
        if token is None and self.blocking:
            token = await self._blocking_acquire()

        if token is None:
            logger.debug(f"Failed to acquire lock {self._resource}")
            return False

        self._token = token
        if self._reentrant:
            self._acquired.increment()
        logger.debug(f"Acquired lock {self._resource}")
        return True

    async def _acquire_lease(self, token: str) -> Optional[str]:
        return await self._acquire_script.eval(
            keys=self.keys, args=[token, self._expiry_ms()]
        )

    async def _blocking_acquire(self) -> Optional[str]:
        logger.debug(f"Waiting up to {self._timeout}s for lock {self._resource}")
        token = await self._tokens.pop(timeout=self._timeout)
        if token is None:
            return None
        # The popped token may be stale if the lease expired meanwhile.
        return await self._acquire_lease(token)

    async def release(self) -> bool:
        """
        Releases the lock and hands a fresh token to the next waiter.
        """
        if self._token is None:
            return False

        if self._reentrant and self._acquired.decrement() > 0:
            return True

        result = await self._release_script.eval(
            keys=self.keys, args=[self._token, generate_token(), self._expiry_ms()]
        )
        released = bool(result)
        self._acquired.reset()
        if released:
            self._token = None
            logger.debug(f"Released lock {self._resource}")
        else:
            logger.warning(f"Lease on {self._resource} was lost before release")
        return released

    async def locked(self, action: Callable[[], Awaitable[Any]]) -> bool:
        acquired = False
        try:
            acquired = await self.acquire()
            if acquired:
                await action()
        finally:
            if acquired:
                await self.release()
        return acquired

    async def delete(self) -> bool:
        deleted = await self._delete_script.eval(keys=self.keys)
        self._token = None
        self._acquired.reset()
        return bool(deleted)

    async def state(self) -> LeaseState:
        """Reads the current lease and hand-off queue, for diagnostics."""
        return LeaseState(
            token=await self._lease.get(),
            ttl_ms=await self._lease.ttl(),
            handoffs=await self._tokens.length(),
        )

    def __repr__(self) -> str:
        return (
            f"Lock(resource={self._resource!r}, expiry={self._expiry}, "
            f"blocking={self.blocking}, reentrant={self._reentrant})"
        )
