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

from unittest.mock import AsyncMock
import pytest

from redstruct.lock.structs import Keyed, LeaseKey, WaiterQueue
from redstruct.store.interface import StoreInterface


@pytest.fixture
def store():
    return AsyncMock(spec=StoreInterface)


def test_structures_are_keyed(store):
    assert isinstance(LeaseKey(store, "res:lease"), Keyed)
    assert isinstance(WaiterQueue(store, "res:tokens"), Keyed)


@pytest.mark.asyncio
async def test_lease_key_reads(store):
    store.get.return_value = "token-1"
    store.ttl.return_value = 500
    lease = LeaseKey(store, "res:lease")

    assert await lease.get() == "token-1"
    assert await lease.ttl() == 500
    store.get.assert_awaited_once_with("res:lease")


@pytest.mark.asyncio
async def test_waiter_queue_pop_without_timeout(store):
    store.pop.return_value = "token-1"
    queue = WaiterQueue(store, "res:tokens")

    assert await queue.pop() == "token-1"
    store.blocking_pop.assert_not_awaited()


@pytest.mark.asyncio
async def test_waiter_queue_blocking_pop(store):
    store.blocking_pop.return_value = None
    queue = WaiterQueue(store, "res:tokens")

    assert await queue.pop(timeout=0) is None
    store.blocking_pop.assert_awaited_once_with("res:tokens", 0)
