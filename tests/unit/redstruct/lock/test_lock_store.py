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

from redstruct.errors import ScriptNotCachedError, StoreConnectionError, StoreResponseError
from redstruct.lock.lock import Lock
from redstruct.store.interface import StoreInterface


@pytest.fixture
def store():
    return AsyncMock(spec=StoreInterface)


@pytest.mark.asyncio
async def test_acquire_propagates_connection_errors(store):
    """A store outage must not look like a contended lock."""
    store.evalsha.side_effect = StoreConnectionError("connection refused")
    lock = Lock("res", store)

    with pytest.raises(StoreConnectionError):
        await lock.acquire()
    assert lock.token is None


@pytest.mark.asyncio
async def test_release_propagates_errors_and_keeps_token(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store)
    assert await lock.acquire() is True

    store.evalsha.side_effect = StoreResponseError("script error")
    with pytest.raises(StoreResponseError):
        await lock.release()
    assert lock.token == "token-1"


@pytest.mark.asyncio
async def test_acquire_sends_expiry_in_milliseconds(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store, expiry=1.5)

    await lock.acquire()

    _, keys, args = store.evalsha.call_args.args
    assert keys == ["res:lease", "res:tokens"]
    assert args[1] == 1500


@pytest.mark.asyncio
async def test_acquire_falls_back_to_eval_when_script_not_cached(store):
    store.evalsha.side_effect = ScriptNotCachedError("NOSCRIPT")
    store.eval.return_value = "token-1"
    lock = Lock("res", store)

    assert await lock.acquire() is True
    assert lock.token == "token-1"
    store.eval.assert_awaited_once()


@pytest.mark.asyncio
async def test_blocking_acquire_revalidates_handed_off_token(store):
    store.evalsha.side_effect = [None, "handed"]
    store.blocking_pop.return_value = "handed"
    lock = Lock("res", store, timeout=2)

    assert await lock.acquire() is True
    assert lock.token == "handed"
    store.blocking_pop.assert_awaited_once_with("res:tokens", 2)
    _, _, args = store.evalsha.call_args_list[1].args
    assert args[0] == "handed"


@pytest.mark.asyncio
async def test_blocking_acquire_rejects_stale_token(store):
    store.evalsha.side_effect = [None, None]
    store.blocking_pop.return_value = "stale"
    lock = Lock("res", store, timeout=2)

    assert await lock.acquire() is False
    assert lock.token is None


@pytest.mark.asyncio
async def test_blocking_acquire_timeout(store):
    store.evalsha.return_value = None
    store.blocking_pop.return_value = None
    lock = Lock("res", store, timeout=2)

    assert await lock.acquire() is False
    assert store.evalsha.await_count == 1


@pytest.mark.asyncio
async def test_non_blocking_lock_never_waits(store):
    store.evalsha.return_value = None
    lock = Lock("res", store)

    assert await lock.acquire() is False
    store.blocking_pop.assert_not_awaited()


@pytest.mark.asyncio
async def test_reentrant_acquire_skips_round_trip(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store, reentrant=True)

    assert await lock.acquire() is True
    assert await lock.acquire() is True
    assert store.evalsha.await_count == 1

    assert await lock.release() is True
    assert store.evalsha.await_count == 1

    store.evalsha.return_value = 1
    assert await lock.release() is True
    assert store.evalsha.await_count == 2
    assert lock.token is None


@pytest.mark.asyncio
async def test_reentrant_lock_goes_remote_after_failed_release(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store, reentrant=True)
    await lock.acquire()

    store.evalsha.return_value = 0
    assert await lock.release() is False

    store.evalsha.return_value = None
    assert await lock.acquire() is False
    assert store.evalsha.await_count == 3


@pytest.mark.asyncio
async def test_release_generates_a_new_token(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store)
    await lock.acquire()

    store.evalsha.return_value = 1
    assert await lock.release() is True

    _, _, args = store.evalsha.call_args.args
    current, next_token, expiry = args
    assert current == "token-1"
    assert next_token != current
    assert expiry == 1000


def test_repr(store):
    lock = Lock("res", store, timeout=1)
    assert repr(lock) == "Lock(resource='res', expiry=1.0, blocking=True, reentrant=False)"


@pytest.mark.asyncio
async def test_sub_millisecond_expiry_rounds_up(store):
    store.evalsha.return_value = "token-1"
    lock = Lock("res", store, expiry=0.0004)

    await lock.acquire()

    _, _, args = store.evalsha.call_args.args
    assert args[1] == 1
