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

import os
from unittest.mock import AsyncMock, Mock, patch

import pytest

from redstruct.config import RedstructConfig
from redstruct.errors import ConfigurationError
from redstruct.lock.factory import LockFactory
from redstruct.store.interface import StoreInterface
from redstruct.store.redis_store import RedisStore


@pytest.fixture
def store():
    return AsyncMock(spec=StoreInterface)


def test_requires_a_connection():
    with pytest.raises(ConfigurationError):
        LockFactory(config=RedstructConfig())


def test_wraps_client():
    client = Mock()
    factory = LockFactory(client=client)
    assert isinstance(factory.store, RedisStore)
    assert factory.store.client is client


@patch("redstruct.lock.factory.RedisStore.from_url")
def test_builds_store_from_url(mock_from_url):
    config = RedstructConfig(redis_url="redis://cache:6379/1", socket_timeout=5)
    factory = LockFactory(config=config)
    mock_from_url.assert_called_once_with("redis://cache:6379/1", socket_timeout=5)
    assert factory.store is mock_from_url.return_value


@patch("redstruct.lock.factory.RedisStore.from_url")
def test_from_env(mock_from_url):
    with patch.dict(os.environ, {"REDSTRUCT_REDIS_URL": "redis://env:6379/0"}, clear=True):
        factory = LockFactory.from_env()
    mock_from_url.assert_called_once_with("redis://env:6379/0", socket_timeout=None)
    assert factory.config.redis_url == "redis://env:6379/0"


def test_create_lock_uses_config_defaults(store):
    config = RedstructConfig(lock_expiry=3, lock_timeout=10)
    factory = LockFactory(config=config, store=store)

    lock = factory.create_lock("res")
    assert lock.resource == "res"
    assert lock.expiry == 3
    assert lock.timeout == 10
    assert lock.blocking is True


def test_create_lock_overrides(store):
    factory = LockFactory(config=RedstructConfig(lock_timeout=10), store=store)

    lock = factory.create_lock("res", expiry=0.5, timeout=None, reentrant=True)
    assert lock.expiry == 0.5
    assert lock.blocking is False
    assert lock.reentrant is True


def test_locks_share_script_registry(store):
    factory = LockFactory(store=store)
    factory.create_lock("a")
    factory.create_lock("b")
    assert len(factory.scripts) == 3

    custom = factory.script("custom", "return 1")
    assert "custom" in factory.scripts
    assert factory.scripts.get("custom") is custom


@pytest.mark.asyncio
async def test_close(store):
    factory = LockFactory(store=store)
    await factory.close()
    store.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_preload_loads_lock_procedures(store):
    store.script_load.return_value = "digest"
    factory = LockFactory(store=store)
    factory.create_lock("res")

    await factory.scripts.preload()

    assert store.script_load.await_count == 3
