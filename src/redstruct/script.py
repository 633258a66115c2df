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
Lua script handles and a registry caching them by identifier.

Redis compiles every script it receives and caches the bytecode under the SHA1
of the source. `Script.eval` always tries the cached form first with EVALSHA and
only sends the full source when the server reports it does not know the digest,
so the common case costs a single round trip without resending the source.
"""
import hashlib
import logging
import threading
from typing import Any, Dict, Optional, Sequence

from redstruct.errors import ConfigurationError, ScriptNotCachedError
from redstruct.store.interface import StoreInterface

logger = logging.getLogger(__name__)


class Script:
    """A Lua script bound to a store."""

    def __init__(self, source: str, store: StoreInterface, sha1: Optional[str] = None):
        source = (source or "").strip()
        if not source:
            raise ConfigurationError("No source script given")
        if store is None:
            raise ConfigurationError("Script requires a store")
        self._source = source
        self._store = store
        self._sha1 = sha1

    @property
    def source(self) -> str:
        return self._source

    @property
    def sha1(self) -> str:
        """The SHA1 digest Redis uses as the cache key for this script."""
        if self._sha1 is None:
            self._sha1 = hashlib.sha1(self._source.encode("utf-8")).hexdigest()
        return self._sha1

    async def exists(self) -> bool:
        """Checks whether the server has this script cached."""
        return await self._store.script_exists(self.sha1)

    async def load(self) -> str:
        """Sends the source to the server to be compiled and cached."""
        self._sha1 = await self._store.script_load(self._source)
        return self._sha1

    async def eval(self, keys: Sequence[str] = (), args: Sequence[Any] = ()) -> Any:
        """
        Evaluates the script and returns the raw reply.

        Args:
            keys: The KEYS array passed to the script.
            args: The ARGV array passed to the script.

        Returns:
            Whatever the script returns; interpreting it is up to the caller.
        """
        try:
            return await self._store.evalsha(self.sha1, keys, args)
        except ScriptNotCachedError:
            logger.debug(f"Script {self.sha1} not cached on server, sending source")
            return await self._store.eval(self._source, keys, args)

    def __repr__(self) -> str:
        return f"Script(sha1={self.sha1!r}, source={self._source[:20]!r})"


class ScriptRegistry:
    """
    A thread-safe map of script identifiers to `Script` handles sharing a store.

    The first registration of an identifier wins: registering the same id again
    returns the existing handle, and a conflicting source is ignored with a
    warning.
    """

    def __init__(self, store: StoreInterface):
        if store is None:
            raise ConfigurationError("ScriptRegistry requires a store")
        self._store = store
        self._scripts: Dict[str, Script] = {}
        self._lock = threading.Lock()

    @property
    def store(self) -> StoreInterface:
        return self._store

    def register(self, script_id: str, source: str) -> Script:
        source = (source or "").strip()
        if not source:
            raise ConfigurationError(f"No source given for script {script_id}")
        with self._lock:
            existing = self._scripts.get(script_id)
            if existing is not None:
                if existing.source != source:
                    logger.warning(
                        f"Script {script_id} is already registered with a different source; keeping the original."
                    )
                return existing
            script = Script(source, self._store)
            self._scripts[script_id] = script
            return script

    def get(self, script_id: str) -> Script:
        with self._lock:
            return self._scripts[script_id]

    async def preload(self) -> None:
        """Loads every registered script into the server's script cache."""
        with self._lock:
            scripts = list(self._scripts.values())
        for script in scripts:
            await script.load()

    def __contains__(self, script_id: object) -> bool:
        with self._lock:
            return script_id in self._scripts

    def __len__(self) -> int:
        with self._lock:
            return len(self._scripts)
