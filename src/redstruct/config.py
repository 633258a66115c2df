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

from dataclasses import dataclass
import math
import os
from typing import Optional

from redstruct.errors import ConfigurationError


def _parse_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class RedstructConfig:
    """
    Configuration for the Redis connection and the defaults of created locks.

    `lock_timeout` follows the lock semantics: `None` means non-blocking, `0`
    (or infinity) means wait forever. When blocking locks are used, keep
    `socket_timeout` unset or larger than the lock timeout, otherwise the
    driver aborts the blocking pop first.
    """
    redis_url: Optional[str] = None
    lock_expiry: float = 1.0
    lock_timeout: Optional[float] = None
    socket_timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "RedstructConfig":
        """
        Creates a RedstructConfig instance from environment variables.
        """
        lock_timeout = _parse_float("REDSTRUCT_LOCK_TIMEOUT", None)
        if lock_timeout is not None and math.isinf(lock_timeout):
            lock_timeout = 0
        lock_expiry = _parse_float("REDSTRUCT_LOCK_EXPIRY", 1.0)
        if not math.isfinite(lock_expiry):
            raise ConfigurationError(f"REDSTRUCT_LOCK_EXPIRY must be finite, got {lock_expiry!r}")
        return cls(
            redis_url=os.environ.get("REDSTRUCT_REDIS_URL") or None,
            lock_expiry=lock_expiry,
            lock_timeout=lock_timeout,
            socket_timeout=_parse_float("REDSTRUCT_SOCKET_TIMEOUT", None),
        )
