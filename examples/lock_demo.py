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
This is an example script to demonstrate distributed locking with redstruct.
It simulates workers competing for the same lock.

**Prerequisites:**

1.  **Redis:** A reachable Redis server, e.g.:
    ```bash
    docker run --rm -p 6379:6379 redis:7
    ```

2.  **Environment Variable:** Point redstruct at it:
    ```bash
    export REDSTRUCT_REDIS_URL="redis://localhost:6379/0"
    ```

**To Run:**

```bash
python3 examples/lock_demo.py
```

**Expected Output:**

In the first part, one non-blocking worker gets the lock and the other gives up
immediately. In the second part, both workers use blocking locks, so the second
one waits and takes over as soon as the first one releases.
"""
import asyncio
import logging
import uuid

from redstruct.lock.factory import LockFactory
from redstruct.lock.lock import Lock
from redstruct.logging_config import configure_logging


async def worker(name: str, lock: Lock):
    """A simple worker that tries to acquire a lock, holds it, and releases it."""
    logging.info(f"[{name}] Attempting to acquire lock...")

    async def work():
        logging.info(f"[{name}] Lock acquired!")
        # Simulate doing some work while holding the lock
        await asyncio.sleep(1)

    if await lock.locked(work):
        logging.info(f"[{name}] Lock released.")
    else:
        logging.warning(f"[{name}] Could not acquire lock.")


async def main():
    """
    Sets up and runs the lock contention simulation.
    """
    configure_logging("DEBUG")
    factory = LockFactory.from_env()

    try:
        logging.info("--- Running non-blocking test ---")
        resource = f"demo-lock-{uuid.uuid4()}"
        await asyncio.gather(
            worker("Worker 1 (non-blocking)", factory.create_lock(resource, expiry=5)),
            worker("Worker 2 (non-blocking)", factory.create_lock(resource, expiry=5)),
        )

        logging.info("--- Running blocking test ---")
        resource = f"demo-lock-{uuid.uuid4()}"
        await asyncio.gather(
            worker("Worker 1 (blocking)", factory.create_lock(resource, expiry=5, timeout=10)),
            worker("Worker 2 (blocking)", factory.create_lock(resource, expiry=5, timeout=10)),
        )
        await factory.create_lock(resource).delete()
    finally:
        await factory.close()


if __name__ == "__main__":
    asyncio.run(main())
