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

import threading


class AtomicCounter:
    """A thread-safe integer counter."""

    def __init__(self, initial: int = 0):
        self._lock = threading.Lock()
        self._value = initial

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self, by: int = 1) -> int:
        """Adds `by` to the counter and returns the new value."""
        with self._lock:
            self._value += by
            return self._value

    def decrement(self, by: int = 1) -> int:
        return self.increment(-by)

    def reset(self) -> None:
        with self._lock:
            self._value = 0
