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
Data class for representing and interpreting the remote state of a lock.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LeaseState:
    """
    A point-in-time snapshot of a lock's lease key and hand-off queue.
    """

    token: Optional[str]
    ttl_ms: Optional[int]
    handoffs: int

    @property
    def is_free(self) -> bool:
        """Checks if no lease is currently stored."""
        return self.token is None

    @property
    def has_handoff(self) -> bool:
        """Checks if a released token is waiting to be adopted."""
        return self.handoffs > 0

    def is_held_by(self, token: Optional[str]) -> bool:
        return token is not None and self.token == token
