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
Exception hierarchy shared by every redstruct component.

Failing to acquire a contested lock is an expected outcome and is reported as a
plain `False`; the exceptions here are reserved for invalid configuration and
for failures talking to the remote store.
"""


class RedstructError(Exception):
    """Base exception for all redstruct errors."""
    pass


class ConfigurationError(RedstructError, ValueError):
    """Raised when an object is constructed with invalid arguments."""
    pass


class StoreError(RedstructError):
    """Raised when a command sent to the remote store fails."""
    pass


class StoreConnectionError(StoreError):
    """Raised on network errors or timeouts; the operation may be retried."""
    pass


class StoreResponseError(StoreError):
    """Raised when the store rejects a command or a script errors out."""
    pass


class ScriptNotCachedError(StoreError):
    """Raised when EVALSHA references a script the server has not cached."""
    pass
