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
Lua procedures executed atomically by the server on behalf of `Lock`.

Every procedure takes the lease key as KEYS[1] and the hand-off queue as
KEYS[2]. Expiries are passed in milliseconds; an expiry of 0 leaves the keys
without a TTL.
"""

ACQUIRE_SCRIPT_ID = "lock:acquire"
RELEASE_SCRIPT_ID = "lock:release"
DELETE_SCRIPT_ID = "lock:delete"

# Claims the lease for ARGV[1] if it is free or already ours. Otherwise adopts a
# token left on the queue by a release, provided it is the current lease value.
# Returns the owning token, or nil if the lease belongs to someone else.
ACQUIRE_SCRIPT = """
local token = ARGV[1]
local expiry = tonumber(ARGV[2])
local lease = redis.call('get', KEYS[1])

if not lease then
  redis.call('set', KEYS[1], token)
elseif lease ~= token then
  local handed = redis.call('rpop', KEYS[2])
  if not handed or handed ~= lease then
    return false
  end
  token = handed
end

if expiry > 0 then
  redis.call('pexpire', KEYS[1], expiry)
end

return token
"""

# If ARGV[1] still holds the lease, replaces it with ARGV[2] and pushes ARGV[2]
# for the next waiter. Returns 1 if released, 0 otherwise.
RELEASE_SCRIPT = """
local current = ARGV[1]
local nextToken = ARGV[2]
local expiry = tonumber(ARGV[3])

if redis.call('get', KEYS[1]) ~= current then
  return 0
end

redis.call('set', KEYS[1], nextToken)
redis.call('lpush', KEYS[2], nextToken)

if expiry > 0 then
  redis.call('pexpire', KEYS[1], expiry)
  redis.call('pexpire', KEYS[2], expiry)
end

return 1
"""

DELETE_SCRIPT = """
return redis.call('del', unpack(KEYS))
"""
