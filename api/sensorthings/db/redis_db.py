# Copyright 2025 SUPSI
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import redis.asyncio as redis
from sensorthings import REDIS_HOST, REDIS_PORT

client: redis.Redis | None = None


def get_redis():
    """
    Return the shared redis client used to publish notifications.

    Returns:
        redis.Redis: The asyncio redis client.
    """
    global client
    if client is None:
        client = redis.Redis(host=REDIS_HOST, port=REDIS_PORT)
    return client


async def close_redis():
    global client
    if client is not None:
        await client.aclose()
        client = None
