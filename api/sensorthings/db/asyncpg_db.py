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

import asyncpg
from sensorthings import (
    PG_POOL_SIZE,
    PG_POOL_TIMEOUT,
    POSTGRES_DB,
    POSTGRES_HOST,
    POSTGRES_PASSWORD,
    POSTGRES_PORT,
    POSTGRES_USER,
)

pgpool: asyncpg.Pool | None = None


def get_dsn(scheme="postgresql"):
    return (
        f"{scheme}://{POSTGRES_USER}:{POSTGRES_PASSWORD}"
        f"@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
    )


async def get_pool():
    """
    Return the shared connection pool, creating it on first use.

    Sessions run in UTC so that timestamps rendered by the database match
    the ISO 8601 "Z" form used in responses.
    """
    global pgpool
    if not pgpool:
        pgpool = await asyncpg.create_pool(
            dsn=get_dsn(),
            min_size=PG_POOL_SIZE,
            max_size=PG_POOL_SIZE,
            timeout=PG_POOL_TIMEOUT,
            max_queries=50000,
            max_inactive_connection_lifetime=3600,
            server_settings={
                "application_name": "sensorthings",
                "timezone": "UTC",
            },
        )
    return pgpool


async def close_pool():
    global pgpool
    if pgpool:
        await pgpool.close()
        pgpool = None
