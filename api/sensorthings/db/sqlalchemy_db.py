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

from sensorthings import PG_MAX_OVERFLOW, PG_POOL_SIZE, PG_POOL_TIMEOUT
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base

from .asyncpg_db import get_dsn

SCHEMA_NAME = "sensorthings"

# Compiles statements for the asyncpg pool and creates the schema at
# startup. Requests never check out connections from it.
engine = create_async_engine(
    get_dsn("postgresql+asyncpg"),
    pool_size=PG_POOL_SIZE,
    max_overflow=PG_MAX_OVERFLOW,
    pool_timeout=PG_POOL_TIMEOUT,
    pool_pre_ping=True,
)

Base = declarative_base()
