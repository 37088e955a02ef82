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

import asyncio
import logging

from fastapi import Depends, FastAPI
from sensorthings import (
    ADMIN_SEGMENT,
    HOSTNAME,
    LOG_LEVEL,
    NOTIFICATION_QUEUE_SIZE,
    REDIS,
    SUBPATH,
    TOP_VALUE,
    VERSION,
)
from sensorthings.core.context import Context, get_context, set_context
from sensorthings.db.asyncpg_db import close_pool, get_pool
from sensorthings.db.redis_db import close_redis, get_redis
from sensorthings.db.storage import PostgresStorage
from sensorthings.middleware import LowerCaseURIMiddleware
from sensorthings.notifications import Notifier
from sensorthings.v1 import api
from sensorthings.v1.endpoints.read.read import handle_root

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def initialize_pool():
    while True:
        try:
            return await get_pool()
        except Exception as e:
            logger.warning("Database not ready (%s), retrying", e)
            await asyncio.sleep(1)


app = FastAPI(
    title="OGC SensorThings API",
    description="A SensorThings API implementation in Python using FastAPI.",
    openapi_tags=[
        {
            "name": "Read root",
        },
        {
            "name": "Admin",
        },
    ],
)

app.add_middleware(LowerCaseURIMiddleware, admin_segment=ADMIN_SEGMENT)


@app.on_event("startup")
async def startup_event():
    pool = await initialize_pool()
    storage = PostgresStorage(pool, top_value=TOP_VALUE)
    await storage.ensure_schema()

    notifier = Notifier(
        get_redis() if REDIS else None, maxsize=NOTIFICATION_QUEUE_SIZE
    )
    await notifier.start()

    set_context(
        Context(
            storage=storage,
            notifier=notifier,
            base_url=f"{HOSTNAME}{SUBPATH}{VERSION}",
            hostname=HOSTNAME,
            top_value=TOP_VALUE,
        )
    )
    logger.info(
        "Serving %s%s%s (notifications %s)",
        HOSTNAME,
        SUBPATH,
        VERSION,
        "enabled" if notifier.enabled else "disabled",
    )


@app.on_event("shutdown")
async def shutdown_event():
    context = await get_context()
    await context.notifier.stop()
    if REDIS:
        await close_redis()
    await close_pool()


@app.get(f"{SUBPATH}{VERSION}".lower(), tags=["Read root"])
async def read_root():
    return handle_root()


@app.get(f"{SUBPATH}/{ADMIN_SEGMENT}/Notifications", tags=["Admin"])
async def read_notifications(context=Depends(get_context)):
    return context.notifier.stats()


app.mount(f"{SUBPATH}{VERSION}".lower(), api.v1)
