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

"""
Change notifications.

Observations created through the API are announced on topics such as
"Datastreams(7)/Observations" and "Observations". Publishing only queues
the message; a background task serializes it and hands it to the
transport, so a slow or failing broker never delays or breaks a request.
"""

import asyncio
import contextlib
import logging

import ujson
from sensorthings import NOTIFICATION_QUEUE_SIZE

logger = logging.getLogger(__name__)


class Notifier:
    """
    Queue of outgoing notifications drained by a background task.

    Args:
        transport: Object with an async publish(topic, payload) method,
            e.g. a redis asyncio client. None disables notifications.
        maxsize (int): Capacity of the queue. Messages published while it
            is full are dropped.
    """

    def __init__(self, transport, maxsize=NOTIFICATION_QUEUE_SIZE):
        self.transport = transport
        self.queue = asyncio.Queue(maxsize=maxsize)
        self.task = None
        self.queued = 0
        self.sent = 0
        self.dropped = 0
        self.failed = 0

    @property
    def enabled(self):
        return self.transport is not None

    def publish(self, topic, message):
        if not self.enabled:
            return

        try:
            self.queue.put_nowait((topic, message))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Notification queue full, dropping message for %s", topic
            )
            return
        self.queued += 1

    async def start(self):
        if self.enabled and self.task is None:
            self.task = asyncio.create_task(self._run())

    async def stop(self):
        if self.task is None:
            return
        self.task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self.task
        self.task = None

    async def join(self):
        """Wait until every queued message has been handled."""
        await self.queue.join()

    async def send(self, topic, message):
        payload = ujson.dumps(message, escape_forward_slashes=False)
        await self.transport.publish(topic, payload)

    async def _run(self):
        while True:
            topic, message = await self.queue.get()
            try:
                await self.send(topic, message)
            except Exception:
                self.failed += 1
                logger.warning(
                    "Failed to publish notification on %s",
                    topic,
                    exc_info=True,
                )
            else:
                self.sent += 1
            finally:
                self.queue.task_done()

    def stats(self):
        return {
            "enabled": self.enabled,
            "running": self.task is not None and not self.task.done(),
            "pending": self.queue.qsize(),
            "capacity": self.queue.maxsize,
            "queued": self.queued,
            "sent": self.sent,
            "dropped": self.dropped,
            "failed": self.failed,
        }
