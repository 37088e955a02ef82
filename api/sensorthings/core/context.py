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


class Context:
    """
    Collaborators shared by the services of one running application.

    Args:
        storage (Storage): The storage backend.
        notifier (Notifier): Sends change notifications.
        base_url (str): External base address used for self and navigation
            links, e.g. "http://localhost:8018/istsos4/v1.1".
        hostname (str): Scheme and host prepended to request paths in
            @iot.nextLink.
        top_value (int): Page size when a request has no $top.
    """

    def __init__(self, storage, notifier, base_url, hostname, top_value):
        self.storage = storage
        self.notifier = notifier
        self.base_url = base_url
        self.hostname = hostname
        self.top_value = top_value


context: Context | None = None


def set_context(new_context):
    global context
    context = new_context


async def get_context():
    if context is None:
        raise RuntimeError("The application context is not initialized")
    return context
