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

from sensorthings import ADMIN_SEGMENT


class LowerCaseURIMiddleware:
    """
    Lower-case the path of every HTTP request so that resource paths match
    whatever casing the client used.

    Paths containing the administrative segment keep their casing. The
    query string is never touched.
    """

    def __init__(self, app, admin_segment=ADMIN_SEGMENT):
        self.app = app
        self.admin_segment = admin_segment.lower()

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            path = scope["path"].lower()
            if self.admin_segment not in path:
                scope = dict(scope)
                scope["path"] = path
                if scope.get("raw_path"):
                    scope["raw_path"] = scope["raw_path"].lower()
        await self.app(scope, receive, send)
