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
Errors raised by the resource layer.

Every error maps to the JSON body returned by all endpoints:

    {"code": 400, "type": "error", "message": "..."}
"""

import logging

from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_content(self):
        return {
            "code": self.status_code,
            "type": "error",
            "message": self.message,
        }


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnsupportedOptionError(BadRequestError):
    pass


class InvalidPayloadError(BadRequestError):
    """A payload with one or more problems, all reported at once."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))

    def to_content(self):
        content = super().to_content()
        content["errors"] = self.errors
        return content


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


def error_response(e):
    """
    Build the JSON error response for an exception raised by a handler.

    Args:
        e (Exception): The exception.

    Returns:
        JSONResponse: The error response.
    """
    if isinstance(e, ApiError):
        return JSONResponse(status_code=e.status_code, content=e.to_content())

    logger.exception("Request failed")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"code": 400, "type": "error", "message": str(e)},
    )
