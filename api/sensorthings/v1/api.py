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

import ujson
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sensorthings.v1.endpoints.create import (
    feature_of_interest as create_feature_of_interest,
)
from sensorthings.v1.endpoints.create import observation as create_observation
from sensorthings.v1.endpoints.delete import observation as delete_observation
from sensorthings.v1.endpoints.read import read
from sensorthings.v1.endpoints.update import observation as update_observation


class UJSONResponse(JSONResponse):
    def render(self, content):
        return ujson.dumps(
            content, ensure_ascii=False, escape_forward_slashes=False
        ).encode("utf-8")


tags_metadata = [
    {
        "name": "Read",
        "description": "Read operations for SensorThings API.",
    },
    {
        "name": "FeaturesOfInterest",
        "description": "A feature about which observations are made.",
    },
    {
        "name": "Observations",
        "description": "Individual measurements recorded at a given point in time.",
    },
]

v1 = FastAPI(
    title="OGC SensorThings API",
    description="A SensorThings API implementation in Python using FastAPI.",
    version="1.1",
    openapi_tags=tags_metadata,
    default_response_class=UJSONResponse,
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

# Register the create endpoints
v1.include_router(create_feature_of_interest.v1)
v1.include_router(create_observation.v1)

# Register the update endpoints
v1.include_router(update_observation.v1)

# Register the delete endpoints
v1.include_router(delete_observation.v1)

# Register the read endpoints last, they catch every GET path
v1.include_router(read.v1)
