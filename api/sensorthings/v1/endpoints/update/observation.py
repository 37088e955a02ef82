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

from fastapi import APIRouter, Body, Depends, Request, status
from sensorthings.core.context import get_context
from sensorthings.core.services import ObservationService
from sensorthings.errors import error_response
from sensorthings.utils.utils import check_content_type

v1 = APIRouter()

PAYLOAD_EXAMPLE = {
    "phenomenonTime": "2015-03-03T00:00:00Z",
    "resultTime": "2015-03-03T00:00:00Z",
    "result": 3,
    "resultQuality": "100",
}


@v1.api_route(
    "/observations({observation_id})",
    methods=["PATCH"],
    tags=["Observations"],
    summary="Update an Observation",
    description="Update an Observation",
    status_code=status.HTTP_200_OK,
)
async def update_observation(
    request: Request,
    observation_id: int,
    payload: dict = Body(example=PAYLOAD_EXAMPLE),
    context=Depends(get_context),
):
    try:
        check_content_type(request)
        return await ObservationService(context).patch(
            observation_id, payload
        )
    except Exception as e:
        return error_response(e)
