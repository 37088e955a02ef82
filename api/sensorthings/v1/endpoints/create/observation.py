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
from fastapi.responses import JSONResponse
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
    "Datastream": {"@iot.id": 1},
}

PAYLOAD_EXAMPLE_DATASTREAM = {
    "phenomenonTime": "2015-03-03T00:00:00Z",
    "resultTime": "2015-03-03T00:00:00Z",
    "result": 3,
    "resultQuality": "100",
}


def created(observation):
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=observation,
        headers={"location": observation["@iot.selfLink"]},
    )


@v1.api_route(
    "/observations",
    methods=["POST"],
    tags=["Observations"],
    summary="Create a new Observation",
    description="Create a new Observation entity.",
    status_code=status.HTTP_201_CREATED,
)
async def create_observation(
    request: Request,
    payload: dict = Body(example=PAYLOAD_EXAMPLE),
    context=Depends(get_context),
):
    try:
        check_content_type(request)
        observation = await ObservationService(context).create(payload)
        return created(observation)
    except Exception as e:
        return error_response(e)


@v1.api_route(
    "/datastreams({datastream_id})/observations",
    methods=["POST"],
    tags=["Observations"],
    summary="Create a new Observation for a Datastream",
    description="Create a new Observation entity for a Datastream.",
    status_code=status.HTTP_201_CREATED,
)
async def create_observation_for_datastream(
    request: Request,
    datastream_id: int,
    payload: dict = Body(example=PAYLOAD_EXAMPLE_DATASTREAM),
    context=Depends(get_context),
):
    try:
        check_content_type(request)
        observation = await ObservationService(
            context
        ).create_for_datastream(datastream_id, payload)
        return created(observation)
    except Exception as e:
        return error_response(e)
