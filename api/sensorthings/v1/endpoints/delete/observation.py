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

from fastapi import APIRouter, Depends, Response, status
from sensorthings.core.context import get_context
from sensorthings.core.services import ObservationService
from sensorthings.errors import error_response

v1 = APIRouter()


@v1.api_route(
    "/observations({observation_id})",
    methods=["DELETE"],
    tags=["Observations"],
    summary="Delete an Observation",
    description="Delete an Observation by ID",
    status_code=status.HTTP_200_OK,
)
async def delete_observation(
    observation_id: int,
    context=Depends(get_context),
):
    try:
        await ObservationService(context).delete(observation_id)
        return Response(status_code=status.HTTP_200_OK)
    except Exception as e:
        return error_response(e)
