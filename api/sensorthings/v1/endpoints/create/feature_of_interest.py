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
from sensorthings.core.services import FeatureOfInterestService
from sensorthings.errors import error_response
from sensorthings.utils.utils import check_content_type

v1 = APIRouter()

PAYLOAD_EXAMPLE = {
    "name": "Underground Air Quality in NYC train tunnels",
    "description": "Underground Air Quality in NYC train tunnels",
    "encodingType": "application/vnd.geo+json",
    "feature": {"type": "Point", "coordinates": [8.96, 46.0]},
}


@v1.api_route(
    "/featuresofinterest",
    methods=["POST"],
    tags=["FeaturesOfInterest"],
    summary="Create a new FeatureOfInterest",
    description="Create a new FeatureOfInterest entity.",
    status_code=status.HTTP_201_CREATED,
)
async def create_feature_of_interest(
    request: Request,
    payload: dict = Body(example=PAYLOAD_EXAMPLE),
    context=Depends(get_context),
):
    try:
        check_content_type(request)
        feature_of_interest = await FeatureOfInterestService(context).create(
            payload
        )
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=feature_of_interest,
            headers={"location": feature_of_interest["@iot.selfLink"]},
        )
    except Exception as e:
        return error_response(e)
