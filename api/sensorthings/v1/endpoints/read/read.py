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

import re

from fastapi import APIRouter, Depends, Request
from sensorthings import HOSTNAME, SUBPATH, VERSION
from sensorthings.core.context import get_context
from sensorthings.core.entities import ENTITY_TYPES, OBSERVATION
from sensorthings.core.services import EntityService, ObservationService
from sensorthings.errors import NotFoundError, error_response
from sensorthings.settings import serverSettings, tables

from .query_parameters import CommonQueryParams, get_common_query_params

v1 = APIRouter()

PATH_PATTERN = re.compile(
    r"^(?P<collection>\w+)(?:\((?P<id>\d+)\))?(?:/(?P<navigation>\w+))?/?$"
)

COLLECTIONS = {
    collection.lower(): entity_type
    for collection, entity_type in ENTITY_TYPES.items()
}


def handle_root():
    """
    Handle the root path.

    Returns:
        dict: The response containing the value and server settings.
    """
    value = []
    # append the domain to the path for each table
    for table in tables:
        value.append(
            {
                "name": table,
                "url": f"{HOSTNAME}{SUBPATH}{VERSION}" + "/" + table,
            }
        )

    response = {
        "value": value,
        "serverSettings": serverSettings,
    }
    return response


def get_service(context, entity_type):
    if entity_type is OBSERVATION:
        return ObservationService(context)
    return EntityService(context, entity_type)


def parse_path(path_name):
    """
    Resolve a resource path such as "Things(1)/Datastreams".

    Returns:
        tuple: (entity_type, entity_id, navigation_property); entity_id and
            navigation_property are None when absent.

    Raises:
        NotFoundError: If the path does not address a known resource.
    """
    match = PATH_PATTERN.match(path_name)
    if match is None:
        raise NotFoundError("Not Found")

    entity_type = COLLECTIONS.get(match["collection"].lower())
    if entity_type is None:
        raise NotFoundError("Not Found")

    entity_id = int(match["id"]) if match["id"] is not None else None
    navigation_property = None
    if match["navigation"] is not None:
        if entity_id is None:
            raise NotFoundError("Not Found")
        navigation = {
            name.lower(): name for name in entity_type.navigation
        }
        navigation_property = navigation.get(match["navigation"].lower())
        if navigation_property is None:
            raise NotFoundError("Not Found")

    return entity_type, entity_id, navigation_property


@v1.api_route(
    "/{path_name:path}",
    methods=["GET"],
    tags=["Read"],
    summary="Read entities",
    description="Read a collection, an entity or the entities related to an entity",
)
async def read_entities(
    request: Request,
    path_name: str,
    context=Depends(get_context),
    params: CommonQueryParams = Depends(get_common_query_params),
):
    if not path_name:
        return handle_root()

    try:
        full_path = request.url.path
        if request.url.query:
            full_path += "?" + request.url.query

        options = params.to_options()
        entity_type, entity_id, navigation_property = parse_path(path_name)

        if entity_id is None:
            service = get_service(context, entity_type)
            return await service.get_collection(options, full_path)

        if navigation_property is None:
            service = get_service(context, entity_type)
            return await service.get_by_id(entity_id, options)

        related_type = entity_type.related(navigation_property)
        service = get_service(context, related_type)
        response = await service.get_collection_by_parent(
            entity_type, entity_id, options, full_path
        )
        if navigation_property != related_type.name:
            return response

        # single related entity, e.g. Datastreams(1)/Thing
        if not response["value"]:
            raise NotFoundError(f"{related_type.name} not found")
        return response["value"][0]
    except Exception as e:
        return error_response(e)
