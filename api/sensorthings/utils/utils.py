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

import urllib.parse

from asyncpg.types import Range
from dateutil import parser
from sensorthings import EPSG, HOSTNAME, TOP_VALUE
from sensorthings.errors import BadRequestError


def handle_datetime_fields(payload, datastream=False):
    """
    Converts datetime fields in the payload to datetime objects.

    Intervals ("start/end") and phenomenonTime become ranges, anything else
    a single datetime.

    Args:
        payload (dict): The payload containing the data.
        datastream (bool): Whether resultTime is a range, as on Datastreams.

    Returns:
        None
    """
    for key in list(payload.keys()):
        if "time" not in key.lower() or not isinstance(payload[key], str):
            continue
        if "/" in payload[key]:
            start_time, end_time = payload[key].split("/")
            payload[key] = Range(
                parser.parse(start_time),
                parser.parse(end_time),
                upper_inc=True,
            )
        elif key == "phenomenonTime" or (datastream and key == "resultTime"):
            payload[key] = Range(
                parser.parse(payload[key]),
                parser.parse(payload[key]),
                upper_inc=True,
            )
        else:
            payload[key] = parser.parse(payload[key])


def invalid_payload_keys(payload, keys):
    return [key for key in payload.keys() if key not in keys]


def validate_payload_keys(payload, keys):
    invalid_keys = invalid_payload_keys(payload, keys)
    if invalid_keys:
        raise BadRequestError(
            f"Invalid keys in payload: {', '.join(invalid_keys)}"
        )


def missing_properties(payload, required_properties):
    """
    List the required properties that are absent or null in the payload.

    Args:
        payload (dict): The payload containing the properties.
        required_properties (list): The list of required properties.

    Returns:
        list: The missing property names, in the order they were required.
    """
    return [
        prop for prop in required_properties if payload.get(prop) is None
    ]


def is_reference(value):
    """Whether value links an existing entity, i.e. {"@iot.id": <int>}."""
    return (
        isinstance(value, dict)
        and list(value.keys()) == ["@iot.id"]
        and isinstance(value["@iot.id"], int)
        and not isinstance(value["@iot.id"], bool)
    )


def validate_epsg(key):
    crs = key.get("crs")
    if crs is not None:
        epsg_code = int(crs["properties"].get("name").split(":")[1])
        if epsg_code != EPSG:
            raise BadRequestError(
                f"Invalid EPSG code. Expected {EPSG}, got {epsg_code}"
            )


def build_next_link(
    total_count, full_path, options, top_value=TOP_VALUE, hostname=HOSTNAME
):
    """
    Build the @iot.nextLink of a collection page.

    Every query segment of the original request is kept as it was sent;
    only $skip is advanced by the page size, and $top is added when the
    request relied on the default page size.

    Args:
        total_count (int): Number of entities matching the request.
        full_path (str): Request path including the query string.
        options (QueryOptions): The parsed query options of the request.
        top_value (int): Page size used when the request has no $top.
        hostname (str): Scheme and host prepended to the path.

    Returns:
        str | None: The link, or None when this page is the last one.
    """
    top = options.top if options.top is not None else top_value
    skip = options.skip or 0

    if top <= 0 or total_count <= skip + top:
        return None

    path, _, query = full_path.partition("?")
    segments = [
        segment
        for segment in query.split("&")
        if segment
        and urllib.parse.unquote(segment.split("=", 1)[0]) != "$skip"
    ]
    if options.top is None:
        segments.append(f"$top={top}")
    segments.append(f"$skip={skip + top}")

    return f"{hostname}{path}?{'&'.join(segments)}"


def check_content_type(request):
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("application/json"):
        raise BadRequestError(
            "Only content-type application/json is supported."
        )
