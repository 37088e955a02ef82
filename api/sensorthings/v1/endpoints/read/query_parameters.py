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

from fastapi import Depends, Query
from sensorthings.core.options import QueryOptions


def split_top_level(value):
    """
    Split a comma separated option value, ignoring commas inside
    parentheses, e.g. "Thing,Observations($top=1;$select=id,result)".
    """
    if not value:
        return []

    parts, depth, current = [], 0, ""
    for char in value:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    parts.append(current.strip())
    return [part for part in parts if part]


class CommonQueryParams:

    def __init__(
        self,
        skip: int = Query(
            None,
            alias="$skip",
            ge=0,
            description="The number of elements to skip from the collection",
        ),
        top: int = Query(
            None,
            alias="$top",
            ge=0,
            description="The number of elements to return",
        ),
        count: bool = Query(
            None,
            alias="$count",
            description="Flag indicating if the total number of items in the collection should be returned.",
        ),
        order: str = Query(
            None,
            alias="$orderby",
            description="The order in which the elements should be returned",
        ),
        select: str = Query(
            None,
            alias="$select",
            description="The list of properties that need to be returned",
        ),
        expand: str = Query(
            None,
            alias="$expand",
            description="The list of related entities that need to be included in the result",
        ),
        filter: str = Query(
            None, alias="$filter", description="A filter query"
        ),
        result_format: str = Query(
            None,
            alias="$resultFormat",
            description="The format of the result, only dataArray is supported",
        ),
    ):
        self.skip = skip
        self.top = top
        self.count = count
        self.order = order
        self.select = select
        self.expand = expand
        self.filter = filter
        self.result_format = result_format

    def to_options(self):
        return QueryOptions(
            filter=self.filter,
            expand=split_top_level(self.expand),
            select=split_top_level(self.select),
            orderby=self.order,
            top=self.top,
            skip=self.skip,
            count=self.count,
            result_format=self.result_format,
        )


def get_common_query_params(
    params: CommonQueryParams = Depends(),
) -> CommonQueryParams:
    return params
