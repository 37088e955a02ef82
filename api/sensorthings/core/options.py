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

from dataclasses import dataclass, field
from typing import List, Optional

from sensorthings.errors import UnsupportedOptionError

from .entities import (
    COUNT,
    EXPAND,
    FILTER,
    ORDERBY,
    RESULT_FORMAT,
    SELECT,
    SKIP,
    TOP,
)

DATA_ARRAY = "dataArray"


@dataclass
class QueryOptions:
    """Query options of a request, already split into their parts."""

    filter: Optional[str] = None
    expand: List[str] = field(default_factory=list)
    select: List[str] = field(default_factory=list)
    orderby: Optional[str] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    count: Optional[bool] = None
    result_format: Optional[str] = None

    def requested(self):
        """
        List the option kinds present in the request, in a stable order.

        Returns:
            list: The option kinds, e.g. ["$top", "$expand"].
        """
        present = {
            FILTER: self.filter is not None,
            EXPAND: bool(self.expand),
            SELECT: bool(self.select),
            ORDERBY: self.orderby is not None,
            TOP: self.top is not None,
            SKIP: self.skip is not None,
            COUNT: self.count is not None,
            RESULT_FORMAT: self.result_format is not None,
        }
        return [option for option, is_set in present.items() if is_set]

    def orderby_items(self):
        """
        Split $orderby into (property, direction) pairs.

        Raises:
            UnsupportedOptionError: If a direction is neither asc nor desc.
        """
        if not self.orderby:
            return []

        items = []
        for part in self.orderby.split(","):
            tokens = part.split()
            if not tokens:
                continue
            name = tokens[0]
            order = tokens[1].lower() if len(tokens) > 1 else "asc"
            if len(tokens) > 2 or order not in ("asc", "desc"):
                raise UnsupportedOptionError(
                    f"Invalid $orderby expression '{part.strip()}'"
                )
            items.append((name, order))
        return items


def check_supported(options, entity_type):
    """
    Check that every requested query option is legal for the entity type.

    Args:
        options (QueryOptions): The parsed query options.
        entity_type (EntityType): The entity type addressed by the request.

    Raises:
        UnsupportedOptionError: On the first option that is not supported.
    """
    for option in options.requested():
        if not entity_type.supports(option):
            raise UnsupportedOptionError(
                f"Illegal operation: {option} is not supported for /{entity_type.collection}"
            )

    for name in options.select:
        if not entity_type.is_selectable(name):
            raise UnsupportedOptionError(
                f"Invalid property '{name}' in $select for {entity_type.name}"
            )

    for name in options.expand:
        if "(" in name or "/" in name:
            raise UnsupportedOptionError(
                f"Nested query options in $expand are not supported: {name}"
            )
        if name not in entity_type.navigation:
            raise UnsupportedOptionError(
                f"Invalid navigation property '{name}' in $expand for {entity_type.name}"
            )

    for name, _ in options.orderby_items():
        if name not in entity_type.sortable:
            raise UnsupportedOptionError(
                f"Invalid property '{name}' in $orderby for {entity_type.name}"
            )

    if (
        options.result_format is not None
        and options.result_format != DATA_ARRAY
    ):
        raise UnsupportedOptionError(
            f"Invalid $resultFormat '{options.result_format}'"
        )
