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
SensorThings entity types.

Each entity type carries what the resource layer needs to know about it:
its collection name, its properties, its navigation properties and the
query options it accepts.
"""

FILTER = "$filter"
EXPAND = "$expand"
SELECT = "$select"
ORDERBY = "$orderby"
TOP = "$top"
SKIP = "$skip"
COUNT = "$count"
RESULT_FORMAT = "$resultFormat"

COMMON_OPTIONS = frozenset(
    [FILTER, EXPAND, SELECT, ORDERBY, TOP, SKIP, COUNT]
)


class EntityType:
    def __init__(
        self,
        name,
        collection,
        properties,
        sortable,
        navigation,
        foreign_keys=(),
        options=COMMON_OPTIONS,
    ):
        self.name = name
        self.collection = collection
        self.properties = tuple(properties)
        self.sortable = frozenset(sortable) | {"id"}
        # navigation property -> collection of the related entity type
        self.navigation = dict(navigation)
        self.foreign_keys = tuple(foreign_keys)
        self.options = frozenset(options)

    def supports(self, option):
        return option in self.options

    def is_selectable(self, name):
        return (
            name in ("id", "selfLink")
            or name in self.properties
            or name in self.navigation
        )

    def related(self, navigation_property):
        return ENTITY_TYPES[self.navigation[navigation_property]]

    def __repr__(self):
        return f"EntityType({self.name})"


THING = EntityType(
    "Thing",
    "Things",
    properties=["name", "description", "properties"],
    sortable=["name", "description"],
    navigation={"Locations": "Locations", "Datastreams": "Datastreams"},
)

LOCATION = EntityType(
    "Location",
    "Locations",
    properties=[
        "name",
        "description",
        "encodingType",
        "location",
        "properties",
    ],
    sortable=["name", "description", "encodingType"],
    navigation={"Things": "Things"},
)

DATASTREAM = EntityType(
    "Datastream",
    "Datastreams",
    properties=[
        "name",
        "description",
        "unitOfMeasurement",
        "observationType",
        "phenomenonTime",
        "resultTime",
        "properties",
    ],
    sortable=[
        "name",
        "description",
        "observationType",
        "phenomenonTime",
        "resultTime",
    ],
    navigation={"Thing": "Things", "Observations": "Observations"},
    foreign_keys=["thing_id"],
)

FEATURE_OF_INTEREST = EntityType(
    "FeatureOfInterest",
    "FeaturesOfInterest",
    properties=[
        "name",
        "description",
        "encodingType",
        "feature",
        "properties",
    ],
    sortable=["name", "description", "encodingType"],
    navigation={"Observations": "Observations"},
    foreign_keys=["origin_location_id"],
)

OBSERVATION = EntityType(
    "Observation",
    "Observations",
    properties=[
        "phenomenonTime",
        "resultTime",
        "result",
        "resultQuality",
        "validTime",
        "parameters",
    ],
    sortable=["phenomenonTime", "resultTime", "result", "validTime"],
    navigation={
        "Datastream": "Datastreams",
        "FeatureOfInterest": "FeaturesOfInterest",
    },
    foreign_keys=["datastream_id", "featuresofinterest_id"],
    options=COMMON_OPTIONS | {RESULT_FORMAT},
)

ENTITY_TYPES = {
    entity_type.collection: entity_type
    for entity_type in (
        THING,
        LOCATION,
        DATASTREAM,
        FEATURE_OF_INTEREST,
        OBSERVATION,
    )
}
