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
Storage used by the resource layer.

Entities are dicts shaped like SensorThings JSON with an "@iot.id" key.
Stored entities also carry their foreign keys (e.g. "datastream_id") and,
when $expand asks for it, the related entities under the navigation
property name.

Implementations raise NotFoundError when an addressed entity does not
exist and ConflictError when a write violates a uniqueness constraint.
Any other failure propagates unchanged.
"""

from abc import ABC, abstractmethod


class Storage(ABC):
    @abstractmethod
    async def get(self, entity_type, entity_id, options=None):
        """Return one entity."""

    @abstractmethod
    async def get_collection(self, entity_type, options):
        """Return (entities, total_count) for a whole collection."""

    @abstractmethod
    async def get_collection_by_parent(
        self, entity_type, parent_type, parent_id, options
    ):
        """Return (entities, total_count) related to one parent entity."""

    @abstractmethod
    async def exists(self, entity_type, entity_id):
        """Whether the entity exists."""

    @abstractmethod
    async def post(self, entity_type, payload):
        """Persist a new entity and return it as stored."""

    @abstractmethod
    async def patch(self, entity_type, entity_id, payload):
        """Update the given properties and return the entity as stored."""

    @abstractmethod
    async def delete(self, entity_type, entity_id):
        """Delete an entity."""

    @abstractmethod
    async def get_thing_by_datastream(self, datastream_id):
        """Return the Thing owning a Datastream."""

    @abstractmethod
    async def get_locations_by_thing(self, thing_id):
        """Return the Locations of a Thing, in storage order."""

    @abstractmethod
    async def get_feature_of_interest_by_location(self, location_id):
        """Return the FeatureOfInterest derived from a Location, or None."""
