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

import logging

from sensorthings.errors import ConflictError, NotFoundError

from .entities import DATASTREAM, FEATURE_OF_INTEREST

logger = logging.getLogger(__name__)


def location_to_feature_of_interest(location):
    """
    Build the FeatureOfInterest derived from a Location.

    Args:
        location (dict): The stored Location.

    Returns:
        dict: A FeatureOfInterest payload pointing back at the Location.
    """
    return {
        "name": location.get("name"),
        "description": location.get("description"),
        "encodingType": location.get("encodingType"),
        "feature": location.get("location"),
        "properties": location.get("properties"),
        "origin_location_id": location["@iot.id"],
    }


class FeatureOfInterestResolver:
    """
    Derives the FeatureOfInterest of an Observation from the Location of
    the Thing producing it.

    One FeatureOfInterest exists per origin Location. Storage enforces it
    with a unique constraint; when two ingestions race to create the same
    one, the loser gets a ConflictError and reads the winner's entity.
    """

    def __init__(self, storage):
        self.storage = storage

    async def get_location(self, datastream_id):
        if not await self.storage.exists(DATASTREAM, datastream_id):
            raise NotFoundError("Datastream not found")

        try:
            thing = await self.storage.get_thing_by_datastream(datastream_id)
        except NotFoundError:
            raise NotFoundError("Thing by datastream not found")

        locations = await self.storage.get_locations_by_thing(
            thing["@iot.id"]
        )
        if not locations:
            raise NotFoundError("No location found for datastream.Thing")

        # first location in storage order
        return locations[0]

    async def resolve(self, datastream_id):
        """
        Return the FeatureOfInterest for a Datastream, creating it if needed.

        Args:
            datastream_id (int): The Datastream the Observation belongs to.

        Returns:
            dict: The stored FeatureOfInterest.

        Raises:
            NotFoundError: If the Datastream, its Thing or a Location of
                the Thing does not exist.
        """
        location = await self.get_location(datastream_id)
        location_id = location["@iot.id"]

        feature_of_interest = (
            await self.storage.get_feature_of_interest_by_location(location_id)
        )
        if feature_of_interest is not None:
            logger.debug(
                "Reusing FeatureOfInterest %s of Location %s",
                feature_of_interest["@iot.id"],
                location_id,
            )
            return feature_of_interest

        try:
            feature_of_interest = await self.storage.post(
                FEATURE_OF_INTEREST, location_to_feature_of_interest(location)
            )
        except ConflictError:
            feature_of_interest = (
                await self.storage.get_feature_of_interest_by_location(
                    location_id
                )
            )
            if feature_of_interest is None:
                raise
            return feature_of_interest

        logger.debug(
            "Created FeatureOfInterest %s from Location %s",
            feature_of_interest["@iot.id"],
            location_id,
        )
        return feature_of_interest
