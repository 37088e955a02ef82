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

from sensorthings.errors import (
    BadRequestError,
    ConflictError,
    InvalidPayloadError,
)
from sensorthings.utils.utils import (
    build_next_link,
    invalid_payload_keys,
    is_reference,
    missing_properties,
    validate_epsg,
    validate_payload_keys,
)

from .entities import DATASTREAM, FEATURE_OF_INTEREST, OBSERVATION
from .feature_of_interest import FeatureOfInterestResolver
from .links import apply_select, self_link, set_links
from .options import DATA_ARRAY, check_supported

logger = logging.getLogger(__name__)

FEATURE_OF_INTEREST_ALLOWED_KEYS = [
    "name",
    "description",
    "encodingType",
    "feature",
    "properties",
]

FEATURE_OF_INTEREST_REQUIRED = [
    "name",
    "description",
    "encodingType",
    "feature",
]

OBSERVATION_ALLOWED_KEYS = [
    "phenomenonTime",
    "result",
    "resultTime",
    "resultQuality",
    "validTime",
    "parameters",
    "Datastream",
    "FeatureOfInterest",
]

OBSERVATION_REQUIRED = ["result", "Datastream"]

DATA_ARRAY_COMPONENTS = ["id", "phenomenonTime", "resultTime", "result"]


def payload_errors(payload, allowed_keys, required):
    errors = [
        f"Invalid key '{key}' in payload"
        for key in invalid_payload_keys(payload, allowed_keys)
    ]
    errors += [
        f"Missing required property '{prop}'"
        for prop in missing_properties(payload, required)
    ]
    return errors


class EntityService:
    """
    Read access to one entity type.

    Every read checks the query options against the entity type before
    storage is touched, and every returned entity gets its links and the
    $select projection applied.
    """

    def __init__(self, context, entity_type):
        self.context = context
        self.entity_type = entity_type

    @property
    def storage(self):
        return self.context.storage

    def process(self, entity, options):
        entity = set_links(entity, self.entity_type, self.context.base_url)
        return apply_select(entity, self.entity_type, options)

    async def get_by_id(self, entity_id, options):
        check_supported(options, self.entity_type)
        entity = await self.storage.get(self.entity_type, entity_id, options)
        return self.process(entity, options)

    async def get_collection(self, options, full_path):
        check_supported(options, self.entity_type)
        entities, count = await self.storage.get_collection(
            self.entity_type, options
        )
        return self.collection_response(entities, count, options, full_path)

    async def get_collection_by_parent(
        self, parent_type, parent_id, options, full_path
    ):
        check_supported(options, self.entity_type)
        entities, count = await self.storage.get_collection_by_parent(
            self.entity_type, parent_type, parent_id, options
        )
        return self.collection_response(entities, count, options, full_path)

    def collection_response(self, entities, count, options, full_path):
        response = {}
        if options.count is not False:
            response["@iot.count"] = count

        next_link = build_next_link(
            count,
            full_path,
            options,
            top_value=self.context.top_value,
            hostname=self.context.hostname,
        )
        if next_link:
            response["@iot.nextLink"] = next_link

        response["value"] = self.format_value(entities, options)
        return response

    def format_value(self, entities, options):
        return [self.process(entity, options) for entity in entities]


class FeatureOfInterestService(EntityService):
    def __init__(self, context):
        super().__init__(context, FEATURE_OF_INTEREST)

    async def create(self, feature_of_interest):
        """
        Create a FeatureOfInterest.

        Args:
            feature_of_interest (dict): The FeatureOfInterest payload.

        Returns:
            dict: The stored and linked FeatureOfInterest.

        Raises:
            InvalidPayloadError: If the payload has unknown keys or misses
                mandatory properties.
        """
        errors = payload_errors(
            feature_of_interest,
            FEATURE_OF_INTEREST_ALLOWED_KEYS,
            FEATURE_OF_INTEREST_REQUIRED,
        )
        feature = feature_of_interest.get("feature")
        if feature is not None and not isinstance(feature, dict):
            errors.append("Expected 'feature' to be a GeoJSON geometry")
        if errors:
            raise InvalidPayloadError(errors)

        validate_epsg(feature)

        stored = await self.storage.post(
            FEATURE_OF_INTEREST, dict(feature_of_interest)
        )
        return set_links(stored, FEATURE_OF_INTEREST, self.context.base_url)


class ObservationService(EntityService):
    """
    Read and write access to Observations.

    A created Observation goes through validation, the Datastream
    existence check, FeatureOfInterest resolution, persistence, linking
    and finally notification, in that order. Once persisted the
    Observation stays persisted, whatever happens to the notifications.
    """

    def __init__(self, context):
        super().__init__(context, OBSERVATION)
        self.resolver = FeatureOfInterestResolver(context.storage)
        self.features_of_interest = FeatureOfInterestService(context)

    def validate(self, observation):
        errors = payload_errors(
            observation, OBSERVATION_ALLOWED_KEYS, OBSERVATION_REQUIRED
        )

        datastream = observation.get("Datastream")
        if datastream is not None and not is_reference(datastream):
            errors.append(
                "Expected 'Datastream' to be a reference {\"@iot.id\": <int>}"
            )

        feature_of_interest = observation.get("FeatureOfInterest")
        if feature_of_interest is not None and (
            not isinstance(feature_of_interest, dict)
            or (
                "@iot.id" in feature_of_interest
                and not is_reference(feature_of_interest)
            )
        ):
            errors.append(
                "Expected 'FeatureOfInterest' to be a reference "
                "{\"@iot.id\": <int>} or a new FeatureOfInterest"
            )

        if errors:
            raise InvalidPayloadError(errors)

    async def create(self, observation):
        """
        Create an Observation.

        Args:
            observation (dict): The Observation payload. It must reference
                its Datastream; the FeatureOfInterest may be a reference, a
                new entity to insert, or missing, in which case it is
                derived from the Location of the Datastream's Thing.

        Returns:
            dict: The stored and linked Observation.

        Raises:
            InvalidPayloadError: If the payload is invalid.
            BadRequestError: If the Datastream does not exist or no
                FeatureOfInterest can be derived.
            ConflictError: If the deep inserted FeatureOfInterest cannot be
                created.
        """
        self.validate(observation)
        observation = dict(observation)

        datastream_id = observation["Datastream"]["@iot.id"]
        if not await self.storage.exists(DATASTREAM, datastream_id):
            raise BadRequestError(f"Datastream {datastream_id} does not exist.")

        observation["FeatureOfInterest"] = (
            await self.resolve_feature_of_interest(
                datastream_id, observation.get("FeatureOfInterest")
            )
        )

        stored = await self.storage.post(OBSERVATION, observation)
        linked = set_links(stored, OBSERVATION, self.context.base_url)

        self.context.notifier.publish(
            f"Datastreams({datastream_id})/Observations", linked
        )
        self.context.notifier.publish("Observations", linked)

        return linked

    async def create_for_datastream(self, datastream_id, observation):
        observation = dict(observation)
        observation["Datastream"] = {"@iot.id": datastream_id}
        return await self.create(observation)

    async def resolve_feature_of_interest(
        self, datastream_id, feature_of_interest
    ):
        if feature_of_interest is None:
            try:
                feature_of_interest = await self.resolver.resolve(
                    datastream_id
                )
            except Exception as e:
                logger.info(
                    "No FeatureOfInterest derived for Datastream %s: %s",
                    datastream_id,
                    e,
                )
                raise BadRequestError(
                    "Unable to copy location of thing to featureofinterest."
                ) from e
        elif "@iot.id" not in feature_of_interest:
            try:
                feature_of_interest = await self.features_of_interest.create(
                    feature_of_interest
                )
            except Exception as e:
                logger.info(
                    "Deep insert of FeatureOfInterest failed: %s", e
                )
                raise ConflictError(
                    "Unable to create deep inserted FeatureOfInterest"
                ) from e

        return {"@iot.id": feature_of_interest["@iot.id"]}

    async def patch(self, entity_id, observation):
        if (
            observation.get("Datastream") is not None
            or observation.get("FeatureOfInterest") is not None
        ):
            raise BadRequestError("Unable to deep patch Observation")

        validate_payload_keys(observation, OBSERVATION_ALLOWED_KEYS)
        payload = {
            key: value
            for key, value in observation.items()
            if key not in ("Datastream", "FeatureOfInterest")
        }

        stored = await self.storage.patch(OBSERVATION, entity_id, payload)
        return set_links(stored, OBSERVATION, self.context.base_url)

    async def delete(self, entity_id):
        await self.storage.delete(OBSERVATION, entity_id)

    def format_value(self, entities, options):
        if options.result_format != DATA_ARRAY:
            return super().format_value(entities, options)

        components = options.select or DATA_ARRAY_COMPONENTS
        blocks = {}
        for entity in entities:
            datastream_id = entity.get("datastream_id")
            block = blocks.get(datastream_id)
            if block is None:
                block = blocks[datastream_id] = {
                    "Datastream@iot.navigationLink": self_link(
                        DATASTREAM, datastream_id, self.context.base_url
                    ),
                    "components": list(components),
                    "dataArray@iot.count": 0,
                    "dataArray": [],
                }
            block["dataArray"].append(
                [
                    entity.get("@iot.id" if name == "id" else name)
                    for name in components
                ]
            )
            block["dataArray@iot.count"] += 1

        return list(blocks.values())
