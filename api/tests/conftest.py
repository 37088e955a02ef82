"""Shared fixtures for the sensorthings test suite.

The resource layer only talks to storage through the Storage interface, so
the tests run against an in-memory implementation that records every write.
That makes properties such as "performs no storage writes" directly
observable without a PostgreSQL + PostGIS instance.
"""

import copy

import pytest

from sensorthings.core.context import Context
from sensorthings.core.entities import (
    DATASTREAM,
    ENTITY_TYPES,
    FEATURE_OF_INTEREST,
    LOCATION,
    OBSERVATION,
    THING,
)
from sensorthings.core.storage import Storage
from sensorthings.errors import ConflictError, NotFoundError

HOSTNAME = "http://localhost:8018"
BASE_URL = "http://localhost:8018/istsos4/v1.1"

REFERENCE_KEYS = {
    "Thing": "thing_id",
    "Datastream": "datastream_id",
    "FeatureOfInterest": "featuresofinterest_id",
}

FOREIGN_KEYS = {
    "Things": "thing_id",
    "Datastreams": "datastream_id",
    "FeaturesOfInterest": "featuresofinterest_id",
}


# ── In-memory storage ─────────────────────────────────────────────────────────


class FakeStorage(Storage):
    """Storage keeping entities in dicts, ordered by ascending id."""

    def __init__(self, top_value=100):
        self.top_value = top_value
        self.tables = {collection: {} for collection in ENTITY_TYPES}
        self.thing_locations = []
        self.writes = []
        # collection -> exception raised by the next post
        self.post_errors = {}

    # seeding, not recorded as writes

    def add(self, entity_type, entity_id=None, **properties):
        table = self.tables[entity_type.collection]
        if entity_id is None:
            entity_id = max(table, default=0) + 1
        entity = {"@iot.id": entity_id, **properties}
        table[entity_id] = entity
        return copy.deepcopy(entity)

    def link(self, thing_id, location_id):
        self.thing_locations.append((thing_id, location_id))

    def rows(self, entity_type):
        table = self.tables[entity_type.collection]
        return [copy.deepcopy(table[key]) for key in sorted(table)]

    def related(self, parent_type, navigation_property, parent_id):
        parent = self.tables[parent_type.collection][parent_id]
        related_type = parent_type.related(navigation_property)

        if {parent_type.collection, related_type.collection} == {
            "Things",
            "Locations",
        }:
            if parent_type is THING:
                ids = [l for t, l in self.thing_locations if t == parent_id]
            else:
                ids = [t for t, l in self.thing_locations if l == parent_id]
            return [
                entity
                for entity in self.rows(related_type)
                if entity["@iot.id"] in ids
            ]

        foreign_key = FOREIGN_KEYS.get(related_type.collection)
        if foreign_key in parent:
            return [
                entity
                for entity in self.rows(related_type)
                if entity["@iot.id"] == parent[foreign_key]
            ]

        foreign_key = FOREIGN_KEYS[parent_type.collection]
        return [
            entity
            for entity in self.rows(related_type)
            if entity.get(foreign_key) == parent_id
        ]

    def expand(self, entity_type, entity, options):
        if options is None:
            return entity
        for navigation_property in options.expand:
            related = self.related(
                entity_type, navigation_property, entity["@iot.id"]
            )
            if navigation_property == entity_type.related(
                navigation_property
            ).name:
                entity[navigation_property] = related[0] if related else None
            else:
                entity[navigation_property] = related
        return entity

    def page(self, entity_type, entities, options):
        top = options.top if options.top is not None else self.top_value
        skip = options.skip or 0
        page = entities[skip : skip + top]
        return (
            [self.expand(entity_type, entity, options) for entity in page],
            len(entities),
        )

    async def get(self, entity_type, entity_id, options=None):
        entity = self.tables[entity_type.collection].get(entity_id)
        if entity is None:
            raise NotFoundError(f"{entity_type.name} not found")
        return self.expand(entity_type, copy.deepcopy(entity), options)

    async def get_collection(self, entity_type, options):
        return self.page(entity_type, self.rows(entity_type), options)

    async def get_collection_by_parent(
        self, entity_type, parent_type, parent_id, options
    ):
        if parent_id not in self.tables[parent_type.collection]:
            raise NotFoundError(f"{parent_type.name} not found")
        navigation_property = next(
            name
            for name, collection in parent_type.navigation.items()
            if collection == entity_type.collection
        )
        return self.page(
            entity_type,
            self.related(parent_type, navigation_property, parent_id),
            options,
        )

    async def exists(self, entity_type, entity_id):
        return entity_id in self.tables[entity_type.collection]

    async def post(self, entity_type, payload):
        error = self.post_errors.pop(entity_type.collection, None)
        if error is not None:
            raise error

        row = {}
        for key, value in payload.items():
            if key in REFERENCE_KEYS:
                row[REFERENCE_KEYS[key]] = value["@iot.id"]
            else:
                row[key] = value

        table = self.tables[entity_type.collection]
        origin = row.get("origin_location_id")
        if origin is not None and any(
            entity.get("origin_location_id") == origin
            for entity in table.values()
        ):
            raise ConflictError(
                'duplicate key value violates unique constraint "FeaturesOfInterest_origin_location_id_key"'
            )

        entity_id = max(table, default=0) + 1
        row = {"@iot.id": entity_id, **row}
        table[entity_id] = row
        self.writes.append(("post", entity_type.collection, row))
        return copy.deepcopy(row)

    async def patch(self, entity_type, entity_id, payload):
        table = self.tables[entity_type.collection]
        if entity_id not in table:
            raise NotFoundError(f"{entity_type.name} not found")
        table[entity_id].update(payload)
        self.writes.append(("patch", entity_type.collection, payload))
        return copy.deepcopy(table[entity_id])

    async def delete(self, entity_type, entity_id):
        table = self.tables[entity_type.collection]
        if entity_id not in table:
            raise NotFoundError(f"{entity_type.name} not found")
        del table[entity_id]
        self.writes.append(("delete", entity_type.collection, entity_id))

    async def get_thing_by_datastream(self, datastream_id):
        datastream = self.tables["Datastreams"][datastream_id]
        thing = self.tables["Things"].get(datastream.get("thing_id"))
        if thing is None:
            raise NotFoundError("Thing not found")
        return copy.deepcopy(thing)

    async def get_locations_by_thing(self, thing_id):
        return self.related(THING, "Locations", thing_id)

    async def get_feature_of_interest_by_location(self, location_id):
        for entity in self.rows(FEATURE_OF_INTEREST):
            if entity.get("origin_location_id") == location_id:
                return entity
        return None


class RecordingNotifier:
    """Notifier keeping published messages in a list."""

    enabled = True

    def __init__(self):
        self.messages = []

    def publish(self, topic, message):
        self.messages.append((topic, message))

    def stats(self):
        return {"queued": len(self.messages)}


# ── Factory helpers ───────────────────────────────────────────────────────────


def make_location(storage, location_id=3, coordinates=(5, 52), **overrides):
    properties = {
        "name": "Roof of the station",
        "description": "Weather station roof",
        "encodingType": "application/vnd.geo+json",
        "location": {"type": "Point", "coordinates": list(coordinates)},
        "properties": {"elevation": 12},
    }
    properties.update(overrides)
    return storage.add(LOCATION, location_id, **properties)


def make_station(
    storage, datastream_id=7, thing_id=1, location_ids=(3,), coordinates=(5, 52)
):
    """Seed a Thing with its Locations and one Datastream."""
    storage.add(
        THING,
        thing_id,
        name="Weather station",
        description="Station on the roof",
        properties=None,
    )
    for location_id in location_ids:
        make_location(storage, location_id, coordinates)
        storage.link(thing_id, location_id)
    return storage.add(
        DATASTREAM,
        datastream_id,
        name="Air temperature",
        description="Air temperature at 2 m",
        unitOfMeasurement={"name": "Celsius", "symbol": "degC"},
        observationType="http://www.opengis.net/def/observationType/OGC-OM/2.0/OM_Measurement",
        phenomenonTime=None,
        resultTime=None,
        properties=None,
        thing_id=thing_id,
    )


def make_observation(storage, datastream_id=7, featuresofinterest_id=1, **overrides):
    properties = {
        "phenomenonTime": "2026-03-01T10:00:00Z",
        "resultTime": "2026-03-01T10:00:00Z",
        "result": 21.5,
        "resultQuality": None,
        "validTime": None,
        "parameters": None,
        "datastream_id": datastream_id,
        "featuresofinterest_id": featuresofinterest_id,
    }
    properties.update(overrides)
    return storage.add(OBSERVATION, **properties)


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def context(storage, notifier):
    return Context(
        storage=storage,
        notifier=notifier,
        base_url=BASE_URL,
        hostname=HOSTNAME,
        top_value=100,
    )
