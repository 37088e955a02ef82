"""Tests for the PostgreSQL storage statements.

The asyncpg pool is replaced by a recorder, so these tests check the SQL
that would be sent without a live PostgreSQL + PostGIS instance.
"""

import contextlib

import asyncpg
import pytest
from asyncpg.types import Range

from sensorthings.core.entities import (
    FEATURE_OF_INTEREST,
    OBSERVATION,
    THING,
)
from sensorthings.core.options import QueryOptions
from sensorthings.db.storage import (
    PostgresStorage,
    get_query_compiled,
    get_select_attr,
)
from sensorthings.errors import BadRequestError, ConflictError, NotFoundError
from sensorthings.models import Location, Observation
from sqlalchemy import select


class RecordingConnection:
    def __init__(self, rows=(), values=()):
        self.rows = list(rows)
        self.values = list(values)
        self.queries = []

    async def fetch(self, query, *args):
        self.queries.append((query, args))
        return self.rows.pop(0) if self.rows else []

    async def fetchval(self, query, *args):
        self.queries.append((query, args))
        value = self.values.pop(0) if self.values else None
        if isinstance(value, Exception):
            raise value
        return value


class RecordingPool:
    def __init__(self, connection):
        self.connection = connection

    @contextlib.asynccontextmanager
    async def acquire(self):
        yield self.connection


def make_storage(rows=(), values=()):
    connection = RecordingConnection(rows, values)
    return PostgresStorage(RecordingPool(connection), top_value=100), connection


def json_row(text):
    return {"json": text}


class TestSelectAttributes:
    def test_geometry_as_geojson(self):
        sql = get_query_compiled(
            select(get_select_attr(Location.location, "location"))
        )
        assert "ST_AsGeoJSON" in sql

    def test_time_range_as_interval(self):
        sql = get_query_compiled(
            select(
                get_select_attr(Observation.phenomenonTime, "phenomenonTime")
            )
        )
        assert "lower" in sql and "upper" in sql
        assert 'YYYY-MM-DD"T"HH24:MI:SS"Z"' in sql

    def test_id_label(self):
        sql = get_query_compiled(select(get_select_attr(Observation.id, "id")))
        assert '"@iot.id"' in sql


class TestReads:
    @pytest.mark.asyncio
    async def test_collection_query(self):
        storage, connection = make_storage(
            rows=[[json_row('{"@iot.id": 4, "name": "Roof"}')]], values=[12]
        )

        entities, count = await storage.get_collection(
            THING,
            QueryOptions(
                filter="name eq 'Roof'", orderby="name desc", top=5, skip=10
            ),
        )

        assert entities == [{"@iot.id": 4, "name": "Roof"}]
        assert count == 12
        count_query, _ = connection.queries[0]
        main_query, _ = connection.queries[1]
        assert "count(*)" in count_query
        assert "'Roof'" in count_query
        assert "row_to_json" in main_query
        assert "'Roof'" in main_query
        assert "DESC" in main_query
        assert "LIMIT 5" in main_query
        assert "OFFSET 10" in main_query

    @pytest.mark.asyncio
    async def test_default_page_size(self):
        storage, connection = make_storage(values=[0])

        await storage.get_collection(THING, QueryOptions())

        main_query, _ = connection.queries[1]
        assert "LIMIT 100" in main_query

    @pytest.mark.asyncio
    async def test_invalid_filter(self):
        storage, connection = make_storage()

        with pytest.raises(BadRequestError):
            await storage.get_collection(
                THING, QueryOptions(filter="name eq eq")
            )
        assert connection.queries == []

    @pytest.mark.asyncio
    async def test_get_missing(self):
        storage, _ = make_storage()

        with pytest.raises(NotFoundError):
            await storage.get(THING, 1)

    @pytest.mark.asyncio
    async def test_feature_by_location(self):
        storage, connection = make_storage(
            rows=[[json_row('{"@iot.id": 2, "origin_location_id": 3}')]]
        )

        feature = await storage.get_feature_of_interest_by_location(3)

        assert feature == {"@iot.id": 2, "origin_location_id": 3}
        assert "origin_location_id = 3" in connection.queries[0][0]


class TestWrites:
    @pytest.mark.asyncio
    async def test_post_observation(self):
        storage, connection = make_storage(
            rows=[[json_row('{"@iot.id": 11, "result": 21.5}')]], values=[11]
        )

        observation = await storage.post(
            OBSERVATION,
            {
                "result": 21.5,
                "Datastream": {"@iot.id": 7},
                "FeatureOfInterest": {"@iot.id": 2},
            },
        )

        assert observation == {"@iot.id": 11, "result": 21.5}
        insert_query, values = connection.queries[0]
        assert 'INSERT INTO sensorthings."Observation"' in insert_query
        assert '"datastream_id"' in insert_query
        assert values[:3] == ("21.5", 7, 2)
        # phenomenonTime defaults to the time of insertion
        assert isinstance(values[3], Range)

    @pytest.mark.asyncio
    async def test_post_feature_geometry(self):
        storage, connection = make_storage(
            rows=[[json_row('{"@iot.id": 1}')]], values=[1]
        )

        await storage.post(
            FEATURE_OF_INTEREST,
            {
                "name": "Roof",
                "description": "Roof",
                "encodingType": "application/vnd.geo+json",
                "feature": {"type": "Point", "coordinates": [5, 52]},
                "origin_location_id": 3,
            },
        )

        insert_query, values = connection.queries[0]
        assert "ST_GeomFromGeoJSON($4)" in insert_query
        assert values[3] == '{"type":"Point","coordinates":[5,52]}'
        assert values[4] == 3

    @pytest.mark.asyncio
    async def test_unique_violation_is_a_conflict(self):
        storage, _ = make_storage(
            values=[asyncpg.exceptions.UniqueViolationError("duplicate key")]
        )

        with pytest.raises(ConflictError):
            await storage.post(
                FEATURE_OF_INTEREST,
                {
                    "name": "Roof",
                    "description": "Roof",
                    "encodingType": "application/vnd.geo+json",
                    "feature": {"type": "Point", "coordinates": [5, 52]},
                    "origin_location_id": 3,
                },
            )

    @pytest.mark.asyncio
    async def test_patch_missing(self):
        storage, _ = make_storage(values=[None])

        with pytest.raises(NotFoundError):
            await storage.patch(OBSERVATION, 5, {"result": 1})

    @pytest.mark.asyncio
    async def test_delete_missing(self):
        storage, connection = make_storage(values=[None])

        with pytest.raises(NotFoundError):
            await storage.delete(OBSERVATION, 5)
        assert connection.queries[0][1] == (5,)
