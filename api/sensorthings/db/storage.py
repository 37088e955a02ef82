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
PostgreSQL storage.

Reads are SQLAlchemy statements over the models, compiled with literal
binds and executed on the asyncpg pool; every row comes back as one JSON
document built by row_to_json. Writes are plain parameterised statements.
"""

import logging
from datetime import datetime, timezone

import asyncpg
import ujson
from asyncpg.types import Range
from geoalchemy2 import Geometry
from odata_query.exceptions import ODataException
from odata_query.sqlalchemy import apply_odata_query
from sensorthings import EPSG, TOP_VALUE
from sensorthings.core.entities import (
    DATASTREAM,
    FEATURE_OF_INTEREST,
    LOCATION,
    OBSERVATION,
    THING,
)
from sensorthings.core.storage import Storage
from sensorthings.errors import BadRequestError, ConflictError, NotFoundError
from sensorthings.models import (
    Datastream,
    FeaturesOfInterest,
    Location,
    Observation,
    Thing,
)
from sensorthings.utils.utils import handle_datetime_fields
from sqlalchemy import asc, case, desc, exists, func, literal_column, select
from sqlalchemy.dialects.postgresql.base import TIMESTAMP
from sqlalchemy.dialects.postgresql.json import JSONB
from sqlalchemy.dialects.postgresql.ranges import TSTZRANGE
from sqlalchemy.sql import text
from sqlalchemy.sql.sqltypes import JSON, String, Text

from .sqlalchemy_db import SCHEMA_NAME, Base, engine

logger = logging.getLogger(__name__)

MODELS = {
    THING.collection: Thing,
    LOCATION.collection: Location,
    DATASTREAM.collection: Datastream,
    FEATURE_OF_INTEREST.collection: FeaturesOfInterest,
    OBSERVATION.collection: Observation,
}

# reference in a write payload -> foreign key column
RELATION_COLUMNS = {
    "Thing": "thing_id",
    "Datastream": "datastream_id",
    "FeatureOfInterest": "featuresofinterest_id",
}

DATETIME_FORMAT = 'YYYY-MM-DD"T"HH24:MI:SS"Z"'


def to_char(attr):
    return func.to_char(func.timezone("UTC", attr), DATETIME_FORMAT)


def get_select_attr(attr, label):
    if isinstance(attr.type, Geometry):
        return func.ST_AsGeoJSON(attr).cast(JSONB).label(label)
    elif isinstance(attr.type, TSTZRANGE):
        lower_bound = func.lower(attr)
        upper_bound = func.upper(attr)
        return case(
            (attr.is_(None), None),
            (lower_bound == upper_bound, to_char(lower_bound)),
            else_=func.concat(to_char(lower_bound), "/", to_char(upper_bound)),
        ).label(label)
    elif isinstance(attr.type, TIMESTAMP):
        return to_char(attr).label(label)
    return attr.label("@iot.id" if label == "id" else label)


def get_orderby_attr(model, items):
    ordering = []
    for name, order in items:
        attr = getattr(model, name)
        if isinstance(attr.type, (String, Text)):
            attr = attr.collate("C")
        ordering.append(asc(attr) if order == "asc" else desc(attr))
    return ordering


def get_query_compiled(query):
    return str(
        query.compile(
            dialect=engine.dialect,
            compile_kwargs={"literal_binds": True},
        )
    )


def get_filter_condition(model, odata_filter):
    """
    Translate a $filter expression into a condition on the model's id.

    Raises:
        BadRequestError: If the expression cannot be parsed or refers to
            unknown properties.
    """
    try:
        filtered = apply_odata_query(select(model), odata_filter).subquery()
    except ODataException as e:
        raise BadRequestError(f"Invalid $filter '{odata_filter}': {e}")
    return model.id.in_(select(filtered.c.id))


def get_navigation(parent_type, entity_type):
    for navigation_property, collection in parent_type.navigation.items():
        if collection == entity_type.collection:
            return navigation_property
    raise BadRequestError(
        f"{parent_type.name} has no {entity_type.collection}"
    )


def get_related_condition(parent_type, navigation_property, parent_id):
    """
    Condition selecting the entities reached from one parent entity through
    a navigation property.
    """
    parent_model = MODELS[parent_type.collection]
    relationship = parent_model.__mapper__.relationships[navigation_property]
    model = MODELS[parent_type.related(navigation_property).collection]
    back = getattr(model, relationship.back_populates)
    if back.property.uselist:
        return back.any(parent_model.id == parent_id)
    return back.has(parent_model.id == parent_id)


class PostgresStorage(Storage):
    def __init__(self, pool, top_value=TOP_VALUE):
        self.pool = pool
        self.top_value = top_value

    async def ensure_schema(self):
        """
        Create the schema and the tables that are missing.

        Databases created before FeaturesOfInterest were tied to their
        origin Location get the column and its unique index added.
        """
        async with engine.begin() as connection:
            await connection.execute(
                text("CREATE EXTENSION IF NOT EXISTS postgis")
            )
            await connection.execute(
                text(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA_NAME}")
            )
            await connection.run_sync(Base.metadata.create_all)
            await connection.execute(
                text(
                    f'ALTER TABLE {SCHEMA_NAME}."FeaturesOfInterest" '
                    "ADD COLUMN IF NOT EXISTS origin_location_id integer "
                    f'REFERENCES {SCHEMA_NAME}."Location"(id) ON DELETE SET NULL'
                )
            )
            await connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS "FeaturesOfInterest_origin_location_id_key" '
                    f'ON {SCHEMA_NAME}."FeaturesOfInterest" (origin_location_id)'
                )
            )
        logger.info("Schema %s ready", SCHEMA_NAME)

    def select_entities(self, entity_type, *conditions):
        model = MODELS[entity_type.collection]
        columns = [
            get_select_attr(getattr(model, name), name)
            for name in (
                "id",
                *entity_type.properties,
                *entity_type.foreign_keys,
            )
        ]
        return select(*columns).where(*conditions)

    async def fetch(self, query):
        main_query = query.alias("main_query")
        query = select(
            func.row_to_json(literal_column("main_query")).label("json")
        ).select_from(main_query)

        async with self.pool.acquire() as connection:
            rows = await connection.fetch(get_query_compiled(query))
        return [ujson.loads(row["json"]) for row in rows]

    async def fetch_entities(self, entity_type, conditions, options=None):
        """
        Run a collection query.

        Returns:
            tuple: The page of entities and the total number of matches.
        """
        model = MODELS[entity_type.collection]
        if options is not None and options.filter:
            conditions = [
                *conditions,
                get_filter_condition(model, options.filter),
            ]

        query = self.select_entities(entity_type, *conditions)

        async with self.pool.acquire() as connection:
            count = await connection.fetchval(
                get_query_compiled(
                    select(func.count()).select_from(query.subquery())
                )
            )

        ordering = []
        top = self.top_value
        skip = 0
        if options is not None:
            ordering = get_orderby_attr(model, options.orderby_items())
            if options.top is not None:
                top = options.top
            skip = options.skip or 0

        query = (
            query.order_by(*ordering, asc(model.id)).limit(top).offset(skip)
        )
        entities = await self.fetch(query)

        if options is not None and options.expand:
            await self.expand(entity_type, entities, options.expand)

        return entities, count

    async def expand(self, entity_type, entities, expand):
        model = MODELS[entity_type.collection]
        for navigation_property in expand:
            related_type = entity_type.related(navigation_property)
            many = model.__mapper__.relationships[navigation_property].uselist
            for entity in entities:
                related = await self.fetch(
                    self.select_entities(
                        related_type,
                        get_related_condition(
                            entity_type, navigation_property, entity["@iot.id"]
                        ),
                    )
                    .order_by(asc(MODELS[related_type.collection].id))
                    .limit(self.top_value)
                )
                if many:
                    entity[navigation_property] = related
                else:
                    entity[navigation_property] = related[0] if related else None

    async def get(self, entity_type, entity_id, options=None):
        model = MODELS[entity_type.collection]
        entities = await self.fetch(
            self.select_entities(entity_type, model.id == entity_id)
        )
        if not entities:
            raise NotFoundError(f"{entity_type.name} not found")

        if options is not None and options.expand:
            await self.expand(entity_type, entities, options.expand)
        return entities[0]

    async def get_collection(self, entity_type, options):
        return await self.fetch_entities(entity_type, [], options)

    async def get_collection_by_parent(
        self, entity_type, parent_type, parent_id, options
    ):
        if not await self.exists(parent_type, parent_id):
            raise NotFoundError(f"{parent_type.name} not found")

        navigation_property = get_navigation(parent_type, entity_type)
        return await self.fetch_entities(
            entity_type,
            [
                get_related_condition(
                    parent_type, navigation_property, parent_id
                )
            ],
            options,
        )

    async def exists(self, entity_type, entity_id):
        model = MODELS[entity_type.collection]
        query = select(exists().where(model.id == entity_id))
        async with self.pool.acquire() as connection:
            return await connection.fetchval(get_query_compiled(query))

    def prepare_row(self, entity_type, payload):
        """
        Turn a write payload into column values: references become foreign
        keys and time strings become timestamps or ranges.
        """
        row = {}
        for key, value in payload.items():
            if key in RELATION_COLUMNS:
                if value is not None:
                    row[RELATION_COLUMNS[key]] = value["@iot.id"]
            else:
                row[key] = value

        handle_datetime_fields(row, datastream=entity_type is DATASTREAM)
        return row

    def build_values(self, model, row):
        columns, placeholders, values = [], [], []
        for i, (key, value) in enumerate(row.items(), start=1):
            column = model.__table__.c[key]
            columns.append(f'"{key}"')
            if isinstance(column.type, Geometry):
                placeholders.append(
                    f"ST_SetSRID(ST_GeomFromGeoJSON(${i}), {EPSG})"
                )
                value = ujson.dumps(value) if value is not None else None
            elif isinstance(column.type, JSON):
                placeholders.append(f"${i}")
                value = (
                    ujson.dumps(value, escape_forward_slashes=False)
                    if value is not None
                    else None
                )
            else:
                placeholders.append(f"${i}")
            values.append(value)
        return columns, placeholders, values

    async def post(self, entity_type, payload):
        model = MODELS[entity_type.collection]
        row = self.prepare_row(entity_type, payload)

        if entity_type is OBSERVATION and row.get("phenomenonTime") is None:
            now = datetime.now(timezone.utc)
            row["phenomenonTime"] = Range(now, now, upper_inc=True)

        columns, placeholders, values = self.build_values(model, row)
        insert_query = f"""
            INSERT INTO {SCHEMA_NAME}."{model.__tablename__}" ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            RETURNING id;
        """

        try:
            async with self.pool.acquire() as connection:
                inserted_id = await connection.fetchval(insert_query, *values)
        except asyncpg.exceptions.UniqueViolationError as e:
            raise ConflictError(str(e))

        return await self.get(entity_type, inserted_id)

    async def patch(self, entity_type, entity_id, payload):
        model = MODELS[entity_type.collection]
        row = self.prepare_row(entity_type, payload)
        if not row:
            return await self.get(entity_type, entity_id)

        columns, placeholders, values = self.build_values(model, row)
        assignments = ", ".join(
            f"{column} = {placeholder}"
            for column, placeholder in zip(columns, placeholders)
        )
        update_query = f"""
            UPDATE {SCHEMA_NAME}."{model.__tablename__}"
            SET {assignments}
            WHERE id = ${len(values) + 1}
            RETURNING id;
        """

        try:
            async with self.pool.acquire() as connection:
                updated_id = await connection.fetchval(
                    update_query, *values, entity_id
                )
        except asyncpg.exceptions.UniqueViolationError as e:
            raise ConflictError(str(e))

        if updated_id is None:
            raise NotFoundError(f"{entity_type.name} not found")
        return await self.get(entity_type, entity_id)

    async def delete(self, entity_type, entity_id):
        model = MODELS[entity_type.collection]
        async with self.pool.acquire() as connection:
            deleted_id = await connection.fetchval(
                f'DELETE FROM {SCHEMA_NAME}."{model.__tablename__}" WHERE id = $1 RETURNING id',
                entity_id,
            )
        if deleted_id is None:
            raise NotFoundError(f"{entity_type.name} not found")

    async def get_thing_by_datastream(self, datastream_id):
        things = await self.fetch(
            self.select_entities(
                THING,
                get_related_condition(DATASTREAM, "Thing", datastream_id),
            )
        )
        if not things:
            raise NotFoundError("Thing not found")
        return things[0]

    async def get_locations_by_thing(self, thing_id):
        return await self.fetch(
            self.select_entities(
                LOCATION,
                get_related_condition(THING, "Locations", thing_id),
            ).order_by(asc(Location.id))
        )

    async def get_feature_of_interest_by_location(self, location_id):
        features = await self.fetch(
            self.select_entities(
                FEATURE_OF_INTEREST,
                FeaturesOfInterest.origin_location_id == location_id,
            )
        )
        return features[0] if features else None
