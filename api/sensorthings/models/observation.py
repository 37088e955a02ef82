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

from sensorthings.db.sqlalchemy_db import SCHEMA_NAME, Base
from sqlalchemy.dialects.postgresql.base import TIMESTAMP
from sqlalchemy.dialects.postgresql.json import JSON, JSONB
from sqlalchemy.dialects.postgresql.ranges import TSTZRANGE
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import Column, ForeignKey
from sqlalchemy.sql.sqltypes import Integer


class Observation(Base):
    __tablename__ = "Observation"
    __table_args__ = {"schema": SCHEMA_NAME}

    id = Column(Integer, primary_key=True)
    phenomenonTime = Column(TSTZRANGE, nullable=False)
    resultTime = Column(TIMESTAMP(timezone=True))
    result = Column(JSONB)
    resultQuality = Column(JSON)
    validTime = Column(TSTZRANGE)
    parameters = Column(JSON)
    featuresofinterest_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.FeaturesOfInterest.id"),
        nullable=False,
    )
    datastream_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.Datastream.id", ondelete="CASCADE"),
        nullable=False,
    )
    FeatureOfInterest = relationship(
        "FeaturesOfInterest", back_populates="Observations"
    )
    Datastream = relationship("Datastream", back_populates="Observations")
