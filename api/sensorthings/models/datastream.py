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
from sqlalchemy.dialects.postgresql.json import JSON
from sqlalchemy.dialects.postgresql.ranges import TSTZRANGE
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import Column, ForeignKey
from sqlalchemy.sql.sqltypes import Integer, String, Text


class Datastream(Base):
    __tablename__ = "Datastream"
    __table_args__ = {"schema": SCHEMA_NAME}

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    unitOfMeasurement = Column(JSON, nullable=False)
    observationType = Column(String(100), nullable=False)
    phenomenonTime = Column(TSTZRANGE)
    resultTime = Column(TSTZRANGE)
    properties = Column(JSON)
    thing_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.Thing.id", ondelete="CASCADE"),
        nullable=False,
    )
    Thing = relationship("Thing", back_populates="Datastreams")
    Observations = relationship("Observation", back_populates="Datastream")
