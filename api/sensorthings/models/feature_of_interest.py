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

from sensorthings import EPSG
from sensorthings.db.sqlalchemy_db import SCHEMA_NAME, Base
from geoalchemy2 import Geometry
from sqlalchemy.dialects.postgresql.json import JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import Column, ForeignKey
from sqlalchemy.sql.sqltypes import Integer, String, Text


class FeaturesOfInterest(Base):
    __tablename__ = "FeaturesOfInterest"
    __table_args__ = {"schema": SCHEMA_NAME}

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    encodingType = Column(String(100), nullable=False)
    feature = Column(Geometry(srid=EPSG), nullable=False)
    properties = Column(JSON)
    # Location the feature was derived from, one feature per Location
    origin_location_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.Location.id", ondelete="SET NULL"),
        unique=True,
    )
    Observations = relationship(
        "Observation", back_populates="FeatureOfInterest"
    )
