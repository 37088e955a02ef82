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

from sensorthings.core.entities import ENTITY_TYPES

CONFORMANCE_BASE = "http://www.opengis.net/spec/iot_sensing/1.1/req"

DATAMODEL = [
    "thing",
    "location",
    "datastream",
    "observation",
    "feature-of-interest",
    "entity-control-information",
]

REQUEST_DATA = ["order", "expand", "select", "orderby", "skip", "top", "filter"]

CREATE_UPDATE_DELETE = [
    "create-entity",
    "link-to-existing-entities",
    "deep-insert",
    "update-entity",
    "delete-entity",
]

tables = sorted(ENTITY_TYPES)

serverSettings = {
    "conformance": [f"{CONFORMANCE_BASE}/datamodel/{name}" for name in DATAMODEL]
    + [f"{CONFORMANCE_BASE}/resource-path"]
    + [f"{CONFORMANCE_BASE}/request-data/{name}" for name in REQUEST_DATA]
    + [
        f"{CONFORMANCE_BASE}/create-update-delete/{name}"
        for name in CREATE_UPDATE_DELETE
    ]
    + [f"{CONFORMANCE_BASE}/data-array/data-array"],
}
