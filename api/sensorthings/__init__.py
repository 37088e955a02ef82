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

import os

HOSTNAME = os.getenv("HOSTNAME", "http://localhost:8018")
SUBPATH = os.getenv("SUBPATH", "/istsos4")
VERSION = os.getenv("VERSION", "/v1.1")
DEBUG = int(os.getenv("DEBUG", 0))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
POSTGRES_DB = os.getenv("POSTGRES_DB", "istsos")
POSTGRES_USER = os.getenv("POSTGRES_USER", "admin")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "admin")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "database")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
PG_MAX_OVERFLOW = int(os.getenv("PG_MAX_OVERFLOW", 0))
PG_POOL_SIZE = int(os.getenv("PG_POOL_SIZE", 10))
PG_POOL_TIMEOUT = float(os.getenv("PG_POOL_TIMEOUT", 30))
TOP_VALUE = int(os.getenv("TOP_VALUE", 100))
EPSG = int(os.getenv("EPSG", 4326))
REDIS = int(os.getenv("REDIS", 0))
REDIS_HOST = os.getenv("REDIS_HOST", "redis")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
NOTIFICATION_QUEUE_SIZE = int(os.getenv("NOTIFICATION_QUEUE_SIZE", 1000))
ADMIN_SEGMENT = os.getenv("ADMIN_SEGMENT", "Admin")
