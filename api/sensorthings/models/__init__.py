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

from .datastream import Datastream
from .feature_of_interest import FeaturesOfInterest
from .location import Location
from .observation import Observation
from .thing import Thing
from .thing_location import Thing_Location

__all__ = [
    "Location",
    "Thing",
    "Thing_Location",
    "Datastream",
    "FeaturesOfInterest",
    "Observation",
]
