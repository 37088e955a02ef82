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

from sensorthings.utils.utils import is_reference


def self_link(entity_type, entity_id, base_url):
    return f"{base_url}/{entity_type.collection}({entity_id})"


def set_links(entity, entity_type, base_url):
    """
    Return a copy of a stored entity with its control information attached.

    Adds @iot.selfLink and one <Nav>@iot.navigationLink per navigation
    property, links expanded entities recursively and drops the foreign
    keys the storage returns alongside the properties.

    Args:
        entity (dict): The entity as returned by storage.
        entity_type (EntityType): Its type.
        base_url (str): External base address of the service.

    Returns:
        dict: The linked entity.
    """
    link = self_link(entity_type, entity["@iot.id"], base_url)
    linked = {"@iot.id": entity["@iot.id"], "@iot.selfLink": link}

    for navigation_property in entity_type.navigation:
        linked[f"{navigation_property}@iot.navigationLink"] = (
            f"{link}/{navigation_property}"
        )

    for key, value in entity.items():
        if key in linked or key in entity_type.foreign_keys:
            continue
        if key in entity_type.navigation:
            if value is None or is_reference(value):
                continue
            related_type = entity_type.related(key)
            if isinstance(value, list):
                value = [
                    set_links(item, related_type, base_url) for item in value
                ]
            else:
                value = set_links(value, related_type, base_url)
        linked[key] = value

    return linked


def apply_select(entity, entity_type, options):
    """
    Keep only the properties named in $select.

    Expanded navigation properties are always kept.
    """
    if not options.select:
        return entity

    keep = set(options.expand)
    for name in options.select:
        if name == "id":
            keep.add("@iot.id")
        elif name == "selfLink":
            keep.add("@iot.selfLink")
        elif name in entity_type.navigation:
            keep.add(f"{name}@iot.navigationLink")
        else:
            keep.add(name)

    return {key: value for key, value in entity.items() if key in keep}
