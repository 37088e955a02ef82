"""Tests for self links, navigation links and $select projection."""

from sensorthings.core.entities import DATASTREAM, OBSERVATION, THING
from sensorthings.core.links import apply_select, self_link, set_links
from sensorthings.core.options import QueryOptions

from tests.conftest import BASE_URL

STORED_OBSERVATION = {
    "@iot.id": 42,
    "phenomenonTime": "2026-03-01T10:00:00Z",
    "resultTime": None,
    "result": 21.5,
    "datastream_id": 7,
    "featuresofinterest_id": 1,
}


class TestSetLinks:
    def test_self_link(self):
        assert self_link(THING, 1, BASE_URL) == f"{BASE_URL}/Things(1)"

    def test_links_and_foreign_keys(self):
        linked = set_links(STORED_OBSERVATION, OBSERVATION, BASE_URL)

        assert linked["@iot.id"] == 42
        assert linked["@iot.selfLink"] == f"{BASE_URL}/Observations(42)"
        assert (
            linked["Datastream@iot.navigationLink"]
            == f"{BASE_URL}/Observations(42)/Datastream"
        )
        assert (
            linked["FeatureOfInterest@iot.navigationLink"]
            == f"{BASE_URL}/Observations(42)/FeatureOfInterest"
        )
        assert "datastream_id" not in linked
        assert "featuresofinterest_id" not in linked
        assert linked["result"] == 21.5

    def test_does_not_modify_stored_entity(self):
        stored = dict(STORED_OBSERVATION)
        set_links(stored, OBSERVATION, BASE_URL)
        assert stored == STORED_OBSERVATION

    def test_expanded_entities_are_linked(self):
        stored = dict(
            STORED_OBSERVATION,
            Datastream={"@iot.id": 7, "name": "Air temperature", "thing_id": 1},
        )
        linked = set_links(stored, OBSERVATION, BASE_URL)

        datastream = linked["Datastream"]
        assert datastream["@iot.selfLink"] == f"{BASE_URL}/Datastreams(7)"
        assert (
            datastream["Thing@iot.navigationLink"]
            == f"{BASE_URL}/Datastreams(7)/Thing"
        )
        assert "thing_id" not in datastream

    def test_expanded_collections_are_linked(self):
        stored = {
            "@iot.id": 7,
            "name": "Air temperature",
            "thing_id": 1,
            "Observations": [dict(STORED_OBSERVATION)],
        }
        linked = set_links(stored, DATASTREAM, BASE_URL)
        assert [o["@iot.selfLink"] for o in linked["Observations"]] == [
            f"{BASE_URL}/Observations(42)"
        ]


class TestApplySelect:
    def test_no_select_keeps_everything(self):
        linked = set_links(STORED_OBSERVATION, OBSERVATION, BASE_URL)
        assert apply_select(linked, OBSERVATION, QueryOptions()) is linked

    def test_select_properties(self):
        linked = set_links(STORED_OBSERVATION, OBSERVATION, BASE_URL)
        selected = apply_select(
            linked, OBSERVATION, QueryOptions(select=["id", "result"])
        )
        assert selected == {"@iot.id": 42, "result": 21.5}

    def test_select_navigation_keeps_link(self):
        linked = set_links(STORED_OBSERVATION, OBSERVATION, BASE_URL)
        selected = apply_select(
            linked, OBSERVATION, QueryOptions(select=["selfLink", "Datastream"])
        )
        assert selected == {
            "@iot.selfLink": f"{BASE_URL}/Observations(42)",
            "Datastream@iot.navigationLink": f"{BASE_URL}/Observations(42)/Datastream",
        }

    def test_expanded_properties_survive_select(self):
        stored = dict(STORED_OBSERVATION, Datastream={"@iot.id": 7})
        stored["Datastream"]["name"] = "Air temperature"
        linked = set_links(stored, OBSERVATION, BASE_URL)
        selected = apply_select(
            linked,
            OBSERVATION,
            QueryOptions(select=["result"], expand=["Datastream"]),
        )
        assert set(selected) == {"result", "Datastream"}
