"""Tests for query option checking."""

import pytest

from sensorthings.core.entities import (
    COMMON_OPTIONS,
    ENTITY_TYPES,
    OBSERVATION,
    RESULT_FORMAT,
    THING,
)
from sensorthings.core.options import QueryOptions, check_supported
from sensorthings.errors import BadRequestError, UnsupportedOptionError
from sensorthings.v1.endpoints.read.query_parameters import split_top_level

# a legal value for each option kind
OPTION_VALUES = {
    "$filter": {"filter": "name eq 'a'"},
    "$expand": {"expand": []},
    "$select": {"select": ["id"]},
    "$orderby": {"orderby": "id desc"},
    "$top": {"top": 5},
    "$skip": {"skip": 5},
    "$count": {"count": True},
    "$resultFormat": {"result_format": "dataArray"},
}

ALL_OPTIONS = sorted(COMMON_OPTIONS | {RESULT_FORMAT})


def options_for(option, entity_type):
    values = dict(OPTION_VALUES[option])
    if option == "$expand":
        values["expand"] = [next(iter(entity_type.navigation))]
    return QueryOptions(**values)


class TestCapabilities:
    """Every entity type accepts exactly the options it declares."""

    @pytest.mark.parametrize("collection", sorted(ENTITY_TYPES))
    @pytest.mark.parametrize("option", ALL_OPTIONS)
    def test_option_whitelist(self, collection, option):
        entity_type = ENTITY_TYPES[collection]
        options = options_for(option, entity_type)

        if entity_type.supports(option):
            assert check_supported(options, entity_type) is None
        else:
            with pytest.raises(UnsupportedOptionError):
                check_supported(options, entity_type)

    def test_result_format_only_on_observations(self):
        for collection, entity_type in ENTITY_TYPES.items():
            assert entity_type.supports(RESULT_FORMAT) == (
                entity_type is OBSERVATION
            ), collection

    def test_result_format_rejected_on_things(self):
        with pytest.raises(UnsupportedOptionError) as exc:
            check_supported(QueryOptions(result_format="dataArray"), THING)
        assert "$resultFormat" in exc.value.message
        assert exc.value.status_code == 400

    def test_no_options_is_always_supported(self):
        for entity_type in ENTITY_TYPES.values():
            assert check_supported(QueryOptions(), entity_type) is None


class TestOptionContent:
    def test_unknown_select_property(self):
        with pytest.raises(UnsupportedOptionError):
            check_supported(QueryOptions(select=["colour"]), THING)

    def test_select_accepts_id_self_link_and_navigation(self):
        options = QueryOptions(select=["id", "selfLink", "name", "Locations"])
        assert check_supported(options, THING) is None

    def test_unknown_expand(self):
        with pytest.raises(UnsupportedOptionError):
            check_supported(QueryOptions(expand=["Sensors"]), THING)

    def test_nested_expand_options_are_rejected(self):
        options = QueryOptions(expand=["Datastreams($top=1)"])
        with pytest.raises(UnsupportedOptionError):
            check_supported(options, THING)

    def test_orderby_unknown_property(self):
        with pytest.raises(UnsupportedOptionError):
            check_supported(QueryOptions(orderby="properties asc"), THING)

    def test_orderby_bad_direction(self):
        with pytest.raises(UnsupportedOptionError):
            check_supported(QueryOptions(orderby="name upwards"), THING)

    def test_unknown_result_format(self):
        with pytest.raises(UnsupportedOptionError):
            check_supported(QueryOptions(result_format="csv"), OBSERVATION)

    def test_unsupported_option_is_a_bad_request(self):
        assert issubclass(UnsupportedOptionError, BadRequestError)


class TestQueryOptions:
    def test_requested_lists_present_options(self):
        options = QueryOptions(top=0, expand=["Thing"], count=False)
        assert options.requested() == ["$expand", "$top", "$count"]

    def test_orderby_items(self):
        options = QueryOptions(orderby="phenomenonTime desc, id")
        assert options.orderby_items() == [
            ("phenomenonTime", "desc"),
            ("id", "asc"),
        ]

    def test_split_top_level(self):
        assert split_top_level(
            "Thing,Observations($top=1;$select=id,result)"
        ) == ["Thing", "Observations($top=1;$select=id,result)"]
        assert split_top_level(None) == []
        assert split_top_level("id, name") == ["id", "name"]
