"""Tests for openapi_consumer.parser.pointer."""

from __future__ import annotations

import pytest

from openapi_consumer.parser.pointer import (
    MISSING,
    dig,
    get_delimited,
    name_segments,
    pointer_segments,
    set_delimited,
    set_segments,
)


# ---------------------------------------------------------------------------
# Pointer and name parsing
# ---------------------------------------------------------------------------


class TestPointerSegments:
    def test_definitions_pointer(self) -> None:
        assert pointer_segments("#/definitions/Pet") == ["definitions", "Pet"]

    def test_root_pointer(self) -> None:
        assert pointer_segments("#") == []
        assert pointer_segments("#/") == []

    def test_escaped_slash_and_tilde(self) -> None:
        assert pointer_segments("#/paths/~1pets~1{petId}/get") == ["paths", "/pets/{petId}", "get"]
        assert pointer_segments("#/a~0b") == ["a~b"]


class TestNameSegments:
    @pytest.mark.parametrize(
        "name",
        ["#/schema/properties", "schema/properties", "schema.properties"],
    )
    def test_all_separator_styles(self, name: str) -> None:
        assert name_segments(name) == ["schema", "properties"]

    def test_plain_name(self) -> None:
        assert name_segments("consumes") == ["consumes"]


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestDig:
    def test_nested_mapping(self) -> None:
        assert dig({"a": {"b": {"c": 1}}}, ["a", "b", "c"]) == 1

    def test_list_index(self) -> None:
        assert dig({"items": [{"x": 1}, {"x": 2}]}, ["items", "1", "x"]) == 2

    def test_missing_returns_default(self) -> None:
        assert dig({"a": {}}, ["a", "b"]) is None
        assert dig({"a": {}}, ["a", "b"], MISSING) is MISSING

    def test_bad_list_index(self) -> None:
        assert dig({"items": [1]}, ["items", "5"], "nope") == "nope"
        assert dig({"items": [1]}, ["items", "x"], "nope") == "nope"

    def test_scalar_stops_walk(self) -> None:
        assert dig({"a": 1}, ["a", "b"], "nope") == "nope"

    def test_stored_none_is_returned(self) -> None:
        assert dig({"a": None}, ["a"], MISSING) is None


class TestGetDelimited:
    def test_literal_key_wins(self) -> None:
        assert get_delimited({"a.b": 1, "a": {"b": 2}}, "a.b") == 1

    def test_segmented(self) -> None:
        assert get_delimited({"a": {"b": 2}}, "a.b") == 2

    def test_custom_delimiter(self) -> None:
        assert get_delimited({"/x": {"get": 3}}, "/x|get", "|") == 3

    def test_default(self) -> None:
        assert get_delimited({}, "a.b", default=5) == 5

    def test_stored_none_is_not_default(self) -> None:
        assert get_delimited({"a": {"b": None}}, "a.b", default=5) is None


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


class TestSet:
    def test_creates_intermediates(self) -> None:
        data: dict = {}
        set_delimited(data, "user.address.city", "Ghent")
        assert data == {"user": {"address": {"city": "Ghent"}}}

    def test_keeps_siblings(self) -> None:
        data = {"user": {"name": "Ann"}}
        set_delimited(data, "user.email", "a@b.com")
        assert data == {"user": {"name": "Ann", "email": "a@b.com"}}

    def test_replaces_scalar_intermediate(self) -> None:
        data = {"user": "x"}
        set_segments(data, ["user", "email"], "a@b.com")
        assert data == {"user": {"email": "a@b.com"}}

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(ValueError):
            set_segments({}, [], 1)
