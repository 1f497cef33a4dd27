"""
Unit tests for array schemas.

Tests cover:
- List shorthand normalization and denormalization
- ArraySchema with single and multiple member schemas
- Mapping input, None filtering and non-list pass-through
"""

import pytest

from entnorm import SchemaError, denormalize, normalize, schema


class TestArrayShorthand:
    """Tests for the [schema] shorthand."""

    def test_normalizes_plain_list(self):
        """A one-element list is an array of that schema."""
        user = schema.Entity("user")
        data = normalize([{"id": 1}, {"id": 2}], [user])

        assert data.entities == {"user": {"1": {"id": 1}, "2": {"id": 2}}}
        assert data.result == [1, 2]

    def test_more_than_one_schema_raises(self):
        """Shorthand with two schemas is rejected."""
        user = schema.Entity("users")
        cat = schema.Entity("cats")
        with pytest.raises(SchemaError, match="single schema, but found 2"):
            normalize([{"id": 1}], [cat, user])

    def test_empty_shorthand_raises(self):
        """Shorthand with no schema is rejected."""
        with pytest.raises(SchemaError, match="found 0"):
            normalize([{"id": 1}], [])

    def test_passes_parent_to_children(self):
        """Members keep the enclosing parent and key."""
        child = schema.Entity(
            "children",
            process_strategy=lambda entity, parent, key: {
                **entity,
                "parent_id": parent["id"],
                "parent_key": key,
            },
        )
        parent = schema.Entity("parents", {"children": [child]})

        data = normalize({"id": 1, "content": "parent", "children": [{"id": 4, "content": "child"}]}, parent)

        assert data.entities == {
            "children": {"4": {"id": 4, "content": "child", "parent_id": 1, "parent_key": "children"}},
            "parents": {"1": {"id": 1, "content": "parent", "children": [4]}},
        }

    def test_denormalizes_plain_list(self):
        """Ids in a list resolve to records."""
        cats = schema.Entity("cats")
        entities = {"cats": {"1": {"id": 1, "name": "Milo"}, "2": {"id": 2, "name": "Jake"}}}

        assert denormalize(["1", "2"], [cats], entities) == [
            {"id": 1, "name": "Milo"},
            {"id": 2, "name": "Jake"},
        ]

    def test_non_list_is_returned(self):
        """A non-list field value is left alone."""
        filling = schema.Entity("fillings")
        taco = schema.Entity("tacos", {"fillings": [filling]})
        entities = {"tacos": {"123": {"id": "123", "fillings": None}}}

        assert denormalize("123", taco, entities) == {"id": "123", "fillings": None}


class TestArraySchema:
    """Tests for ArraySchema."""

    def test_normalizes_single_entity(self):
        """Single-schema arrays return bare ids."""
        cats = schema.Entity("cats")
        data = normalize([{"id": 1}, {"id": 2}], schema.Array(cats))

        assert data.entities == {"cats": {"1": {"id": 1}, "2": {"id": 2}}}
        assert data.result == [1, 2]

    def test_normalizes_multiple_entities(self):
        """Multi-schema arrays tag members; unmapped members pass through."""
        cat = schema.Entity("cats")
        person = schema.Entity("person")
        list_schema = schema.Array(
            {"cats": cat, "people": person},
            lambda input, parent, key: input.get("type") or "dogs",
        )

        data = normalize(
            [
                {"type": "cats", "id": "123"},
                {"type": "people", "id": "123"},
                {"id": "789", "name": "fido"},
                {"type": "cats", "id": "456"},
            ],
            list_schema,
        )

        assert data.entities == {
            "cats": {"123": {"id": "123", "type": "cats"}, "456": {"id": "456", "type": "cats"}},
            "person": {"123": {"id": "123", "type": "people"}},
        }
        assert data.result == [
            {"id": "123", "schema": "cats"},
            {"id": "123", "schema": "people"},
            {"id": "789", "name": "fido"},
            {"id": "456", "schema": "cats"},
        ]

    def test_normalizes_mapping_values(self):
        """A mapping input is treated as its values."""
        user = schema.Entity("user")
        data = normalize({"foo": {"id": 1}, "bar": {"id": 2}}, schema.Array(user))

        assert data.entities == {"user": {"1": {"id": 1}, "2": {"id": 2}}}
        assert data.result == [1, 2]

    def test_filters_none(self):
        """None members are dropped."""
        user = schema.Entity("user")
        data = normalize([None, {"id": 123}, None], schema.Array(user))

        assert data.entities == {"user": {"123": {"id": 123}}}
        assert data.result == [123]

    def test_denormalizes_single_entity(self):
        """Bare ids resolve through the member schema."""
        cats = schema.Entity("cats")
        entities = {"cats": {"1": {"id": 1, "name": "Milo"}, "2": {"id": 2, "name": "Jake"}}}

        assert denormalize([1, 2], schema.Array(cats), entities) == [
            {"id": 1, "name": "Milo"},
            {"id": 2, "name": "Jake"},
        ]

    def test_denormalizes_multiple_entities(self):
        """Tags pick the member schema, including object shorthand members."""
        cat = schema.Entity("cats")
        person = schema.Entity("person")
        list_schema = schema.Array(
            {"cats": cat, "dogs": {}, "people": person},
            lambda input, parent, key: input.get("type") or "dogs",
        )
        entities = {
            "cats": {"123": {"id": "123", "type": "cats"}, "456": {"id": "456", "type": "cats"}},
            "person": {"123": {"id": "123", "type": "people"}},
        }
        input = [
            {"id": "123", "schema": "cats"},
            {"id": "123", "schema": "people"},
            {"id": {"id": "789"}, "schema": "dogs"},
            {"id": "456", "schema": "cats"},
        ]

        assert denormalize(input, list_schema, entities) == [
            {"id": "123", "type": "cats"},
            {"id": "123", "type": "people"},
            {"id": "789"},
            {"id": "456", "type": "cats"},
        ]

    def test_non_list_is_returned(self):
        """A non-list value is left alone."""
        filling = schema.Entity("fillings")
        taco = schema.Entity("tacos", {"fillings": schema.Array(filling)})
        entities = {"tacos": {"123": {"id": "123", "fillings": {}}}}

        assert denormalize("123", taco, entities) == {"id": "123", "fillings": {}}

    def test_round_trip_without_discriminator(self):
        """Object members of a single-schema array survive a round trip."""
        cats = schema.Entity("cats")
        cat_list = schema.Array(schema.Object({"cat": cats}))
        input = [{"cat": {"id": 1}, "id": 5}, {"cat": {"id": 2}, "id": 6}]

        data = normalize(input, cat_list)

        assert data.entities == {"cats": {"1": {"id": 1}, "2": {"id": 2}}}
        assert data.result == [{"cat": 1, "id": 5}, {"cat": 2, "id": 6}]
        assert denormalize(data.result, cat_list, data.entities) == input
