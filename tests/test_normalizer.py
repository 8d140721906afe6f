import pytest

from spector import KeySpec, LazySchema, Schema, SchemaError
from spector.normalizer import expand_wildcard, resolve_keys
from spector.types import BasicType, CustomType

NAMED = KeySpec(type=BasicType("string"))
OTHER = KeySpec(type=BasicType("boolean"))
WILD = KeySpec(type=BasicType("integer"))


def test_schema_without_wildcard_is_unchanged():
    schema = Schema({"a": NAMED})
    assert expand_wildcard(schema, ["a", "b"]) is schema


def test_wildcard_expands_in_place_in_input_order():
    schema = Schema({"a": NAMED, "*": WILD, "b": OTHER})

    expanded = expand_wildcard(schema, ["y", "a", "x"])

    assert list(expanded) == ["a", "y", "x", "b"]
    assert expanded["y"] is WILD
    assert expanded["a"] is NAMED
    assert "*" not in expanded


def test_literal_star_key_uses_the_wildcard_spec():
    schema = Schema({"*": WILD})
    expanded = expand_wildcard(schema, ["*", "z"])
    assert list(expanded) == ["*", "z"]


def test_wildcard_with_no_observed_keys():
    assert dict(expand_wildcard(Schema({"a": NAMED, "*": WILD}), [])) == {"a": NAMED}


def test_resolve_keys_returns_compiled_schemas():
    schema = Schema({"a": NAMED})
    assert resolve_keys(schema) is schema


def test_resolve_keys_compiles_producer_results():
    resolved = resolve_keys(lambda: {"a": {"type": "string"}})
    assert resolved == Schema({"a": NAMED})


def test_lazy_schema_uses_its_validators():
    def upper(value):
        return value.upper()

    resolved = resolve_keys(LazySchema(lambda: {"a": {"type": {"custom": "upper"}}}, {"upper": upper}))
    assert resolved["a"].type == CustomType(upper)


def test_bad_producer_result_is_a_schema_error():
    with pytest.raises(SchemaError):
        resolve_keys(lambda: {"a": {"type": "nope"}})
