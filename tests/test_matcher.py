import multiprocessing
import weakref
from fractions import Fraction

import pytest

from spector.exceptions import CustomValidatorError, ValidationError
from spector.matcher import ListPosition, MapKeyPosition, MapValuePosition, TuplePosition, match, render_key
from spector.types import (
    BasicType,
    ContainerType,
    CustomType,
    FunType,
    InType,
    ListOf,
    MapOf,
    OrType,
    StructType,
    TupleOf,
)


class _Target:
    pass


@pytest.mark.parametrize(
    "name, value",
    [
        ("any", object),
        ("atom", "ready"),
        ("string", ""),
        ("boolean", False),
        ("integer", -3),
        ("non_neg_integer", 0),
        ("pos_integer", 1),
        ("float", 1.5),
        ("timeout", "infinity"),
        ("timeout", 0),
        ("null", None),
    ],
)
def test_basic_types_accept(name, value):
    assert match(BasicType(name), "k", value) is value


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("atom", "not an atom", "atom"),
        ("string", b"bytes", "string"),
        ("boolean", 1, "boolean"),
        ("integer", True, "integer"),
        ("integer", 1.0, "integer"),
        ("non_neg_integer", -1, "non negative integer"),
        ("pos_integer", 0, "positive integer"),
        ("float", 1, "float"),
        ("timeout", -1, "non-negative integer or 'infinity'"),
        ("null", 0, "None"),
    ],
)
def test_basic_types_reject(name, value, expected):
    with pytest.raises(ValidationError) as exc_info:
        match(BasicType(name), "k", value)

    error = exc_info.value
    assert error.key == "k"
    assert error.value == value
    assert error.message == f"invalid value for 'k' key: expected {expected}, got: {value!r}"


def test_pid_and_reference():
    process = multiprocessing.Process(target=print)
    assert match(BasicType("pid"), "p", process) is process

    target = _Target()
    ref = weakref.ref(target)
    assert match(BasicType("reference"), "r", ref) is ref

    with pytest.raises(ValidationError):
        match(BasicType("pid"), "p", 1234)
    with pytest.raises(ValidationError):
        match(BasicType("reference"), "r", target)


def test_render_key():
    assert render_key("name") == "'name' key"
    assert render_key(MapKeyPosition()) == "map key"
    assert render_key(MapValuePosition("a")) == "map key 'a'"
    assert render_key(ListPosition(2)) == "list element at position 2"
    assert render_key(TuplePosition(0)) == "tuple element at position 0"


def test_map_container_requires_string_keys():
    assert match(ContainerType("map"), "m", {"a": 1}) == {"a": 1}

    with pytest.raises(ValidationError) as exc_info:
        match(ContainerType("map"), "m", {1: "a"})
    assert exc_info.value.message == (
        "invalid map in 'm' key: invalid value for map key: expected string, got: 1"
    )


def test_list_containers_hold_records():
    records = [{"a": 1}, {}]
    assert match(ContainerType("list"), "l", records) == records
    assert match(ContainerType("list"), "l", []) == []

    with pytest.raises(ValidationError, match="expected list of mappings"):
        match(ContainerType("list"), "l", [1])
    with pytest.raises(ValidationError, match="expected non-empty list of mappings, got: \\[\\]"):
        match(ContainerType("non_empty_list"), "l", [])


def test_map_of_reports_first_bad_entry():
    type_spec = MapOf(BasicType("string"), BasicType("integer"))
    assert match(type_spec, "m", {"a": 1, "b": 2}) == {"a": 1, "b": 2}

    with pytest.raises(ValidationError) as exc_info:
        match(type_spec, "m", {"a": 1, "b": "x", "c": "y"})
    assert exc_info.value.message == (
        "invalid map in 'm' key: invalid value for map key 'b': expected integer, got: 'x'"
    )
    assert exc_info.value.key == "m"


def test_list_of():
    type_spec = ListOf(BasicType("integer"))
    assert match(type_spec, "nums", [1, 2]) == [1, 2]

    with pytest.raises(ValidationError) as exc_info:
        match(type_spec, "nums", [1, "x"])
    assert exc_info.value.message == (
        "invalid list in 'nums' key: invalid value for list element at position 1: "
        "expected integer, got: 'x'"
    )

    with pytest.raises(ValidationError, match="expected list, got: \\(1,\\)"):
        match(type_spec, "nums", (1,))


def test_list_of_returns_updated_elements():
    type_spec = ListOf(CustomType(int))
    assert match(type_spec, "nums", ["1", "2"]) == [1, 2]


def test_tuple_positions_and_arity():
    type_spec = TupleOf((BasicType("string"), BasicType("integer")))
    assert match(type_spec, "pair", ("a", 1)) == ("a", 1)

    with pytest.raises(ValidationError) as exc_info:
        match(type_spec, "pair", ("a", "b"))
    assert exc_info.value.message == (
        "invalid tuple in 'pair' key: invalid value for tuple element at position 1: "
        "expected integer, got: 'b'"
    )

    with pytest.raises(ValidationError, match="expected tuple with 2 elements"):
        match(type_spec, "pair", ("a",))
    with pytest.raises(ValidationError, match="expected tuple, got"):
        match(type_spec, "pair", ["a", 1])


def test_or_returns_first_match_in_declaration_order():
    type_spec = OrType((CustomType(int), BasicType("string")))
    assert match(type_spec, "v", "7") == 7

    type_spec = OrType((BasicType("string"), CustomType(int)))
    assert match(type_spec, "v", "7") == "7"


def test_or_aggregates_reasons_in_order():
    type_spec = OrType((InType(("a", "b")), BasicType("integer")))

    with pytest.raises(ValidationError) as exc_info:
        match(type_spec, "kind", "c")

    message = exc_info.value.message
    assert message.startswith("expected 'kind' key to match at least one given type")
    first = message.index("expected one of ('a', 'b'), got: 'c'")
    second = message.index("expected integer, got: 'c'")
    assert first < second


def test_in_membership():
    assert match(InType(range(1, 4)), "n", 2) == 2
    assert match(InType(frozenset({"x"})), "n", "x") == "x"

    with pytest.raises(ValidationError, match="expected one of"):
        match(InType(("a",)), "n", "b")
    # unhashable values are simply not members
    with pytest.raises(ValidationError):
        match(InType(frozenset({"x"})), "n", ["x"])


def test_custom_validator_outcomes():
    def parse_port(value):
        port = int(value)
        if not 0 < port < 65536:
            raise ValueError(f"port {port} out of range")
        return port

    assert match(CustomType(parse_port), "port", "8080") == 8080

    with pytest.raises(ValidationError) as exc_info:
        match(CustomType(parse_port), "port", "70000")
    assert exc_info.value.message == "invalid value for 'port' key: port 70000 out of range"


def test_custom_validator_extra_arguments():
    def at_most(value, limit):
        if value > limit:
            raise ValueError(f"{value} is greater than {limit}")
        return value

    assert match(CustomType(at_most, (10,)), "n", 3) == 3
    with pytest.raises(ValidationError, match="11 is greater than 10"):
        match(CustomType(at_most, (10,)), "n", 11)


def test_custom_validator_may_raise_validation_error():
    def strict(value):
        raise ValidationError("nope", key="inner")

    with pytest.raises(ValidationError) as exc_info:
        match(CustomType(strict), "k", 1)
    assert exc_info.value.key == "inner"


def test_misbehaving_custom_validator_is_fatal():
    def broken(value):
        raise RuntimeError("boom")

    with pytest.raises(CustomValidatorError, match="must return the accepted value or raise ValueError"):
        match(CustomType(broken), "k", 1)


def test_fun_arity():
    assert match(FunType(2), "f", lambda a, b: None) is not None
    assert match(FunType(1), "f", lambda a, b=1: None) is not None
    assert match(FunType(3), "f", lambda *args: None) is not None

    with pytest.raises(ValidationError) as exc_info:
        match(FunType(2), "f", lambda a: None)
    assert exc_info.value.message == (
        "invalid value for 'f' key: expected function of arity 2, got: function of arity 1"
    )

    with pytest.raises(ValidationError, match="expected function of arity 0"):
        match(FunType(0), "f", "not callable")


def test_struct():
    assert match(StructType(Fraction), "q", Fraction(1, 2)) == Fraction(1, 2)

    with pytest.raises(ValidationError, match="expected Fraction, got: 0.5"):
        match(StructType(Fraction), "q", 0.5)


def test_custom_validator_without_return_is_fatal():
    def check_positive(value):
        if value <= 0:
            raise ValueError("must be positive")

    with pytest.raises(CustomValidatorError, match="got: None for 5"):
        match(CustomType(check_positive), "n", 5)
    with pytest.raises(ValidationError, match="must be positive"):
        match(CustomType(check_positive), "n", -1)


def test_custom_validator_may_return_none_for_none():
    assert match(CustomType(lambda value: value), "n", None) is None


@pytest.mark.parametrize(
    "choices, value",
    [((0, 1), True), ((0, 1), False), ((True,), 1), (range(2), True), (frozenset({1}), True)],
)
def test_in_keeps_booleans_and_integers_apart(choices, value):
    with pytest.raises(ValidationError, match="expected one of"):
        match(InType(choices), "n", value)


def test_in_matches_booleans_and_numbers_of_their_own_kind():
    assert match(InType((0, True)), "n", True) is True
    assert match(InType((0, True)), "n", 0) == 0
    assert match(InType(range(2)), "n", 1) == 1
    assert match(InType((1, 2.5)), "n", 2.5) == 2.5
