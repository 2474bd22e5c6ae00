from __future__ import annotations

import pytest

from modelbind.binding import PathKind, PropertyPath, parse
from modelbind.binding.expression import ExpressionSyntaxError, compile_expression, translate_el
from modelbind.errors import PathResolutionError
from modelbind.model import ObservableList, ObservableMap

from tests.helpers.models import Person, Plain


def test_parse_plain_and_nested_paths() -> None:
    p = parse("address.street")

    assert p.kind is PathKind.PROPERTY
    assert p.segments == ("address", "street")
    assert p.writable
    assert str(p) == "address.street"
    assert PropertyPath.parse(p) is p


@pytest.mark.parametrize("text", ["", "   ", "a..b", ".a", "a.", "a b", "x ${y}", "${"])
def test_parse_rejects_malformed_paths(text: str) -> None:
    with pytest.raises(PathResolutionError):
        parse(text)


def test_get_and_set_nested_model_property() -> None:
    person = Person("Ann")
    path = parse("address.street")

    path.set(person, "Main St")

    assert person.address.street == "Main St"
    assert path.get(person) == "Main St"
    assert parse("name").get(person) == "Ann"


def test_get_map_entry_and_list_index() -> None:
    person = Person()
    person.extras.put("nick", "annie")
    person.tags.extend(["x", "y"])

    assert parse("extras.nick").get(person) == "annie"
    assert parse("tags.1").get(person) == "y"

    parse("tags.0").set(person, "X")
    assert person.tags == ["X", "y"]


def test_map_with_default_resolves_missing_key() -> None:
    root = Plain(ObservableMap(default="?"))

    assert parse("value.missing").get(root) == "?"


def test_missing_segment_raises_path_resolution_error() -> None:
    person = Person()

    with pytest.raises(PathResolutionError) as info:
        parse("address.nope").get(person)

    assert info.value.path == "address.nope"
    assert info.value.segment == "nope"
    assert "nope" in str(info.value)


def test_set_through_none_parent_raises() -> None:
    with pytest.raises(PathResolutionError):
        parse("value.x").set(Plain(None), 1)


def test_set_unknown_attribute_raises() -> None:
    with pytest.raises(PathResolutionError):
        parse("missing").set(Plain(), 1)


def test_is_readable() -> None:
    assert parse("value").is_readable(Plain(1))
    assert not parse("value.x.y").is_readable(Plain(1))


def test_expression_evaluates_with_el_aliases() -> None:
    person = Person("Ann")
    person.age = 30

    assert parse("${age > 18 && name eq 'Ann'}").get(person) is True
    assert parse("${!(age lt 18)}").get(person) is True
    assert parse("${age * 2 + 1}").get(person) == 61
    assert parse("${address.town == null or true}").get(person) is True
    assert parse("${'adult' if age >= 18 else 'minor'}").get(person) == "adult"


def test_el_translation_keeps_string_literals() -> None:
    assert translate_el("name eq 'a && b'") == "name == 'a && b'"
    assert translate_el("a != b") == "a != b"


def test_pure_chain_expression_is_writable() -> None:
    person = Person()
    path = parse("${address.street}")

    assert path.kind is PathKind.EXPRESSION
    assert path.writable

    path.set(person, "High St")
    assert person.address.street == "High St"


def test_computed_expression_is_read_only() -> None:
    path = parse("${age + 1}")

    assert not path.writable
    with pytest.raises(PathResolutionError, match="read-only"):
        path.set(Person(), 3)


def test_expression_type_error_is_resolution_error() -> None:
    with pytest.raises(PathResolutionError):
        parse("${name + 1}").get(Person("x"))


@pytest.mark.parametrize("source", ["__import__('os')", "f(x)", "lambda: 1", "[x for x in y]"])
def test_expression_rejects_calls_and_comprehensions(source: str) -> None:
    with pytest.raises(ExpressionSyntaxError):
        compile_expression(source)


def test_expression_dependencies() -> None:
    compiled = compile_expression("address.town == 'Leeds' and age > tags[0]")

    assert compiled.dependencies == (("address", "town"), ("age",), ("tags", 0))
    assert not compiled.writable


def test_subscript_chain_on_observable_list() -> None:
    person = Person()
    person.tags.append(ObservableList([1, 2]))

    assert parse("${tags[0][1]}").get(person) == 2
