from __future__ import annotations

from modelbind.binding import parse
from modelbind.model import ObservableMap

from tests.helpers.models import Address, Person


def _observe(root, text):
    calls: list[tuple] = []
    obs = parse(text).observe(root, lambda old, new, native: calls.append((old, new)))
    return obs, calls


def test_terminal_change_is_forwarded() -> None:
    person = Person("A")
    obs, calls = _observe(person, "name")

    person.name = "B"

    assert calls == [("A", "B")]
    assert obs.value == "B"


def test_nested_property_change_is_forwarded() -> None:
    person = Person()
    _, calls = _observe(person, "address.street")

    person.address.street = "Main St"

    assert calls == [("", "Main St")]


def test_replacing_intermediate_reattaches() -> None:
    person = Person()
    old_address = person.address
    _, calls = _observe(person, "address.street")

    new_address = Address()
    new_address.street = "Elm St"
    person.address = new_address

    # The detached object no longer reaches the observer.
    old_address.street = "ignored"
    new_address.street = "Oak St"

    assert calls == [("", "Elm St"), ("Elm St", "Oak St")]


def test_intermediate_replacement_with_equal_value_is_silent() -> None:
    person = Person()
    person.address.street = "Same"
    _, calls = _observe(person, "address.street")

    replacement = Address()
    replacement.street = "Same"
    person.address = replacement

    assert calls == []


def test_broken_chain_recovers_when_parent_returns() -> None:
    person = Person()
    person.address = None
    obs, calls = _observe(person, "address.town")
    assert obs.value is None

    fresh = Address()
    fresh.town = "Leeds"
    person.address = fresh
    fresh.town = "York"

    assert calls == [(None, "Leeds"), ("Leeds", "York")]


def test_map_entry_observed_by_key() -> None:
    person = Person()
    _, calls = _observe(person, "extras.nick")

    person.extras.put("other", 1)
    person.extras.put("nick", "annie")
    person.extras.remove("nick")

    assert calls == [(None, "annie"), ("annie", None)]


def test_map_default_reported_after_removal() -> None:
    person = Person()
    person.extras = ObservableMap({"nick": "annie"}, default="-")
    _, calls = _observe(person, "extras.nick")

    person.extras.remove("nick")

    assert calls == [("annie", "-")]


def test_close_detaches_every_level() -> None:
    person = Person()
    address = person.address
    obs, calls = _observe(person, "address.street")

    obs.close()
    address.street = "x"
    person.address = Address()

    assert calls == []
    assert obs.closed
    assert person.change_signal.listener_count() == 0
    assert address.change_signal.listener_count() == 0


def test_expression_observer_reevaluates_on_dependency_change() -> None:
    person = Person("Ann")
    obs, calls = _observe(person, "${age >= 18}")
    assert obs.value is False

    person.age = 20
    person.age = 21

    assert calls == [(False, True), (True, True)]
