from __future__ import annotations

import logging
import threading

import pytest

from modelbind.metrics import metrics
from modelbind.model import ANY, ChangeSignal, PropertyChange

from tests.helpers.models import Person


def test_announce_reaches_named_and_any_listeners_in_registration_order() -> None:
    sig = ChangeSignal("src")
    calls: list[tuple[str, str]] = []

    sig.subscribe("name", lambda ch: calls.append(("first", ch.name)))
    sig.subscribe(ANY, lambda ch: calls.append(("any", ch.name)))
    sig.subscribe("other", lambda ch: calls.append(("other", ch.name)))
    sig.subscribe("name", lambda ch: calls.append(("second", ch.name)))

    change = sig.announce("name", "A", "B")

    assert calls == [("first", "name"), ("any", "name"), ("second", "name")]
    assert change == PropertyChange("src", "name", "A", "B")


def test_equal_values_are_still_announced() -> None:
    sig = ChangeSignal()
    seen: list[PropertyChange] = []
    sig.subscribe("x", seen.append)

    value = object()
    sig.announce("x", value, value)

    assert len(seen) == 1
    assert seen[0].old_value is seen[0].new_value


def test_unsubscribe_removes_one_registration() -> None:
    sig = ChangeSignal()
    seen: list[str] = []

    def listener(ch: PropertyChange) -> None:
        seen.append(ch.name)

    sig.subscribe("x", listener)
    sig.subscribe("x", listener)
    assert sig.listener_count("x") == 2

    assert sig.unsubscribe("x", listener) is True
    sig.announce("x", 1, 2)
    assert seen == ["x"]

    assert sig.unsubscribe("x", listener) is True
    assert sig.unsubscribe("x", listener) is False
    assert not sig.has_listeners("x")


def test_subscribe_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        ChangeSignal().subscribe("x", "not callable")  # type: ignore[arg-type]


def test_listener_added_during_dispatch_waits_for_next_announce() -> None:
    sig = ChangeSignal()
    late: list[int] = []

    def first(ch: PropertyChange) -> None:
        sig.subscribe("x", lambda c: late.append(c.new_value))

    sig.subscribe("x", first)
    sig.announce("x", 0, 1)
    assert late == []

    sig.announce("x", 1, 2)
    assert late == [2]


def test_listener_removed_during_dispatch_still_sees_current_announce() -> None:
    sig = ChangeSignal()
    seen: list[str] = []

    def second(ch: PropertyChange) -> None:
        seen.append("second")

    def first(ch: PropertyChange) -> None:
        seen.append("first")
        sig.unsubscribe("x", second)

    sig.subscribe("x", first)
    sig.subscribe("x", second)

    sig.announce("x", 0, 1)
    sig.announce("x", 1, 2)

    assert seen == ["first", "second", "first"]


def test_reentrant_announce_does_not_deadlock() -> None:
    model = Person("A")
    seen: list[tuple[str, object]] = []

    def on_name(ch: PropertyChange) -> None:
        seen.append((ch.name, ch.new_value))
        if ch.new_value == "B":
            model.age = 42

    model.add_property_listener(on_name, "name")
    model.add_property_listener(lambda ch: seen.append((ch.name, ch.new_value)), "age")

    model.name = "B"

    assert seen == [("name", "B"), ("age", 42)]


def test_failing_listener_is_logged_and_others_still_run(project_log) -> None:
    sig = ChangeSignal()
    seen: list[int] = []

    def broken(ch: PropertyChange) -> None:
        raise RuntimeError("boom")

    sig.subscribe("x", broken)
    sig.subscribe("x", lambda ch: seen.append(ch.new_value))

    sig.announce("x", 0, 5)

    assert seen == [5]
    errors = [r for r in project_log.records if r.levelno >= logging.ERROR]
    assert errors and isinstance(errors[0].exc_info[1], RuntimeError)


def test_model_setter_announces_exactly_once() -> None:
    model = Person("A")
    seen: list[PropertyChange] = []
    model.add_property_listener(seen.append)

    model.name = "B"

    assert [(c.name, c.old_value, c.new_value) for c in seen] == [("name", "A", "B")]
    assert seen[0].source is model
    assert metrics.count("signal.announce") == 1


def test_subscribe_from_other_thread_during_dispatch() -> None:
    sig = ChangeSignal()
    started = threading.Event()
    release = threading.Event()
    added: list[int] = []

    def slow(ch: PropertyChange) -> None:
        started.set()
        release.wait(timeout=5)

    sig.subscribe("x", slow)

    def subscriber() -> None:
        started.wait(timeout=5)
        sig.subscribe("x", lambda ch: added.append(ch.new_value))
        release.set()

    t = threading.Thread(target=subscriber)
    t.start()
    sig.announce("x", 0, 1)
    t.join(timeout=5)

    assert added == []
    sig.announce("x", 1, 2)
    assert added == [2]
