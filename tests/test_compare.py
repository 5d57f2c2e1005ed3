"""Tests for identity comparison across observers, owners, raw objects and None."""

import pytest

from ownref import Observer, Owner, make_owner, same_target, target_of


class Thing:
    pass


class TestComparison:
    def test_observer_equals_its_owner(self):
        owner = make_owner(Thing)
        obs = Observer(owner)
        assert obs == owner
        assert owner == obs
        assert not (obs != owner)

    def test_observer_equals_raw_object(self):
        owner = make_owner(Thing)
        obs = Observer(owner)
        raw = owner.get()
        assert obs == raw
        assert raw == obs
        assert obs != Thing()

    def test_observers_of_same_target(self):
        owner = make_owner(Thing)
        a = Observer(owner)
        b = Observer(a)
        assert a == b

    def test_observers_of_different_targets(self):
        first = make_owner(Thing)
        second = make_owner(Thing)
        assert Observer(first) != Observer(second)

    def test_dead_observer_equals_none(self):
        owner = make_owner(Thing)
        obs = Observer(owner)
        assert obs != None  # noqa: E711
        owner.delete()
        assert obs == None  # noqa: E711
        assert obs == Observer()
        assert obs == Owner()

    def test_handles_are_unhashable(self):
        owner = make_owner(Thing)
        with pytest.raises(TypeError):
            hash(owner)
        with pytest.raises(TypeError):
            hash(Observer(owner))

    def test_helpers(self):
        owner = make_owner(Thing)
        obs = Observer(owner)
        assert target_of(obs) is owner.get()
        assert target_of(owner) is owner.get()
        assert target_of(5) == 5
        assert same_target(obs, owner)
        assert not same_target(obs, None)
