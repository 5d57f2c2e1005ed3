"""Tests for strict thread affinity."""

import threading

import pytest

from ownref import (
    Observer,
    ThreadAffinityViolation,
    make_owner,
    set_thread_affinity,
    strict_threads,
    thread_affinity_enabled,
)


class Thing:
    pass


def _check_in_thread(obs):
    """Run bool(obs) on a fresh thread; return the result or the exception."""
    outcome = []

    def run():
        try:
            outcome.append(bool(obs))
        except ThreadAffinityViolation as exc:
            outcome.append(exc)

    t = threading.Thread(target=run)
    t.start()
    t.join(timeout=2)
    return outcome[0]


class TestThreadAffinity:
    def test_default_is_relaxed(self):
        assert not thread_affinity_enabled()
        owner = make_owner(Thing)
        obs = Observer(owner)
        assert _check_in_thread(obs) is True

    def test_strict_scope_rejects_foreign_thread(self):
        with strict_threads():
            owner = make_owner(Thing)
            obs = Observer(owner)
        assert not thread_affinity_enabled()
        assert obs  # origin thread is fine
        assert owner.connection.block.strict
        assert isinstance(_check_in_thread(obs), ThreadAffinityViolation)

    def test_per_owner_strict(self):
        owner = make_owner(Thing, strict=True)
        obs = Observer(owner)
        assert isinstance(_check_in_thread(obs), ThreadAffinityViolation)
        relaxed = make_owner(Thing, strict=False)
        with strict_threads():
            other = Observer(relaxed)
        assert _check_in_thread(other) is True

    def test_global_switch(self):
        set_thread_affinity(True)
        try:
            owner = make_owner(Thing)
            obs = Observer(owner)
        finally:
            set_thread_affinity(False)
        assert isinstance(_check_in_thread(obs), ThreadAffinityViolation)

    def test_strict_scope_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with strict_threads():
                raise RuntimeError("boom")
        assert not thread_affinity_enabled()

    def test_release_from_foreign_thread_is_allowed(self):
        owner = make_owner(Thing, strict=True)
        obs = Observer(owner)
        block = owner.connection.block
        t = threading.Thread(target=obs.release)
        t.start()
        t.join(timeout=2)
        assert block.attachment_count == 0
