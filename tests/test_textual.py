"""Tests for ownref.textual: Textual integration layer."""

import gc
import weakref

from textual.css.query import NoMatches

from ownref import Observer
from ownref import textual as otx


class _MockWidget:
    def __init__(self, name):
        self.name = name


class _MockStatic(_MockWidget):
    pass


class _MockApp:
    """Minimal mock matching the Textual App interface otx needs."""

    def __init__(self, widgets):
        self._widgets = widgets

    def query_one(self, selector):
        try:
            return self._widgets[selector]
        except KeyError:
            raise NoMatches(selector) from None


class TestOwnRelease:
    def test_own_is_idempotent(self):
        w = _MockWidget("a")
        first = otx.own(w)
        assert otx.own(w) is first
        assert otx.is_owned(w)
        otx.release(w)
        assert not otx.is_owned(w)

    def test_release_invalidates_observers(self):
        w = _MockWidget("a")
        obs = otx.watch_widget(w)
        assert obs.name == "a"
        otx.release(w)
        assert not obs
        assert obs.get() is None

    def test_release_unknown_widget_is_noop(self):
        otx.release(_MockWidget("never owned"))

    def test_release_does_not_touch_the_widget(self):
        w = _MockWidget("a")
        otx.own(w)
        otx.release(w)
        assert w.name == "a"

    def test_owned_widget_stays_alive_until_released(self):
        w = _MockWidget("kept")
        ref = weakref.ref(w)
        otx.own(w)
        del w
        gc.collect()
        assert ref() is not None
        assert otx.is_owned(ref())
        otx.release(ref())
        gc.collect()
        assert ref() is None


class TestQuery:
    def test_query_owned_widget(self):
        w = _MockWidget("footer")
        app = _MockApp({"#footer": w})
        otx.own(w)
        obs = otx.query(app, "#footer")
        assert isinstance(obs, Observer)
        assert obs.get() is w
        otx.release(w)
        assert not obs

    def test_no_matches_gives_null(self):
        app = _MockApp({})
        obs = otx.query(app, "#missing")
        assert not obs

    def test_unowned_widget_gives_null(self):
        w = _MockWidget("loose")
        app = _MockApp({"#loose": w})
        assert not otx.query(app, "#loose")

    def test_kind_mismatch_gives_null(self):
        w = _MockWidget("plain")
        app = _MockApp({"#plain": w})
        otx.own(w)
        assert not otx.query(app, "#plain", kind=_MockStatic)
        assert otx.query(app, "#plain", kind=_MockWidget)
        otx.release(w)

    def test_kind_match(self):
        w = _MockStatic("static")
        app = _MockApp({"#s": w})
        otx.own(w)
        obs = otx.query(app, "#s", kind=_MockStatic)
        assert obs.kind is _MockStatic
        otx.release(w)
