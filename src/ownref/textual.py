"""Textual integration for ownref. Opt-in, requires textual.

Textual owns its widgets; this module lets app code hold Observers of them
that die when a widget is unmounted, instead of keeping stale widgets around.

    class Panel(Static):
        def on_mount(self):
            otx.own(self)

        def on_unmount(self):
            otx.release(self)

    footer = otx.query(app, "#footer", kind=Static)
    if footer:
        footer.update("ready")

The registry below has a single owner (this module): an id is present iff the
widget was passed to own() and not yet to release(). Entries hold their
widget strongly, so a widget that is owned but never released stays alive
for the life of the process; pair every own() with a release() in
on_unmount.
"""

import logging

from textual.css.query import NoMatches

from ownref.observer import Observer
from ownref.owner import Owner

logger = logging.getLogger("ownref.textual")

_owners: dict[int, Owner] = {}


def own(widget) -> Owner:
    """Register widget as owned. Idempotent.

    The registry keeps widget alive until release(widget) is called.
    """
    key = id(widget)
    owner = _owners.get(key)
    if owner is None or owner.get() is not widget:
        owner = Owner(widget)
        _owners[key] = owner
        logger.debug("Owning widget %r", widget)
    return owner


def release(widget) -> None:
    """Invalidate every observer of widget and forget it."""
    owner = _owners.pop(id(widget), None)
    if owner is not None and owner.get() is widget:
        logger.debug("Releasing widget %r", widget)
        owner.delete()


def is_owned(widget) -> bool:
    owner = _owners.get(id(widget))
    return owner is not None and owner.get() is widget


def watch_widget(widget) -> Observer:
    """Own widget (if not already) and return an Observer of it."""
    owner = own(widget)
    return Observer(owner)


def query(app, selector: str, kind: type | None = None) -> Observer:
    """query_one() that answers with an Observer.

    Returns a null observer when nothing matches, when the match is not an
    owned widget, or when it is not an instance of kind.
    """
    try:
        widget = app.query_one(selector)
    except NoMatches:
        logger.debug("No widget matches %r", selector)
        return Observer(kind=kind)
    owner = _owners.get(id(widget))
    if owner is None or owner.get() is not widget:
        return Observer(kind=kind)
    obs = Observer(owner)
    return obs.cast(kind) if kind is not None else obs
