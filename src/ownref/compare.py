"""Identity comparison across observers, owners, raw objects and None.

Two handles compare equal when they currently point at the same object.
Comparison goes by the cached target, never by control block: an alias of a
sub-object shares its root's block but is not equal to the root.
"""

from __future__ import annotations


class Handle:
    """Comparison behavior shared by Owner and Observer.

    Subclasses provide get(), returning the current target or None.
    """

    __slots__ = ()

    def get(self):
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return same_target(self, other)

    def __ne__(self, other: object) -> bool:
        return not same_target(self, other)

    # Equality follows a target that can change or die; not usable as a key.
    __hash__ = None  # type: ignore[assignment]


def target_of(value: object) -> object:
    """The object a handle currently points at; anything else is its own target."""
    if isinstance(value, Handle):
        return value.get()
    return value


def same_target(left: object, right: object) -> bool:
    return target_of(left) is target_of(right)
