"""Owners: exclusive, destructive authority over one object.

An Owner holds an object and a NotifyingDeleter. Whenever the owner gives
up its object (delete, reset, release, hand-off, or being garbage collected
while still holding it) the deleter's control block is invalidated, so every
Observer of that object reports dead on its next check.

The block itself is created lazily, the first time an Observer attaches, or
eagerly by set_element_count() for array owners.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable, Generic, TypeVar

from ownref.block import BlockConnection
from ownref.compare import Handle
from ownref.deleter import Deleter, NotifyingDeleter

logger = logging.getLogger("ownref.owner")

T = TypeVar("T")


def _finalize_owner(deleter: NotifyingDeleter, obj: object) -> None:
    """Run an owner's hook after the owner itself was garbage collected."""
    try:
        deleter(obj)
    except Exception:
        # Nothing is left on the stack to propagate to.
        logger.exception("Deleter failed while finalizing owner of %s", type(obj).__name__)


class Owner(Handle, Generic[T]):
    """Exclusive owner of one object, with observer notification on deletion."""

    __slots__ = ("_obj", "_deleter", "_finalizer", "__weakref__")

    def __init__(
        self,
        obj: T | None = None,
        deleter: Deleter | NotifyingDeleter | None = None,
        *,
        strict: bool | None = None,
    ) -> None:
        if isinstance(deleter, NotifyingDeleter):
            self._deleter = deleter
        else:
            self._deleter = NotifyingDeleter(deleter, strict)
        self._obj: T | None = None
        self._finalizer: weakref.finalize | None = None
        self._hold(obj)

    def _hold(self, obj: T | None) -> None:
        self._obj = obj
        if obj is not None:
            self._finalizer = weakref.finalize(self, _finalize_owner, self._deleter, obj)

    def _let_go(self) -> T | None:
        """Forget the held object without running any deletion."""
        obj = self._obj
        self._obj = None
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        return obj

    # --- Access ---

    def get(self) -> T | None:
        return self._obj

    def __bool__(self) -> bool:
        return self._obj is not None

    @property
    def deleter(self) -> NotifyingDeleter[T]:
        return self._deleter

    @property
    def connection(self) -> BlockConnection:
        return self._deleter.connection

    def element_count(self) -> int:
        """Array size recorded in the block; a scalar owner without a block counts 1."""
        if self.connection.attached:
            return self.connection.element_count()
        return 0 if self._obj is None else 1

    # --- Lifetime ---

    def delete(self) -> None:
        """Invalidate all observers, then delete the held object. No-op when empty."""
        obj = self._let_go()
        if obj is None:
            return
        logger.debug("Deleting owned %s", type(obj).__name__)
        self._deleter(obj)

    close = delete

    def reset(self, obj: T | None = None, count: int | None = None) -> None:
        """Delete the current object and take ownership of obj.

        Pass `count` when obj is an array; otherwise the next block is created
        for a single element, whatever the previous object was.
        """
        self.delete()
        self._hold(obj)
        if count is not None and obj is not None:
            self.set_element_count(count)

    def release(self) -> T | None:
        """Give up ownership without deleting. Observers are invalidated."""
        obj = self._let_go()
        self._deleter.invalidate_now()
        return obj

    def take(self) -> Owner[T]:
        """Move the object, hook and block into a new Owner. Observers stay valid."""
        obj = self._let_go()
        return Owner(obj, self._deleter.transfer())

    def into_plain(self) -> tuple[T | None, Deleter]:
        """Hand off to a plain (object, deleter) pair that cannot notify anyone."""
        obj = self._let_go()
        return obj, self._deleter.unwrap()

    def invalidate_observers(self) -> None:
        """Sever every observer now; the object stays owned and alive."""
        self._deleter.invalidate_now()

    def set_element_count(self, count: int) -> None:
        """Start a fresh block recording an array of `count` elements."""
        self.connection.set_owner_block(count, self._deleter.strict)

    # --- Context manager ---

    def __enter__(self) -> Owner[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()

    def __repr__(self) -> str:
        return f"Owner({self._obj!r})"


def make_owner(
    cls: Callable[..., T],
    *args: Any,
    deleter: Deleter | None = None,
    strict: bool | None = None,
    **kwargs: Any,
) -> Owner[T]:
    """Allocate an object and wrap it in an Owner.

    If the deleter has an allocate() method (see Allocator) it builds the
    object; otherwise cls(*args, **kwargs) does.

    Usage:
        owner = make_owner(Node, "root")
        obs = Observer(owner)
        owner.delete()
        obs.get()  # None
    """
    return Owner(_allocate(cls, deleter, args, kwargs), deleter, strict=strict)


def make_owner_array(
    count: int,
    factory: Callable[[], T] | None = None,
    *,
    deleter: Deleter | None = None,
    strict: bool | None = None,
) -> Owner[list[T]]:
    """Own a list of `count` elements; the block records the element count."""
    if count < 0:
        raise ValueError(f"element count must be non-negative, got {count}")
    items = [factory() if factory is not None else None for _ in range(count)]
    owner: Owner[list[T]] = Owner(items, deleter, strict=strict)
    owner.set_element_count(count)
    return owner


def custom_make(
    cls: Callable[..., T], deleter: Deleter, *args: Any, **kwargs: Any
) -> tuple[T, Deleter]:
    """Allocate through deleter without observer support: a plain (obj, deleter) pair."""
    return _allocate(cls, deleter, args, kwargs), deleter


def _allocate(cls, deleter, args, kwargs):
    allocate = getattr(deleter, "allocate", None)
    if allocate is not None:
        return allocate(cls, *args, **kwargs)
    return cls(*args, **kwargs)
