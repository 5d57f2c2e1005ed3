"""Deleters: the owner's destruction hook and the allocation strategy.

A NotifyingDeleter wraps whatever deletion action an owner would otherwise
run. Calling it invalidates the control block first, then deletes, so no
observer can ever read through to an object that is being torn down.

Python frees memory on its own, so the default deletion action does nothing.
Supply a deleter when deletion means something (closing a file, returning a
buffer to a pool, detaching a widget).
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from ownref.block import BlockConnection

T = TypeVar("T")

Deleter = Callable[[Any], None]


def default_delete(obj: object) -> None:
    """Deletion action used when none is given: dropping the reference is enough."""


class Allocator:
    """Allocating deleter: knows how to build an object as well as destroy it.

    make_owner() calls allocate() when the deleter provides it, so a subclass
    can route construction through a pool or arena and pair it with the
    matching release in __call__.

    Usage:
        class Pooled(Allocator):
            @classmethod
            def allocate(cls, factory, *args, **kwargs):
                return pool.acquire(factory, *args, **kwargs)

            def __call__(self, obj):
                pool.give_back(obj)

        owner = make_owner(Buffer, 4096, deleter=Pooled())
    """

    @classmethod
    def allocate(cls, factory: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return factory(*args, **kwargs)

    def __call__(self, obj: object) -> None:
        pass


class NotifyingDeleter(Generic[T]):
    """Destruction hook: invalidates the owner's control block, then deletes.

    The hook holds the owner's (unattached) block connection. Handing the hook
    off to a plain deletion action, or replacing its action, invalidates the
    block: a plain deleter cannot notify anyone, so observers must learn now.
    """

    __slots__ = ("_inner", "_cbx", "_strict")

    def __init__(self, deleter: Deleter | None = None, strict: bool | None = None) -> None:
        self._inner: Deleter = deleter if deleter is not None else default_delete
        self._cbx = BlockConnection()
        self._strict = strict

    @property
    def connection(self) -> BlockConnection:
        return self._cbx

    @property
    def strict(self) -> bool | None:
        return self._strict

    @property
    def inner(self) -> Deleter:
        return self._inner

    def __call__(self, obj: T) -> None:
        """Zero every observer of obj, then run the wrapped deletion."""
        self._cbx.mark_invalid()
        self._inner(obj)

    def invalidate_now(self) -> None:
        """Sever all observers without deleting anything."""
        self._cbx.mark_invalid()

    def unwrap(self) -> Deleter:
        """Give up notification and return the plain deletion action."""
        self._cbx.mark_invalid()
        return self._inner

    def transfer(self) -> NotifyingDeleter[T]:
        """Move this hook, block connection included, into a new hook."""
        moved: NotifyingDeleter[T] = NotifyingDeleter(self._inner, self._strict)
        moved._cbx.steal(self._cbx)
        return moved

    def replace(self, deleter: Deleter) -> None:
        """Assign a plain deletion action. The current block is invalidated."""
        self._cbx.mark_invalid()
        self._inner = deleter

    def __repr__(self) -> str:
        name = getattr(self._inner, "__name__", type(self._inner).__name__)
        return f"NotifyingDeleter({name}, {self._cbx.block!r})"
