"""Aliasing: observers of sub-objects that live and die with their root.

A Path is an immutable chain of steps (index, fixed index, attribute,
accessor function). alias() resolves the path against the live root object
and returns an Observer of whatever it lands on. That observer attaches to
the root's control block, so deleting the root owner kills every alias built
from it, however deep the path.

The alias captures the object found at the path when it is resolved. If the
slot is later rebound, the alias keeps pointing at the original object.

Usage:
    grid = make_owner_array(5, Cell)
    cell = alias(grid, Path().item(2))
    name = alias(cell, Path().field("label"))
    grid.delete()
    cell.get(), name.get()  # None, None
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Iterable, Union

from ownref import _refs
from ownref.errors import IncompatibleTypeError, OutOfRange, TemporaryOwnerError
from ownref.observer import Observer
from ownref.owner import Owner


class Step:
    """One hop from an object to one of its sub-objects."""

    __slots__ = ()

    def apply(self, obj: Any) -> Any:
        raise NotImplementedError


class Item(Step):
    """Integer index, bounds-checked when the path is resolved.

    The bound is `bound` when given (never more than the container's length,
    if it has one), otherwise len(container). Negative indices are out of range.
    """

    __slots__ = ("index", "bound")

    def __init__(self, index: int, bound: int | None = None) -> None:
        self.index = index
        self.bound = bound

    def apply(self, obj: Any) -> Any:
        if self.bound is None:
            limit = len(obj)
        elif hasattr(obj, "__len__"):
            limit = min(self.bound, len(obj))
        else:
            limit = self.bound
        if not 0 <= self.index < limit:
            raise OutOfRange(f"index {self.index} out of range for {limit} element(s)")
        return obj[self.index]

    def __repr__(self) -> str:
        if self.bound is None:
            return f"Item({self.index})"
        return f"Item({self.index}, bound={self.bound})"


class Fixed(Step):
    """Index into a container of known, fixed size; checked when the step is built."""

    __slots__ = ("index", "bound")

    def __init__(self, index: int, bound: int) -> None:
        if not 0 <= index < bound:
            raise OutOfRange(f"fixed index {index} out of range for {bound} element(s)")
        self.index = index
        self.bound = bound

    def apply(self, obj: Any) -> Any:
        return obj[self.index]

    def __repr__(self) -> str:
        return f"Fixed({self.index}, {self.bound})"


class Field(Step):
    """Named attribute selector."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def apply(self, obj: Any) -> Any:
        return getattr(obj, self.name)

    def __repr__(self) -> str:
        return f"Field({self.name!r})"


class Accessor(Step):
    """Caller-supplied function from an object to one of its sub-objects."""

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self.fn = fn

    def apply(self, obj: Any) -> Any:
        return self.fn(obj)

    def __repr__(self) -> str:
        return f"Accessor({getattr(self.fn, '__name__', self.fn)!r})"


class Path:
    """Immutable chain of steps; each builder returns a new, longer Path."""

    __slots__ = ("steps",)

    def __init__(self, *steps: Step) -> None:
        self.steps: tuple[Step, ...] = tuple(_as_step(s) for s in steps)

    def item(self, index: int, bound: int | None = None) -> Path:
        return Path(*self.steps, Item(index, bound))

    def fixed(self, index: int, bound: int) -> Path:
        return Path(*self.steps, Fixed(index, bound))

    def field(self, name: str) -> Path:
        return Path(*self.steps, Field(name))

    def accessor(self, fn: Callable[[Any], Any]) -> Path:
        return Path(*self.steps, Accessor(fn))

    def resolve(self, obj: Any) -> Any:
        """Apply the steps left to right, each result feeding the next."""
        for step in self.steps:
            obj = step.apply(obj)
        return obj

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __repr__(self) -> str:
        return f"Path({', '.join(repr(s) for s in self.steps)})"


PathLike = Union[Path, Step, str, int, Iterable]


def _as_step(value: Any) -> Step:
    if isinstance(value, Step):
        return value
    if isinstance(value, str):
        return Field(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return Item(value)
    if callable(value):
        return Accessor(value)
    raise TypeError(f"cannot use {value!r} as an alias step")


def as_path(path: PathLike) -> Path:
    """Coerce a Path, a single step, or a sequence of steps into a Path.

    Strings become Field steps, ints become Item steps, callables Accessors.
    """
    if isinstance(path, Path):
        return path
    if isinstance(path, (Step, str, int)) or callable(path):
        return Path(path)
    return Path(*path)


def alias(root: Observer | Owner, path: PathLike, kind: type | None = None) -> Observer:
    """Observer of the sub-object of root at path, sharing root's control block.

    The path is resolved before any observer exists, so an OutOfRange leaves
    no attachment behind. A null or expired root yields a null observer.
    """
    refs = sys.getrefcount(root)
    if isinstance(root, Owner):
        if _refs.is_temporary(refs, _ALIAS_THRESHOLD):
            raise TemporaryOwnerError("cannot alias into a temporary Owner; bind it to a name first")
        return alias_from_owner(root, path, kind)
    if isinstance(root, Observer):
        return alias_from_observer(root, path, kind)
    raise TypeError(f"cannot alias into {type(root).__name__}; wrap it in an Owner first")


def alias_from_owner(owner: Owner, path: PathLike, kind: type | None = None) -> Observer:
    path = as_path(path)
    kind = kind if kind is not None else object
    obj = owner.get()
    if obj is None:
        return Observer(kind=kind)
    target = _checked(path.resolve(obj), kind)
    obs = Observer(kind=kind)
    obs._cbx.assure_owner_block(owner.connection, strict=owner.deleter.strict)
    obs._target = target
    return obs


def alias_from_observer(root: Observer, path: PathLike, kind: type | None = None) -> Observer:
    path = as_path(path)
    kind = kind if kind is not None else object
    if not root.valid():
        return Observer(kind=kind)
    target = _checked(path.resolve(root._target), kind)
    return Observer._aliased(root._cbx, target, kind)


def _checked(target: Any, kind: type) -> Any:
    if not isinstance(target, kind):
        raise IncompatibleTypeError(f"{type(target).__name__} is not a {kind.__name__}")
    return target


def _alias_probe(root, path=None, kind=None):
    return sys.getrefcount(root)


_ALIAS_THRESHOLD = _refs.calibrate(_alias_probe)
