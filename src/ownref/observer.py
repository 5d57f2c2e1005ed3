"""Observers: non-owning handles that know when their target has died.

An Observer caches a reference to its target and a BlockConnection. Every
read first asks the block whether the target is still alive; if not, the
observer lets go of the block on the spot and behaves as null from then on.

Observers never keep their target alive and never delete it.
"""

from __future__ import annotations

import sys
from typing import Any, Generic, TypeVar

from ownref import _refs
from ownref.block import BlockConnection
from ownref.compare import Handle
from ownref.errors import IncompatibleTypeError, NullDereference, TemporaryOwnerError
from ownref.owner import Owner

T = TypeVar("T")
U = TypeVar("U")


class Observer(Handle, Generic[T]):
    """A non-owning reference to an owned object (or one of its sub-objects).

    `kind` is the type bound the target must satisfy. Observing another
    observer only widens: Observer(derived_obs, kind=Base) is fine, the
    reverse raises IncompatibleTypeError. Use cast() to narrow.
    """

    __slots__ = ("_target", "_cbx", "_kind")

    def __init__(self, source: Observer | Owner | None = None, *, kind: type | None = None) -> None:
        refs = sys.getrefcount(source)
        self._target: T | None = None
        self._cbx = BlockConnection()
        self._kind: type = _bound_for(source, kind)
        if isinstance(source, Owner) and _refs.is_temporary(refs, _CONSTRUCTION_THRESHOLD):
            raise TemporaryOwnerError(
                "cannot observe a temporary Owner; bind it to a name first"
            )
        self._point_to(source)

    @classmethod
    def _aliased(cls, cbx: BlockConnection, target: Any, kind: type) -> Observer:
        """Observer of `target` that shares (attaches to) the block behind cbx."""
        obs = cls.__new__(cls)
        obs._target = None
        obs._cbx = BlockConnection()
        obs._kind = kind
        if cbx.attached:
            obs._cbx.adopt(cbx)
            obs._target = target
        return obs

    def _point_to(self, source: Observer | Owner | None) -> None:
        if source is None:
            return
        if isinstance(source, Observer):
            if self._cbx.adopt_if_valid(source._cbx):
                self._target = source._target
        elif isinstance(source, Owner):
            obj = source.get()
            if obj is not None:
                self._check_target(obj)
                self._cbx.assure_owner_block(source.connection, strict=source.deleter.strict)
                self._target = obj
        else:
            raise TypeError(
                f"cannot observe {type(source).__name__}; wrap it in an Owner first"
            )

    def _check_target(self, obj: object) -> None:
        if not isinstance(obj, self._kind):
            raise IncompatibleTypeError(
                f"{type(obj).__name__} is not a {self._kind.__name__}"
            )

    # --- Assignment ---

    def assign(self, source: Observer | Owner | None = None) -> Observer[T]:
        """Let go of the current target and point at source instead."""
        refs = sys.getrefcount(source)
        if source is self:
            return self
        if isinstance(source, Owner) and _refs.is_temporary(refs, _ASSIGN_THRESHOLD):
            raise TemporaryOwnerError(
                "cannot observe a temporary Owner; bind it to a name first"
            )
        if isinstance(source, Observer) and not issubclass(source._kind, self._kind):
            raise IncompatibleTypeError(
                f"cannot assign an observer of {source._kind.__name__} "
                f"to an observer of {self._kind.__name__}"
            )
        if isinstance(source, Owner):
            obj = source.get()
            if obj is not None:
                self._check_target(obj)
        elif source is not None and not isinstance(source, Observer):
            raise TypeError(
                f"cannot observe {type(source).__name__}; wrap it in an Owner first"
            )
        # Past this point assignment cannot fail.
        self.release()
        self._point_to(source)
        return self

    def reset(self) -> None:
        self.release()

    def move(self) -> Observer[T]:
        """Transfer the attachment to a new observer; this one becomes null."""
        moved = type(self).__new__(type(self))
        moved._target = self._target
        moved._kind = self._kind
        moved._cbx = BlockConnection()
        moved._cbx.steal(self._cbx)
        self._target = None
        return moved

    def release(self) -> None:
        """Detach from the block. The observer is null afterwards."""
        self._cbx.release()
        self._target = None

    def __copy__(self) -> Observer[T]:
        return type(self)(self)

    def __deepcopy__(self, memo: dict) -> Observer[T]:
        # The target is not ours to copy.
        return type(self)(self)

    # --- Access ---

    @property
    def kind(self) -> type:
        return self._kind

    def __bool__(self) -> bool:
        """Is the target alive? Lets go of a dead block as a side effect."""
        return self._cbx.check_valid()

    def valid(self) -> bool:
        return self._cbx.check_valid()

    def get(self) -> T | None:
        """The target if alive, else None. Never raises."""
        return self._target if self._cbx.check_valid() else None

    def deref(self) -> T:
        """The target if alive, else NullDereference."""
        if self._cbx.check_valid():
            return self._target
        raise NullDereference(f"null or expired Observer[{self._kind.__name__}] dereferenced")

    def element_count(self) -> int:
        return self._cbx.element_count()

    def cast(self, kind: type[U]) -> Observer[U]:
        """Runtime-checked downcast. A mismatch yields a null observer, not an error."""
        if self._cbx.check_valid() and isinstance(self._target, kind):
            return Observer._aliased(self._cbx, self._target, kind)
        return Observer(kind=kind)

    def alias(self, path, kind: type | None = None) -> Observer:
        """Observer of the sub-object at `path`, sharing this observer's block."""
        from ownref.aliasing import alias_from_observer

        return alias_from_observer(self, path, kind)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in Observer.__slots__:
            raise AttributeError(name)
        return getattr(self.deref(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("__") or name in Observer.__slots__:
            object.__setattr__(self, name, value)
        else:
            setattr(self.deref(), name, value)

    # --- Lifetime ---

    def __enter__(self) -> Observer[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def __del__(self) -> None:
        cbx = getattr(self, "_cbx", None)
        if cbx is not None:
            cbx.release()

    def __repr__(self) -> str:
        if self._cbx.attached:
            return f"Observer({self._target!r})"
        return f"Observer[{self._kind.__name__}](None)"


def _bound_for(source: object, kind: type | None) -> type:
    if isinstance(source, Observer):
        if kind is None:
            return source._kind
        if not issubclass(source._kind, kind):
            raise IncompatibleTypeError(
                f"cannot widen an observer of {source._kind.__name__} "
                f"to an observer of {kind.__name__}"
            )
        return kind
    return kind if kind is not None else object


# --- Temporary-owner calibration ---
# Each probe mirrors the call shape of the entry point it calibrates.


class _ConstructionProbe(Handle, Generic[T]):
    __slots__ = ("refs",)

    def __init__(self, source=None, *, kind=None) -> None:
        self.refs = sys.getrefcount(source)


class _AssignProbe:
    __slots__ = ()

    def assign(self, source=None):
        return sys.getrefcount(source)


_CONSTRUCTION_THRESHOLD = _refs.calibrate(_ConstructionProbe)
_ASSIGN_THRESHOLD = _refs.calibrate(_AssignProbe().assign)

TEMPORARY_CHECK_ENABLED = _CONSTRUCTION_THRESHOLD is not None
