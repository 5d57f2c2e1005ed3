"""ownref: observer references to exclusively owned objects."""

from importlib.metadata import version as _version

__version__ = _version("ownref")

from ownref._anchor import live_block_count
from ownref.errors import (
    OwnrefError,
    NullDereference,
    OutOfRange,
    ThreadAffinityViolation,
    TemporaryOwnerError,
    IncompatibleTypeError,
    BlockLifecycleError,
)
from ownref.block import (
    ControlBlock,
    BlockConnection,
    set_thread_affinity,
    thread_affinity_enabled,
    strict_threads,
)
from ownref.deleter import Allocator, NotifyingDeleter, default_delete
from ownref.owner import Owner, make_owner, make_owner_array, custom_make
from ownref.observer import Observer, TEMPORARY_CHECK_ENABLED
from ownref.aliasing import Path, Item, Fixed, Field, Accessor, alias, as_path
from ownref.compare import same_target, target_of
# textual NOT auto-imported, opt-in only

__all__ = [
    "Owner",
    "Observer",
    "make_owner",
    "make_owner_array",
    "custom_make",
    "Allocator",
    "NotifyingDeleter",
    "default_delete",
    "ControlBlock",
    "BlockConnection",
    "live_block_count",
    "set_thread_affinity",
    "thread_affinity_enabled",
    "strict_threads",
    "Path",
    "Item",
    "Fixed",
    "Field",
    "Accessor",
    "alias",
    "as_path",
    "same_target",
    "target_of",
    "TEMPORARY_CHECK_ENABLED",
    "OwnrefError",
    "NullDereference",
    "OutOfRange",
    "ThreadAffinityViolation",
    "TemporaryOwnerError",
    "IncompatibleTypeError",
    "BlockLifecycleError",
]
