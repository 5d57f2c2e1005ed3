"""Control blocks: the shared liveness record behind every observer.

A ControlBlock knows nothing about the object it guards. It records two
independent signals: whether the object is still alive, and how many
observers are attached. The block is freed exactly once, by whichever of
invalidate() or the last detach() happens second.

Handles never touch a block directly; they go through a BlockConnection,
a small mutable cell that may or may not hold a block.

Thread safety: there is no locking. Call set_thread_affinity(True) (or pass
strict=True when creating an owner) to make validity checks from any thread
other than the block's creator fail fast with ThreadAffinityViolation.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager

from ownref import _anchor
from ownref.errors import BlockLifecycleError, ThreadAffinityViolation

logger = logging.getLogger("ownref.block")

# ─── Thread affinity ─────────────────────────────────────────────────────────
_thread_affinity = False


def set_thread_affinity(enabled: bool) -> None:
    """Turn strict thread-affinity checking on or off for new blocks.

    Blocks created while enabled remember their creating thread; existing
    blocks keep whatever mode they were created with.
    """
    global _thread_affinity
    _thread_affinity = bool(enabled)


def thread_affinity_enabled() -> bool:
    return _thread_affinity


@contextmanager
def strict_threads():
    """Context manager: blocks created inside the scope are thread-checked.

    Usage:
        with strict_threads():
            owner = make_owner(Node)
            obs = Observer(owner)   # block records this thread
    """
    previous = _thread_affinity
    set_thread_affinity(True)
    try:
        yield
    finally:
        set_thread_affinity(previous)


class ControlBlock:
    """Attachment count plus a one-way valid -> invalid flag."""

    __slots__ = ("_id", "_attachments", "_valid_count", "_origin_thread")

    INVALID = -1

    def __init__(self, size: int = 1, strict: bool | None = None) -> None:
        if size < 0:
            raise ValueError(f"element count must be non-negative, got {size}")
        if strict is None:
            strict = _thread_affinity
        self._id = _anchor.new_id()
        self._attachments = 0
        # Valid while >= 0; doubles as the array element count.
        self._valid_count = size
        self._origin_thread = threading.get_ident() if strict else None
        _anchor.blocks[self._id] = self

    @property
    def attachment_count(self) -> int:
        return self._attachments

    @property
    def strict(self) -> bool:
        return self._origin_thread is not None

    @property
    def freed(self) -> bool:
        return self._id not in _anchor.blocks

    def is_valid(self) -> bool:
        """Is the watched object still alive?"""
        if self._origin_thread is not None and threading.get_ident() != self._origin_thread:
            raise ThreadAffinityViolation(
                f"control block {self._id} created on thread {self._origin_thread} "
                f"was checked from thread {threading.get_ident()}"
            )
        return self._valid_count > self.INVALID

    def invalidate(self) -> None:
        """Mark the watched object dead. Frees now if nobody is attached."""
        if self._attachments == 0:
            self._free()
        else:
            logger.debug(
                "Invalidated block %d with %d attached observer(s)",
                self._id, self._attachments,
            )
            self._valid_count = self.INVALID

    def attach(self) -> None:
        self._attachments += 1

    def detach(self) -> None:
        """Drop one attachment. Frees when invalid and nothing is left attached."""
        if self._attachments == 0:
            raise BlockLifecycleError(f"detach from block {self._id} with no attachments")
        self._attachments -= 1
        # Invalid contributes -1, so this is "invalid and zero attachments".
        if self._attachments + self._valid_count < 0:
            self._free()

    def element_count(self) -> int:
        return self._valid_count if self._valid_count > self.INVALID else 0

    def _free(self) -> None:
        if _anchor.blocks.pop(self._id, None) is None:
            raise BlockLifecycleError(f"control block {self._id} freed twice")
        self._valid_count = self.INVALID
        logger.debug("Freed block %d", self._id)

    def __repr__(self) -> str:
        if self.freed:
            state = "freed"
        elif self._valid_count > self.INVALID:
            state = f"valid={self._valid_count}"
        else:
            state = "invalid"
        return f"ControlBlock({self._id}, {state}, attached={self._attachments})"


class BlockConnection:
    """A handle's link to a control block. Holds at most one block.

    Observers keep one attached connection each. Owners keep an unattached
    one: the owner's connection is how new observers find the block, but it
    never counts as an attachment.
    """

    __slots__ = ("block",)

    def __init__(self) -> None:
        self.block: ControlBlock | None = None

    @property
    def attached(self) -> bool:
        return self.block is not None

    def check_valid(self) -> bool:
        """Validity check that lets go of a block found to be invalid."""
        block = self.block
        if block is None:
            return False
        if block.is_valid():
            return True
        self.block = None
        block.detach()
        return False

    def release(self) -> None:
        block = self.block
        if block is not None:
            self.block = None
            block.detach()

    def adopt_if_valid(self, src: BlockConnection) -> bool:
        """Attach to src's block only if it still reports valid."""
        block = src.block
        if block is not None and block.is_valid():
            block.attach()
            self.block = block
            return True
        return False

    def adopt(self, src: BlockConnection) -> None:
        if src.block is not None:
            src.block.attach()
            self.block = src.block

    def steal(self, src: BlockConnection) -> None:
        """Take over src's attachment without touching the counters."""
        self.block = src.block
        src.block = None

    def assure_owner_block(
        self, src: BlockConnection, count: int = 1, strict: bool | None = None
    ) -> None:
        """Attach to an owner's block, creating it on first use."""
        if src.block is None:
            src.block = ControlBlock(count, strict)
        src.block.attach()
        self.block = src.block

    def mark_invalid(self) -> None:
        block = self.block
        if block is not None:
            self.block = None
            block.invalidate()

    def set_owner_block(self, count: int, strict: bool | None = None) -> None:
        """Replace the owner's block with a fresh one sized for `count` elements."""
        if self.block is not None:
            self.block.invalidate()
        self.block = ControlBlock(count, strict)

    def element_count(self) -> int:
        return 0 if self.block is None else self.block.element_count()

    def __repr__(self) -> str:
        return f"BlockConnection({self.block!r})"
