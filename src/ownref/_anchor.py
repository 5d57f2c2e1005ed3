"""Data anchor: plain Python structures that hold every live control block.

A block is "freed" by removing it from this registry. Nothing else keeps a
block reachable except the connections of the handles attached to it, so the
registry is the single place that can answer "how many blocks are alive?".
"""

import itertools

# block_id -> ControlBlock
blocks: dict[int, object] = {}

# ID generation: itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def live_block_count() -> int:
    """Number of control blocks that have not been freed yet."""
    return len(blocks)
