"""
driver.py
State shared between the loader, the command registry and the transforms of one invocation:
the node id allocator, the session (source file) and the compiler phase reached so far.
"""
import os
from enum import IntEnum
from typing import Optional

# Placeholder id for nodes whose real id is not known yet.
DUMMY_NODE_ID = -1


class Phase(IntEnum):
    PHASE1 = 1  # parsed
    PHASE2 = 2  # macros expanded
    PHASE3 = 3  # names and ids resolved


class CommandState:
    """
    Owns the monotonic node id counter. Every id minted during an invocation comes from here,
    so ids stay unique across the loader and all transforms.
    """
    def __init__(self, first_id: int = 0):
        self._next_id = first_id

    def next_node_id(self) -> int:
        node_id = self._next_id
        self._next_id += 1
        return node_id

    def peek_node_id(self) -> int:
        """The id the next allocation will return, without taking it. Lets tests check which ids a pass minted."""
        return self._next_id


class Session:
    def __init__(self, local_crate_source_file: Optional[str] = None, phase: Phase = Phase.PHASE3):
        self.local_crate_source_file = local_crate_source_file
        self.phase = phase

    def source_file(self) -> str:
        if not self.local_crate_source_file:
            raise ValueError("Session has no local crate source file")
        return self.local_crate_source_file

    def source_file_stem(self) -> str:
        """The source file name without directory or extension, e.g. 'buffer' for 'src/buffer.rs'."""
        return os.path.splitext(os.path.basename(self.source_file()))[0]
