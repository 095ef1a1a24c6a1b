"""
reorganize_context.py
State shared by every stage of module reorganization: the item catalog, the destination registry
(candidate modules, synthesized modules, item -> destination) and the use-path tracker.
Each stage receives the context explicitly; nothing here is global.
"""
from typing import Dict, List, Optional

from ast_equiv import strip_relative_segments
from crate_model import Crate, Item, ItemKind, has_source_header, is_std
from driver import CommandState, DUMMY_NODE_ID, Session
from reorganize_transforms.declaration_catalog import catalog_items

STDLIB_MODULE_NAME = "stdlib"


class PathMapping:
    """
    Pending rewrite of one use statement: the normalized prefix it should get and the module that
    prefix now points into. dest_id stays DUMMY_NODE_ID until a moved module patches it.
    """
    def __init__(self, prefix: List[str], dest_id: int = DUMMY_NODE_ID):
        self.prefix = list(prefix)
        self.dest_id = dest_id

    @property
    def patched(self) -> bool:
        return self.dest_id != DUMMY_NODE_ID

    def __repr__(self):
        return f"PathMapping(prefix={self.prefix!r}, dest_id={self.dest_id})"


class ReorganizeContext:
    def __init__(self, state: CommandState, session: Session, verbose: bool = False):
        self.state = state
        self.session = session
        self.verbose = verbose
        # node id -> snapshot of the item
        self.item_map: Dict[int, Item] = {}
        # moved item id -> destination module id
        self.item_to_dest_module: Dict[int, int] = {}
        # name of a module that has to be created -> its new node id, e.g. "stdlib" -> 42
        self.new_modules: Dict[str, int] = {STDLIB_MODULE_NAME: state.next_node_id()}
        # ids of real modules that items may be moved into, in id order
        self.possible_destination_modules: List[int] = []
        # use statement id -> pending path rewrite
        self.path_mapping: Dict[int, PathMapping] = {}

    def debug_print(self, message: str) -> None:
        """
        Print a debug message if verbose mode is enabled.

        Args:
            message: The message to print
        """
        if self.verbose:
            print(f"[REORGANIZE DEBUG] {message}")

    def find_destination_modules(self, crate: Crate) -> None:
        """
        Catalog the crate and collect the destination candidates (modules that are neither header
        generated nor from the standard library) and a pending path record for every parsed use statement.
        """
        self.item_map = catalog_items(crate)
        candidates = []
        for item_id, item in self.item_map.items():
            if item.kind == ItemKind.MOD:
                if not has_source_header(item.attrs) and not is_std(item.attrs):
                    candidates.append(item_id)
            elif item.kind == ItemKind.USE and item.span is not None:
                # Synthesized use statements carry no span and are left alone.
                prefix = strip_relative_segments(item.node.prefix, keep_single=True)
                self.path_mapping[item_id] = PathMapping(prefix)
        self.possible_destination_modules = sorted(candidates)

        for candidate_id in self.possible_destination_modules:
            if self.item_map[candidate_id].name == STDLIB_MODULE_NAME:
                self.new_modules[STDLIB_MODULE_NAME] = candidate_id
                break

        self.debug_print(f"catalogued {len(self.item_map)} items, candidates: "
                         f"{[self.item_map[i].name for i in self.possible_destination_modules]}, "
                         f"use statements tracked: {len(self.path_mapping)}")

    def module_display_name(self, module: Item) -> str:
        """A module's name, or the crate's source file stem for an anonymous module."""
        if module.name:
            return module.name
        return self.session.source_file_stem()

    def is_new_module(self, dest_id: int) -> bool:
        return dest_id not in self.possible_destination_modules

    def new_module_name(self, dest_id: int) -> Optional[str]:
        for name, node_id in self.new_modules.items():
            if node_id == dest_id:
                return name
        return None

    def patch_paths(self, old_name: str, new_name: str, dest_id: int) -> None:
        """Point every pending use path that goes through `old_name` at its destination module."""
        for use_id in sorted(self.path_mapping):
            mapping = self.path_mapping[use_id]
            for i, segment in enumerate(mapping.prefix):
                if segment == old_name:
                    mapping.prefix[i] = new_name
                    mapping.dest_id = dest_id

    def create_dest_mod_map(self) -> Dict[int, List[int]]:
        """Reverse item_to_dest_module: destination module id -> ids of the items it receives, in walk order."""
        dest_mod_to_items: Dict[int, List[int]] = {}
        for item_id, dest_mod_id in self.item_to_dest_module.items():
            dest_mod_to_items.setdefault(dest_mod_id, []).append(item_id)
        return dest_mod_to_items
