"""
ast_visit.py
Walking and rewriting helpers for the crate tree.
visit_items walks pre-order; fold_items rewrites post-order (children are folded before their module
is handed to the callback) and returns a new Crate, leaving the input untouched.
"""
from typing import Callable, List, Optional

from crate_model import Crate, Item, ItemKind


def visit_items(crate: Crate, callback: Callable[[Item], None]) -> None:
    """Call `callback` on every item of the crate, a module before its children."""
    def walk(items: List[Item]):
        for item in items:
            callback(item)
            if item.kind == ItemKind.MOD:
                walk(item.node.items)
    walk(crate.items)


def walk_mods(crate: Crate, callback: Callable[[Item, Optional[Item]], None]) -> None:
    """Call `callback(module, parent_module)` for every module; parent is None at the crate root."""
    def walk(items: List[Item], parent: Optional[Item]):
        for item in items:
            if item.kind == ItemKind.MOD:
                callback(item, parent)
                walk(item.node.items, item)
    walk(crate.items, None)


def fold_items(crate: Crate, callback: Callable[[Item], List[Item]]) -> Crate:
    """
    Rebuild the crate bottom-up. For every item the callback receives a clone whose module children
    were already folded, and returns the items that replace it (an empty list deletes it).
    """
    def fold(items: List[Item]) -> List[Item]:
        result = []
        for item in items:
            folded = item.clone()
            if folded.kind == ItemKind.MOD:
                folded.node.items = fold(folded.node.items)
            result.extend(callback(folded))
        return result
    return Crate(crate.id, fold(crate.items), [a.clone() for a in crate.attrs], crate.file)
