"""
ast_equiv.py
Equivalence checks used when merging and deduplicating items.

compare_items goes beyond plain structural equality: the translator names anonymous types `unnamed`,
`unnamed_0`, ... per scope, so the same type alias or constant can show up with differing underlying
type names. Those are treated as duplicates by name alone. This is a heuristic; the underlying types
are not checked for compatibility.
"""
from typing import List

from crate_model import ForeignItem, Item, ItemKind, UseTree

RELATIVE_SEGMENTS = ("self", "super")


def ast_equiv(a, b) -> bool:
    """Structural equality of two nodes, ignoring node ids and spans."""
    return a.equiv_key() == b.equiv_key()


def strip_relative_segments(segments: List[str], keep_single: bool = False) -> List[str]:
    """Drop `self` and `super` segments. With keep_single, a one-segment path is left alone."""
    if keep_single and len(segments) <= 1:
        return list(segments)
    return [s for s in segments if s not in RELATIVE_SEGMENTS]


def normalize_use_tree(tree: UseTree) -> UseTree:
    normalized = tree.clone()
    normalized.prefix = strip_relative_segments(normalized.prefix)
    return normalized


def compare_foreign_items(a: ForeignItem, b: ForeignItem) -> bool:
    return a.name == b.name and a.node_key() == b.node_key()


def compare_items(a: Item, b: Item) -> bool:
    if a.name == b.name and a.kind == b.kind and ast_equiv(a.node, b.node):
        return True

    if a.kind == ItemKind.TY and b.kind == ItemKind.TY and a.name == b.name:
        return True

    if a.kind == ItemKind.CONST and b.kind == ItemKind.CONST and a.name == b.name:
        return True

    if a.kind == ItemKind.USE and b.kind == ItemKind.USE:
        if ast_equiv(normalize_use_tree(a.node), normalize_use_tree(b.node)):
            return True
    return False
