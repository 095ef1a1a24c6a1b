"""
cleanup.py
Final pass over every module once items have moved:
1. use statements are dropped when they now point into their own module, or rewritten to the new
   module path and regrouped: `use foo_h::a; use foo_h::b;` -> `use foo::{a, b};`
2. duplicate items are removed, keeping the first occurrence; extern blocks lose the individual
   symbols an earlier extern block already declares.
"""
from typing import Dict, List, Tuple

from ast_equiv import compare_foreign_items, compare_items
from ast_visit import fold_items
from crate_model import Crate, Item, ItemKind, UseTree, UseTreeKind
from crate_printer import render_use_tree
from reorganize_transforms.declaration_catalog import catalog_items
from reorganize_transforms.reorganize_context import ReorganizeContext

# (visibility, path of the module the symbols come from)
GroupKey = Tuple[str, Tuple[str, ...]]


def _leaf_name(leaf: UseTree):
    """The name a use leaf binds in the module, None for globs."""
    if leaf.kind != UseTreeKind.SIMPLE:
        return None
    if leaf.rename:
        return leaf.rename
    return leaf.prefix[-1] if leaf.prefix else None


def rewrite_uses(items: List[Item], module_id: int, ctx: ReorganizeContext) -> Tuple[List[Item], Dict[GroupKey, List[UseTree]]]:
    """
    Drop or rewrite the use statements of one module. Rewritten multi-segment uses are removed from
    the item list and their leaves returned grouped by the path they import from.
    """
    seen_paths: Dict[GroupKey, Dict[tuple, UseTree]] = {}
    retained = []
    for item in items:
        mapping = ctx.path_mapping.get(item.id)
        if mapping is None or not mapping.patched or item.kind != ItemKind.USE:
            retained.append(item)
            continue
        if mapping.dest_id == module_id:
            ctx.debug_print(f"dropping use {render_use_tree(item.node)}: it points into its own module")
            continue

        tree = item.node.clone()
        tree.prefix = list(mapping.prefix)
        if tree.kind == UseTreeKind.NESTED:
            key = (item.vis, tuple(tree.prefix))
            leaves = tree.trees
        elif tree.kind == UseTreeKind.GLOB:
            key = (item.vis, tuple(tree.prefix))
            leaves = [UseTree([], UseTreeKind.GLOB)]
        elif len(tree.prefix) > 1:
            key = (item.vis, tuple(tree.prefix[:-1]))
            leaves = [UseTree(tree.prefix[-1:], UseTreeKind.SIMPLE, rename=tree.rename)]
        else:
            # One segment uses like `use libc;` keep their own statement.
            retained.append(item.replace(node=tree))
            continue

        bucket = seen_paths.setdefault(key, {})
        for leaf in leaves:
            bucket.setdefault(leaf.equiv_key(), leaf)
    return retained, {key: list(bucket.values()) for key, bucket in seen_paths.items()}


def build_grouped_uses(items: List[Item], seen_paths: Dict[GroupKey, List[UseTree]], ctx: ReorganizeContext) -> List[Item]:
    """One nested use per imported path, skipping symbols the module itself defines or declares in an extern block."""
    local_names = {item.name for item in items if item.name}
    local_names.update(fi.name for item in items if item.kind == ItemKind.FOREIGN_MOD for fi in item.node.items)
    grouped = []
    for (vis, path), leaves in seen_paths.items():
        leaves = [leaf for leaf in leaves if _leaf_name(leaf) not in local_names]
        if not leaves:
            continue
        leaves.sort(key=render_use_tree)
        tree = UseTree(list(path), UseTreeKind.NESTED, trees=leaves)
        grouped.append(Item(ctx.state.next_node_id(), "", ItemKind.USE, tree, vis=vis))
        ctx.debug_print(f"grouped use {render_use_tree(tree)}")
    return grouped


def remove_duplicates(items: List[Item], ctx: ReorganizeContext) -> List[Item]:
    kept: List[Item] = []
    for item in items:
        if any(other.id == item.id for other in kept):
            continue
        if item.kind == ItemKind.FOREIGN_MOD:
            item = item.clone()
            had_items = bool(item.node.items)
            for other in kept:
                if other.kind != ItemKind.FOREIGN_MOD:
                    continue
                item.node.items = [
                    fi for fi in item.node.items
                    if not any(compare_foreign_items(fi, other_fi) for other_fi in other.node.items)
                ]
            if had_items and not item.node.items:
                ctx.debug_print(f"dropping extern block {item.id}: all of its symbols are declared already")
                continue
        elif any(compare_items(other, item) for other in kept):
            ctx.debug_print(f"dropping duplicate {item.kind.value} '{item.name}' ({item.id})")
            continue
        kept.append(item)
        ctx.item_map[item.id] = item
    return kept


def cleanup_items(items: List[Item], module_id: int, ctx: ReorganizeContext) -> List[Item]:
    retained, seen_paths = rewrite_uses(items, module_id, ctx)
    retained.extend(build_grouped_uses(retained, seen_paths, ctx))
    return remove_duplicates(retained, ctx)


def cleanup_crate(crate: Crate, ctx: ReorganizeContext) -> Crate:
    ctx.item_map = catalog_items(crate)

    def cleanup(item: Item) -> List[Item]:
        if item.kind == ItemKind.MOD:
            item.node.items = cleanup_items(item.node.items, item.id, ctx)
        return [item]

    crate = fold_items(crate, cleanup)
    crate.items = cleanup_items(crate.items, crate.id, ctx)
    return crate
