"""
insert_items.py
Moves every relocated item into its destination module and drops the header generated modules.

Two folds: the first strips the header generated modules at every depth and keeps the stripped form
of each item that moves; the second inserts those items into their destinations. A moved module is
filled with its own incoming items before it is inserted, so destinations nested in a header
module keep what they receive.
"""
from typing import Dict, List, Set, Tuple

from ast_equiv import compare_items
from ast_visit import fold_items
from crate_model import Crate, Item, ItemKind
from reorganize_transforms.declaration_catalog import catalog_items
from reorganize_transforms.destination_resolver import is_synthetic_module
from reorganize_transforms.reorganize_context import ReorganizeContext


def strip_synthetic_modules(crate: Crate, moved_ids: Set[int]) -> Tuple[Crate, Dict[int, Item]]:
    """Drop every header generated module. Returns the stripped crate and the folded form of each moved item."""
    moved: Dict[int, Item] = {}

    def strip(item: Item) -> List[Item]:
        if item.id in moved_ids:
            moved[item.id] = item
        if is_synthetic_module(item):
            return []
        return [item]

    return fold_items(crate, strip), moved


def insert_items_into_dest(crate: Crate, ctx: ReorganizeContext, dest_mod_to_items: Dict[int, List[int]]) -> Crate:
    moved_ids = {item_id for item_ids in dest_mod_to_items.values() for item_id in item_ids}
    crate, moved = strip_synthetic_modules(crate, moved_ids)
    ctx.item_map = catalog_items(crate)
    ctx.item_map.update(moved)

    def populate(item: Item, active: Set[int]) -> Item:
        """Give a module about to be inserted (and the modules inside it) their incoming items."""
        if item.kind == ItemKind.MOD:
            active = active | {item.id}
            item.node.items = [populate(child, active) for child in item.node.items]
            insert_into(item, active)
        return item

    def insert_into(module: Item, active: Set[int]) -> None:
        # active: ids of the modules being filled, module itself included
        module_items = module.node.items
        for new_item_id in dest_mod_to_items.get(module.id, []):
            if new_item_id in active:
                ctx.debug_print(f"module {new_item_id} cannot be moved into itself or its own child '{module.name}'")
                continue
            catalogued = ctx.item_map.get(new_item_id)
            if catalogued is None:
                continue
            if any(child.id == new_item_id for child in module_items):
                continue
            new_item = populate(catalogued.clone(), active)
            had_foreign_items = new_item.kind == ItemKind.FOREIGN_MOD and bool(new_item.node.items)
            found = False
            for child in module_items:
                if compare_items(new_item, child):
                    found = True
                # Symbols of an extern block that the module already defines are not brought along.
                if new_item.kind == ItemKind.FOREIGN_MOD:
                    new_item.node.items = [fi for fi in new_item.node.items if fi.name != child.name]
            ctx.item_map[new_item_id] = new_item

            if found:
                ctx.debug_print(f"'{module.name}' already has an equivalent of item {new_item_id}")
                continue
            if had_foreign_items and not new_item.node.items:
                ctx.debug_print(f"extern block {new_item_id} has nothing left to add to '{module.name}'")
                continue
            module_items.append(new_item)

    def insert(item: Item) -> List[Item]:
        if item.kind == ItemKind.MOD:
            insert_into(item, {item.id})
        return [item]

    return fold_items(crate, insert)
