"""
namespace_synthesizer.py
Materializes the destination modules that do not exist yet (e.g. `stdlib`) as new top-level modules.
"""
from typing import Dict, List

from crate_model import Crate, Item, ItemKind, ModNode
from reorganize_transforms.reorganize_context import ReorganizeContext


def extend_crate(crate: Crate, ctx: ReorganizeContext, dest_mod_to_items: Dict[int, List[int]]) -> Crate:
    new_crate = crate.clone()
    for dest_mod_id, item_ids in dest_mod_to_items.items():
        if not ctx.is_new_module(dest_mod_id):
            continue
        name = ctx.new_module_name(dest_mod_id)
        if name is None:
            continue
        items = [ctx.item_map[i].clone() for i in item_ids if i in ctx.item_map]
        new_mod = Item(dest_mod_id, name, ItemKind.MOD, ModNode(items, inline=True), vis="pub")
        new_crate.items.append(new_mod)
        ctx.debug_print(f"created module '{name}' (id {dest_mod_id}) with {len(items)} items")
    return new_crate
