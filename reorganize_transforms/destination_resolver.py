"""
destination_resolver.py
Decides, for every item of a header generated module, which real module it moves to.
"""
from typing import Tuple

from ast_visit import walk_mods
from crate_model import Crate, Item, ItemKind, has_source_header, is_std
from reorganize_transforms.reorganize_context import ReorganizeContext, STDLIB_MODULE_NAME


class UnresolvedDestinationError(RuntimeError):
    pass


def is_synthetic_module(item: Item) -> bool:
    return item.kind == ItemKind.MOD and (has_source_header(item.attrs) or is_std(item.attrs))


def find_destination_id(ctx: ReorganizeContext, item_id: int, old_module: Item) -> Tuple[int, str]:
    """
    Match an item of `old_module` to a destination module and return its (node id, name).

    1. Items of standard library headers all go to the single `stdlib` module.
    2. Otherwise the first candidate (in node id order) whose name is contained in the old module's
       name wins, e.g. `buffer_h` -> `buffer`. This is a naive heuristic; ties go to the lowest id.
    3. Otherwise a new module named after the old one is created; later items of a module with the
       same name reuse it.
    """
    if is_std(old_module.attrs):
        return ctx.new_modules[STDLIB_MODULE_NAME], STDLIB_MODULE_NAME

    old_name = ctx.module_display_name(old_module)
    for dest_module_id in ctx.possible_destination_modules:
        dest_module = ctx.item_map.get(dest_module_id)
        # a real module inside a header module is never its own destination
        if dest_module is None or dest_module_id == item_id:
            continue
        dest_name = ctx.module_display_name(dest_module)
        if dest_name and dest_name in old_name:
            return dest_module.id, dest_name

    if item_id in ctx.item_to_dest_module:
        raise UnresolvedDestinationError(
            f"Item {item_id} of module '{old_name}' was already assigned to module {ctx.item_to_dest_module[item_id]}")

    if old_name not in ctx.new_modules:
        ctx.new_modules[old_name] = ctx.state.next_node_id()
        ctx.debug_print(f"new module '{old_name}' -> id {ctx.new_modules[old_name]}")
    return ctx.new_modules[old_name], old_name


def resolve_destinations(crate: Crate, ctx: ReorganizeContext) -> None:
    """
    Walk the crate and assign a destination to every item owned by a header generated module.
    Each assignment also patches the pending use paths that name the old module.
    """
    def visit(module: Item, parent):
        if not is_synthetic_module(module):
            return
        old_name = ctx.module_display_name(module)
        for module_item in module.node.items:
            if is_synthetic_module(module_item):
                # Resolved on its own when the walk reaches it.
                continue
            dest_module_id, dest_name = find_destination_id(ctx, module_item.id, module)
            ctx.item_to_dest_module[module_item.id] = dest_module_id
            ctx.patch_paths(old_name, dest_name, dest_module_id)
        ctx.debug_print(f"module '{old_name}': {len(module.node.items)} items resolved")

    walk_mods(crate, visit)
