"""
crate_printer.py
Renders a Crate back to Rust source text. The layout is fixed (four space indent, blank line between
items) so that two equivalent crates always render to the same text.
"""
from typing import List

from crate_model import (
    Attribute, Crate, ForeignItem, ForeignItemKind, Item, ItemKind, Param, UseTree, UseTreeKind,
)

INDENT = "    "


def render_attribute(attr: Attribute) -> str:
    opener = "#![" if attr.inner else "#["
    if attr.value is not None:
        value = attr.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'{opener}{attr.name} = "{value}"]'
    if attr.args is not None:
        return f"{opener}{attr.name}({attr.args})]"
    return f"{opener}{attr.name}]"


def render_path(segments: List[str]) -> str:
    return "::".join(segments)


def render_use_tree(tree: UseTree) -> str:
    path = render_path(tree.prefix)
    if tree.kind == UseTreeKind.GLOB:
        return f"{path}::*" if path else "*"
    if tree.kind == UseTreeKind.NESTED:
        inner = ", ".join(render_use_tree(t) for t in tree.trees)
        return f"{path}::{{{inner}}}" if path else f"{{{inner}}}"
    if tree.rename:
        return f"{path} as {tree.rename}"
    return path


def render_params(params: List[Param], variadic: bool) -> str:
    parts = [f"{p.name}: {p.ty}" for p in params]
    if variadic:
        parts.append("...")
    return ", ".join(parts)


def _prefix(vis: str) -> str:
    return f"{vis} " if vis else ""


def render_foreign_item(item: ForeignItem, depth: int) -> List[str]:
    pad = INDENT * depth
    lines = [pad + render_attribute(a) for a in item.attrs]
    if item.kind == ForeignItemKind.FN:
        ret = f" -> {item.ret}" if item.ret else ""
        lines.append(f"{pad}{_prefix(item.vis)}fn {item.name}({render_params(item.params, item.variadic)}){ret};")
    else:
        mut = "mut " if item.mutable else ""
        lines.append(f"{pad}{_prefix(item.vis)}static {mut}{item.name}: {item.ret};")
    return lines


def render_item(item: Item, depth: int = 0) -> List[str]:
    pad = INDENT * depth
    outer = [a for a in item.attrs if not a.inner]
    inner = [a for a in item.attrs if a.inner]
    lines = [pad + render_attribute(a) for a in outer]
    head = pad + _prefix(item.vis)
    node = item.node
    if item.kind == ItemKind.MOD:
        if not node.inline:
            lines.append(f"{head}mod {item.name};")
            return lines
        lines.append(f"{head}mod {item.name} {{")
        lines.extend(pad + INDENT + render_attribute(a) for a in inner)
        lines.extend(_render_items(node.items, depth + 1))
        lines.append(pad + "}")
    elif item.kind == ItemKind.USE:
        lines.append(f"{head}use {render_use_tree(node)};")
    elif item.kind == ItemKind.EXTERN_CRATE:
        rename = f" as {node.rename}" if node.rename else ""
        lines.append(f"{head}extern crate {item.name}{rename};")
    elif item.kind == ItemKind.FOREIGN_MOD:
        abi = f' "{node.abi}"' if node.abi is not None else ""
        lines.append(f"{head}extern{abi} {{")
        for foreign_item in node.items:
            lines.extend(render_foreign_item(foreign_item, depth + 1))
        lines.append(pad + "}")
    elif item.kind == ItemKind.TY:
        lines.append(f"{head}type {item.name} = {node.ty};")
    elif item.kind == ItemKind.CONST:
        lines.append(f"{head}const {item.name}: {node.ty} = {node.expr};")
    elif item.kind == ItemKind.STATIC:
        mut = "mut " if node.mutable else ""
        lines.append(f"{head}static {mut}{item.name}: {node.ty} = {node.expr};")
    elif item.kind in (ItemKind.STRUCT, ItemKind.UNION):
        keyword = "struct" if item.kind == ItemKind.STRUCT else "union"
        if node.style == "unit":
            lines.append(f"{head}{keyword} {item.name};")
        elif node.style == "tuple":
            fields = ", ".join(f"{_prefix(f.vis)}{f.ty}" for f in node.fields)
            lines.append(f"{head}{keyword} {item.name}({fields});")
        else:
            lines.append(f"{head}{keyword} {item.name} {{")
            for field in node.fields:
                lines.extend(pad + INDENT + render_attribute(a) for a in field.attrs)
                lines.append(f"{pad}{INDENT}{_prefix(field.vis)}{field.name}: {field.ty},")
            lines.append(pad + "}")
    elif item.kind == ItemKind.FN:
        qualifiers = "".join(q + " " for q in node.qualifiers)
        ret = f" -> {node.ret}" if node.ret else ""
        signature = f"{head}{qualifiers}fn {item.name}({render_params(node.params, node.variadic)}){ret}"
        if node.body is None:
            lines.append(signature + ";")
        else:
            lines.append(f"{signature} {node.body}")
    else:
        raise ValueError(f"Cannot render item kind {item.kind}")
    return lines


def _render_items(items: List[Item], depth: int) -> List[str]:
    lines = []
    for i, item in enumerate(items):
        if i > 0 and (item.kind != ItemKind.USE or items[i - 1].kind != ItemKind.USE):
            lines.append("")
        lines.extend(render_item(item, depth))
    return lines


def render_crate(crate: Crate) -> str:
    lines = [render_attribute(a) for a in crate.attrs]
    if lines and crate.items:
        lines.append("")
    lines.extend(_render_items(crate.items, 0))
    return "\n".join(lines) + "\n"
