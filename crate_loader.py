# crate_loader.py
# Reads translated Rust source and builds a Crate of Items, allocating node ids in document order.
import re
from typing import List, Optional

from lark import Token, Tree

from lark_parser import parse_crate_source
from crate_model import (
    Attribute, Crate, ConstNode, FnNode, ForeignItem, ForeignItemKind, ForeignModNode, Item, ItemKind,
    ExternCrateNode, ModNode, Param, StaticNode, StructField, StructNode, TyAliasNode, UseTree, UseTreeKind,
)
from driver import CommandState

_ATTR_RE = re.compile(r'^#!?\[\s*([A-Za-z_][A-Za-z0-9_:]*)\s*(?:=\s*(".*")|\((.*)\))?\s*\]$', re.DOTALL)


def load_crate_file(path: str, state: CommandState, verbose: bool = False) -> Crate:
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return load_crate_source(text, state, source_file=path, verbose=verbose)


def load_crate_source(text: str, state: CommandState, source_file: Optional[str] = None, verbose: bool = False) -> Crate:
    tree = parse_crate_source(text)
    if verbose:
        print(f"[LOADER DEBUG] Parse tree:\n{tree.pretty()}")
    return CrateBuilder(text, state).build(tree, source_file)


def parse_attribute(raw: str) -> Attribute:
    """Split the raw `#[...]` text into name, string value and parenthesised args."""
    inner = raw.startswith("#!")
    m = _ATTR_RE.match(raw.strip())
    if not m:
        # Keep unusual attributes verbatim so they still render and compare.
        body = raw.strip()[3:-1] if inner else raw.strip()[2:-1]
        return Attribute(body.strip(), inner=inner)
    name, value, args = m.group(1), m.group(2), m.group(3)
    if value is not None:
        value = value[1:-1].replace('\\"', '"').replace('\\\\', '\\')
    if args is not None:
        args = args.strip()
    return Attribute(name, value, args, inner=inner)


def _collapse(text: str) -> str:
    return " ".join(text.split())


class CrateBuilder:
    """Walks the lark tree, allocating a node id for every item, foreign item and for the crate itself."""

    def __init__(self, text: str, state: CommandState):
        self.text = text
        self.state = state

    def build(self, tree: Tree, source_file: Optional[str] = None) -> Crate:
        crate_id = self.state.next_node_id()
        attrs = []
        items = []
        for child in tree.children:
            if isinstance(child, Tree) and child.data == 'inner_attribute':
                attrs.append(parse_attribute(str(child.children[0])))
            elif isinstance(child, Tree) and child.data == 'item':
                items.append(self.build_item(child))
        return Crate(crate_id, items, attrs, file=source_file)

    def source_of(self, node: Tree) -> str:
        return _collapse(self.text[node.meta.start_pos:node.meta.end_pos])

    def span_of(self, node: Tree):
        if node.meta.empty:
            return None
        return (node.meta.line, node.meta.column)

    def _leading(self, node: Tree):
        """Collect the outer attributes and visibility that precede an item or field."""
        attrs = []
        vis = ""
        rest = []
        for child in node.children:
            if isinstance(child, Tree) and child.data == 'outer_attribute':
                attrs.append(parse_attribute(str(child.children[0])))
            elif isinstance(child, Tree) and child.data == 'visibility':
                vis = _collapse(str(child.children[0]))
            else:
                rest.append(child)
        return attrs, vis, rest

    def build_item(self, node: Tree) -> Item:
        item_id = self.state.next_node_id()
        attrs, vis, rest = self._leading(node)
        body = rest[0]
        span = self.span_of(node)
        kind = body.data
        if kind == 'mod_item':
            name = str(body.children[0])
            mod_body = body.children[1] if len(body.children) > 1 else None
            if mod_body is None:
                return Item(item_id, name, ItemKind.MOD, ModNode([], inline=False), attrs, vis, span)
            items = []
            for child in mod_body.children:
                if isinstance(child, Tree) and child.data == 'inner_attribute':
                    attrs.append(parse_attribute(str(child.children[0])))
                elif isinstance(child, Tree) and child.data == 'item':
                    items.append(self.build_item(child))
            return Item(item_id, name, ItemKind.MOD, ModNode(items, inline=True), attrs, vis, span)
        if kind == 'use_item':
            return Item(item_id, "", ItemKind.USE, self.build_use_tree(body.children[0]), attrs, vis, span)
        if kind == 'extern_crate':
            names = [str(t) for t in body.children if isinstance(t, Token)]
            rename = names[1] if len(names) > 1 else None
            return Item(item_id, names[0], ItemKind.EXTERN_CRATE, ExternCrateNode(rename), attrs, vis, span)
        if kind == 'foreign_mod':
            abi = None
            foreign_items = []
            for child in body.children:
                if isinstance(child, Token) and child.type == 'STRING':
                    abi = child[1:-1]
                elif isinstance(child, Tree) and child.data == 'foreign_item':
                    foreign_items.append(self.build_foreign_item(child))
            return Item(item_id, "", ItemKind.FOREIGN_MOD, ForeignModNode(abi, foreign_items), attrs, vis, span)
        if kind == 'type_alias':
            name = str(body.children[0])
            return Item(item_id, name, ItemKind.TY, TyAliasNode(self.source_of(body.children[1])), attrs, vis, span)
        if kind == 'const_item':
            name = str(body.children[0])
            ty = self.source_of(body.children[1])
            expr = _collapse(str(body.children[2]))
            return Item(item_id, name, ItemKind.CONST, ConstNode(ty, expr), attrs, vis, span)
        if kind == 'static_item':
            mutable = any(isinstance(c, Tree) and c.data == 'mutability' for c in body.children)
            tokens = [c for c in body.children if not (isinstance(c, Tree) and c.data == 'mutability')]
            name = str(tokens[0])
            ty = self.source_of(tokens[1])
            expr = _collapse(str(tokens[2]))
            return Item(item_id, name, ItemKind.STATIC, StaticNode(ty, expr, mutable), attrs, vis, span)
        if kind in ('struct_item', 'union_item'):
            name = str(body.children[0])
            fields = []
            style = "unit"
            for child in body.children[1:]:
                if isinstance(child, Tree) and child.data == 'braced_fields':
                    style = "braced"
                    fields = [self.build_field(f, named=True) for f in child.children]
                elif isinstance(child, Tree) and child.data == 'tuple_fields':
                    style = "tuple"
                    fields = [self.build_field(f, named=False) for f in child.children]
            item_kind = ItemKind.STRUCT if kind == 'struct_item' else ItemKind.UNION
            return Item(item_id, name, item_kind, StructNode(fields, style), attrs, vis, span)
        if kind == 'fn_item':
            qualifiers = []
            name = None
            params, variadic = [], False
            ret = None
            fn_body = None
            for child in body.children:
                if isinstance(child, Tree) and child.data == 'fn_qualifier':
                    qualifiers.append(self.source_of(child))
                elif isinstance(child, Token) and child.type == 'NAME':
                    name = str(child)
                elif isinstance(child, Tree) and child.data == 'fn_params':
                    params, variadic = self.build_params(child)
                elif isinstance(child, Tree) and child.data == 'ret_type':
                    ret = self.source_of(child.children[0])
                elif isinstance(child, Token) and child.type == 'FN_BODY':
                    fn_body = str(child)
            return Item(item_id, name, ItemKind.FN, FnNode(params, ret, fn_body, qualifiers, variadic), attrs, vis, span)
        raise ValueError(f"Unsupported item '{kind}' at line {span[0] if span else '?'}")

    def build_use_tree(self, node: Tree) -> UseTree:
        prefix = []
        rename = None
        trees = []
        for child in node.children:
            if isinstance(child, Tree) and child.data == 'use_path':
                prefix = self.build_path(child)
            elif isinstance(child, Token) and child.type == 'NAME':
                rename = str(child)
            elif isinstance(child, Tree):
                trees.append(self.build_use_tree(child))
        if node.data == 'use_nested':
            return UseTree(prefix, UseTreeKind.NESTED, trees=trees)
        if node.data == 'use_glob':
            return UseTree(prefix, UseTreeKind.GLOB)
        return UseTree(prefix, UseTreeKind.SIMPLE, rename=rename)

    def build_path(self, node: Tree) -> List[str]:
        segments = []
        for child in node.children:
            if isinstance(child, Tree) and child.data == 'root_sep':
                # `::libc` keeps an empty leading segment, rendering back as `::libc`
                segments.append("")
            else:
                segments.append(str(child))
        return segments

    def build_params(self, node: Tree):
        params = []
        variadic = False
        for child in node.children:
            if child.data == 'variadic':
                variadic = True
                continue
            mutable = any(isinstance(c, Tree) and c.data == 'mutability' for c in child.children)
            rest = [c for c in child.children if not (isinstance(c, Tree) and c.data == 'mutability')]
            name = ("mut " if mutable else "") + str(rest[0])
            params.append(Param(name, self.source_of(rest[1])))
        return params, variadic

    def build_field(self, node: Tree, named: bool) -> StructField:
        attrs, vis, rest = self._leading(node)
        if named:
            return StructField(str(rest[0]), self.source_of(rest[1]), vis, attrs)
        return StructField(None, self.source_of(rest[0]), vis, attrs)

    def build_foreign_item(self, node: Tree) -> ForeignItem:
        item_id = self.state.next_node_id()
        attrs, vis, rest = self._leading(node)
        body = rest[0]
        span = self.span_of(node)
        if body.data == 'foreign_fn':
            name = None
            params, variadic = [], False
            ret = None
            for child in body.children:
                if isinstance(child, Token) and child.type == 'NAME':
                    name = str(child)
                elif isinstance(child, Tree) and child.data == 'fn_params':
                    params, variadic = self.build_params(child)
                elif isinstance(child, Tree) and child.data == 'ret_type':
                    ret = self.source_of(child.children[0])
            return ForeignItem(item_id, name, ForeignItemKind.FN, params, ret, variadic=variadic,
                               attrs=attrs, vis=vis, span=span)
        mutable = any(isinstance(c, Tree) and c.data == 'mutability' for c in body.children)
        tokens = [c for c in body.children if not (isinstance(c, Tree) and c.data == 'mutability')]
        return ForeignItem(item_id, str(tokens[0]), ForeignItemKind.STATIC, ret=self.source_of(tokens[1]),
                           mutable=mutable, attrs=attrs, vis=vis, span=span)
