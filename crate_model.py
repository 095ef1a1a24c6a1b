"""
crate_model.py
The declaration tree the reorganizer works on: a crate of items (modules, use statements, extern blocks,
type aliases, constants, ...), each carrying a stable node id, its attributes and a kind specific payload.
Ids survive cloning; structural comparison goes through equiv_key(), which never looks at ids or spans.
"""
from enum import Enum
from typing import List, Optional, Tuple, Any


class ItemKind(Enum):
    MOD = "mod"
    USE = "use"
    FOREIGN_MOD = "foreign_mod"
    TY = "type"
    CONST = "const"
    STATIC = "static"
    STRUCT = "struct"
    UNION = "union"
    FN = "fn"
    EXTERN_CRATE = "extern_crate"


class UseTreeKind(Enum):
    SIMPLE = "simple"
    NESTED = "nested"
    GLOB = "glob"


class ForeignItemKind(Enum):
    FN = "fn"
    STATIC = "static"


class Attribute:
    """
    A single `#[name]`, `#[name = "value"]` or `#[name(args)]` attribute.
    `args` keeps the raw text between the parentheses.
    """
    def __init__(self, name: str, value: Optional[str] = None, args: Optional[str] = None, inner: bool = False):
        self.name = name
        self.value = value
        self.args = args
        self.inner = inner

    def clone(self) -> 'Attribute':
        return Attribute(self.name, self.value, self.args, self.inner)

    def equiv_key(self) -> Tuple:
        return (self.name, self.value, self.args, self.inner)

    def __repr__(self):
        return f"Attribute(name={self.name!r}, value={self.value!r}, args={self.args!r})"


def has_source_header(attrs: List[Attribute]) -> bool:
    """True if the item was generated from a header, i.e. it has `#[header_src = "/some/path"]`."""
    return any(attr.name == "header_src" for attr in attrs)


def is_std(attrs: List[Attribute]) -> bool:
    """True if any attribute value points into the system headers, e.g. `#[header_src = "/usr/include/stdlib.h"]`."""
    return any(attr.value is not None and "/usr/include" in attr.value for attr in attrs)


class Param:
    def __init__(self, name: str, ty: str):
        self.name = name
        self.ty = ty

    def clone(self) -> 'Param':
        return Param(self.name, self.ty)

    def equiv_key(self) -> Tuple:
        return (self.name, self.ty)


class StructField:
    def __init__(self, name: Optional[str], ty: str, vis: str = "", attrs: Optional[List[Attribute]] = None):
        self.name = name  # None for tuple struct fields
        self.ty = ty
        self.vis = vis
        self.attrs = attrs or []

    def clone(self) -> 'StructField':
        return StructField(self.name, self.ty, self.vis, [a.clone() for a in self.attrs])

    def equiv_key(self) -> Tuple:
        return (self.name, self.ty, self.vis, tuple(a.equiv_key() for a in self.attrs))


class UseTree:
    """
    A use tree: `prefix` is the list of path segments; SIMPLE trees may carry a rename,
    NESTED trees carry `trees` (each relative to `prefix`), GLOB trees import `prefix::*`.
    """
    def __init__(self, prefix: List[str], kind: UseTreeKind = UseTreeKind.SIMPLE, rename: Optional[str] = None,
                 trees: Optional[List['UseTree']] = None):
        self.prefix = list(prefix)
        self.kind = kind
        self.rename = rename
        self.trees = trees or []

    def clone(self) -> 'UseTree':
        return UseTree(self.prefix, self.kind, self.rename, [t.clone() for t in self.trees])

    def equiv_key(self) -> Tuple:
        return (tuple(self.prefix), self.kind.value, self.rename, tuple(t.equiv_key() for t in self.trees))

    def __repr__(self):
        return f"UseTree(prefix={self.prefix!r}, kind={self.kind.value}, rename={self.rename!r}, trees={self.trees!r})"


class ExternCrateNode:
    def __init__(self, rename: Optional[str] = None):
        self.rename = rename

    def clone(self) -> 'ExternCrateNode':
        return ExternCrateNode(self.rename)

    def equiv_key(self) -> Tuple:
        return ("extern_crate", self.rename)


class ModNode:
    def __init__(self, items: Optional[List['Item']] = None, inline: bool = True):
        self.items = items if items is not None else []
        self.inline = inline

    def clone(self) -> 'ModNode':
        return ModNode([i.clone() for i in self.items], self.inline)

    def equiv_key(self) -> Tuple:
        return ("mod", self.inline, tuple(i.equiv_key() for i in self.items))


class ForeignItem:
    """A symbol declared inside an `extern "C" { ... }` block."""
    def __init__(self, id: int, name: str, kind: ForeignItemKind, params: Optional[List[Param]] = None,
                 ret: Optional[str] = None, mutable: bool = False, variadic: bool = False,
                 attrs: Optional[List[Attribute]] = None, vis: str = "", span: Optional[Tuple[int, int]] = None):
        self.id = id
        self.name = name
        self.kind = kind
        self.params = params or []
        self.ret = ret  # return type for fns, the declared type for statics
        self.mutable = mutable
        self.variadic = variadic
        self.attrs = attrs or []
        self.vis = vis
        self.span = span

    def clone(self) -> 'ForeignItem':
        return ForeignItem(self.id, self.name, self.kind, [p.clone() for p in self.params], self.ret,
                           self.mutable, self.variadic, [a.clone() for a in self.attrs], self.vis, self.span)

    def node_key(self) -> Tuple:
        # The signature alone, without the symbol name.
        return (self.kind.value, tuple(p.equiv_key() for p in self.params), self.ret, self.mutable, self.variadic)

    def equiv_key(self) -> Tuple:
        return (self.name, self.vis, tuple(a.equiv_key() for a in self.attrs), self.node_key())

    def __repr__(self):
        return f"ForeignItem(id={self.id}, name={self.name!r}, kind={self.kind.value})"


class ForeignModNode:
    def __init__(self, abi: Optional[str] = "C", items: Optional[List[ForeignItem]] = None):
        self.abi = abi
        self.items = items if items is not None else []

    def clone(self) -> 'ForeignModNode':
        return ForeignModNode(self.abi, [i.clone() for i in self.items])

    def equiv_key(self) -> Tuple:
        return ("foreign_mod", self.abi, tuple(i.equiv_key() for i in self.items))


class TyAliasNode:
    def __init__(self, ty: str):
        self.ty = ty

    def clone(self) -> 'TyAliasNode':
        return TyAliasNode(self.ty)

    def equiv_key(self) -> Tuple:
        return ("type", self.ty)


class ConstNode:
    def __init__(self, ty: str, expr: str):
        self.ty = ty
        self.expr = expr

    def clone(self) -> 'ConstNode':
        return ConstNode(self.ty, self.expr)

    def equiv_key(self) -> Tuple:
        return ("const", self.ty, self.expr)


class StaticNode:
    def __init__(self, ty: str, expr: str, mutable: bool = False):
        self.ty = ty
        self.expr = expr
        self.mutable = mutable

    def clone(self) -> 'StaticNode':
        return StaticNode(self.ty, self.expr, self.mutable)

    def equiv_key(self) -> Tuple:
        return ("static", self.ty, self.expr, self.mutable)


class StructNode:
    def __init__(self, fields: Optional[List[StructField]] = None, style: str = "braced"):
        self.fields = fields or []
        self.style = style  # "braced", "tuple" or "unit"

    def clone(self) -> 'StructNode':
        return StructNode([f.clone() for f in self.fields], self.style)

    def equiv_key(self) -> Tuple:
        return ("struct", self.style, tuple(f.equiv_key() for f in self.fields))


class FnNode:
    def __init__(self, params: Optional[List[Param]] = None, ret: Optional[str] = None, body: Optional[str] = None,
                 qualifiers: Optional[List[str]] = None, variadic: bool = False):
        self.params = params or []
        self.ret = ret
        self.body = body  # raw `{ ... }` text, None for a bodiless declaration
        self.qualifiers = qualifiers or []  # e.g. ['unsafe', 'extern "C"']
        self.variadic = variadic

    def clone(self) -> 'FnNode':
        return FnNode([p.clone() for p in self.params], self.ret, self.body, list(self.qualifiers), self.variadic)

    def equiv_key(self) -> Tuple:
        body = " ".join(self.body.split()) if self.body is not None else None
        return ("fn", tuple(p.equiv_key() for p in self.params), self.ret, body, tuple(self.qualifiers), self.variadic)


class Item:
    """
    One declaration of the crate.

    Args:
        id: stable node id, unique within one invocation and shared between clones
        name: the item identifier ('' for use statements and extern blocks)
        kind: an ItemKind
        node: the kind specific payload (ModNode, UseTree, ForeignModNode, ...)
        attrs: outer attributes
        vis: visibility text, e.g. 'pub' or 'pub(crate)', '' when private
        span: (line, column) of a parsed item, None when the item was synthesized
    """
    def __init__(self, id: int, name: str, kind: ItemKind, node: Any, attrs: Optional[List[Attribute]] = None,
                 vis: str = "", span: Optional[Tuple[int, int]] = None):
        self.id = id
        self.name = name
        self.kind = kind
        self.node = node
        self.attrs = attrs or []
        self.vis = vis
        self.span = span

    def clone(self) -> 'Item':
        return Item(self.id, self.name, self.kind, self.node.clone(), [a.clone() for a in self.attrs], self.vis, self.span)

    def replace(self, **changes) -> 'Item':
        """Return a clone with the given fields swapped out."""
        item = self.clone()
        for key, value in changes.items():
            setattr(item, key, value)
        return item

    def equiv_key(self) -> Tuple:
        return (self.name, self.kind.value, self.vis, tuple(a.equiv_key() for a in self.attrs), self.node.equiv_key())

    def __repr__(self):
        return f"Item(id={self.id}, name={self.name!r}, kind={self.kind.value})"


class Crate:
    def __init__(self, id: int, items: List[Item], attrs: Optional[List[Attribute]] = None, file: Optional[str] = None):
        self.id = id
        self.items = items
        self.attrs = attrs or []
        self.file = file

    def clone(self) -> 'Crate':
        return Crate(self.id, [i.clone() for i in self.items], [a.clone() for a in self.attrs], self.file)

    def equiv_key(self) -> Tuple:
        return (tuple(a.equiv_key() for a in self.attrs), tuple(i.equiv_key() for i in self.items))
