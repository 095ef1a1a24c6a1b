from lark import Lark


# Grammar for the subset of translated Rust that module reorganization deals with:
# modules, use statements, extern blocks, type aliases, constants, statics, structs/unions and functions.
# Function bodies and constant expressions are kept as opaque text.
grammar = r"""
    start: inner_attribute* item*

    inner_attribute: INNER_ATTR
    outer_attribute: OUTER_ATTR
    INNER_ATTR: /#!\[(?:"(?:\\.|[^"\\])*"|[^\]"])*\]/
    OUTER_ATTR: /#\[(?:"(?:\\.|[^"\\])*"|[^\]"])*\]/

    item: outer_attribute* visibility? item_body
    ?item_body: mod_item
        | use_item
        | foreign_mod
        | extern_crate
        | type_alias
        | const_item
        | static_item
        | struct_item
        | union_item
        | fn_item

    visibility: PUB
    PUB: /pub\b(\s*\((crate|super|self|in\s[^)]*)\))?/
    mutability: MUT
    MUT: /mut\b/

    mod_item: "mod" NAME (mod_body | ";")
    mod_body: "{" inner_attribute* item* "}"

    extern_crate: "extern" "crate" NAME ("as" NAME)? ";"

    use_item: "use" use_tree ";"
    use_tree: use_path "as" NAME                                    -> use_rename
        | use_path                                                  -> use_simple
        | (use_path "::")? "{" (use_tree ("," use_tree)* ","?)? "}"  -> use_nested
        | (use_path "::")? "*"                                      -> use_glob
    use_path: root_sep? NAME ("::" NAME)*
    root_sep: "::"

    foreign_mod: "extern" STRING? "{" foreign_item* "}"
    foreign_item: outer_attribute* visibility? (foreign_fn | foreign_static)
    foreign_fn: "fn" NAME "(" fn_params? ")" ret_type? ";"
    foreign_static: "static" mutability? NAME ":" type ";"

    type_alias: "type" NAME "=" type ";"
    const_item: "const" NAME ":" type "=" EXPR ";"
    static_item: "static" mutability? NAME ":" type "=" EXPR ";"

    struct_item: "struct" NAME (braced_fields | tuple_fields ";" | ";")
    union_item: "union" NAME braced_fields
    braced_fields: "{" (struct_field ("," struct_field)* ","?)? "}"
    struct_field: outer_attribute* visibility? NAME ":" type
    tuple_fields: "(" (tuple_field ("," tuple_field)* ","?)? ")"
    tuple_field: outer_attribute* visibility? type

    fn_item: fn_qualifier* "fn" NAME "(" fn_params? ")" ret_type? (FN_BODY | ";")
    fn_qualifier: "unsafe" | "extern" STRING?
    fn_params: fn_param_item ("," fn_param_item)* ","?
    ?fn_param_item: fn_param | variadic
    fn_param: mutability? NAME ":" type
    variadic: "..."
    ret_type: "->" type

    type: ptr_type
        | ref_type
        | array_type
        | slice_type
        | tuple_type
        | fn_ptr_type
        | never_type
        | path_type
    ptr_type: "*" PTR_QUAL type
    PTR_QUAL: /(mut|const)\b/
    ref_type: "&" LIFETIME? mutability? type
    array_type: "[" type ";" ARRAY_LEN "]"
    slice_type: "[" type "]"
    tuple_type: "(" (type ("," type)* ","?)? ")"
    fn_ptr_type: fn_qualifier* "fn" "(" (fn_ptr_param ("," fn_ptr_param)* ","?)? ")" ret_type?
    fn_ptr_param: (NAME ":")? type | variadic
    never_type: "!"
    path_type: root_sep? type_segment ("::" type_segment)*
    type_segment: NAME generic_args?
    generic_args: "<" type ("," type)* ","? ">"

    // Opaque text: constant expressions and function bodies (up to four levels of braces)
    EXPR: /[^;]+/
    ARRAY_LEN: /[^\]]+/
    FN_BODY: /\{(?:[^{}]|\{(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*\})*\}/

    LIFETIME: /'[a-zA-Z_][a-zA-Z0-9_]*/
    NAME: /(r#)?[a-zA-Z_][a-zA-Z0-9_]*/
    STRING: /"(\\.|[^"\\])*"/
    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    %import common.WS
    %ignore WS
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
"""

parser = Lark(
    grammar,
    start='start',
    propagate_positions=True
)


def parse_crate_source(text):
    """Parse translated Rust source text into a lark parse tree."""
    return parser.parse(text)
