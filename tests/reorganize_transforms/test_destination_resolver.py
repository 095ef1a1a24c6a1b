import pytest
from crate_model import Item, ItemKind, ModNode, Attribute
from reorganize_transforms.destination_resolver import (
    UnresolvedDestinationError, find_destination_id, is_synthetic_module, resolve_destinations,
)
from reorganize_transforms.reorganize_context import ReorganizeContext, STDLIB_MODULE_NAME


def make_ctx(load, state, session, source):
    crate = load(source)
    ctx = ReorganizeContext(state, session)
    ctx.find_destination_modules(crate)
    return crate, ctx


def test_is_synthetic_module():
    header = Item(1, "a_h", ItemKind.MOD, ModNode(), [Attribute("header_src", "/p/a.h")])
    plain = Item(2, "a", ItemKind.MOD, ModNode())
    assert is_synthetic_module(header)
    assert not is_synthetic_module(plain)


def test_std_items_go_to_stdlib(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    pub mod a {
        #[header_src = "/usr/include/stdio.h"]
        pub mod stdio_h { pub type FILE = _IO_FILE; }
    }
    ''')
    stdio_h = crate.items[0].node.items[0]
    dest = find_destination_id(ctx, stdio_h.node.items[0].id, stdio_h)
    assert dest == (ctx.new_modules[STDLIB_MODULE_NAME], STDLIB_MODULE_NAME)


def test_substring_match_prefers_lowest_id(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    pub mod buf {}
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h { pub type len_t = u32; }
    }
    ''')
    buf = crate.items[0]
    buffer_h = crate.items[1].node.items[0]
    assert find_destination_id(ctx, buffer_h.node.items[0].id, buffer_h) == (buf.id, 'buf')


def test_new_module_is_created_once(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    pub mod main {
        #[header_src = "/p/list.h"]
        pub mod list_h { pub type a = u32; pub type b = u32; }
    }
    ''')
    list_h = crate.items[0].node.items[0]
    a, b = list_h.node.items
    first = find_destination_id(ctx, a.id, list_h)
    second = find_destination_id(ctx, b.id, list_h)
    assert first == second
    assert first[1] == 'list_h'
    assert ctx.new_modules['list_h'] == first[0]


def test_reassigning_an_item_raises(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    pub mod main {
        #[header_src = "/p/list.h"]
        pub mod list_h { pub type a = u32; }
    }
    ''')
    list_h = crate.items[0].node.items[0]
    item_id = list_h.node.items[0].id
    ctx.item_to_dest_module[item_id] = 99
    with pytest.raises(UnresolvedDestinationError):
        find_destination_id(ctx, item_id, list_h)


def test_resolve_destinations_assigns_and_patches(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h {
            pub type len_t = u32;
            #[header_src = "/p/inner.h"]
            pub mod inner_h { pub type x = u8; }
        }
        use self::buffer_h::len_t;
    }
    ''')
    resolve_destinations(crate, ctx)
    buffer = crate.items[0]
    buffer_h = buffer.node.items[0]
    len_t, inner_h = buffer_h.node.items
    use_len = buffer.node.items[1]

    assert ctx.item_to_dest_module[len_t.id] == buffer.id
    # the nested header module is not moved itself, its contents are
    assert inner_h.id not in ctx.item_to_dest_module
    assert ctx.item_to_dest_module[inner_h.node.items[0].id] == ctx.new_modules['inner_h']
    assert ctx.path_mapping[use_len.id].prefix == ['buffer', 'len_t']
    assert ctx.path_mapping[use_len.id].dest_id == buffer.id


def test_module_is_never_its_own_destination(load, state, session):
    crate, ctx = make_ctx(load, state, session, '''
    #[header_src = "/p/buffer.h"]
    pub mod buffer_h {
        pub mod buffer { pub type t = u8; }
    }
    ''')
    buffer_h = crate.items[0]
    buffer = buffer_h.node.items[0]
    assert ctx.possible_destination_modules == [buffer.id]
    dest_id, dest_name = find_destination_id(ctx, buffer.id, buffer_h)
    assert dest_name == 'buffer_h'
    assert dest_id == ctx.new_modules['buffer_h']
