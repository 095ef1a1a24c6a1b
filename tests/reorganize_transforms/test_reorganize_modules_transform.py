import os
from crate_loader import load_crate_file, load_crate_source
from crate_model import ForeignItemKind, ItemKind, UseTreeKind
from crate_printer import render_crate, render_use_tree
from driver import CommandState, Session
from reorganize_transforms.reorganize_modules_transform import ReorganizeModules


def names_of(module, kind=None):
    return [i.name for i in module.node.items if kind is None or i.kind == kind]


def uses_of(module):
    return [render_use_tree(i.node) for i in module.node.items if i.kind == ItemKind.USE]


def foreign_names(module):
    return [fi.name for i in module.node.items if i.kind == ItemKind.FOREIGN_MOD for fi in i.node.items]


def test_header_module_is_collapsed_into_its_owner(reorganize, find_mod):
    crate = reorganize('''
    pub mod buffer {
        #[header_src = "/some/path/buffer.h"]
        pub mod buffer_h {
            pub struct buffer_t { pub data: i32, }
        }
    }
    ''')
    buffer = find_mod(crate, 'buffer')
    assert find_mod(crate, 'buffer_h') is None
    assert names_of(buffer) == ['buffer_t']
    assert buffer.node.items[0].kind == ItemKind.STRUCT


def test_foreign_function_declared_twice_is_merged(reorganize, find_mod):
    crate = reorganize('''
    pub mod a {
        #[header_src = "/usr/include/stdlib.h"]
        pub mod stdlib_h {
            extern "C" { fn malloc(_: libc::c_ulong) -> *mut libc::c_void; }
        }
    }
    pub mod b {
        #[header_src = "/usr/include/stdlib.h"]
        pub mod stdlib_h {
            extern "C" { fn malloc(_: libc::c_ulong) -> *mut libc::c_void; }
        }
    }
    ''')
    stdlib = find_mod(crate, 'stdlib')
    assert stdlib is not None
    assert foreign_names(stdlib) == ['malloc']
    assert find_mod(crate, 'stdlib_h') is None


def test_type_alias_of_unnamed_types_is_kept_once(reorganize, find_mod):
    crate = reorganize('''
    pub mod foo {
        #[header_src = "/p/foo.h"]
        pub mod foo_h {
            pub type Foo = unnamed;
        }
        #[header_src = "/p/foo_impl.h"]
        pub mod foo_impl_h {
            pub type Foo = unnamed_0;
        }
    }
    ''')
    foo = find_mod(crate, 'foo')
    assert names_of(foo, ItemKind.TY) == ['Foo']
    assert foo.node.items[0].node.ty == 'unnamed'


def test_single_symbol_imports_are_grouped(reorganize_text):
    text = reorganize_text('''
    pub mod foo {}
    pub mod user {
        #[header_src = "/p/foo.h"]
        pub mod foo_h {
            pub struct item;
            pub struct item2;
            pub struct item3;
        }
        use foo_h::item;
        use foo_h::item2;
        use foo_h::item3;
    }
    ''')
    assert 'use foo::{item, item2, item3};' in text
    assert 'foo_h' not in text


def test_grouped_import_skips_locally_declared_symbols(reorganize_text):
    text = reorganize_text('''
    pub mod foo {}
    pub mod user {
        #[header_src = "/p/foo.h"]
        pub mod foo_h {
            pub struct item;
            pub struct item2;
        }
        use foo_h::item;
        use foo_h::item2;
        pub fn item2() {}
    }
    ''')
    assert 'use foo::{item};' in text


def test_import_into_own_module_is_dropped(reorganize, find_mod):
    crate = reorganize('''
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h {
            pub type len_t = u32;
        }
        use self::buffer_h::len_t;
        pub static mut LEN: len_t = 0;
    }
    ''')
    buffer = find_mod(crate, 'buffer')
    assert uses_of(buffer) == []
    assert names_of(buffer) == ['LEN', 'len_t']


def test_standard_library_declarations_share_one_module(reorganize, find_mod):
    crate = reorganize('''
    pub mod a {
        #[header_src = "/usr/include/stdio.h"]
        pub mod stdio_h {
            extern "C" { fn printf(_: *const libc::c_char, ...) -> libc::c_int; }
        }
        #[header_src = "/usr/include/string.h"]
        pub mod string_h {
            extern "C" { fn strlen(_: *const libc::c_char) -> libc::c_ulong; }
        }
    }
    ''')
    stdlib_mods = [i for i in crate.items if i.kind == ItemKind.MOD and i.name == 'stdlib']
    assert len(stdlib_mods) == 1
    assert sorted(foreign_names(stdlib_mods[0])) == ['printf', 'strlen']
    assert stdlib_mods[0].vis == 'pub'
    assert find_mod(crate, 'a').node.items == []


def test_existing_stdlib_module_is_reused(reorganize, find_mod):
    crate = reorganize('''
    pub mod stdlib {}
    pub mod a {
        #[header_src = "/usr/include/stdlib.h"]
        pub mod stdlib_h {
            extern "C" { fn free(__ptr: *mut libc::c_void); }
        }
    }
    ''')
    assert [i.name for i in crate.items] == ['stdlib', 'a']
    assert foreign_names(find_mod(crate, 'stdlib')) == ['free']


def test_unmatched_header_gets_a_new_module(reorganize, find_mod):
    crate = reorganize('''
    pub mod main {
        #[header_src = "/p/list.h"]
        pub mod list_h {
            pub struct list_node { pub next: *mut list_node, }
        }
        use self::list_h::list_node;
    }
    ''')
    list_h = crate.items[-1]
    assert list_h.name == 'list_h'
    assert names_of(list_h) == ['list_node']
    main = find_mod(crate, 'main')
    assert uses_of(main) == ['list_h::{list_node}']


def test_extern_block_drops_symbols_already_defined(reorganize, find_mod):
    crate = reorganize('''
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h {
            extern "C" {
                fn buffer_new(len: u32) -> *mut u8;
                fn buffer_free(b: *mut u8);
            }
        }
        #[no_mangle]
        pub unsafe extern "C" fn buffer_new(mut len: u32) -> *mut u8 { return 0 as *mut u8; }
    }
    ''')
    buffer = find_mod(crate, 'buffer')
    assert foreign_names(buffer) == ['buffer_free']
    assert names_of(buffer, ItemKind.FN) == ['buffer_new']


def test_synthesized_modules_have_fresh_ids(state, session):
    crate = load_crate_source('''
    pub mod a {
        #[header_src = "/usr/include/stdlib.h"]
        pub mod stdlib_h { extern "C" { fn abort() -> !; } }
    }
    ''', state, source_file=session.local_crate_source_file)
    first_free = state.peek_node_id()
    result = ReorganizeModules().transform(crate, state, session)
    stdlib = result.items[-1]
    assert stdlib.name == 'stdlib'
    assert stdlib.id >= first_free


def test_input_crate_is_left_untouched(state, session):
    source = '''
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h { pub type len_t = u32; }
        use self::buffer_h::len_t;
    }
    '''
    crate = load_crate_source(source, state, source_file=session.local_crate_source_file)
    before = render_crate(crate)
    ReorganizeModules().transform(crate, state, session)
    assert render_crate(crate) == before


def test_reorganizing_twice_changes_nothing(rs_dir, session):
    state = CommandState()
    crate = load_crate_file(os.path.join(rs_dir, 'buffer.rs'), state)
    once = render_crate(ReorganizeModules().transform(crate, state, session))

    state = CommandState()
    reloaded = load_crate_source(once, state, source_file=session.local_crate_source_file)
    twice = render_crate(ReorganizeModules().transform(reloaded, state, session))
    assert twice == once


def test_buffer_project(rs_dir, find_mod):
    state = CommandState()
    session = Session(os.path.join(rs_dir, 'buffer.rs'))
    crate = load_crate_file(session.source_file(), state)
    result = ReorganizeModules().transform(crate, state, session)

    assert [i.name for i in result.items] == ['libc', 'buffer', 'main', 'stdlib']
    for header_mod in ('buffer_h', 'stdlib_h'):
        assert find_mod(result, header_mod) is None

    buffer = find_mod(result, 'buffer')
    assert names_of(buffer) == ['buffer_new', 'buffer_t', 'buffer_kind', 'BUFFER_GROWABLE', '']
    assert uses_of(buffer) == ['stdlib::{free, malloc}']
    # main's own extern declaration of buffer_new is covered by the definition in buffer
    assert foreign_names(buffer) == []

    main = find_mod(result, 'main')
    assert names_of(main, ItemKind.FN) == ['main_0']
    assert uses_of(main) == ['buffer::{buffer_new, buffer_t}', 'stdlib::{malloc}']

    stdlib = find_mod(result, 'stdlib')
    assert foreign_names(stdlib) == ['malloc', 'free']
    assert all(fi.kind == ForeignItemKind.FN for i in stdlib.node.items for fi in i.node.items)

    grouped = [i for i in main.node.items if i.kind == ItemKind.USE]
    assert all(u.node.kind == UseTreeKind.NESTED for u in grouped)


def test_verbose_output(capsys, state, session):
    crate = load_crate_source('''
    pub mod a {
        #[header_src = "/p/a.h"]
        pub mod a_h { pub type t = i32; }
    }
    ''', state, source_file=session.local_crate_source_file)
    ReorganizeModules(verbose=True).transform(crate, state, session)
    out = capsys.readouterr().out
    assert '[REORGANIZE DEBUG]' in out
    assert "module 'a_h'" in out


def test_items_reach_a_module_moved_out_of_a_header(reorganize_text):
    text = reorganize_text('''
    pub mod a {
        #[header_src = "/p/a.h"]
        pub mod a_h { pub mod inner {} }
        #[header_src = "/p/inner.h"]
        pub mod inner_h { pub type t = u8; }
    }
    ''')
    assert text == (
        'pub mod a {\n'
        '    pub mod inner {\n'
        '        pub type t = u8;\n'
        '    }\n'
        '}\n'
    )
