from crate_model import ItemKind
from reorganize_transforms.destination_resolver import resolve_destinations
from reorganize_transforms.namespace_synthesizer import extend_crate
from reorganize_transforms.reorganize_context import ReorganizeContext, STDLIB_MODULE_NAME


def test_only_new_modules_are_appended(load, state, session):
    crate = load('''
    pub mod buffer {
        #[header_src = "/p/buffer.h"]
        pub mod buffer_h { pub type len_t = u32; }
        #[header_src = "/usr/include/stdlib.h"]
        pub mod stdlib_h { extern "C" { fn free(__ptr: *mut libc::c_void); } }
    }
    ''')
    ctx = ReorganizeContext(state, session)
    ctx.find_destination_modules(crate)
    resolve_destinations(crate, ctx)
    extended = extend_crate(crate, ctx, ctx.create_dest_mod_map())

    assert [i.name for i in extended.items] == ['buffer', STDLIB_MODULE_NAME]
    stdlib = extended.items[1]
    assert stdlib.id == ctx.new_modules[STDLIB_MODULE_NAME]
    assert stdlib.vis == 'pub'
    assert [i.kind for i in stdlib.node.items] == [ItemKind.FOREIGN_MOD]
    # the input crate is not modified
    assert len(crate.items) == 1


def test_nothing_to_create(load, state, session):
    crate = load('pub mod a {}')
    ctx = ReorganizeContext(state, session)
    ctx.find_destination_modules(crate)
    resolve_destinations(crate, ctx)
    assert [i.name for i in extend_crate(crate, ctx, ctx.create_dest_mod_map()).items] == ['a']
