"""
ReorganizeModules: collapses the per-header modules of a translated project into the modules they belong to.

The translator nests every declaration in a module generated from the header it came from, which
leaves the same declarations repeated once per including file:

    mod buffer {
        #[header_src = "/some/path/buffer.h"]
        mod buffer_h {
            struct buffer_t {
                data: i32,
            }
        }
    }

becomes

    mod buffer {
        struct buffer_t {
            data: i32,
        }
    }

The work is done in five passes over the whole crate, each producing a new crate:
discover candidates -> resolve destinations -> create missing modules -> insert items -> clean up.
"""
from typing import List

from crate_model import Crate
from driver import CommandState, Phase, Session
from reorganize_transforms.cleanup import cleanup_crate
from reorganize_transforms.destination_resolver import resolve_destinations
from reorganize_transforms.insert_items import insert_items_into_dest
from reorganize_transforms.namespace_synthesizer import extend_crate
from reorganize_transforms.reorganize_context import ReorganizeContext


class ReorganizeModules:
    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def transform(self, crate: Crate, state: CommandState, session: Session) -> Crate:
        ctx = ReorganizeContext(state, session, self.verbose)

        ctx.find_destination_modules(crate)
        resolve_destinations(crate, ctx)

        # destination module id -> ids of the items it receives
        dest_mod_to_items = ctx.create_dest_mod_map()

        crate = extend_crate(crate, ctx, dest_mod_to_items)
        crate = insert_items_into_dest(crate, ctx, dest_mod_to_items)
        # Paths are rewritten or removed and duplicates dropped here.
        crate = cleanup_crate(crate, ctx)
        return crate

    def min_phase(self) -> Phase:
        return Phase.PHASE3


def register_commands(registry, verbose: bool = False) -> None:
    def make(args: List[str]) -> ReorganizeModules:
        if args:
            raise ValueError(f"reorganize_modules takes no arguments, got {args}")
        return ReorganizeModules(verbose)

    registry.register("reorganize_modules", make)
