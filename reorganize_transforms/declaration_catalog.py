"""
declaration_catalog.py
Flat lookup of every item in the crate by node id, so passes never have to search the tree.
"""
from typing import Dict

from ast_visit import visit_items
from crate_model import Crate, Item


def catalog_items(crate: Crate) -> Dict[int, Item]:
    """Snapshot every item (nested ones included) keyed by node id. Entries are clones."""
    catalog: Dict[int, Item] = {}

    def record(item: Item):
        catalog[item.id] = item.clone()

    visit_items(crate, record)
    return catalog
