import sys
import os
from tempfile import TemporaryDirectory
import pytest
# Ensure the project root is on sys.path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from crate_loader import load_crate_source
from crate_printer import render_crate
from driver import CommandState, Session
from reorganize_transforms.reorganize_modules_transform import ReorganizeModules

RS_DIR = os.path.join(os.path.dirname(__file__), 'rs')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with TemporaryDirectory() as dir_path:
        yield dir_path


@pytest.fixture
def rs_dir():
    return RS_DIR


@pytest.fixture
def state():
    return CommandState()


@pytest.fixture
def session():
    return Session("src/main.rs")


@pytest.fixture
def load(state):
    """Parse Rust source text into a Crate sharing the test's CommandState."""
    def _load(text, source_file="src/main.rs"):
        return load_crate_source(text, state, source_file=source_file)
    return _load


@pytest.fixture
def reorganize(state, session):
    """Parse, run ReorganizeModules and return the resulting Crate."""
    def _reorganize(text):
        crate = load_crate_source(text, state, source_file=session.local_crate_source_file)
        return ReorganizeModules().transform(crate, state, session)
    return _reorganize


@pytest.fixture
def reorganize_text(reorganize):
    """Like `reorganize`, but returns the rendered source."""
    def _reorganize_text(text):
        return render_crate(reorganize(text))
    return _reorganize_text


@pytest.fixture
def find_mod():
    """Find a module item by name anywhere in a crate (first match in document order)."""
    def _find_mod(crate, name):
        def search(items):
            for item in items:
                if item.kind.value == 'mod':
                    if item.name == name:
                        return item
                    found = search(item.node.items)
                    if found is not None:
                        return found
            return None
        return search(crate.items)
    return _find_mod
