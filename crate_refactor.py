#!/usr/bin/env python3
"""
CrateRefactor

Runs refactoring transforms over translated Rust source. The main transform, `reorganize_modules`,
collapses the per-header modules a C to Rust translator generates into the modules they belong to,
merging duplicate declarations and rewriting use statements on the way.

Usage:
    python crate_refactor.py --input <source_file> [--output <output_file>] [--transform <name> ...] [--list] [--verbose]

Arguments:
    --input, -i     : Path to the Rust source file to transform
    --output, -o    : File to write the transformed source to (default: stdout)
    --transform, -t : Transform(s) to run, in order (default: reorganize_modules)
                      Can provide multiple names (e.g., --transform a b) or a comma separated list
    --list          : Print the registered transforms and exit
    --verbose, -v   : Print debug information while transforming
    --help, -h      : Show this help message

Environment variables override the arguments:
    CR_INPUT_FILE, CR_OUTPUT_FILE, CR_TRANSFORMS (space or comma separated), CR_VERBOSE

Example:
    python crate_refactor.py --input src/lib.rs --output src/lib.reorganized.rs
    python crate_refactor.py -i src/lib.rs -t reorganize_modules -v
"""

import argparse
import os
import sys
from typing import List, Optional

from lark.exceptions import LarkError

from crate_loader import load_crate_file
from crate_model import Crate
from crate_printer import render_crate
from driver import CommandState, Session
from transform_pipeline import Registry, default_registry, run_transform_pipeline

DEFAULT_TRANSFORMS = ["reorganize_modules"]


class CrateRefactor:
    """
    Loads a source file, runs the requested transforms and writes the result.
    """

    def __init__(self, input_file: str, output_file: Optional[str] = None, transforms: Optional[List[str]] = None,
                 verbose: bool = False, registry: Optional[Registry] = None):
        """
        Args:
            input_file: Path to the Rust source file
            output_file: Where to write the result, None for stdout
            transforms: Names of the transforms to run, in order
            verbose: Whether to print debug information (default: False)
            registry: Registry to look transforms up in (default: all built-in transforms)
        """
        self.input_file = input_file
        self.output_file = output_file
        self.transforms = transforms or list(DEFAULT_TRANSFORMS)
        self.verbose = verbose
        self.registry = registry or default_registry(verbose)
        self.state = CommandState()
        self.session = Session(input_file)
        self.crate: Optional[Crate] = None

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(message)

    def load(self) -> bool:
        """
        Parse the input file.

        Returns:
            bool: True if parsing was successful, False otherwise
        """
        try:
            self.crate = load_crate_file(self.input_file, self.state, verbose=self.verbose)
        except OSError as e:
            print(f"Error: Cannot read {self.input_file}: {e}")
            return False
        except LarkError as e:
            print(f"Error: Failed to parse {self.input_file}: {e}")
            return False
        self.debug_print(f"Loaded {self.input_file}: {len(self.crate.items)} top-level items")
        return True

    def run(self) -> bool:
        if self.crate is None:
            print("Error: No crate loaded. Load the input file first.")
            return False
        try:
            transforms = [self.registry.get(name) for name in self.transforms]
        except KeyError as e:
            # KeyError quotes its message when formatted
            print(f"Error: {e.args[0]}")
            return False
        except ValueError as e:
            print(f"Error: {e}")
            return False
        try:
            self.crate = run_transform_pipeline(self.crate, transforms, self.state, self.session)
        except RuntimeError as e:
            print(f"Error: {e}")
            return False
        return True

    def write(self) -> bool:
        text = render_crate(self.crate)
        if self.output_file is None:
            sys.stdout.write(text)
            return True
        try:
            with open(self.output_file, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            print(f"Error: Cannot write {self.output_file}: {e}")
            return False
        return True


def split_names(values: List[str]) -> List[str]:
    """Flatten a list of transform names that may contain comma or space separated entries."""
    names = []
    for value in values:
        names.extend(n.strip() for n in value.replace(',', ' ').split() if n.strip())
    return names


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Reorganize the modules of translated Rust source",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('--input', '-i', help='Path to the Rust source file to transform')
    parser.add_argument('--output', '-o', help='File to write the transformed source to (default: stdout)')
    parser.add_argument('--transform', '-t', nargs='+', help='Transform(s) to run, in order (default: reorganize_modules)')
    parser.add_argument('--list', action='store_true', help='Print the registered transforms and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output for debugging')
    args = parser.parse_args(argv)

    if args.transform:
        args.transform = split_names(args.transform)
    if not args.list and not args.input and 'CR_INPUT_FILE' not in os.environ:
        parser.error("the following arguments are required: --input/-i")
    return args


def main(argv: Optional[List[str]] = None):
    """
    Main entry point of the script.
    """
    args = parse_arguments(argv)

    # Override with environment variables if set
    input_file = os.environ.get('CR_INPUT_FILE', args.input)
    output_file = os.environ.get('CR_OUTPUT_FILE', args.output)
    transforms = args.transform or list(DEFAULT_TRANSFORMS)
    if 'CR_TRANSFORMS' in os.environ:
        transforms = split_names([os.environ['CR_TRANSFORMS']])
    verbose = args.verbose
    if 'CR_VERBOSE' in os.environ:
        verbose = os.environ['CR_VERBOSE'].lower() in ('1', 'true', 'yes', 'on')

    if args.list:
        for name in default_registry().names():
            print(name)
        return

    refactor = CrateRefactor(input_file, output_file, transforms, verbose)
    if not refactor.load():
        sys.exit(1)
    if not refactor.run():
        sys.exit(1)
    if not refactor.write():
        sys.exit(1)

    if output_file is not None:
        print(f"Wrote {output_file}")


if __name__ == '__main__':
    main()
