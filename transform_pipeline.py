"""
transform_pipeline.py
Defines the Transform protocol, the registry that exposes transforms by name, and a pipeline that
applies a sequence of transforms to a Crate.
"""
from typing import Callable, Dict, List, Protocol

from crate_model import Crate
from driver import CommandState, Phase, Session


class Transform(Protocol):
    def transform(self, crate: Crate, state: CommandState, session: Session) -> Crate:
        ...

    def min_phase(self) -> Phase:
        ...


class Registry:
    """Maps command names to factories taking the command's argument list."""

    def __init__(self):
        self._commands: Dict[str, Callable[[List[str]], Transform]] = {}

    def register(self, name: str, factory: Callable[[List[str]], Transform]) -> None:
        self._commands[name] = factory

    def get(self, name: str, args: List[str] = None) -> Transform:
        if name not in self._commands:
            raise KeyError(f"Unknown transform '{name}' (registered: {', '.join(self.names())})")
        return self._commands[name](args or [])

    def names(self) -> List[str]:
        return sorted(self._commands)


def default_registry(verbose: bool = False) -> Registry:
    from reorganize_transforms import reorganize_modules_transform
    registry = Registry()
    reorganize_modules_transform.register_commands(registry, verbose)
    return registry


def run_transform_pipeline(
    crate: Crate,
    transforms: List[Transform],
    state: CommandState,
    session: Session
) -> Crate:
    """
    Applies a sequence of Transform objects to a Crate.
    Each transform takes a Crate and returns a new Crate.
    """
    for transform in transforms:
        if session.phase < transform.min_phase():
            raise RuntimeError(f"{type(transform).__name__} needs phase {transform.min_phase().name}, "
                               f"session is at {session.phase.name}")
        crate = transform.transform(crate, state, session)
    return crate
