# model.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Directive(str, Enum):
    RUN = "run"
    CLEANUP = "cleanup"
    DEPENDENCY = "dependency"
    INCLUDE = "include"


@dataclass(frozen=True)
class Dependency:
    """
    A named fixture shared down a suite chain.

    `factory` is the dotted path of a callable, e.g. "fixtures.kind.Cluster".
    Two dependencies with the same name are the same fixture.
    """
    name: str
    factory: str

    @property
    def module(self) -> str:
        module, _, _attr = self.factory.rpartition(".")
        return module

    def declaration(self) -> str:
        return f"{self.name} = None"

    def import_line(self) -> str:
        return f"import {self.module}" if self.module else ""

    def setup(self) -> str:
        return f"cls.{self.name} = {self.factory}()"


@dataclass(frozen=True)
class Block:
    """A single directive inside a document."""
    directive: Directive
    text: str = ""
    dependency: Optional[Dependency] = None


@dataclass(frozen=True)
class Scenario:
    """A named group of run/cleanup blocks, rendered as one test."""
    name: str
    blocks: Tuple[Block, ...] = ()

    @property
    def run(self) -> Tuple[str, ...]:
        return tuple(b.text for b in self.blocks if b.directive is Directive.RUN)

    @property
    def cleanup(self) -> Tuple[str, ...]:
        return tuple(b.text for b in self.blocks if b.directive is Directive.CLEANUP)


@dataclass(frozen=True)
class Example:
    """
    The parsed record for one directory's README.

    Immutable once produced by the parser; the linker only annotates it.
    """
    dir: str
    blocks: Tuple[Block, ...] = ()
    scenarios: Tuple[Scenario, ...] = ()

    def _of(self, directive: Directive) -> Tuple[Block, ...]:
        return tuple(b for b in self.blocks if b.directive is directive)

    @property
    def run(self) -> Tuple[str, ...]:
        return tuple(b.text for b in self._of(Directive.RUN))

    @property
    def cleanup(self) -> Tuple[str, ...]:
        return tuple(b.text for b in self._of(Directive.CLEANUP))

    @property
    def includes(self) -> Tuple[str, ...]:
        return tuple(b.text for b in self._of(Directive.INCLUDE))

    @property
    def dependencies(self) -> Tuple[Dependency, ...]:
        return tuple(b.dependency for b in self._of(Directive.DEPENDENCY) if b.dependency is not None)
