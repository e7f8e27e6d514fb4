# suite.py
from __future__ import annotations

import os
import posixpath
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .linker import Forest, LinkedExample
from .model import Dependency
from .naming import identifier, suite_name, title

Body = Tuple[str, ...]

RUNTIME_IMPORT = "from mdsuite import runtime"


class Format(str, Enum):
    COMPILED = "compiled"
    SCRIPT = "script"


ARTIFACT_NAMES = {
    Format.COMPILED: "suite_gen.py",
    Format.SCRIPT: "suite_gen.sh",
}


# ---------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------

class Dependencies:
    """Ordered set of fixtures keyed by name. First declaration of a name wins."""

    def __init__(self, deps: Iterable[Dependency] = ()):
        self._by_name: Dict[str, Dependency] = {}
        for d in deps:
            self._by_name.setdefault(d.name, d)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dependencies):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"Dependencies({self.names()!r})"

    def names(self) -> List[str]:
        return list(self._by_name)

    def union(self, other: Iterable[Dependency]) -> "Dependencies":
        return Dependencies([*self, *other])

    def without(self, other: "Dependencies") -> "Dependencies":
        return Dependencies(d for d in self if d.name not in other)

    def imports(self) -> List[str]:
        lines = [RUNTIME_IMPORT]
        for d in self:
            line = d.import_line()
            if line and line not in lines:
                lines.append(line)
        return lines

    def fields(self) -> List[str]:
        return [d.declaration() for d in self]

    def setup(self) -> List[str]:
        return [d.setup() for d in self]


# ---------------------------------------------------------------------
# Suite / Test
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Test:
    __test__ = False  # not a pytest class

    dir: str
    name: str = ""
    run: Body = ()
    cleanup: Body = ()

    @property
    def is_empty(self) -> bool:
        return not self.run and not self.cleanup


@dataclass(frozen=True)
class IncludedSuite:
    """A child suite as invoked from its parent's compiled artifact."""
    title: str
    name: str
    module: str  # path of the child's artifact relative to the parent's


@dataclass(frozen=True)
class Layout:
    input_dir: str
    output_dir: str

    def rel(self, dir: str) -> str:
        rel = os.path.relpath(os.path.abspath(dir), os.path.abspath(self.input_dir))
        return rel.replace(os.sep, "/")

    def location(self, dir: str, fmt: Format) -> Path:
        return Path(self.output_dir, *self.rel(dir).split("/"), ARTIFACT_NAMES[fmt])


@dataclass
class Suite:
    dir: str
    layout: Layout
    name: str
    run: Body = ()
    cleanup: Body = ()
    tests: List[Test] = field(default_factory=list)
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)
    deps: Dependencies = field(default_factory=Dependencies)
    deps_to_setup: Dependencies = field(default_factory=Dependencies)
    included: List[IncludedSuite] = field(default_factory=list)
    complete_setup: Body = ()
    complete_cleanup: Body = ()

    @property
    def abs_dir(self) -> str:
        return os.path.abspath(self.dir)

    def location(self, fmt: Format = Format.COMPILED) -> Path:
        return self.layout.location(self.dir, fmt)


class SuiteTree:
    """Owns every assembled suite; parent/children are keys into it."""

    def __init__(self, suites: Dict[str, Suite], order: List[str]):
        self._suites = suites
        self._order = order

    def __getitem__(self, dir: str) -> Suite:
        return self._suites[dir]

    def __iter__(self) -> Iterator[Suite]:
        for dir in self._order:
            yield self._suites[dir]

    def __len__(self) -> int:
        return len(self._suites)

    @property
    def roots(self) -> List[Suite]:
        return [s for s in self if s.parent is None]

    def children(self, suite: Suite) -> List[Suite]:
        return [self._suites[c] for c in suite.children]


# ---------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------

def _tests(linked: LinkedExample) -> List[Test]:
    tests: List[Test] = []
    taken: Set[str] = set()
    for scenario in linked.example.scenarios:
        base = name = identifier(scenario.name)
        n = 1
        while name in taken:
            n += 1
            name = f"{base}_{n}"
        taken.add(name)
        tests.append(Test(dir=linked.dir, name=name, run=scenario.run, cleanup=scenario.cleanup))
    if not tests:
        tests.append(Test(dir=linked.dir))
    return tests


def _included(linked: LinkedExample, layout: Layout) -> List[IncludedSuite]:
    here = posixpath.dirname(layout.location(linked.dir, Format.COMPILED).as_posix())
    out: List[IncludedSuite] = []
    for child in linked.children:
        there = layout.location(child, Format.COMPILED).as_posix()
        out.append(IncludedSuite(title=title(child), name=suite_name(child), module=posixpath.relpath(there, here)))
    return out


def assemble_one(linked: LinkedExample, layout: Layout, parent: Optional[Suite] = None) -> Suite:
    """
    Build the Suite for one linked example. The parent, when there is one,
    must already be assembled.
    """
    example = linked.example
    inherited = parent.deps if parent is not None else Dependencies()
    own = Dependencies(example.dependencies)

    suite = Suite(
        dir=linked.dir,
        layout=layout,
        name=suite_name(linked.dir),
        run=example.run,
        cleanup=example.cleanup,
        tests=_tests(linked),
        parent=linked.parent,
        children=list(linked.children),
        deps=inherited.union(own),
        deps_to_setup=own.without(inherited),
        included=_included(linked, layout),
    )
    setup_prefix = parent.complete_setup if parent is not None else ()
    cleanup_suffix = parent.complete_cleanup if parent is not None else ()
    suite.complete_setup = (*setup_prefix, f"cd {shlex.quote(suite.abs_dir)}", *suite.run)
    suite.complete_cleanup = (*suite.cleanup, *cleanup_suffix)
    return suite


def assemble(forest: Forest, layout: Layout) -> SuiteTree:
    """Assemble every linked example, parents before children."""
    suites: Dict[str, Suite] = {}
    order: List[str] = []
    for linked in forest:
        parent = suites[linked.parent] if linked.parent is not None else None
        suites[linked.dir] = assemble_one(linked, layout, parent)
        order.append(linked.dir)
    return SuiteTree(suites, order)
