# linker.py
from __future__ import annotations

import os
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .errors import LinkError
from .model import Example


@dataclass
class LinkedExample:
    """An Example annotated with its resolved parent and children (directory keys)."""
    dir: str
    example: Example
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)


class Forest:
    """
    Arena of linked examples keyed by directory.

    Parents are reached by lookup, never through an owning reference.
    Iteration is pre-order: every parent comes before its children.
    """

    def __init__(self, nodes: Dict[str, LinkedExample], order: List[str]):
        self._nodes = nodes
        self._order = order

    def __getitem__(self, dir: str) -> LinkedExample:
        return self._nodes[dir]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[LinkedExample]:
        for dir in self._order:
            yield self._nodes[dir]


def _nearest_enclosing(dir: str, known: Dict[str, Example]) -> Optional[str]:
    current = dir
    while True:
        up = os.path.dirname(current) or os.curdir
        if up == current:
            return None
        if up in known:
            return up
        current = up


def _resolve_parent(dir: str, example: Example, known: Dict[str, Example]) -> Optional[str]:
    """
    An explicit include reference wins; without one the nearest enclosing
    directory that holds an example is the parent.
    """
    includes = [os.path.normpath(d) for d in example.includes]
    if len(includes) > 1:
        raise LinkError(
            kind="multiple",
            dir=example.dir,
            message=f"Example '{example.dir}' includes {len(includes)} examples; at most one parent is allowed",
            details={"includes": includes},
        )
    if includes:
        target = includes[0]
        if target not in known:
            raise LinkError(
                kind="missing",
                dir=target,
                message=f"Example '{example.dir}' includes missing example '{target}'",
                details={"known": sorted(known)},
            )
        return target
    return _nearest_enclosing(dir, known)


def _cycle_from(start: str, parents: Dict[str, Optional[str]]) -> List[str]:
    seen: Dict[str, int] = {}
    path: List[str] = []
    node: Optional[str] = start
    while node is not None and node not in seen:
        seen[node] = len(path)
        path.append(node)
        node = parents[node]
    if node is None:
        return []
    cycle = path[seen[node]:]
    return cycle + [node]


def link(*examples: Example) -> Forest:
    """
    Resolve parent/child edges between examples.

    Raises:
        LinkError: duplicate directory, include of a missing example,
            more than one include in one example, or a cycle
    """
    known: Dict[str, Example] = {}
    for ex in examples:
        key = os.path.normpath(ex.dir)
        if key in known:
            raise LinkError(kind="duplicate", dir=key, message=f"Duplicate example directory: {key}")
        known[key] = ex

    parents: Dict[str, Optional[str]] = {d: _resolve_parent(d, ex, known) for d, ex in known.items()}

    # Edge parent -> child (parent must be assembled before child)
    adj: Dict[str, List[str]] = {d: [] for d in known}
    indeg: Dict[str, int] = {d: 0 for d in known}
    for d, p in parents.items():
        if p is not None:
            adj[p].append(d)
            indeg[d] += 1

    # Depth-first over sorted children gives pre-order; a stack keeps it iterative.
    stack = deque(sorted((d for d, n in indeg.items() if n == 0), reverse=True))
    order: List[str] = []
    while stack:
        node = stack.pop()
        order.append(node)
        for child in sorted(adj[node], reverse=True):
            stack.append(child)

    if len(order) != len(known):
        stuck = sorted(set(known) - set(order))
        cycle: List[str] = []
        for d in stuck:
            cycle = _cycle_from(d, parents)
            if cycle:
                break
        raise LinkError(
            kind="cycle",
            dir=cycle[0] if cycle else stuck[0],
            message="Include references form a cycle: " + " -> ".join(cycle),
            details={"stuck": stuck},
        )

    nodes = {
        d: LinkedExample(dir=d, example=known[d], parent=parents[d], children=sorted(adj[d]))
        for d in order
    }
    return Forest(nodes, order)
