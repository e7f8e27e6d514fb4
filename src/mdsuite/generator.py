# generator.py
from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import NoMatchError, PatternError
from .suite import Body, Format, Suite, SuiteTree, Test

HEADER = "# Code generated by mdsuite. DO NOT EDIT."
INDENT = "    "


@dataclass(frozen=True)
class Selection:
    suite: Suite
    tests: Tuple[Test, ...]


@dataclass(frozen=True)
class Artifact:
    suite: str
    path: Path
    text: str
    executable: bool = False


# ---------------------------------------------------------------------
# Compiled suite (python unittest module)
# ---------------------------------------------------------------------

def _run_call(target: str, cmd: str, indent: str) -> List[str]:
    lines = cmd.split("\n")
    if len(lines) == 1:
        return [f"{indent}{target}.run({cmd!r})"]
    out = [f"{indent}{target}.run("]
    for i, line in enumerate(lines):
        literal = line + "\n" if i + 1 < len(lines) else line
        out.append(f"{indent}{INDENT}{literal!r}")
    out.append(f"{indent})")
    return out


def _body(run: Body, cleanup: Body, owner: str, register: str, indent: str) -> List[str]:
    """runner, deferred cleanup, then run commands"""
    out: List[str] = []
    if cleanup:
        out.append("")
        out.append(f"{indent}def cleanup():")
        for cmd in cleanup:
            out.extend(_run_call("r", cmd, indent + INDENT))
        out.append("")
        out.append(f"{indent}{owner}.{register}(cleanup)")
    for cmd in run:
        out.extend(_run_call("r", cmd, indent))
    return out


def _test_method(test: Test) -> List[str]:
    if test.is_empty:
        name = f"test_{test.name}" if test.name else "test"
        return [f"{INDENT}def {name}(self):", f"{INDENT * 2}pass"]
    out = [
        f"{INDENT}def test_{test.name}(self):",
        f"{INDENT * 2}r = self.runner({os.path.abspath(test.dir)!r})",
    ]
    return out + _body(test.run, test.cleanup, "self", "addCleanup", INDENT * 2)


def render_compiled(suite: Suite) -> str:
    lines: List[str] = [HEADER, *suite.deps.imports(), "", ""]
    lines.append("class Suite(runtime.Suite):")
    lines.append(f"{INDENT}suite_name = {suite.name!r}")
    lines.append(f"{INDENT}fixture_names = {tuple(suite.deps.names())!r}")
    lines.extend(f"{INDENT}{f}" for f in suite.deps.fields())

    setup = suite.deps_to_setup.setup()
    if setup or suite.run or suite.cleanup:
        inner = INDENT * 2
        lines += ["", f"{INDENT}@classmethod", f"{INDENT}def setUpClass(cls):", f"{inner}super().setUpClass()"]
        lines.extend(inner + s for s in setup)
        if suite.run or suite.cleanup:
            lines.append(f"{inner}r = cls.runner({suite.abs_dir!r})")
            lines.extend(_body(suite.run, suite.cleanup, "cls", "addClassCleanup", inner))

    if suite.included:
        lines += ["", f"{INDENT}def test_included_suites(self):"]
        for child in suite.included:
            lines.append(
                f"{INDENT * 2}self.run_included({child.title!r}, runtime.load_suite(__file__, {child.module!r}))"
            )

    tests = suite.tests or [Test(dir=suite.dir)]
    for test in tests:
        lines.append("")
        lines.extend(_test_method(test))
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------
# Shell script
# ---------------------------------------------------------------------

def _function(name: str, commands: Iterable[str]) -> List[str]:
    body = list(commands)
    return [f"function {name}() {{", *(body or [":"]), "}"]


def render_script(suite: Suite, tests: Optional[Sequence[Test]] = None) -> str:
    tests = [t for t in (suite.tests if tests is None else tests) if not t.is_empty]

    lines: List[str] = ["#!/usr/bin/env bash", HEADER, ""]
    lines += _function("setup", suite.complete_setup)
    for test in tests:
        lines.append("")
        lines += _function(f"test_{test.name}", (f"cd {shlex.quote(suite.abs_dir)}", *test.run, *test.cleanup))
    lines.append("")
    lines += _function("cleanup", suite.complete_cleanup)
    lines += ["", "setup", *(f"test_{t.name}" for t in tests), "cleanup"]
    return "\n".join(lines) + "\n"


_RENDERERS: Dict[Format, Callable[..., str]] = {
    Format.COMPILED: lambda suite, tests: render_compiled(suite),
    Format.SCRIPT: render_script,
}


def render(suite: Suite, fmt: Format, tests: Optional[Sequence[Test]] = None) -> str:
    """
    Render one suite. Pure: the same suite always gives the same text.

    `tests` restricts the script format to a subset; the compiled format
    always carries every test.
    """
    return _RENDERERS[Format(fmt)](suite, tests)


# ---------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------

def compile_pattern(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(pattern=pattern, message=str(e)) from e


def select(suites: Iterable[Suite], pattern: str = "") -> List[Selection]:
    """
    Pick the suites/tests whose name matches `pattern` (re.search, case sensitive).

    A matching suite keeps all its tests; otherwise only its matching tests
    are kept, and suites with none are dropped. An empty pattern keeps
    everything.

    Raises:
        PatternError: malformed pattern
        NoMatchError: nothing matched
    """
    if not pattern:
        return [Selection(s, tuple(s.tests)) for s in suites]

    regex = compile_pattern(pattern)
    selected: List[Selection] = []
    for suite in suites:
        if regex.search(suite.name):
            selected.append(Selection(suite, tuple(suite.tests)))
            continue
        matched = tuple(t for t in suite.tests if t.name and regex.search(t.name))
        if matched:
            selected.append(Selection(suite, matched))

    if not selected:
        raise NoMatchError(pattern=pattern)
    return selected


def generate(tree: SuiteTree, fmt: Format, pattern: str = "") -> List[Artifact]:
    """Render the whole tree. Selection applies to the script format only."""
    fmt = Format(fmt)
    if fmt is Format.COMPILED:
        return [Artifact(s.name, s.location(fmt), render(s, fmt)) for s in tree]
    return [
        Artifact(sel.suite.name, sel.suite.location(fmt), render(sel.suite, fmt, sel.tests), executable=True)
        for sel in select(tree, pattern)
    ]
