# parser.py
# Turns a README.md into an Example.
#
# Recognized structure:
#   ```bash / ```sh / ```shell fences  -> run commands
#   a heading named "Cleanup"           -> fences below it are cleanup commands
#   "## Requires" list of links         -> include references (parent suite)
#   "## Fixtures" list "name: factory"  -> dependency declarations
#   "## Tests" with "### <name>" below  -> one scenario per sub-heading
from __future__ import annotations

import keyword
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ParseError
from .model import Block, Dependency, Directive, Example, Scenario
from .runtime import Suite as SuiteBase

COMMAND_LANGS = {"bash", "sh", "shell"}

_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE = re.compile(r"^\s*(```+|~~~+)\s*([\w+-]*)")
_LINK = re.compile(r"\[[^\]]*\]\(\s*([^)\s]+)[^)]*\)")
_LIST_ITEM = re.compile(r"^\s*[-*+]\s+(.*)$")
_FIXTURE = re.compile(r"^`?(?P<name>[A-Za-z_]\w*)`?\s*[:=]\s*`?(?P<factory>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+)`?$")


def _reserved(name: str) -> bool:
    """Keywords and attributes of the generated suite's base class cannot name a fixture."""
    return keyword.iskeyword(name) or hasattr(SuiteBase, name)


def _bad_factory(factory: str) -> bool:
    parts = factory.split(".")
    return parts[0] == "runtime" or any(keyword.iskeyword(p) for p in parts)


def _resolve_link(dir: str, target: str) -> Optional[str]:
    if "://" in target or target.startswith(("#", "mailto:")):
        return None
    target = target.split("#", 1)[0]
    if not target:
        return None
    if target.lower().endswith(".md"):
        target = os.path.dirname(target) or "."
    return os.path.normpath(os.path.join(dir, target))


class _Section:
    """Heading stack, answering which directive applies to the current line."""

    def __init__(self) -> None:
        self.stack: List[Tuple[int, str, int]] = []

    def push(self, level: int, text: str, line: int) -> None:
        while self.stack and self.stack[-1][0] >= level:
            self.stack.pop()
        self.stack.append((level, text.strip(), line))

    def _index(self, name: str) -> int:
        for i, (_level, text, _line) in enumerate(self.stack):
            if text.lower() == name:
                return i
        return -1

    @property
    def requires(self) -> bool:
        return self._index("requires") >= 0

    @property
    def fixtures(self) -> bool:
        return self._index("fixtures") >= 0

    @property
    def scenario(self) -> Optional[Tuple[int, str]]:
        """(heading line, name) of the enclosing test heading."""
        i = self._index("tests")
        if i < 0 or i + 1 >= len(self.stack):
            return None
        _level, name, line = self.stack[i + 1]
        return None if name.lower() == "cleanup" else (line, name)

    @property
    def cleanup(self) -> bool:
        start = max(self._index("tests"), 0)
        return any(text.lower() == "cleanup" for _level, text, _line in self.stack[start:])


def parse(text: str, dir: str, path: str = "README.md") -> Example:
    """
    Parse README text for the example living in `dir`.

    Raises:
        ParseError: on an unterminated fence, a malformed fixture item or a
            fixture name the generated suite cannot hold
    """
    dir = os.path.normpath(dir)
    section = _Section()
    blocks: List[Block] = []
    scenarios: dict[Tuple[int, str], List[Block]] = {}

    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        fence = _FENCE.match(line)
        if fence:
            marker, lang = fence.group(1), fence.group(2).lower()
            start = i
            body: List[str] = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(marker):
                body.append(lines[i])
                i += 1
            if i >= len(lines):
                raise ParseError(path, start + 1, "unterminated code block")
            i += 1
            if lang not in COMMAND_LANGS or section.requires or section.fixtures:
                continue
            command = "\n".join(body).strip("\n")
            if not command.strip():
                continue
            directive = Directive.CLEANUP if section.cleanup else Directive.RUN
            block = Block(directive, command)
            scenario = section.scenario
            if scenario is None:
                blocks.append(block)
            else:
                scenarios.setdefault(scenario, []).append(block)
            continue

        heading = _HEADING.match(line)
        if heading:
            section.push(len(heading.group(1)), heading.group(2), i)
        elif section.requires:
            for target in _LINK.findall(line):
                resolved = _resolve_link(dir, target)
                if resolved is not None:
                    blocks.append(Block(Directive.INCLUDE, resolved))
        elif section.fixtures:
            item = _LIST_ITEM.match(line)
            if item:
                m = _FIXTURE.match(item.group(1).strip())
                if not m:
                    raise ParseError(path, i + 1, f"fixture must look like 'name: module.factory', got {item.group(1).strip()!r}")
                if _reserved(m.group("name")):
                    raise ParseError(path, i + 1, f"fixture name {m.group('name')!r} is reserved")
                if _bad_factory(m.group("factory")):
                    raise ParseError(path, i + 1, f"fixture factory {m.group('factory')!r} cannot be imported")
                dep = Dependency(m.group("name"), m.group("factory"))
                blocks.append(Block(Directive.DEPENDENCY, dep.name, dep))
        i += 1

    return Example(
        dir=dir,
        blocks=tuple(blocks),
        scenarios=tuple(Scenario(name, tuple(b)) for (_line, name), b in scenarios.items()),
    )


def parse_file(path: str | Path) -> Example:
    """Parse the README at `path`; the example's directory is the file's parent."""
    p = Path(path)
    return parse(p.read_text(encoding="utf-8"), str(p.parent), path=str(p))
