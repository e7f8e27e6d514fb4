# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


class MdsuiteError(Exception):
    """Base class for every error raised while generating suites."""


@dataclass
class ParseError(MdsuiteError):
    path: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.message}"


@dataclass
class LinkError(MdsuiteError):
    """
    Structured resolution error.

    kind is one of: duplicate, missing, multiple, cycle.
    Nothing is rendered once one of these is raised.
    """
    kind: str
    dir: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"dir={self.dir}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class PatternError(MdsuiteError):
    pattern: str
    message: str

    def __str__(self) -> str:
        return f"invalid pattern {self.pattern!r}: {self.message}"


@dataclass
class NoMatchError(MdsuiteError):
    pattern: str

    def __str__(self) -> str:
        return f"No matches found for pattern: {self.pattern}"


@dataclass
class WriteError(MdsuiteError):
    suite: str
    path: str
    reason: str

    def __str__(self) -> str:
        return f"cannot save suite {self.suite} ({self.path}): {self.reason}"
