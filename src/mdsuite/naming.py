# naming.py
from __future__ import annotations

import posixpath
import re


def identifier(text: str) -> str:
    """Fold every non-identifier character to '_' ("my-example" -> "my_example")."""
    name = re.sub(r"[^A-Za-z0-9_]", "_", text.strip())
    if name and name[0].isdigit():
        name = "_" + name
    return name


def title(dir: str) -> str:
    """
    Display title for a nested suite: the final directory segment as an
    identifier with its first character upper-cased.

    Only the first character changes: "my-example_case" -> "My_example_case".
    """
    name = identifier(posixpath.basename(dir.replace("\\", "/").rstrip("/")))
    return name[:1].upper() + name[1:]


def suite_name(dir: str) -> str:
    return identifier(posixpath.basename(dir.replace("\\", "/").rstrip("/")))
