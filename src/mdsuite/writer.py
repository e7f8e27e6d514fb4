# writer.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from .errors import WriteError
from .generator import Artifact


def write_artifacts(artifacts: Iterable[Artifact]) -> List[Path]:
    """
    Write every artifact verbatim, creating parent directories.

    Stops at the first failure.

    Raises:
        WriteError: naming the suite whose artifact could not be written
    """
    written: List[Path] = []
    for artifact in artifacts:
        path = Path(artifact.path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(artifact.text, encoding="utf-8")
            if artifact.executable:
                path.chmod(0o755)
        except OSError as e:
            raise WriteError(suite=artifact.suite, path=str(path), reason=str(e)) from e
        written.append(path)
    return written
