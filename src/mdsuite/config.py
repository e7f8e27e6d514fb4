# config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, model_validator

DEFAULT_INPUT_DIR = os.environ.get("MDSUITE_INPUT_DIR", ".")
DEFAULT_OUTPUT_DIR = os.environ.get("MDSUITE_OUTPUT_DIR", "generated")
DEFAULT_README = os.environ.get("MDSUITE_README", "README.md")


class Config(BaseModel):
    input_dir: Path = Path(DEFAULT_INPUT_DIR)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    script: bool = False  # bash scripts instead of python suites
    match: str = ""       # regex over suite/test names, script mode only
    readme: str = DEFAULT_README

    @model_validator(mode="after")
    def _match_needs_script(self) -> "Config":
        if self.match and not self.script:
            raise ValueError("--match can be used only together with --bash")
        return self

    @classmethod
    def from_args(cls, args: Sequence[str], **kwargs) -> "Config":
        """Positional args: [input_dir [output_dir]]."""
        values = dict(kwargs)
        if len(args) > 0:
            values["input_dir"] = Path(args[0])
        if len(args) > 1:
            values["output_dir"] = Path(args[1])
        return cls(**values)
