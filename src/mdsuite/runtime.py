# runtime.py
# Support code imported by generated suite_gen.py modules.
from __future__ import annotations

import importlib.util
import os
import subprocess
import sys
import unittest
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Type

from .naming import identifier


@dataclass
class CommandFailure(Exception):
    dir: str
    cmd: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        lines = [f"[{self.dir}] command failed (exit={self.exit_code}): {self.cmd}"]
        if self.stderr:
            lines.append(self.stderr)
        return "\n".join(lines)


class Runner:
    """Runs shell commands with a fixed working directory."""

    def __init__(self, dir: str, env: Optional[Dict[str, str]] = None):
        self.dir = dir
        self.env = env or {}

    def run(self, cmd: str) -> subprocess.CompletedProcess:
        cwd = Path(self.dir).resolve()
        if not cwd.exists():
            raise FileNotFoundError(f"runner directory not found: {cwd}")

        env = os.environ.copy()
        env.update(self.env)

        proc = subprocess.run(
            cmd,
            shell=True,
            cwd=str(cwd),
            env=env,
            text=True,
            capture_output=True,
        )
        if proc.returncode != 0:
            raise CommandFailure(
                dir=str(cwd),
                cmd=cmd,
                exit_code=proc.returncode,
                stdout=proc.stdout[-4000:],
                stderr=proc.stderr[-4000:],
            )
        return proc


class Suite(unittest.TestCase):
    """Base class of every generated suite."""

    suite_name = ""
    fixture_names: tuple = ()

    @classmethod
    def runner(cls, dir: str) -> Runner:
        return Runner(dir)

    def run_included(self, title: str, suite: Type["Suite"]) -> None:
        """
        Run a child suite as a named sub-test.

        Fixtures this suite already holds are handed down so the child does
        not initialize them again.
        """
        with self.subTest(suite=title):
            for name in suite.fixture_names:
                value = getattr(self, name, None)
                if value is not None and getattr(suite, name, None) is None:
                    setattr(suite, name, value)

            result = unittest.TestResult()
            unittest.defaultTestLoader.loadTestsFromTestCase(suite).run(result)
            problems = [*result.errors, *result.failures]
            if problems:
                details = "\n".join(f"{test}: {trace}" for test, trace in problems)
                self.fail(f"suite {title} failed:\n{details}")


def load_suite(origin: str, relpath: str) -> Type[Suite]:
    """Import the generated module at `relpath` (relative to `origin`'s directory) and return its Suite."""
    path = (Path(origin).parent / relpath).resolve()
    module_name = "mdsuite_generated_" + identifier(str(path))
    module = sys.modules.get(module_name)
    if module is None:
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot load generated suite: {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    return module.Suite
