"""Console output formatting utilities for mdsuite."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_generation_started(
        self,
        input_dir: str,
        output_dir: str,
        mode: str,
        example_count: int,
    ) -> None:
        """Print generation start information."""
        print("\nGENERATION STARTED")
        print(f"Input: {input_dir}")
        print(f"Output: {output_dir}")
        print(f"Mode: {mode}")
        print(f"Examples: {example_count}")
        print()

    def print_suite(self, name: str, dir: str, depth: int = 0) -> None:
        """Print one suite of the linked tree."""
        print(f"{'  ' * depth}{name} ({dir})")

    def print_test(self, name: str, depth: int = 0) -> None:
        """Print one test of a suite."""
        print(f"{'  ' * depth}- {name}")

    def print_written(self, suite: str, path: str) -> None:
        """Print artifact written message."""
        print(f"WROTE: {suite} -> {path}")

    def print_results(self, count: int) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        print(f"  suites written: {count}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
