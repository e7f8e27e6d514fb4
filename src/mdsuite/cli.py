# cli.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List

import click
from pydantic import ValidationError

from mdsuite.config import Config
from mdsuite.errors import LinkError, MdsuiteError, NoMatchError, ParseError, PatternError, WriteError
from mdsuite.generator import generate as generate_artifacts
from mdsuite.linker import link
from mdsuite.model import Example
from mdsuite.parser import parse_file
from mdsuite.suite import Format, Layout, Suite, SuiteTree, assemble
from mdsuite.ui.console import Console, get_console, set_console
from mdsuite.writer import write_artifacts


def find_example_dirs(root: str | Path, readme: str = "README.md") -> List[Path]:
    """
    Find every directory under `root` that holds a README.

    Hidden directories (.git, .venv, ...) are skipped. Deterministic order.
    """
    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        if readme in filenames:
            found.append(Path(dirpath))
    return found


def load_examples(root: str | Path, readme: str = "README.md") -> List[Example]:
    console = get_console()
    examples: List[Example] = []
    for dir in find_example_dirs(root, readme):
        console.print_debug(f"parsing {dir / readme}")
        examples.append(parse_file(dir / readme))
    return examples


def build_tree(config: Config) -> SuiteTree:
    """Parse, link and assemble. Nothing is rendered if this raises."""
    examples = load_examples(config.input_dir, config.readme)
    forest = link(*examples)
    return assemble(forest, Layout(str(config.input_dir), str(config.output_dir)))


_ERROR_TITLES = {
    ParseError: "Cannot parse example",
    LinkError: "Cannot build examples",
    PatternError: "Invalid match pattern",
    NoMatchError: "No matches",
    WriteError: "Cannot save suite",
}


def _fail(ctx: click.Context, exc: Exception) -> None:
    console = get_console()
    if isinstance(exc, ValidationError):
        console.print_error(
            "Invalid options",
            "The given options cannot be combined.",
            details=[e["msg"] for e in exc.errors()],
            suggestion="Use --match together with --bash:\n  mdsuite generate docs generated --bash --match 'Kernel'",
        )
    elif isinstance(exc, MdsuiteError):
        console.print_error(_ERROR_TITLES.get(type(exc), "Generation failed"), str(exc))
        if ctx.obj.get("debug", False):
            console.print_exception(exc)
    else:
        console.print_exception(exc)
    sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.version_option(package_name="mdsuite")
@click.pass_context
def cli(ctx, debug):
    """mdsuite: generate integration test suites from executable READMEs."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("input_dir", required=False)
@click.argument("output_dir", required=False)
@click.option("--bash", is_flag=True, default=False, help="Generate bash scripts instead of python suites")
@click.option("--match", default="", help="Regex for matching suite or test names. Can be used only with --bash")
@click.pass_context
def generate(ctx, input_dir, output_dir, bash, match):
    """Generate suites for every example under INPUT_DIR into OUTPUT_DIR."""
    console = get_console()
    args = [a for a in (input_dir, output_dir) if a is not None]

    try:
        config = Config.from_args(args, script=bash, match=match)
        tree = build_tree(config)
        fmt = Format.SCRIPT if config.script else Format.COMPILED

        console.print_generation_started(
            input_dir=str(config.input_dir),
            output_dir=str(config.output_dir),
            mode=fmt.value,
            example_count=len(tree),
        )

        artifacts = generate_artifacts(tree, fmt, config.match)
        for path, artifact in zip(write_artifacts(artifacts), artifacts):
            console.print_written(artifact.suite, str(path))
        console.print_results(len(artifacts))
    except (ValidationError, MdsuiteError) as e:
        _fail(ctx, e)


@cli.command()
@click.argument("input_dir", required=False)
@click.pass_context
def tree(ctx, input_dir):
    """Print the linked suite tree found under INPUT_DIR."""
    console = get_console()
    try:
        config = Config.from_args([input_dir] if input_dir else [])
        suites = build_tree(config)
    except (ValidationError, MdsuiteError) as e:
        _fail(ctx, e)
        return

    console.print_header(f"Suites under {config.input_dir}")

    def show(suite: Suite, depth: int) -> None:
        console.print_suite(suite.name, suite.dir, depth)
        for test in suite.tests:
            if test.name:
                console.print_test(test.name, depth + 1)
        for child in suites.children(suite):
            show(child, depth + 1)

    for root in suites.roots:
        show(root, 0)


if __name__ == "__main__":
    cli()
