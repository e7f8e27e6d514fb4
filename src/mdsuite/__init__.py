from .model import Block, Dependency, Directive, Example, Scenario
from .linker import Forest, LinkedExample, link
from .suite import Dependencies, Format, Layout, Suite, SuiteTree, Test, assemble
from .generator import Artifact, generate, render, select

__all__ = [
    "Block", "Dependency", "Directive", "Example", "Scenario",
    "Forest", "LinkedExample", "link",
    "Dependencies", "Format", "Layout", "Suite", "SuiteTree", "Test", "assemble",
    "Artifact", "generate", "render", "select",
]
