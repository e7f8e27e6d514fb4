import pytest

from mdsuite.errors import NoMatchError, PatternError
from mdsuite.generator import generate, render, render_compiled, render_script, select
from mdsuite.linker import link
from mdsuite.model import Block, Dependency, Directive, Example, Scenario
from mdsuite.suite import Format, Layout, assemble

LAYOUT = Layout(input_dir="/docs", output_dir="/out")


def run(cmd):
    return Block(Directive.RUN, cmd)


def cleanup(cmd):
    return Block(Directive.CLEANUP, cmd)


def dep(name, factory):
    return Block(Directive.DEPENDENCY, name, Dependency(name, factory))


def build(*examples):
    return assemble(link(*examples), LAYOUT)


def chain_tree():
    return build(
        Example("/docs", (dep("store", "fixtures.store.Store"), run("root-run"), cleanup("root-cleanup"))),
        Example("/docs/mid", (run("mid-run"), cleanup("mid-cleanup"))),
        Example("/docs/mid/leaf", (dep("store", "fixtures.store.Store"), run("C"))),
    )


def selection_tree():
    return build(
        Example("/docs/A", scenarios=(Scenario("T1", (run("t1"),)), Scenario("T2", (run("t2"),)))),
        Example("/docs/B", scenarios=(Scenario("T3", (run("t3"),)),)),
    )


# ---------------------------------------------------------------------
# Compiled format
# ---------------------------------------------------------------------

def test_compiled_is_valid_python():
    tree = build(
        Example(
            "/docs",
            (dep("store", "fixtures.store.Store"), run("echo 'a'\necho \"b\""), cleanup("rm -rf x")),
            scenarios=(Scenario("ping", (run("ping -c 1 host"), cleanup("echo done"))),),
        ),
        Example("/docs/my-example_case", (run("echo child"),)),
    )
    for suite in tree:
        compile(render_compiled(suite), str(suite.location()), "exec")


def test_compiled_declares_every_fixture_but_sets_up_only_new_ones():
    tree = chain_tree()
    root = render(tree["/docs"], Format.COMPILED)
    leaf = render(tree["/docs/mid/leaf"], Format.COMPILED)

    assert "import fixtures.store" in root
    assert "    store = None" in root
    assert "cls.store = fixtures.store.Store()" in root

    assert "    store = None" in leaf
    assert "fixture_names = ('store',)" in leaf
    assert "cls.store =" not in leaf


def test_compiled_setup_order():
    text = render(tree_with_all(), Format.COMPILED)

    positions = [
        text.index("def setUpClass(cls):"),
        text.index("cls.store = fixtures.store.Store()"),
        text.index("r = cls.runner('/docs')"),
        text.index("r.run('second-cleanup')"),
        text.index("cls.addClassCleanup(cleanup)"),
        text.index("r.run('first')"),
        text.index("r.run('second')"),
    ]
    assert positions == sorted(positions)
    assert text.index("r.run('first-cleanup')") < text.index("r.run('second-cleanup')")


def tree_with_all():
    return build(
        Example(
            "/docs",
            (
                dep("store", "fixtures.store.Store"),
                run("first"),
                cleanup("first-cleanup"),
                run("second"),
                cleanup("second-cleanup"),
            ),
        )
    )["/docs"]


def test_multiline_command_rendered_line_by_line():
    suite = build(Example("/docs", (run("kubectl apply -f a\nkubectl wait"),)))["/docs"]
    text = render(suite, Format.COMPILED)
    assert "        r.run(\n            'kubectl apply -f a\\n'\n            'kubectl wait'\n        )" in text


def test_empty_suite_renders_one_placeholder_test():
    suite = build(Example("/docs", (run("a"),)))["/docs"]
    text = render(suite, Format.COMPILED)
    assert text.count("    def test(self):\n        pass") == 1
    assert text.count("def test") == 1


def test_tests_render_as_methods_with_cleanup():
    suite = build(Example("/docs", scenarios=(Scenario("T1", (run("go"), cleanup("stop"))),)))["/docs"]
    text = render(suite, Format.COMPILED)

    assert "    def test_T1(self):\n        r = self.runner('/docs')" in text
    assert "self.addCleanup(cleanup)" in text
    assert text.index("r.run('stop')") < text.index("r.run('go')")
    assert "setUpClass" not in text


def test_children_rendered_as_included_suites():
    tree = build(Example("/docs"), Example("/docs/my-example_case"), Example("/docs/other"))
    text = render(tree["/docs"], Format.COMPILED)

    assert "    def test_included_suites(self):" in text
    assert (
        "self.run_included('My_example_case', runtime.load_suite(__file__, 'my-example_case/suite_gen.py'))"
        in text
    )
    assert text.index("My_example_case") < text.index("'Other'")
    assert "test_included_suites" not in render(tree["/docs/other"], Format.COMPILED)


def test_header_and_base_class():
    text = render(build(Example("/docs"))["/docs"], Format.COMPILED)
    assert text.startswith("# Code generated by mdsuite. DO NOT EDIT.\nfrom mdsuite import runtime\n")
    assert "class Suite(runtime.Suite):\n    suite_name = 'docs'\n" in text


# ---------------------------------------------------------------------
# Script format
# ---------------------------------------------------------------------

def test_script_flattens_the_chain():
    tree = chain_tree()
    text = render(tree["/docs/mid/leaf"], Format.SCRIPT)

    assert (
        "function setup() {\n"
        "cd /docs\n"
        "root-run\n"
        "cd /docs/mid\n"
        "mid-run\n"
        "cd /docs/mid/leaf\n"
        "C\n"
        "}\n"
    ) in text
    assert "function cleanup() {\nmid-cleanup\nroot-cleanup\n}\n" in text
    assert text.endswith("\nsetup\ncleanup\n")


def test_script_and_compiled_agree_on_the_chain():
    tree = chain_tree()
    leaf = tree["/docs/mid/leaf"]
    suites = [tree[d] for d in ("/docs", "/docs/mid", "/docs/mid/leaf")]
    # nested runs: each suite's setUpClass runs its own commands, root first
    nested = [cmd for suite in suites for cmd in suite.run]

    script = render(leaf, Format.SCRIPT)
    setup = script.split("function setup() {\n", 1)[1].split("\n}", 1)[0].splitlines()

    assert [line for line in setup if not line.startswith("cd ")] == nested
    assert sum("cls.store =" in render(s, Format.COMPILED) for s in suites) == 1


def test_script_empty_cleanup_is_valid_bash():
    text = render(build(Example("/docs", (run("a"),)))["/docs"], Format.SCRIPT)
    assert "function cleanup() {\n:\n}" in text


def test_script_tests():
    tree = selection_tree()
    text = render_script(tree["/docs/A"])

    assert "function test_T1() {\ncd /docs/A\nt1\n}" in text
    assert text.endswith("\nsetup\ntest_T1\ntest_T2\ncleanup\n")
    assert text.startswith("#!/usr/bin/env bash\n")


def test_script_quotes_directories():
    tree = build(Example("/docs/my docs", (run("pwd"),), (Scenario("T1", (run("t1"),)),)))
    text = render_script(tree["/docs/my docs"])

    assert "function setup() {\ncd '/docs/my docs'\npwd\n}" in text
    assert "function test_T1() {\ncd '/docs/my docs'\nt1\n}" in text


def test_render_is_deterministic():
    tree = chain_tree()
    for suite in tree:
        for fmt in Format:
            assert render(suite, fmt) == render(suite, fmt)
    again = chain_tree()
    assert [a.text for a in generate(tree, Format.COMPILED)] == [a.text for a in generate(again, Format.COMPILED)]


# ---------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------

def test_select_test_name():
    selected = select(selection_tree(), "T1")
    assert len(selected) == 1
    assert selected[0].suite.name == "A"
    assert [t.name for t in selected[0].tests] == ["T1"]


def test_select_suite_name_keeps_all_tests():
    selected = select(selection_tree(), "A")
    assert [s.suite.name for s in selected] == ["A"]
    assert [t.name for t in selected[0].tests] == ["T1", "T2"]


def test_select_is_case_sensitive():
    with pytest.raises(NoMatchError):
        select(selection_tree(), "t1")


def test_select_nothing():
    with pytest.raises(NoMatchError) as err:
        select(selection_tree(), "nothing")
    assert "nothing" in str(err.value)


def test_select_bad_pattern():
    with pytest.raises(PatternError):
        select(selection_tree(), "(")


def test_empty_pattern_selects_everything():
    selected = select(selection_tree(), "")
    assert [s.suite.name for s in selected] == ["A", "B"]


def test_generate_script_with_pattern():
    artifacts = generate(selection_tree(), Format.SCRIPT, "T1")
    assert len(artifacts) == 1
    artifact = artifacts[0]
    assert artifact.suite == "A"
    assert str(artifact.path) == "/out/A/suite_gen.sh"
    assert artifact.executable
    assert "test_T1" in artifact.text
    assert "test_T2" not in artifact.text


def test_generate_compiled_ignores_pattern():
    artifacts = generate(selection_tree(), Format.COMPILED, "T1")
    assert [a.suite for a in artifacts] == ["A", "B"]
    assert not any(a.executable for a in artifacts)
