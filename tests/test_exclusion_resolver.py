import itertools

import pytest
from anytree import PreOrderIter

from projingest.diagnostics import DiagnosticLog
from projingest.exclusion_resolver import ExclusionResolver, ResolutionSummary, resolve, toggle_exclusion
from projingest.types import Visibility


def visible_files(root):
    return {
        node.relative_path
        for node in PreOrderIter(root)
        if not node.is_container and node.visibility is Visibility.INCLUDED
    }


def visibility_map(root):
    return {node.relative_path: node.visibility for node in PreOrderIter(root)}


@pytest.fixture
def go_tree(make_tree):
    return make_tree(
        {
            "src": {"main.go": "package main\n", "main_test.go": "package main\n"},
            "docs": {"readme.md": "Docs\n"},
        }
    )


def test_exclude_patterns_example(make_tree, node_at):
    root = make_tree({"a.txt": "a", "a.log": "log", "build": {"out.bin": "bin"}})

    resolve(root, ["*.log", "build/"], [])

    assert visible_files(root) == {"a.txt"}
    assert node_at(root, "build").visibility is Visibility.EXCLUDED
    assert node_at(root, "build/out.bin").visibility is Visibility.EXCLUDED
    assert node_at(root, "a.log").visibility is Visibility.EXCLUDED


def test_include_mode_example(go_tree, node_at):
    resolve(go_tree, [], ["src/*.go"])

    # "*" matches any run within one segment, so both Go files match
    assert visible_files(go_tree) == {"src/main.go", "src/main_test.go"}
    assert node_at(go_tree, "src").visibility is Visibility.INCLUDED
    assert node_at(go_tree, "docs").visibility is Visibility.EXCLUDED
    assert node_at(go_tree, "docs/readme.md").visibility is Visibility.EXCLUDED


def test_include_mode_narrow_pattern(go_tree):
    resolve(go_tree, [], ["src/main.go"])
    assert visible_files(go_tree) == {"src/main.go"}


def test_no_patterns_includes_everything(make_tree):
    root = make_tree({"a": {"b": {"c.txt": "c"}}, "d.txt": "d"})
    resolve(root, [], [])
    assert all(node.visibility is Visibility.INCLUDED for node in PreOrderIter(root))


def test_exclude_precedence_over_include(go_tree, node_at):
    resolve(go_tree, ["main_test.go"], ["src/*.go"])

    assert node_at(go_tree, "src/main_test.go").visibility is Visibility.EXCLUDED
    assert visible_files(go_tree) == {"src/main.go"}


def test_sticky_exclusion_ignores_include_patterns(make_tree, node_at):
    root = make_tree({"vendor": {"lib": {"x.go": "x"}, "y.go": "y"}, "main.go": "m"})

    resolve(root, ["vendor/"], ["*.go"])

    for node in PreOrderIter(node_at(root, "vendor")):
        assert node.visibility is Visibility.EXCLUDED
    assert visible_files(root) == {"main.go"}


def test_include_mode_parent_derivation(make_tree, node_at):
    root = make_tree(
        {
            "a": {"b": {"keep.py": "k"}, "c": {"skip.txt": "s"}},
            "empty": {},
        }
    )

    resolve(root, [], ["*.py"])

    assert node_at(root, "a").visibility is Visibility.INCLUDED
    assert node_at(root, "a/b").visibility is Visibility.INCLUDED
    assert node_at(root, "a/c").visibility is Visibility.EXCLUDED
    assert node_at(root, "a/c/skip.txt").visibility is Visibility.EXCLUDED


def test_include_mode_empty_container_is_excluded(make_tree, node_at):
    root = make_tree({"empty": {}, "x.py": "x"})

    resolve(root, [], ["*"])

    # Even a pattern that matches the directory name cannot include it without children
    assert node_at(root, "empty").visibility is Visibility.EXCLUDED
    assert node_at(root, "x.py").visibility is Visibility.INCLUDED


def test_include_mode_container_match_alone_is_not_enough(make_tree, node_at):
    root = make_tree({"src": {"notes.txt": "n"}})
    resolve(root, [], ["src"])
    # "src" (no slash) matches basenames only: the directory, not notes.txt
    assert node_at(root, "src").visibility is Visibility.EXCLUDED


def test_include_directory_pattern_includes_contents(make_tree, node_at):
    root = make_tree({"src": {"a.py": "a", "pkg": {"b.py": "b"}}, "other.py": "o"})

    resolve(root, [], ["src/"])

    assert visible_files(root) == {"src/a.py", "src/pkg/b.py"}
    assert node_at(root, "src/pkg").visibility is Visibility.INCLUDED


@pytest.mark.parametrize(
    "exclude,include",
    [
        (["*"], []),
        (["root", "root/", "/", ""], []),
        (["*"], ["*"]),
        ([], ["nothing-matches"]),
    ],
)
def test_root_immunity(make_tree, exclude, include):
    root = make_tree({"a.txt": "a", "sub": {"b.txt": "b"}})

    resolve(root, [p for p in exclude if p], include)

    assert root.visibility is Visibility.INCLUDED


def test_root_immunity_with_empty_tree(make_tree):
    root = make_tree({})
    resolve(root, [], ["*.py"])
    assert root.visibility is Visibility.INCLUDED


def test_idempotence(make_tree):
    root = make_tree(
        {
            "src": {"main.go": "m", "util": {"u.go": "u", "u.txt": "t"}},
            "build": {"out": "o"},
            "x.log": "l",
        }
    )
    exclude = ["*.log", "build/"]
    include = ["*.go"]

    resolve(root, exclude, include)
    first = visibility_map(root)
    resolve(root, exclude, include)

    assert visibility_map(root) == first


def test_re_resolution_starts_from_scratch(make_tree, node_at):
    root = make_tree({"a.log": "a", "b.txt": "b"})

    resolve(root, ["*.log"], [])
    assert node_at(root, "a.log").visibility is Visibility.EXCLUDED

    resolve(root, [], [])
    assert node_at(root, "a.log").visibility is Visibility.INCLUDED


def test_pattern_order_within_class_is_irrelevant(make_tree):
    layout = {"src": {"a.go": "a", "b.py": "b"}, "build": {"c.go": "c"}, "d.log": "d"}
    exclude = ["*.log", "build/", "b.py"]
    include = ["*.go", "src/"]
    root = make_tree(layout)

    results = []
    for exclude_order in itertools.permutations(exclude):
        for include_order in itertools.permutations(include):
            resolve(root, list(exclude_order), list(include_order))
            results.append(visibility_map(root))

    assert all(result == results[0] for result in results)


def test_malformed_patterns_do_not_abort(make_tree, node_at):
    root = make_tree({"[abc": "literal", "a": "x", "z.txt": "z"})

    resolve(root, ["[abc", "[z-a].txt"], [])

    assert node_at(root, "[abc").visibility is Visibility.EXCLUDED
    assert node_at(root, "a").visibility is Visibility.INCLUDED
    assert node_at(root, "z.txt").visibility is Visibility.INCLUDED


def test_no_unresolved_nodes_after_resolution(make_tree):
    root = make_tree({"a": {"b": {"c": "c"}}, "d": {}, "e.py": "e"})
    for exclude, include in [([], []), (["a/"], []), ([], ["*.py"]), (["*.py"], ["*.py"])]:
        resolve(root, exclude, include)
        assert all(node.visibility is not Visibility.UNRESOLVED for node in PreOrderIter(root))


def test_resolver_class_returns_summary(make_tree):
    root = make_tree({"a.txt": "a", "a.log": "log", "build": {"out.bin": "bin"}})
    diagnostics = DiagnosticLog()

    summary = ExclusionResolver(diagnostics).resolve(root, ["*.log", "build/"], [])

    assert summary == ResolutionSummary(
        included_files=1, excluded_files=2, included_directories=0, excluded_directories=1
    )
    assert summary.included == 1
    assert summary.excluded == 3
    assert len(diagnostics) == 1


def test_toggle_exclusion_adds_and_removes_selector(make_tree, node_at):
    root = make_tree({"build": {"out.bin": "b"}, "a.txt": "a"})
    build = node_at(root, "build")
    a_txt = node_at(root, "a.txt")

    patterns = toggle_exclusion(build, ["*.log"])
    assert patterns == ["*.log", "build/"]

    patterns = toggle_exclusion(a_txt, patterns)
    assert patterns == ["*.log", "build/", "a.txt"]

    patterns = toggle_exclusion(build, patterns)
    assert patterns == ["*.log", "a.txt"]


def test_toggle_exclusion_does_not_modify_input(make_tree, node_at):
    root = make_tree({"a.txt": "a"})
    original = ["*.log"]
    toggle_exclusion(node_at(root, "a.txt"), original)
    assert original == ["*.log"]


def test_toggle_exclusion_refuses_root(make_tree):
    root = make_tree({"a.txt": "a"})
    diagnostics = DiagnosticLog()

    patterns = ExclusionResolver(diagnostics).toggle_exclusion(root, ["*.log"])

    assert patterns == ["*.log"]
    assert "cannot be excluded" in diagnostics.entries[-1].message


def test_toggled_selector_excludes_exactly_that_node(make_tree, node_at):
    root = make_tree({"src": {"app.py": "a"}, "srcfile.py": "s", "lib": {"src": {"x.py": "x"}}})

    patterns = toggle_exclusion(node_at(root, "src"), [])
    resolve(root, patterns, [])

    assert node_at(root, "src").visibility is Visibility.EXCLUDED
    assert node_at(root, "srcfile.py").visibility is Visibility.INCLUDED
    assert node_at(root, "lib/src/x.py").visibility is Visibility.INCLUDED
