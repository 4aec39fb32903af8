from pathlib import Path

import pytest

from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.types import CostState, Visibility


@pytest.fixture
def sample_tree():
    root = ProjectNode("app", Path("/srv/app"), is_container=True)
    src = ProjectNode("src", Path("/srv/app/src"), is_container=True, relative_path="src", parent=root)
    main = ProjectNode("main.py", Path("/srv/app/src/main.py"), relative_path="src/main.py", parent=src)
    util = ProjectNode("util.py", Path("/srv/app/src/util.py"), relative_path="src/util.py", parent=src)
    readme = ProjectNode("README", Path("/srv/app/README"), relative_path="README", parent=root)
    for node in (root, src, main, util, readme):
        node.visibility = Visibility.INCLUDED
    return root, src, main, util, readme


def test_node_initialization():
    node = ProjectNode("main.py", Path("/srv/app/main.py"), relative_path="main.py")

    assert node.name == "main.py"
    assert node.abs_path == Path("/srv/app/main.py")
    assert not node.is_container
    assert node.visibility is Visibility.UNRESOLVED
    assert node.cost_state == CostState.UNSET
    assert node.is_root


def test_path_is_read_only():
    node = ProjectNode("a", Path("/a"))
    with pytest.raises(AttributeError):
        node.abs_path = Path("/b")  # type: ignore[misc]


def test_tree_links(sample_tree):
    root, src, main, util, readme = sample_tree

    assert root.children == (src, readme)
    assert main.parent is src
    assert not src.is_root
    assert root.files() == [main, util, readme]


def test_selector(sample_tree):
    root, src, main, _, _ = sample_tree

    assert src.selector == "src/"
    assert main.selector == "src/main.py"
    assert root.selector == ""


def test_extension(sample_tree):
    _, src, main, _, readme = sample_tree

    assert main.extension == "py"
    assert readme.extension == ""
    assert ProjectNode("x.tar.gz", Path("/x.tar.gz")).extension == "gz"


def test_displayed_cost_aggregates(sample_tree):
    root, src, main, util, readme = sample_tree
    main.cost_state = CostState.resolved(10)
    util.cost_state = CostState.resolved(5)
    readme.cost_state = CostState.PENDING

    assert src.displayed_cost == 15
    assert root.displayed_cost == 15
    assert readme.displayed_cost == 0


def test_displayed_cost_of_excluded_nodes(sample_tree):
    root, src, main, util, readme = sample_tree
    main.cost_state = CostState.resolved(10)
    util.cost_state = CostState.resolved(5)
    readme.cost_state = CostState.resolved(1)

    util.visibility = Visibility.EXCLUDED
    assert util.displayed_cost == 0
    assert src.displayed_cost == 10
    assert root.displayed_cost == 11

    src.visibility = Visibility.EXCLUDED
    assert root.displayed_cost == 1


def test_is_pending(sample_tree):
    root, src, main, util, _ = sample_tree
    assert not root.is_pending

    main.cost_state = CostState.PENDING
    assert src.is_pending
    assert root.is_pending

    src.visibility = Visibility.EXCLUDED
    assert not root.is_pending


def test_visibility_helpers(sample_tree):
    _, _, main, _, _ = sample_tree
    assert main.is_visible and not main.is_excluded

    main.visibility = Visibility.EXCLUDED
    assert main.is_excluded and not main.is_visible

    main.visibility = Visibility.UNRESOLVED
    assert not main.is_excluded and not main.is_visible


def test_equality_by_path():
    a = ProjectNode("a", Path("/srv/a"))
    b = ProjectNode("a", Path("/srv/a"), relative_path="other")
    c = ProjectNode("a", Path("/srv/c"))

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert a != "a"
    assert len({a, b, c}) == 2


def test_repr(sample_tree):
    _, src, main, _, _ = sample_tree
    main.cost_state = CostState.resolved(3)

    assert repr(src) == "ProjectNode('src/', visibility=included, cost=unset)"
    assert repr(main) == "ProjectNode('src/main.py', visibility=included, cost=resolved(3))"
