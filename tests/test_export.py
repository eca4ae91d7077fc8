import pytest

from spamtree import Dataset, Hyperparameters, build
from spamtree.export import export_graphviz, export_rules, format_tree


def _tree(**hp):
    dataset = Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": 5}, {"x": 6}], [False, False, True, True])
    return build(dataset, ["x"], Hyperparameters(**hp))


def test_export_rules():
    assert export_rules(_tree()) == ["x < 3.5000 => not spam", "x >= 3.5000 => spam"]


def test_export_rules_for_single_leaf():
    assert export_rules(_tree(min_split=5)) == ["<root> => not spam"]


def test_format_tree():
    text = format_tree(_tree(), precision=1)
    assert text.splitlines() == [
        "if x < 3.5:",
        "  Predict not spam | spam=0 not_spam=2",
        "else:",
        "  Predict spam | spam=2 not_spam=0",
    ]


def test_graphviz_source_colours_leaves_by_class():
    pytest.importorskip("graphviz")
    source = export_graphviz(_tree())
    assert "x < 3.5000" in source
    assert "tomato" in source
    assert "cornflowerblue" in source


def test_graphviz_dot_file(tmp_path):
    pytest.importorskip("graphviz")
    path = export_graphviz(_tree(), str(tmp_path / "tree"), format="dot")
    assert path.endswith("tree.dot")
    assert "digraph" in (tmp_path / "tree.dot").read_text()
