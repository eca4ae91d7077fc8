"""
spamtree.export
===============

Human-readable views of a built tree: one rule per leaf, an indented text
listing, and Graphviz output where leaves are coloured by the class they
predict (red for spam, blue for not spam).
"""

from __future__ import annotations

from .tree import Node, Tree

SPAM_COLOUR = "tomato"
NOT_SPAM_COLOUR = "cornflowerblue"

DEFAULT_CLASS_NAMES = ("not spam", "spam")


def _root(tree: Tree | Node) -> Node:
    return tree.root if isinstance(tree, Tree) else tree


def _class_name(label: bool, class_names) -> str:
    return class_names[int(label)]


def export_rules(tree: Tree | Node, *, class_names=DEFAULT_CLASS_NAMES, precision: int = 4) -> list[str]:
    """
    One ``<antecedent> => <class>`` string per leaf, left to right.

    A tree that is a single leaf yields ``["<root> => <class>"]``.
    """
    rules: list[str] = []
    _collect_rules(_root(tree), [], rules, class_names, precision)
    return rules


def _collect_rules(node: Node, parts, rules, class_names, precision):
    if node.is_leaf:
        body = " AND ".join(parts) if parts else "<root>"
        rules.append(f"{body} => {_class_name(node.majority_label, class_names)}")
        return
    left = f"{node.split_feature} < {node.threshold:.{precision}f}"
    right = f"{node.split_feature} >= {node.threshold:.{precision}f}"
    _collect_rules(node.left, parts + [left], rules, class_names, precision)
    _collect_rules(node.right, parts + [right], rules, class_names, precision)


def format_tree(tree: Tree | Node, *, class_names=DEFAULT_CLASS_NAMES, precision: int = 4) -> str:
    """Indented if/else listing of the tree."""
    lines: list[str] = []
    _format_node(_root(tree), "", lines, class_names, precision)
    return "\n".join(lines)


def _format_node(node: Node, indent, lines, class_names, precision):
    if node.is_leaf:
        counts = node.class_counts
        lines.append(
            f"{indent}Predict {_class_name(node.majority_label, class_names)} "
            f"| spam={counts.spam} not_spam={counts.not_spam}"
        )
        return
    lines.append(f"{indent}if {node.split_feature} < {node.threshold:.{precision}f}:")
    _format_node(node.left, indent + "  ", lines, class_names, precision)
    lines.append(f"{indent}else:")
    _format_node(node.right, indent + "  ", lines, class_names, precision)


def export_graphviz(
    tree: Tree | Node,
    filename: str | None = None,
    *,
    class_names=DEFAULT_CLASS_NAMES,
    format: str = "png",
    precision: int = 4,
) -> str:
    """
    Export the tree as a Graphviz flowchart.

    Parameters
    ----------
    tree : Tree or Node
    filename : str or None, default=None
        Basename of the output file (the extension comes from ``format``).
        If None, the DOT source is returned and nothing is written.
    class_names : pair of str
        Names for not-spam and spam, in that order.
    format : str, default="png"
        Any Graphviz output format.  ``"dot"`` writes the DOT source directly
        and does not need the ``dot`` executable.
    precision : int, default=4
        Decimals shown for thresholds.

    Returns
    -------
    str
        Path to the written file, or the DOT source if ``filename`` is None.
        When the ``dot`` executable is unavailable a ``.dot`` file is written
        instead and its path returned.
    """
    try:
        import graphviz
    except ImportError:
        raise RuntimeError("Graphviz is required for export_graphviz but not installed.") from None
    dot = graphviz.Digraph(format=format)
    _add_graph_nodes(dot, _root(tree), "0", class_names, precision)

    if filename is None:
        return dot.source
    if format.lower() == "dot":
        path = f"{filename}.dot"
        dot.save(path)
        return path
    try:
        dot.render(filename, cleanup=True)
        return f"{filename}.{format}"
    except graphviz.ExecutableNotFound:
        fallback_path = f"{filename}.dot"
        dot.save(fallback_path)
        return fallback_path


def _add_graph_nodes(dot, node: Node, name: str, class_names, precision):
    if node.is_leaf:
        colour = SPAM_COLOUR if node.majority_label else NOT_SPAM_COLOUR
        dot.node(name, _class_name(node.majority_label, class_names), shape="box", style="filled", fillcolor=colour)
        return
    dot.node(name, f"{node.split_feature} < {node.threshold:.{precision}f}", shape="ellipse")
    l_id, r_id = name + "L", name + "R"
    _add_graph_nodes(dot, node.left, l_id, class_names, precision)
    _add_graph_nodes(dot, node.right, r_id, class_names, precision)
    dot.edge(name, l_id, label="yes")
    dot.edge(name, r_id, label="no")
