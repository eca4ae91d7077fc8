"""Route records through a built :class:`~spamtree.tree.Tree`."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .dataset import Dataset
from .exceptions import MissingFeatureError
from .tree import LeafNode, Node, Tree


@dataclass(frozen=True)
class PredictionRecord:
    """Prediction for one dataset row, keyed by its 1-based ``id``."""

    id: int
    predicted: bool
    truth: bool


def _root(tree: Tree | Node) -> Node:
    return tree.root if isinstance(tree, Tree) else tree


def leaf_for(tree: Tree | Node, record: Mapping[str, float]) -> LeafNode:
    """Return the leaf ``record`` ends up in.

    Raises
    ------
    MissingFeatureError
        If the record lacks a feature tested on its path.
    """
    node = _root(tree)
    while not node.is_leaf:
        try:
            value = record[node.split_feature]
        except KeyError:
            raise MissingFeatureError(node.split_feature, getattr(record, "id", None)) from None
        node = node.left if value < node.threshold else node.right
    return node


def predict(tree: Tree | Node, record: Mapping[str, float]) -> bool:
    """Predicted label for one record (``True`` = spam)."""
    return leaf_for(tree, record).majority_label


def decision_path(tree: Tree | Node, record: Mapping[str, float]) -> list[tuple[str, float, bool]]:
    """Tests applied to ``record`` as ``(feature, threshold, went_left)`` triples, root first."""
    path = []
    node = _root(tree)
    while not node.is_leaf:
        try:
            went_left = record[node.split_feature] < node.threshold
        except KeyError:
            raise MissingFeatureError(node.split_feature, getattr(record, "id", None)) from None
        path.append((node.split_feature, node.threshold, went_left))
        node = node.left if went_left else node.right
    return path


def predict_all(tree: Tree | Node, dataset: Dataset) -> list[PredictionRecord]:
    """One :class:`PredictionRecord` per row of ``dataset``, in row order."""
    return [
        PredictionRecord(id=position, predicted=predict(tree, record), truth=record.is_spam)
        for position, record in enumerate(dataset, start=1)
    ]
