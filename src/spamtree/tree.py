"""
spamtree.tree
=============

This module implements CART-style induction of a binary spam/not-spam
decision tree over numeric features.  Splits are chosen by size-weighted Gini
impurity and growth is limited only by three hyperparameters:

* ``min_split``  - a node with fewer records than this becomes a leaf;
* ``min_bucket`` - a split that would leave either child smaller than this is
  rejected and the node becomes a leaf;
* ``max_depth``  - nodes at this depth (the root is depth 0) are leaves.

There is no pruning and no minimum impurity decrease.

The tree is made of frozen :class:`DecisionNode` and :class:`LeafNode`
instances wrapped in a :class:`Tree`.  Trees are never modified after
construction; changing the features or hyperparameters means building a new
one.

Determinism
-----------
Records are routed left when ``value < threshold`` and right otherwise.  When
two candidate splits have the same weighted impurity the earlier feature in
the caller's order wins, then the lower threshold.  A leaf predicts spam only
when spam records strictly outnumber not-spam records, so not-spam wins ties.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence, Set
from dataclasses import dataclass, field
from typing import Union

import numpy as np
from loguru import logger

from .dataset import Dataset
from .exceptions import ConfigurationError, EmptyDatasetError

# Weighted impurities closer than this are treated as equal.
_TIE_TOLERANCE = 1e-12


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _gini(n: np.ndarray, spam: np.ndarray) -> np.ndarray:
    """Gini impurity ``1 - p_spam**2 - p_not_spam**2`` for each (size, spam count) pair."""
    p = spam / n
    return 2.0 * p * (1.0 - p)


def _weighted_gini(n_left, spam_left, n_right, spam_right) -> np.ndarray:
    n = n_left + n_right
    return (n_left * _gini(n_left, spam_left) + n_right * _gini(n_right, spam_right)) / n


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _midpoint(lo: float, hi: float) -> float:
    """Threshold between two distinct sorted values with ``lo < t <= hi``."""
    t = lo + 0.5 * (hi - lo)
    if not np.isfinite(t):
        t = 0.5 * lo + 0.5 * hi
    # adjacent floats can round back onto lo
    return t if t > lo else hi


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ClassCounts:
    """Number of spam and not-spam training records that reached a node."""

    spam: int
    not_spam: int

    @property
    def size(self) -> int:
        return self.spam + self.not_spam

    @property
    def majority(self) -> bool:
        # not-spam wins ties
        return self.spam > self.not_spam

    @property
    def is_pure(self) -> bool:
        return self.spam == 0 or self.not_spam == 0

    def to_dict(self) -> dict:
        return {"spam": self.spam, "not_spam": self.not_spam}


@dataclass(frozen=True)
class LeafNode:
    """Terminal node.

    Attributes
    ----------
    majority_label : bool
        Prediction for every record that reaches the leaf (``True`` = spam).
    class_counts : ClassCounts
        Training records that reached the leaf.
    """

    majority_label: bool
    class_counts: ClassCounts

    is_leaf = True

    @property
    def size(self) -> int:
        return self.class_counts.size

    def to_dict(self) -> dict:
        return {"majority_label": self.majority_label, "class_counts": self.class_counts.to_dict()}


@dataclass(frozen=True)
class DecisionNode:
    """Internal node routing ``record[split_feature] < threshold`` to ``left``.

    Attributes
    ----------
    split_feature : str
    threshold : float
        Midpoint between two consecutive distinct training values.
    left, right : Node
        Owned exclusively by this node.
    class_counts : ClassCounts
        Training records that reached the node; always the sum of the
        children's counts.
    """

    split_feature: str
    threshold: float
    left: Node
    right: Node
    class_counts: ClassCounts

    is_leaf = False

    @property
    def size(self) -> int:
        return self.class_counts.size

    def to_dict(self) -> dict:
        return {
            "split_feature": self.split_feature,
            "threshold": self.threshold,
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
            "class_counts": self.class_counts.to_dict(),
        }


Node = Union[DecisionNode, LeafNode]


# -----------------------------------------------------------------------------
# Hyperparameters
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Hyperparameters:
    """Structural limits on tree growth.

    Parameters
    ----------
    min_split : int, default=2
        Smallest node that may be split.  Must be at least 2.
    min_bucket : int, default=1
        Smallest child a split may produce.  Must be at least 1.
    max_depth : int, default=5
        Depth at which nodes are forced to be leaves.  Must be at least 1.

    Raises
    ------
    ConfigurationError
        If a value is not an integer or is out of range.
    """

    min_split: int = 2
    min_bucket: int = 1
    max_depth: int = 5

    def __post_init__(self):
        for name, lower in (("min_split", 2), ("min_bucket", 1), ("max_depth", 1)):
            value = getattr(self, name)
            if not _is_int(value):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < lower:
                raise ConfigurationError(f"{name} must be >= {lower}, got {value}")
            object.__setattr__(self, name, int(value))

    def to_dict(self) -> dict:
        return {"min_split": self.min_split, "min_bucket": self.min_bucket, "max_depth": self.max_depth}


# -----------------------------------------------------------------------------
# Tree
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Tree:
    """A built tree together with the inputs that produced it."""

    root: Node
    features: tuple[str, ...]
    hyperparams: Hyperparameters = field(default_factory=Hyperparameters)

    def nodes(self) -> Iterator[tuple[Node, int]]:
        """Yield ``(node, depth)`` pairs in pre-order (node, left subtree, right subtree)."""
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if not node.is_leaf:
                stack.append((node.right, depth + 1))
                stack.append((node.left, depth + 1))

    def leaves(self) -> Iterator[LeafNode]:
        return (node for node, _ in self.nodes() if node.is_leaf)

    @property
    def depth(self) -> int:
        """Depth of the deepest leaf; a lone root leaf has depth 0."""
        return max(depth for node, depth in self.nodes() if node.is_leaf)

    @property
    def n_leaves(self) -> int:
        return sum(1 for _ in self.leaves())

    @property
    def n_nodes(self) -> int:
        return sum(1 for _ in self.nodes())

    @property
    def split_features(self) -> set[str]:
        """Features actually used by at least one decision node."""
        return {node.split_feature for node, _ in self.nodes() if not node.is_leaf}

    def to_dict(self) -> dict:
        return {
            "features": list(self.features),
            "hyperparams": self.hyperparams.to_dict(),
            "root": self.root.to_dict(),
        }


# -----------------------------------------------------------------------------
# Builder
# -----------------------------------------------------------------------------
class TreeBuilder:
    """Grows a :class:`Tree` from a :class:`Dataset` by recursive Gini splitting.

    Parameters
    ----------
    hyperparams : Hyperparameters, optional
        Defaults to ``Hyperparameters()``.
    """

    def __init__(self, hyperparams: Hyperparameters | None = None):
        if hyperparams is None:
            hyperparams = Hyperparameters()
        if not isinstance(hyperparams, Hyperparameters):
            raise ConfigurationError(f"hyperparams must be a Hyperparameters instance, got {type(hyperparams).__name__}")
        self.hyperparams = hyperparams

    def build(self, dataset: Dataset, features) -> Tree:
        """
        Build a tree over ``features`` of ``dataset``.

        Parameters
        ----------
        dataset : Dataset
            Training records; must not be empty.
        features : sequence of str or set of str
            Candidate split features.  For a sequence the order is the split
            tie-break order and repeated names are ignored.  A set is ordered
            by the dataset's column order.

        Returns
        -------
        Tree

        Raises
        ------
        ConfigurationError
            If ``features`` is empty or names a column the dataset lacks.
        EmptyDatasetError
            If ``dataset`` has no records.
        """
        features = _normalise_features(features, dataset)
        if len(dataset) == 0:
            raise EmptyDatasetError("Cannot build a tree from an empty dataset")
        missing = [f for f in features if not dataset.has_feature(f)]
        if missing:
            raise ConfigurationError(f"Features not in the dataset: {missing}")

        hp = self.hyperparams
        logger.info(
            "Building tree on {} records with {} features (min_split={}, min_bucket={}, max_depth={})",
            len(dataset), len(features), hp.min_split, hp.min_bucket, hp.max_depth,
        )
        X = dataset.matrix(features)
        y = dataset.labels
        root = self._grow(X, y, np.arange(len(dataset)), features, depth=0)
        tree = Tree(root=root, features=features, hyperparams=hp)
        logger.info("Built tree: depth={}, leaves={}", tree.depth, tree.n_leaves)
        return tree

    # ------------------------------------------------------------------
    # Recursive growth
    # ------------------------------------------------------------------
    def _grow(self, X: np.ndarray, y: np.ndarray, rows: np.ndarray, features, depth: int) -> Node:
        hp = self.hyperparams
        labels = y[rows]
        n_spam = int(labels.sum())
        counts = ClassCounts(spam=n_spam, not_spam=len(rows) - n_spam)

        if counts.size < hp.min_split or depth >= hp.max_depth or counts.is_pure:
            return self._leaf(counts, depth)

        split = self._best_split(X[rows], labels)
        if split is None:
            # every selected feature is constant here
            return self._leaf(counts, depth)
        j, threshold = split

        go_left = X[rows, j] < threshold
        n_left = int(go_left.sum())
        n_right = len(rows) - n_left
        if n_left < hp.min_bucket or n_right < hp.min_bucket:
            logger.trace(
                "depth {}: rejected {} < {:.6g} ({} / {} records, min_bucket={})",
                depth, features[j], threshold, n_left, n_right, hp.min_bucket,
            )
            return self._leaf(counts, depth)

        logger.trace("depth {}: split {} < {:.6g} ({} / {} records)", depth, features[j], threshold, n_left, n_right)
        return DecisionNode(
            split_feature=features[j],
            threshold=threshold,
            left=self._grow(X, y, rows[go_left], features, depth + 1),
            right=self._grow(X, y, rows[~go_left], features, depth + 1),
            class_counts=counts,
        )

    @staticmethod
    def _leaf(counts: ClassCounts, depth: int) -> LeafNode:
        logger.trace("depth {}: leaf spam={} not_spam={}", depth, counts.spam, counts.not_spam)
        return LeafNode(majority_label=counts.majority, class_counts=counts)

    @staticmethod
    def _best_split(X: np.ndarray, y: np.ndarray) -> tuple[int, float] | None:
        """Return ``(column, threshold)`` with the lowest weighted Gini, or ``None``.

        Candidates are the midpoints between consecutive distinct values of
        each column.  Ties go to the earliest column, then the lowest
        threshold.
        """
        n = len(y)
        best_score, best = np.inf, None
        for j in range(X.shape[1]):
            order = np.argsort(X[:, j], kind="mergesort")
            v = X[order, j]
            boundaries = np.nonzero(v[:-1] != v[1:])[0]
            if boundaries.size == 0:
                continue
            spam_cum = np.cumsum(y[order], dtype=float)
            n_left = (boundaries + 1).astype(float)
            spam_left = spam_cum[boundaries]
            scores = _weighted_gini(n_left, spam_left, n - n_left, spam_cum[-1] - spam_left)
            k = int(np.flatnonzero(scores <= scores.min() + _TIE_TOLERANCE)[0])
            if scores[k] < best_score - _TIE_TOLERANCE:
                i = boundaries[k]
                best_score, best = float(scores[k]), (j, _midpoint(float(v[i]), float(v[i + 1])))
        return best


def _normalise_features(features, dataset: Dataset) -> tuple[str, ...]:
    if features is None or isinstance(features, str):
        raise ConfigurationError("features must be a collection of feature names")
    if isinstance(features, Set):
        order = {name: j for j, name in enumerate(dataset.feature_names)}
        # unknown names sort last so the missing-feature check can report them
        features = sorted(features, key=lambda name: (order.get(name, len(order)), str(name)))
    ordered = tuple(dict.fromkeys(str(f) for f in features))
    if not ordered:
        raise ConfigurationError("At least one feature must be selected")
    return ordered


def build(dataset: Dataset, features: Sequence[str] | Set[str], hyperparams: Hyperparameters | None = None) -> Tree:
    """Build a tree; shorthand for ``TreeBuilder(hyperparams).build(dataset, features)``."""
    return TreeBuilder(hyperparams).build(dataset, features)
