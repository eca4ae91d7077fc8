"""
spamtree.classifier
===================

A scikit-learn style wrapper around :class:`~spamtree.tree.TreeBuilder` so the
spam tree can be dropped into code that expects ``fit``/``predict``/``score``.

Labels are booleans (``True`` = spam); ``y`` may also be given as 0/1 or as
``"spam"``/``"ham"`` strings.
"""

from __future__ import annotations

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from . import export
from .dataset import Dataset
from .predictor import leaf_for
from .tree import Hyperparameters, build


class SpamTreeClassifier(ClassifierMixin, BaseEstimator):
    """
    Gini decision tree classifier for binary spam labels.

    Parameters
    ----------
    min_samples_split : int, default=2
        Minimum number of training samples required to allow a split.
    min_samples_leaf : int, default=1
        Minimum number of samples each child must receive.  A best split that
        violates this turns the node into a leaf.
    max_depth : int, default=5
        Maximum depth of the tree; the root has depth 0.
    feature_names : list[str] or None, default=None
        Column names.  Taken from ``X.columns`` when ``X`` is a DataFrame and
        default to ``f0, f1, ...`` otherwise.  Their order is the tie-break
        order between equally good splits.

    Attributes
    ----------
    tree_ : Tree
        The fitted tree.
    classes_ : ndarray
        ``array([False, True])``.
    feature_names_ : list[str]
    n_features_in_ : int
    """

    def __init__(self, *, min_samples_split: int = 2, min_samples_leaf: int = 1, max_depth: int = 5,
                 feature_names: list[str] | None = None):
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.max_depth = max_depth
        self.feature_names = feature_names

    def fit(self, X, y, feature_names=None):
        names = feature_names if feature_names is not None else self.feature_names
        if names is None and hasattr(X, "columns"):
            names = [str(c) for c in X.columns]
        dataset = Dataset.from_arrays(np.asarray(X, dtype=float), np.asarray(y), names)
        hyperparams = Hyperparameters(
            min_split=self.min_samples_split,
            min_bucket=self.min_samples_leaf,
            max_depth=self.max_depth,
        )
        self.feature_names_ = list(dataset.feature_names)
        self.n_features_in_ = len(self.feature_names_)
        self.classes_ = np.array([False, True])
        self.tree_ = build(dataset, self.feature_names_, hyperparams)
        return self

    def _check_X(self, X) -> np.ndarray:
        self._check_fitted()
        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise ValueError(f"X must have shape (n_samples, {self.n_features_in_}), got {X.shape}")
        return X

    def _leaves(self, X):
        X = self._check_X(X)
        return [leaf_for(self.tree_, dict(zip(self.feature_names_, row))) for row in X]

    def predict(self, X):
        """
        Predict spam labels.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)

        Returns
        -------
        ndarray of bool, shape (n_samples,)

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        return np.array([leaf.majority_label for leaf in self._leaves(X)], dtype=bool)

    def predict_proba(self, X):
        """Training class frequencies of the leaf each sample lands in, columns ``[not spam, spam]``."""
        out = []
        for leaf in self._leaves(X):
            counts = leaf.class_counts
            out.append([counts.not_spam / counts.size, counts.spam / counts.size])
        return np.array(out, dtype=float).reshape(-1, 2)

    def export_rules(self, *, class_names=export.DEFAULT_CLASS_NAMES):
        self._check_fitted()
        return export.export_rules(self.tree_, class_names=class_names)

    def export_graphviz(self, filename: str | None = None, *, class_names=export.DEFAULT_CLASS_NAMES,
                        format: str = "png") -> str:
        self._check_fitted()
        return export.export_graphviz(self.tree_, filename, class_names=class_names, format=format)

    def print_tree(self, class_names=export.DEFAULT_CLASS_NAMES):
        """Pretty-print the tree to ``stdout``."""
        self._check_fitted()
        print(export.format_tree(self.tree_, class_names=class_names))

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")
