"""
spamtree.session
================

Entry points used by front ends: :func:`build_model`, :func:`evaluate` and
the stateful :class:`ModelSession`.

A session holds the training data and the currently published tree.  Builds
are requested explicitly (the "Create Model" button) and every request takes
the next number from a monotonically increasing version counter.  When a
build finishes it is published only if no newer build has been requested in
the meantime; stale results are dropped.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import pandas as pd
from loguru import logger

from .dataset import Dataset
from .predictor import PredictionRecord, predict_all
from .scoring import ConfusionMatrix, Metrics, confusion_matrix, confusion_table, metrics
from .tree import Hyperparameters, Tree, build


@dataclass(frozen=True)
class Evaluation:
    """Everything a report needs about one tree on one dataset."""

    predictions: list[PredictionRecord]
    matrix: ConfusionMatrix
    metrics: Metrics
    table: pd.DataFrame

    def predictions_frame(self) -> pd.DataFrame:
        """Predictions as a frame indexed by row ``ID``."""
        frame = pd.DataFrame(
            [(p.id, p.predicted, p.truth) for p in self.predictions],
            columns=["ID", "prediction", "truth"],
        )
        return frame.set_index("ID")


def build_model(dataset: Dataset, features, hyperparams: Hyperparameters | None = None) -> Tree:
    """Build a tree from ``dataset`` restricted to ``features``."""
    return build(dataset, features, hyperparams)


def evaluate(tree: Tree, dataset: Dataset) -> Evaluation:
    """Predict every row of ``dataset`` with ``tree`` and score the result."""
    predictions = predict_all(tree, dataset)
    matrix = confusion_matrix(predictions)
    return Evaluation(
        predictions=predictions,
        matrix=matrix,
        metrics=metrics(matrix),
        table=confusion_table(matrix),
    )


@dataclass(frozen=True)
class BuildTicket:
    """Handle for one requested build."""

    version: int
    future: Future

    def result(self, timeout: float | None = None) -> Tree:
        return self.future.result(timeout)


class ModelSession:
    """Training data plus the most recently requested, successfully built tree.

    Parameters
    ----------
    training : Dataset
        Data every build is fitted on.
    builder : callable, optional
        ``builder(dataset, features, hyperparams) -> Tree``; defaults to
        :func:`spamtree.tree.build`.
    max_workers : int, default=1
        Threads used by :meth:`request_build`.
    """

    def __init__(
        self,
        training: Dataset,
        *,
        builder: Callable[[Dataset, object, Hyperparameters], Tree] = build,
        max_workers: int = 1,
    ):
        self.training = training
        self._builder = builder
        self._versions = itertools.count(1)
        self._latest_requested = 0
        self._published_version = 0
        self._tree: Tree | None = None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="spamtree-build")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def tree(self) -> Tree | None:
        """Currently published tree, or ``None`` before the first build completes."""
        with self._lock:
            return self._tree

    @property
    def version(self) -> int:
        """Version of the published tree (0 when nothing has been published)."""
        with self._lock:
            return self._published_version

    def _next_version(self) -> int:
        with self._lock:
            version = next(self._versions)
            self._latest_requested = version
            return version

    def _publish(self, version: int, tree: Tree) -> bool:
        with self._lock:
            if version != self._latest_requested:
                logger.debug("Discarding stale build v{} (latest requested is v{})", version, self._latest_requested)
                return False
            self._tree = tree
            self._published_version = version
        logger.info("Published tree v{} (depth={}, leaves={})", version, tree.depth, tree.n_leaves)
        return True

    def _run(self, version: int, features, hyperparams: Hyperparameters) -> Tree:
        tree = self._builder(self.training, features, hyperparams)
        self._publish(version, tree)
        return tree

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------
    def build_model(self, features, hyperparams: Hyperparameters | None = None) -> Tree:
        """Build synchronously and publish the tree (unless a newer build was requested meanwhile).

        The freshly built tree is returned either way.
        """
        hyperparams = hyperparams if hyperparams is not None else Hyperparameters()
        return self._run(self._next_version(), features, hyperparams)

    def request_build(self, features, hyperparams: Hyperparameters | None = None) -> BuildTicket:
        """Start a build in the background; the result is published only if still the latest."""
        hyperparams = hyperparams if hyperparams is not None else Hyperparameters()
        version = self._next_version()
        logger.debug("Requested build v{}", version)
        return BuildTicket(version, self._executor.submit(self._run, version, features, hyperparams))

    def evaluate(self, dataset: Dataset | None = None) -> Evaluation:
        """Score the published tree on ``dataset`` (the training data by default).

        Raises
        ------
        ValueError
            If no tree has been published yet.
        """
        tree = self.tree
        if tree is None:
            raise ValueError("No model has been built yet. Call build_model(...) first.")
        return evaluate(tree, self.training if dataset is None else dataset)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> ModelSession:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
