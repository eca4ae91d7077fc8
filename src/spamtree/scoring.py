"""
spamtree.scoring
================

Confusion matrix and the three headline rates, all as percentages rounded to
two decimals.

A rate whose denominator is zero (no actual spam, no actual ham, or no
predictions at all) is reported as :data:`UNDEFINED` rather than raising, so
a lopsided evaluation set still produces a usable report.  Pass
``strict=True`` to get a :class:`~spamtree.exceptions.DegenerateMetricError`
instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from .exceptions import DegenerateMetricError
from .predictor import PredictionRecord

UNDEFINED = None

ROW_LABELS = ("Predicted Not Spam", "Predicted Spam", "Total")
COLUMN_LABELS = ("Actually Not Spam", "Actually Spam", "Total")


def _percent(numerator: int, denominator: int, name: str, strict: bool) -> float | None:
    if denominator == 0:
        if strict:
            raise DegenerateMetricError(name)
        return UNDEFINED
    return round(100.0 * numerator / denominator, 2)


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts of (predicted, truth) pairs; the positive class is spam."""

    tp: int = 0
    tn: int = 0
    fp: int = 0
    fn: int = 0

    def __post_init__(self):
        for name in ("tp", "tn", "fp", "fn"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn

    @property
    def actual_spam(self) -> int:
        return self.tp + self.fn

    @property
    def actual_not_spam(self) -> int:
        return self.tn + self.fp

    @property
    def predicted_spam(self) -> int:
        return self.tp + self.fp

    @property
    def predicted_not_spam(self) -> int:
        return self.tn + self.fn

    def accuracy(self, strict: bool = False) -> float | None:
        return _percent(self.tp + self.tn, self.total, "accuracy", strict)

    def true_positive_rate(self, strict: bool = False) -> float | None:
        return _percent(self.tp, self.actual_spam, "true_positive_rate", strict)

    def true_negative_rate(self, strict: bool = False) -> float | None:
        return _percent(self.tn, self.actual_not_spam, "true_negative_rate", strict)


@dataclass(frozen=True)
class Metrics:
    """Headline rates in percent; ``None`` marks an undefined rate."""

    accuracy: float | None
    true_positive_rate: float | None
    true_negative_rate: float | None

    def to_dict(self) -> dict:
        return {
            "accuracy": self.accuracy,
            "true_positive_rate": self.true_positive_rate,
            "true_negative_rate": self.true_negative_rate,
        }


def confusion_matrix(predictions: Iterable[PredictionRecord]) -> ConfusionMatrix:
    tp = tn = fp = fn = 0
    for p in predictions:
        if p.predicted and p.truth:
            tp += 1
        elif p.predicted:
            fp += 1
        elif p.truth:
            fn += 1
        else:
            tn += 1
    return ConfusionMatrix(tp=tp, tn=tn, fp=fp, fn=fn)


def metrics(matrix: ConfusionMatrix) -> Metrics:
    return Metrics(
        accuracy=matrix.accuracy(),
        true_positive_rate=matrix.true_positive_rate(),
        true_negative_rate=matrix.true_negative_rate(),
    )


def confusion_table(predictions_or_matrix) -> pd.DataFrame:
    """
    Predicted-by-actual counts with row, column and grand totals.

    Parameters
    ----------
    predictions_or_matrix : iterable of PredictionRecord or ConfusionMatrix

    Returns
    -------
    pandas.DataFrame
        3x3 integer frame indexed by :data:`ROW_LABELS` with columns
        :data:`COLUMN_LABELS`.
    """
    m = predictions_or_matrix
    if not isinstance(m, ConfusionMatrix):
        m = confusion_matrix(m)
    rows = [
        [m.tn, m.fn, m.predicted_not_spam],
        [m.fp, m.tp, m.predicted_spam],
        [m.actual_not_spam, m.actual_spam, m.total],
    ]
    table = pd.DataFrame(rows, index=list(ROW_LABELS), columns=list(COLUMN_LABELS), dtype=int)
    table.index.name = "Outcomes"
    return table


def format_rate(value: float | None) -> str:
    return "n/a" if value is UNDEFINED else f"{value:g}%"


def score_lines(result: Metrics) -> list[str]:
    """Human-readable summary, one line per rate."""
    return [
        f"Overall Accuracy: {format_rate(result.accuracy)}",
        f"True Positive Rate: {format_rate(result.true_positive_rate)}",
        f"True Negative Rate: {format_rate(result.true_negative_rate)}",
    ]
