"""
spamtree.exceptions
===================

Error kinds raised by the tree builder, the predictor and the scorer.

All of them derive from :class:`SpamTreeError` so callers can catch any
library failure in one place.  Each one also subclasses the closest builtin
(``ValueError``, ``KeyError``, ``ArithmeticError``) so code written against
plain Python exceptions keeps working.
"""

from __future__ import annotations


class SpamTreeError(Exception):
    """Base class for every error raised by spamtree."""


class ConfigurationError(SpamTreeError, ValueError):
    """Invalid feature selection or out-of-range hyperparameters."""


class EmptyDatasetError(SpamTreeError, ValueError):
    """A dataset with zero records was passed where rows are required."""


class MissingFeatureError(SpamTreeError, KeyError):
    """A record lacks a feature the tree needs in order to route it.

    Attributes
    ----------
    feature : str
        Name of the missing feature.
    record_id : int or None
        1-based row id of the offending record, when known.
    """

    def __init__(self, feature: str, record_id: int | None = None):
        self.feature = feature
        self.record_id = record_id
        where = f" (record {record_id})" if record_id is not None else ""
        super().__init__(f"Record is missing feature {feature!r}{where}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class DegenerateMetricError(SpamTreeError, ArithmeticError):
    """A rate is undefined because its confusion-matrix denominator is zero."""

    def __init__(self, metric: str):
        self.metric = metric
        super().__init__(f"{metric} is undefined: its denominator is zero")
