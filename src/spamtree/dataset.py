"""
spamtree.dataset
================

Labelled feature records and the immutable, ordered :class:`Dataset` that
holds them.

Row position is the record's identity: the first row has ``id == 1``.  The
ids are stamped when the dataset is built and are what predictions are keyed
by later on, so a :class:`Dataset` is never reordered or mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType

import numpy as np
import pandas as pd
from loguru import logger

from .exceptions import ConfigurationError
from .features import FEATURE_NAMES, LABEL_COLUMN


class FeatureRecord(Mapping):
    """One email: a read-only mapping of feature name to value plus its label.

    Parameters
    ----------
    values : mapping of str to float
        Feature values.  They are copied and coerced to ``float``.
    is_spam : bool
        Ground-truth label.
    id : int or None
        1-based row id.  Assigned by :class:`Dataset`; ``None`` for free
        standing records.
    """

    __slots__ = ("_values", "is_spam", "id")

    def __init__(self, values: Mapping[str, float], is_spam: bool, id: int | None = None):
        object.__setattr__(self, "_values", MappingProxyType({str(k): float(v) for k, v in values.items()}))
        object.__setattr__(self, "is_spam", bool(is_spam))
        object.__setattr__(self, "id", id)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, name: str) -> float:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FeatureRecord(id={self.id}, is_spam={self.is_spam}, n_features={len(self)})"

    def __eq__(self, other):
        if not isinstance(other, FeatureRecord):
            return NotImplemented
        return self.is_spam == other.is_spam and self.id == other.id and dict(self._values) == dict(other._values)

    __hash__ = None

    def with_id(self, id: int) -> FeatureRecord:
        """Return a copy of this record carrying ``id``."""
        return FeatureRecord(self._values, self.is_spam, id)


class Dataset(Sequence):
    """Ordered, immutable collection of :class:`FeatureRecord`.

    Every record must expose exactly the same feature names; records are
    re-stamped with their 1-based position as ``id``.

    Parameters
    ----------
    records : iterable of FeatureRecord
    feature_names : sequence of str, optional
        Column order.  Defaults to the key order of the first record.  Needed
        only to give an empty dataset a schema.

    Raises
    ------
    ConfigurationError
        If the records do not all share the same feature-name set, or a
        value is NaN or infinite.
    """

    def __init__(self, records: Iterable[FeatureRecord], feature_names: Sequence[str] | None = None):
        records = list(records)
        if feature_names is None:
            feature_names = tuple(records[0]) if records else ()
        self._feature_names = tuple(feature_names)
        expected = set(self._feature_names)
        stamped = []
        for position, record in enumerate(records, start=1):
            if set(record) != expected:
                missing = sorted(expected - set(record))
                extra = sorted(set(record) - expected)
                raise ConfigurationError(
                    f"Record {position} does not match the dataset schema "
                    f"(missing={missing}, unexpected={extra})"
                )
            stamped.append(record.with_id(position))
        self._records = tuple(stamped)
        self._index = {name: j for j, name in enumerate(self._feature_names)}
        matrix = np.array(
            [[record[name] for name in self._feature_names] for record in self._records],
            dtype=float,
        ).reshape(len(self._records), len(self._feature_names))
        finite = np.isfinite(matrix)
        if not finite.all():
            bad = [name for j, name in enumerate(self._feature_names) if not finite[:, j].all()]
            raise ConfigurationError(f"Feature values must be finite numbers (columns: {bad})")
        matrix.setflags(write=False)
        self._matrix = matrix
        labels = np.fromiter((r.is_spam for r in self._records), dtype=bool, count=len(self._records))
        labels.setflags(write=False)
        self._labels = labels

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, float]],
        labels: Iterable[bool],
        feature_names: Sequence[str] | None = None,
    ) -> Dataset:
        """Build a dataset from parallel iterables of feature mappings and labels."""
        rows = list(rows)
        labels = list(labels)
        if len(rows) != len(labels):
            raise ConfigurationError(f"Got {len(rows)} rows but {len(labels)} labels")
        return cls((FeatureRecord(row, label) for row, label in zip(rows, labels)), feature_names)

    @classmethod
    def from_arrays(cls, X, y, feature_names: Sequence[str] | None = None) -> Dataset:
        """Build a dataset from a 2-D numeric array and a boolean-like label vector."""
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        if X.ndim != 2:
            raise ConfigurationError(f"X must be 2-dimensional, got shape {X.shape}")
        if len(X) != len(y):
            raise ConfigurationError(f"X has {len(X)} rows but y has {len(y)} labels")
        if feature_names is None:
            feature_names = [f"f{j}" for j in range(X.shape[1])]
        feature_names = [str(n) for n in feature_names]
        if len(feature_names) != X.shape[1]:
            raise ConfigurationError("feature_names length must match X.shape[1]")
        labels = [_coerce_label(v) for v in y]
        rows = [dict(zip(feature_names, row)) for row in X]
        return cls.from_rows(rows, labels, feature_names)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, label_column: str = LABEL_COLUMN) -> Dataset:
        """Build a dataset from a DataFrame; every column except ``label_column`` is a feature."""
        if label_column not in df.columns:
            raise ConfigurationError(f"Label column {label_column!r} not found in data")
        feature_names = [str(c) for c in df.columns if c != label_column]
        try:
            features = df[feature_names].apply(pd.to_numeric)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Feature columns must be numeric: {exc}") from exc
        if features.isna().any().any():
            bad = [c for c in feature_names if features[c].isna().any()]
            raise ConfigurationError(f"Missing values are not supported (columns: {bad})")
        return cls.from_arrays(features.to_numpy(dtype=float), df[label_column].to_numpy(), feature_names)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------
    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"Dataset(n_records={len(self)}, n_features={len(self._feature_names)}, n_spam={int(self._labels.sum())})"

    # ------------------------------------------------------------------
    # Column access
    # ------------------------------------------------------------------
    @property
    def feature_names(self) -> tuple[str, ...]:
        return self._feature_names

    @property
    def labels(self) -> np.ndarray:
        """Read-only boolean array of ``is_spam`` in row order."""
        return self._labels

    def has_feature(self, name: str) -> bool:
        return name in self._index

    def column(self, name: str) -> np.ndarray:
        """Read-only float array of one feature in row order."""
        try:
            return self._matrix[:, self._index[name]]
        except KeyError:
            raise ConfigurationError(f"Feature {name!r} is not in the dataset") from None

    def matrix(self, features: Sequence[str] | None = None) -> np.ndarray:
        """Feature matrix with columns in ``features`` order (all columns by default)."""
        if features is None:
            return self._matrix
        missing = [f for f in features if f not in self._index]
        if missing:
            raise ConfigurationError(f"Features not in the dataset: {missing}")
        return self._matrix[:, [self._index[f] for f in features]]


def _coerce_label(value) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "spam"):
            return True
        if text in ("0", "false", "ham", "not spam"):
            return False
    elif value in (0, 1):
        return bool(value)
    raise ConfigurationError(f"Cannot interpret {value!r} as a spam label")


def load_dataset(path, *, label_column: str = LABEL_COLUMN, require_schema: bool = False) -> Dataset:
    """Read a labelled CSV file into a :class:`Dataset`.

    The file needs a header row.  Every column except ``label_column`` is
    read as a numeric feature and rows keep their file order, so the n-th data
    row gets ``id == n``.

    Parameters
    ----------
    path : str or Path
    label_column : str, default="true_spam_bool"
    require_schema : bool, default=False
        Also check that the feature columns are exactly the 57 spambase
        features.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ConfigurationError
        If the file is empty or not valid CSV, the label column is absent, a
        value is not numeric or missing, or the schema check fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}")
    try:
        df = pd.read_csv(path, encoding="utf-8")
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read {path} as CSV: {exc}") from exc
    if require_schema:
        columns = {str(c) for c in df.columns if c != label_column}
        if columns != set(FEATURE_NAMES):
            raise ConfigurationError(
                f"{path} does not have the spambase columns "
                f"(missing={sorted(set(FEATURE_NAMES) - columns)}, unexpected={sorted(columns - set(FEATURE_NAMES))})"
            )
    dataset = Dataset.from_frame(df, label_column=label_column)
    logger.info("Loaded {} records ({} spam) from {}", len(dataset), int(dataset.labels.sum()), path)
    return dataset
