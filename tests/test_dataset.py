import numpy as np
import pandas as pd
import pytest

from spamtree import ConfigurationError, Dataset, FeatureRecord, load_dataset
from spamtree.features import DEFAULT_FEATURES, FEATURE_NAMES, LABEL_COLUMN, resolve_feature


def test_records_get_one_based_ids():
    dataset = Dataset.from_rows([{"x": 3}, {"x": 1}, {"x": 2}], [True, False, False])
    assert [r.id for r in dataset] == [1, 2, 3]
    assert dataset[0]["x"] == 3.0
    assert dataset.labels.tolist() == [True, False, False]


def test_ids_follow_position_not_input():
    records = [FeatureRecord({"x": 1}, True, id=42), FeatureRecord({"x": 2}, False, id=7)]
    assert [r.id for r in Dataset(records)] == [1, 2]


def test_mismatched_schema_raises():
    with pytest.raises(ConfigurationError):
        Dataset.from_rows([{"x": 1}, {"x": 2, "y": 3}], [True, False])


def test_row_label_length_mismatch_raises():
    with pytest.raises(ConfigurationError):
        Dataset.from_rows([{"x": 1}], [True, False])


def test_dataset_and_records_are_read_only():
    dataset = Dataset.from_rows([{"x": 1}, {"x": 2}], [True, False])
    with pytest.raises(AttributeError):
        dataset[0].is_spam = False
    with pytest.raises(TypeError):
        dataset[0]._values["x"] = 5.0
    with pytest.raises(ValueError):
        dataset.labels[0] = False
    with pytest.raises(ValueError):
        dataset.column("x")[0] = 9.0


def test_matrix_follows_requested_order():
    dataset = Dataset.from_rows([{"a": 1, "b": 2}, {"a": 3, "b": 4}], [True, False])
    assert dataset.matrix(["b", "a"]).tolist() == [[2.0, 1.0], [4.0, 3.0]]
    with pytest.raises(ConfigurationError):
        dataset.matrix(["c"])


def test_from_arrays_accepts_numeric_and_string_labels():
    X = np.array([[1.0], [2.0], [3.0]])
    assert Dataset.from_arrays(X, [0, 1, 1]).labels.tolist() == [False, True, True]
    assert Dataset.from_arrays(X, ["ham", "spam", "Spam"]).labels.tolist() == [False, True, True]
    with pytest.raises(ConfigurationError):
        Dataset.from_arrays(X, [0, 1, 2])


def test_from_frame_uses_label_column():
    df = pd.DataFrame({"a": [1.0, 2.0], LABEL_COLUMN: [1, 0], "b": [0.5, 0.25]})
    dataset = Dataset.from_frame(df)
    assert dataset.feature_names == ("a", "b")
    assert dataset.labels.tolist() == [True, False]


def test_from_frame_rejects_missing_values():
    df = pd.DataFrame({"a": [1.0, None], LABEL_COLUMN: [1, 0]})
    with pytest.raises(ConfigurationError):
        Dataset.from_frame(df)


def test_from_rows_rejects_nan_values():
    with pytest.raises(ConfigurationError, match="x"):
        Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": float("nan")}, {"x": float("nan")}], [False, False, True, True])


def test_from_arrays_rejects_non_finite_values():
    with pytest.raises(ConfigurationError):
        Dataset.from_arrays([[1.0, np.nan], [2.0, 3.0]], [0, 1], ["a", "b"])
    with pytest.raises(ConfigurationError):
        Dataset.from_arrays([[1.0], [np.inf]], [0, 1], ["a"])


def test_load_dataset(tmp_path):
    path = tmp_path / "train.csv"
    pd.DataFrame({"x": [1, 2, 5], LABEL_COLUMN: [0, 0, 1]}).to_csv(path, index=False)
    dataset = load_dataset(path)
    assert len(dataset) == 3
    assert dataset.column("x").tolist() == [1.0, 2.0, 5.0]
    assert [r.id for r in dataset] == [1, 2, 3]


def test_load_dataset_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_dataset(tmp_path / "nope.csv")

    path = tmp_path / "nolabel.csv"
    pd.DataFrame({"x": [1, 2]}).to_csv(path, index=False)
    with pytest.raises(ConfigurationError):
        load_dataset(path)

    path = tmp_path / "small.csv"
    pd.DataFrame({"x": [1, 2], LABEL_COLUMN: [0, 1]}).to_csv(path, index=False)
    with pytest.raises(ConfigurationError):
        load_dataset(path, require_schema=True)

    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_dataset(path)


def test_spambase_schema():
    assert len(FEATURE_NAMES) == 57
    assert len(set(FEATURE_NAMES)) == 57
    assert set(DEFAULT_FEATURES) <= set(FEATURE_NAMES)
    assert resolve_feature("free") == "word_freq_free"
    assert resolve_feature("$") == "char_freq_dollar"
    assert resolve_feature("capital_run_length_total") == "capital_run_length_total"
    with pytest.raises(ConfigurationError):
        resolve_feature("viagra")
