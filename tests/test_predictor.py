import pytest

from spamtree import Dataset, FeatureRecord, Hyperparameters, MissingFeatureError, build, predict, predict_all
from spamtree.predictor import decision_path


def _tiny_dataset():
    return Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": 5}, {"x": 6}], [False, False, True, True])


def _tree():
    return build(_tiny_dataset(), ["x"], Hyperparameters(min_split=2, min_bucket=1, max_depth=2))


def test_predict_routes_on_strict_less_than():
    tree = _tree()
    assert predict(tree, {"x": 3.49}) is False
    # equal to the threshold goes right
    assert predict(tree, {"x": 3.5}) is True
    assert predict(tree, FeatureRecord({"x": 10}, is_spam=False)) is True


def test_predict_accepts_a_bare_node():
    tree = _tree()
    assert predict(tree.root, {"x": 0}) is False


def test_extra_features_are_ignored():
    assert predict(_tree(), {"x": 6, "unused": 1.0}) is True


def test_missing_split_feature_raises():
    with pytest.raises(MissingFeatureError) as excinfo:
        predict(_tree(), {"y": 1.0})
    assert excinfo.value.feature == "x"
    assert "x" in str(excinfo.value)


def test_missing_feature_reports_record_id():
    other = Dataset.from_rows([{"y": 1.0}, {"y": 2.0}], [False, True])
    with pytest.raises(MissingFeatureError) as excinfo:
        predict_all(_tree(), other)
    assert excinfo.value.record_id == 1


def test_leaf_only_tree_needs_no_features():
    tree = build(_tiny_dataset(), ["x"], Hyperparameters(min_split=5))
    assert predict(tree, {}) is False


def test_predict_all_keeps_order_and_ids():
    dataset = Dataset.from_rows([{"x": v} for v in (6, 1, 5, 2, 3)], [True, False, False, False, True])
    predictions = predict_all(_tree(), dataset)
    assert [p.id for p in predictions] == [1, 2, 3, 4, 5]
    assert [p.predicted for p in predictions] == [True, False, True, False, False]
    assert [p.truth for p in predictions] == [True, False, False, False, True]


def test_predict_all_on_empty_dataset():
    assert predict_all(_tree(), Dataset([], feature_names=["x"])) == []


def test_decision_path():
    assert decision_path(_tree(), {"x": 1}) == [("x", 3.5, True)]
    assert decision_path(_tree(), {"x": 9}) == [("x", 3.5, False)]
