import pytest

from spamtree import (
    UNDEFINED,
    ConfusionMatrix,
    Dataset,
    DegenerateMetricError,
    Hyperparameters,
    PredictionRecord,
    build,
    confusion_matrix,
    confusion_table,
    metrics,
    predict_all,
)
from spamtree.scoring import COLUMN_LABELS, ROW_LABELS, score_lines


def _predictions(pairs):
    return [PredictionRecord(id=i, predicted=p, truth=t) for i, (p, t) in enumerate(pairs, start=1)]


def test_confusion_matrix_counts_each_cell():
    preds = _predictions([(True, True), (True, True), (False, False), (True, False), (False, True), (False, True)])
    m = confusion_matrix(preds)
    assert (m.tp, m.tn, m.fp, m.fn) == (2, 1, 1, 2)
    assert m.total == len(preds)


def test_perfect_tree_scores_full_marks():
    dataset = Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": 5}, {"x": 6}], [False, False, True, True])
    tree = build(dataset, ["x"], Hyperparameters(max_depth=2))
    m = confusion_matrix(predict_all(tree, dataset))
    assert (m.tp, m.tn, m.fp, m.fn) == (2, 2, 0, 0)
    assert metrics(m).accuracy == 100.0


def test_shallow_tree_is_imperfect():
    dataset = Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": 3}, {"x": 4}], [False, True, True, False])
    tree = build(dataset, ["x"], Hyperparameters(max_depth=1))
    result = metrics(confusion_matrix(predict_all(tree, dataset)))
    assert result.accuracy == 75.0


def test_rates_are_rounded_percentages():
    m = ConfusionMatrix(tp=2, tn=5, fp=1, fn=1)
    result = metrics(m)
    assert result.accuracy == 77.78
    assert result.true_positive_rate == 66.67
    assert result.true_negative_rate == 83.33


def test_undefined_rates_use_sentinel():
    # no actual spam at all
    m = ConfusionMatrix(tp=0, tn=3, fp=1, fn=0)
    result = metrics(m)
    assert result.true_positive_rate is UNDEFINED
    assert result.true_negative_rate == 75.0
    assert result.accuracy == 75.0


def test_empty_predictions_are_all_undefined():
    result = metrics(confusion_matrix([]))
    assert result.accuracy is UNDEFINED
    assert result.true_positive_rate is UNDEFINED
    assert result.true_negative_rate is UNDEFINED


def test_strict_rates_raise():
    m = ConfusionMatrix(tp=2, tn=0, fp=0, fn=1)
    with pytest.raises(DegenerateMetricError) as excinfo:
        m.true_negative_rate(strict=True)
    assert excinfo.value.metric == "true_negative_rate"
    assert m.true_positive_rate(strict=True) == 66.67


def test_rates_stay_within_bounds():
    for m in (ConfusionMatrix(1, 0, 0, 0), ConfusionMatrix(0, 0, 3, 4), ConfusionMatrix(7, 9, 2, 1)):
        for value in metrics(m).to_dict().values():
            assert value is UNDEFINED or 0.0 <= value <= 100.0


def test_negative_counts_are_rejected():
    with pytest.raises(ValueError):
        ConfusionMatrix(tp=-1)


def test_confusion_table_layout_and_totals():
    m = ConfusionMatrix(tp=4, tn=10, fp=2, fn=3)
    table = confusion_table(m)
    assert list(table.index) == list(ROW_LABELS)
    assert list(table.columns) == list(COLUMN_LABELS)
    assert table.loc["Predicted Not Spam"].tolist() == [10, 3, 13]
    assert table.loc["Predicted Spam"].tolist() == [2, 4, 6]
    assert table.loc["Total"].tolist() == [12, 7, 19]


def test_confusion_table_from_predictions():
    preds = _predictions([(True, True), (False, False), (False, True)])
    table = confusion_table(preds)
    assert table.loc["Total", "Total"] == 3
    assert table.loc["Predicted Not Spam", "Actually Spam"] == 1


def test_score_lines():
    lines = score_lines(metrics(ConfusionMatrix(tp=1, tn=3, fp=0, fn=0)))
    assert lines == [
        "Overall Accuracy: 100%",
        "True Positive Rate: 100%",
        "True Negative Rate: 100%",
    ]
    lines = score_lines(metrics(ConfusionMatrix(tp=0, tn=3, fp=1, fn=0)))
    assert lines[1] == "True Positive Rate: n/a"
    assert lines[2] == "True Negative Rate: 75%"
