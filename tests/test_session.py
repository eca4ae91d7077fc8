import threading

import pytest

from spamtree import Dataset, Hyperparameters, ModelSession, build, build_model, evaluate


def _tiny_dataset():
    return Dataset.from_rows([{"x": 1}, {"x": 2}, {"x": 5}, {"x": 6}], [False, False, True, True])


def test_build_and_evaluate_end_to_end():
    dataset = _tiny_dataset()
    tree = build_model(dataset, {"x"}, Hyperparameters(min_split=2, min_bucket=1, max_depth=2))
    result = evaluate(tree, dataset)

    assert [p.id for p in result.predictions] == [1, 2, 3, 4]
    assert (result.matrix.tp, result.matrix.tn, result.matrix.fp, result.matrix.fn) == (2, 2, 0, 0)
    assert result.metrics.accuracy == 100.0
    assert result.metrics.true_positive_rate == 100.0
    assert result.metrics.true_negative_rate == 100.0
    assert result.table.loc["Total", "Total"] == 4


def test_predictions_frame_is_keyed_by_id():
    dataset = _tiny_dataset()
    result = evaluate(build_model(dataset, ["x"]), dataset)
    frame = result.predictions_frame()
    assert frame.index.tolist() == [1, 2, 3, 4]
    assert frame.loc[3, "prediction"]
    assert not frame.loc[1, "truth"]


def test_session_evaluate_before_build_raises():
    with ModelSession(_tiny_dataset()) as session:
        assert session.tree is None
        with pytest.raises(ValueError):
            session.evaluate()


def test_session_publishes_each_synchronous_build():
    with ModelSession(_tiny_dataset()) as session:
        first = session.build_model(["x"], Hyperparameters(min_split=5))
        assert session.tree is first and session.version == 1
        second = session.build_model(["x"])
        assert session.tree is second and session.version == 2
        assert session.evaluate().metrics.accuracy == 100.0


def test_session_evaluates_other_datasets():
    held_out = Dataset.from_rows([{"x": 0}, {"x": 9}], [True, True])
    with ModelSession(_tiny_dataset()) as session:
        session.build_model(["x"])
        result = session.evaluate(held_out)
    assert result.matrix.fn == 1 and result.matrix.tp == 1
    assert result.metrics.true_negative_rate is None


def test_stale_build_is_discarded():
    release = threading.Event()

    def slow_then_fast(dataset, features, hyperparams):
        if features == "slow":
            assert release.wait(5)
        return build(dataset, ["x"], hyperparams)

    with ModelSession(_tiny_dataset(), builder=slow_then_fast, max_workers=2) as session:
        stale = session.request_build("slow", Hyperparameters(min_split=5))
        fresh = session.request_build("fast", Hyperparameters(max_depth=2))
        assert (stale.version, fresh.version) == (1, 2)

        fresh_tree = fresh.result(timeout=5)
        assert session.tree is fresh_tree

        release.set()
        stale_tree = stale.result(timeout=5)
        # the older build finished last but must not replace the newer one
        assert stale_tree.root.is_leaf
        assert session.tree is fresh_tree
        assert session.version == 2


def test_build_errors_surface_through_ticket():
    with ModelSession(_tiny_dataset()) as session:
        ticket = session.request_build([])
        with pytest.raises(ValueError):
            ticket.result(timeout=5)
        assert session.tree is None
