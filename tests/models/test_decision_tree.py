"""Tests for decision_tree.py - smoothed tree classifier, regressor and pruning."""

import numpy as np
import pandas as pd
import pytest
from sklearn import tree as sk_tree

from model_shims.interface.data import UnivariateFinite
from model_shims.models.decision_tree import (
    DecisionTreeClassifier,
    DecisionTreeRegressor,
    PrunedTree,
    prune_tree,
    smooth,
)


# ============================================================================
# Tests for smoothing
# ============================================================================

def test_smooth_raises_small_probabilities_then_renormalises():
    """Probabilities below smoothing / n_classes are floored, then rescaled."""
    smoothed = smooth([0.98, 0.01, 0.01], 0.05)

    floor = 0.05 / 3
    expected = np.array([0.98, floor, floor]) / (0.98 + 2 * floor)
    np.testing.assert_allclose(smoothed, expected)
    assert smoothed.sum() == pytest.approx(1.0)


def test_smooth_leaves_spread_vectors_alone():
    np.testing.assert_allclose(smooth([0.2, 0.3, 0.5], 0.05), [0.2, 0.3, 0.5])


def test_smooth_zero_is_identity():
    np.testing.assert_allclose(smooth([1.0, 0.0, 0.0], 0.0), [1.0, 0.0, 0.0])


def test_smooth_rowwise_on_matrix():
    probs = np.array([[1.0, 0.0], [0.5, 0.5], [0.0, 1.0]])
    smoothed = smooth(probs, 0.1)

    assert smoothed.shape == (3, 2)
    np.testing.assert_allclose(smoothed.sum(axis=1), 1.0)
    # every entry is at least the floor divided by the largest possible total
    assert np.all(smoothed >= (0.1 / 2) / 1.1 - 1e-12)


# ============================================================================
# Tests for DecisionTreeClassifier
# ============================================================================

def test_classifier_fit_predict_iris(iris):
    X, y = iris
    model = DecisionTreeClassifier()
    fitresult, cache, report = model.fit(0, X, y)

    assert cache is None
    assert report == {"classes_seen": ["setosa", "versicolor", "virginica"]}

    yhat = model.predict(fitresult, X)
    assert len(yhat) == len(X)
    assert all(isinstance(d, UnivariateFinite) for d in yhat)
    for d in yhat:
        assert d.probs.sum() == pytest.approx(1.0)
        assert d.probs.min() >= (0.05 / 3) / 1.05 - 1e-12

    # an unpruned tree fits the training data almost perfectly
    modes = model.predict_mode(fitresult, X)
    assert np.mean(np.asarray(modes) == y) > 0.95


def test_classifier_fitted_params_encoding(iris):
    X, y = iris
    model = DecisionTreeClassifier(max_depth=2)
    fitresult, _, _ = model.fit(0, X, y)

    params = model.fitted_params(fitresult)
    assert set(params) == {"tree_or_leaf", "encoding"}
    assert params["encoding"] == {"setosa": 0, "versicolor": 1, "virginica": 2}
    assert params["tree_or_leaf"].get_depth() <= 2


def test_classifier_report_lists_only_classes_seen(iris):
    """Pool levels absent from the training target are not reported."""
    X, y = iris
    y_cat = pd.Categorical(y, categories=["setosa", "unseen", "versicolor", "virginica"])
    model = DecisionTreeClassifier()
    fitresult, _, report = model.fit(0, X, y_cat)

    assert report["classes_seen"] == ["setosa", "versicolor", "virginica"]
    assert model.fitted_params(fitresult)["encoding"]["unseen"] == 1

    yhat = model.predict(fitresult, X.iloc[:3])
    assert yhat[0].classes == ["setosa", "versicolor", "virginica"]
    assert yhat[0].mode() == "setosa"


def test_classifier_invalid_hyperparameters_reset(iris):
    with pytest.warns(UserWarning, match="pdf_smoothing parameter is not valid"):
        model = DecisionTreeClassifier(pdf_smoothing=2.0)
    assert model.pdf_smoothing == 0.05

    with pytest.warns(UserWarning, match="max_depth"):
        model.max_depth = -3
    assert model.max_depth == -1


def test_classifier_verbosity_prints_tree(iris, capsys):
    X, y = iris
    DecisionTreeClassifier(display_depth=2).fit(2, X, y)
    out = capsys.readouterr().out
    assert "feature_" in out


def test_classifier_verbosity_prints_pruned_tree(iris, capsys):
    """After post-pruning, the printed tree is the pruned one."""
    X, y = iris
    model = DecisionTreeClassifier(post_prune=True, merge_purity_threshold=0.0)
    fitresult, _, _ = model.fit(2, X, y)

    out = capsys.readouterr().out
    assert model.fitted_params(fitresult)["tree_or_leaf"].n_leaves == 1
    assert out.strip() == "|--- class: 0"


def test_classifier_post_prune_to_root(iris):
    """A zero merge threshold collapses the whole tree into one leaf."""
    X, y = iris
    model = DecisionTreeClassifier(post_prune=True, merge_purity_threshold=0.0, pdf_smoothing=0.0)
    fitresult, _, _ = model.fit(0, X, y)

    tree = model.fitted_params(fitresult)["tree_or_leaf"]
    assert isinstance(tree, PrunedTree)
    assert tree.n_leaves == 1

    for d in model.predict(fitresult, X):
        np.testing.assert_allclose(d.probs, [1 / 3, 1 / 3, 1 / 3])


def test_classifier_post_prune_reduces_leaves(iris):
    X, y = iris
    model = DecisionTreeClassifier(post_prune=True, merge_purity_threshold=0.9)
    fitresult, _, _ = model.fit(0, X, y)

    tree = model.fitted_params(fitresult)["tree_or_leaf"]
    assert tree.n_leaves <= tree.estimator.get_n_leaves()
    assert len(model.predict(fitresult, X)) == len(X)


# ============================================================================
# Tests for prune_tree
# ============================================================================

def test_prune_tree_threshold_one_is_noop(iris):
    X, y = iris
    Xmatrix = X.to_numpy()
    codes = np.searchsorted(["setosa", "versicolor", "virginica"], y)
    estimator = sk_tree.DecisionTreeClassifier(random_state=0).fit(Xmatrix, codes)

    assert prune_tree(estimator, Xmatrix, codes, 1.0) is estimator


def test_prune_tree_merges_stump_at_threshold():
    """Sibling leaves merge once their parent reaches the purity threshold."""
    Xmatrix = np.array([[0.0], [1.0], [2.0], [3.0], [10.0], [11.0]])
    codes = np.array([0, 0, 0, 0, 1, 1])
    estimator = sk_tree.DecisionTreeClassifier(random_state=0).fit(Xmatrix, codes)
    assert estimator.get_n_leaves() == 2

    pruned = prune_tree(estimator, Xmatrix, codes, 0.6)
    assert pruned.n_leaves == 1
    np.testing.assert_allclose(pruned.predict_proba(Xmatrix[:1]), [[4 / 6, 2 / 6]])
    np.testing.assert_array_equal(pruned.predict(Xmatrix[:1]), [0])

    # purity of the root is 4/6, below 0.7, so nothing merges
    kept = prune_tree(estimator, Xmatrix, codes, 0.7)
    assert kept.n_leaves == 2
    np.testing.assert_array_equal(kept.predict(Xmatrix), codes)


def test_pruned_tree_export_text():
    Xmatrix = np.array([[0.0], [1.0], [2.0], [3.0], [10.0], [11.0]])
    codes = np.array([0, 0, 0, 0, 1, 1])
    estimator = sk_tree.DecisionTreeClassifier(random_state=0).fit(Xmatrix, codes)

    kept = prune_tree(estimator, Xmatrix, codes, 0.7).export_text()
    assert kept.splitlines() == [
        "|--- feature_0 <= 6.50",
        "|   |--- class: 0",
        "|--- feature_0 >  6.50",
        "|   |--- class: 1",
    ]

    merged = prune_tree(estimator, Xmatrix, codes, 0.6).export_text()
    assert merged.splitlines() == ["|--- class: 0"]

    truncated = prune_tree(estimator, Xmatrix, codes, 0.7).export_text(max_depth=0)
    assert truncated.splitlines() == ["|--- truncated branch"]


def test_pruned_regression_tree_export_text():
    Xmatrix = np.array([[0.0], [1.0], [10.0], [11.0]])
    y = np.array([1.0, 1.0, 3.0, 5.0])
    estimator = sk_tree.DecisionTreeRegressor(random_state=0).fit(Xmatrix, y)

    merged = prune_tree(estimator, Xmatrix, y, 0.0)
    assert merged.export_text().splitlines() == ["|--- value: [2.50]"]


# ============================================================================
# Tests for DecisionTreeRegressor
# ============================================================================

def test_regressor_fit_predict(regression_data):
    X, y = regression_data
    model = DecisionTreeRegressor()
    fitresult, cache, report = model.fit(0, X, y)

    assert cache is None
    assert report == {}
    yhat = model.predict(fitresult, X)
    assert yhat.shape == (len(y),)
    assert set(model.fitted_params(fitresult)) == {"tree_or_leaf"}


def test_regressor_min_samples_leaf_zero_is_accepted(regression_data):
    X, y = regression_data
    model = DecisionTreeRegressor(min_samples_leaf=0, max_depth=3)
    fitresult, _, _ = model.fit(0, X, y)
    assert fitresult.get_depth() <= 3


def test_regressor_post_prune_default_threshold_collapses(regression_data):
    """With the default zero threshold, post-pruning yields a single leaf."""
    X, y = regression_data
    model = DecisionTreeRegressor(post_prune=True)
    fitresult, _, _ = model.fit(0, X, y)

    assert fitresult.n_leaves == 1
    np.testing.assert_allclose(model.predict(fitresult, X), np.mean(y))


def test_report_keys_are_stable(iris, regression_data):
    """Every fit returns the same report fields, whatever the data."""
    X, y = iris
    classifier = DecisionTreeClassifier()
    _, _, full = classifier.fit(0, X, y)
    _, _, single = classifier.fit(0, X.iloc[:10], y[:10])
    assert set(full) == set(single) == {"classes_seen"}
    assert single["classes_seen"] == ["setosa"]

    X, y = regression_data
    regressor = DecisionTreeRegressor()
    assert regressor.fit(0, X, y)[2] == regressor.fit(0, X[:10], y[:10])[2] == {}
