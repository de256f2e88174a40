"""
Decision tree shims around scikit-learn's CART trees.

DecisionTreeClassifier is probabilistic: instead of the mode class at each
leaf it predicts the leaf's class distribution, smoothed so that no class
falls below ``pdf_smoothing / n_classes`` before renormalisation.
DecisionTreeRegressor is deterministic.

Both support post-fit pruning (``post_prune=True``): sibling leaves are merged
while the merged node's purity (fraction of training targets equal to its
majority value) reaches the threshold.
"""

from typing import Any, Dict, List

import numpy as np
from sklearn import tree as sk_tree
from sklearn.tree._tree import TREE_LEAF

from model_shims.infrastructure.logging import loggable
from model_shims.interface.base import Deterministic, Probabilistic
from model_shims.interface.data import UnivariateFinite, encode_target, matrix


# ============================================================================
# Hyperparameter spaces
# ============================================================================

def _get_decision_tree_classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Decision Tree Classifier."""
    return {
        "pruning_purity": {"type": "float", "default": 1.0, "range": [None, 1.0], "description": "Purity threshold of the wrapped package (post-pruning uses merge_purity_threshold)"},
        "max_depth": {"type": "int", "default": -1, "range": [-1, None], "description": "Maximum depth of the tree (-1 for unlimited)"},
        "min_samples_leaf": {"type": "int", "default": 1, "range": [0, None], "description": "Minimum samples required at a leaf node"},
        "min_samples_split": {"type": "int", "default": 2, "range": [2, None], "description": "Minimum samples required to split a node"},
        "min_purity_increase": {"type": "float", "default": 0.0, "range": [0.0, None], "description": "Minimum impurity decrease required for a split"},
        "n_subfeatures": {"type": "int", "default": 0, "range": [0, None], "description": "Number of features to consider per split (0 for all)"},
        "display_depth": {"type": "int", "default": 5, "range": [1, None], "description": "Depth shown when the tree is printed at verbosity >= 2"},
        "post_prune": {"type": "bool", "default": False, "description": "Merge leaves after fitting"},
        "merge_purity_threshold": {"type": "float", "default": 0.9, "range": [0.0, 1.0], "description": "Purity at which sibling leaves are merged by post-pruning"},
        "pdf_smoothing": {"type": "float", "default": 0.05, "range": [0.0, 1.0], "description": "Total probability floor spread over the classes of each prediction"},
        "random_state": {"type": "int_or_none", "default": None, "range": [0, None], "description": "Seed for the feature permutation at each split"},
    }


def _get_decision_tree_regressor_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Decision Tree Regressor."""
    return {
        "pruning_purity_threshold": {"type": "float", "default": 0.0, "range": [0.0, 1.0], "description": "Purity at which sibling leaves are merged by post-pruning"},
        "max_depth": {"type": "int", "default": -1, "range": [-1, None], "description": "Maximum depth of the tree (-1 for unlimited)"},
        "min_samples_leaf": {"type": "int", "default": 5, "range": [0, None], "description": "Minimum samples required at a leaf node"},
        "min_samples_split": {"type": "int", "default": 2, "range": [2, None], "description": "Minimum samples required to split a node"},
        "min_purity_increase": {"type": "float", "default": 0.0, "range": [0.0, None], "description": "Minimum impurity decrease required for a split"},
        "n_subfeatures": {"type": "int", "default": 0, "range": [0, None], "description": "Number of features to consider per split (0 for all)"},
        "post_prune": {"type": "bool", "default": False, "description": "Merge leaves after fitting"},
        "random_state": {"type": "int_or_none", "default": None, "range": [0, None], "description": "Seed for the feature permutation at each split"},
    }


def _tree_params(model) -> Dict[str, Any]:
    """Translate shim hyperparameters to scikit-learn tree arguments."""
    return {
        "max_depth": None if model.max_depth < 0 else model.max_depth,
        # scikit-learn leaves hold at least one sample
        "min_samples_leaf": max(model.min_samples_leaf, 1),
        "min_samples_split": model.min_samples_split,
        "min_impurity_decrease": model.min_purity_increase,
        "max_features": None if model.n_subfeatures == 0 else model.n_subfeatures,
        "random_state": model.random_state,
    }


# ============================================================================
# Smoothing and pruning
# ============================================================================

def smooth(prob_vector, smoothing: float) -> np.ndarray:
    """
    Raise every probability below ``smoothing / n_classes`` to that floor,
    then renormalise to sum to one.

    Works on a single vector or row-wise on a (n_rows, n_classes) matrix.
    """
    probs = np.asarray(prob_vector, dtype=float)
    threshold = smoothing / probs.shape[-1]
    smoothed = np.where(probs < threshold, threshold, probs)
    return smoothed / smoothed.sum(axis=-1, keepdims=True)


class PrunedTree:
    """
    A fitted scikit-learn tree seen through a purity-pruned node structure.

    The wrapped estimator is left untouched. ``representative`` maps every
    node to the pruned leaf that now owns it, and ``node_values`` holds the
    training class distribution (classifiers) or target mean (regressors) of
    every node.
    """

    def __init__(self, estimator, representative: np.ndarray, node_values: np.ndarray):
        self.estimator = estimator
        self.representative = representative
        self.node_values = node_values

    @property
    def n_leaves(self) -> int:
        is_leaf = self.estimator.tree_.children_left == TREE_LEAF
        return len(np.unique(self.representative[is_leaf]))

    def apply(self, X) -> np.ndarray:
        return self.representative[self.estimator.apply(X)]

    def predict_proba(self, X) -> np.ndarray:
        return self.node_values[self.apply(X)]

    def predict(self, X) -> np.ndarray:
        values = self.node_values[self.apply(X)]
        if values.ndim == 2:
            return self.estimator.classes_[np.argmax(values, axis=1)]
        return values

    def export_text(self, max_depth: int = 10) -> str:
        """Text rendering of the pruned tree, laid out like ``sklearn.tree.export_text``."""
        tree_ = self.estimator.tree_
        lines = []

        def recurse(node, depth):
            indent = "|   " * depth + "|--- "
            left = tree_.children_left[node]
            if left == TREE_LEAF or self.representative[left] == node:
                lines.append(indent + self._leaf_label(node))
            elif depth >= max_depth:
                lines.append(indent + "truncated branch")
            else:
                name = f"feature_{tree_.feature[node]}"
                threshold = tree_.threshold[node]
                lines.append(f"{indent}{name} <= {threshold:.2f}")
                recurse(left, depth + 1)
                lines.append(f"{indent}{name} >  {threshold:.2f}")
                recurse(tree_.children_right[node], depth + 1)

        recurse(0, 0)
        return "\n".join(lines) + "\n"

    def _leaf_label(self, node) -> str:
        values = self.node_values[node]
        if self.node_values.ndim == 2:
            return f"class: {self.estimator.classes_[np.argmax(values)]}"
        return f"value: [{values:.2f}]"

    def __repr__(self):
        return f"PrunedTree(n_leaves={self.n_leaves}, estimator={self.estimator!r})"


def prune_tree(estimator, Xmatrix: np.ndarray, y, purity_threshold: float):
    """
    Merge sibling leaves of a fitted tree whose combined purity is at least
    ``purity_threshold``, repeating until nothing changes.

    Purity of a node is the fraction of its training targets equal to the most
    frequent one. A threshold of 1 or more returns the estimator unchanged.

    Args:
        estimator: Fitted scikit-learn DecisionTreeClassifier or DecisionTreeRegressor
        Xmatrix: Training features the estimator was fit on
        y: Training targets (integer codes for classifiers)
        purity_threshold: Minimum purity for a merge

    Returns:
        The estimator itself, or a PrunedTree wrapping it
    """
    if purity_threshold >= 1.0:
        return estimator

    tree_ = estimator.tree_
    n_nodes = tree_.node_count
    left, right = tree_.children_left, tree_.children_right
    is_leaf = left == TREE_LEAF

    # node membership of every training sample, one column per node
    members = estimator.decision_path(Xmatrix).tocsc()

    is_classifier = hasattr(estimator, "classes_")
    if is_classifier:
        targets = np.searchsorted(estimator.classes_, np.asarray(y))
        node_values = np.zeros((n_nodes, len(estimator.classes_)))
    else:
        targets = np.asarray(y, dtype=float)
        node_values = np.zeros(n_nodes)

    purity = np.zeros(n_nodes)
    for node in range(n_nodes):
        node_targets = targets[members.indices[members.indptr[node]:members.indptr[node + 1]]]
        _, counts = np.unique(node_targets, return_counts=True)
        purity[node] = counts.max() / len(node_targets)
        if is_classifier:
            node_values[node] = np.bincount(node_targets, minlength=node_values.shape[1]) / len(node_targets)
        else:
            node_values[node] = node_targets.mean()

    # children always have larger ids than their parent, so a reverse sweep
    # sees both children before the parent
    pruned_leaf = is_leaf.copy()
    for node in range(n_nodes - 1, -1, -1):
        if not is_leaf[node] and pruned_leaf[left[node]] and pruned_leaf[right[node]] \
                and purity[node] >= purity_threshold:
            pruned_leaf[node] = True

    representative = np.arange(n_nodes)
    for node in range(n_nodes):
        if is_leaf[node]:
            continue
        owner = representative[node]
        for child in (left[node], right[node]):
            representative[child] = owner if pruned_leaf[owner] else child

    return PrunedTree(estimator, representative, node_values)


# ============================================================================
# Classifier
# ============================================================================

class DecisionTreeClassifier(Probabilistic):
    """
    CART decision tree classifier with smoothed leaf distributions.

    Instead of predicting the mode class at each leaf, a UnivariateFinite
    distribution is fit to the leaf training classes, with smoothing
    controlled by ``pdf_smoothing``: if ``n`` is the number of classes, each
    class probability below ``pdf_smoothing / n`` is replaced by that value
    and the resulting vector is renormalised.

    For post-fit pruning set ``post_prune=True`` and choose
    ``merge_purity_threshold``.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_decision_tree_classifier_hyperparams()

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a decision tree classifier on a table and a categorical target."""
        Xmatrix = matrix(X)
        yplain, decoder = encode_target(y)
        classes_seen = decoder.classes_seen(yplain)

        estimator = sk_tree.DecisionTreeClassifier(**_tree_params(self))
        estimator.fit(Xmatrix, yplain)

        tree = estimator
        if self.post_prune:
            tree = prune_tree(estimator, Xmatrix, yplain, self.merge_purity_threshold)

        if verbosity >= 2:
            if isinstance(tree, PrunedTree):
                print(tree.export_text(max_depth=self.display_depth))
            else:
                print(sk_tree.export_text(estimator, max_depth=self.display_depth))

        fitresult = (tree, decoder, classes_seen)
        cache = None
        report = {"classes_seen": classes_seen}

        return fitresult, cache, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        tree, decoder, _ = fitresult
        return {"tree_or_leaf": tree, "encoding": decoder.encoding()}

    @loggable
    def predict(self, fitresult, Xnew) -> List[UnivariateFinite]:
        """Predict a smoothed class distribution for every row of a table."""
        Xmatrix = matrix(Xnew)
        tree, _, classes_seen = fitresult

        # columns follow the integer codes seen in training, i.e. classes_seen
        y_probabilities = smooth(tree.predict_proba(Xmatrix), self.pdf_smoothing)

        return [UnivariateFinite(classes_seen, row) for row in y_probabilities]


# ============================================================================
# Regressor
# ============================================================================

class DecisionTreeRegressor(Deterministic):
    """
    CART decision tree regressor. Predictions are deterministic.

    For post-fit pruning set ``post_prune=True`` and choose
    ``pruning_purity_threshold``.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_decision_tree_regressor_hyperparams()

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a decision tree regressor on a table and a continuous target."""
        Xmatrix = matrix(X)
        yfloat = np.asarray(y, dtype=float)

        fitresult = sk_tree.DecisionTreeRegressor(**_tree_params(self))
        fitresult.fit(Xmatrix, yfloat)

        if self.post_prune:
            fitresult = prune_tree(fitresult, Xmatrix, yfloat, self.pruning_purity_threshold)

        cache = None
        report = {}

        return fitresult, cache, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"tree_or_leaf": fitresult}

    @loggable
    def predict(self, fitresult, Xnew) -> np.ndarray:
        """Predict a continuous value for every row of a table."""
        return fitresult.predict(matrix(Xnew))
