"""Model shims for scikit-learn decision trees, SVMs and Gaussian processes."""

from model_shims.models.decision_tree import DecisionTreeClassifier, DecisionTreeRegressor
from model_shims.models.svm import (
    SVMClassifier,
    SVMNuClassifier,
    SVMLClassifier,
    SVMRegressor,
    SVMNuRegressor,
    SVMLRegressor,
)
from model_shims.models.gaussian_process import GPClassifier, GPRegressor

__all__ = [
    "DecisionTreeClassifier",
    "DecisionTreeRegressor",
    "SVMClassifier",
    "SVMNuClassifier",
    "SVMLClassifier",
    "SVMRegressor",
    "SVMNuRegressor",
    "SVMLRegressor",
    "GPClassifier",
    "GPRegressor",
]
