"""
Constants for model_shims package.

MODEL_DESCRIPTIONS: Short human-readable description of every wrapped model.
TABLE_CONTINUOUS, VECTOR_FINITE, VECTOR_CONTINUOUS: Scientific-type labels used
    for input/target declarations in the model registry.
SKLEARN_PACKAGE: Identity of the package the shims wrap.

"""

from __future__ import annotations
from typing import Dict, Mapping


# Scientific types
TABLE_CONTINUOUS = "Table(Continuous)"
VECTOR_FINITE = "AbstractVector{<:Finite}"
VECTOR_CONTINUOUS = "AbstractVector{Continuous}"

DETERMINISTIC = "deterministic"
PROBABILISTIC = "probabilistic"


SKLEARN_PACKAGE: Mapping[str, object] = {
    "name": "scikit-learn",
    "url": "https://github.com/scikit-learn/scikit-learn",
    "license": "BSD-3-Clause",
    "is_pure_python": True,
    "is_wrapper": False,
}


MODEL_DESCRIPTIONS: Dict[str, str] = {
    # decision trees
    "DecisionTreeClassifier": "Decision Tree Classifier.",
    "DecisionTreeRegressor": "Decision Tree Regressor.",
    # support vector machines
    "SVMClassifier": "C-Support Vector classifier.",
    "SVMNuClassifier": "Nu-Support Vector classifier.",
    "SVMLClassifier": "Linear Support Vector classifier.",
    "SVMRegressor": "Epsilon-Support Vector regressor.",
    "SVMNuRegressor": "Nu-Support Vector regressor.",
    "SVMLRegressor": "Linear Support Vector regressor.",
    # gaussian processes
    "GPClassifier": "Gaussian Process classifier (Laplace approximation).",
    "GPRegressor": "Gaussian Process regressor.",
}


SVM_KERNELS = ["linear", "poly", "rbf", "sigmoid", "precomputed"]
SVM_GAMMAS = ["auto", "scale"]
GP_KERNELS = ["rbf", "matern", "rational_quadratic", "dot_product"]
