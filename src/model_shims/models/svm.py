"""
Support vector machine shims around ``sklearn.svm``.

Classifiers (SVMClassifier, SVMNuClassifier, SVMLClassifier) encode the
categorical target to integer codes before fitting and decode the integer
predictions afterwards. Regressors (SVMRegressor, SVMNuRegressor,
SVMLRegressor) pass predictions through unchanged. All of them are
deterministic.
"""

from typing import Any, Dict

import numpy as np
from sklearn.svm import SVC, NuSVC, LinearSVC, SVR, NuSVR, LinearSVR

from model_shims.constants import SVM_GAMMAS, SVM_KERNELS
from model_shims.infrastructure.logging import loggable
from model_shims.interface.base import Deterministic
from model_shims.interface.data import encode_target, matrix


# liblinear rejects negative iteration caps; -1 means "library default" there
_LIBLINEAR_DEFAULT_MAX_ITER = 1000


def _liblinear_max_iter(max_iter: int) -> int:
    return _LIBLINEAR_DEFAULT_MAX_ITER if max_iter < 0 else max_iter


# ============================================================================
# Hyperparameter spaces
# ============================================================================

def _kernel_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Hyperparameters shared by every libsvm-backed model."""
    return {
        "kernel": {"type": "categorical_or_callable", "default": "rbf", "choices": SVM_KERNELS, "description": "Kernel type, or a callable computing the Gram matrix"},
        "degree": {"type": "int", "default": 3, "range": [0, None], "description": "Degree for polynomial kernel"},
        "gamma": {"type": "categorical_or_float", "default": "auto", "choices": SVM_GAMMAS, "range": [0.0, None], "description": "Kernel coefficient for rbf, poly and sigmoid"},
        "coef0": {"type": "float", "default": 0.0, "description": "Independent term for poly and sigmoid kernels"},
        "shrinking": {"type": "bool", "default": True, "description": "Whether to use the shrinking heuristic"},
        "tol": {"type": "float", "default": 1e-3, "range": [0.0, None], "exclusive_min": True, "description": "Tolerance for the stopping criterion"},
        "cache_size": {"type": "float", "default": 200.0, "range": [0.0, None], "exclusive_min": True, "description": "Kernel cache size in MB"},
        "max_iter": {"type": "int", "default": -1, "range": [-1, None], "description": "Hard limit on solver iterations (-1 for no limit)"},
    }


def _c_hyperparam() -> Dict[str, Dict[str, Any]]:
    return {
        "C": {"type": "float", "default": 1.0, "range": [0.0, None], "exclusive_min": True, "description": "Regularization parameter"},
    }


def _nu_hyperparam() -> Dict[str, Dict[str, Any]]:
    return {
        "nu": {"type": "float", "default": 0.5, "range": [0.0, 1.0], "exclusive_min": True, "description": "Bound on the fraction of margin errors and support vectors"},
    }


def _classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    return {
        "decision_function_shape": {"type": "categorical", "default": "ovr", "choices": ["ovo", "ovr"], "description": "Shape of the multiclass decision function"},
        "random_state": {"type": "int_or_none", "default": None, "range": [0, None], "description": "Seed for probability estimates and data shuffling"},
    }


def _get_svm_classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for C-Support Vector Classifier."""
    return {**_c_hyperparam(), **_kernel_hyperparams(), **_classifier_hyperparams()}


def _get_svm_nu_classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Nu-Support Vector Classifier."""
    return {**_nu_hyperparam(), **_kernel_hyperparams(), **_classifier_hyperparams()}


def _get_svm_l_classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Linear Support Vector Classifier."""
    return {
        **_c_hyperparam(),
        "loss": {"type": "categorical", "default": "squared_hinge", "choices": ["hinge", "squared_hinge"], "description": "Loss function"},
        "dual": {"type": "bool", "default": True, "description": "Solve the dual rather than the primal problem"},
        "penalty": {"type": "categorical", "default": "l2", "choices": ["l1", "l2"], "description": "Regularization type"},
        "tol": {"type": "float", "default": 1e-3, "range": [0.0, None], "exclusive_min": True, "description": "Tolerance for the stopping criterion"},
        "max_iter": {"type": "int", "default": -1, "range": [-1, None], "description": "Maximum iterations (-1 for the library default)"},
        "intercept_scaling": {"type": "float", "default": 1.0, "range": [0.0, None], "exclusive_min": True, "description": "Value of the synthetic intercept feature"},
        "random_state": {"type": "int_or_none", "default": None, "range": [0, None], "description": "Seed for the dual coordinate descent"},
    }


def _get_svm_regressor_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Epsilon-Support Vector Regressor."""
    return {
        **_c_hyperparam(),
        **_kernel_hyperparams(),
        "epsilon": {"type": "float", "default": 0.1, "range": [0.0, None], "description": "Epsilon-tube within which no penalty is given"},
    }


def _get_svm_nu_regressor_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Nu-Support Vector Regressor."""
    return {**_nu_hyperparam(), **_c_hyperparam(), **_kernel_hyperparams()}


def _get_svm_l_regressor_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Linear Support Vector Regressor."""
    return {
        **_c_hyperparam(),
        "loss": {"type": "categorical", "default": "epsilon_insensitive", "choices": ["epsilon_insensitive", "squared_epsilon_insensitive"], "description": "Loss function"},
        "fit_intercept": {"type": "bool", "default": True, "description": "Whether to fit an intercept"},
        "dual": {"type": "bool", "default": True, "description": "Solve the dual rather than the primal problem"},
        "tol": {"type": "float", "default": 1e-3, "range": [0.0, None], "exclusive_min": True, "description": "Tolerance for the stopping criterion"},
        "max_iter": {"type": "int", "default": -1, "range": [-1, None], "description": "Maximum iterations (-1 for the library default)"},
        "epsilon": {"type": "float", "default": 0.1, "range": [0.0, None], "description": "Epsilon in the epsilon-insensitive loss"},
    }


# ============================================================================
# Shared fit / predict
# ============================================================================

class _SVMClassifierBase(Deterministic):
    """Encode labels, fit the estimator on codes, decode predictions."""

    def _build_estimator(self):
        raise NotImplementedError

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a support vector classifier on a table and a categorical target."""
        Xmatrix = matrix(X)
        y_plain, decode = encode_target(y)

        result = self._build_estimator().fit(Xmatrix, y_plain)
        fitresult = (result, decode)
        report = {}

        return fitresult, None, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"estimator": fitresult[0]}

    @loggable
    def predict(self, fitresult, Xnew):
        """Predict a label for every row of a table."""
        estimator, decode = fitresult
        prediction = estimator.predict(matrix(Xnew))
        return decode(prediction)


class _SVMRegressorBase(Deterministic):
    """Fit the estimator on a float target and pass predictions through."""

    def _build_estimator(self):
        raise NotImplementedError

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a support vector regressor on a table and a continuous target."""
        Xmatrix = matrix(X)

        fitresult = self._build_estimator().fit(Xmatrix, np.asarray(y, dtype=float))
        report = {}

        return fitresult, None, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"estimator": fitresult}

    @loggable
    def predict(self, fitresult, Xnew) -> np.ndarray:
        """Predict a continuous value for every row of a table."""
        return fitresult.predict(matrix(Xnew))


# ============================================================================
# Classifiers
# ============================================================================

class SVMClassifier(_SVMClassifierBase):
    """
    C-Support Vector classifier wrapping ``sklearn.svm.SVC``.

    See also SVMNuClassifier, SVMLClassifier, SVMRegressor.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_classifier_hyperparams()

    def _build_estimator(self) -> SVC:
        return SVC(
            C=self.C,
            kernel=self.kernel,
            degree=self.degree,
            coef0=self.coef0,
            shrinking=self.shrinking,
            gamma=self.gamma,
            tol=self.tol,
            cache_size=self.cache_size,
            max_iter=self.max_iter,
            decision_function_shape=self.decision_function_shape,
            random_state=self.random_state,
        )


class SVMNuClassifier(_SVMClassifierBase):
    """
    Nu-Support Vector classifier wrapping ``sklearn.svm.NuSVC``.

    See also SVMClassifier, SVMLClassifier, SVMNuRegressor.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_nu_classifier_hyperparams()

    def _build_estimator(self) -> NuSVC:
        return NuSVC(
            nu=self.nu,
            kernel=self.kernel,
            degree=self.degree,
            coef0=self.coef0,
            shrinking=self.shrinking,
            gamma=self.gamma,
            tol=self.tol,
            cache_size=self.cache_size,
            max_iter=self.max_iter,
            decision_function_shape=self.decision_function_shape,
            random_state=self.random_state,
        )


class SVMLClassifier(_SVMClassifierBase):
    """
    Linear Support Vector classifier wrapping ``sklearn.svm.LinearSVC``.

    Unsupported loss/penalty/dual combinations are reported by scikit-learn
    at fit time. See also SVMClassifier, SVMNuClassifier, SVMLRegressor.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_l_classifier_hyperparams()

    def _build_estimator(self) -> LinearSVC:
        return LinearSVC(
            C=self.C,
            loss=self.loss,
            dual=self.dual,
            penalty=self.penalty,
            intercept_scaling=self.intercept_scaling,
            tol=self.tol,
            max_iter=_liblinear_max_iter(self.max_iter),
            random_state=self.random_state,
        )


# ============================================================================
# Regressors
# ============================================================================

class SVMRegressor(_SVMRegressorBase):
    """
    Epsilon-Support Vector regressor wrapping ``sklearn.svm.SVR``.

    See also SVMClassifier, SVMNuRegressor, SVMLRegressor.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_regressor_hyperparams()

    def _build_estimator(self) -> SVR:
        return SVR(
            C=self.C,
            kernel=self.kernel,
            degree=self.degree,
            coef0=self.coef0,
            shrinking=self.shrinking,
            gamma=self.gamma,
            tol=self.tol,
            cache_size=self.cache_size,
            max_iter=self.max_iter,
            epsilon=self.epsilon,
        )


class SVMNuRegressor(_SVMRegressorBase):
    """
    Nu-Support Vector regressor wrapping ``sklearn.svm.NuSVR``.

    See also SVMNuClassifier, SVMRegressor, SVMLRegressor.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_nu_regressor_hyperparams()

    def _build_estimator(self) -> NuSVR:
        return NuSVR(
            nu=self.nu,
            C=self.C,
            kernel=self.kernel,
            degree=self.degree,
            coef0=self.coef0,
            shrinking=self.shrinking,
            gamma=self.gamma,
            tol=self.tol,
            cache_size=self.cache_size,
            max_iter=self.max_iter,
        )


class SVMLRegressor(_SVMRegressorBase):
    """
    Linear Support Vector regressor wrapping ``sklearn.svm.LinearSVR``.

    See also SVMRegressor, SVMNuRegressor, SVMLClassifier.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_svm_l_regressor_hyperparams()

    def _build_estimator(self) -> LinearSVR:
        return LinearSVR(
            C=self.C,
            loss=self.loss,
            fit_intercept=self.fit_intercept,
            dual=self.dual,
            tol=self.tol,
            max_iter=_liblinear_max_iter(self.max_iter),
            epsilon=self.epsilon,
        )
