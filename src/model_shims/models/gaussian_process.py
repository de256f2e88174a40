"""
Gaussian process shims around ``sklearn.gaussian_process``.

GPClassifier decodes the integer class predicted by a Laplace-approximation
GaussianProcessClassifier back to the original label. GPRegressor returns the
posterior mean, and ``predict_std`` the predictive standard deviation next to
it. Both report the log-marginal likelihood of the optimised kernel.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
from sklearn.gaussian_process import GaussianProcessClassifier, GaussianProcessRegressor
from sklearn.gaussian_process.kernels import (
    RBF,
    ConstantKernel,
    DotProduct,
    Kernel,
    Matern,
    RationalQuadratic,
)

from model_shims.constants import GP_KERNELS
from model_shims.infrastructure.logging import loggable
from model_shims.interface.base import Deterministic
from model_shims.interface.data import encode_target, matrix


def _build_kernel(kernel: str | Kernel) -> Kernel:
    """Turn a kernel name into an amplitude-scaled scikit-learn kernel."""
    if isinstance(kernel, Kernel):
        return kernel
    if kernel == "rbf":
        base = RBF(length_scale=1.0)
    elif kernel == "matern":
        base = Matern(length_scale=1.0, nu=1.5)
    elif kernel == "rational_quadratic":
        base = RationalQuadratic(length_scale=1.0, alpha=1.0)
    elif kernel == "dot_product":
        base = DotProduct(sigma_0=1.0)
    else:
        raise ValueError(f"kernel must be one of {GP_KERNELS} or a Kernel instance, got {kernel!r}")
    return ConstantKernel(1.0) * base


def _shared_hyperparams() -> Dict[str, Dict[str, Any]]:
    return {
        "kernel": {"type": "categorical_or_object", "default": "rbf", "choices": GP_KERNELS, "object_type": Kernel, "description": "Covariance function name, or a scikit-learn Kernel"},
        "optimizer": {"type": "categorical", "default": "fmin_l_bfgs_b", "choices": ["fmin_l_bfgs_b", None], "description": "Kernel hyperparameter optimizer (None keeps the kernel fixed)"},
        "n_restarts_optimizer": {"type": "int", "default": 0, "range": [0, None], "description": "Number of optimizer restarts from random initial values"},
        "random_state": {"type": "int_or_none", "default": None, "range": [0, None], "description": "Seed for the optimizer restarts"},
    }


def _get_gp_classifier_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Gaussian Process Classifier."""
    return {
        **_shared_hyperparams(),
        "max_iter_predict": {"type": "int", "default": 100, "range": [1, None], "description": "Newton iterations for the Laplace approximation"},
        "multi_class": {"type": "categorical", "default": "one_vs_rest", "choices": ["one_vs_rest", "one_vs_one"], "description": "Multiclass strategy"},
    }


def _get_gp_regressor_hyperparams() -> Dict[str, Dict[str, Any]]:
    """Get hyperparameter space for Gaussian Process Regressor."""
    return {
        **_shared_hyperparams(),
        "alpha": {"type": "float", "default": 1e-10, "range": [0.0, None], "description": "Value added to the kernel diagonal during fitting"},
        "normalize_y": {"type": "bool", "default": False, "description": "Normalize the target to zero mean and unit variance"},
    }


class GPClassifier(Deterministic):
    """
    Gaussian process classifier wrapping ``GaussianProcessClassifier``.

    Predictions are labels, not distributions.
    """

    @classmethod
    def hyperparameter_space(cls):
        return _get_gp_classifier_hyperparams()

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a Gaussian process classifier on a table and a categorical target."""
        Xmatrix = matrix(X)
        y_plain, decode = encode_target(y)

        gp = GaussianProcessClassifier(
            kernel=_build_kernel(self.kernel),
            optimizer=self.optimizer,
            n_restarts_optimizer=self.n_restarts_optimizer,
            max_iter_predict=self.max_iter_predict,
            multi_class=self.multi_class,
            random_state=self.random_state,
        )
        gp.fit(Xmatrix, y_plain)

        fitresult = (gp, decode)
        report = {"log_marginal_likelihood": float(gp.log_marginal_likelihood_value_)}

        return fitresult, None, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"kernel": fitresult[0].kernel_}

    @loggable
    def predict(self, fitresult, Xnew):
        """Predict a label for every row of a table."""
        gp, decode = fitresult
        return decode(gp.predict(matrix(Xnew)))


class GPRegressor(Deterministic):
    """Gaussian process regressor wrapping ``GaussianProcessRegressor``."""

    @classmethod
    def hyperparameter_space(cls):
        return _get_gp_regressor_hyperparams()

    @loggable
    def fit(self, verbosity: int, X, y):
        """Fit a Gaussian process regressor on a table and a continuous target."""
        Xmatrix = matrix(X)

        gp = GaussianProcessRegressor(
            kernel=_build_kernel(self.kernel),
            alpha=self.alpha,
            optimizer=self.optimizer,
            n_restarts_optimizer=self.n_restarts_optimizer,
            normalize_y=self.normalize_y,
            random_state=self.random_state,
        )
        gp.fit(Xmatrix, np.asarray(y, dtype=float))

        report = {"log_marginal_likelihood": float(gp.log_marginal_likelihood_value_)}

        return gp, None, report

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"kernel": fitresult.kernel_}

    @loggable
    def predict(self, fitresult, Xnew) -> np.ndarray:
        """Predict the posterior mean for every row of a table."""
        return fitresult.predict(matrix(Xnew))

    def predict_std(self, fitresult, Xnew) -> Tuple[np.ndarray, np.ndarray]:
        """Posterior mean and predictive standard deviation for every row."""
        mean, std = fitresult.predict(matrix(Xnew), return_std=True)
        return mean, std
