"""
The model-interface contract every shim implements.

A model instance is nothing but a validated hyperparameter record. Training
and prediction are explicit calls that pass the fit artifact around instead
of storing it on the model:

    fitresult, cache, report = model.fit(verbosity, X, y)
    params = model.fitted_params(fitresult)
    yhat = model.predict(fitresult, Xnew)

``Deterministic`` models predict one value per row, ``Probabilistic`` models
predict one ``UnivariateFinite`` distribution per row.
"""

import warnings
from typing import Any, Dict, List, Tuple

from model_shims.constants import DETERMINISTIC, PROBABILISTIC
from model_shims.interface.hyperparameters import default_params, validate


def _emit(messages: List[str], stacklevel: int = 3) -> None:
    if messages:
        warnings.warn("\n".join(messages), UserWarning, stacklevel=stacklevel)


class Model:
    """
    Base class for all model shims.

    Subclasses implement ``hyperparameter_space``, ``fit`` and ``predict``.
    Every hyperparameter is validated when the model is constructed and again
    whenever it is assigned; invalid values fall back to their default with a
    ``UserWarning``.
    """

    prediction_type: str = None

    @classmethod
    def hyperparameter_space(cls) -> Dict[str, Dict[str, Any]]:
        raise NotImplementedError

    def __init__(self, **params):
        space = self.hyperparameter_space()
        unknown = set(params) - set(space)
        if unknown:
            raise TypeError(
                f"{type(self).__name__}() got unexpected keyword arguments: {sorted(unknown)}"
            )
        values, messages = validate({**default_params(space), **params}, space)
        for name, value in values.items():
            object.__setattr__(self, name, value)
        _emit(messages)

    def __setattr__(self, name, value):
        space = self.hyperparameter_space()
        if name in space:
            values, messages = validate({name: value}, {name: space[name]})
            value = values[name]
            _emit(messages)
        object.__setattr__(self, name, value)

    def clean(self) -> List[str]:
        """Re-validate every hyperparameter, reset invalid ones and return the warnings."""
        values, messages = validate(self.get_params(), self.hyperparameter_space())
        for name, value in values.items():
            object.__setattr__(self, name, value)
        return messages

    def get_params(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.hyperparameter_space()}

    def set_params(self, **params) -> "Model":
        for name, value in params.items():
            setattr(self, name, value)
        return self

    def fit(self, verbosity: int, X, y) -> Tuple[Any, Any, Dict[str, Any]]:
        raise NotImplementedError

    def fitted_params(self, fitresult) -> Dict[str, Any]:
        return {"fitresult": fitresult}

    def predict(self, fitresult, Xnew):
        raise NotImplementedError

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.get_params() == other.get_params()

    __hash__ = None

    def __repr__(self):
        params = ", ".join(f"{k}={v!r}" for k, v in self.get_params().items())
        return f"{type(self).__name__}({params})"


class Deterministic(Model):
    """Model predicting a single value (label or number) per row."""

    prediction_type = DETERMINISTIC


class Probabilistic(Model):
    """Model predicting a ``UnivariateFinite`` distribution per row."""

    prediction_type = PROBABILISTIC

    def predict_mode(self, fitresult, Xnew) -> list:
        """Most probable label for every row of ``Xnew``."""
        return [d.mode() for d in self.predict(fitresult, Xnew)]
