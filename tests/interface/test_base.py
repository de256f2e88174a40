"""Tests for base.py - the model contract shared by every shim."""

import warnings

import pytest

from model_shims.constants import DETERMINISTIC, PROBABILISTIC
from model_shims.interface.base import Deterministic, Probabilistic
from model_shims.interface.data import UnivariateFinite


class Constant(Deterministic):
    """Predicts ``value`` for every row."""

    @classmethod
    def hyperparameter_space(cls):
        return {
            "value": {"type": "float", "default": 0.0, "range": [None, None]},
            "depth": {"type": "int", "default": 1, "range": [1, None]},
        }

    def fit(self, verbosity, X, y):
        return self.value, None, {}

    def predict(self, fitresult, Xnew):
        return [fitresult] * len(Xnew)


class Coin(Probabilistic):

    @classmethod
    def hyperparameter_space(cls):
        return {"p": {"type": "float", "default": 0.5, "range": [0.0, 1.0]}}

    def fit(self, verbosity, X, y):
        return self.p, None, {}

    def predict(self, fitresult, Xnew):
        return [UnivariateFinite(["heads", "tails"], [fitresult, 1 - fitresult]) for _ in Xnew]


def test_construction_uses_defaults():
    model = Constant()
    assert model.get_params() == {"value": 0.0, "depth": 1}
    assert model.prediction_type == DETERMINISTIC
    assert Coin.prediction_type == PROBABILISTIC


def test_invalid_keyword_at_construction_warns_and_resets():
    with pytest.warns(UserWarning, match="depth parameter is not valid, setting to default=1"):
        model = Constant(depth=0)
    assert model.depth == 1


def test_unknown_keyword_raises():
    with pytest.raises(TypeError, match="unexpected keyword"):
        Constant(width=3)


def test_assignment_is_validated():
    model = Constant()
    model.value = 2.5
    assert model.value == 2.5

    with pytest.warns(UserWarning):
        model.depth = -4
    assert model.depth == 1


def test_set_params_returns_model():
    model = Constant().set_params(value=1.0, depth=3)
    assert model.get_params() == {"value": 1.0, "depth": 3}


def test_clean_reports_and_repairs():
    model = Constant()
    # bypass validation to simulate a corrupted record
    object.__setattr__(model, "depth", "deep")
    messages = model.clean()
    assert messages == ["depth parameter is not valid, setting to default=1"]
    assert model.depth == 1
    assert model.clean() == []


def test_equality_and_repr():
    assert Constant(value=1.0) == Constant(value=1.0)
    assert Constant(value=1.0) != Constant(value=2.0)
    assert repr(Constant(value=1.0)) == "Constant(value=1.0, depth=1)"


def test_fit_predict_roundtrip_and_default_fitted_params():
    model = Constant(value=3.0)
    fitresult, cache, report = model.fit(0, [[0.0]], [1.0])
    assert model.predict(fitresult, [[1.0], [2.0]]) == [3.0, 3.0]
    assert model.fitted_params(fitresult) == {"fitresult": 3.0}


def test_predict_mode():
    model = Coin(p=0.9)
    fitresult, _, _ = model.fit(0, None, None)
    assert model.predict_mode(fitresult, [[0.0], [1.0]]) == ["heads", "heads"]


def test_valid_values_emit_no_warning():
    """Construction and assignment within the space stay silent."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        model = Constant(value=-2.0, depth=4)
        model.depth = 7
        model.set_params(value=0.5)

    assert model.get_params() == {"value": 0.5, "depth": 7}
