"""Model-interface contract shared by all shims."""

from model_shims.interface.base import Model, Deterministic, Probabilistic
from model_shims.interface.data import (
    Decoder,
    UnivariateFinite,
    encode_target,
    matrix,
    input_scitype,
    target_scitype,
)
from model_shims.interface.hyperparameters import validate, default_params, describe_space

__all__ = [
    "Model",
    "Deterministic",
    "Probabilistic",
    "Decoder",
    "UnivariateFinite",
    "encode_target",
    "matrix",
    "input_scitype",
    "target_scitype",
    "validate",
    "default_params",
    "describe_space",
]
