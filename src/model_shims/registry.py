"""
Static metadata registry used to discover and load the model shims.

The registry is built once at import time and is read-only afterwards. It is
keyed by ``(model name, package name)`` so that the same model name may be
provided by more than one package.
"""

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import sklearn

from model_shims.constants import (
    MODEL_DESCRIPTIONS,
    SKLEARN_PACKAGE,
    TABLE_CONTINUOUS,
    VECTOR_CONTINUOUS,
    VECTOR_FINITE,
)
from model_shims.infrastructure.logging import loggable
from model_shims.interface.base import Model
from model_shims.interface.data import input_scitype, target_scitype
from model_shims.interface.hyperparameters import describe_space
from model_shims.models.decision_tree import DecisionTreeClassifier, DecisionTreeRegressor
from model_shims.models.gaussian_process import GPClassifier, GPRegressor
from model_shims.models.svm import (
    SVMClassifier,
    SVMLClassifier,
    SVMLRegressor,
    SVMNuClassifier,
    SVMNuRegressor,
    SVMRegressor,
)


@dataclass(frozen=True)
class ModelMetadata:
    """Everything a caller needs to know about a model before loading it."""

    name: str
    load_path: str
    package_name: str
    package_version: str
    package_url: str
    package_license: str
    is_pure_python: bool
    is_wrapper: bool
    input_scitype: str
    target_scitype: str
    prediction_type: str
    description: str
    hyperparameters: Tuple[str, ...]
    supports_weights: bool = False
    model_type: Type[Model] = field(default=None, repr=False, compare=False)

    def as_dict(self) -> Dict[str, Any]:
        """JSON-safe dictionary of the metadata (without the model class)."""
        out = asdict(self)
        out.pop("model_type")
        out["hyperparameters"] = list(self.hyperparameters)
        return out


def _metadata(model_type: Type[Model], target: str) -> ModelMetadata:
    return ModelMetadata(
        name=model_type.__name__,
        load_path=f"{model_type.__module__}.{model_type.__name__}",
        package_name=SKLEARN_PACKAGE["name"],
        package_version=sklearn.__version__,
        package_url=SKLEARN_PACKAGE["url"],
        package_license=SKLEARN_PACKAGE["license"],
        is_pure_python=SKLEARN_PACKAGE["is_pure_python"],
        is_wrapper=SKLEARN_PACKAGE["is_wrapper"],
        input_scitype=TABLE_CONTINUOUS,
        target_scitype=target,
        prediction_type=model_type.prediction_type,
        description=MODEL_DESCRIPTIONS[model_type.__name__],
        hyperparameters=tuple(model_type.hyperparameter_space()),
        model_type=model_type,
    )


CLASSIFICATION_MODELS = [
    DecisionTreeClassifier,
    SVMClassifier,
    SVMNuClassifier,
    SVMLClassifier,
    GPClassifier,
]

REGRESSION_MODELS = [
    DecisionTreeRegressor,
    SVMRegressor,
    SVMNuRegressor,
    SVMLRegressor,
    GPRegressor,
]


def _build_registry() -> Mapping[Tuple[str, str], ModelMetadata]:
    entries = [_metadata(m, VECTOR_FINITE) for m in CLASSIFICATION_MODELS]
    entries += [_metadata(m, VECTOR_CONTINUOUS) for m in REGRESSION_MODELS]
    return MappingProxyType({(e.name, e.package_name): e for e in entries})


MODEL_REGISTRY = _build_registry()


def _lookup(name: str, pkg: Optional[str] = None) -> ModelMetadata:
    """Find the single registry entry for a model name (and package)."""
    candidates = [meta for (n, p), meta in MODEL_REGISTRY.items()
                  if n == name and (pkg is None or p == pkg)]
    if not candidates:
        where = f" in package '{pkg}'" if pkg is not None else ""
        raise ValueError(f"Unknown model '{name}'{where}. Available: {list_models(pkg)}")
    if len(candidates) > 1:
        packages = [meta.package_name for meta in candidates]
        raise ValueError(f"Model '{name}' is provided by several packages {packages}; specify pkg")
    return candidates[0]


def models(X=None, y=None) -> List[Dict[str, Any]]:
    """
    List metadata of all registered models, optionally only those matching data.

    Args:
        X: Optional input table; keep only models accepting its scientific type
        y: Optional target; keep only models accepting its scientific type

    Returns:
        List of metadata dictionaries, sorted by model name
    """
    X_type = input_scitype(X) if X is not None else None
    y_type = target_scitype(y) if y is not None else None

    matches = []
    for meta in MODEL_REGISTRY.values():
        if X is not None and meta.input_scitype != X_type:
            continue
        if y is not None and meta.target_scitype != y_type:
            continue
        matches.append(meta.as_dict())
    return sorted(matches, key=lambda m: (m["name"], m["package_name"]))


def list_models(pkg: Optional[str] = None) -> List[str]:
    """
    List the names of all registered models.

    Args:
        pkg: Optional package name to restrict the listing to

    Returns:
        Sorted list of model names
    """
    return sorted({n for (n, p) in MODEL_REGISTRY if pkg is None or p == pkg})


def info(name: str, pkg: Optional[str] = None) -> Dict[str, Any]:
    """
    Get the metadata of a single model.

    Args:
        name: Model name, e.g. "DecisionTreeClassifier"
        pkg: Package name, needed only when several packages provide ``name``

    Returns:
        Metadata dictionary (name, load_path, package details, scientific
        types, prediction type, description and hyperparameter names)
    """
    return _lookup(name, pkg).as_dict()


@loggable
def load(name: str, pkg: Optional[str] = None, verbosity: int = 1) -> Type[Model]:
    """Load a model type from the registry by name."""
    meta = _lookup(name, pkg)
    if verbosity >= 1:
        print(f"A model type \"{meta.name}\" is in scope, loaded from {meta.package_name} {meta.package_version}.")
    return meta.model_type


def get_hyperparameter_space(model_name: str) -> Dict[str, Dict[str, Any]]:
    """
    Get the hyperparameter space of a specific model.

    Each hyperparameter is described by its type, default value, valid range
    or choices, and a human-readable description. A value outside the space
    is reset to its default when assigned to a model.

    Args:
        model_name: Name of the model (e.g., "SVMClassifier", "GPRegressor")

    Returns:
        Dictionary mapping hyperparameter names to their space definitions.

    Example:
        >>> space = get_hyperparameter_space("SVMClassifier")
        >>> space["kernel"]["default"]
        'rbf'
    """
    return describe_space(_lookup(model_name).model_type.hyperparameter_space())


def get_all_hyperparameter_spaces() -> Dict[str, Dict[str, Dict[str, Any]]]:
    """
    Get hyperparameter spaces for all registered models.

    Returns:
        Dictionary mapping model names to their hyperparameter spaces
    """
    return {
        meta.name: describe_space(meta.model_type.hyperparameter_space())
        for meta in MODEL_REGISTRY.values()
    }


def get_all_discovery_tools():
    """Get all discovery tools for registration."""
    return [
        list_models,
        get_hyperparameter_space,
        get_all_hyperparameter_spaces,
    ]
