"""
Declarative hyperparameter spaces and their validation.

Every model declares one space entry per hyperparameter:

    {"type": "int", "default": -1, "range": [-1, None], "description": "..."}

Supported entry types:

- int, float: numeric value inside ``range`` ([lo, hi], ``None`` = unbounded;
  ``exclusive_min`` makes the lower bound strict)
- int_or_none: ``None`` or a valid int
- bool
- categorical: member of ``choices``
- categorical_or_float: a string from ``choices`` or a valid float
- categorical_or_callable: a string from ``choices`` or any callable
- categorical_or_object: a string from ``choices`` or an instance of ``object_type``

Invalid values are never rejected: ``validate`` swaps them for the declared
default and reports a warning for each one.
"""

import math
import numbers
from typing import Any, Dict, List, Tuple

import numpy as np


def _in_range(value, rule: Dict[str, Any]) -> bool:
    lo, hi = rule.get("range", [None, None])
    if isinstance(value, float) and math.isnan(value):
        return False
    if lo is not None:
        if rule.get("exclusive_min", False):
            if not value > lo:
                return False
        elif not value >= lo:
            return False
    if hi is not None and not value <= hi:
        return False
    return True


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_bool(value) -> bool:
    return isinstance(value, (bool, np.bool_))


def _in_choices(value, choices) -> bool:
    # arrays compare element-wise, so they never match a choice
    if hasattr(value, "__array__") and not np.isscalar(value):
        return False
    return value in choices


def _check(value, rule: Dict[str, Any]) -> Tuple[bool, Any]:
    """Return (is_valid, coerced_value) for a single hyperparameter value."""
    kind = rule["type"]
    choices = rule.get("choices", [])

    if kind == "int":
        if _is_int(value) and _in_range(value, rule):
            return True, int(value)
        return False, None

    if kind == "int_or_none":
        if value is None:
            return True, None
        if _is_int(value) and _in_range(value, rule):
            return True, int(value)
        return False, None

    if kind == "float":
        if _is_real(value) and _in_range(float(value), rule):
            return True, float(value)
        return False, None

    if kind == "bool":
        if _is_bool(value):
            return True, bool(value)
        return False, None

    if kind == "categorical":
        return _in_choices(value, choices), value

    if kind == "categorical_or_float":
        if isinstance(value, str):
            return _in_choices(value, choices), value
        if _is_real(value) and _in_range(float(value), rule):
            return True, float(value)
        return False, None

    if kind == "categorical_or_callable":
        if isinstance(value, str):
            return _in_choices(value, choices), value
        return callable(value), value

    if kind == "categorical_or_object":
        if isinstance(value, str):
            return _in_choices(value, choices), value
        return isinstance(value, rule["object_type"]), value

    raise ValueError(f"Unknown hyperparameter type: {kind}")


def validate(params: Dict[str, Any], space: Dict[str, Dict[str, Any]]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Check hyperparameter values against their space definitions.

    Pure function: ``params`` is not modified. Keys that have no entry in
    ``space`` are passed through untouched.

    Args:
        params: Mapping of hyperparameter name to proposed value
        space: Hyperparameter space of the model (see module docstring)

    Returns:
        Tuple of (corrected_params, warnings). Every invalid value in
        corrected_params is replaced by its declared default and produces one
        warning string.

    Example:
        >>> validate({"kernel": "invalid"}, {"kernel": {"type": "categorical",
        ...     "choices": ["linear", "rbf"], "default": "rbf"}})
        ({'kernel': 'rbf'}, ['kernel parameter is not valid, setting to default="rbf"'])
    """
    corrected = {}
    warnings = []
    for name, value in params.items():
        rule = space.get(name)
        if rule is None:
            corrected[name] = value
            continue
        ok, coerced = _check(value, rule)
        if ok:
            corrected[name] = coerced
        else:
            default = rule["default"]
            corrected[name] = default
            shown = f'"{default}"' if isinstance(default, str) else repr(default)
            warnings.append(f"{name} parameter is not valid, setting to default={shown}")
    return corrected, warnings


def default_params(space: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Get the default value of every hyperparameter in a space."""
    return {name: rule["default"] for name, rule in space.items()}


def describe_space(space: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Get a JSON-safe copy of a hyperparameter space (types instead of classes)."""
    out = {}
    for name, rule in space.items():
        entry = dict(rule)
        if "object_type" in entry:
            entry["object_type"] = entry["object_type"].__name__
        if callable(entry.get("default")):
            entry["default"] = repr(entry["default"])
        out[name] = entry
    return out
