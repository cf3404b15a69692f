"""Input validation and normalization shared by every public entry point.

Each public function accepts either raw summary statistics or a fitted
regression plus variable name(s). The resolvers in this module turn any
supported combination into the canonical inputs of the numeric core, so
the formulas themselves never branch on input shape.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from .core.base import ArgumentError, CovariateNotFoundError, DomainError
from .core.regression import RegressionSummary

ArrayLike = float | int | Sequence[float] | NDArray[Any] | pd.Series


@dataclass(frozen=True)
class EstimateInputs:
    """Canonical (estimate, se, dof) triple of the coefficient of interest."""

    estimate: float | None
    se: float
    dof: int


def standardize_input(value: ArrayLike, name: str = "value") -> NDArray[np.float64]:
    """Convert a scalar or array-like to a 1D float array with validation.

    Args:
        value: Scalar, list, numpy array or pandas Series
        name: Name of the argument for error messages

    Returns:
        1D numpy array of floats

    Raises:
        ArgumentError: If the value is None or not one-dimensional
        DomainError: If the value contains missing entries
    """
    if value is None:
        raise ArgumentError(f"{name} cannot be None")

    if isinstance(value, pd.Series):
        arr = np.asarray(value.values, dtype=float)
    else:
        arr = np.asarray(value, dtype=float)

    if arr.ndim == 0:
        arr = arr.reshape(1)
    elif arr.ndim > 1:
        if arr.ndim == 2 and 1 in arr.shape:
            arr = arr.ravel()
        else:
            raise ArgumentError(
                f"{name} has shape {arr.shape} but expected a scalar or 1D array"
            )

    if np.any(np.isnan(arr)):
        raise DomainError(name, value, "must not contain missing values")

    return arr


def is_scalar(value: Any) -> bool:
    """True for plain numbers and 0-d arrays."""
    return np.ndim(value) == 0


def collapse(arr: NDArray[np.float64], scalar: bool) -> float | NDArray[np.float64]:
    """Return a float when the inputs were scalar, otherwise the array."""
    if scalar:
        return float(arr[0])
    return arr


def check_r2(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    names: tuple[str, str] = ("r2dz_x", "r2yz_dx"),
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Validate a pair of partial R2 values and pair them positionally.

    A scalar paired with an array is broadcast to the array's length;
    two arrays must have the same length.

    Raises:
        DomainError: If any value lies outside [0, 1]
        ArgumentError: If two arrays have different lengths
    """
    arrays = []
    for name, r2 in zip(names, (r2dz_x, r2yz_dx)):
        arr = standardize_input(r2, name=name)
        bad = arr[(arr < 0) | (arr > 1)]
        if bad.size > 0:
            raise DomainError(
                name, bad.tolist(), "must be a number or array of numbers in [0, 1]"
            )
        arrays.append(arr)

    x, y = arrays
    if x.size != y.size:
        if x.size == 1:
            x = np.repeat(x, y.size)
        elif y.size == 1:
            y = np.repeat(y, x.size)
        else:
            raise ArgumentError(
                f"{names[0]} and {names[1]} must have the same length, "
                f"got {x.size} and {y.size}"
            )
    return x, y


def check_q(q: float) -> float:
    """Validate the fraction of the estimate to be explained away."""
    if q is None or not np.isfinite(q) or q < 0:
        raise DomainError("q", q, "must be greater than or equal to 0")
    return float(q)


def check_alpha(alpha: float) -> float:
    """Validate a significance level."""
    if alpha is None or not 0.0 <= alpha <= 1.0:
        raise DomainError("alpha", alpha, "must be in [0, 1]")
    return float(alpha)


def check_se(se: float | Sequence[float], positive: bool = False) -> float:
    """Validate a standard error, unwrapping single-element containers.

    With ``positive`` a zero standard error is rejected as well, for
    callers that divide by it to form a t-statistic.
    """
    if not is_scalar(se):
        values = np.asarray(se, dtype=float).ravel()
        if values.size != 1:
            raise ArgumentError("se must contain a single number")
        se = values[0]
    se = float(se)
    if not np.isfinite(se) or se < 0:
        raise DomainError("se", se, "must be greater than or equal to 0")
    if positive and se == 0:
        raise DomainError("se", se, "must be greater than 0 to form a t-statistic")
    return se


def check_dof(dof: float, minimum: int = 0) -> int:
    """Validate residual degrees of freedom (a whole number above ``minimum``)."""
    if dof is None or not np.isfinite(dof) or dof <= minimum:
        raise DomainError(
            "dof", dof, f"degrees of freedom must be greater than {minimum}"
        )
    if float(dof) != int(dof):
        raise DomainError("dof", dof, "degrees of freedom must be a whole number")
    return int(dof)


def check_covariates(
    all_names: Sequence[str], covariates: str | Sequence[str] | None
) -> list[str] | None:
    """Normalize covariate names and check they all exist in the model.

    Raises:
        TypeError: If a covariate name is not a string
        CovariateNotFoundError: Listing every name absent from the model
    """
    if covariates is None:
        return None
    if isinstance(covariates, str):
        covariates = [covariates]
    covariates = list(covariates)

    non_strings = [c for c in covariates if not isinstance(c, str)]
    if non_strings:
        raise TypeError(f"Covariate names must be strings, got {non_strings!r}")

    not_found = [c for c in covariates if c not in all_names]
    if not_found:
        raise CovariateNotFoundError(not_found)
    return covariates


def resolve_t_statistic(
    function_name: str,
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    t_statistic: ArrayLike | None = None,
    dof: int | None = None,
) -> tuple[NDArray[np.float64], int, bool]:
    """Resolve (model, covariates) or (t_statistic, dof) into canonical inputs.

    Returns:
        Tuple of (t-statistics as array, dof, whether the input was scalar)

    Raises:
        ArgumentError: If neither or both input modes are given
    """
    if model is None and (t_statistic is None or dof is None):
        raise ArgumentError(
            f"{function_name} requires either a fitted regression model or "
            "a t-statistic and degrees of freedom"
        )
    if model is not None and (t_statistic is not None or dof is not None):
        raise ArgumentError(
            f"{function_name} accepts either a fitted regression model or a "
            "t-statistic and degrees of freedom, not both"
        )

    if model is not None:
        names = check_covariates(model.coefficient_names(), covariates)
        if names is None:
            names = model.coefficient_names()
        t = np.array([model.coefficient(name).t_statistic for name in names])
        return t, check_dof(model.residual_dof()), isinstance(covariates, str)

    scalar = is_scalar(t_statistic)
    return standardize_input(t_statistic, "t_statistic"), check_dof(dof), scalar


def resolve_estimate(
    function_name: str,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    estimate_is_param: bool = True,
    positive_se: bool = False,
) -> EstimateInputs:
    """Resolve (model, treatment) or raw statistics into (estimate, se, dof).

    Exactly one of the two input modes must be given; otherwise an
    ``ArgumentError`` names both combinations. Raw statistics passed
    alongside a model are rejected rather than ignored.
    """
    has_model = model is not None and treatment is not None
    if estimate_is_param:
        has_stats = estimate is not None and se is not None and dof is not None
        needed = "the current estimate, standard error, and degrees of freedom"
    else:
        has_stats = se is not None and dof is not None
        needed = "the current standard error and degrees of freedom"

    if not has_model and not has_stats:
        raise ArgumentError(
            f"in addition to r2dz_x and r2yz_dx, {function_name} requires either "
            f"a fitted regression model and a treatment name or {needed}"
        )
    if model is not None and any(v is not None for v in (estimate, se, dof)):
        raise ArgumentError(
            f"{function_name} accepts either a fitted regression model and a "
            f"treatment name or {needed}, not both"
        )

    if has_model:
        check_covariates(model.coefficient_names(), treatment)
        coef = model.coefficient(treatment)
        estimate, se, dof = coef.estimate, coef.se, model.residual_dof()

    if estimate is not None:
        if not is_scalar(estimate):
            values = np.asarray(estimate, dtype=float).ravel()
            if values.size != 1:
                raise ArgumentError("estimate must contain a single number")
            estimate = values[0]
        estimate = float(estimate)

    return EstimateInputs(
        estimate=estimate, se=check_se(se, positive=positive_se), dof=check_dof(dof)
    )
