"""Bias and bias-adjusted quantities for the partial R2 parameterization.

Given the two sensitivity parameters of a putative confounder ``z``

- ``r2dz_x``: partial R2 of ``z`` with the treatment ``d``, covariates ``x``
  partialed out
- ``r2yz_dx``: partial R2 of ``z`` with the outcome ``y``, covariates ``x``
  and treatment ``d`` partialed out

these functions compute the implied bias and the bias-adjusted estimate,
standard error, t-statistic and partial R2. Both parameters may be scalars
or parallel arrays (paired by position). The coefficient of interest is
given either as a fitted regression and treatment name or as the raw
(estimate, se, dof) triple.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .core.base import DomainError
from .core.regression import RegressionSummary
from .statistics import partial_f, partial_r2
from .utils import (
    ArrayLike,
    EstimateInputs,
    check_dof,
    check_r2,
    collapse,
    is_scalar,
    resolve_estimate,
)

Result = float | NDArray[np.float64]


def _bias_factor(
    r2dz_x: NDArray[np.float64], r2yz_dx: NDArray[np.float64]
) -> NDArray[np.float64]:
    if np.any(r2dz_x >= 1):
        raise DomainError(
            "r2dz_x", r2dz_x[r2dz_x >= 1].tolist(), "must be strictly less than 1"
        )
    return np.sqrt(r2yz_dx * r2dz_x / (1 - r2dz_x))


def _bias(
    r2dz_x: NDArray[np.float64], r2yz_dx: NDArray[np.float64], se: float, dof: int
) -> NDArray[np.float64]:
    return _bias_factor(r2dz_x, r2yz_dx) * se * np.sqrt(dof)


def _adjusted_estimate(
    r2dz_x: NDArray[np.float64],
    r2yz_dx: NDArray[np.float64],
    inputs: EstimateInputs,
    reduce: bool,
) -> NDArray[np.float64]:
    b = _bias(r2dz_x, r2yz_dx, inputs.se, inputs.dof)
    sign = np.sign(inputs.estimate)
    if reduce:
        return sign * (abs(inputs.estimate) - b)
    return sign * (abs(inputs.estimate) + b)


def _adjusted_se(
    r2dz_x: NDArray[np.float64],
    r2yz_dx: NDArray[np.float64],
    inputs: EstimateInputs,
) -> NDArray[np.float64]:
    dof = check_dof(inputs.dof, minimum=1)
    if np.any(r2dz_x >= 1):
        raise DomainError(
            "r2dz_x", r2dz_x[r2dz_x >= 1].tolist(), "must be strictly less than 1"
        )
    return np.sqrt((1 - r2yz_dx) / (1 - r2dz_x)) * inputs.se * np.sqrt(dof / (dof - 1))


def _prepare(
    function_name: str,
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None,
    treatment: str | None,
    estimate: float | None,
    se: float | None,
    dof: int | None,
    estimate_is_param: bool = True,
    positive_se: bool = False,
) -> tuple[NDArray[np.float64], NDArray[np.float64], EstimateInputs, bool]:
    inputs = resolve_estimate(
        function_name, model, treatment, estimate, se, dof, estimate_is_param,
        positive_se,
    )
    x, y = check_r2(r2dz_x, r2yz_dx)
    return x, y, inputs, is_scalar(r2dz_x) and is_scalar(r2yz_dx)


def bias_factor(r2dz_x: ArrayLike, r2yz_dx: ArrayLike) -> Result:
    """Nonlinear kernel of the bias, ``√(r2yz_dx · r2dz_x / (1 - r2dz_x))``.

    Raises:
        DomainError: If ``r2dz_x`` equals 1 or any value lies outside [0, 1]
    """
    x, y = check_r2(r2dz_x, r2yz_dx)
    return collapse(_bias_factor(x, y), is_scalar(r2dz_x) and is_scalar(r2yz_dx))


def bias(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    se: float | None = None,
    dof: int | None = None,
) -> Result:
    """Compute the omitted variable bias, ``bias_factor · se · √dof``.

    This is the maximum shift in the point estimate a confounder with the
    given partial R2 values can produce.
    """
    x, y, inputs, scalar = _prepare(
        "bias", r2dz_x, r2yz_dx, model, treatment, None, se, dof,
        estimate_is_param=False,
    )
    return collapse(_bias(x, y, inputs.se, inputs.dof), scalar)


def adjusted_estimate(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    reduce: bool = True,
) -> Result:
    """Compute the bias-adjusted coefficient estimate.

    Args:
        r2dz_x: Partial R2 of the confounder with the treatment
        r2yz_dx: Partial R2 of the confounder with the outcome
        model: Fitted regression
        treatment: Name of the treatment coefficient in ``model``
        estimate: Unadjusted estimate, used when no model is given
        se: Unadjusted standard error, used when no model is given
        dof: Residual degrees of freedom, used when no model is given
        reduce: Whether the confounder moves the estimate towards zero
            (default) or away from it

    Returns:
        ``sign(estimate) · (|estimate| ∓ bias)``
    """
    x, y, inputs, scalar = _prepare(
        "adjusted_estimate", r2dz_x, r2yz_dx, model, treatment, estimate, se, dof
    )
    return collapse(_adjusted_estimate(x, y, inputs, reduce), scalar)


def adjusted_se(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    se: float | None = None,
    dof: int | None = None,
) -> Result:
    """Compute the bias-adjusted standard error.

    ``se · √((1 - r2yz_dx) / (1 - r2dz_x)) · √(dof / (dof - 1))``; one degree
    of freedom is consumed by the confounder, so ``dof`` must exceed 1.
    """
    x, y, inputs, scalar = _prepare(
        "adjusted_se", r2dz_x, r2yz_dx, model, treatment, None, se, dof,
        estimate_is_param=False,
    )
    return collapse(_adjusted_se(x, y, inputs), scalar)


def adjusted_t(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    reduce: bool = True,
    h0: float = 0,
) -> Result:
    """Compute the bias-adjusted t-statistic, ``(adjusted_estimate - h0) / adjusted_se``."""
    x, y, inputs, scalar = _prepare(
        "adjusted_t", r2dz_x, r2yz_dx, model, treatment, estimate, se, dof,
        positive_se=True,
    )
    new_t = (_adjusted_estimate(x, y, inputs, reduce) - h0) / _adjusted_se(
        x, y, inputs
    )
    return collapse(new_t, scalar)


def adjusted_partial_r2(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    reduce: bool = True,
    h0: float = 0,
) -> Result:
    """Compute the bias-adjusted partial R2 of the treatment with the outcome.

    Based on ``adjusted_t`` at ``dof - 1`` degrees of freedom.
    """
    x, y, inputs, scalar = _prepare(
        "adjusted_partial_r2", r2dz_x, r2yz_dx, model, treatment, estimate, se, dof,
        positive_se=True,
    )
    new_t = (_adjusted_estimate(x, y, inputs, reduce) - h0) / _adjusted_se(
        x, y, inputs
    )
    return collapse(
        np.asarray(partial_r2(t_statistic=new_t, dof=inputs.dof - 1)), scalar
    )


def relative_bias(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
) -> Result:
    """Compute the bias relative to the current estimate.

    Ratio of the bias factor to the partial f of the treatment,
    ``bias_factor / partial_f(|estimate / se|, dof)``. A value of 1 means a
    confounder of this strength would bring the estimate to zero.
    """
    x, y, inputs, scalar = _prepare(
        "relative_bias", r2dz_x, r2yz_dx, model, treatment, estimate, se, dof,
        positive_se=True,
    )
    f = partial_f(t_statistic=abs(inputs.estimate / inputs.se), dof=inputs.dof)
    return collapse(_bias_factor(x, y) / f, scalar)


def rel_bias(r_est: ArrayLike, est: ArrayLike) -> Result:
    """Relative change ``(r_est - est) / r_est`` between a restricted and a full estimate."""
    r = np.asarray(r_est, dtype=float)
    e = np.asarray(est, dtype=float)
    if np.any(r == 0):
        raise DomainError("r_est", r_est, "must be non-zero")
    out = (r - e) / r
    return float(out) if out.ndim == 0 else out
