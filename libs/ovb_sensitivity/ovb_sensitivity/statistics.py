"""Sensitivity statistics for the partial R2 parameterization of OVB.

This module implements the primitive statistics of Cinelli & Hazlett (2020):
partial R2, partial Cohen's f2, group partial R2 and the robustness value,
plus ``sensitivity_stats`` which bundles them for one coefficient.

Every function accepts either a fitted regression and covariate name(s)
or the raw t-statistic and degrees of freedom.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from .core.base import ArgumentError, SingularCovarianceError
from .core.regression import RegressionSummary
from .utils import (
    ArrayLike,
    check_alpha,
    check_covariates,
    check_dof,
    check_q,
    collapse,
    resolve_estimate,
    resolve_t_statistic,
)

logger = logging.getLogger(__name__)


def partial_r2(
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    t_statistic: ArrayLike | None = None,
    dof: int | None = None,
) -> float | NDArray[np.float64]:
    """Compute the partial R2 of a covariate in a linear regression.

    The partial R2 describes how much of the residual variance of the
    outcome (after partialing out the other covariates) a covariate explains.
    As an extreme-scenario sensitivity analysis, it is the share of the
    treatment's residual variance a confounder explaining all of the
    outcome's residual variance would need to explain to remove the effect.

    Args:
        model: Fitted regression
        covariates: Covariate name(s) to compute the partial R2 of; all
            coefficients when None
        t_statistic: t-statistic(s), used when no model is given
        dof: Residual degrees of freedom, used when no model is given

    Returns:
        ``t² / (t² + dof)``; a float for scalar input, an array otherwise

    Example:
        >>> partial_r2(t_statistic=4.18445, dof=783)
        0.02187309...
    """
    t, dof, scalar = resolve_t_statistic(
        "partial_r2", model, covariates, t_statistic, dof
    )
    return collapse(t**2 / (t**2 + dof), scalar)


def partial_f2(
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    t_statistic: ArrayLike | None = None,
    dof: int | None = None,
) -> float | NDArray[np.float64]:
    """Compute the partial (Cohen's) f2, ``t² / dof``.

    The f2 is the monotone transform ``r2 / (1 - r2)`` of the partial R2
    and is what the bias formula works with internally.
    """
    t, dof, scalar = resolve_t_statistic(
        "partial_f2", model, covariates, t_statistic, dof
    )
    return collapse(t**2 / dof, scalar)


def partial_f(
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    t_statistic: ArrayLike | None = None,
    dof: int | None = None,
) -> float | NDArray[np.float64]:
    """Square root of ``partial_f2``."""
    return np.sqrt(
        partial_f2(
            model=model, covariates=covariates, t_statistic=t_statistic, dof=dof
        )
    )


def group_partial_r2(
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    f_statistic: float | None = None,
    p: int | None = None,
    dof: int | None = None,
) -> float:
    """Partial R2 of a group of covariates in a linear regression.

    Multivariate version of ``partial_r2``. With a model, computes the Wald
    statistic ``F = β' Σ⁻¹ β / p`` for the coefficient sub-vector β and its
    covariance sub-matrix Σ, then returns ``F·p / (F·p + dof)``. For a single
    covariate this is exactly ``partial_r2`` of its t-statistic.

    Args:
        model: Fitted regression
        covariates: Names of the covariates forming the group
        f_statistic: F-statistic of the group, used when no model is given
        p: Number of parameters in the group, used when no model is given
        dof: Residual degrees of freedom, used when no model is given

    Returns:
        Group partial R2

    Raises:
        ArgumentError: If neither or both input modes are given
        CovariateNotFoundError: If any covariate is absent from the model
        SingularCovarianceError: If the covariance sub-matrix is singular,
            e.g. for perfectly collinear covariates
    """
    has_model = model is not None and covariates is not None
    has_stats = f_statistic is not None and p is not None and dof is not None
    if not has_model and not has_stats:
        raise ArgumentError(
            "group_partial_r2 requires either a fitted regression model and "
            "covariates or an f-statistic, number of parameters, and degrees "
            "of freedom"
        )
    if model is not None and any(v is not None for v in (f_statistic, p, dof)):
        raise ArgumentError(
            "group_partial_r2 accepts either a fitted regression model and "
            "covariates or an f-statistic, number of parameters, and degrees of "
            "freedom, not both"
        )

    if not has_stats:
        names = check_covariates(model.coefficient_names(), covariates)
        if len(names) == 1:
            return float(partial_r2(model=model, covariates=names[0]))

        params = model.coefficient_subset(names)
        v = model.coefficient_subset_covariance(names)
        p = len(names)
        if not np.all(np.isfinite(v)) or np.linalg.matrix_rank(v) < p:
            raise SingularCovarianceError(
                "Covariance matrix of covariates "
                f"{', '.join(names)} is singular; the covariates are collinear"
            )
        try:
            f_statistic = float(params @ np.linalg.solve(v, params)) / p
        except np.linalg.LinAlgError as e:
            raise SingularCovarianceError(
                f"Could not invert covariance matrix of {', '.join(names)}: {e}"
            ) from e
        dof = model.residual_dof()

    dof = check_dof(dof)
    return float(f_statistic * p / (f_statistic * p + dof))


def robustness_value(
    model: RegressionSummary | None = None,
    covariates: str | Sequence[str] | None = None,
    t_statistic: ArrayLike | None = None,
    dof: int | None = None,
    q: float = 1,
    alpha: float = 1.0,
) -> float | NDArray[np.float64]:
    """Compute the robustness value of a regression coefficient.

    The robustness value is the minimum strength of association, equal for
    treatment and outcome and expressed as partial R2, that omitted variables
    would need to change the estimate by a fraction ``q``. With ``alpha < 1``
    it accounts for sampling uncertainty: the confounder must bring the
    estimate to a region no longer statistically different from the null
    at level ``alpha``.

    Args:
        model: Fitted regression
        covariates: Coefficient name(s) to compute the RV for
        t_statistic: t-statistic(s), used when no model is given
        dof: Residual degrees of freedom, used when no model is given
        q: Fraction of the estimate to explain away
        alpha: Significance level; 1.0 ignores sampling uncertainty

    Returns:
        Robustness value(s) in [0, 1)

    Notes:
        With ``fq = q·|t|/√dof``, ``f_crit = |t*_{alpha/2, dof-1}|/√(dof-1)``
        and ``fqa = fq - f_crit``:

        - ``fqa < 0``: RV = 0, the estimate is not significant to begin with.
        - ``fqa > 0`` and ``fq > 1/f_crit``: the quadratic below would have
          its root beyond the attainable region, so the closed form
          ``(fq² - f_crit²) / (1 + fq²)`` is used.
        - otherwise ``RV = (√(fqa⁴ + 4fqa²) - fqa²) / 2``.

        With ``alpha = 1`` we have ``f_crit = 0`` and ``1/f_crit = ∞``, so only
        the quadratic branch can apply.
    """
    q = check_q(q)
    alpha = check_alpha(alpha)
    t, dof, scalar = resolve_t_statistic(
        "robustness_value", model, covariates, t_statistic, dof
    )

    fq = q * np.abs(t / np.sqrt(dof))
    if alpha >= 1.0:
        f_crit = 0.0
        inv_f_crit = np.inf
    else:
        check_dof(dof, minimum=1)
        f_crit = abs(stats.t.ppf(alpha / 2, dof - 1)) / np.sqrt(dof - 1)
        inv_f_crit = 1.0 / f_crit if f_crit > 0 else np.inf
    fqa = fq - f_crit

    rv = 0.5 * (np.sqrt(fqa**4 + 4 * fqa**2) - fqa**2)
    rvx = (fq**2 - f_crit**2) / (1 + fq**2)

    rv_out = np.where(fqa < 0, 0.0, rv)
    extreme = (fqa > 0) & (fq > inv_f_crit)
    rv_out = np.where(extreme, rvx, rv_out)

    return collapse(rv_out, scalar)


@dataclass(frozen=True)
class SensitivityStats:
    """Headline sensitivity statistics of one coefficient.

    Attributes:
        estimate: Unadjusted point estimate
        se: Unadjusted standard error
        t_statistic: t-statistic against the null hypothesis h0
        r2yd_x: Partial R2 of the treatment with the outcome
        rv_q: Robustness value for reducing the estimate by q
        rv_qa: Robustness value for q at significance level alpha
        f2yd_x: Partial f2 of the treatment with the outcome
        dof: Residual degrees of freedom
        h0: Null hypothesis deemed problematic
    """

    estimate: float
    se: float
    t_statistic: float
    r2yd_x: float
    rv_q: float
    rv_qa: float
    f2yd_x: float
    dof: int
    h0: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def null_hypothesis(estimate: float, q: float, reduce: bool) -> float:
    """Estimate value a bias of ``q`` times the estimate would lead to."""
    if reduce:
        return estimate * (1 - q)
    return estimate * (1 + q)


def sensitivity_stats(
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    q: float = 1,
    alpha: float = 0.05,
    reduce: bool = True,
) -> SensitivityStats:
    """Compute the robustness values, partial R2 and partial f2 of a coefficient.

    Args:
        model: Fitted regression
        treatment: Name of the treatment coefficient
        estimate: Unadjusted estimate, used when no model is given
        se: Unadjusted standard error, used when no model is given
        dof: Residual degrees of freedom, used when no model is given
        q: Fraction of the estimate to explain away
        alpha: Significance level for ``rv_qa``
        reduce: Whether confounding is assumed to reduce the absolute estimate

    Returns:
        SensitivityStats for the coefficient

    Raises:
        ArgumentError: If neither or both input modes are given
        DomainError: If the standard error is 0, leaving the t-statistic undefined
    """
    if (model is None or treatment is None) and (
        estimate is None or se is None or dof is None
    ):
        raise ArgumentError(
            "sensitivity_stats requires either a fitted regression model and a "
            "treatment name or the estimate, standard error, and degrees of freedom"
        )
    inputs = resolve_estimate(
        "sensitivity_stats", model, treatment, estimate, se, dof, positive_se=True
    )
    q = check_q(q)
    alpha = check_alpha(alpha)

    h0 = null_hypothesis(inputs.estimate, q, reduce)
    original_t = inputs.estimate / inputs.se
    t_statistic = (inputs.estimate - h0) / inputs.se

    return SensitivityStats(
        estimate=inputs.estimate,
        se=inputs.se,
        t_statistic=float(t_statistic),
        r2yd_x=float(partial_r2(t_statistic=original_t, dof=inputs.dof)),
        rv_q=float(robustness_value(t_statistic=original_t, dof=inputs.dof, q=q)),
        rv_qa=float(
            robustness_value(
                t_statistic=original_t, dof=inputs.dof, q=q, alpha=alpha
            )
        ),
        f2yd_x=float(partial_f2(t_statistic=original_t, dof=inputs.dof)),
        dof=inputs.dof,
        h0=float(h0),
    )


__all__ = [
    "SensitivityStats",
    "group_partial_r2",
    "null_hypothesis",
    "partial_f",
    "partial_f2",
    "partial_r2",
    "robustness_value",
    "sensitivity_stats",
]
