"""Bounds on the strength of unobserved confounding from observed benchmarks.

A benchmark covariate ``Xj`` anchors how strong an omitted confounder could
plausibly be: a confounder ``kd`` times as strongly associated with the
treatment and ``ky`` times as strongly associated with the outcome as
``Xj`` implies the partial R2 pair (r2dz_x, r2yz_dx) computed here, see
Cinelli & Hazlett (2020), section 4.4.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats

from .bias import _adjusted_estimate, _adjusted_se
from .core.base import (
    ArgumentError,
    BoundClippedWarning,
    DomainError,
    InfeasibleBoundError,
)
from .core.regression import RegressionSummary
from .statistics import group_partial_r2
from .utils import (
    ArrayLike,
    EstimateInputs,
    check_alpha,
    check_covariates,
    check_r2,
    resolve_estimate,
    standardize_input,
)

logger = logging.getLogger(__name__)

BenchmarkCovariates = str | Sequence[str] | Mapping[str, str | Sequence[str]]

BOUND_COLUMNS = ["bound_label", "r2dz_x", "r2yz_dx"]
ADJUSTED_COLUMNS = [
    "treatment",
    "adjusted_estimate",
    "adjusted_se",
    "adjusted_t",
    "adjusted_lower_CI",
    "adjusted_upper_CI",
]


@dataclass(frozen=True, eq=False)
class BoundsResult:
    """Bound rows together with the non-fatal diagnostics raised computing them.

    Attributes:
        frame: One row per (benchmark, multiplier) with at least the columns
            ``bound_label``, ``r2dz_x`` and ``r2yz_dx``
        warnings: Messages for bounds on r2yz_dx that were clipped to 1
    """

    frame: pd.DataFrame
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0


def label_maker(
    benchmark_covariate: str | None, kd: float, ky: float, digits: int = 2
) -> str:
    """Human-readable bound label, e.g. ``"2.0x female"`` or ``"1.0/2.0x female"``."""
    if benchmark_covariate is None:
        return "manual"

    if ky == kd:
        multiplier_text = str(round(float(ky), digits))
    else:
        multiplier_text = f"{round(float(kd), digits)}/{round(float(ky), digits)}"
    return f"{multiplier_text}x {benchmark_covariate}"


def _multipliers(
    kd: ArrayLike, ky: ArrayLike | None
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    kd_arr = standardize_input(kd, "kd")
    ky_arr = kd_arr.copy() if ky is None else standardize_input(ky, "ky")

    if kd_arr.size != ky_arr.size:
        raise ArgumentError(
            f"kd and ky must be the same length, got {kd_arr.size} and {ky_arr.size}"
        )
    for name, arr in (("kd", kd_arr), ("ky", ky_arr)):
        if np.any(arr < 0):
            raise DomainError(name, arr.tolist(), "must be non-negative")
    return kd_arr, ky_arr


def _normalize_benchmarks(
    benchmark_covariates: BenchmarkCovariates,
) -> dict[str, list[str]]:
    """Map every benchmark label to the covariate(s) it stands for."""
    if isinstance(benchmark_covariates, str):
        return {benchmark_covariates: [benchmark_covariates]}
    if isinstance(benchmark_covariates, Mapping):
        return {
            str(label): [covs] if isinstance(covs, str) else list(covs)
            for label, covs in benchmark_covariates.items()
        }
    return {str(b): [b] for b in benchmark_covariates}


def _bound_rows(
    label: str,
    r2dxj_x: float,
    r2yxj_dx: float,
    kd: NDArray[np.float64],
    ky: NDArray[np.float64],
    messages: list[str],
) -> list[dict[str, object]]:
    """Steps 2-5 of benchmark bounding for a single benchmark."""
    with np.errstate(divide="ignore", invalid="ignore"):
        r2dz_x = kd * (r2dxj_x / (1 - r2dxj_x))
    if np.any(np.isnan(r2dz_x)):
        raise DomainError("r2dxj_x", r2dxj_x, "must be strictly less than 1")
    if np.any(r2dz_x >= 1):
        raise InfeasibleBoundError("r2dz_x", label, kd[r2dz_x >= 1].tolist())

    r2zxj_xd = kd * r2dxj_x**2 / ((1 - kd * r2dxj_x) * (1 - r2dxj_x))
    if np.any(r2zxj_xd >= 1):
        raise InfeasibleBoundError("r2zxj_xd", label, kd[r2zxj_xd >= 1].tolist())

    with np.errstate(divide="ignore"):
        r2yz_dx = ((np.sqrt(ky) + np.sqrt(r2zxj_xd)) / np.sqrt(1 - r2zxj_xd)) ** 2 * (
            r2yxj_dx / (1 - r2yxj_dx)
        )

    clipped = r2yz_dx >= 1
    if np.any(clipped):
        message = (
            f"Implied bound on r2yz_dx greater than 1 for '{label}' "
            f"(ky = {ky[clipped].tolist()}), try lower kd and/or ky. "
            "Setting r2yz_dx to 1."
        )
        logger.warning(message)
        messages.append(message)
        warnings.warn(message, BoundClippedWarning, stacklevel=3)
        r2yz_dx = np.where(clipped, 1.0, r2yz_dx)

    return [
        {
            "bound_label": label_maker(label, kd[j], ky[j]),
            "r2dz_x": float(r2dz_x[j]),
            "r2yz_dx": float(r2yz_dx[j]),
        }
        for j in range(kd.size)
    ]


def ovb_partial_r2_bound(
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    r2dxj_x: ArrayLike | None = None,
    r2yxj_dx: ArrayLike | None = None,
    benchmark_covariates: BenchmarkCovariates | None = None,
    kd: ArrayLike = 1,
    ky: ArrayLike | None = None,
) -> BoundsResult | None:
    """Bound the strength of an unobserved confounder using observed covariates.

    Adjusted estimates are not computed here; see ``ovb_bounds``.

    Args:
        model: Fitted outcome regression
        treatment: Name of the treatment variable
        r2dxj_x: Partial R2 of the benchmark covariate with the treatment
            (manual mode, no model needed)
        r2yxj_dx: Partial R2 of the benchmark covariate with the outcome
            (manual mode, no model needed)
        benchmark_covariates: Covariate name, list of names, or mapping from
            label to a name or group of names (group benchmarks use the
            group partial R2)
        kd: Multiple(s) of the benchmark's association with the treatment
        ky: Multiple(s) of the benchmark's association with the outcome;
            defaults to ``kd``

    Returns:
        BoundsResult with one row per benchmark and multiplier, benchmarks in
        the given order, or None if there is nothing to bound

    Raises:
        ArgumentError: If neither or both input modes are given
        InfeasibleBoundError: If a multiplier implies r2dz_x >= 1 or
            r2zxj_xd >= 1
    """
    has_model = model is not None and treatment is not None
    has_manual = r2dxj_x is not None and r2yxj_dx is not None
    if not has_model and not has_manual:
        raise ArgumentError(
            "ovb_partial_r2_bound requires either a fitted regression model and "
            "a treatment name or the partial R2 values of the benchmark "
            "covariate, r2dxj_x and r2yxj_dx"
        )
    if model is not None and (r2dxj_x is not None or r2yxj_dx is not None):
        raise ArgumentError(
            "ovb_partial_r2_bound accepts either a fitted regression model and "
            "a treatment name or the partial R2 values r2dxj_x and r2yxj_dx of "
            "the benchmark covariate, not both"
        )

    kd_arr, ky_arr = _multipliers(kd, ky)

    if has_manual:
        r2d, r2y = check_r2(r2dxj_x, r2yxj_dx, names=("r2dxj_x", "r2yxj_dx"))
        if benchmark_covariates is None:
            labels = ["manual"] * r2d.size
        elif isinstance(benchmark_covariates, str):
            labels = [benchmark_covariates]
        else:
            labels = [str(b) for b in benchmark_covariates]
        if len(labels) != r2d.size:
            raise ArgumentError(
                f"Got {len(labels)} benchmark labels for {r2d.size} "
                "manual benchmark partial R2 values"
            )
        benchmarks = list(zip(labels, r2d, r2y))
    else:
        if benchmark_covariates is None:
            return None
        groups = _normalize_benchmarks(benchmark_covariates)
        requested = [c for covs in groups.values() for c in covs]
        check_covariates(model.coefficient_names(), [treatment, *requested])
        if treatment in requested:
            raise ArgumentError(
                f"The treatment '{treatment}' cannot be used as a benchmark covariate"
            )

        treatment_fit = model.treatment_regression(treatment)
        benchmarks = []
        for label, covs in groups.items():
            r2d_j = group_partial_r2(model=treatment_fit, covariates=covs)
            r2y_j = group_partial_r2(model=model, covariates=covs)
            logger.debug(
                f"Benchmark '{label}': r2dxj_x={r2d_j:.6f}, r2yxj_dx={r2y_j:.6f}"
            )
            benchmarks.append((label, r2d_j, r2y_j))

    messages: list[str] = []
    rows = []
    for label, r2d_j, r2y_j in benchmarks:
        rows.extend(_bound_rows(label, r2d_j, r2y_j, kd_arr, ky_arr, messages))

    return BoundsResult(
        frame=pd.DataFrame(rows, columns=BOUND_COLUMNS), warnings=tuple(messages)
    )


def add_adjusted_estimates(
    frame: pd.DataFrame,
    inputs: EstimateInputs,
    treatment: str | None,
    alpha: float = 0.05,
    h0: float = 0,
    reduce: bool = True,
) -> pd.DataFrame:
    """Join bound rows with the bias-adjusted statistics they imply.

    Adjustments are always made to the coefficient of interest described
    by ``inputs``, never to the benchmark covariate's own statistics.
    Confidence intervals use ``|t_{alpha/2, dof}|`` standard errors.

    Returns:
        A new DataFrame; ``frame`` is left untouched
    """
    alpha = check_alpha(alpha)
    out = frame.copy()
    r2dz_x, r2yz_dx = check_r2(out["r2dz_x"].to_numpy(), out["r2yz_dx"].to_numpy())

    estimate = _adjusted_estimate(r2dz_x, r2yz_dx, inputs, reduce)
    se = _adjusted_se(r2dz_x, r2yz_dx, inputs)
    se_multiple = abs(stats.t.ppf(alpha / 2, inputs.dof))

    out["treatment"] = treatment
    out["adjusted_estimate"] = estimate
    out["adjusted_se"] = se
    # r2yz_dx clipped to 1 leaves no residual outcome variance
    with np.errstate(divide="ignore"):
        out["adjusted_t"] = (estimate - h0) / se
    out["adjusted_lower_CI"] = estimate - se_multiple * se
    out["adjusted_upper_CI"] = estimate + se_multiple * se
    return out


def ovb_bounds(
    model: RegressionSummary,
    treatment: str,
    benchmark_covariates: BenchmarkCovariates | None = None,
    kd: ArrayLike = 1,
    ky: ArrayLike | None = None,
    alpha: float = 0.05,
    h0: float = 0,
    reduce: bool = True,
    bound: str = "partial_r2",
    adjusted_estimates: bool = True,
) -> BoundsResult:
    """Bounds on the strength of unobserved confounders using observed covariates.

    Args:
        model: Fitted outcome regression
        treatment: Name of the treatment variable
        benchmark_covariates: Covariate(s) to use for benchmark bounding
        kd: Multiple(s) of the benchmark's association with the treatment
        ky: Multiple(s) of the benchmark's association with the outcome;
            defaults to ``kd``
        alpha: Significance level of the adjusted confidence intervals
        h0: Null hypothesis value for the adjusted t-statistic
        reduce: Whether confounding reduces the absolute estimate
        bound: Type of bound; only ``"partial_r2"`` is available
        adjusted_estimates: Whether to add bias-adjusted estimates, standard
            errors, t-statistics and confidence intervals

    Returns:
        BoundsResult with the bound rows

    Example:
        >>> result = ovb_bounds(model, "directlyharmed",
        ...                     benchmark_covariates="female", kd=[1, 2, 3])
        >>> result.frame[["bound_label", "r2dz_x", "adjusted_estimate"]]
    """
    if bound != "partial_r2":
        raise ArgumentError(
            f"Only partial R2 bounds are implemented, got bound={bound!r}"
        )
    if benchmark_covariates is None:
        raise ArgumentError("ovb_bounds requires benchmark_covariates")

    result = ovb_partial_r2_bound(
        model=model,
        treatment=treatment,
        benchmark_covariates=benchmark_covariates,
        kd=kd,
        ky=ky,
    )
    if not adjusted_estimates:
        return result

    inputs = resolve_estimate("ovb_bounds", model, treatment)
    frame = add_adjusted_estimates(
        result.frame, inputs, treatment, alpha=alpha, h0=h0, reduce=reduce
    )
    return BoundsResult(frame=frame, warnings=result.warnings)
