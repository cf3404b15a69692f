"""One-call sensitivity analysis of a regression coefficient.

``sensemakr`` bundles the headline sensitivity statistics, optional manual
bounds on a putative confounder and optional benchmark bounds into a single
immutable ``SensitivityReport``. Presentation (text summaries, tables and
plots) lives in ``reporting`` and ``visualization`` and reads the report
without modifying it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from shared.config import get_config

from .bounds import (
    ADJUSTED_COLUMNS,
    BOUND_COLUMNS,
    BenchmarkCovariates,
    add_adjusted_estimates,
    ovb_bounds,
    ovb_partial_r2_bound,
)
from .core.base import ArgumentError
from .core.regression import RegressionSummary
from .statistics import SensitivityStats, sensitivity_stats
from .utils import ArrayLike, EstimateInputs, check_r2, is_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SensitivityReport:
    """Result of ``sensemakr``.

    Attributes:
        treatment: Name of the treatment variable
        estimate: Unadjusted treatment coefficient
        se: Unadjusted standard error
        dof: Residual degrees of freedom
        t_statistic: t-statistic of the estimate against ``h0``
        q: Fraction of the estimate to explain away
        alpha: Significance level
        reduce: Whether confounding is assumed to reduce the absolute estimate
        h0: Null hypothesis deemed problematic
        kd: Treatment-side benchmark multipliers
        ky: Outcome-side benchmark multipliers
        benchmark_covariates: Benchmark covariate(s), if any
        r2dz_x: Manual partial R2 of the confounder with the treatment
        r2yz_dx: Manual partial R2 of the confounder with the outcome
        r2dxj_x: Manual partial R2 of a benchmark with the treatment
        r2yxj_dx: Manual partial R2 of a benchmark with the outcome
        bound_label: Label of the manual bound rows
        sensitivity_statistics: Headline statistics of the coefficient
        bounds: Manual rows first, then benchmark rows; None without bounds.
            Each access returns a copy, so the report cannot be changed
            through it
        warnings: Non-fatal diagnostics, e.g. clipped bounds
        model: Regression the report was computed from, if any
    """

    treatment: str
    estimate: float
    se: float
    dof: int
    t_statistic: float
    q: float
    alpha: float
    reduce: bool
    h0: float
    kd: ArrayLike
    ky: ArrayLike
    benchmark_covariates: BenchmarkCovariates | None
    r2dz_x: ArrayLike | None
    r2yz_dx: ArrayLike | None
    r2dxj_x: ArrayLike | None
    r2yxj_dx: ArrayLike | None
    bound_label: str
    sensitivity_statistics: SensitivityStats
    _bounds: pd.DataFrame | None = field(default=None, repr=False)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    model: RegressionSummary | None = None

    @property
    def bounds(self) -> pd.DataFrame | None:
        return None if self._bounds is None else self._bounds.copy()

    @property
    def has_bounds(self) -> bool:
        return self._bounds is not None and len(self._bounds) > 0

    @property
    def direction(self) -> str:
        return "reduce" if self.reduce else "increase"

    @property
    def outcome_name(self) -> str | None:
        return getattr(self.model, "outcome_name", None)

    @property
    def formula(self) -> str | None:
        return getattr(self.model, "formula", None)

    def summary(self, digits: int | None = None) -> str:
        """Full verbal summary, see ``reporting.summary_text``."""
        from .reporting import summary_text

        return summary_text(self, digits=digits)

    def __str__(self) -> str:
        from .reporting import print_text

        return print_text(self)


def _manual_bound_frame(
    r2dz_x: ArrayLike,
    r2yz_dx: ArrayLike,
    bound_label: str,
    treatment: str,
    inputs: EstimateInputs,
    alpha: float,
    h0: float,
    reduce: bool,
) -> pd.DataFrame:
    x, y = check_r2(r2dz_x, r2yz_dx)
    frame = pd.DataFrame(
        {"bound_label": [bound_label] * x.size, "r2dz_x": x, "r2yz_dx": y}
    )
    return add_adjusted_estimates(
        frame, inputs, treatment, alpha=alpha, h0=h0, reduce=reduce
    )


def _plain(value: ArrayLike) -> float | list[float]:
    if is_scalar(value):
        return value
    return np.asarray(value, dtype=float).ravel().tolist()


def sensemakr(
    model: RegressionSummary | None = None,
    treatment: str | None = None,
    *,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    benchmark_covariates: BenchmarkCovariates | None = None,
    kd: ArrayLike = 1,
    ky: ArrayLike | None = None,
    q: float | None = None,
    alpha: float | None = None,
    r2dz_x: ArrayLike | None = None,
    r2yz_dx: ArrayLike | None = None,
    r2dxj_x: ArrayLike | None = None,
    r2yxj_dx: ArrayLike | None = None,
    bound_label: str = "Manual Bound",
    reduce: bool | None = None,
) -> SensitivityReport:
    """Sensitivity analysis of a treatment coefficient to omitted variables.

    Args:
        model: Fitted outcome regression
        treatment: Name of the treatment variable
        estimate: Unadjusted estimate, used when no model is given
        se: Unadjusted standard error, used when no model is given
        dof: Residual degrees of freedom, used when no model is given
        benchmark_covariates: Covariate(s) for benchmark bounding (needs a
            model), or labels for manual benchmarks given via ``r2dxj_x``
        kd: Multiple(s) of the benchmark's association with the treatment
        ky: Multiple(s) of the benchmark's association with the outcome;
            defaults to ``kd``
        q: Fraction of the estimate to explain away; defaults to the
            configured ``default_q``
        alpha: Significance level; defaults to the configured ``default_alpha``
        r2dz_x: Manual partial R2 of the confounder with the treatment
        r2yz_dx: Manual partial R2 of the confounder with the outcome;
            defaults to ``r2dz_x``
        r2dxj_x: Partial R2 of a benchmark with the treatment, for benchmark
            bounding from summary statistics
        r2yxj_dx: Partial R2 of a benchmark with the outcome; defaults to
            ``r2dxj_x``
        bound_label: Label for the manual bound rows
        reduce: Whether confounding reduces the absolute estimate; defaults
            to the configured ``default_reduce``

    Returns:
        SensitivityReport

    Raises:
        ArgumentError: If neither (model, treatment) nor (estimate, se, dof)
            is given, both are given, or benchmark covariates are named
            without a model
        DomainError: If the standard error is 0
        InfeasibleBoundError: If a benchmark multiplier is infeasible

    Example:
        >>> model = OLSRegression.from_formula(DARFUR_FORMULA, darfur)
        >>> report = sensemakr(model, "directlyharmed",
        ...                    benchmark_covariates="female", kd=[1, 2, 3])
        >>> print(report.summary())
    """
    config = get_config()
    q = config.default_q if q is None else q
    alpha = config.default_alpha if alpha is None else alpha
    reduce = config.default_reduce if reduce is None else reduce

    has_model = model is not None and treatment is not None
    if not has_model and (estimate is None or se is None or dof is None):
        raise ArgumentError(
            "sensemakr requires either a fitted regression model and a treatment "
            "name or the estimate, standard error, and degrees of freedom"
        )
    if model is not None and any(v is not None for v in (estimate, se, dof)):
        raise ArgumentError(
            "sensemakr accepts either a fitted regression model and a treatment "
            "name or the estimate, standard error, and degrees of freedom, not both"
        )
    if treatment is None:
        treatment = "treatment"

    ky = kd if ky is None else ky
    r2yz_dx = r2dz_x if r2yz_dx is None else r2yz_dx
    r2yxj_dx = r2dxj_x if r2yxj_dx is None else r2yxj_dx

    sensitivity_statistics = sensitivity_stats(
        model=model if has_model else None,
        treatment=treatment if has_model else None,
        estimate=estimate,
        se=se,
        dof=dof,
        q=q,
        alpha=alpha,
        reduce=reduce,
    )
    inputs = EstimateInputs(
        estimate=sensitivity_statistics.estimate,
        se=sensitivity_statistics.se,
        dof=sensitivity_statistics.dof,
    )
    h0 = sensitivity_statistics.h0
    logger.info(
        f"Sensitivity of '{treatment}': estimate={inputs.estimate:.4f}, "
        f"se={inputs.se:.4f}, dof={inputs.dof}, h0={h0:.4f}"
    )

    frames: list[pd.DataFrame] = []
    messages: tuple[str, ...] = ()

    if r2dz_x is not None:
        frames.append(
            _manual_bound_frame(
                r2dz_x, r2yz_dx, bound_label, treatment, inputs, alpha, h0, reduce
            )
        )

    if benchmark_covariates is not None and r2dxj_x is None:
        if not has_model:
            raise ArgumentError(
                "benchmark_covariates require a fitted regression model and a "
                "treatment name; use r2dxj_x and r2yxj_dx to benchmark from "
                "summary statistics"
            )
        result = ovb_bounds(
            model,
            treatment,
            benchmark_covariates=benchmark_covariates,
            kd=kd,
            ky=ky,
            alpha=alpha,
            h0=h0,
            reduce=reduce,
        )
        frames.append(result.frame)
        messages = result.warnings
    elif r2dxj_x is not None:
        result = ovb_partial_r2_bound(
            r2dxj_x=r2dxj_x,
            r2yxj_dx=r2yxj_dx,
            benchmark_covariates=benchmark_covariates,
            kd=kd,
            ky=ky,
        )
        frames.append(
            add_adjusted_estimates(
                result.frame, inputs, treatment, alpha=alpha, h0=h0, reduce=reduce
            )
        )
        messages = result.warnings

    bounds = None
    if frames:
        bounds = pd.concat(frames, ignore_index=True)
        bounds = bounds[BOUND_COLUMNS + ADJUSTED_COLUMNS]
        logger.info(f"Computed {len(bounds)} bound(s) for '{treatment}'")

    return SensitivityReport(
        treatment=treatment,
        estimate=inputs.estimate,
        se=inputs.se,
        dof=inputs.dof,
        t_statistic=sensitivity_statistics.t_statistic,
        q=float(q),
        alpha=float(alpha),
        reduce=bool(reduce),
        h0=h0,
        kd=_plain(kd),
        ky=_plain(ky),
        benchmark_covariates=benchmark_covariates,
        r2dz_x=r2dz_x,
        r2yz_dx=r2yz_dx,
        r2dxj_x=r2dxj_x,
        r2yxj_dx=r2yxj_dx,
        bound_label=bound_label,
        sensitivity_statistics=sensitivity_statistics,
        _bounds=bounds,
        warnings=messages,
        model=model,
    )
