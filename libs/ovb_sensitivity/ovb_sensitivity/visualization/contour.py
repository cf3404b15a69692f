"""Contour and extreme-scenario sensitivity plots.

The contour plot shows the bias-adjusted estimate (or t-value) over a grid
of confounder strengths (r2dz_x, r2yz_dx), with the unadjusted value at the
origin and any bounds drawn as red diamonds. The extreme-scenario plot fixes
r2yz_dx at a few extreme values and traces the adjusted estimate as a
function of r2dz_x.

Grids are computed on demand by ``contour_grid``; nothing is stored on the
report.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from shared.config import get_config

from ..bias import adjusted_estimate, adjusted_t
from ..core.base import ArgumentError
from ..utils import ArrayLike, check_dof, check_r2, check_se

# Import plotting libraries with fallback
try:
    import matplotlib.pyplot as plt

    PLOTTING_AVAILABLE = True
except ImportError:
    PLOTTING_AVAILABLE = False

if TYPE_CHECKING:
    from matplotlib.figure import Figure

    from ..report import SensitivityReport

logger = logging.getLogger(__name__)

SENSITIVITY_OF = ("estimate", "t-value")
MAX_LIMIT = 1 - 1e-12


def _require_plotting() -> None:
    if not PLOTTING_AVAILABLE:
        raise ImportError(
            "Plotting libraries not available. Install with: pip install matplotlib"
        )


def _check_limit(
    lim: float | None, values: NDArray[np.float64] | None, name: str
) -> float:
    """Default a plot limit from the bounds and correct values outside [0, 1]."""
    if lim is None:
        if values is None or values.size == 0:
            return get_config().contour_limit
        return float(min(max(values.max() * 1.2, 0.4), MAX_LIMIT))

    if lim > 1:
        logger.warning(f"Contour limit {name}={lim} larger than 1 was set to 1")
        return MAX_LIMIT
    if lim < 0:
        logger.warning(f"Contour limit {name}={lim} lower than 0 was set to 0.4")
        return 0.4
    return float(min(lim, MAX_LIMIT))


def contour_grid(
    estimate: float,
    se: float,
    dof: int,
    sensitivity_of: str = "estimate",
    lim: float | None = None,
    lim_y: float | None = None,
    n_points: int | None = None,
    reduce: bool = True,
    estimate_threshold: float = 0,
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Adjusted estimates (or t-values) over a grid of confounder strengths.

    Args:
        estimate: Unadjusted estimate
        se: Unadjusted standard error
        dof: Residual degrees of freedom
        sensitivity_of: ``"estimate"`` or ``"t-value"``
        lim: Upper limit of the r2dz_x axis
        lim_y: Upper limit of the r2yz_dx axis
        n_points: Grid points per axis; defaults to ``contour_grid_points``
        reduce: Whether confounding reduces the absolute estimate
        estimate_threshold: Null hypothesis for the adjusted t-values

    Returns:
        Tuple ``(x, y, z)`` with ``z[j, i]`` evaluated at ``(x[i], y[j])``
    """
    if sensitivity_of not in SENSITIVITY_OF:
        raise ArgumentError(
            f"sensitivity_of must be 'estimate' or 't-value', got {sensitivity_of!r}"
        )
    config = get_config()
    n_points = config.contour_grid_points if n_points is None else int(n_points)
    if n_points < 2:
        raise ArgumentError(f"n_points must be at least 2, got {n_points}")
    lim = _check_limit(lim, None, "lim")
    lim_y = _check_limit(lim_y, None, "lim_y")

    x = np.linspace(0, lim, n_points)
    y = np.linspace(0, lim_y, n_points)
    grid_x, grid_y = np.meshgrid(x, y)

    if sensitivity_of == "estimate":
        z = adjusted_estimate(
            grid_x.ravel(), grid_y.ravel(), estimate=estimate, se=se, dof=dof,
            reduce=reduce,
        )
    else:
        z = adjusted_t(
            grid_x.ravel(), grid_y.ravel(), estimate=estimate, se=se, dof=dof,
            reduce=reduce, h0=estimate_threshold,
        )
    return x, y, np.asarray(z).reshape(grid_x.shape)


def _bounds_of(
    report: SensitivityReport | None,
) -> tuple[NDArray[np.float64] | None, NDArray[np.float64] | None, list[str] | None]:
    if report is None or not report.has_bounds:
        return None, None, None
    bounds = report.bounds
    return (
        bounds["r2dz_x"].to_numpy(dtype=float),
        bounds["r2yz_dx"].to_numpy(dtype=float),
        bounds["bound_label"].astype(str).tolist(),
    )


def _resolve_inputs(
    report: SensitivityReport | None,
    estimate: float | None,
    se: float | None,
    dof: int | None,
    reduce: bool | None,
) -> tuple[float, float, int, bool]:
    if report is not None:
        if any(v is not None for v in (estimate, se, dof, reduce)):
            raise ArgumentError(
                "plotting accepts either a sensitivity report or the estimate, "
                "standard error, and degrees of freedom, not both"
            )
        return report.estimate, report.se, report.dof, report.reduce
    if estimate is None or se is None or dof is None:
        raise ArgumentError(
            "plotting requires either a sensitivity report or the estimate, "
            "standard error, and degrees of freedom"
        )
    reduce = True if reduce is None else reduce
    return float(estimate), check_se(se, positive=True), check_dof(dof), reduce


def ovb_contour_plot(
    report: SensitivityReport | None = None,
    *,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    r2dz_x: ArrayLike | None = None,
    r2yz_dx: ArrayLike | None = None,
    bound_label: str | Sequence[str] | None = None,
    sensitivity_of: str = "estimate",
    reduce: bool | None = None,
    estimate_threshold: float | None = None,
    t_threshold: float | None = None,
    lim: float | None = None,
    lim_y: float | None = None,
    n_levels: int | None = None,
    col_contour: str = "black",
    col_thr_line: str = "red",
    label_text: bool = True,
    round_dig: int = 3,
    figsize: tuple[float, float] = (6, 6),
) -> Figure:
    """Contour plot of the adjusted estimate or t-value.

    With a report, estimate, standard error, bounds and thresholds are
    taken from it: the estimate threshold is the report's ``h0`` and the
    t-value threshold its critical value at ``alpha``. Explicit ``r2dz_x``
    values are drawn in addition to the report's bounds.

    Returns:
        The matplotlib Figure
    """
    _require_plotting()
    if sensitivity_of not in SENSITIVITY_OF:
        raise ArgumentError(
            f"sensitivity_of must be 'estimate' or 't-value', got {sensitivity_of!r}"
        )
    estimate, se, dof, reduce = _resolve_inputs(report, estimate, se, dof, reduce)

    bx, by, labels = _bounds_of(report)
    if r2dz_x is not None:
        mx, my = check_r2(r2dz_x, r2dz_x if r2yz_dx is None else r2yz_dx)
        if bound_label is None:
            extra = ["manual"] * mx.size
        elif isinstance(bound_label, str):
            extra = [bound_label] * mx.size
        else:
            extra = list(bound_label)
        bx = mx if bx is None else np.concatenate([bx, mx])
        by = my if by is None else np.concatenate([by, my])
        labels = extra if labels is None else labels + extra

    if report is not None:
        if estimate_threshold is None:
            estimate_threshold = report.h0
        if t_threshold is None:
            t_threshold = abs(stats.t.ppf(report.alpha / 2, dof - 1)) * np.sign(
                report.sensitivity_statistics.t_statistic
            )
    estimate_threshold = 0.0 if estimate_threshold is None else estimate_threshold
    t_threshold = 2.0 if t_threshold is None else t_threshold

    lim = _check_limit(lim, bx, "lim")
    lim_y = _check_limit(lim_y, by, "lim_y")
    x, y, z = contour_grid(
        estimate, se, dof, sensitivity_of=sensitivity_of, lim=lim, lim_y=lim_y,
        reduce=reduce, estimate_threshold=estimate_threshold,
    )

    if sensitivity_of == "estimate":
        threshold = estimate_threshold
        unadjusted = estimate
    else:
        threshold = t_threshold
        unadjusted = (estimate - estimate_threshold) / se

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    levels = None if n_levels is None else n_levels - 1
    contours = ax.contour(
        x, y, z, colors=col_contour, linewidths=1.0, linestyles="solid", levels=levels
    )
    ax.clabel(contours, inline=True, fontsize=8, fmt="%1.3g", colors="gray")

    if z.min() < threshold < z.max():
        threshold_line = ax.contour(
            x, y, z, colors=col_thr_line, linewidths=1.0,
            linestyles="dashed", levels=[threshold],
        )
        ax.clabel(threshold_line, inline=True, fontsize=8, fmt="%1.3g", colors="gray")

    bump_x, bump_y = lim / 30, lim_y / 30
    ax.scatter([0], [0], c="k", marker="^")
    ax.annotate(f"Unadjusted\n({round(unadjusted, round_dig)})", (bump_x, bump_y))

    if bx is not None:
        if sensitivity_of == "estimate":
            values = adjusted_estimate(
                bx, by, estimate=estimate, se=se, dof=dof, reduce=reduce
            )
        else:
            values = adjusted_t(
                bx, by, estimate=estimate, se=se, dof=dof, reduce=reduce,
                h0=estimate_threshold,
            )
        for i, value in enumerate(np.atleast_1d(values)):
            ax.scatter(bx[i], by[i], c="red", marker="D", edgecolors="black")
            if label_text:
                ax.annotate(
                    f"{labels[i]}\n({round(float(value), round_dig)})",
                    (bx[i] + bump_x, by[i] + bump_y),
                )

    ax.set_xlabel(r"Partial $R^2$ of confounder(s) with the treatment")
    ax.set_ylabel(r"Partial $R^2$ of confounder(s) with the outcome")
    ax.set_xlim(-(lim / 15), lim * 1.05)
    ax.set_ylim(-(lim_y / 15), lim_y * 1.05)
    fig.tight_layout()
    return fig


def ovb_extreme_plot(
    report: SensitivityReport | None = None,
    *,
    estimate: float | None = None,
    se: float | None = None,
    dof: int | None = None,
    r2dz_x: ArrayLike | None = None,
    r2yz_dx: Sequence[float] = (1, 0.75, 0.5),
    reduce: bool | None = None,
    threshold: float = 0,
    lim: float | None = None,
    n_points: int | None = None,
    figsize: tuple[float, float] = (8, 4.8),
) -> Figure:
    """Extreme-scenario plot: adjusted estimate against r2dz_x.

    One line per value in ``r2yz_dx`` (the confounder explains that share of
    the outcome's residual variance). Bound values of r2dz_x are marked as
    a red rug on the horizontal axis.

    Returns:
        The matplotlib Figure
    """
    _require_plotting()
    estimate, se, dof, reduce = _resolve_inputs(report, estimate, se, dof, reduce)
    rug, _, _ = _bounds_of(report)
    if r2dz_x is not None:
        manual, _ = check_r2(r2dz_x, 0)
        rug = manual if rug is None else np.concatenate([rug, manual])

    scenarios, _ = check_r2(list(r2yz_dx), 0, names=("r2yz_dx", "r2dz_x"))
    if lim is None:
        lim = 0.1 if rug is None else float(min(max(rug.max() * 1.2, 0.1), MAX_LIMIT))
    lim = _check_limit(lim, None, "lim")
    n_points = get_config().contour_grid_points if n_points is None else int(n_points)

    x = np.linspace(0, lim, n_points)
    fig, ax = plt.subplots(1, 1, figsize=figsize)
    linestyles = ["solid", "dashed", "dotted", "dashdot"]
    for i, r2y in enumerate(scenarios):
        y = adjusted_estimate(
            x, np.full_like(x, r2y), estimate=estimate, se=se, dof=dof, reduce=reduce
        )
        ax.plot(
            x, y, color="black", linewidth=1.0,
            linestyle=linestyles[i % len(linestyles)],
            label=f"{round(float(r2y), 3)}",
        )

    ax.axhline(threshold, color="red", linewidth=1.0, linestyle=(0, (7, 3)))
    if rug is not None:
        for value in rug:
            ax.axvline(value, ymax=0.03, color="red", linewidth=2.5)

    ax.set_xlim(0, lim)
    ax.set_xlabel(r"Partial $R^2$ of confounder(s) with the treatment")
    ax.set_ylabel("Adjusted effect estimate")
    ax.legend(
        title=r"Partial $R^2$ of confounder(s) with the outcome",
        loc="best", frameon=False,
    )
    fig.tight_layout()
    return fig


def plot(report: SensitivityReport, plot_type: str = "contour", **kwargs: Any) -> Figure:
    """Dispatch to ``ovb_contour_plot`` or ``ovb_extreme_plot``."""
    if plot_type == "contour":
        return ovb_contour_plot(report, **kwargs)
    if plot_type == "extreme":
        return ovb_extreme_plot(report, **kwargs)
    raise ArgumentError(f"plot_type must be 'extreme' or 'contour', got {plot_type!r}")
