"""Sensitivity analysis to omitted variable bias in linear regression.

Implements the partial R2 framework of Cinelli & Hazlett (2020), "Making
Sense of Sensitivity: Extending Omitted Variable Bias": robustness values,
bias-adjusted estimates, benchmark bounds from observed covariates, and
reports and plots bundling them for one treatment coefficient.
"""

__version__ = "0.1.0"

from .bias import (
    adjusted_estimate,
    adjusted_partial_r2,
    adjusted_se,
    adjusted_t,
    bias,
    bias_factor,
    rel_bias,
    relative_bias,
)
from .bounds import (
    BoundsResult,
    add_adjusted_estimates,
    label_maker,
    ovb_bounds,
    ovb_partial_r2_bound,
)
from .core import *
from .data import DARFUR_FORMULA, DarfurDataLoader, load_darfur
from .report import SensitivityReport, sensemakr
from .reporting import ovb_minimal_reporting, print_text, summary_text
from .statistics import (
    SensitivityStats,
    group_partial_r2,
    partial_f,
    partial_f2,
    partial_r2,
    robustness_value,
    sensitivity_stats,
)
from .visualization import contour_grid, ovb_contour_plot, ovb_extreme_plot, plot

__all__ = [
    "__version__",
    "ArgumentError",
    "BoundClippedWarning",
    "BoundsResult",
    "CoefficientEstimate",
    "CovariateNotFoundError",
    "DARFUR_FORMULA",
    "DarfurDataLoader",
    "DomainError",
    "InfeasibleBoundError",
    "OLSRegression",
    "RegressionSummary",
    "SensitivityAnalysisError",
    "SensitivityReport",
    "SensitivityStats",
    "SingularCovarianceError",
    "ZeroDegreesOfFreedomError",
    "add_adjusted_estimates",
    "adjusted_estimate",
    "adjusted_partial_r2",
    "adjusted_se",
    "adjusted_t",
    "bias",
    "bias_factor",
    "contour_grid",
    "group_partial_r2",
    "label_maker",
    "load_darfur",
    "ovb_bounds",
    "ovb_contour_plot",
    "ovb_extreme_plot",
    "ovb_minimal_reporting",
    "ovb_partial_r2_bound",
    "partial_f",
    "partial_f2",
    "partial_r2",
    "plot",
    "print_text",
    "rel_bias",
    "relative_bias",
    "robustness_value",
    "sensemakr",
    "sensitivity_stats",
    "summary_text",
]
