"""Contour and extreme-scenario plots for sensitivity analysis.

Plots are rendered with matplotlib and returned as ``Figure`` objects; the
underlying grid is available separately through ``contour_grid``.
"""

from .contour import (
    PLOTTING_AVAILABLE,
    contour_grid,
    ovb_contour_plot,
    ovb_extreme_plot,
    plot,
)

__all__ = [
    "PLOTTING_AVAILABLE",
    "contour_grid",
    "ovb_contour_plot",
    "ovb_extreme_plot",
    "plot",
]
