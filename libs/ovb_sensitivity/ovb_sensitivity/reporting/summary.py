"""Text, HTML and LaTeX renderings of a sensitivity report.

All functions return strings and never print; callers decide where the
output goes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from shared.config import get_config

from ..core.base import ArgumentError

if TYPE_CHECKING:
    from ..report import SensitivityReport


def _digits(digits: int | None) -> int:
    return get_config().report_digits if digits is None else int(digits)


def _pct(value: float, digits: int) -> str:
    return f"{round(100.0 * value, max(digits - 2, 0))}%"


def _header(report: SensitivityReport, digits: int, with_direction: bool) -> list[str]:
    stats = report.sensitivity_statistics
    h0 = round(report.h0, digits)

    lines = ["Sensitivity Analysis to Unobserved Confounding", ""]
    if report.formula:
        lines += [f"Model Formula: {report.formula}", ""]
    lines.append(f"Null hypothesis: q = {report.q} and reduce = {report.reduce}")
    if with_direction:
        lines.append(
            f"-- This means we are considering biases that {report.direction} "
            "the absolute value of the current estimate"
        )
        lines.append(f"-- The null hypothesis deemed problematic is H0:tau = {h0}")
    lines += [
        "",
        f'Unadjusted Estimates of "{report.treatment}":',
        f"   Coef. Estimate: {round(report.estimate, digits)}",
        f"   Standard Error: {round(report.se, digits)}",
        f"   t-value: {round(stats.t_statistic, digits)}",
        "",
        "Sensitivity Statistics:",
        f"   Partial R2 of treatment with outcome: {round(stats.r2yd_x, digits)}",
        f"   Robustness Value, q = {report.q}: {round(stats.rv_q, digits)}",
        f"   Robustness Value, q = {report.q} alpha = {report.alpha}: "
        f"{round(stats.rv_qa, digits)}",
        "",
    ]
    return lines


def print_text(report: SensitivityReport, digits: int | None = None) -> str:
    """Short summary: formula, null hypothesis, estimates and statistics."""
    return "\n".join(_header(report, _digits(digits), with_direction=False))


def bounds_table(report: SensitivityReport, digits: int | None = None) -> pd.DataFrame:
    """Bounds of the report rounded for display (empty if there are none)."""
    if report.bounds is None:
        return pd.DataFrame()
    return report.bounds.round(_digits(digits))


def summary_text(report: SensitivityReport, digits: int | None = None) -> str:
    """Full summary including a verbal interpretation of every statistic.

    Args:
        report: Report produced by ``sensemakr``
        digits: Rounding; defaults to the configured ``report_digits``

    Returns:
        Multi-line summary ending with the bounds table, if any
    """
    digits = _digits(digits)
    stats = report.sensitivity_statistics
    h0 = round(report.h0, digits)
    bias_pct = f"{100.0 * report.q}%"
    rv_q = round(100.0 * stats.rv_q, digits)
    rv_qa = round(100.0 * stats.rv_qa, digits)

    lines = _header(report, digits, with_direction=True)
    lines += [
        "Verbal interpretation of sensitivity statistics:",
        "",
        "-- Partial R2 of the treatment with the outcome: an extreme confounder "
        "(orthogonal to the covariates) that explains 100% of the residual "
        "variance of the outcome, would need to explain at least "
        f"{round(100.0 * stats.r2yd_x, digits)}% of the residual variance of the "
        "treatment to fully account for the observed estimated effect.",
        "",
        f"-- Robustness Value, q = {report.q}: unobserved confounders (orthogonal "
        f"to the covariates) that explain more than {rv_q}% of the residual "
        "variance of both the treatment and the outcome are strong enough to "
        f"bring the point estimate to {h0} (a bias of {bias_pct} of the original "
        f"estimate). Conversely, unobserved confounders that do not explain more "
        f"than {rv_q}% of the residual variance of both the treatment and the "
        f"outcome are not strong enough to bring the point estimate to {h0}.",
        "",
        f"-- Robustness Value, q = {report.q}, alpha = {report.alpha}: unobserved "
        f"confounders (orthogonal to the covariates) that explain more than "
        f"{rv_qa}% of the residual variance of both the treatment and the outcome "
        "are strong enough to bring the estimate to a range where it is no "
        f"longer 'statistically different' from {h0} (a bias of {bias_pct} of the "
        f"original estimate), at the significance level of alpha = {report.alpha}. "
        f"Conversely, unobserved confounders that do not explain more than "
        f"{rv_qa}% of the residual variance of both the treatment and the "
        "outcome are not strong enough to bring the estimate to a range where "
        f"it is no longer 'statistically different' from {h0}, at the "
        f"significance level of alpha = {report.alpha}.",
        "",
    ]

    if report.has_bounds:
        lines += [
            "Bounds on omitted variable bias:",
            "",
            "-- The table below shows the maximum strength of unobserved "
            "confounders with association with the treatment and the outcome "
            "bounded by a multiple of the observed explanatory power of the "
            "chosen benchmark covariate(s).",
            "",
            bounds_table(report, digits).to_string(index=False),
        ]
    for message in report.warnings:
        lines.append(f"Warning: {message}")
    return "\n".join(lines)


def _html(report: SensitivityReport, digits: int) -> str:
    stats = report.sensitivity_statistics
    outcome = report.outcome_name or ""
    top = "border-top: 1px solid black"
    bottom = "border-bottom: 1px solid black"

    parts = [
        "<table style='align:center'>",
        "<thead>",
        "<tr>",
        f"\t<th style='text-align:left;{bottom};{top}'> </th>",
        f"\t<th colspan = 6 style='text-align:center;{bottom};{top}'> "
        f"Outcome: {outcome} </th>",
        "</tr>",
        "<tr>",
        f"\t<th style='text-align:left;{top}'> Treatment </th>",
        f"\t<th style='text-align:right;{top}'> Est. </th>",
        f"\t<th style='text-align:right;{top}'> S.E. </th>",
        f"\t<th style='text-align:right;{top}'> t-value </th>",
        f"\t<th style='text-align:right;{top}'> R<sup>2</sup><sub>Y~D|X</sub> </th>",
        f"\t<th style='text-align:right;{top}'> RV<sub>q = {report.q}</sub> </th>",
        f"\t<th style='text-align:right;{top}'> RV<sub>q = {report.q}, "
        f"&alpha; = {report.alpha}</sub> </th>",
        "</tr>",
        "</thead>",
        "<tbody>",
        "<tr>",
        f"\t<td style='text-align:left;{bottom}'><i>{report.treatment}</i></td>",
        f"\t<td style='text-align:right;{bottom}'>{round(stats.estimate, digits)} </td>",
        f"\t<td style='text-align:right;{bottom}'>{round(stats.se, digits)} </td>",
        f"\t<td style='text-align:right;{bottom}'>{round(stats.t_statistic, digits)} </td>",
        f"\t<td style='text-align:right;{bottom}'>{_pct(stats.r2yd_x, digits)} </td>",
        f"\t<td style='text-align:right;{bottom}'>{_pct(stats.rv_q, digits)} </td>",
        f"\t<td style='text-align:right;{bottom}'>{_pct(stats.rv_qa, digits)} </td>",
        "</tr>",
        "</tbody>",
    ]

    note = f"Note: df = {stats.dof}"
    if report.has_bounds:
        first = report.bounds.iloc[0]
        note += (
            f"; Bound ( {first['bound_label']} ): "
            f"R<sup>2</sup><sub>Y~Z|X,D</sub> = {_pct(first['r2yz_dx'], digits)}, "
            f"R<sup>2</sup><sub>D~Z|X</sub> = {_pct(first['r2dz_x'], digits)}"
        )
    parts += [
        "<tr>",
        f"<td colspan = 7 style='text-align:right;{top};border-bottom: 1px solid "
        f"transparent;font-size:11px'>{note}</td>",
        "</tr>",
        "</table>",
    ]
    return "\n".join(parts)


def _latex(report: SensitivityReport, digits: int) -> str:
    stats = report.sensitivity_statistics
    outcome = report.outcome_name or ""

    def pct(value: float) -> str:
        return _pct(value, digits).replace("%", "\\%")

    note = f"Note: df = {stats.dof}"
    if report.has_bounds:
        first = report.bounds.iloc[0]
        note += (
            f"; Bound ( {first['bound_label']} ): "
            f"$R^2_{{Y\\sim Z| {{\\bf X}}, D}}$ = {pct(first['r2yz_dx'])}, "
            f"$R^2_{{D\\sim Z| {{\\bf X}} }}$ = {pct(first['r2dz_x'])}"
        )

    parts = [
        "\\begin{table}[!h]",
        "\\centering",
        "\\begin{tabular}{lrrrrrr}",
        f"\\multicolumn{{7}}{{c}}{{Outcome: \\textit{{{outcome}}}}} \\\\",
        "\\hline \\hline",
        "Treatment: & Est. & S.E. & t-value & $R^2_{Y \\sim D |{\\bf X}}$ & "
        f"$RV_{{q = {report.q}}}$ & $RV_{{q = {report.q}, \\alpha = {report.alpha}}}$"
        " \\\\",
        "\\hline",
        f"\\textit{{{report.treatment}}} & {round(stats.estimate, digits)} & "
        f"{round(stats.se, digits)} & {round(stats.t_statistic, digits)} & "
        f"{pct(stats.r2yd_x)} & {pct(stats.rv_q)} & {pct(stats.rv_qa)} \\\\",
        "\\hline",
        f"\\multicolumn{{7}}{{r}}{{ \\footnotesize {note} }}",
        "\\end{tabular}",
        "\\end{table}",
    ]
    return "\n".join(parts)


def ovb_minimal_reporting(
    report: SensitivityReport, format: str = "html", digits: int | None = None
) -> str:
    """Minimal table of the headline statistics for publications.

    Args:
        report: Report produced by ``sensemakr``
        format: ``"html"`` or ``"latex"``
        digits: Rounding; defaults to the configured ``report_digits``

    Returns:
        Table source code
    """
    digits = _digits(digits)
    if format == "html":
        return _html(report, digits)
    if format == "latex":
        return _latex(report, digits)
    raise ArgumentError(f"format must be 'html' or 'latex', got {format!r}")
