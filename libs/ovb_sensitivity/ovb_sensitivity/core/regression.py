"""Regression contract consumed by the sensitivity engine.

The engine never fits the outcome regression itself. It reads point
estimates, standard errors, t-statistics and residual degrees of freedom
through ``RegressionSummary`` and, for benchmark bounding, asks the
regression to refit the treatment on the remaining regressors.
``OLSRegression`` implements the contract on top of statsmodels results.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from numpy.typing import NDArray

from .base import CovariateNotFoundError, ZeroDegreesOfFreedomError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoefficientEstimate:
    """Point estimate, standard error and t-statistic of one coefficient."""

    estimate: float
    se: float
    t_statistic: float


@runtime_checkable
class RegressionSummary(Protocol):
    """Protocol for fitted linear regressions usable in sensitivity analysis."""

    def coefficient(self, name: str) -> CoefficientEstimate:
        """Return the estimate, standard error and t-statistic of ``name``."""
        ...

    def residual_dof(self) -> int:
        """Residual degrees of freedom shared by all coefficients."""
        ...

    def coefficient_names(self) -> list[str]:
        """Names of every coefficient in the fit."""
        ...

    def coefficient_subset(self, names: Sequence[str]) -> NDArray[np.float64]:
        """Coefficient sub-vector restricted to ``names``."""
        ...

    def coefficient_subset_covariance(
        self, names: Sequence[str]
    ) -> NDArray[np.float64]:
        """Covariance sub-matrix of the coefficients in ``names``."""
        ...

    def treatment_regression(self, treatment: str) -> RegressionSummary:
        """Regress ``treatment`` on every other regressor of this fit."""
        ...


class OLSRegression:
    """``RegressionSummary`` backed by a fitted statsmodels OLS model.

    Example:
        >>> import statsmodels.formula.api as smf
        >>> results = smf.ols("y ~ d + x1 + x2", data=df).fit()
        >>> model = OLSRegression(results)
        >>> model.coefficient("d").t_statistic
    """

    def __init__(self, results: Any, outcome_name: str | None = None) -> None:
        if not hasattr(results, "params") or not hasattr(results, "df_resid"):
            raise TypeError(
                "OLSRegression expects fitted statsmodels regression results, "
                f"got {type(results).__name__}"
            )
        self._results = results
        self._names = [str(name) for name in results.model.exog_names]
        self.outcome_name = outcome_name or results.model.endog_names
        self.formula: str | None = getattr(results.model, "formula", None)

        if int(round(float(results.df_resid))) == 0:
            raise ZeroDegreesOfFreedomError(
                "There are 0 residual degrees of freedom in the regression provided"
            )

    @classmethod
    def from_formula(cls, formula: str, data: pd.DataFrame) -> OLSRegression:
        """Fit ``formula`` on ``data`` by ordinary least squares."""
        logger.debug(f"Fitting OLS model: {formula}")
        return cls(smf.ols(formula, data=data).fit())

    @property
    def results(self) -> Any:
        """Underlying statsmodels results object."""
        return self._results

    def _index(self, names: Sequence[str]) -> list[int]:
        missing = [name for name in names if name not in self._names]
        if missing:
            raise CovariateNotFoundError(missing)
        return [self._names.index(name) for name in names]

    def coefficient(self, name: str) -> CoefficientEstimate:
        (idx,) = self._index([name])
        return CoefficientEstimate(
            estimate=float(np.asarray(self._results.params)[idx]),
            se=float(np.asarray(self._results.bse)[idx]),
            t_statistic=float(np.asarray(self._results.tvalues)[idx]),
        )

    def residual_dof(self) -> int:
        return int(round(float(self._results.df_resid)))

    def coefficient_names(self) -> list[str]:
        return list(self._names)

    def coefficient_subset(self, names: Sequence[str]) -> NDArray[np.float64]:
        idx = self._index(names)
        return np.asarray(self._results.params, dtype=float)[idx]

    def coefficient_subset_covariance(
        self, names: Sequence[str]
    ) -> NDArray[np.float64]:
        idx = self._index(names)
        cov = np.asarray(self._results.cov_params(), dtype=float)
        return cov[np.ix_(idx, idx)]

    def treatment_regression(self, treatment: str) -> OLSRegression:
        """Regress the treatment column on the remaining design-matrix columns.

        The design matrix of the original fit is reused as is, so the
        auxiliary regression sees exactly the same covariate coding
        (dummies, interactions, intercept) as the outcome regression.
        """
        (idx,) = self._index([treatment])
        exog = np.asarray(self._results.model.exog, dtype=float)
        others = [name for i, name in enumerate(self._names) if i != idx]

        design = pd.DataFrame(np.delete(exog, idx, axis=1), columns=others)
        target = pd.Series(exog[:, idx], name=treatment)
        logger.debug(
            f"Auxiliary regression of '{treatment}' on {len(others)} regressors"
        )
        return OLSRegression(sm.OLS(target, design).fit(), outcome_name=treatment)

    def __repr__(self) -> str:
        label = self.formula or f"{self.outcome_name} ~ {' + '.join(self._names)}"
        return f"OLSRegression({label!r}, dof={self.residual_dof()})"
