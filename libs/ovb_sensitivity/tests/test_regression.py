"""Tests for the statsmodels-backed regression contract."""

import numpy as np
import pandas as pd
import pytest
import statsmodels.formula.api as smf
from numpy.testing import assert_allclose, assert_almost_equal

from ovb_sensitivity.core.base import (
    ArgumentError,
    CovariateNotFoundError,
    ZeroDegreesOfFreedomError,
)
from ovb_sensitivity.core.regression import (
    CoefficientEstimate,
    OLSRegression,
    RegressionSummary,
)


class TestOLSRegression:
    """Test cases for OLSRegression."""

    def test_satisfies_protocol(self, simple_model):
        """Test that the wrapper implements the regression contract."""
        assert isinstance(simple_model, RegressionSummary)

    def test_rejects_unfitted_objects(self):
        """Test that arbitrary objects are rejected."""
        with pytest.raises(TypeError, match="fitted statsmodels"):
            OLSRegression(object())

    def test_zero_residual_dof(self):
        """Test that a saturated regression is rejected."""
        data = pd.DataFrame(
            {"y": [1.0, 2.0, 4.0], "x1": [0.0, 1.0, 3.0], "x2": [1.0, 0.0, 2.0]}
        )
        results = smf.ols("y ~ x1 + x2", data=data).fit()

        with pytest.raises(ZeroDegreesOfFreedomError, match="0 residual degrees"):
            OLSRegression(results)

    def test_coefficient(self, simple_model):
        """Test that coefficients mirror the statsmodels results."""
        results = simple_model.results
        coef = simple_model.coefficient("d")

        assert isinstance(coef, CoefficientEstimate)
        assert_almost_equal(coef.estimate, results.params["d"])
        assert_almost_equal(coef.se, results.bse["d"])
        assert_almost_equal(coef.t_statistic, results.tvalues["d"])
        assert_almost_equal(coef.t_statistic, coef.estimate / coef.se)

    def test_residual_dof_and_names(self, simple_model):
        """Test residual degrees of freedom and coefficient names."""
        assert simple_model.residual_dof() == 196
        assert simple_model.coefficient_names() == ["Intercept", "d", "x1", "x2"]
        assert simple_model.outcome_name == "y"
        assert simple_model.formula == "y ~ d + x1 + x2"

    def test_categorical_coefficient_names(self, darfur_model):
        """Test that dummies keep the patsy naming."""
        names = darfur_model.coefficient_names()
        assert "directlyharmed" in names
        assert "village[T.v01]" in names
        assert "village[T.v00]" not in names

    def test_coefficient_subset(self, simple_model):
        """Test coefficient sub-vectors and covariance sub-matrices."""
        names = ["x2", "d"]
        results = simple_model.results

        assert_allclose(simple_model.coefficient_subset(names), results.params[names])
        cov = simple_model.coefficient_subset_covariance(names)
        assert cov.shape == (2, 2)
        assert_allclose(cov, cov.T)
        assert_allclose(np.sqrt(np.diag(cov)), results.bse[names])

    def test_missing_covariates_reported_together(self, simple_model):
        """Test that every missing name is reported at once."""
        with pytest.raises(CovariateNotFoundError) as exc_info:
            simple_model.coefficient_subset(["x1", "income", "region"])

        assert exc_info.value.missing == ["income", "region"]
        assert "income, region" in str(exc_info.value)
        assert isinstance(exc_info.value, ArgumentError)

    def test_treatment_regression(self, random_state):
        """Test that the auxiliary regression matches a direct fit."""
        rng = np.random.default_rng(random_state)
        n = 150
        data = pd.DataFrame({"x1": rng.normal(size=n), "x2": rng.normal(size=n)})
        data["d"] = 0.4 * data["x1"] - 0.2 * data["x2"] + rng.normal(size=n)
        data["y"] = data["d"] + data["x1"] + rng.normal(size=n)

        model = OLSRegression.from_formula("y ~ d + x1 + x2", data)
        aux = model.treatment_regression("d")
        direct = smf.ols("d ~ x1 + x2", data=data).fit()

        assert aux.outcome_name == "d"
        assert aux.coefficient_names() == ["Intercept", "x1", "x2"]
        assert aux.residual_dof() == model.residual_dof() + 1
        assert_almost_equal(aux.coefficient("x1").t_statistic, direct.tvalues["x1"])
        assert_almost_equal(aux.coefficient("x2").se, direct.bse["x2"])

    def test_treatment_regression_unknown_treatment(self, simple_model):
        """Test that the treatment must be a regressor."""
        with pytest.raises(CovariateNotFoundError, match="z"):
            simple_model.treatment_regression("z")

    def test_repr(self, simple_model):
        """Test the representation shows formula and dof."""
        assert repr(simple_model) == "OLSRegression('y ~ d + x1 + x2', dof=196)"
