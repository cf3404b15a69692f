"""Property-based tests for the sensitivity statistics.

Hypothesis generates estimates, standard errors, degrees of freedom and
confounder strengths to check invariants that must hold for any input:

1. **Zero confounding**: a confounder without explanatory power leaves the
   estimate and standard error untouched
2. **Robustness value**: a confounder exactly as strong as RV_q changes the
   estimate by exactly the fraction q, and accounting for sampling
   uncertainty never raises the RV
3. **Monotonicity**: stronger confounders never imply smaller biases

Ranges are kept moderate so that floating point cancellation near a
partial R2 of 1 does not dominate the comparison.
"""

import numpy as np
import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from ovb_sensitivity.bias import adjusted_estimate, adjusted_se, bias, relative_bias
from ovb_sensitivity.statistics import partial_r2, robustness_value

t_values = st.floats(min_value=0.5, max_value=50, allow_nan=False, allow_infinity=False)
standard_errors = st.floats(min_value=0.01, max_value=5, allow_nan=False)
degrees_of_freedom = st.integers(min_value=10, max_value=5000)
fractions = st.floats(min_value=0.1, max_value=2.0, allow_nan=False)
r2_values = st.floats(min_value=0.0, max_value=0.95, allow_nan=False)
signs = st.sampled_from([-1.0, 1.0])


@given(t=t_values, se=standard_errors, dof=degrees_of_freedom, sign=signs)
@settings(max_examples=50, deadline=None)
def test_zero_confounding_is_a_no_op(t, se, dof, sign):
    """Test that r2dz_x = r2yz_dx = 0 changes nothing."""
    estimate = sign * t * se
    assert adjusted_estimate(0, 0, estimate=estimate, se=se, dof=dof) == pytest.approx(
        estimate
    )
    assert adjusted_se(0, 0, se=se, dof=dof) == pytest.approx(
        se * np.sqrt(dof / (dof - 1))
    )


@given(t=t_values, se=standard_errors, dof=degrees_of_freedom, q=fractions, sign=signs)
@settings(max_examples=100, deadline=None)
def test_robustness_value_explains_fraction_q(t, se, dof, q, sign):
    """Test that a confounder as strong as RV_q has relative bias q."""
    estimate = sign * t * se
    rv = robustness_value(t_statistic=t, dof=dof, q=q)

    assert 0 < rv < 1
    assert relative_bias(rv, rv, estimate=estimate, se=se, dof=dof) == pytest.approx(
        q, rel=1e-6
    )


@given(
    t=t_values,
    dof=st.integers(min_value=3, max_value=5000),
    q=fractions,
    alpha=st.floats(min_value=0.01, max_value=0.2),
)
@settings(max_examples=100, deadline=None)
def test_sampling_uncertainty_never_raises_rv(t, dof, q, alpha):
    """Test that RV_qa is never larger than RV_q."""
    rv_q = robustness_value(t_statistic=t, dof=dof, q=q)
    rv_qa = robustness_value(t_statistic=t, dof=dof, q=q, alpha=alpha)

    assert 0 <= rv_qa <= rv_q + 1e-12


@given(t1=t_values, t2=t_values, dof=degrees_of_freedom)
@settings(max_examples=50, deadline=None)
def test_partial_r2_monotone_in_t(t1, t2, dof):
    """Test that larger |t| means a larger partial R2."""
    assume(t1 < t2)
    low = partial_r2(t_statistic=t1, dof=dof)
    high = partial_r2(t_statistic=-t2, dof=dof)

    assert 0 <= low <= high < 1


@given(
    r2dz_x=r2_values,
    r2yz_dx=st.floats(min_value=0.0, max_value=0.9),
    step=st.floats(min_value=0.001, max_value=0.09),
    se=standard_errors,
    dof=degrees_of_freedom,
)
@settings(max_examples=50, deadline=None)
def test_bias_monotone_in_outcome_strength(r2dz_x, r2yz_dx, step, se, dof):
    """Test that the bias grows with the confounder's outcome association."""
    weaker = bias(r2dz_x, r2yz_dx, se=se, dof=dof)
    stronger = bias(r2dz_x, r2yz_dx + step, se=se, dof=dof)

    assert 0 <= weaker <= stronger


@given(
    r2dz_x=r2_values,
    r2yz_dx=r2_values,
    t=t_values,
    se=standard_errors,
    dof=degrees_of_freedom,
    sign=signs,
)
@settings(max_examples=50, deadline=None)
def test_reduce_moves_toward_zero(r2dz_x, r2yz_dx, t, se, dof, sign):
    """Test the sign convention of reduce=True and reduce=False."""
    estimate = sign * t * se
    reduced = adjusted_estimate(r2dz_x, r2yz_dx, estimate=estimate, se=se, dof=dof)
    increased = adjusted_estimate(
        r2dz_x, r2yz_dx, estimate=estimate, se=se, dof=dof, reduce=False
    )

    assert sign * reduced <= abs(estimate) + 1e-12
    assert sign * increased >= abs(estimate) - 1e-12
