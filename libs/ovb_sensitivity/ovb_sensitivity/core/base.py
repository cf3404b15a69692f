"""Exception taxonomy and warning categories for sensitivity analysis.

Every error raised by the library derives from ``SensitivityAnalysisError``
and, where it makes sense, from the matching builtin so that callers who
only know about ``ValueError`` still catch them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np


class SensitivityAnalysisError(Exception):
    """Base exception class for sensitivity analysis errors."""

    pass


class ArgumentError(SensitivityAnalysisError, ValueError):
    """Raised when the caller supplies an insufficient or ambiguous input combination."""

    pass


class CovariateNotFoundError(ArgumentError):
    """Raised when requested covariates are absent from a regression.

    All missing names are reported at once.
    """

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__("Variables not found in model: " + ", ".join(self.missing))


class DomainError(SensitivityAnalysisError, ValueError):
    """Raised when a numeric argument lies outside its valid domain."""

    def __init__(self, field: str, value: Any, requirement: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} {requirement}, got {value!r}")


class InfeasibleBoundError(SensitivityAnalysisError, ValueError):
    """Raised when a benchmark multiplier implies a partial R2 of at least 1."""

    def __init__(self, quantity: str, covariate: str, kd: Any) -> None:
        self.quantity = quantity
        self.covariate = covariate
        self.kd = kd
        super().__init__(
            f"Implied bound on {quantity} >= 1 for benchmark covariate "
            f"'{covariate}' with kd = {kd}. Impossible kd value, try a lower kd."
        )


class SingularCovarianceError(SensitivityAnalysisError, np.linalg.LinAlgError):
    """Raised when a coefficient covariance sub-matrix cannot be inverted."""

    pass


class ZeroDegreesOfFreedomError(SensitivityAnalysisError, ValueError):
    """Raised when a regression has no residual degrees of freedom."""

    pass


class BoundClippedWarning(UserWarning):
    """Category for bounds that were clipped to 1 instead of failing."""

    pass
