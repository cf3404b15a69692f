"""Core abstractions: error taxonomy and the regression contract."""

from .base import (
    ArgumentError,
    BoundClippedWarning,
    CovariateNotFoundError,
    DomainError,
    InfeasibleBoundError,
    SensitivityAnalysisError,
    SingularCovarianceError,
    ZeroDegreesOfFreedomError,
)
from .regression import CoefficientEstimate, OLSRegression, RegressionSummary

__all__ = [
    "ArgumentError",
    "BoundClippedWarning",
    "CoefficientEstimate",
    "CovariateNotFoundError",
    "DomainError",
    "InfeasibleBoundError",
    "OLSRegression",
    "RegressionSummary",
    "SensitivityAnalysisError",
    "SingularCovarianceError",
    "ZeroDegreesOfFreedomError",
]
