"""Input and plan validation."""

from .data_validator import DataValidator, ValidationIssue, ValidationSeverity
from .solution_validator import (
    SolutionValidator,
    SolutionValidationError,
    SolutionInvariantError,
)

__all__ = [
    "DataValidator",
    "ValidationIssue",
    "ValidationSeverity",
    "SolutionValidator",
    "SolutionValidationError",
    "SolutionInvariantError",
]
