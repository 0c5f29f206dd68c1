"""
Typed failures raised by the TOPSIS pipeline.

Every failure names the stage that detected it and, where there is one,
the offending criterion or alternative label.
"""
from typing import Optional


class TopsisError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str, stage: Optional[str] = None,
                 label: Optional[str] = None):
        self.stage = stage
        self.label = label
        prefix = f"[{stage}] " if stage else ""
        super().__init__(f"{prefix}{message}")


class InvalidInputError(TopsisError, ValueError):
    """Decision matrix violates a structural or positivity precondition."""


class DegenerateWeightsError(TopsisError):
    """Every criterion has entropy 1, so weights cannot be normalized."""


class DegenerateDistanceError(TopsisError):
    """An alternative sits at zero distance from both profiles."""
