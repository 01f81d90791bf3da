# app/core/errors.py
from dataclasses import dataclass


class AHPError(ValueError):
    """Base error for the AHP core. Carries a machine-readable kind."""

    kind = "ahp_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def as_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.detail}


class InvalidMatrixError(AHPError):
    """Non-square, non-reciprocal or non-positive comparison matrix."""

    kind = "invalid_matrix"


class InsufficientDataError(AHPError):
    """Not enough weights, students or scores to produce a ranking."""

    kind = "insufficient_data"


INCONSISTENT_JUDGMENT = "inconsistent_judgment"
PERSISTENCE_FAILURE = "persistence_failure"


@dataclass(frozen=True)
class CalculationWarning:
    """Non-fatal outcome surfaced alongside a valid result."""

    kind: str
    detail: str

    def as_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.detail}
