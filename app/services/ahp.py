"""
Pairwise comparison engine.

Turns a positive reciprocal comparison matrix into priority weights using
the column-normalization / row-average approximation of the principal
eigenvector, and reports Saaty's consistency ratio.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from app.core.errors import InvalidMatrixError

# Random Index by matrix size. Sizes above 10 fall back to a flat 1.5,
# an approximation kept for compatibility with stored results rather than
# a published value.
RANDOM_INDEX = {
    1: 0.00, 2: 0.00, 3: 0.58, 4: 0.90, 5: 1.12,
    6: 1.24, 7: 1.32, 8: 1.41, 9: 1.45, 10: 1.49
}
RANDOM_INDEX_FALLBACK = 1.5

CONSISTENCY_THRESHOLD = 0.1

RECIPROCAL_TOLERANCE = 1e-6

# Judgment scale offered to users when filling in the matrix
AHP_SCALE = [
    (9, "Extremely more important"),
    (8, "Very strongly more important (+)"),
    (7, "Very strongly more important"),
    (6, "Strongly more important (+)"),
    (5, "Strongly more important"),
    (4, "Moderately more important (+)"),
    (3, "Moderately more important"),
    (2, "Equally important (+)"),
    (1, "Equally important"),
    (1 / 2, "Equally important (-)"),
    (1 / 3, "Moderately less important"),
    (1 / 4, "Moderately less important (-)"),
    (1 / 5, "Strongly less important"),
    (1 / 6, "Strongly less important (-)"),
    (1 / 7, "Very strongly less important"),
    (1 / 8, "Very strongly less important (-)"),
    (1 / 9, "Extremely less important"),
]


class WeightDecision(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FORCED = "forced"


@dataclass(frozen=True)
class WeightResult:
    weights: Tuple[float, ...]
    lambda_max: float
    consistency_index: float
    consistency_ratio: float
    is_consistent: bool


def random_index(n: int) -> float:
    if n < 1:
        raise InvalidMatrixError(f"Matrix size must be positive, got {n}")
    return RANDOM_INDEX.get(n, RANDOM_INDEX_FALLBACK)


def validate_matrix(matrix) -> np.ndarray:
    """
    Check that `matrix` is a usable AHP comparison matrix.

    Returns it as a float array. Raises InvalidMatrixError when it is not
    square, smaller than 2x2, has non-finite or non-positive entries, a
    diagonal other than 1, or mirrored cells that are not reciprocal.
    """
    try:
        m = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidMatrixError(f"Matrix is not numeric: {e}")

    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise InvalidMatrixError(f"Matrix must be square, got shape {m.shape}")
    n = m.shape[0]
    if n < 2:
        raise InvalidMatrixError("At least two criteria are required")
    if not np.all(np.isfinite(m)):
        raise InvalidMatrixError("Matrix contains non-finite values")
    if np.any(m <= 0):
        raise InvalidMatrixError("Comparison values must be strictly positive")
    if not np.allclose(np.diag(m), 1.0, rtol=0, atol=RECIPROCAL_TOLERANCE):
        raise InvalidMatrixError("Diagonal entries must equal 1")

    products = m * m.T
    if not np.allclose(products, 1.0, rtol=0, atol=RECIPROCAL_TOLERANCE):
        i, j = np.unravel_index(np.argmax(np.abs(products - 1.0)), products.shape)
        raise InvalidMatrixError(
            f"Matrix is not reciprocal at ({i}, {j}): {m[i, j]} vs {m[j, i]}"
        )
    return m


def compute_weights(matrix, threshold: float = CONSISTENCY_THRESHOLD) -> WeightResult:
    m = validate_matrix(matrix)
    n = m.shape[0]

    # 1. Column-normalize
    normalized = m / m.sum(axis=0)

    # 2. Priority vector = row averages
    weights = normalized.mean(axis=1)

    # 3. Principal eigenvalue estimate
    lambda_max = float(np.mean((m @ weights) / weights))

    # 4-6. Consistency index and ratio
    ci = (lambda_max - n) / (n - 1)
    ri = random_index(n)
    cr = 0.0 if ri == 0 else ci / ri

    return WeightResult(
        weights=tuple(float(w) for w in weights),
        lambda_max=lambda_max,
        consistency_index=float(ci),
        consistency_ratio=float(cr),
        is_consistent=cr <= threshold,
    )


def approve(result: WeightResult, force: bool = False) -> WeightDecision:
    """Decide whether computed weights may be used for ranking."""
    if result.is_consistent:
        return WeightDecision.ACCEPTED
    if force:
        return WeightDecision.FORCED
    return WeightDecision.REJECTED


class PairwiseMatrix:
    """
    Reciprocal comparison matrix over a fixed list of criterion labels.

    Cells are only written through set_comparison, which updates a cell and
    its mirror together, so readers never see a half-updated matrix. The
    last evaluation is memoized until the next write.
    """

    def __init__(self, labels: Sequence[Hashable], threshold: float = CONSISTENCY_THRESHOLD):
        labels = list(labels)
        if len(labels) < 2:
            raise InvalidMatrixError("At least two criteria are required")
        if len(set(labels)) != len(labels):
            raise InvalidMatrixError("Criterion labels must be unique")

        self._labels = labels
        self._positions = {label: i for i, label in enumerate(labels)}
        self._values = np.ones((len(labels), len(labels)), dtype=float)
        self._threshold = threshold
        self._result: Optional[WeightResult] = None

    @classmethod
    def from_comparisons(
        cls,
        labels: Sequence[Hashable],
        comparisons: Iterable[Tuple[Hashable, Hashable, float]],
        threshold: float = CONSISTENCY_THRESHOLD,
    ) -> "PairwiseMatrix":
        matrix = cls(labels, threshold=threshold)
        for first, second, value in comparisons:
            matrix.set_comparison(first, second, value)
        return matrix

    @property
    def labels(self) -> List[Hashable]:
        return list(self._labels)

    @property
    def size(self) -> int:
        return len(self._labels)

    @property
    def cached_result(self) -> Optional[WeightResult]:
        return self._result

    def _position(self, key: Hashable) -> int:
        if key not in self._positions:
            raise InvalidMatrixError(f"Unknown criterion: {key!r}")
        return self._positions[key]

    def get(self, i: Hashable, j: Hashable) -> float:
        return float(self._values[self._position(i), self._position(j)])

    def set_comparison(self, i: Hashable, j: Hashable, value: float) -> None:
        row, col = self._position(i), self._position(j)
        if row == col:
            raise InvalidMatrixError("A criterion cannot be compared with itself")
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise InvalidMatrixError(f"Comparison value must be positive, got {value}")

        self._values[row, col] = value
        self._values[col, row] = 1.0 / value
        self._result = None

    def to_array(self) -> np.ndarray:
        return self._values.copy()

    def to_list(self) -> List[List[float]]:
        return self._values.tolist()

    def comparisons(self) -> List[Tuple[Hashable, Hashable, float]]:
        """Upper-triangle judgments as (label_i, label_j, value)."""
        return [
            (self._labels[i], self._labels[j], float(self._values[i, j]))
            for i in range(self.size)
            for j in range(i + 1, self.size)
        ]

    def weights_by_label(self) -> Dict[Hashable, float]:
        result = self.evaluate()
        return dict(zip(self._labels, result.weights))

    def evaluate(self) -> WeightResult:
        if self._result is None:
            self._result = compute_weights(self._values, threshold=self._threshold)
        return self._result
