"""
Ranking engine: weighted sum of per-criterion max-normalized scores.

Normalization is per run and depends on the population. Each criterion is
divided by the highest raw score recorded for it in this run, so the same
raw score can normalize differently between runs with different students.
Two defaults apply and are part of the contract:

- a missing (student, criterion) score counts as 0;
- a criterion with no recorded score at all uses a maximum of 100.

Every maximum is then floored at 1.
"""
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from app.core.errors import InsufficientDataError

DEFAULT_MAX_SCORE = 100.0
MIN_MAX_SCORE = 1.0
MIN_SCORE_COVERAGE = 0.5


@dataclass(frozen=True)
class CriterionWeight:
    id: Hashable
    weight: Optional[float]
    name: Optional[str] = None


@dataclass(frozen=True)
class StudentRef:
    id: Hashable
    name: Optional[str] = None


@dataclass(frozen=True)
class ScoreEntry:
    student_id: Hashable
    criteria_id: Hashable
    value: float


@dataclass
class RankedResult:
    student_id: Hashable
    final_score: float
    rank: int
    criteria_scores: Dict[Hashable, float] = field(default_factory=dict)
    weighted_scores: Dict[Hashable, float] = field(default_factory=dict)


def _score_lookup(
    criteria: Sequence[CriterionWeight],
    students: Sequence[StudentRef],
    scores: Sequence[ScoreEntry],
) -> Dict[Tuple[Hashable, Hashable], float]:
    # Scores for unknown students or criteria are ignored; a repeated cell keeps the last value
    student_ids = {s.id for s in students}
    criteria_ids = {c.id for c in criteria}
    lookup = {}
    for entry in scores:
        if entry.student_id in student_ids and entry.criteria_id in criteria_ids:
            lookup[(entry.student_id, entry.criteria_id)] = float(entry.value)
    return lookup


def check_preconditions(
    criteria: Sequence[CriterionWeight],
    students: Sequence[StudentRef],
    scores: Sequence[ScoreEntry],
    min_coverage: float = MIN_SCORE_COVERAGE,
) -> None:
    """Raise InsufficientDataError when a ranking would be meaningless."""
    if not criteria:
        raise InsufficientDataError("No criteria are defined")

    unresolved = [c for c in criteria if c.weight is None]
    if unresolved:
        names = ", ".join(str(c.name or c.id) for c in unresolved)
        raise InsufficientDataError(
            f"Criterion weights have not been calculated yet ({names}). "
            "Calculate the weights on the criteria page first."
        )
    if not any(c.weight > 0 for c in criteria):
        raise InsufficientDataError("No criterion has a positive weight")

    if not students:
        raise InsufficientDataError("No students found. Add student records first.")

    required = len(students) * len(criteria)
    available = len(_score_lookup(criteria, students, scores))
    if available < required * min_coverage:
        raise InsufficientDataError(
            f"More student scores are required. Available: {available}/{required} scores."
        )


def max_scores(
    criteria: Sequence[CriterionWeight],
    lookup: Dict[Tuple[Hashable, Hashable], float],
) -> Dict[Hashable, float]:
    recorded: Dict[Hashable, List[float]] = {c.id: [] for c in criteria}
    for (_, criteria_id), value in lookup.items():
        recorded[criteria_id].append(value)

    result = {}
    for c in criteria:
        values = recorded[c.id]
        highest = max(values) if values else DEFAULT_MAX_SCORE
        result[c.id] = max(highest, MIN_MAX_SCORE)
    return result


def rank(
    criteria: Sequence[CriterionWeight],
    students: Sequence[StudentRef],
    scores: Sequence[ScoreEntry],
    min_coverage: float = MIN_SCORE_COVERAGE,
) -> List[RankedResult]:
    """
    Rank students by the weighted sum of their normalized scores.

    The returned list is sorted by final score, highest first. Ties keep
    the order in which students were supplied.
    """
    check_preconditions(criteria, students, scores, min_coverage=min_coverage)

    lookup = _score_lookup(criteria, students, scores)
    maxima = max_scores(criteria, lookup)

    results = []
    for student in students:
        raw, weighted = {}, {}
        total = 0.0
        for c in criteria:
            value = lookup.get((student.id, c.id), 0.0)
            contribution = value / maxima[c.id] * c.weight
            raw[c.id] = value
            weighted[c.id] = contribution
            total += contribution
        results.append(RankedResult(
            student_id=student.id,
            final_score=total,
            rank=0,
            criteria_scores=raw,
            weighted_scores=weighted,
        ))

    # sorted() is stable, also with reverse=True
    results = sorted(results, key=lambda r: r.final_score, reverse=True)
    for position, result in enumerate(results, start=1):
        result.rank = position
    return results
