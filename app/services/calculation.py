import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from app.core.errors import CalculationWarning, PERSISTENCE_FAILURE
from app.models.criteria import Criterion
from app.models.student import Student, StudentScore
from app.models.result import AhpResult
from app.services.ranking import (
    CriterionWeight, StudentRef, ScoreEntry, RankedResult, rank, MIN_SCORE_COVERAGE
)

logger = logging.getLogger(__name__)


class CalculationStep(IntEnum):
    DATA_LOADED = 1
    SCORES_COMPUTED = 2
    RESULTS_SAVED = 3


ProgressCallback = Callable[[CalculationStep], None]


@dataclass
class CalculationOutcome:
    results: List[RankedResult]
    weights: Dict[int, float]
    students: Dict[int, dict]  # detached snapshot, still readable after a rollback
    saved: bool
    warnings: List[CalculationWarning] = field(default_factory=list)


async def replace_results(db: AsyncSession, results: List[RankedResult]) -> None:
    """Swap the stored ranking for `results` in a single transaction."""
    await db.execute(delete(AhpResult))
    db.add_all([
        AhpResult(student_id=r.student_id, final_score=r.final_score, rank=r.rank)
        for r in results
    ])
    await db.commit()


async def run_calculation(
    db: AsyncSession,
    min_coverage: float = MIN_SCORE_COVERAGE,
    on_progress: Optional[ProgressCallback] = None,
) -> CalculationOutcome:
    """
    Rank every student with the stored criterion weights and scores.

    Raises InsufficientDataError before anything is written. If the new
    ranking cannot be stored, the previous ranking is kept and the computed
    one is still returned with a persistence_failure warning.
    """
    def report(step: CalculationStep):
        if on_progress is not None:
            on_progress(step)

    criteria = list((await db.execute(select(Criterion).order_by(Criterion.name))).scalars().all())
    students = list((await db.execute(select(Student).order_by(Student.id))).scalars().all())
    scores = list((await db.execute(select(StudentScore))).scalars().all())
    logger.info(
        "Loaded %d criteria, %d students, %d scores", len(criteria), len(students), len(scores)
    )
    report(CalculationStep.DATA_LOADED)

    results = rank(
        [CriterionWeight(id=c.id, weight=c.weight, name=c.name) for c in criteria],
        [StudentRef(id=s.id, name=s.name) for s in students],
        [ScoreEntry(student_id=s.student_id, criteria_id=s.criteria_id, value=s.score) for s in scores],
        min_coverage=min_coverage,
    )
    report(CalculationStep.SCORES_COMPUTED)

    outcome = CalculationOutcome(
        results=results,
        weights={c.id: c.weight for c in criteria},
        students={s.id: {"name": s.name, "class": s.class_name, "nis": s.nis} for s in students},
        saved=False,
    )
    try:
        await replace_results(db, results)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("Ranking computed but could not be saved: %s", e)
        outcome.warnings.append(CalculationWarning(
            kind=PERSISTENCE_FAILURE,
            detail="The ranking was calculated but could not be saved to the database.",
        ))
        return outcome

    outcome.saved = True
    report(CalculationStep.RESULTS_SAVED)
    logger.info("Ranking saved for %d students", len(results))
    return outcome


async def reset_results(db: AsyncSession) -> int:
    result = await db.execute(delete(AhpResult))
    await db.commit()
    return result.rowcount or 0


async def stored_results(db: AsyncSession) -> List[dict]:
    rows = await db.execute(
        select(AhpResult, Student)
        .join(Student, Student.id == AhpResult.student_id)
        .order_by(AhpResult.rank)
    )
    pairs = rows.all()
    if not pairs:
        return []

    student_ids = [student.id for _, student in pairs]
    score_rows = await db.execute(
        select(StudentScore).where(StudentScore.student_id.in_(student_ids))
    )
    scores_by_student: Dict[int, Dict[int, float]] = {}
    for s in score_rows.scalars():
        scores_by_student.setdefault(s.student_id, {})[s.criteria_id] = s.score

    return [
        {
            "student": student,
            "final_score": result.final_score,
            "rank": result.rank,
            "criteria_scores": scores_by_student.get(student.id, {}),
        }
        for result, student in pairs
    ]


async def count_results(db: AsyncSession, max_rank: Optional[int] = None) -> int:
    query = select(func.count(AhpResult.id))
    if max_rank is not None:
        query = query.where(AhpResult.rank <= max_rank)
    result = await db.execute(query)
    return result.scalar_one()
