import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update
from app.core.errors import CalculationWarning, InsufficientDataError, INCONSISTENT_JUDGMENT
from app.models.criteria import Criterion, CriteriaComparison, WeightCalculation
from app.services.ahp import PairwiseMatrix, WeightDecision, WeightResult, approve, CONSISTENCY_THRESHOLD

logger = logging.getLogger(__name__)


class StaleVerdictError(Exception):
    """Raised when an override is requested without a current consistency verdict."""


@dataclass
class WeightOutcome:
    calculation: WeightCalculation
    criteria: List[Criterion]
    warnings: List[CalculationWarning] = field(default_factory=list)


async def get_criteria(db: AsyncSession) -> List[Criterion]:
    result = await db.execute(select(Criterion).order_by(Criterion.name))
    return list(result.scalars().all())


async def load_matrix(
    db: AsyncSession, threshold: float = CONSISTENCY_THRESHOLD
) -> Tuple[List[Criterion], PairwiseMatrix]:
    criteria = await get_criteria(db)
    if len(criteria) < 2:
        raise InsufficientDataError("At least two criteria are required for pairwise comparison")

    rows = await db.execute(select(CriteriaComparison).order_by(CriteriaComparison.id))
    known = {c.id for c in criteria}
    comparisons = [
        (row.criteria1_id, row.criteria2_id, row.value)
        for row in rows.scalars()
        if row.criteria1_id in known and row.criteria2_id in known
    ]
    matrix = PairwiseMatrix.from_comparisons([c.id for c in criteria], comparisons, threshold=threshold)
    return criteria, matrix


async def save_comparison(
    db: AsyncSession, criteria1_id: int, criteria2_id: int, value: float
) -> None:
    """
    Store one judgment and drop its mirror row, so each unordered pair has
    a single stored value. Every earlier verdict is superseded in the same
    transaction.
    """
    await db.execute(
        delete(CriteriaComparison)
        .where(CriteriaComparison.criteria1_id == criteria2_id)
        .where(CriteriaComparison.criteria2_id == criteria1_id)
    )
    existing = await db.execute(
        select(CriteriaComparison)
        .where(CriteriaComparison.criteria1_id == criteria1_id)
        .where(CriteriaComparison.criteria2_id == criteria2_id)
    )
    row = existing.scalar_one_or_none()
    if row:
        row.value = value
    else:
        db.add(CriteriaComparison(criteria1_id=criteria1_id, criteria2_id=criteria2_id, value=value))

    await db.execute(
        update(WeightCalculation)
        .where(WeightCalculation.superseded.is_(False))
        .values(superseded=True)
    )
    await db.commit()


async def current_calculation(db: AsyncSession) -> Optional[WeightCalculation]:
    result = await db.execute(
        select(WeightCalculation)
        .where(WeightCalculation.superseded.is_(False))
        .order_by(WeightCalculation.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _record(
    db: AsyncSession,
    criteria: List[Criterion],
    result: WeightResult,
    decision: WeightDecision,
    actor: Optional[str] = None,
    reason: Optional[str] = None,
) -> WeightCalculation:
    applied = decision != WeightDecision.REJECTED
    if applied:
        for criterion, weight in zip(criteria, result.weights):
            criterion.weight = weight

    calculation = WeightCalculation(
        weights={str(c.id): w for c, w in zip(criteria, result.weights)},
        lambda_max=result.lambda_max,
        consistency_index=result.consistency_index,
        consistency_ratio=result.consistency_ratio,
        is_consistent=result.is_consistent,
        decision=decision.value,
        applied=applied,
        superseded=False,
        actor=actor,
        reason=reason,
    )
    db.add(calculation)
    await db.commit()
    await db.refresh(calculation)
    return calculation


def _inconsistency_warning(result: WeightResult, threshold: float) -> CalculationWarning:
    return CalculationWarning(
        kind=INCONSISTENT_JUDGMENT,
        detail=(
            f"Consistency ratio {result.consistency_ratio * 100:.2f}% exceeds "
            f"{threshold * 100:.0f}%. Revise the comparisons or force the weights explicitly."
        ),
    )


async def calculate_weights(
    db: AsyncSession, threshold: float = CONSISTENCY_THRESHOLD, actor: Optional[str] = None
) -> WeightOutcome:
    criteria, matrix = await load_matrix(db, threshold=threshold)
    result = matrix.evaluate()
    decision = approve(result)

    warnings = []
    if decision == WeightDecision.REJECTED:
        logger.warning(
            "Inconsistent pairwise judgments (CR=%.4f); weights not applied", result.consistency_ratio
        )
        warnings.append(_inconsistency_warning(result, threshold))

    calculation = await _record(db, criteria, result, decision, actor=actor)
    return WeightOutcome(calculation=calculation, criteria=criteria, warnings=warnings)


async def force_weights(
    db: AsyncSession,
    actor: str,
    reason: Optional[str] = None,
    threshold: float = CONSISTENCY_THRESHOLD,
) -> WeightOutcome:
    """
    Apply the current weights even when the judgments are inconsistent.

    Requires a verdict for the current matrix, i.e. a calculation made
    after the last change to any judgment. The override is recorded with
    its actor so it can be told apart from a normal acceptance.
    """
    if await current_calculation(db) is None:
        raise StaleVerdictError(
            "No consistency verdict for the current comparisons. Calculate the weights first."
        )

    criteria, matrix = await load_matrix(db, threshold=threshold)
    result = matrix.evaluate()
    decision = approve(result, force=True)

    warnings = []
    if decision == WeightDecision.FORCED:
        logger.warning(
            "Weights force-applied by %s despite CR=%.4f", actor, result.consistency_ratio
        )
        warnings.append(_inconsistency_warning(result, threshold))

    calculation = await _record(db, criteria, result, decision, actor=actor, reason=reason)
    return WeightOutcome(calculation=calculation, criteria=criteria, warnings=warnings)


async def weight_history(db: AsyncSession, limit: int = 50) -> List[WeightCalculation]:
    result = await db.execute(
        select(WeightCalculation).order_by(WeightCalculation.id.desc()).limit(limit)
    )
    return list(result.scalars().all())
