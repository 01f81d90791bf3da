import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.config import settings
from app.core.auth import get_current_user
from app.core.errors import InsufficientDataError
from app.schemas.criteria import WarningItem
from app.schemas.ranking import CalculationResponse, StoredRankingResponse, RankedStudent
from app.services.calculation import CalculationStep, run_calculation, reset_results, stored_results

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ranking", tags=["ranking"])

def log_progress(step: CalculationStep):
    logger.info("Ranking step %d/%d: %s", step.value, len(CalculationStep), step.name.lower())

@router.post("/calculate", response_model=CalculationResponse)
async def calculate_ranking(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    try:
        outcome = await run_calculation(
            db, min_coverage=settings.MIN_SCORE_COVERAGE, on_progress=log_progress
        )
    except InsufficientDataError as e:
        raise HTTPException(status_code=400, detail=e.as_dict())

    results = []
    for r in outcome.results:
        student = outcome.students[r.student_id]
        results.append(RankedStudent(
            student_id=r.student_id,
            name=student["name"],
            class_name=student["class"],
            nis=student["nis"],
            final_score=r.final_score,
            rank=r.rank,
            criteria_scores=r.criteria_scores
        ))

    return CalculationResponse(
        saved=outcome.saved,
        total_students=len(results),
        weights=outcome.weights,
        results=results,
        warnings=[WarningItem(**w.as_dict()) for w in outcome.warnings]
    )

@router.get("/results", response_model=StoredRankingResponse)
async def get_results(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    rows = await stored_results(db)
    results = [
        RankedStudent(
            student_id=row["student"].id,
            name=row["student"].name,
            class_name=row["student"].class_name,
            nis=row["student"].nis,
            final_score=row["final_score"],
            rank=row["rank"],
            criteria_scores=row["criteria_scores"]
        )
        for row in rows
    ]
    return StoredRankingResponse(total_students=len(results), results=results)

@router.delete("/results")
async def delete_results(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    deleted = await reset_results(db)
    return {"message": "Ranking results cleared", "deleted": deleted}
