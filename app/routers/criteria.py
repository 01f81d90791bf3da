from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.database import get_db
from app.config import settings
from app.core.auth import get_current_user, get_current_admin
from app.core.errors import AHPError, InvalidMatrixError
from app.models.criteria import WeightCalculation
from app.schemas.criteria import (
    CriterionResponse, ScaleItem, ComparisonUpdate, MatrixResponse, VerdictResponse,
    ForceWeightsRequest, WeightCalculationResponse, WeightOutcomeResponse, WarningItem
)
from app.services.ahp import AHP_SCALE
from app.services import weights as weight_service

router = APIRouter(prefix="/criteria", tags=["criteria"])

def error_status(e: AHPError) -> int:
    return 422 if isinstance(e, InvalidMatrixError) else 400

def build_outcome(outcome: weight_service.WeightOutcome) -> WeightOutcomeResponse:
    return WeightOutcomeResponse(
        calculation=WeightCalculationResponse.model_validate(outcome.calculation),
        criteria=[CriterionResponse.model_validate(c) for c in outcome.criteria],
        warnings=[WarningItem(**w.as_dict()) for w in outcome.warnings]
    )

@router.get("", response_model=List[CriterionResponse])
async def list_criteria(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await weight_service.get_criteria(db)

@router.get("/scale", response_model=List[ScaleItem])
async def get_scale(current_user = Depends(get_current_user)):
    return [ScaleItem(value=value, label=label) for value, label in AHP_SCALE]

@router.get("/comparisons", response_model=MatrixResponse)
async def get_comparisons(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    try:
        criteria, matrix = await weight_service.load_matrix(db, threshold=settings.CONSISTENCY_THRESHOLD)
    except AHPError as e:
        raise HTTPException(status_code=error_status(e), detail=e.as_dict())

    # Only a verdict made after the last judgment change is shown
    current = await weight_service.current_calculation(db)
    verdict = None
    if current:
        verdict = VerdictResponse(
            weights=current.weights,
            lambda_max=current.lambda_max,
            consistency_index=current.consistency_index,
            consistency_ratio=current.consistency_ratio,
            is_consistent=current.is_consistent
        )

    return MatrixResponse(
        criteria=[CriterionResponse.model_validate(c) for c in criteria],
        matrix=matrix.to_list(),
        verdict=verdict
    )

@router.put("/comparisons", response_model=MatrixResponse)
async def set_comparison(
    comparison_in: ComparisonUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    try:
        criteria, matrix = await weight_service.load_matrix(db, threshold=settings.CONSISTENCY_THRESHOLD)
    except AHPError as e:
        raise HTTPException(status_code=error_status(e), detail=e.as_dict())

    known = {c.id for c in criteria}
    if comparison_in.criteria1_id not in known or comparison_in.criteria2_id not in known:
        raise HTTPException(404, "Criterion not found")

    # Validates the judgment before anything is stored
    try:
        matrix.set_comparison(comparison_in.criteria1_id, comparison_in.criteria2_id, comparison_in.value)
    except InvalidMatrixError as e:
        raise HTTPException(status_code=422, detail=e.as_dict())

    await weight_service.save_comparison(
        db, comparison_in.criteria1_id, comparison_in.criteria2_id, comparison_in.value
    )

    return MatrixResponse(
        criteria=[CriterionResponse.model_validate(c) for c in criteria],
        matrix=matrix.to_list(),
        verdict=None
    )

@router.post("/weights/calculate", response_model=WeightOutcomeResponse)
async def calculate_weights(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    try:
        outcome = await weight_service.calculate_weights(
            db, threshold=settings.CONSISTENCY_THRESHOLD, actor=current_user.display_name
        )
    except AHPError as e:
        raise HTTPException(status_code=error_status(e), detail=e.as_dict())
    return build_outcome(outcome)

@router.post("/weights/force", response_model=WeightOutcomeResponse)
async def force_weights(
    request: ForceWeightsRequest,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    if not request.acknowledge_inconsistency:
        raise HTTPException(
            status_code=400,
            detail={"kind": "acknowledgement_required",
                    "detail": "Forcing weights requires acknowledging the inconsistency"}
        )
    try:
        outcome = await weight_service.force_weights(
            db, actor=admin.display_name, reason=request.reason,
            threshold=settings.CONSISTENCY_THRESHOLD
        )
    except weight_service.StaleVerdictError as e:
        raise HTTPException(status_code=409, detail={"kind": "stale_verdict", "detail": str(e)})
    except AHPError as e:
        raise HTTPException(status_code=error_status(e), detail=e.as_dict())
    return build_outcome(outcome)

@router.get("/weights/history", response_model=List[WeightCalculationResponse])
async def get_weight_history(
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    history: List[WeightCalculation] = await weight_service.weight_history(db, limit=limit)
    return history
