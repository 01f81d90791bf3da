from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

class WarningItem(BaseModel):
    kind: str  # "inconsistent_judgment", "persistence_failure"
    detail: str

class CriterionResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    weight: Optional[float]

    model_config = {"from_attributes": True}

class ScaleItem(BaseModel):
    value: float
    label: str

class ComparisonUpdate(BaseModel):
    criteria1_id: int
    criteria2_id: int
    value: float = Field(..., gt=0, le=9)  # 1/9 … 9

class VerdictResponse(BaseModel):
    weights: Dict[int, float]
    lambda_max: float
    consistency_index: float
    consistency_ratio: float
    is_consistent: bool

class MatrixResponse(BaseModel):
    criteria: List[CriterionResponse]
    matrix: List[List[float]]
    verdict: Optional[VerdictResponse] = None  # None once any judgment changed since the last calculation

class ForceWeightsRequest(BaseModel):
    acknowledge_inconsistency: bool
    reason: Optional[str] = Field(None, max_length=500)

class WeightCalculationResponse(BaseModel):
    id: int
    weights: Dict[int, float]
    lambda_max: float
    consistency_index: float
    consistency_ratio: float
    is_consistent: bool
    decision: str  # accepted, rejected, forced
    applied: bool
    superseded: bool
    actor: Optional[str]
    reason: Optional[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

class WeightOutcomeResponse(BaseModel):
    calculation: WeightCalculationResponse
    criteria: List[CriterionResponse]
    warnings: List[WarningItem] = []
