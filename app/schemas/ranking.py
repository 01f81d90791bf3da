from pydantic import BaseModel, Field
from typing import Dict, List
from .criteria import WarningItem

class RankedStudent(BaseModel):
    student_id: int
    name: str
    class_name: str = Field(..., alias="class")
    nis: str
    final_score: float
    rank: int
    criteria_scores: Dict[int, float]

    model_config = {"populate_by_name": True}

class CalculationResponse(BaseModel):
    saved: bool
    total_students: int
    weights: Dict[int, float]
    results: List[RankedStudent]
    warnings: List[WarningItem] = []

class StoredRankingResponse(BaseModel):
    total_students: int
    results: List[RankedStudent]

class DashboardResponse(BaseModel):
    students: int
    criteria: int
    calculations: int
    top_students: int
