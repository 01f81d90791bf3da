from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Optional

Score = Annotated[float, Field(ge=0, le=100)]

class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    class_name: str = Field(..., alias="class", min_length=1, max_length=20)
    nis: str = Field(..., min_length=1, max_length=30)
    scores: Dict[int, Score] = {}  # criteria_id -> score

    model_config = {"populate_by_name": True}

class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    class_name: Optional[str] = Field(None, alias="class", min_length=1, max_length=20)
    nis: Optional[str] = Field(None, min_length=1, max_length=30)

    model_config = {"populate_by_name": True}

class ScoresUpdate(BaseModel):
    scores: Dict[int, Score]

class StudentResponse(BaseModel):
    id: int
    name: str
    class_name: str = Field(..., alias="class")
    nis: str
    scores: Dict[int, float] = {}

    model_config = {"populate_by_name": True}

class StudentListResponse(BaseModel):
    total: int
    students: List[StudentResponse]
