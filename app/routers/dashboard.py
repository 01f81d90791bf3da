from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.database import get_db
from app.core.auth import get_current_user
from app.models.criteria import Criterion
from app.models.student import Student
from app.schemas.ranking import DashboardResponse
from app.services.calculation import count_results

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

TOP_RANK = 10

@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    students = await db.execute(select(func.count(Student.id)))
    criteria = await db.execute(select(func.count(Criterion.id)))

    return DashboardResponse(
        students=students.scalar_one(),
        criteria=criteria.scalar_one(),
        calculations=await count_results(db),
        top_students=await count_results(db, max_rank=TOP_RANK)
    )
