from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import Dict
from app.database import get_db
from app.core.auth import get_current_user
from app.models.criteria import Criterion
from app.models.student import Student, StudentScore
from app.models.result import AhpResult
from app.schemas.student import (
    StudentCreate, StudentUpdate, ScoresUpdate, StudentResponse, StudentListResponse
)

router = APIRouter(prefix="/students", tags=["students"])

def to_response(student: Student, scores: Dict[int, float]) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        name=student.name,
        class_name=student.class_name,
        nis=student.nis,
        scores=scores
    )

async def get_student_or_404(db: AsyncSession, student_id: int) -> Student:
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise HTTPException(404, "Student not found")
    return student

async def ensure_unique_nis(db: AsyncSession, nis: str, exclude_id: int = None):
    query = select(Student.id).where(Student.nis == nis)
    if exclude_id is not None:
        query = query.where(Student.id != exclude_id)
    if (await db.execute(query)).first():
        raise HTTPException(status_code=400, detail="NIS already registered")

async def replace_scores(db: AsyncSession, student_id: int, scores: Dict[int, float]) -> Dict[int, float]:
    """Delete the student's scores and insert the given ones. Caller commits."""
    if scores:
        known = await db.execute(select(Criterion.id).where(Criterion.id.in_(list(scores))))
        missing = set(scores) - {row[0] for row in known.fetchall()}
        if missing:
            raise HTTPException(404, f"Unknown criteria: {sorted(missing)}")

    await db.execute(delete(StudentScore).where(StudentScore.student_id == student_id))
    db.add_all([
        StudentScore(student_id=student_id, criteria_id=criteria_id, score=score)
        for criteria_id, score in scores.items()
    ])
    return dict(scores)

async def scores_for(db: AsyncSession, student_id: int) -> Dict[int, float]:
    result = await db.execute(select(StudentScore).where(StudentScore.student_id == student_id))
    return {s.criteria_id: s.score for s in result.scalars()}

@router.get("", response_model=StudentListResponse)
async def list_students(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    students = (await db.execute(select(Student).order_by(Student.name))).scalars().all()
    scores = (await db.execute(select(StudentScore))).scalars().all()

    # Organize scores by student_id and criteria_id
    scores_by_student: Dict[int, Dict[int, float]] = {}
    for s in scores:
        scores_by_student.setdefault(s.student_id, {})[s.criteria_id] = s.score

    return StudentListResponse(
        total=len(students),
        students=[to_response(s, scores_by_student.get(s.id, {})) for s in students]
    )

@router.post("", response_model=StudentResponse)
async def create_student(
    student_in: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await ensure_unique_nis(db, student_in.nis)

    student = Student(name=student_in.name, class_name=student_in.class_name, nis=student_in.nis)
    db.add(student)
    await db.flush()

    scores = await replace_scores(db, student.id, student_in.scores)
    await db.commit()
    await db.refresh(student)
    return to_response(student, scores)

@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    student_in: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    student = await get_student_or_404(db, student_id)
    if student_in.nis is not None and student_in.nis != student.nis:
        await ensure_unique_nis(db, student_in.nis, exclude_id=student_id)
        student.nis = student_in.nis
    if student_in.name is not None:
        student.name = student_in.name
    if student_in.class_name is not None:
        student.class_name = student_in.class_name

    await db.commit()
    await db.refresh(student)
    return to_response(student, await scores_for(db, student_id))

@router.put("/{student_id}/scores", response_model=StudentResponse)
async def update_scores(
    student_id: int,
    scores_in: ScoresUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    student = await get_student_or_404(db, student_id)
    scores = await replace_scores(db, student_id, scores_in.scores)
    await db.commit()
    return to_response(student, scores)

@router.delete("/{student_id}")
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    student = await get_student_or_404(db, student_id)
    await db.execute(delete(StudentScore).where(StudentScore.student_id == student_id))
    await db.execute(delete(AhpResult).where(AhpResult.student_id == student_id))
    await db.delete(student)
    await db.commit()
    return {"message": "Student deleted successfully"}
