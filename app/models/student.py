from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    class_name = Column("class", String, nullable=False)
    nis = Column(String, nullable=False, unique=True)  # school registration number
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class StudentScore(Base):
    __tablename__ = "student_scores"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    criteria_id = Column(Integer, ForeignKey("criteria.id", ondelete="CASCADE"), nullable=False)
    score = Column(Float, nullable=False)  # 0–100

    __table_args__ = (
        UniqueConstraint("student_id", "criteria_id", name="uq_student_criteria"),
    )
