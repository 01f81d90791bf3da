from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, func
from app.database import Base

class AhpResult(Base):
    __tablename__ = "ahp_results"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    final_score = Column(Float, nullable=False)
    rank = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
