from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, func
from app.database import Base

class Criterion(Base):
    __tablename__ = "criteria"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    weight = Column(Float, nullable=True)  # null until weights are calculated
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class CriteriaComparison(Base):
    __tablename__ = "criteria_comparisons"

    id = Column(Integer, primary_key=True, index=True)
    criteria1_id = Column(Integer, ForeignKey("criteria.id", ondelete="CASCADE"), nullable=False)
    criteria2_id = Column(Integer, ForeignKey("criteria.id", ondelete="CASCADE"), nullable=False)
    value = Column(Float, nullable=False)  # how much more important criteria1 is than criteria2
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("criteria1_id", "criteria2_id", name="uq_criteria_pair"),
    )

class WeightCalculation(Base):
    __tablename__ = "weight_calculations"

    id = Column(Integer, primary_key=True, index=True)
    weights = Column(JSON, nullable=False)  # {criterion_id: weight}
    lambda_max = Column(Float, nullable=False)
    consistency_index = Column(Float, nullable=False)
    consistency_ratio = Column(Float, nullable=False)
    is_consistent = Column(Boolean, nullable=False)
    decision = Column(String, nullable=False)  # accepted, rejected, forced
    applied = Column(Boolean, nullable=False, default=False)
    superseded = Column(Boolean, nullable=False, default=False)  # set once the matrix changes
    actor = Column(String, nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
