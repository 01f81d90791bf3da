# app/main.py
import logging
from fastapi import FastAPI
from sqlalchemy import select, func
from sqlalchemy import exc as sa_exc
from app.config import settings
from app.database import engine, Base, AsyncSessionLocal
from app.data.criteria import default_criteria
from app.models.criteria import Criterion, CriteriaComparison, WeightCalculation
from app.models.student import Student, StudentScore
from app.models.result import AhpResult
from app.routers import criteria, students, ranking, dashboard

logger = logging.getLogger(__name__)

app = FastAPI(title="SPK - Outstanding Student Decision Support System", version="1.0")

# Include Routers
app.include_router(criteria.router)
app.include_router(students.router)
app.include_router(ranking.router)
app.include_router(dashboard.router)

async def seed_criteria():
    async with AsyncSessionLocal() as session:
        count = await session.execute(select(func.count(Criterion.id)))
        if count.scalar_one():
            return
        session.add_all([Criterion(**item) for item in default_criteria])
        await session.commit()
        logger.info("Seeded %d evaluation criteria", len(default_criteria))

# Create DB Tables (for demo only — use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

    if settings.SEED_CRITERIA:
        await seed_criteria()

@app.get("/")
def read_root():
    return {"message": "Welcome to SPK Outstanding Student Backend"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
