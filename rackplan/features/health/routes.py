from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.database import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a round-trip to the database."""
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "database": "connected"}
