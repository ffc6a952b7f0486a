"""Stats router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...rate_limiter import public_limiter
from .service import StatsService

router = APIRouter(prefix="/stats", tags=["Stats"], dependencies=[Depends(public_limiter)])


@router.get("")
async def get_stats(db: Session = Depends(get_db)):
    """Counts, blood type distribution, recent donations and urgent requests"""
    return StatsService(db).get_stats()
