from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict
from app.core.logging import logger
from app.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check(response: Response, session: AsyncSession = Depends(get_session)):
    """Liveness plus a round trip to the database."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {e}")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "degraded", "service": "eventcircle", "database": "unreachable"}
    return {"status": "healthy", "service": "eventcircle", "database": "ok"}
