import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskhub.database import Database, get_database

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(database: Database = Depends(get_database)):
    """Report whether the database answers."""
    try:
        await database.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "status": "DOWN", "database": "Disconnected"},
        )
    return {"success": True, "status": "UP", "database": "Connected"}
