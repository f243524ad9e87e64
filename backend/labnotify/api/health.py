import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify import __version__
from labnotify.config import settings
from labnotify.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        database = "error"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "version": __version__,
        "database": database,
        "channels": {
            "in_app": True,
            "sms": settings.sms_configured,
            "whatsapp": settings.whatsapp_configured,
            "email": False,
        },
    }
