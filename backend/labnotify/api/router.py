from fastapi import APIRouter
from labnotify.api import health, notifications, settings, channels, logs

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(settings.router, prefix="/notification-settings", tags=["notification-settings"])
api_router.include_router(channels.router, prefix="/channels", tags=["channels"])
api_router.include_router(logs.router, tags=["logs"])
