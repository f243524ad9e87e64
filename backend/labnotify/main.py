import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labnotify import __version__
from labnotify.config import settings
from labnotify.database import init_database
from labnotify.api.router import api_router
from labnotify.api.websocket import websocket_router
from labnotify.api.logs import install_log_handler
from labnotify.services.settings_seeder import seed_default_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    install_log_handler()
    logger.info("Starting labnotify...")
    await init_database()
    await seed_default_settings()
    logger.info(
        f"labnotify ready on port {settings.API_PORT} "
        f"(sms={'on' if settings.sms_configured else 'off'}, "
        f"whatsapp={'on' if settings.whatsapp_configured else 'off'})"
    )
    yield
    logger.info("Shutting down labnotify...")


app = FastAPI(
    title="labnotify API",
    description="Diagnostic center notification dispatcher",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")
app.include_router(websocket_router)
