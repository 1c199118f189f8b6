import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventsnap.api.auth import router as auth_router
from eventsnap.api.events import router as events_router
from eventsnap.api.photos import router as photos_router
from eventsnap.api.public import router as public_router
from eventsnap.api.user import router as user_router
from eventsnap.config import get_app_settings
from eventsnap.dependencies import create_storage, get_storage_instance, set_storage_instance
from eventsnap.errors import EventSnapError

from .logging_config import configure_logging

# uvicorn imports this module before starting the app, so this also covers its loggers
_settings = get_app_settings()
configure_logging(level=_settings.log_level, colored=_settings.log_colors)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the media storage client on startup and close it on shutdown."""
    logger.info("Starting up application...")
    try:
        set_storage_instance(create_storage())
        logger.info("Storage client initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize storage client: {e}")
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await get_storage_instance().close()
        logger.info("Storage client closed successfully")
    except Exception as e:
        logger.error(f"Error during storage client shutdown: {e}")
    finally:
        set_storage_instance(None)


app = FastAPI(title="EventSnap", redoc_url=None, redirect_slashes=False, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EventSnapError)
async def handle_domain_error(request: Request, exc: EventSnapError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(events_router)
app.include_router(photos_router)
app.include_router(public_router)


@app.get("/")
def read_root():
    return {"message": "Hello from EventSnap!"}
