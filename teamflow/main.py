import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamflow.api.router import api_router
from teamflow.cache.client import create_redis_client
from teamflow.core.config import settings
from teamflow.core.exceptions import AppError, ValidationError
from teamflow.db.session import AsyncSessionLocal, engine
from teamflow.services import user as user_service
from teamflow.services.session import MemorySessionStore, RedisSessionStore
from teamflow.storage.database import DatabaseStorage
from teamflow.storage.memory import MemStorage

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    redis_client = None
    if settings.SESSION_BACKEND == "redis":
        redis_client = create_redis_client()
        app.state.session_store = RedisSessionStore(
            redis_client, settings.SESSION_IDLE_TIMEOUT, settings.SESSION_MAX_LIFETIME
        )
    else:
        app.state.session_store = MemorySessionStore(settings.SESSION_IDLE_TIMEOUT, settings.SESSION_MAX_LIFETIME)

    if settings.STORAGE_BACKEND == "memory":
        app.state.storage = MemStorage()
        await user_service.seed_first_admin(app.state.storage)
    else:
        async with AsyncSessionLocal() as db:
            await user_service.seed_first_admin(DatabaseStorage(db))

    logger.info(
        "%s started (storage=%s, sessions=%s)", settings.PROJECT_NAME, settings.STORAGE_BACKEND, settings.SESSION_BACKEND
    )
    yield

    if redis_client is not None:
        await redis_client.aclose()
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, openapi_url=f"{settings.API_PREFIX}/openapi.json", lifespan=lifespan)

# Set CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    content = {"message": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    return {"message": "Welcome to TeamFlow"}
