import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import settings
from database import init_db
from api.applications import router as applications_router
from api.auth import router as auth_router
from api.deps import SessionUser
from api.estimates import router as estimates_router
from api.manage_users import router as manage_users_router
from api.quote import router as quote_router
from api.reviews import router as reviews_router
from api.service import dashboard_router, router as service_router
from api.storage import cache_router, router as storage_router
from api.users import router as users_router
from utils.logging_config import setup_logging

setup_logging(settings.log_level)
logger = logging.getLogger("service_desk.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Service desk API for a computer retailer: applications, reviews, users and estimates",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def session_from_headers(request: Request, call_next):
    """Behind an auth proxy, take the session from X-User-Id / X-User-Authority."""
    if settings.trust_session_headers:
        user_id = request.headers.get("x-user-id")
        if user_id:
            request.state.session = SessionUser(id=user_id, authority=request.headers.get("x-user-authority", "user"))
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(manage_users_router)
app.include_router(applications_router)
app.include_router(service_router)
app.include_router(dashboard_router)
app.include_router(reviews_router)
app.include_router(estimates_router)
app.include_router(quote_router)
app.include_router(storage_router)
app.include_router(cache_router)

# Local object storage is served straight from disk
Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
app.mount("/files", StaticFiles(directory=settings.storage_dir), name="files")


@app.get("/health")
async def health():
    return {"status": "ok"}
