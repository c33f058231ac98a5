"""TVET Assessment API - FastAPI main application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.errors import ServiceError
from app.database import Base, engine
from app.routers import answer_sheets, archive, results, test_sessions, tests

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables on startup."""
    logger.info("Starting %s", settings.APP_NAME)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
    logger.info("%s shutdown complete", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Test administration and result scoring API",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(_: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    """Keep explicit HTTP exceptions, reshaped to the {message} body."""
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc", [])
    loc_path = ".".join(str(p) for p in loc if p not in {"body", "query", "path"})
    msg = first_error.get("msg", "Validation failed")
    message = f"{loc_path}: {msg}" if loc_path else msg
    return JSONResponse(
        status_code=422,
        content={"message": message, "errors": jsonable_encoder(errors)},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(_: Request, exc: IntegrityError):
    logger.warning("Integrity error: %s", exc.orig)
    return JSONResponse(status_code=400, content={"message": "Duplicate or invalid reference"})


@app.exception_handler(Exception)
async def global_exception_handler(_: Request, exc: Exception):
    """Catch unhandled exceptions and return stable 500 response."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "An unexpected error occurred. Please try again."},
    )


app.include_router(tests.router, prefix="/api")
app.include_router(answer_sheets.router, prefix="/api")
app.include_router(results.router, prefix="/api")
app.include_router(test_sessions.router, prefix="/api")
app.include_router(archive.router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "TVET Assessment API", "status": "ok"}
