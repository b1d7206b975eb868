from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .api.api_v1.api import api_router
from .api.api_v1.endpoints import probe
from .core.config import settings
from .core.exceptions import ChartpaperError
from .core.logging import setup_logging
from .db.base import Base
from .db.session import engine

setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

STATUS_BY_CODE = {
    "CHART_NOT_FOUND": 404,
    "CHART_VERSION_NOT_FOUND": 404,
    "REGISTRY_CONFIG_NOT_FOUND": 404,
    "CREDENTIALS_ERROR": 404,
    "AUTHENTICATION_ERROR": 401,
    "RENDER_ERROR": 400,
    "STORAGE_ERROR": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="chartpaper API",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )


@app.exception_handler(ChartpaperError)
async def chartpaper_error_handler(request: Request, exc: ChartpaperError):
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 500),
        content={"error": exc.message, "code": exc.code},
    )


app.include_router(probe.router, tags=["probe"])
app.include_router(api_router, prefix=settings.API_V1_STR)
