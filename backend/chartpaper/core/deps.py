"""
FastAPI dependency injection for the catalog pipeline.
Every request gets its own session and explicitly wired services.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from .config import settings
from ..db.session import SessionLocal
from ..services.catalog import ChartCatalog
from ..services.engine import ChartEngine, HelmEngine
from ..services.fetcher import ChartFetcher
from ..services.resolver import DependencyResolver


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_engine() -> ChartEngine:
    return HelmEngine(helm_binary=settings.HELM_BINARY, timeout=settings.HELM_TIMEOUT_SECONDS)


def get_fetcher(engine: ChartEngine = Depends(get_engine)) -> ChartFetcher:
    return ChartFetcher(
        engine,
        default_values_path=settings.DEFAULT_VALUES_PATH,
        credentials_path=settings.DOCKER_CONFIG_PATH,
    )


def get_catalog(
    db: Session = Depends(get_db),
    fetcher: ChartFetcher = Depends(get_fetcher),
) -> ChartCatalog:
    return ChartCatalog(db, fetcher)


def get_resolver(
    catalog: ChartCatalog = Depends(get_catalog),
    fetcher: ChartFetcher = Depends(get_fetcher),
) -> DependencyResolver:
    return DependencyResolver(catalog, fetcher, settings.FALLBACK_REGISTRIES)
