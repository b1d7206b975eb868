from fastapi import APIRouter
from .endpoints import charts, registry

api_router = APIRouter()

# Chart catalog routes
api_router.include_router(charts.router, tags=["charts"])

# Registry and credentials routes
api_router.include_router(registry.router, tags=["registry"])
