"""
Registry API Endpoints.
Saved registry configurations, the local credentials file, and registry login.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chartpaper.core.config import settings
from chartpaper.core.deps import get_db, get_engine
from chartpaper.core.exceptions import RegistryConfigNotFoundError
from chartpaper.models.registry_config import RegistryConfig
from chartpaper.schemas.registry import (
    DockerConfigView,
    RegistryConfigCreate,
    RegistryConfigSchema,
    RegistryConfigUpdate,
)
from chartpaper.services.credentials import load_docker_config
from chartpaper.services.engine import ChartEngine

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_config(db: Session, config_id: int) -> RegistryConfig:
    config = db.query(RegistryConfig).filter(RegistryConfig.id == config_id).first()
    if not config:
        raise RegistryConfigNotFoundError(config_id)
    return config


def _clear_defaults(db: Session, except_id: int = None):
    query = db.query(RegistryConfig).filter(RegistryConfig.is_default == True)  # noqa: E712
    if except_id is not None:
        query = query.filter(RegistryConfig.id != except_id)
    query.update({RegistryConfig.is_default: False}, synchronize_session="fetch")


# ==========================================
# CREDENTIALS FILE
# ==========================================

@router.get("/docker-config", response_model=DockerConfigView)
def get_docker_config():
    """Show which registry and user the credentials file configures."""
    config = load_docker_config(settings.DOCKER_CONFIG_PATH)
    return DockerConfigView(username=config.username, registry=config.registry)


@router.post("/authenticate")
def authenticate(engine: ChartEngine = Depends(get_engine)):
    """Log the rendering engine in to the registry from the credentials file."""
    config = load_docker_config(settings.DOCKER_CONFIG_PATH)
    engine.authenticate(config.username, config.password, config.registry)
    return {
        "message": "Authentication successful",
        "registry": config.registry,
        "username": config.username,
    }


# ==========================================
# REGISTRY CONFIGURATIONS
# ==========================================

@router.get("/registry-configs", response_model=List[RegistryConfigSchema])
def list_registry_configs(db: Session = Depends(get_db)):
    """Default registry first, then by name."""
    return (
        db.query(RegistryConfig)
        .order_by(RegistryConfig.is_default.desc(), RegistryConfig.name.asc())
        .all()
    )


@router.post("/registry-configs", response_model=RegistryConfigSchema, status_code=status.HTTP_201_CREATED)
def create_registry_config(config_data: RegistryConfigCreate, db: Session = Depends(get_db)):
    if config_data.is_default:
        _clear_defaults(db)

    config = RegistryConfig(**config_data.model_dump())
    db.add(config)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Registry configuration '{config_data.name}' already exists")
    db.refresh(config)
    return config


@router.put("/registry-configs/{config_id}", response_model=RegistryConfigSchema)
def update_registry_config(config_id: int, config_data: RegistryConfigUpdate, db: Session = Depends(get_db)):
    config = _get_config(db, config_id)

    if config_data.is_default:
        _clear_defaults(db, except_id=config_id)

    updates = config_data.model_dump()
    # An omitted password keeps the stored one
    if updates.get("password") is None:
        updates.pop("password")
    for field, value in updates.items():
        setattr(config, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Registry configuration '{config_data.name}' already exists")
    db.refresh(config)
    return config


@router.delete("/registry-configs/{config_id}")
def delete_registry_config(config_id: int, db: Session = Depends(get_db)):
    config = _get_config(db, config_id)
    db.delete(config)
    db.commit()
    return {"message": "Registry configuration deleted"}


@router.post("/registry-configs/{config_id}/set-default", response_model=RegistryConfigSchema)
def set_default_registry(config_id: int, db: Session = Depends(get_db)):
    config = _get_config(db, config_id)
    _clear_defaults(db, except_id=config_id)
    config.is_default = True
    db.commit()
    db.refresh(config)
    logger.info(f"Default registry set to {config.name}")
    return config
