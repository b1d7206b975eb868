from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class RegistryConfigBase(BaseModel):
    name: str
    registry_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    is_default: bool = False


class RegistryConfigCreate(RegistryConfigBase):
    """Schema for saving a new registry endpoint."""
    pass


class RegistryConfigUpdate(RegistryConfigBase):
    """Replacement of a saved registry endpoint; an omitted password keeps the stored one."""
    pass


class RegistryConfigSchema(RegistryConfigBase):
    id: int
    password: Optional[str] = Field(default=None, exclude=True)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DockerConfigView(BaseModel):
    """Credentials file contents safe to show (no password)."""
    username: str
    registry: str
    status: str = "configured"
