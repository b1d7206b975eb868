from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    PROJECT_NAME: str = "chartpaper"
    API_V1_STR: str = "/chartpaper/api"
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    DATABASE_URL: str = "sqlite:///./chartpaper.db"

    # Helm CLI used as the rendering engine
    HELM_BINARY: str = "helm"
    HELM_TIMEOUT_SECONDS: int = 300
    DEFAULT_VALUES_PATH: str = ""  # empty = chart's own values.yaml

    # Registry credentials file ({Username, Password, Registry})
    DOCKER_CONFIG_PATH: str = str(Path.home() / ".config" / "compose" / "config.json")

    # Tried in order after a dependency's own repository hint
    FALLBACK_REGISTRIES: List[str] = [
        "oci://registry-1.docker.io/bitnamicharts/{name}",
        "oci://registry.k8s.io/{name}/{name}",
        "oci://ghcr.io/helm/{name}",
    ]

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
