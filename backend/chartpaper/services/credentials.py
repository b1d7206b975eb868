"""
Registry credentials file loading.
The file holds {"Username", "Password", "Registry"}; lower-case keys are accepted too.
"""
import json
from dataclasses import dataclass
from pathlib import Path

from ..core.exceptions import CredentialsError


@dataclass
class DockerConfig:
    username: str
    password: str
    registry: str


def load_docker_config(path: str) -> DockerConfig:
    """Read registry credentials; raises CredentialsError if the file is missing or malformed."""
    config_path = Path(path).expanduser()
    try:
        data = json.loads(config_path.read_text())
    except FileNotFoundError as e:
        raise CredentialsError("Docker config not found", path=str(config_path)) from e
    except (OSError, json.JSONDecodeError) as e:
        raise CredentialsError(f"Failed to parse docker config: {e}", path=str(config_path)) from e

    if not isinstance(data, dict):
        raise CredentialsError("Failed to parse docker config: expected a JSON object", path=str(config_path))

    def field(key: str) -> str:
        return str(data.get(key.capitalize()) or data.get(key) or "")

    return DockerConfig(
        username=field("username"),
        password=field("password"),
        registry=field("registry"),
    )
