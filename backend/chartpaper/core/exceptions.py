"""
Error taxonomy for the fetch/resolve pipeline.
The API layer maps each class to an HTTP status; services raise these
instead of bare ValueError/RuntimeError.
"""
from typing import Optional


class ChartpaperError(Exception):
    """Base class for all service errors."""

    code: str = "UNKNOWN"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RenderError(ChartpaperError):
    """Templating or parsing a chart failed for one location."""

    code = "RENDER_ERROR"

    def __init__(self, location: str, message: str):
        super().__init__(f"{location}: {message}")
        self.location = location
        self.reason = message


class StorageError(ChartpaperError):
    """A catalog write failed."""

    code = "STORAGE_ERROR"


class ChartNotFoundError(ChartpaperError):
    code = "CHART_NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(f"Chart not found: {name}")
        self.name = name


class ChartVersionNotFoundError(ChartpaperError):
    code = "CHART_VERSION_NOT_FOUND"

    def __init__(self, name: str, version: str):
        super().__init__(f"Chart version not found: {name}@{version}")
        self.name = name
        self.version = version


class CredentialsError(ChartpaperError):
    """Registry credentials file is missing or unreadable."""

    code = "CREDENTIALS_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class AuthenticationError(ChartpaperError):
    """Registry login was rejected."""

    code = "AUTHENTICATION_ERROR"


class RegistryConfigNotFoundError(ChartpaperError):
    code = "REGISTRY_CONFIG_NOT_FOUND"

    def __init__(self, config_id: int):
        super().__init__(f"Registry configuration not found: {config_id}")
        self.config_id = config_id
