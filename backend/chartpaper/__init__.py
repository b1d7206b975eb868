"""chartpaper: Helm chart catalog with version history and dependency resolution."""

__version__ = "1.0.0"
