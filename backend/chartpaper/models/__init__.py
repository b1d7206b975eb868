# Import all models here to ensure they are registered with SQLAlchemy
from .chart import Chart
from .chart_dependency import ChartDependency
from .chart_app import ChartApp
from .registry_config import RegistryConfig

__all__ = [
    "Chart",
    "ChartDependency",
    "ChartApp",
    "RegistryConfig",
]
