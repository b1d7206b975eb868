"""
Chart Rendering Engines.
"""
from .base import ChartEngine, RenderedChart
from .helm import HelmEngine
from .workloads import parse_workloads

__all__ = [
    'ChartEngine',
    'RenderedChart',
    'HelmEngine',
    'parse_workloads',
]
