"""
Rendering Engine Interface.
The catalog never templates charts itself; it drives an engine that turns a
chart location plus override values into metadata and manifest text.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from ...schemas.chart import AppSpec


@dataclass
class RenderedChart:
    """Output of one render call."""
    metadata: Optional[Dict[str, Any]]  # Chart.yaml contents, None if unavailable
    manifest: str = ""


class ChartEngine(ABC):
    """
    Abstract base class for chart rendering engines.

    Implementations raise RenderError for any failure to template or parse a
    location and AuthenticationError for rejected registry logins.
    """

    @abstractmethod
    def render(
        self,
        location: str,
        values_path: str = "",
        overrides: Optional[List[str]] = None,
    ) -> Optional[RenderedChart]:
        """Template the chart at `location` with the given values file and --set overrides."""
        pass

    @abstractmethod
    def parse(
        self,
        location: str,
        values_path: str = "",
        overrides: Optional[List[str]] = None,
        use_host_network: bool = False,
        manifest: Optional[str] = None,
    ) -> List[AppSpec]:
        """
        Turn a chart's rendered workloads into application records.
        An already rendered manifest may be passed to skip a second render.
        """
        pass

    @abstractmethod
    def authenticate(self, username: str, password: str, registry: str) -> None:
        """Log in to an OCI registry."""
        pass
