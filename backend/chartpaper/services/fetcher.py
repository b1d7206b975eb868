"""
Chart Fetcher.
Renders one chart location through the engine and normalizes the result
into a ChartSummary: metadata, declared dependencies, manifest facts and
best-effort application records.
"""
import logging
from typing import Optional, List

from .engine.base import ChartEngine
from .manifest import extract_manifest_facts
from .credentials import load_docker_config
from ..core.exceptions import RenderError, CredentialsError, AuthenticationError
from ..schemas.chart import ChartSummary, ChartMeta, DependencySpec, AppSpec

logger = logging.getLogger(__name__)


def chart_name_from_location(location: str) -> str:
    """Best guess at a chart name from its location, e.g. oci://host/charts/redis:1.2 -> redis."""
    name = location.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".tgz"):
        name = name[:-len(".tgz")]
    return name.split(":", 1)[0]


def dependency_location(repository: str, name: str) -> str:
    """Location of a dependency chart inside its declared repository."""
    repository = repository.rstrip("/")
    if repository.endswith("/" + name):
        return repository
    return f"{repository}/{name}"


class ChartFetcher:
    """
    Fetch adapter over a ChartEngine. Performs no persistence.

    Every failure to render a location surfaces as RenderError tagged with
    that location; callers decide whether to try another one.
    """

    def __init__(self,
                 engine: ChartEngine,
                 default_values_path: str = "",
                 credentials_path: Optional[str] = None):
        self.engine = engine
        self.default_values_path = default_values_path
        self.credentials_path = credentials_path
        self._login_attempted = False

    def _authenticate(self) -> None:
        """Log the engine in with the credentials file, once per fetcher."""
        if not self.credentials_path or self._login_attempted:
            return
        self._login_attempted = True
        try:
            config = load_docker_config(self.credentials_path)
        except CredentialsError as e:
            logger.debug(f"No registry credentials loaded: {e}")
            return
        if not config.registry:
            return
        try:
            self.engine.authenticate(config.username, config.password, config.registry)
        except AuthenticationError as e:
            logger.warning(f"Authentication warning: {e}")

    def fetch(
        self,
        location: str,
        values_path: Optional[str] = None,
        overrides: Optional[List[str]] = None,
        use_host_network: bool = False,
        name: str = "",
        version: str = "",
        parse_apps: bool = True,
    ) -> ChartSummary:
        """
        Render `location` and build its summary.

        `name` and `version` are the caller's declared identity, used only to
        name the chart when the engine cannot read its metadata.
        """
        values_path = self.default_values_path if values_path is None else values_path
        overrides = overrides or []

        self._authenticate()
        rendered = self.engine.render(location, values_path, overrides)
        if rendered is None:
            raise RenderError(location, "chart templating returned no result")

        chart = self._chart_meta(location, rendered.metadata, name)
        summary = ChartSummary(chart=chart)

        if rendered.manifest:
            facts = extract_manifest_facts(rendered.manifest)
            summary.image_tag = facts.image_tag
            summary.canary_tag = facts.canary_tag
            summary.manifest_metadata = facts

        if parse_apps:
            summary.apps = self._parse_apps(location, values_path, overrides, use_host_network, rendered.manifest)

        logger.info(f"Fetched chart {chart.name} v{chart.version} from {location} "
                    f"({len(chart.dependencies)} dependencies, {len(summary.apps)} apps)")
        return summary

    def _chart_meta(self, location: str, metadata: Optional[dict], declared_name: str) -> ChartMeta:
        fallback_name = declared_name or chart_name_from_location(location)
        if not metadata:
            logger.warning(f"No chart metadata found for {location}, using {fallback_name}")
            return ChartMeta(
                name=fallback_name,
                version="unknown",
                description=f"Chart fetched from {location}",
            )

        dependencies = [
            DependencySpec(
                name=str(dep.get("name") or ""),
                version=str(dep.get("version") or ""),
                repository=str(dep.get("repository") or ""),
                condition=str(dep.get("condition") or ""),
            )
            for dep in metadata.get("dependencies") or []
            if isinstance(dep, dict)
        ]

        return ChartMeta(
            name=str(metadata.get("name") or fallback_name),
            version=str(metadata.get("version") or "unknown"),
            description=str(metadata.get("description") or f"Chart fetched from {location}"),
            type=str(metadata.get("type") or "application"),
            dependencies=dependencies,
        )

    def _parse_apps(self, location: str, values_path: str, overrides: List[str],
                    use_host_network: bool, manifest: str) -> List[AppSpec]:
        try:
            return self.engine.parse(location, values_path, overrides, use_host_network, manifest=manifest)
        except RenderError as e:
            logger.warning(f"Parse error (non-fatal): {e}")
            return []
