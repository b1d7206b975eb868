"""
Dependency Resolver.
Fetches the dependencies of a stored chart that are not in the catalog yet,
trying each dependency's own repository and then a list of well-known
registries, one location at a time.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .catalog import ChartCatalog
from .fetcher import ChartFetcher, dependency_location
from ..core.exceptions import RenderError, StorageError
from ..schemas.chart import ChartSummary, DependencyRecord

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    """Outcome of one resolve pass; partial success is normal."""
    fetched: List[ChartSummary] = field(default_factory=list)
    total_dependencies: int = 0
    errors: List[str] = field(default_factory=list)


class DependencyResolver:

    def __init__(self, catalog: ChartCatalog, fetcher: ChartFetcher, fallback_registries: List[str]):
        self.catalog = catalog
        self.fetcher = fetcher
        self.fallback_registries = fallback_registries

    def candidates(self, dep: DependencyRecord) -> List[str]:
        """Locations to try for a dependency, in order, without duplicates."""
        locations = []
        if dep.repository:
            locations.append(dependency_location(dep.repository, dep.dependency_name))
        locations.extend(template.format(name=dep.dependency_name) for template in self.fallback_registries)
        return list(dict.fromkeys(locations))

    def resolve(self, chart_name: str) -> ResolutionResult:
        """
        Fetch and store every missing dependency of the current version of `chart_name`.
        Raises ChartNotFoundError if the chart is not stored; per-dependency
        failures are collected in the result instead.
        """
        dependencies = [
            DependencyRecord.model_validate(dep) for dep in self.catalog.list_dependencies(chart_name)
        ]
        result = ResolutionResult(total_dependencies=len(dependencies))
        logger.info(f"Found {len(dependencies)} dependencies for chart {chart_name}")

        for dep in dependencies:
            if self.catalog.exists(dep.dependency_name):
                logger.info(f"Dependency {dep.dependency_name} already exists in database")
                continue

            summary, location, last_error = self._fetch_first(dep)
            if summary is None:
                result.errors.append(
                    f"Failed to fetch {dep.dependency_name} from any registry: {last_error}"
                )
                continue

            try:
                self.catalog.store(summary, location)
            except StorageError as e:
                result.errors.append(f"Failed to store {dep.dependency_name}: {e}")
                continue

            result.fetched.append(summary)
            logger.info(f"Successfully fetched and stored: {dep.dependency_name} v{summary.chart.version}")

        return result

    def _fetch_first(self, dep: DependencyRecord):
        """First candidate that renders, as (summary, location, None), or (None, None, last_error)."""
        last_error: Optional[RenderError] = None
        for location in self.candidates(dep):
            logger.info(f"Trying registry: {location}")
            try:
                summary = self.fetcher.fetch(
                    location, name=dep.dependency_name, version=dep.dependency_version
                )
            except RenderError as e:
                logger.warning(f"Failed to fetch from {location}: {e.reason}")
                last_error = e
                continue
            return summary, location, None
        return None, None, last_error
