"""
Chart Catalog Service.
Versioned storage of chart snapshots with their dependency edges and
application records. At most one version per chart name is current
(is_latest); a chart's children are replaced, never merged, on re-fetch.
"""
import logging
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .fetcher import ChartFetcher, dependency_location
from ..core.exceptions import (
    RenderError, StorageError, ChartNotFoundError, ChartVersionNotFoundError
)
from ..models.chart import Chart
from ..models.chart_app import ChartApp
from ..models.chart_dependency import ChartDependency
from ..schemas.chart import ChartSummary, DependencySpec, NOT_AVAILABLE

logger = logging.getLogger(__name__)


def _nullable_tag(tag: str) -> Optional[str]:
    return None if tag == NOT_AVAILABLE else tag


class ChartCatalog:
    """
    Catalog operations over one database session.

    `fetcher` is optional; without it dependency edges are stored without
    the image/canary tag enrichment.
    """

    def __init__(self, db: Session, fetcher: Optional[ChartFetcher] = None):
        self.db = db
        self.fetcher = fetcher

    # ==========================================
    # READS
    # ==========================================

    def get_current(self, name: str) -> Optional[Chart]:
        return self.db.query(Chart).filter(Chart.name == name, Chart.is_latest == True).first()  # noqa: E712

    def require_current(self, name: str) -> Chart:
        chart = self.get_current(name)
        if chart is None:
            raise ChartNotFoundError(name)
        return chart

    def get_version(self, name: str, version: str) -> Optional[Chart]:
        return self.db.query(Chart).filter(Chart.name == name, Chart.version == version).first()

    def exists(self, name: str) -> bool:
        """True if any version of `name` is stored."""
        return self.db.query(Chart.id).filter(Chart.name == name).first() is not None

    def list_current(self) -> List[Chart]:
        return (
            self.db.query(Chart)
            .filter(Chart.is_latest == True)  # noqa: E712
            .order_by(Chart.updated_at.desc(), Chart.id.desc())
            .all()
        )

    def list_versions(self, name: str) -> List[Chart]:
        return (
            self.db.query(Chart)
            .filter(Chart.name == name)
            .order_by(Chart.created_at.desc(), Chart.id.desc())
            .all()
        )

    def list_dependencies(self, name: str) -> List[ChartDependency]:
        """Dependency edges of the current version of `name`."""
        chart = self.require_current(name)
        return (
            self.db.query(ChartDependency)
            .filter(ChartDependency.chart_id == chart.id)
            .order_by(ChartDependency.id)
            .all()
        )

    def list_apps(self, name: str) -> List[ChartApp]:
        chart = self.require_current(name)
        return self.db.query(ChartApp).filter(ChartApp.chart_id == chart.id).order_by(ChartApp.id).all()

    # ==========================================
    # FETCH-OR-UPDATE
    # ==========================================

    def store(self, summary: ChartSummary, chart_url: str) -> Chart:
        """
        Persist a fetched chart.

        A new (name, version) gets a new row and becomes the current
        version. A known (name, version) keeps its row (id, version and
        current flag) and has its dependencies and apps replaced.
        """
        meta = summary.chart
        # Network calls happen before any row is touched
        dependency_tags = [self._dependency_tags(dep) for dep in meta.dependencies]

        try:
            chart = (
                self.db.query(Chart)
                .filter(Chart.name == meta.name, Chart.version == meta.version)
                .with_for_update()
                .first()
            )
            if chart is None:
                logger.info(f"Creating new chart: {meta.name} v{meta.version}")
                # Lock every stored version of the name before moving the current flag
                self.db.query(Chart.id).filter(Chart.name == meta.name).with_for_update().all()
                self.db.query(Chart).filter(Chart.name == meta.name).update(
                    {Chart.is_latest: False}, synchronize_session="fetch"
                )
                chart = Chart(name=meta.name, version=meta.version, is_latest=True)
                self.db.add(chart)
            else:
                logger.info(f"Using existing chart: {meta.name} v{meta.version} (ID: {chart.id})")
                chart.dependencies.clear()
                chart.apps.clear()

            chart.description = meta.description or None
            chart.type = meta.type
            chart.chart_url = chart_url
            chart.image_tag = _nullable_tag(summary.image_tag)
            chart.canary_tag = _nullable_tag(summary.canary_tag)
            self.db.flush()

            self._store_dependencies(chart, meta.dependencies, dependency_tags)
            self._store_apps(chart, summary)

            facts = summary.manifest_metadata
            if facts is not None and not facts.is_default():
                chart.container_images = list(facts.container_images)
                chart.ingress_paths = list(facts.ingress_paths)
                chart.service_ports = list(facts.service_ports)
                chart.manifest_parsed_at = datetime.utcnow()

            chart.updated_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store chart {meta.name}: {e}")
            raise StorageError(f"failed to store chart {meta.name}: {e}") from e

        self.db.refresh(chart)
        logger.info(f"Chart stored in database with ID: {chart.id}")
        return chart

    def _dependency_tags(self, dep: DependencySpec) -> Tuple[str, str]:
        """Image and canary tags of a dependency, fetched from its repository if possible."""
        if not dep.repository or self.fetcher is None:
            return NOT_AVAILABLE, NOT_AVAILABLE

        location = dependency_location(dep.repository, dep.name)
        try:
            fetched = self.fetcher.fetch(location, name=dep.name, version=dep.version, parse_apps=False)
        except RenderError as e:
            logger.warning(f"Could not fetch dependency info for {dep.name}: {e}")
            return NOT_AVAILABLE, NOT_AVAILABLE

        logger.info(f"Got dependency tags for {dep.name}: image={fetched.image_tag}, canary={fetched.canary_tag}")
        return fetched.image_tag, fetched.canary_tag

    def _store_dependencies(self, chart: Chart, dependencies: List[DependencySpec],
                            tags: List[Tuple[str, str]]) -> None:
        for dep, (image_tag, canary_tag) in zip(dependencies, tags):
            try:
                with self.db.begin_nested():
                    self.db.add(ChartDependency(
                        chart_id=chart.id,
                        dependency_name=dep.name,
                        dependency_version=dep.version,
                        repository=dep.repository or None,
                        condition_field=dep.condition or None,
                        image_tag=image_tag,
                        canary_tag=canary_tag,
                    ))
            except SQLAlchemyError as e:
                logger.error(f"Failed to store dependency {dep.name} for {chart.name}: {e}")

    def _store_apps(self, chart: Chart, summary: ChartSummary) -> None:
        for app in summary.apps:
            try:
                with self.db.begin_nested():
                    self.db.add(ChartApp(
                        chart_id=chart.id,
                        name=app.name,
                        image=app.image or None,
                        app_type=app.type or None,
                        ports=list(app.ports) or None,
                        configs=dict(app.configs) or None,
                        mounts=dict(app.mounts) or None,
                    ))
            except SQLAlchemyError as e:
                logger.warning(f"Failed to store app {app.name} for {chart.name}: {e}")

    # ==========================================
    # VERSION SWITCH / DELETION
    # ==========================================

    def switch_version(self, name: str, version: str) -> Chart:
        """Make (name, version) the only current version of `name`."""
        target = self.get_version(name, version)
        if target is None:
            if not self.exists(name):
                raise ChartNotFoundError(name)
            raise ChartVersionNotFoundError(name, version)

        try:
            self.db.query(Chart.id).filter(Chart.name == name).with_for_update().all()
            self.db.query(Chart).filter(Chart.name == name).update(
                {Chart.is_latest: False}, synchronize_session="fetch"
            )
            target.is_latest = True
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"failed to switch {name} to {version}: {e}") from e

        self.db.refresh(target)
        logger.info(f"Switched {name} to version {version}")
        return target

    def delete_chart(self, name: str) -> int:
        """Delete every version of `name`; returns the number of rows removed."""
        charts = self.db.query(Chart).filter(Chart.name == name).all()
        if not charts:
            raise ChartNotFoundError(name)
        try:
            for chart in charts:
                self.db.delete(chart)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"failed to delete chart {name}: {e}") from e
        logger.info(f"Deleted {len(charts)} version(s) of {name}")
        return len(charts)

    def delete_version(self, name: str, version: str) -> None:
        """Delete one version. No other version is promoted if it was current."""
        chart = self.get_version(name, version)
        if chart is None:
            raise ChartVersionNotFoundError(name, version)
        try:
            self.db.delete(chart)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"failed to delete {name}@{version}: {e}") from e
        logger.info(f"Deleted {name}@{version}")
