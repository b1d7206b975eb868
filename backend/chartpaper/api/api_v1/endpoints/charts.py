"""
Chart Catalog API Endpoints.
Fetch charts into the catalog, browse versions and dependencies, resolve
missing dependencies.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from chartpaper.core.deps import get_catalog, get_fetcher, get_resolver
from chartpaper.core.exceptions import RenderError, StorageError
from chartpaper.models.chart import Chart
from chartpaper.schemas.chart import (
    AppRecord,
    ChartDependenciesResponse,
    ChartMeta,
    ChartRecord,
    ChartRequest,
    ChartSummary,
    ChartVersionsResponse,
    DependencyRecord,
    DependencySpec,
    FetchChartResponse,
    ManifestFacts,
    NOT_AVAILABLE,
    ResolveDependenciesResponse,
    SwitchVersionRequest,
)
from chartpaper.services.catalog import ChartCatalog
from chartpaper.services.fetcher import ChartFetcher
from chartpaper.services.resolver import DependencyResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def _summary_from_row(chart: Chart, with_dependencies: bool = True) -> ChartSummary:
    """Rebuild a chart summary from its stored row."""
    dependencies = []
    if with_dependencies:
        dependencies = [
            DependencySpec(
                name=dep.dependency_name,
                version=dep.dependency_version,
                repository=dep.repository or "",
                condition=dep.condition_field or "",
            )
            for dep in chart.dependencies
        ]

    facts = None
    if chart.manifest_parsed_at is not None:
        facts = ManifestFacts(
            image_tag=chart.image_tag or NOT_AVAILABLE,
            canary_tag=chart.canary_tag or NOT_AVAILABLE,
            container_images=chart.container_images or [],
            ingress_paths=chart.ingress_paths or [],
            service_ports=chart.service_ports or [],
        )

    return ChartSummary(
        chart=ChartMeta(
            name=chart.name,
            version=chart.version,
            description=chart.description or "",
            type=chart.type,
            dependencies=dependencies,
        ),
        image_tag=chart.image_tag or NOT_AVAILABLE,
        canary_tag=chart.canary_tag or NOT_AVAILABLE,
        manifest_metadata=facts,
    )


# ==========================================
# FETCH
# ==========================================

@router.post("/fetch-chart", response_model=FetchChartResponse)
def fetch_chart(
    request: ChartRequest,
    fetcher: ChartFetcher = Depends(get_fetcher),
    catalog: ChartCatalog = Depends(get_catalog),
):
    """
    Render a chart from its location and store it in the catalog.
    Fails only if the requested location itself cannot be rendered.
    """
    logger.info(f"Fetching chart: {request.chart_url}")
    try:
        summary = fetcher.fetch(
            request.chart_url,
            values_path=request.values_path or None,
            overrides=request.set_values,
            use_host_network=request.use_host_network,
        )
    except RenderError as e:
        logger.warning(f"Failed to fetch chart {request.chart_url}: {e}")
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Failed to fetch chart",
                "details": e.reason,
                "chart_url": request.chart_url,
            }
        )

    dependencies_count = len(summary.chart.dependencies)
    response = FetchChartResponse(
        message="Chart fetched successfully",
        chart=summary,
        apps=summary.apps,
        dependencies_count=dependencies_count,
        info=(f"Chart has {dependencies_count} dependencies" if dependencies_count
              else "Chart has no dependencies"),
    )

    try:
        stored = catalog.store(summary, request.chart_url)
    except StorageError as e:
        # The fetched chart is still returned, flagged as not stored
        logger.warning(f"Failed to store chart in database: {e}")
    else:
        response.stored = True
        response.chart_id = stored.id

    return response


# ==========================================
# BROWSE
# ==========================================

@router.get("/charts", response_model=List[ChartSummary])
def list_charts(catalog: ChartCatalog = Depends(get_catalog)):
    """List the current version of every stored chart."""
    return [_summary_from_row(chart) for chart in catalog.list_current()]


@router.get("/charts/{name}", response_model=ChartSummary)
def get_chart(name: str, catalog: ChartCatalog = Depends(get_catalog)):
    """Current version of a chart with its manifest facts."""
    return _summary_from_row(catalog.require_current(name))


@router.get("/charts/{name}/versions", response_model=ChartVersionsResponse)
def list_chart_versions(name: str, catalog: ChartCatalog = Depends(get_catalog)):
    versions = [ChartRecord.model_validate(chart) for chart in catalog.list_versions(name)]
    return ChartVersionsResponse(chart=name, versions=versions, count=len(versions))


@router.get("/charts/{name}/dependencies", response_model=ChartDependenciesResponse)
def list_chart_dependencies(name: str, catalog: ChartCatalog = Depends(get_catalog)):
    dependencies = [DependencyRecord.model_validate(dep) for dep in catalog.list_dependencies(name)]
    return ChartDependenciesResponse(
        chart=name,
        dependencies=dependencies,
        count=len(dependencies),
        message=None if dependencies else "Chart has no dependencies",
    )


@router.get("/charts/{name}/apps", response_model=List[AppRecord])
def list_chart_apps(name: str, catalog: ChartCatalog = Depends(get_catalog)):
    """Applications parsed from the current version's manifest."""
    return catalog.list_apps(name)


# ==========================================
# DEPENDENCY RESOLUTION
# ==========================================

@router.post("/charts/{name}/fetch-dependencies", response_model=ResolveDependenciesResponse)
def fetch_chart_dependencies(name: str, resolver: DependencyResolver = Depends(get_resolver)):
    """
    Fetch every dependency of a chart that is not in the catalog yet.
    Per-dependency failures are reported in `errors`, not as a failed request.
    """
    result = resolver.resolve(name)
    return ResolveDependenciesResponse(
        message=f"Processed {result.total_dependencies} dependencies",
        fetched_charts=result.fetched,
        total_dependencies=result.total_dependencies,
        newly_fetched=len(result.fetched),
        errors=result.errors,
    )


# ==========================================
# VERSION MANAGEMENT
# ==========================================

@router.post("/charts/{name}/switch-version")
def switch_chart_version(
    name: str,
    request: SwitchVersionRequest,
    catalog: ChartCatalog = Depends(get_catalog),
):
    chart = catalog.switch_version(name, request.version)
    return {
        "message": f"Switched {name} to version {chart.version}",
        "chart": name,
        "version": chart.version,
    }


@router.delete("/charts/{name}")
def delete_chart(name: str, catalog: ChartCatalog = Depends(get_catalog)):
    """Delete every stored version of a chart."""
    deleted = catalog.delete_chart(name)
    return {"message": "Chart deleted successfully", "versions_deleted": deleted}


@router.delete("/charts/{name}/versions/{version}")
def delete_chart_version(name: str, version: str, catalog: ChartCatalog = Depends(get_catalog)):
    catalog.delete_version(name, version)
    return {"message": "Chart version deleted successfully"}
