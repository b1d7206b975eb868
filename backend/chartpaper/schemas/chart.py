"""
Pydantic schemas for chart summaries, manifest facts and stored catalog rows.
Summaries travel in camelCase (chartUrl, imageTag, ...); stored rows in snake_case.
"""
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import datetime

NOT_AVAILABLE = "N/A"


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ========================================
# Fetch pipeline schemas
# ========================================

class ManifestFacts(CamelModel):
    """Facts recovered from a rendered manifest by the line scanner."""
    image_tag: str = NOT_AVAILABLE
    canary_tag: str = NOT_AVAILABLE
    container_images: List[str] = []
    ingress_paths: List[str] = []
    service_ports: List[str] = []

    def is_default(self) -> bool:
        return self == ManifestFacts()


class DependencySpec(CamelModel):
    """A dependency as declared in Chart.yaml."""
    name: str
    version: str = ""
    repository: str = ""
    condition: str = ""


class ChartMeta(CamelModel):
    name: str
    version: str = "unknown"
    description: str = ""
    type: str = "application"
    dependencies: List[DependencySpec] = []


class AppSpec(CamelModel):
    """A workload produced by the rendering engine's parse step."""
    name: str
    image: str = ""
    type: str = ""
    ports: List[str] = []
    configs: Dict[str, str] = {}
    mounts: Dict[str, str] = {}


class ChartSummary(CamelModel):
    """Canonical result of fetching one chart location."""
    chart: ChartMeta
    image_tag: str = NOT_AVAILABLE
    canary_tag: str = NOT_AVAILABLE
    manifest_metadata: Optional[ManifestFacts] = None
    apps: List[AppSpec] = Field(default=[], exclude=True)

    @property
    def facts(self) -> ManifestFacts:
        return self.manifest_metadata or ManifestFacts()


class ChartRequest(CamelModel):
    chart_url: str
    values_path: str = ""
    set_values: List[str] = []
    use_host_network: bool = False


class SwitchVersionRequest(BaseModel):
    version: str


# ========================================
# Stored catalog rows
# ========================================

class DependencyRecord(BaseModel):
    id: int
    chart_id: int
    dependency_name: str
    dependency_version: str
    repository: Optional[str] = None
    condition_field: Optional[str] = None
    image_tag: str = NOT_AVAILABLE
    canary_tag: str = NOT_AVAILABLE
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppRecord(BaseModel):
    id: int
    chart_id: int
    name: str
    image: Optional[str] = None
    app_type: Optional[str] = None
    ports: Optional[List[str]] = None
    configs: Optional[Dict[str, str]] = None
    mounts: Optional[Dict[str, str]] = None

    class Config:
        from_attributes = True


class ChartRecord(BaseModel):
    id: int
    name: str
    version: str
    description: Optional[str] = None
    type: str
    chart_url: str
    image_tag: Optional[str] = None
    canary_tag: Optional[str] = None
    container_images: Optional[List[str]] = None
    ingress_paths: Optional[List[str]] = None
    service_ports: Optional[List[str]] = None
    manifest_parsed_at: Optional[datetime] = None
    is_latest: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ========================================
# Responses
# ========================================

class FetchChartResponse(BaseModel):
    message: str
    chart: ChartSummary
    apps: List[AppSpec] = []
    dependencies_count: int
    stored: bool = False
    chart_id: Optional[int] = None
    info: str


class ChartVersionsResponse(BaseModel):
    chart: str
    versions: List[ChartRecord]
    count: int


class ChartDependenciesResponse(BaseModel):
    chart: str
    dependencies: List[DependencyRecord]
    count: int
    message: Optional[str] = None


class ResolveDependenciesResponse(BaseModel):
    message: str
    fetched_charts: List[ChartSummary]
    total_dependencies: int
    newly_fetched: int
    errors: List[str]
