"""
Pytest configuration and shared fixtures: in-memory catalog database,
a scripted rendering engine and an API client wired to both.
"""
from typing import Dict, List, Optional

import pytest
import yaml
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chartpaper.core.deps import get_db, get_engine, get_fetcher
from chartpaper.core.exceptions import RenderError
from chartpaper.db.base import Base
from chartpaper.db.session import build_engine
from chartpaper.schemas.chart import AppSpec
from chartpaper.services.catalog import ChartCatalog
from chartpaper.services.engine import ChartEngine, RenderedChart
from chartpaper.services.fetcher import ChartFetcher
from chartpaper.services.resolver import DependencyResolver

FALLBACKS = [
    "oci://registry-1.docker.io/bitnamicharts/{name}",
    "oci://registry.k8s.io/{name}/{name}",
    "oci://ghcr.io/helm/{name}",
]


def deployment_manifest(image: str, kind: str = "Deployment") -> str:
    return (
        f"kind: {kind}\n"
        "metadata:\n"
        "  name: web\n"
        "spec:\n"
        "  template:\n"
        "    spec:\n"
        "      containers:\n"
        "      - name: web\n"
        f"        image: {image}\n"
    )


class FakeEngine(ChartEngine):
    """Engine that serves charts registered per location and records calls."""

    def __init__(self):
        self.charts: Dict[str, Optional[RenderedChart]] = {}
        self.apps: Dict[str, object] = {}
        self.render_calls: List[str] = []
        self.logins: List[tuple] = []

    def add_chart(self, location: str, name: str, version: str, manifest: str = "",
                  dependencies: Optional[List[dict]] = None, **metadata) -> None:
        meta = {"apiVersion": "v2", "name": name, "version": version, **metadata}
        if dependencies is not None:
            meta["dependencies"] = dependencies
        self.charts[location] = RenderedChart(metadata=meta, manifest=manifest)

    def render(self, location, values_path="", overrides=None):
        self.render_calls.append(location)
        if location not in self.charts:
            raise RenderError(location, "chart not found")
        return self.charts[location]

    def parse(self, location, values_path="", overrides=None, use_host_network=False, manifest=None):
        apps = self.apps.get(location, [])
        if isinstance(apps, Exception):
            raise apps
        return apps

    def authenticate(self, username, password, registry):
        self.logins.append((username, password, registry))


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fetcher(fake_engine):
    return ChartFetcher(fake_engine)


@pytest.fixture
def catalog(db, fetcher):
    return ChartCatalog(db, fetcher)


@pytest.fixture
def resolver(catalog, fetcher):
    return DependencyResolver(catalog, fetcher, FALLBACKS)


@pytest.fixture
def client(db_engine, fake_engine, fetcher):
    from chartpaper.main import app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: fake_engine
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_apps():
    return [
        AppSpec(name="web", image="nginx:1.25", type="deployment", ports=["80"]),
        AppSpec(name="worker", image="busybox:1.36", type="deployment"),
    ]


@pytest.fixture
def chart_yaml():
    """Serialized Chart.yaml for Helm CLI tests."""
    return yaml.safe_dump({
        "apiVersion": "v2",
        "name": "shop",
        "version": "1.4.0",
        "description": "Web shop",
        "dependencies": [
            {"name": "redis", "version": "17.x", "repository": "oci://registry-1.docker.io/bitnamicharts"},
        ],
    })
