"""
Tests for ChartFetcher: summary building, fallback metadata and credentials.
"""
import json

import pytest

from chartpaper.core.exceptions import RenderError, AuthenticationError
from chartpaper.services.fetcher import ChartFetcher, chart_name_from_location, dependency_location
from tests.conftest import deployment_manifest

LOCATION = "oci://registry-1.docker.io/bitnamicharts/shop"


class TestLocationHelpers:

    @pytest.mark.parametrize("location, expected", [
        ("oci://registry-1.docker.io/bitnamicharts/redis", "redis"),
        ("oci://ghcr.io/acme/charts/api:1.2.0", "api"),
        ("https://example.com/charts/web-0.3.1.tgz", "web-0.3.1"),
        ("./charts/local/", "local"),
    ])
    def test_chart_name_from_location(self, location, expected):
        assert chart_name_from_location(location) == expected

    def test_dependency_location_appends_name(self):
        assert dependency_location("oci://registry-1.docker.io/bitnamicharts/", "redis") == \
            "oci://registry-1.docker.io/bitnamicharts/redis"

    def test_dependency_location_keeps_full_reference(self):
        assert dependency_location("oci://ghcr.io/acme/redis", "redis") == "oci://ghcr.io/acme/redis"


class TestFetch:

    def test_summary_from_metadata_and_manifest(self, fake_engine, fetcher, sample_apps):
        fake_engine.add_chart(
            LOCATION, "shop", "1.4.0",
            manifest=deployment_manifest("ghcr.io/acme/shop:1.4.0"),
            description="Web shop",
            dependencies=[{"name": "redis", "version": "17.x",
                           "repository": "oci://registry-1.docker.io/bitnamicharts",
                           "condition": "redis.enabled"}],
        )
        fake_engine.apps[LOCATION] = sample_apps

        summary = fetcher.fetch(LOCATION)

        assert summary.chart.name == "shop"
        assert summary.chart.version == "1.4.0"
        assert summary.chart.description == "Web shop"
        assert summary.chart.type == "application"
        assert [d.name for d in summary.chart.dependencies] == ["redis"]
        assert summary.chart.dependencies[0].condition == "redis.enabled"
        assert summary.image_tag == "1.4.0"
        assert summary.canary_tag == "N/A"
        assert summary.manifest_metadata.container_images == ["ghcr.io/acme/shop:1.4.0"]
        assert summary.apps == sample_apps

    def test_summary_serializes_in_camel_case(self, fake_engine, fetcher):
        fake_engine.add_chart(LOCATION, "shop", "1.4.0", manifest=deployment_manifest("shop:1.4.0"))

        payload = fetcher.fetch(LOCATION).model_dump(by_alias=True)

        assert payload["imageTag"] == "1.4.0"
        assert payload["canaryTag"] == "N/A"
        assert payload["manifestMetadata"]["containerImages"] == ["shop:1.4.0"]
        assert "apps" not in payload

    def test_empty_manifest_has_no_facts(self, fake_engine, fetcher):
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")

        summary = fetcher.fetch(LOCATION)

        assert summary.manifest_metadata is None
        assert summary.image_tag == "N/A"
        assert summary.facts.is_default()

    def test_no_render_result_raises(self, fake_engine, fetcher):
        fake_engine.charts[LOCATION] = None
        with pytest.raises(RenderError):
            fetcher.fetch(LOCATION)

    def test_metadata_fallback(self, fake_engine, fetcher):
        from chartpaper.services.engine import RenderedChart
        fake_engine.charts[LOCATION] = RenderedChart(metadata=None, manifest="")

        summary = fetcher.fetch(LOCATION)

        assert summary.chart.name == "shop"
        assert summary.chart.version == "unknown"
        assert summary.chart.description == f"Chart fetched from {LOCATION}"

    def test_declared_name_preferred_for_fallback(self, fake_engine, fetcher):
        from chartpaper.services.engine import RenderedChart
        fake_engine.charts[LOCATION] = RenderedChart(metadata=None)

        summary = fetcher.fetch(LOCATION, name="storefront", version="2.0.0")

        assert summary.chart.name == "storefront"
        assert summary.chart.version == "unknown"

    def test_render_failure_carries_location(self, fetcher):
        with pytest.raises(RenderError) as exc_info:
            fetcher.fetch("oci://nowhere.example/missing")

        assert exc_info.value.location == "oci://nowhere.example/missing"

    def test_parse_failure_is_not_fatal(self, fake_engine, fetcher):
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")
        fake_engine.apps[LOCATION] = RenderError(LOCATION, "bad workload yaml")

        summary = fetcher.fetch(LOCATION)

        assert summary.chart.name == "shop"
        assert summary.apps == []

    def test_parse_can_be_skipped(self, fake_engine, fetcher, sample_apps):
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")
        fake_engine.apps[LOCATION] = sample_apps

        assert fetcher.fetch(LOCATION, parse_apps=False).apps == []


class TestCredentials:

    def write_config(self, tmp_path, data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data))
        return str(path)

    def test_logs_in_before_render(self, tmp_path, fake_engine):
        path = self.write_config(tmp_path, {"Username": "robot", "Password": "s3cret", "Registry": "ghcr.io"})
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")

        ChartFetcher(fake_engine, credentials_path=path).fetch(LOCATION)

        assert fake_engine.logins == [("robot", "s3cret", "ghcr.io")]

    def test_missing_credentials_file_is_skipped(self, tmp_path, fake_engine):
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")

        ChartFetcher(fake_engine, credentials_path=str(tmp_path / "absent.json")).fetch(LOCATION)

        assert fake_engine.logins == []

    def test_failed_login_does_not_block_fetch(self, tmp_path, fake_engine):
        path = self.write_config(tmp_path, {"username": "robot", "password": "nope", "registry": "ghcr.io"})
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")

        def reject(username, password, registry):
            raise AuthenticationError(f"login to {registry} rejected")

        fake_engine.authenticate = reject

        summary = ChartFetcher(fake_engine, credentials_path=path).fetch(LOCATION)

        assert summary.chart.name == "shop"

    def test_logs_in_once_per_fetcher(self, tmp_path, fake_engine):
        path = self.write_config(tmp_path, {"Username": "robot", "Password": "s3cret", "Registry": "ghcr.io"})
        fake_engine.add_chart(LOCATION, "shop", "1.4.0")
        fetcher = ChartFetcher(fake_engine, credentials_path=path)

        fetcher.fetch(LOCATION)
        with pytest.raises(RenderError):
            fetcher.fetch("oci://registry.k8s.io/shop/shop")
        fetcher.fetch(LOCATION)

        assert fake_engine.logins == [("robot", "s3cret", "ghcr.io")]
        assert len(fake_engine.render_calls) == 3
