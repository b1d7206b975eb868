"""
Helm Engine - render and parse charts through the Helm 3 CLI.
"""
import os
import subprocess
import logging
from typing import Optional, Dict, List

import yaml

from .base import ChartEngine, RenderedChart
from .workloads import parse_workloads
from ...core.exceptions import RenderError, AuthenticationError
from ...schemas.chart import AppSpec

logger = logging.getLogger(__name__)


class HelmEngine(ChartEngine):
    """Render charts with `helm show chart` + `helm template`."""

    def __init__(self,
                 helm_binary: str = "helm",
                 timeout: int = 300,
                 release_name: str = "chartpaper"):
        self.helm_binary = helm_binary
        self.timeout = timeout
        self.release_name = release_name

    def _run_cmd(self, cmd: List[str], input_text: Optional[str] = None,
                 env: Dict = None) -> subprocess.CompletedProcess:
        """Run a helm command; timeouts and a missing binary come back as exit code 1."""
        try:
            full_env = os.environ.copy()
            if env:
                full_env.update(env)

            return subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=full_env,
                check=False
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out: {' '.join(cmd[:3])}")
            return subprocess.CompletedProcess(cmd, 1, "", "Command timed out")
        except OSError as e:
            logger.error(f"Command error: {e}")
            return subprocess.CompletedProcess(cmd, 1, "", str(e))

    @staticmethod
    def chart_args(location: str) -> List[str]:
        """
        Chart reference arguments for a location.

        oci:// references, local paths and packaged .tgz URLs pass through;
        other http(s) URLs are read as <repo-url>/<chart-name>.
        """
        if location.startswith(("http://", "https://")) and not location.endswith(".tgz"):
            repo, _, chart = location.rstrip("/").rpartition("/")
            return [chart, "--repo", repo]
        return [location]

    def _show_chart(self, location: str) -> Optional[Dict]:
        result = self._run_cmd([self.helm_binary, "show", "chart", *self.chart_args(location)])
        if result.returncode != 0:
            raise RenderError(location, f"helm show chart failed: {result.stderr.strip()}")
        try:
            metadata = yaml.safe_load(result.stdout)
        except yaml.YAMLError as e:
            raise RenderError(location, f"invalid chart metadata: {e}") from e
        return metadata if isinstance(metadata, dict) else None

    def render(
        self,
        location: str,
        values_path: str = "",
        overrides: Optional[List[str]] = None,
    ) -> Optional[RenderedChart]:
        metadata = self._show_chart(location)

        cmd = [self.helm_binary, "template", self.release_name, *self.chart_args(location)]
        if values_path:
            cmd.extend(["-f", values_path])
        for override in overrides or []:
            cmd.extend(["--set", override])

        result = self._run_cmd(cmd)
        if result.returncode != 0:
            raise RenderError(location, f"chart templating failed: {result.stderr.strip()}")

        return RenderedChart(metadata=metadata, manifest=result.stdout)

    def parse(
        self,
        location: str,
        values_path: str = "",
        overrides: Optional[List[str]] = None,
        use_host_network: bool = False,
        manifest: Optional[str] = None,
    ) -> List[AppSpec]:
        if manifest is None:
            rendered = self.render(location, values_path, overrides)
            manifest = rendered.manifest if rendered else ""
        try:
            return parse_workloads(manifest, use_host_network)
        except yaml.YAMLError as e:
            raise RenderError(location, f"manifest parsing failed: {e}") from e

    def authenticate(self, username: str, password: str, registry: str) -> None:
        result = self._run_cmd(
            [self.helm_binary, "registry", "login", registry,
             "--username", username, "--password-stdin"],
            input_text=password,
        )
        if result.returncode != 0:
            raise AuthenticationError(f"helm registry login failed for {registry}: {result.stderr.strip()}")
        logger.info(f"Logged in to registry {registry} as {username}")
