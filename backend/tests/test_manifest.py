"""
Tests for the line-scanning manifest fact extractor.
"""
from chartpaper.schemas.chart import ManifestFacts
from chartpaper.services.manifest import extract_manifest_facts


class TestDefaults:

    def test_empty_manifest(self):
        assert extract_manifest_facts("") == ManifestFacts()

    def test_only_separators_and_whitespace(self):
        assert extract_manifest_facts("---\n   \n---\n") == ManifestFacts()

    def test_manifest_without_recognised_keys(self):
        manifest = "apiVersion: v1\nmetadata:\n  name: settings\ndata:\n  mode: fast\n"
        facts = extract_manifest_facts(manifest)

        assert facts.image_tag == "N/A"
        assert facts.canary_tag == "N/A"
        assert facts.container_images == []
        assert facts.ingress_paths == []
        assert facts.service_ports == []
        assert facts.is_default()


class TestImages:

    def test_deployment_image_tag(self):
        facts = extract_manifest_facts("kind: Deployment\nspec:\n  containers:\n  - image: nginx:1.2.3\n")

        assert facts.image_tag == "1.2.3"
        assert facts.container_images == ["nginx:1.2.3"]
        assert facts.canary_tag == "N/A"

    def test_canary_tag(self):
        facts = extract_manifest_facts("kind: Deployment\nspec:\n  containers:\n  - image: app:v1-canary\n")

        assert facts.canary_tag == "v1-canary"
        assert facts.image_tag == "v1-canary"

    def test_canary_match_is_case_insensitive(self):
        facts = extract_manifest_facts("- image: app:1.0\n- image: app:2.0-CANARY\n")

        assert facts.image_tag == "1.0"
        assert facts.canary_tag == "2.0-CANARY"

    def test_first_tag_wins(self):
        manifest = (
            "kind: Deployment\nspec:\n  containers:\n  - image: web:1.0\n"
            "---\n"
            "kind: Deployment\nspec:\n  containers:\n  - image: api:2.0\n"
        )
        facts = extract_manifest_facts(manifest)

        assert facts.image_tag == "1.0"
        assert facts.container_images == ["web:1.0", "api:2.0"]

    def test_images_are_deduplicated_in_order(self):
        manifest = (
            "- image: redis:7\n- image: nginx:1.25\n"
            "---\n"
            "- image: \"redis:7\"\n- image: 'nginx:1.25'\n- image: busybox\n"
        )
        facts = extract_manifest_facts(manifest)

        assert facts.container_images == ["redis:7", "nginx:1.25", "busybox"]
        assert len(facts.container_images) == len(set(facts.container_images))

    def test_registry_port_and_tag(self):
        facts = extract_manifest_facts("image: registry.local:5000/team/app:3.1\n")

        assert facts.container_images == ["registry.local:5000/team/app:3.1"]
        assert facts.image_tag == "3.1"

    def test_untagged_image_leaves_tag_unset(self):
        facts = extract_manifest_facts("image: busybox\n")

        assert facts.container_images == ["busybox"]
        assert facts.image_tag == "N/A"

    def test_image_pull_policy_is_ignored(self):
        facts = extract_manifest_facts("imagePullPolicy: IfNotPresent\n")

        assert facts.container_images == []

    def test_empty_image_value_is_skipped(self):
        facts = extract_manifest_facts('image: ""\n')

        assert facts.container_images == []


class TestIngressPaths:

    def test_ingress_paths(self):
        manifest = (
            "kind: Ingress\n"
            "spec:\n"
            "  rules:\n"
            "  - http:\n"
            "      paths:\n"
            "      - path: /foo\n"
            "        pathType: Prefix\n"
            "      - path: \"/bar\"\n"
            "      - path: /\n"
        )
        facts = extract_manifest_facts(manifest)

        assert facts.ingress_paths == ["/foo", "/bar"]

    def test_paths_outside_ingress_are_ignored(self):
        manifest = "kind: Deployment\nspec:\n  volumes:\n  - hostPath:\n      path: /data\n"

        assert extract_manifest_facts(manifest).ingress_paths == []

    def test_paths_are_not_deduplicated(self):
        manifest = "kind: Ingress\nspec:\n  - path: /api\n  - path: /api\n"

        assert extract_manifest_facts(manifest).ingress_paths == ["/api", "/api"]

    def test_kind_does_not_leak_across_documents(self):
        manifest = "kind: Ingress\nspec:\n  - path: /a\n---\nspec:\n  - path: /b\n"

        assert extract_manifest_facts(manifest).ingress_paths == ["/a"]

    def test_value_stops_at_second_colon(self):
        manifest = "kind: Ingress\nspec:\n  - path: /proxy:8080\n"

        assert extract_manifest_facts(manifest).ingress_paths == ["/proxy"]


class TestServicePorts:

    def test_service_ports(self):
        manifest = (
            "apiVersion: v1\n"
            "kind: Service\n"
            "spec:\n"
            "  ports:\n"
            "  - port: 80\n"
            "    targetPort: http\n"
            "  - port: \"443\"\n"
        )
        facts = extract_manifest_facts(manifest)

        assert facts.service_ports == ["80", "443"]

    def test_port_before_spec_is_ignored(self):
        manifest = "kind: Service\nmetadata:\n  annotations:\n    port: 9000\nspec:\n  ports:\n  - port: 80\n"

        assert extract_manifest_facts(manifest).service_ports == ["80"]

    def test_ports_outside_service_are_ignored(self):
        manifest = "kind: Deployment\nspec:\n  ports:\n  - port: 8080\n"

        assert extract_manifest_facts(manifest).service_ports == []

    def test_full_chart_output(self):
        manifest = (
            "---\n"
            "# Source: shop/templates/service.yaml\n"
            "apiVersion: v1\n"
            "kind: Service\n"
            "metadata:\n"
            "  name: shop\n"
            "spec:\n"
            "  ports:\n"
            "    - port: 8080\n"
            "---\n"
            "# Source: shop/templates/deployment.yaml\n"
            "apiVersion: apps/v1\n"
            "kind: Deployment\n"
            "spec:\n"
            "  template:\n"
            "    spec:\n"
            "      containers:\n"
            "        - name: shop\n"
            "          image: \"ghcr.io/acme/shop:2.3.0\"\n"
            "          imagePullPolicy: IfNotPresent\n"
            "        - name: shop-canary\n"
            "          image: ghcr.io/acme/shop:2.4.0-canary\n"
            "---\n"
            "# Source: shop/templates/ingress.yaml\n"
            "apiVersion: networking.k8s.io/v1\n"
            "kind: Ingress\n"
            "spec:\n"
            "  rules:\n"
            "    - http:\n"
            "        paths:\n"
            "          - path: /shop\n"
        )
        facts = extract_manifest_facts(manifest)

        assert facts.image_tag == "2.3.0"
        assert facts.canary_tag == "2.4.0-canary"
        assert facts.container_images == ["ghcr.io/acme/shop:2.3.0", "ghcr.io/acme/shop:2.4.0-canary"]
        assert facts.service_ports == ["8080"]
        assert facts.ingress_paths == ["/shop"]
