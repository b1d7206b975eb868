"""
Manifest fact extraction.

Rendered Helm output is scanned line by line rather than parsed as YAML:
only a handful of facts are needed and stored facts were produced by this
scan, so its quirks (e.g. `path:` keys picked up anywhere inside an Ingress
document) are kept as-is.
"""
from typing import List

from ..schemas.chart import ManifestFacts, NOT_AVAILABLE

DOCUMENT_SEPARATOR = "---"
QUOTES = "\"'"


def _value(line: str) -> str:
    """Second colon-separated field of a line, trimmed of whitespace and quotes."""
    return line.split(":")[1].strip().strip(QUOTES)


def _append_unique(items: List[str], value: str) -> None:
    if value and value not in items:
        items.append(value)


def extract_manifest_facts(manifest: str) -> ManifestFacts:
    """
    Pull image tags, container images, ingress paths and service ports out
    of a multi-document manifest. Never raises; empty or unrecognised input
    yields the default fact set.
    """
    if not manifest:
        return ManifestFacts()

    images: List[str] = []
    ingress_paths: List[str] = []
    service_ports: List[str] = []
    image_tag = NOT_AVAILABLE
    canary_tag = NOT_AVAILABLE

    for resource in manifest.split(DOCUMENT_SEPARATOR):
        resource = resource.strip()
        if not resource:
            continue

        current_kind = ""
        in_spec = in_ingress = in_service = False

        for line in resource.split("\n"):
            line = line.strip()

            if line.startswith("kind:"):
                current_kind = _value(line)
                in_ingress = current_kind == "Ingress"
                in_service = current_kind == "Service"

            if line.startswith("spec:"):
                in_spec = True

            if "image:" in line and "imagePullPolicy" not in line:
                image_ref = ":".join(line.split(":")[1:]).strip().strip(QUOTES)
                _append_unique(images, image_ref)

                if ":" in image_ref:
                    tag = image_ref.split(":")[-1]
                    if image_tag == NOT_AVAILABLE:
                        image_tag = tag
                    if "canary" in tag.lower() and canary_tag == NOT_AVAILABLE:
                        canary_tag = tag

            if in_ingress and "path:" in line:
                path = _value(line)
                if path and path != "/":
                    ingress_paths.append(path)

            if in_service and in_spec and "port:" in line:
                port = _value(line)
                if port:
                    service_ports.append(port)

    return ManifestFacts(
        image_tag=image_tag,
        canary_tag=canary_tag,
        container_images=images,
        ingress_paths=ingress_paths,
        service_ports=service_ports,
    )
