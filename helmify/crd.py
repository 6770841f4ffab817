"""Processor for CustomResourceDefinition resources."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import IO, Any

from .meta import _chart_labels, _nested_string_map, to_yaml
from .metadata import CRD_GVK, group_version_kind, object_name
from .values import AppMetadata, Values

logger = logging.getLogger(__name__)

_INJECT_CA_FROM = "cert-manager.io/inject-ca-from"
_RELEASE_NAMESPACE = "{{ .Release.Namespace }}"


class CrdError(ValueError):
    """Raised when a CustomResourceDefinition cannot be templated."""


def _nested(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, Mapping):
            return None
        obj = obj.get(key)
    return obj


def _render_crd(name: str, chart: str, annotations: str, labels: str, spec: str) -> str:
    return (
        "apiVersion: apiextensions.k8s.io/v1\n"
        "kind: CustomResourceDefinition\n"
        "metadata:\n"
        f"  name: {name}\n"
        f"{annotations}\n"
        "  labels:\n"
        f"{labels}\n"
        f'  {{{{- include "{chart}.labels" . | nindent 4 }}}}\n'
        "spec:\n"
        f"{spec}\n"
        "status:\n"
        "  acceptedNames:\n"
        '    kind: ""\n'
        '    plural: ""\n'
        "  conditions: []\n"
        "  storedVersions: []"
    )


@dataclass
class CrdResult:
    """Template of a CustomResourceDefinition."""

    name: str
    data: str

    def filename(self) -> str:
        return self.name

    def values(self) -> Values:
        return Values()

    def write(self, writer: IO[str]) -> None:
        writer.write(self.data)


class CrdProcessor:
    """Templates CRDs, or copies them verbatim when they go to the crds directory."""

    def process(self, app_meta: AppMetadata, obj: dict) -> tuple[bool, CrdResult | None]:
        if group_version_kind(obj) != CRD_GVK:
            return False, None
        name = _nested(obj, "spec", "names", "singular")
        if not isinstance(name, str):
            raise CrdError("unable to create crd template: spec.names.singular is missing")

        if app_meta.config().crd:
            logger.info("put CRD %s under crds dir without templating", name)
            return True, CrdResult(name=name + "-crd.yaml", data=to_yaml(obj, 0) + "\n")

        annotations_text = labels_text = ""
        annotations = _nested_string_map(obj, "metadata", "annotations") or {}
        if annotations:
            cert_name = annotations.get(_INJECT_CA_FROM, "")
            if cert_name:
                cert_name = cert_name.removeprefix(app_meta.namespace() + "/")
                cert_name = app_meta.trim_name(cert_name)
                annotations[_INJECT_CA_FROM] = (
                    f'{_RELEASE_NAMESPACE}/{{{{ include "{app_meta.chart_name()}.fullname" . }}}}-{cert_name}'
                )
            annotations_text = to_yaml({"annotations": annotations}, 2)

        labels = _chart_labels(obj)
        if labels:
            labels_text = to_yaml(labels, 4).strip("\n")

        spec = obj.get("spec")
        if not isinstance(spec, Mapping):
            raise CrdError("unable to create crd template: spec is not a map")
        spec = copy.deepcopy(dict(spec))

        conversion = spec.get("conversion")
        if isinstance(conversion, Mapping) and conversion.get("strategy") == "Webhook":
            service = _nested(conversion, "webhook", "clientConfig", "service")
            if isinstance(service, dict):
                service["name"] = app_meta.templated_name(service.get("name", ""))
                service["namespace"] = str(service.get("namespace", "")).replace(
                    app_meta.namespace(), _RELEASE_NAMESPACE
                )

        spec_text = to_yaml(spec, 2)
        text = _render_crd(
            object_name(obj), app_meta.chart_name(), annotations_text, labels_text, spec_text
        )
        return True, CrdResult(name=name + "-crd.yaml", data=text.replace("\n\n", "\n"))