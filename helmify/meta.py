"""Rendering of an object's apiVersion, kind and metadata as a Helm template."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from .metadata import group_version_kind, object_name, object_namespace
from .values import AppMetadata, Values, _lower_camel, set_nested_field

HELM_PROVIDED_LABELS = (
    "app.kubernetes.io/name",
    "app.kubernetes.io/instance",
    "app.kubernetes.io/version",
    "app.kubernetes.io/managed-by",
    "helm.sh/chart",
)

_NO_WRAP = 2**31 - 1


class _Dumper(yaml.SafeDumper):
    """Safe dumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.Node:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_Dumper.add_representer(str, _represent_str)
_Dumper.add_multi_representer(dict, _Dumper.represent_dict)


def _unshared(data: Any) -> Any:
    """Rebuild containers so that no object is referenced twice and no anchors appear."""
    if isinstance(data, Mapping):
        return {key: _unshared(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_unshared(item) for item in data]
    return data


def to_yaml(data: Any, indent: int = 0) -> str:
    """Dump data as block YAML with sorted keys, indent every line and trim the end."""
    text = yaml.dump(
        _unshared(data),
        Dumper=_Dumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=True,
        width=_NO_WRAP,
    )
    if text.endswith("\n...\n"):
        text = text[:-4]
    if indent > 0:
        pad = " " * indent
        text = pad + text.replace("\n", "\n" + pad)
    return text.rstrip("\n ")


def _nested_string_map(obj: Any, *path: str) -> dict[str, str] | None:
    """Return a copy of the map of strings under path, or None if absent or not all strings."""
    current = obj
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    if not isinstance(current, Mapping):
        return None
    if not all(isinstance(value, str) for value in current.values()):
        return None
    return dict(current)


def _chart_labels(obj: dict) -> dict[str, str]:
    """Return the object's labels without those that Helm provides itself."""
    labels = _nested_string_map(obj, "metadata", "labels") or {}
    return {key: value for key, value in labels.items() if key not in HELM_PROVIDED_LABELS}


def _api_version(obj: dict) -> str:
    gvk = group_version_kind(obj)
    return f"{gvk.group}/{gvk.version}" if gvk.group else gvk.version


def _render_meta(
    api_version: str,
    kind: str,
    name: str,
    chart: str,
    labels: str,
    annotations: str,
    namespace: str,
) -> str:
    return (
        f"apiVersion: {api_version}\n"
        f"kind: {kind}\n"
        "metadata:\n"
        f"  name: {name}\n"
        f"{namespace}\n"
        "  labels:\n"
        f"{labels}\n"
        f'  {{{{- include "{chart}.labels" . | nindent 4 }}}}\n'
        f"{annotations}"
    )


def process_obj_meta(
    app_meta: AppMetadata,
    obj: dict,
    annotations_values: Values | None = None,
) -> str:
    """Return the object's apiVersion, kind and metadata as Helm template text.

    When annotations_values is given, the annotations are moved into it and the
    template reads them from the chart values.
    """
    labels_text = annotations_text = namespace_text = ""

    labels = _chart_labels(obj)
    if labels:
        labels_text = to_yaml(labels, 4)

    annotations = _nested_string_map(obj, "metadata", "annotations") or {}
    if annotations:
        annotations_text = to_yaml({"annotations": annotations}, 2)

    namespace = object_namespace(obj)
    if namespace and app_meta.config().preserve_ns:
        namespace_text = to_yaml({"namespace": namespace}, 2)

    templated_name = app_meta.templated_name(object_name(obj))
    kind = group_version_kind(obj).kind

    if annotations_values is not None:
        name_key = _lower_camel(app_meta.trim_name(object_name(obj)))
        kind_key = _lower_camel(kind)
        set_nested_field(annotations_values, dict(annotations), name_key, kind_key, "annotations")
        annotations_text = (
            "  annotations:\n"
            f"    {{{{- toYaml .Values.{name_key}.{kind_key}.annotations | nindent 4 }}}}"
        )

    text = _render_meta(
        _api_version(obj),
        kind,
        templated_name,
        app_meta.chart_name(),
        labels_text,
        annotations_text,
        namespace_text,
    )
    return text.strip(" \n").replace("\n\n", "\n")