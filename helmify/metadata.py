"""Application-wide metadata gathered from all input objects."""

from __future__ import annotations

import logging
import os
from typing import NamedTuple

from .config import Config

logger = logging.getLogger(__name__)


class GroupVersionKind(NamedTuple):
    group: str
    version: str
    kind: str


NAMESPACE_GVK = GroupVersionKind("", "v1", "Namespace")
CRD_GVK = GroupVersionKind("apiextensions.k8s.io", "v1", "CustomResourceDefinition")


def _string_field(mapping: object, key: str) -> str:
    if not isinstance(mapping, dict):
        return ""
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def group_version_kind(obj: dict) -> GroupVersionKind:
    """Return the object's group, version and kind; empty if apiVersion is malformed."""
    api_version = _string_field(obj, "apiVersion")
    kind = _string_field(obj, "kind")
    if api_version.count("/") > 1:
        return GroupVersionKind("", "", "")
    group, _, version = api_version.rpartition("/")
    return GroupVersionKind(group, version, kind)


def object_name(obj: dict) -> str:
    """Return metadata.name or an empty string."""
    return _string_field(obj.get("metadata"), "name")


def object_namespace(obj: dict) -> str:
    """Return metadata.namespace or an empty string."""
    return _string_field(obj.get("metadata"), "namespace")


def common_prefix(one: str, two: str) -> str:
    """Return the longest common leading part of two strings."""
    return os.path.commonprefix([one, two])


class Service:
    """Collects names and namespace of the chart's objects."""

    _TRIM_CHARS = "-./_ "

    def __init__(self, conf: Config | None = None) -> None:
        self._conf = conf if conf is not None else Config()
        self._common_prefix = ""
        self._namespace = ""
        self._names: set[str] = set()

    def config(self) -> Config:
        return self._conf

    def namespace(self) -> str:
        return self._namespace

    def chart_name(self) -> str:
        return self._conf.chart_name

    def load(self, obj: dict) -> None:
        """Register an object before processing to learn the common prefix and namespace."""
        name = object_name(obj)
        self._names.add(name)
        gvk = group_version_kind(obj)
        if gvk not in (CRD_GVK, NAMESPACE_GVK):
            self._common_prefix = common_prefix(name, self._common_prefix) if self._common_prefix else name
        obj_ns = name if gvk == NAMESPACE_GVK else object_namespace(obj)
        if not obj_ns:
            return
        if self._namespace and self._namespace != obj_ns:
            logger.warning(
                "Two different namespaces for app detected: %s and %s. "
                "Resulted char will have single namespace.",
                obj_ns,
                self._namespace,
            )
        self._namespace = obj_ns

    def trim_name(self, obj_name: str) -> str:
        """Remove the common prefix; return the name unchanged if nothing would remain."""
        trimmed = obj_name.removeprefix(self._common_prefix).lstrip(self._TRIM_CHARS)
        return trimmed or obj_name

    def templated_name(self, name: str) -> str:
        """Return the Helm templated name for a known object name."""
        if self._conf.original_name or name not in self._names:
            return name
        return self._full_name(self.trim_name(name))

    def templated_string(self, text: str) -> str:
        """Return text as a name prefixed with the chart full name."""
        return self._full_name(self.trim_name(text))

    def _full_name(self, name: str) -> str:
        return f'{{{{ include "{self._conf.chart_name}.fullname" . }}}}-{name}'