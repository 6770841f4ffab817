"""Processor for ConfigMap resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO

from .format import remove_trailing_whitespaces
from .meta import _nested_string_map, process_obj_meta, to_yaml
from .metadata import GroupVersionKind, group_version_kind, object_name
from .values import AppMetadata, Values, ValuesError

logger = logging.getLogger(__name__)

CONFIG_MAP_GVK = GroupVersionKind("", "v1", "ConfigMap")


class PropertiesError(ValueError):
    """Raised when a .properties entry is not of the form name=value."""


def parse_properties(properties: str, path: list[str], values: Values) -> str:
    """Move each name=value line into values and return the templated properties text."""
    lines = []
    for line in properties.removesuffix("\n").split("\n"):
        prop = line.split("=")
        if len(prop) != 2:
            raise PropertiesError(f"wrong property format in {path}: {line}")
        prop_name, prop_value = prop
        templated = values.add(prop_value, *path, *prop_name.split("."))
        lines.append(f"{prop_name}={templated}\n")
    return "".join(lines)


def parse_map_data(data: dict[str, str], config_name: str) -> tuple[dict[str, str], Values]:
    """Move every data entry into values; return the templated data and the values."""
    values = Values()
    result = dict(data)
    for key, value in data.items():
        path = [config_name, key]
        try:
            if key.endswith(".properties"):
                result[key] = parse_properties(value, path, values)
            elif "\n" in value:
                result[key] = values.add_yaml(remove_trailing_whitespaces(value), 1, False, *path)
            else:
                result[key] = values.add(value, *path)
        except (PropertiesError, ValuesError) as exc:
            logger.error("unable to process configmap data %s: %s", path, exc)
    return result, values


@dataclass
class ConfigMapResult:
    """Template of a ConfigMap."""

    name: str
    meta: str
    immutable: str = ""
    binary_data: str = ""
    data: str = ""
    chart_values: Values = field(default_factory=Values)

    def filename(self) -> str:
        return self.name

    def values(self) -> Values:
        return self.chart_values

    def write(self, writer: IO[str]) -> None:
        sections = [part for part in (self.immutable, self.binary_data, self.data) if part]
        writer.write("\n".join([self.meta, *sections]))


class ConfigMapProcessor:
    """Turns ConfigMap data into chart values."""

    def process(self, app_meta: AppMetadata, obj: dict) -> tuple[bool, ConfigMapResult | None]:
        if group_version_kind(obj) != CONFIG_MAP_GVK:
            return False, None
        meta = process_obj_meta(app_meta, obj)

        immutable = binary_data = data = ""
        flag = obj.get("immutable")
        if isinstance(flag, bool):
            immutable = to_yaml({"immutable": flag}, 0)
        binary = _nested_string_map(obj, "binaryData")
        if binary is not None:
            binary_data = to_yaml({"binaryData": binary}, 0)

        name = app_meta.trim_name(object_name(obj))
        values = Values()
        entries = _nested_string_map(obj, "data")
        if entries is not None:
            entries, values = parse_map_data(entries, name)
            data = to_yaml({"data": entries}, 0).replace("'", "")

        return True, ConfigMapResult(
            name=name + ".yaml",
            meta=meta,
            immutable=immutable,
            binary_data=binary_data,
            data=data,
            chart_values=values,
        )