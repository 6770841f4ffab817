"""Helm values tree and the interfaces shared by processors."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import IO, Any, Protocol

from .config import Config

_SEPARATORS = frozenset("_ -.")


class ValuesError(ValueError):
    """Raised when a value cannot be placed in the values tree."""


def set_nested_field(obj: dict, value: Any, *args: str) -> None:
    """Store a copy of value in obj under the key path args, creating maps on the way."""
    if not args:
        raise ValuesError("value cannot be set without a field path")
    *parents, last = args
    current = obj
    for depth, key in enumerate(parents, start=1):
        if key in current:
            child = current[key]
            if not isinstance(child, dict):
                path = "." + ".".join(args[:depth])
                raise ValuesError(f"value cannot be set because {path} is not a map")
        else:
            child = {}
            current[key] = child
        current = child
    current[last] = copy.deepcopy(value)


def _lower_camel(text: str) -> str:
    text = text.strip()
    out = []
    cap_next = False
    for index, char in enumerate(text):
        is_upper = "A" <= char <= "Z"
        is_lower = "a" <= char <= "z"
        if is_upper or is_lower:
            if cap_next:
                char = char.upper()
            elif index == 0:
                char = char.lower()
            out.append(char)
            cap_next = False
        elif "0" <= char <= "9":
            out.append(char)
            cap_next = True
        else:
            cap_next = char in _SEPARATORS
    return "".join(out)


def _camel_path(names: tuple[str, ...]) -> list[str]:
    return [_lower_camel(name.lower() if name == name.upper() else name) for name in names]


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value is False or value == 0 or value == {} or value == []


def _merge_into(dst: dict, src: Mapping) -> None:
    for key, src_value in src.items():
        if key not in dst:
            dst[key] = copy.deepcopy(src_value)
            continue
        dst_value = dst[key]
        if isinstance(dst_value, dict) and isinstance(src_value, Mapping):
            _merge_into(dst_value, src_value)
        elif isinstance(dst_value, list) and isinstance(src_value, list):
            dst_value.extend(copy.deepcopy(src_value))
        elif _is_empty(dst_value):
            dst[key] = copy.deepcopy(src_value)


class Values(dict):
    """The tree that becomes values.yaml."""

    def merge(self, values: Mapping) -> None:
        """Merge values in, keeping set entries and appending lists."""
        if not isinstance(values, Mapping):
            raise ValuesError("unable to merge helm values: not a mapping")
        _merge_into(self, values)

    def _set(self, value: Any, path: list[str]) -> None:
        try:
            set_nested_field(self, value, *path)
        except ValuesError as exc:
            raise ValuesError(f"{exc}: unable to set value: {path}") from exc

    def add(self, value: Any, *args: str) -> str:
        """Store value and return the template expression that reads it."""
        path = _camel_path(args)
        self._set(value, path)
        ref = ".".join(path)
        if isinstance(value, str):
            return f"{{{{ .Values.{ref} | quote }}}}"
        if isinstance(value, list):
            return f"{{{{ toYaml .Values.{ref} | nindent {len(path) * 2} }}}}"
        return f"{{{{ .Values.{ref} }}}}"

    def add_yaml(self, value: Any, indent: int, new_line: bool, *args: str) -> str:
        """Store value and return an expression rendering it as YAML."""
        path = _camel_path(args)
        self._set(value, path)
        ref = ".".join(path)
        if indent > 0:
            func = "nindent" if new_line else "indent"
            return f"{{{{ .Values.{ref} | toYaml | {func} {indent} }}}}"
        return f"{{{{ .Values.{ref} | toYaml }}}}"

    def add_secret(self, to_base64: bool, *args: str) -> str:
        """Store an empty required value and return an expression reading it."""
        path = _camel_path(args)
        ref = ".".join(path)
        self._set("", path)
        result = f'{{{{ required "{ref} is required" .Values.{ref}'
        if to_base64:
            result += " | b64enc"
        return result + " | quote }}"


class Template(Protocol):
    """A Helm template destined for the chart's templates directory."""

    def filename(self) -> str:
        """Return the template file name."""

    def values(self) -> Values:
        """Return the values the template uses."""

    def write(self, writer: IO[str]) -> None:
        """Write the template text into writer."""


class AppMetadata(Protocol):
    """Information shared by all objects in the chart."""

    def namespace(self) -> str:
        """Return the application namespace."""

    def chart_name(self) -> str:
        """Return the chart name."""

    def templated_name(self, name: str) -> str:
        """Return the Helm templated form of an object name."""

    def templated_string(self, text: str) -> str:
        """Return a string templated with the chart full name."""

    def trim_name(self, obj_name: str) -> str:
        """Return the name without the common prefix."""

    def config(self) -> Config:
        """Return the application configuration."""


class Processor(Protocol):
    """Converts a Kubernetes object into a Helm template."""

    def process(self, app_meta: AppMetadata, obj: dict) -> tuple[bool, Template | None]:
        """Return (False, None) when obj is of a kind this processor does not handle."""