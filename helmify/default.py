"""Fallback processor for resources without a dedicated processor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO

from .meta import process_obj_meta, to_yaml
from .metadata import NAMESPACE_GVK, group_version_kind, object_name
from .values import AppMetadata, Values

logger = logging.getLogger(__name__)

_META_KEYS = ("apiVersion", "kind", "metadata")


@dataclass
class DefaultResult:
    """Template of an unknown resource: templated metadata plus the remaining body."""

    name: str
    data: str

    def filename(self) -> str:
        return self.name + ".yaml"

    def values(self) -> Values:
        return Values()

    def write(self, writer: IO[str]) -> None:
        writer.write(self.data)


class DefaultProcessor:
    """Templates only the name and metadata of a resource; skips namespaces."""

    def process(self, app_meta: AppMetadata, obj: dict) -> tuple[bool, DefaultResult | None]:
        if group_version_kind(obj) == NAMESPACE_GVK:
            # Namespaces are managed by Helm.
            return True, None
        logger.warning(
            "Unsupported resource: using default processor. apiVersion=%s kind=%s name=%s",
            obj.get("apiVersion"),
            obj.get("kind"),
            object_name(obj),
        )
        name = app_meta.trim_name(object_name(obj))
        meta = process_obj_meta(app_meta, obj)
        rest = {key: value for key, value in obj.items() if key not in _META_KEYS}
        body = to_yaml(rest, 0)
        return True, DefaultResult(name=name, data=meta + "\n" + body)