"""Helpers for templating Deployment resources."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .meta import to_yaml
from .values import Values

_QUOTED_TEMPLATE = re.compile(r"'({{((.*|.*\n.*))}}.*)'")

_WEBHOOK_HEADER = "      {{- if .Values.webhook.enabled }}"
_WEBHOOK_FOOTER = "      {{- end }}"
_WEBHOOK_VOLUMES = (
    "      - name: cert\n"
    "        secret:\n"
    "          defaultMode: 420\n"
    "          secretName: webhook-server-cert"
)
_WEBHOOK_VOLUME_MOUNTS = (
    "        - mountPath: /tmp/k8s-webhook-server/serving-certs\n"
    "          name: cert\n"
    "          readOnly: true"
)
_WEBHOOK_PORT = re.compile(
    r"        - containerPort: \d+\n"
    r"          name: webhook-server\n"
    r"          protocol: TCP"
)


def _wrap_webhook(block: str) -> str:
    return f"{_WEBHOOK_HEADER}\n{block}\n{_WEBHOOK_FOOTER}"


def replace_single_quotes(text: str) -> str:
    """Remove the single quotes that YAML puts around template expressions."""
    return _QUOTED_TEMPLATE.sub(r"\1", text)


def add_webhook_option(manifest: str) -> str:
    """Guard the webhook certificate volume, mount and port behind .Values.webhook.enabled."""
    manifest = manifest.replace(_WEBHOOK_VOLUMES, _wrap_webhook(_WEBHOOK_VOLUMES))
    manifest = manifest.replace(_WEBHOOK_VOLUME_MOUNTS, _wrap_webhook(_WEBHOOK_VOLUME_MOUNTS))
    first = _WEBHOOK_PORT.search(manifest)
    if first is None:
        return manifest
    wrapped = _wrap_webhook(first.group(0))
    return _WEBHOOK_PORT.sub(lambda _match: wrapped, manifest)


def _spec_int(deployment: Mapping, field: str) -> int | None:
    spec: Any = deployment.get("spec")
    if not isinstance(spec, Mapping):
        return None
    value = spec.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _process_int_field(name: str, deployment: Mapping, values: Values, field: str) -> str:
    number = _spec_int(deployment, field)
    if number is None:
        return ""
    templated = values.add(number, name, field)
    return to_yaml({field: templated}, 2).replace("'", "")


def process_replicas(name: str, deployment: Mapping, values: Values) -> str:
    """Move spec.replicas into values and return its templated YAML line, or ''."""
    return _process_int_field(name, deployment, values, "replicas")


def process_revision_history_limit(name: str, deployment: Mapping, values: Values) -> str:
    """Move spec.revisionHistoryLimit into values and return its templated YAML line, or ''."""
    return _process_int_field(name, deployment, values, "revisionHistoryLimit")