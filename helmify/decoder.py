"""Decoding of YAML or JSON streams of Kubernetes manifests."""

from __future__ import annotations

import json
import logging
import re
import threading
from collections.abc import Iterator
from typing import IO, Any

import yaml

from .metadata import group_version_kind, object_name

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s*")
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class DecodeError(ValueError):
    """Raised when a document is not a Kubernetes object."""


class _Loader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


_Loader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_key(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def _split_yaml(text: str) -> Iterator[str]:
    chunk: list[str] = []
    for line in text.split("\n"):
        if line.startswith("---") and not line[3:].strip():
            yield "\n".join(chunk)
            chunk = []
        else:
            chunk.append(line)
    yield "\n".join(chunk)


def _yaml_documents(text: str) -> Iterator[Any]:
    for chunk in _split_yaml(text):
        try:
            value = yaml.load(chunk, Loader=_Loader)
        except yaml.YAMLError as exc:
            logger.error("unable to decode yaml from input: %s", exc)
            continue
        yield _normalize(value)


def _json_documents(text: str) -> Iterator[Any]:
    decoder = json.JSONDecoder()
    pos = 0
    while True:
        pos = _WHITESPACE.match(text, pos).end()
        if pos >= len(text):
            return
        try:
            value, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            logger.error("unable to decode json from input: %s", exc)
            return
        yield value


def _to_object(value: Any) -> dict:
    if not isinstance(value, dict):
        raise DecodeError(f"expected a mapping, got {type(value).__name__}")
    if not isinstance(value.get("kind"), str) or not value["kind"]:
        raise DecodeError(f"Object 'Kind' is missing in {value!r}")
    if not isinstance(value.get("apiVersion"), str) or not value["apiVersion"]:
        raise DecodeError(f"Object 'apiVersion' is missing in {value!r}")
    return value


def decode(reader: IO, stop: threading.Event | None = None) -> Iterator[dict]:
    """Yield each valid Kubernetes object read from reader; invalid documents are logged and skipped."""
    content = reader.read()
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode("utf-8")
    logger.debug("Start processing...")
    if content.lstrip().startswith("{"):
        documents = _json_documents(content)
    else:
        documents = _yaml_documents(content)
    for document in documents:
        if stop is not None and stop.is_set():
            logger.debug("Exiting: received stop signal")
            return
        if document is None:
            continue
        try:
            obj = _to_object(document)
        except DecodeError as exc:
            logger.error("unable to decode yaml: %s", exc)
            continue
        gvk = group_version_kind(obj)
        logger.debug("decoded %s/%s %s", gvk.kind, obj["apiVersion"], object_name(obj))
        yield obj
    logger.debug("EOF received. Finishing input objects decoding.")