"""Turning a stream of Kubernetes manifests into a Helm chart."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import IO, Protocol

from .chart import ChartOutput
from .config import Config
from .configmap import ConfigMapProcessor
from .crd import CrdProcessor
from .decoder import decode
from .default import DefaultProcessor
from .files import walk
from .metadata import Service, object_name
from .values import Processor, Template

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = logging.getLogger(__name__.partition(".")[0])


class Output(Protocol):
    """Writes processed templates somewhere, usually to a chart directory."""

    def create(
        self,
        chart_dir: str,
        chart_name: str,
        crd: bool,
        cert_manager_as_subchart: bool,
        cert_manager_version: str,
        cert_manager_install_crd: bool,
        templates: Sequence[Template],
        filenames: Sequence[str],
    ) -> None:
        """Write the templates under the given file names."""


class AppContext:
    """Collects input objects and turns them into chart templates."""

    def __init__(self, config: Config, output: Output) -> None:
        self.config = config
        self.output = output
        self.app_meta = Service(config)
        self.processors: list[Processor] = []
        self.default_processor: Processor | None = None
        self._objects: list[dict] = []
        self._filenames: list[str] = []

    def with_processors(self, *args: Processor) -> AppContext:
        """Register processors, tried in order; return self."""
        self.processors.extend(args)
        return self

    def with_default_processor(self, processor: Processor) -> AppContext:
        """Set the processor used for objects no other processor handles; return self."""
        self.default_processor = processor
        return self

    def add(self, obj: dict, filename: str = "") -> None:
        """Register an object; all objects must be added before processing starts."""
        self.app_meta.load(obj)
        self._objects.append(obj)
        self._filenames.append(filename)

    def create_helm(self, stop: threading.Event | None = None) -> None:
        """Process every added object and write the chart; return early once stop is set."""
        logger.info(
            "creating a chart: ChartName=%s Namespace=%s",
            self.app_meta.chart_name(),
            self.app_meta.namespace(),
        )
        templates: list[Template] = []
        filenames: list[str] = []
        for obj, filename in zip(self._objects, self._filenames):
            template = self._process(obj)
            if template is not None:
                templates.append(template)
                filenames.append(filename or template.filename())
            if stop is not None and stop.is_set():
                return
        self.output.create(
            self.config.chart_dir,
            self.config.chart_name,
            self.config.crd,
            self.config.cert_manager_as_subchart,
            self.config.cert_manager_version,
            self.config.cert_manager_install_crd,
            templates,
            filenames,
        )

    def _process(self, obj: dict) -> Template | None:
        for processor in self.processors:
            processed, result = processor.process(self.app_meta, obj)
            if processed:
                logger.debug(
                    "processed apiVersion=%s kind=%s name=%s",
                    obj.get("apiVersion"),
                    obj.get("kind"),
                    object_name(obj),
                )
                return result
        if self.default_processor is None:
            logger.warning(
                "Skipping: no suitable processor for resource. apiVersion=%s kind=%s name=%s",
                obj.get("apiVersion"),
                obj.get("kind"),
                object_name(obj),
            )
            return None
        _, result = self.default_processor.process(self.app_meta, obj)
        return result


def _set_log_level(config: Config) -> None:
    level = logging.ERROR
    if config.verbose:
        level = logging.INFO
    if config.very_verbose:
        level = logging.DEBUG
    _PACKAGE_LOGGER.setLevel(level)


@contextmanager
def _stop_on_signals(stop: threading.Event) -> Iterator[None]:
    """Set stop on SIGINT or SIGTERM while the block runs (main thread only)."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, frame: object) -> None:
        logger.debug("Received termination, signaling shutdown")
        stop.set()

    signals = (signal.SIGINT, signal.SIGTERM)
    previous = {sig: signal.signal(sig, handler) for sig in signals}
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


def start(stdin: IO, config: Config) -> None:
    """Read manifests from config.files, or from stdin when none are given, and write the chart."""
    config.validate()
    _set_log_level(config)
    stop = threading.Event()
    with _stop_on_signals(stop):
        app_ctx = (
            AppContext(config, ChartOutput())
            .with_processors(ConfigMapProcessor(), CrdProcessor())
            .with_default_processor(DefaultProcessor())
        )
        if config.files:
            for _name, stream in walk(config.files, config.files_recursively):
                for obj in decode(stream, stop):
                    app_ctx.add(obj, "")
        else:
            for obj in decode(stdin, stop):
                app_ctx.add(obj, "")
        app_ctx.create_helm(stop)