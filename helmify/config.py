"""Application configuration and cluster-wide constants."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "cluster.local"
DOMAIN_KEY = "kubernetesClusterDomain"
DOMAIN_ENV = "KUBERNETES_CLUSTER_DOMAIN"

DEFAULT_CHART_NAME = "chart"

_DNS1123_SUBDOMAIN_FMT = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*"
_DNS1123_SUBDOMAIN = re.compile(_DNS1123_SUBDOMAIN_FMT)
_DNS1123_SUBDOMAIN_MAX_LENGTH = 253


class ConfigError(ValueError):
    """Raised when the configuration is not valid."""


def _dns1123_subdomain_errors(value: str) -> list[str]:
    errors = []
    if len(value) > _DNS1123_SUBDOMAIN_MAX_LENGTH:
        errors.append(f"must be no more than {_DNS1123_SUBDOMAIN_MAX_LENGTH} characters")
    if not _DNS1123_SUBDOMAIN.fullmatch(value):
        errors.append(
            "a lowercase RFC 1123 subdomain must consist of lower case alphanumeric "
            "characters, '-' or '.', and must start and end with an alphanumeric "
            f"character (regex used for validation is '{_DNS1123_SUBDOMAIN_FMT}')"
        )
    return errors


@dataclass
class Config:
    """Settings for one chart generation run."""

    chart_name: str = ""
    chart_dir: str = ""
    verbose: bool = False
    very_verbose: bool = False
    crd: bool = False
    image_pull_secrets: bool = False
    generate_defaults: bool = False
    cert_manager_as_subchart: bool = False
    cert_manager_version: str = ""
    cert_manager_install_crd: bool = False
    files: list[str] = field(default_factory=list)
    files_recursively: bool = False
    original_name: bool = False
    preserve_ns: bool = False
    add_webhook_option: bool = False

    def validate(self) -> None:
        """Fill in the default chart name and check that the name is a DNS subdomain."""
        if not self.chart_name:
            logger.info("Chart name is not set. Using default name '%s'", DEFAULT_CHART_NAME)
            self.chart_name = DEFAULT_CHART_NAME
        errors = _dns1123_subdomain_errors(self.chart_name)
        if errors:
            for error in errors:
                logger.error("Invalid chart name %s", error)
            raise ConfigError(f"invalid chart name {self.chart_name}")