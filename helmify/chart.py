"""Writing processed templates to disk as a Helm chart."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Sequence

from .config import DEFAULT_DOMAIN, DOMAIN_KEY
from .meta import to_yaml
from .values import Template, Values

logger = logging.getLogger(__name__)

_HELM_IGNORE_LINES = (
    "# Patterns to ignore when building packages.",
    "# This supports shell glob matching, relative path matching, and",
    "# negation (prefixed with !). Only one pattern per line.",
    ".DS_Store",
    "# Common VCS dirs",
    ".git/", ".gitignore",
    ".bzr/", ".bzrignore",
    ".hg/", ".hgignore",
    ".svn/",
    "# Common backup files",
    "*.swp", "*.bak", "*.tmp", "*.orig", "*~",
    "# Various IDEs",
    ".project", ".idea/", "*.tmproj", ".vscode/",
)
HELM_IGNORE = "\n".join(_HELM_IGNORE_LINES) + "\n"

_PLACEHOLDER = "<CHARTNAME>"

# (definition name, doc comment lines, body lines)
_HELPER_DEFINITIONS = (
    (
        "name",
        ("Expand the name of the chart.",),
        ('{{- default .Chart.Name .Values.nameOverride | trunc 63 | trimSuffix "-" }}',),
    ),
    (
        "fullname",
        (
            "Create a default fully qualified app name.",
            "We truncate at 63 chars because some Kubernetes name fields are limited "
            "to this (by the DNS naming spec).",
            "If release name contains chart name it will be used as a full name.",
        ),
        (
            "{{- if .Values.fullnameOverride }}",
            '{{- .Values.fullnameOverride | trunc 63 | trimSuffix "-" }}',
            "{{- else }}",
            "{{- $name := default .Chart.Name .Values.nameOverride }}",
            "{{- if contains $name .Release.Name }}",
            '{{- .Release.Name | trunc 63 | trimSuffix "-" }}',
            "{{- else }}",
            '{{- printf "%s-%s" .Release.Name $name | trunc 63 | trimSuffix "-" }}',
            "{{- end }}",
            "{{- end }}",
        ),
    ),
    (
        "chart",
        ("Create chart name and version as used by the chart label.",),
        (
            '{{- printf "%s-%s" .Chart.Name .Chart.Version'
            ' | replace "+" "_" | trunc 63 | trimSuffix "-" }}',
        ),
    ),
    (
        "labels",
        ("Common labels",),
        (
            f'helm.sh/chart: {{{{ include "{_PLACEHOLDER}.chart" . }}}}',
            f'{{{{ include "{_PLACEHOLDER}.selectorLabels" . }}}}',
            "{{- if .Chart.AppVersion }}",
            "app.kubernetes.io/version: {{ .Chart.AppVersion | quote }}",
            "{{- end }}",
            "app.kubernetes.io/managed-by: {{ .Release.Service }}",
        ),
    ),
    (
        "selectorLabels",
        ("Selector labels",),
        (
            f'app.kubernetes.io/name: {{{{ include "{_PLACEHOLDER}.name" . }}}}',
            "app.kubernetes.io/instance: {{ .Release.Name }}",
        ),
    ),
    (
        "serviceAccountName",
        ("Create the name of the service account to use",),
        (
            "{{- if .Values.serviceAccount.create }}",
            f'{{{{- default (include "{_PLACEHOLDER}.fullname" .) .Values.serviceAccount.name }}}}',
            "{{- else }}",
            '{{- default "default" .Values.serviceAccount.name }}',
            "{{- end }}",
        ),
    ),
)


def _render_helpers() -> str:
    blocks = []
    for name, doc, body in _HELPER_DEFINITIONS:
        lines = [
            "{{/*",
            *doc,
            "*/}}",
            f'{{{{- define "{_PLACEHOLDER}.{name}" -}}}}',
            *body,
            "{{- end }}",
        ]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


DEFAULT_HELPERS = _render_helpers()

_CHART_FILE_TAIL = (
    "description: A Helm chart for Kubernetes",
    "# A chart can be either an 'application' or a 'library' chart.",
    "#",
    "# Application charts are a collection of templates that can be packaged "
    "into versioned archives",
    "# to be deployed.",
    "#",
    "# Library charts provide useful utilities or functions for the chart developer. "
    "They're included as",
    "# a dependency of application charts to inject those utilities and functions "
    "into the rendering",
    "# pipeline. Library charts do not define any templates and therefore cannot be deployed.",
    "type: application",
    "# This is the chart version. This version number should be incremented each time "
    "you make changes",
    "# to the chart and its templates, including the app version.",
    "# Versions are expected to follow Semantic Versioning (https://semver.org/)",
    "version: 0.1.0",
    "# This is the version number of the application being deployed. "
    "This version number should be",
    "# incremented each time you make changes to the application. "
    "Versions are not expected to",
    "# follow Semantic Versioning. They should reflect the version the application is using.",
    "# It is recommended to use it with quotes.",
    'appVersion: "0.1.0"',
)

_CERT_MANAGER_DEPENDENCY = (
    ("name", "cert-manager"),
    ("repository", "https://charts.jetstack.io"),
    ("condition", "certmanager.enabled"),
    ("alias", "certmanager"),
)

_CHART_NAME = re.compile(r"^[a-zA-Z0-9._-]+$")
MAX_CHART_NAME_LENGTH = 250


class ChartError(ValueError):
    """Raised when a chart cannot be created with the given settings."""


def validate_chart_name(name: str) -> None:
    """Raise ChartError unless name is a valid chart directory name."""
    if not name or len(name) > MAX_CHART_NAME_LENGTH:
        raise ChartError(f"chart name must be between 1 and {MAX_CHART_NAME_LENGTH} characters")
    if not _CHART_NAME.match(name):
        raise ChartError(f"chart name must match the regular expression {_CHART_NAME.pattern!r}")


def _cert_manager_dependencies(version: str) -> str:
    lines = ["", "dependencies:"]
    for index, (key, value) in enumerate(_CERT_MANAGER_DEPENDENCY):
        prefix = "  - " if index == 0 else "    "
        lines.append(f"{prefix}{key}: {value}")
    lines.append(f"    version: {json.dumps(version, ensure_ascii=False)}")
    return "\n".join(lines) + "\n"


def chart_yaml(app_name: str, cert_manager_as_subchart: bool, cert_manager_version: str) -> str:
    """Return the text of Chart.yaml."""
    lines = ["apiVersion: v2", f"name: {app_name}", *_CHART_FILE_TAIL]
    text = "\n".join(lines) + "\n"
    if cert_manager_as_subchart:
        text += _cert_manager_dependencies(cert_manager_version)
    return text


def helpers_yaml(chart_name: str) -> str:
    """Return the text of templates/_helpers.tpl for the chart."""
    return DEFAULT_HELPERS.replace(_PLACEHOLDER, chart_name)


def _write_file(path: str, content: str, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with open(fd, "w", encoding="utf-8", newline="") as stream:
        stream.write(content)


def _create_common_files(
    chart_dir: str,
    chart_name: str,
    crd: bool,
    cert_manager_as_subchart: bool,
    cert_manager_version: str,
) -> None:
    c_dir = os.path.join(chart_dir, chart_name)
    os.makedirs(os.path.join(c_dir, "templates"), mode=0o750, exist_ok=True)
    if crd:
        os.makedirs(os.path.join(c_dir, "crds"), mode=0o750, exist_ok=True)
    files = (
        (os.path.join(c_dir, "Chart.yaml"),
         chart_yaml(chart_name, cert_manager_as_subchart, cert_manager_version)),
        (os.path.join(c_dir, ".helmignore"), HELM_IGNORE),
        (os.path.join(c_dir, "templates", "_helpers.tpl"), helpers_yaml(chart_name)),
    )
    for path, content in files:
        _write_file(path, content, 0o640)
        logger.info("created %s", path)


def init_chart_dir(
    chart_dir: str,
    chart_name: str,
    crd: bool,
    cert_manager_as_subchart: bool,
    cert_manager_version: str,
) -> None:
    """Create the chart skeleton unless Chart.yaml already exists."""
    validate_chart_name(chart_name)
    chart_file = os.path.join(chart_dir, chart_name, "Chart.yaml")
    try:
        os.stat(chart_file)
    except FileNotFoundError:
        _create_common_files(
            chart_dir, chart_name, crd, cert_manager_as_subchart, cert_manager_version
        )
        return
    logger.info("Skip creating Chart skeleton: Chart.yaml already exists.")


def _overwrite_template_file(
    filename: str, chart_dir: str, crd: bool, templates: Sequence[Template]
) -> None:
    if "crd" in filename and crd:
        subdir = "crds"
        os.makedirs(os.path.join(chart_dir, subdir), mode=0o750, exist_ok=True)
    else:
        subdir = "templates"
    path = os.path.join(chart_dir, subdir, filename)
    fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o600)
    with open(fd, "w", encoding="utf-8", newline="") as stream:
        for index, template in enumerate(templates):
            logger.debug("writing a template into %s", path)
            template.write(stream)
            if index != len(templates) - 1:
                stream.write("\n---\n")
    logger.info("overwritten %s", path)


def _overwrite_values_file(
    chart_dir: str, values: Values, cert_manager_as_subchart: bool, cert_manager_install_crd: bool
) -> None:
    if cert_manager_as_subchart:
        values.add(cert_manager_install_crd, "certmanager", "installCRDs")
        values.add(True, "certmanager", "enabled")
    path = os.path.join(chart_dir, "values.yaml")
    _write_file(path, to_yaml(values, 0) + "\n", 0o600)
    logger.info("overwritten %s", path)


class ChartOutput:
    """Writes templates and values to a Helm chart directory.

    values.yaml and the generated templates are overwritten on every run.
    """

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
        init_chart_dir(chart_dir, chart_name, crd, cert_manager_as_subchart, cert_manager_version)
        files: dict[str, list[Template]] = {}
        values = Values({DOMAIN_KEY: DEFAULT_DOMAIN})
        for template, filename in zip(templates, filenames):
            files.setdefault(filename, []).append(template)
            values.merge(template.values())
        c_dir = os.path.join(chart_dir, chart_name)
        for filename, group in files.items():
            _overwrite_template_file(filename, c_dir, crd, group)
        _overwrite_values_file(c_dir, values, cert_manager_as_subchart, cert_manager_install_crd)