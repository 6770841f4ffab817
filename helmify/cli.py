"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from typing import Any

from .app import start
from .config import Config

logger = logging.getLogger(__name__)

VERSION = "development"
BUILD_DATE = "not set"
COMMIT = "not set"

HELP_TEXT = """Helmify parses kubernetes resources from std.in and converts it to a Helm chart.

Example 1: 'kustomize build <kustomize_dir> | helmify mychart' 
  - will create 'mychart' directory with Helm chart from kustomize output.

Example 2: 'cat my-app.yaml | helmify mychart' 
  - will create 'mychart' directory with Helm chart from yaml file.

Example 3: 'helmify -f ./test_data/dir  mychart' 
  - will scan directory ./test_data/dir for files with k8s manifests and create 'mychart' directory with Helm chart.

Example 4: 'helmify -f ./test_data/dir -r  mychart' 
  - will scan directory ./test_data/dir recursively and  create 'mychart' directory with Helm chart.

Example 5: 'helmify -f ./test_data/dir -f ./test_data/sample-app.yaml -f ./test_data/dir/another_dir  mychart' 
  - will scan provided multiple files and directories and  create 'mychart' directory with Helm chart.

Example 6: 'awk 'FNR==1 && NR!=1  {print "---"}{print}' /my_directory/*.yaml | helmify mychart' 
  - will create 'mychart' directory with Helm chart from all yaml files in my_directory directory.

Usage:
  helmify [flags] CHART_NAME  -  CHART_NAME is optional. Default is 'chart'. Can be a directory, e.g. 'deploy/charts/mychart'.

Flags:
"""


@dataclass(frozen=True)
class _Flag:
    name: str
    dest: str
    default: Any
    help: str
    kind: str = "bool"


_FLAGS = (
    _Flag("h", "h", False, "Print help. Example: helmify -h"),
    _Flag("help", "help", False, "Print help. Example: helmify -help"),
    _Flag("version", "version", False, "Print helmify version. Example: helmify -version"),
    _Flag("v", "verbose", False, "Enable verbose output (print WARN & INFO). Example: helmify -v"),
    _Flag("vv", "very_verbose", False,
          "Enable very verbose output. Same as verbose but with DEBUG. Example: helmify -vv"),
    _Flag("crd-dir", "crd", False,
          "Enable crd install into 'crds' directory.\n"
          "Warning: CRDs placed in 'crds' directory will not be templated by Helm.\n"
          "Example: helmify -crd-dir"),
    _Flag("image-pull-secrets", "image_pull_secrets", False,
          "Allows the user to use existing secrets as imagePullSecrets in values.yaml"),
    _Flag("generate-defaults", "generate_defaults", False,
          "Allows the user to add empty placeholders for typical customization options in "
          "values.yaml. Currently covers: topology constraints, node selectors, tolerances"),
    _Flag("cert-manager-as-subchart", "cert_manager_as_subchart", False,
          "Allows the user to add cert-manager as a subchart"),
    _Flag("cert-manager-version", "cert_manager_version", "v1.12.2",
          "Allows the user to specify cert-manager subchart version. "
          "Only useful with cert-manager-as-subchart.", "str"),
    _Flag("cert-manager-install-crd", "cert_manager_install_crd", True,
          "Allows the user to install cert-manager CRD. Only useful with cert-manager-as-subchart."),
    _Flag("r", "files_recursively", False, "Scan dirs from -f option recursively"),
    _Flag("original-name", "original_name", False,
          "Use the object's original name instead of adding the chart's release name "
          "as the common prefix."),
    _Flag("f", "files", None, "File or directory containing k8s manifests", "list"),
    _Flag("preserve-ns", "preserve_ns", False,
          "Use the object's original namespace instead of adding all the resources "
          "to a common namespace"),
    _Flag("add-webhook-option", "add_webhook_option", False,
          "Allows the user to add webhook option in values.yaml"),
)

_BOOL_FLAGS = {flag.name: flag for flag in _FLAGS if flag.kind == "bool"}
_BOOL_ASSIGNMENT = re.compile(r"^--?([A-Za-z][\w-]*)=(.*)$", re.DOTALL)
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="helmify", add_help=False, allow_abbrev=False)
    for flag in _FLAGS:
        options = [f"-{flag.name}", f"--{flag.name}"]
        if flag.kind == "bool":
            parser.add_argument(*options, dest=flag.dest, action="store_true", default=False)
        elif flag.kind == "str":
            parser.add_argument(*options, dest=flag.dest, default=flag.default)
        else:
            parser.add_argument(*options, dest=flag.dest, action="append", default=[])
    parser.add_argument("args", nargs="*")
    return parser


def _flag_defaults() -> str:
    lines = []
    for flag in sorted(_FLAGS, key=lambda item: item.name):
        head = f"  -{flag.name}"
        if flag.kind != "bool":
            head += " value"
        lines.append(head)
        text = flag.help.replace("\n", "\n    \t")
        if flag.kind == "str" and flag.default:
            text += f' (default "{flag.default}")'
        elif flag.kind == "bool" and flag.default:
            text += " (default true)"
        lines.append(f"    \t{text}")
    return "\n".join(lines) + "\n"


def _split_bool_assignments(
    parser: argparse.ArgumentParser, argv: list[str]
) -> tuple[list[str], dict[str, bool]]:
    """Pull '-flag=value' forms of boolean flags out of argv."""
    remaining: list[str] = []
    overrides: dict[str, bool] = {}
    for index, token in enumerate(argv):
        if token == "--":
            remaining.extend(argv[index:])
            break
        match = _BOOL_ASSIGNMENT.match(token)
        if match is None or match.group(1) not in _BOOL_FLAGS:
            remaining.append(token)
            continue
        name, raw = match.groups()
        if raw in _TRUE:
            overrides[_BOOL_FLAGS[name].dest] = True
        elif raw in _FALSE:
            overrides[_BOOL_FLAGS[name].dest] = False
        else:
            parser.error(f'invalid boolean value "{raw}" for -{name}')
    return remaining, overrides


def print_version() -> str:
    """Write the build information to stdout and return the written text."""
    text = "".join(
        f"{label:<12}{value}\n"
        for label, value in (
            ("Version:", VERSION),
            ("Build Time:", BUILD_DATE),
            ("Git Commit:", COMMIT),
        )
    )
    sys.stdout.write(text)
    return text


def read_flags(argv: list[str] | None = None) -> Config:
    """Parse command-line flags into a Config; print help or version and exit when asked."""
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    tokens, overrides = _split_bool_assignments(parser, list(argv))
    namespace = parser.parse_args(tokens)
    options = vars(namespace)
    options.update(overrides)

    if options["h"] or options["help"]:
        sys.stdout.write(HELP_TEXT)
        sys.stdout.write(_flag_defaults())
        raise SystemExit(0)
    if options["version"]:
        print_version()
        raise SystemExit(0)
    if "cert_manager_install_crd" not in overrides:
        options["cert_manager_install_crd"] = True

    config = Config(
        verbose=options["verbose"],
        very_verbose=options["very_verbose"],
        crd=options["crd"],
        image_pull_secrets=options["image_pull_secrets"],
        generate_defaults=options["generate_defaults"],
        cert_manager_as_subchart=options["cert_manager_as_subchart"],
        cert_manager_version=options["cert_manager_version"],
        cert_manager_install_crd=options["cert_manager_install_crd"],
        files=list(options["files"]),
        files_recursively=options["files_recursively"],
        original_name=options["original_name"],
        preserve_ns=options["preserve_ns"],
        add_webhook_option=options["add_webhook_option"],
    )
    name = options["args"][0] if options["args"] else ""
    if name:
        config.chart_name = os.path.basename(name.rstrip(os.sep)) or os.sep
        config.chart_dir = os.path.normpath(os.path.dirname(name))
    return config


def main(argv: list[str] | None = None) -> int:
    """Run helmify and return the process exit code."""
    config = read_flags(argv)
    logging.basicConfig(format="%(levelname)s %(message)s")
    if not config.files and sys.stdin.isatty():
        logger.error("no data piped in stdin")
        return 1
    try:
        start(sys.stdin, config)
    except (ValueError, OSError) as exc:
        logger.error("helmify finished with error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())