# helmify

Reads Kubernetes manifests and writes them out as a Helm chart. The manifests can be piped on standard input or read from files and directories.

The chart directory holds:

- `Chart.yaml` (chart version `0.1.0`, app version `0.1.0`). It is written only when it does not exist yet.
- `.helmignore`
- `templates/_helpers.tpl`, with the usual `name`, `fullname`, `chart`, `labels`, `selectorLabels` and `serviceAccountName` definitions
- one template file per resource
- `values.yaml`. It always contains `kubernetesClusterDomain: cluster.local` and is overwritten on every run, as are the generated templates.

## Installation

```
pip install .
```

## Usage

```
helmify [flags] CHART_NAME
```

`CHART_NAME` is optional and defaults to `chart`. It may be a path such as `deploy/charts/mychart`. The last part becomes the chart name and must be a lowercase DNS subdomain, for example `my-chart` or `my.chart`.

Examples:

```
kustomize build ./config | helmify mychart
cat my-app.yaml | helmify mychart
helmify -f ./manifests mychart
helmify -f ./manifests -r mychart
helmify -f ./manifests -f ./sample-app.yaml mychart
```

The command exits with status 1 in two cases: no `-f` is given and standard input is a terminal, or the run fails. SIGINT and SIGTERM stop a run without writing the chart.

### Flags

Flags may be written with one or two dashes. Boolean flags also accept `-flag=true` or `-flag=false`.

| Flag | Meaning |
| --- | --- |
| `-h`, `-help` | Print help and exit |
| `-version` | Print version, build time and commit, then exit |
| `-v` | Log warnings and info |
| `-vv` | Log debug messages as well |
| `-f PATH` | File or directory with manifests; may be repeated |
| `-r` | Scan directories given with `-f` recursively |
| `-crd-dir` | Write CRDs untemplated into the `crds` directory |
| `-cert-manager-as-subchart` | Add cert-manager as a chart dependency and set `certmanager.enabled` and `certmanager.installCRDs` in values |
| `-cert-manager-version V` | Version of the cert-manager dependency (default `v1.12.2`) |
| `-cert-manager-install-crd` | Value of `certmanager.installCRDs` (default true) |
| `-original-name` | Keep object names instead of prefixing them with the chart full name |
| `-preserve-ns` | Keep each object's namespace in its metadata |
| `-image-pull-secrets`, `-generate-defaults`, `-add-webhook-option` | Accepted and stored in the configuration; they do not change the generated chart |

## What gets templated

Before any processing, all objects are loaded. This finds the common name prefix and the namespace of the application. Object names then become `{{ include "<chart>.fullname" . }}-<name without prefix>`. Labels that Helm provides itself are dropped and replaced by the chart's `labels` include.

- **ConfigMap**: every `data` entry moves into `values.yaml` under the ConfigMap's camel-cased name. Keys ending in `.properties` are split into one value per property. Multi-line values are rendered with `toYaml`.
- **CustomResourceDefinition**: the name, labels and spec are templated. A `cert-manager.io/inject-ca-from` annotation is pointed at the release namespace and chart full name. A conversion webhook service gets the templated name and release namespace. With `-crd-dir` the CRD is copied unchanged.
- **Namespace**: skipped, since Helm handles the namespace.
- **Everything else**: the metadata is templated and the rest of the object is copied unchanged.

## Not included

There are no dedicated processors for Deployments, StatefulSets, DaemonSets, Jobs, CronJobs, Services, Ingresses, Secrets, RBAC objects, storage or webhooks. These resources go through the default path described above. Their replicas, images, resources and similar fields are not moved into `values.yaml`.

`helmify.deployment` has helpers for Deployment templates: `process_replicas`, `process_revision_history_limit`, `replace_single_quotes` and `add_webhook_option`. The command does not use them.

## Library use

```python
from helmify.app import start
from helmify.config import Config

with open("sample-app.yaml") as fh:
    start(fh, Config(chart_name="my-app"))
```

Other entry points:

- `helmify.app.AppContext`: collects objects with `add()` and writes the chart with `create_helm()`. Processors are registered with `with_processors()` and `with_default_processor()`.
- `helmify.decoder.decode(reader)`: yields objects from a YAML or JSON stream. Invalid documents are logged and skipped.
- `helmify.files.walk(paths, recursively)`: yields `(file name, stream)` pairs.
- `helmify.values.Values`: the values tree, with `add`, `add_yaml`, `add_secret` and `merge`.
- `helmify.chart.ChartOutput`: writes templates and values to disk.

## Development

```
pip install -e ".[test]"
pytest
```