import pytest

from helmify.config import Config
from helmify.meta import process_obj_meta, to_yaml
from helmify.metadata import Service
from helmify.values import Values


@pytest.fixture
def namespace_obj():
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {
            "name": "my-operator-system",
            "labels": {"control-plane": "controller-manager"},
        },
    }


def _secret(name, namespace="ns", labels=None, annotations=None):
    metadata = {"name": name, "namespace": namespace}
    if labels is not None:
        metadata["labels"] = labels
    if annotations is not None:
        metadata["annotations"] = annotations
    return {"apiVersion": "v1", "kind": "Secret", "metadata": metadata}


def test_process_obj_meta_namespace(namespace_obj):
    meta = Service(Config(chart_name="chart-name"))
    meta.load(namespace_obj)
    result = process_obj_meta(meta, namespace_obj)
    assert "chart-name.labels" in result
    assert "chart-name.fullname" in result


def test_process_obj_meta_exact_output():
    meta = Service(Config(chart_name="chart-name"))
    obj = _secret("abc")
    meta.load(obj)
    expected = (
        "apiVersion: v1\n"
        "kind: Secret\n"
        "metadata:\n"
        '  name: {{ include "chart-name.fullname" . }}-abc\n'
        "  labels:\n"
        '  {{- include "chart-name.labels" . | nindent 4 }}'
    )
    assert process_obj_meta(meta, obj) == expected


def test_helm_labels_are_dropped():
    meta = Service(Config(chart_name="chart-name"))
    obj = _secret("abc", labels={"app.kubernetes.io/name": "x", "helm.sh/chart": "c", "tier": "web"})
    result = process_obj_meta(meta, obj)
    assert "    tier: web\n" in result
    assert "app.kubernetes.io/name" not in result
    assert "helm.sh/chart" not in result
    assert obj["metadata"]["labels"]["app.kubernetes.io/name"] == "x"


def test_annotations_rendered():
    meta = Service(Config(chart_name="chart-name"))
    obj = _secret("abc", annotations={"note": "hello"})
    result = process_obj_meta(meta, obj)
    assert result.endswith("  annotations:\n    note: hello")


def test_non_string_annotations_ignored():
    meta = Service(Config(chart_name="chart-name"))
    obj = _secret("abc", annotations={"count": 1})
    assert "annotations" not in process_obj_meta(meta, obj)


def test_namespace_preserved_only_when_configured():
    obj = _secret("abc", namespace="team-ns")
    kept = process_obj_meta(Service(Config(chart_name="c", preserve_ns=True)), obj)
    dropped = process_obj_meta(Service(Config(chart_name="c")), obj)
    assert "  namespace: team-ns" in kept
    assert "namespace" not in dropped


def test_annotations_moved_to_values():
    meta = Service(Config(chart_name="chart-name"))
    obj = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "my-svc", "annotations": {"a": "b"}},
    }
    values = Values()
    result = process_obj_meta(meta, obj, values)
    assert values == {"mySvc": {"service": {"annotations": {"a": "b"}}}}
    assert "{{- toYaml .Values.mySvc.service.annotations | nindent 4 }}" in result
    assert "kind: Service" in result


def test_to_yaml_sorts_and_indents():
    assert to_yaml({"b": 1, "a": [1, 2]}, 2) == "  a:\n  - 1\n  - 2\n  b: 1"


def test_to_yaml_without_indent():
    assert to_yaml({"x": {"y": "z"}}, 0) == "x:\n  y: z"


def test_to_yaml_multiline_literal():
    assert to_yaml({"k": "a\nb"}, 0) == "k: |-\n  a\n  b"


def test_to_yaml_no_aliases():
    shared = {"v": 1}
    text = to_yaml({"a": shared, "b": shared}, 0)
    assert "&" not in text
    assert text == "a:\n  v: 1\nb:\n  v: 1"


def test_to_yaml_values_subclass():
    assert to_yaml(Values({"k": "v"}), 0) == "k: v"