import io

import pytest
import yaml

from helmify.configmap import (
    ConfigMapProcessor,
    PropertiesError,
    parse_map_data,
    parse_properties,
)
from helmify.metadata import Service
from helmify.values import Values

STR_CONFIGMAP = """apiVersion: v1
kind: ConfigMap
metadata:
  name: my-operator-manager-config
  namespace: my-operator-system
data:
  dummyconfigmapkey: dummyconfigmapvalue
  controller_manager_config.yaml: |
    apiVersion: controller-runtime.sigs.k8s.io/v1alpha1
    kind: ControllerManagerConfig
    health:
      healthProbeBindAddress: :8081"""

TEST_NS = {
    "apiVersion": "v1",
    "kind": "Namespace",
    "metadata": {"name": "my-operator-system", "labels": {"control-plane": "controller-manager"}},
}


def test_processed():
    obj = yaml.safe_load(STR_CONFIGMAP)
    processed, template = ConfigMapProcessor().process(Service(), obj)
    assert processed is True
    assert template.filename() == "my-operator-manager-config.yaml"


def test_skipped():
    assert ConfigMapProcessor().process(Service(), TEST_NS) == (False, None)


def test_processed_output_and_values():
    obj = yaml.safe_load(STR_CONFIGMAP)
    _, template = ConfigMapProcessor().process(Service(), obj)
    out = io.StringIO()
    template.write(out)
    text = out.getvalue()
    assert text.startswith("apiVersion: v1\nkind: ConfigMap\n")
    assert (
        "\ndata:\n  controller_manager_config.yaml: "
        "{{ .Values.myOperatorManagerConfig.controllerManagerConfigYaml | toYaml | indent 1 }}\n"
        "  dummyconfigmapkey: {{ .Values.myOperatorManagerConfig.dummyconfigmapkey | quote }}"
    ) in text
    assert template.values() == {
        "myOperatorManagerConfig": {
            "dummyconfigmapkey": "dummyconfigmapvalue",
            "controllerManagerConfigYaml": (
                "apiVersion: controller-runtime.sigs.k8s.io/v1alpha1\n"
                "kind: ControllerManagerConfig\n"
                "health:\n"
                "  healthProbeBindAddress: :8081"
            ),
        }
    }


def test_immutable_and_binary_data():
    obj = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "cm"},
        "immutable": True,
        "binaryData": {"bin": "AAEC"},
    }
    _, template = ConfigMapProcessor().process(Service(), obj)
    out = io.StringIO()
    template.write(out)
    assert out.getvalue().endswith("\nimmutable: true\nbinaryData:\n  bin: AAEC")
    assert template.values() == {}


def test_parse_map_data_plain():
    data, values = parse_map_data({"key": "value"}, "cfg")
    assert data == {"key": "{{ .Values.cfg.key | quote }}"}
    assert values == {"cfg": {"key": "value"}}


def test_parse_map_data_multiline():
    data, values = parse_map_data({"config.yaml": "a: 1  \nb: 2\n"}, "cfg")
    assert data == {"config.yaml": "{{ .Values.cfg.configYaml | toYaml | indent 1 }}"}
    assert values == {"cfg": {"configYaml": "a: 1\nb: 2"}}


def test_parse_map_data_properties():
    data, values = parse_map_data({"app.properties": "a.b=1\nc=x\n"}, "cfg")
    assert data == {
        "app.properties": (
            "a.b={{ .Values.cfg.appProperties.a.b | quote }}\n"
            "c={{ .Values.cfg.appProperties.c | quote }}\n"
        )
    }
    assert values == {"cfg": {"appProperties": {"a": {"b": "1"}, "c": "x"}}}


def test_parse_map_data_bad_properties_kept():
    data, values = parse_map_data({"bad.properties": "novalue"}, "cfg")
    assert data == {"bad.properties": "novalue"}
    assert values == {}


def test_parse_properties_wrong_format():
    with pytest.raises(PropertiesError):
        parse_properties("a=b=c", ["cfg", "x.properties"], Values())