import pytest

from helmify.config import Config
from helmify.metadata import (
    GroupVersionKind,
    Service,
    common_prefix,
    group_version_kind,
    object_name,
    object_namespace,
)

TEST_NS_NAME = "my-operator-system"


def _namespace_obj():
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": TEST_NS_NAME}}


def _secret(name, ns):
    return {"apiVersion": "v1", "kind": "Secret", "metadata": {"name": name, "namespace": ns}}


@pytest.mark.parametrize(
    "left, right, want",
    [
        ("test", "testimony", "test"),
        ("testimony", "testicle", "testi"),
        ("testimony", "abc", ""),
        ("testimony", "", ""),
        ("", "abc", ""),
        ("", "", ""),
        ("багет", "багаж", "баг"),
    ],
)
def test_common_prefix(left, right, want):
    assert common_prefix(left, right) == want


def test_load_namespace_from_objects():
    svc = Service(Config())
    svc.load(_secret("name", "ns"))
    assert svc.namespace() == "ns"
    svc.load(_namespace_obj())
    assert svc.namespace() == TEST_NS_NAME


def test_chart_name():
    svc = Service(Config(chart_name="name"))
    assert svc.chart_name() == "name"


def test_trim_common_prefix():
    svc = Service(Config())
    for name in ("abc-name1", "abc-name2", "abc-service"):
        svc.load(_secret(name, "ns"))
    assert svc.trim_name("abc-name1") == "name1"
    assert svc.trim_name("abc-name2") == "name2"
    assert svc.trim_name("abc-service") == "service"


def test_trim_no_common_prefix():
    svc = Service(Config())
    for name in ("name1", "abc", "service"):
        svc.load(_secret(name, "ns"))
    assert svc.trim_name("name1") == "name1"
    assert svc.trim_name("abc") == "abc"
    assert svc.trim_name("service") == "service"


def test_templated_name():
    svc = Service(Config(chart_name="chart-name"))
    svc.load(_secret("abc", "ns"))
    assert svc.templated_name("abc") == '{{ include "chart-name.fullname" . }}-abc'


def test_templated_name_ignores_unknown_name():
    svc = Service(Config(chart_name="chart-name"))
    svc.load(_secret("abc", "ns"))
    assert svc.templated_name("qwe") == "qwe"
    assert svc.templated_name("abc") != "abc"


def test_templated_name_keeps_original_when_configured():
    svc = Service(Config(chart_name="chart-name", original_name=True))
    svc.load(_secret("abc", "ns"))
    assert svc.templated_name("abc") == "abc"


def test_templated_string():
    svc = Service(Config(chart_name="chart-name"))
    assert svc.templated_string("abc") == '{{ include "chart-name.fullname" . }}-abc'


def test_group_version_kind():
    assert group_version_kind({"apiVersion": "apps/v1", "kind": "Deployment"}) == GroupVersionKind(
        "apps", "v1", "Deployment"
    )
    assert group_version_kind(_namespace_obj()) == GroupVersionKind("", "v1", "Namespace")
    assert group_version_kind({"apiVersion": "a/b/c", "kind": "X"}) == GroupVersionKind("", "", "")


def test_object_name_and_namespace():
    obj = _secret("abc", "ns")
    assert object_name(obj) == "abc"
    assert object_namespace(obj) == "ns"
    assert object_name({"kind": "X"}) == ""