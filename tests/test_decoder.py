import io
import threading

from helmify.decoder import decode

TWO_OBJECTS = """apiVersion: v1
kind: Service
metadata:
  name: demo-webhook-service
  namespace: demo-system
spec:
  ports:
  - port: 8443
    targetPort: 8080
  selector:
    app: demo
---
apiVersion: v1
kind: Namespace
metadata:
  labels:
    app: demo
  name: demo-system
"""

TWO_OBJECTS_AMONG_GARBAGE = """random words here
more random words without structure
---
apiVersion: v1
kind: Service
metadata:
  name: demo-webhook-service
  namespace: demo-system
spec:
  ports:
  - port: 8443
    targetPort: 8080
  selector:
    app: demo
---
---
---
foo bar baz 123
qux quux corge
grault [garply waldo
---
apiVersion: v1
kind: Namespace
metadata:
  labels:
    app: demo
  name: demo-system
---
apiVersion: v1
metadata:
  labels:
"""

ONLY_SEPARATORS = """---
---
---
"""


def test_decode_ok():
    objects = list(decode(io.StringIO(TWO_OBJECTS)))
    assert len(objects) == 2
    assert [o["kind"] for o in objects] == ["Service", "Namespace"]


def test_decode_empty_objects():
    assert list(decode(io.StringIO(ONLY_SEPARATORS))) == []


def test_decode_invalid_objects_skipped():
    objects = list(decode(io.StringIO(TWO_OBJECTS_AMONG_GARBAGE)))
    assert len(objects) == 2


def test_decode_bytes_reader():
    objects = list(decode(io.BytesIO(TWO_OBJECTS.encode("utf-8"))))
    assert objects[0]["spec"]["ports"][0]["port"] == 8443


def test_decode_stop_signal():
    stop = threading.Event()
    stop.set()
    assert list(decode(io.StringIO(TWO_OBJECTS), stop)) == []


def test_decode_json_stream():
    text = '{"apiVersion": "v1", "kind": "Secret", "metadata": {"name": "a"}}\n{"apiVersion": "v1"}'
    objects = list(decode(io.StringIO(text)))
    assert objects == [{"apiVersion": "v1", "kind": "Secret", "metadata": {"name": "a"}}]


def test_decode_keeps_timestamps_as_strings():
    text = "apiVersion: v1\nkind: ConfigMap\ndata:\n  date: 2021-01-01\n"
    objects = list(decode(io.StringIO(text)))
    assert objects[0]["data"]["date"] == "2021-01-01"