import textwrap
import pytest
from kubernetes import client as k8s
from kubegen.errors import DecodeError, UnsupportedFormat
from kubegen.source.manifests import content_type_for_path, load_file, load_objects, parse_source

SOURCE = textwrap.dedent("""
apiVersion: v1
kind: Service
metadata:
  name: api
spec:
  ports:
  - port: 80
---
---
apiVersion: v1
kind: List
items:
- apiVersion: apps/v1
  kind: Deployment
  metadata:
    name: api
  spec:
    selector:
      matchLabels:
        app: api
    template:
      spec:
        containers:
        - name: api
          image: nginx
""").encode()


def test_load_objects_flattens_lists_and_skips_empty_documents():
    objects = load_objects(SOURCE, 'application/yaml')
    assert [type(o) for o in objects] == [k8s.V1Service, k8s.V1Deployment]
    assert objects[1].spec.template.spec.containers[0].image == 'nginx'


def test_parse_source_json():
    docs = parse_source(b'{"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "c"}}', 'application/json')
    assert docs == [{'apiVersion': 'v1', 'kind': 'ConfigMap', 'metadata': {'name': 'c'}}]


def test_parse_source_rejects_scalars():
    with pytest.raises(DecodeError, match='document 0'):
        parse_source(b'just text\n', 'application/yaml')


def test_parse_source_bad_syntax():
    with pytest.raises(DecodeError, match='kubegen/source'):
        parse_source(b'{"kind": ', 'application/json')


def test_unknown_kind_is_a_decode_error():
    with pytest.raises(DecodeError, match='document 0'):
        load_objects(b'apiVersion: v1\nkind: Widget\n', 'application/yaml')


def test_model_validation_is_a_decode_error():
    # containers need a name
    data = b'apiVersion: v1\nkind: Pod\nspec:\n  containers:\n  - image: nginx\n'
    with pytest.raises(DecodeError):
        load_objects(data, 'application/yaml')


def test_content_type_for_path():
    assert content_type_for_path('a/b.yml') == 'application/yaml'
    assert content_type_for_path('B.JSON') == 'application/json'
    with pytest.raises(UnsupportedFormat):
        content_type_for_path('manifest.hcl')


def test_load_file(tmp_path):
    path = tmp_path / 'src.yaml'
    path.write_bytes(SOURCE)
    assert len(load_file(str(path))) == 2
