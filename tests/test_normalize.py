import textwrap
import pytest
import yaml
from kubegen.errors import DecodeError
from kubegen.normalize.cleanup import normalize, strip_noise
from kubegen.normalize.rules import NoiseRule, Predicate

DEPLOYMENT_LIST = textwrap.dedent("""
apiVersion: v1
kind: List
metadata: {}
items:
- apiVersion: apps/v1
  kind: Deployment
  metadata:
    name: api
    creationTimestamp: null
  spec:
    strategy: {}
    template:
      metadata:
        creationTimestamp: null
        labels:
          app: api
      spec:
        containers:
        - name: api
          image: nginx
          resources: {}
          securityContext:
            runAsUser: 1000
  status:
    loadBalancer: {}
""").encode()


def test_deployment_noise_is_removed():
    doc = yaml.safe_load(normalize('application/yaml', DEPLOYMENT_LIST))
    assert 'metadata' not in doc
    item = doc['items'][0]
    assert item['metadata'] == {'name': 'api'}
    assert 'status' not in item
    assert 'strategy' not in item['spec']
    template = item['spec']['template']
    assert template['metadata'] == {'labels': {'app': 'api'}}
    container = template['spec']['containers'][0]
    assert 'resources' not in container
    assert container['securityContext'] == {'runAsUser': 1000}


def test_single_document_is_treated_as_one_item():
    data = textwrap.dedent("""
    apiVersion: apps/v1
    kind: Deployment
    metadata:
      creationTimestamp: null
      name: api
    spec:
      template:
        spec:
          containers:
          - name: api
            resources: {}
    status:
      loadBalancer: {}
    """).encode()
    doc = yaml.safe_load(normalize('application/yaml', data))
    assert doc['metadata'] == {'name': 'api'}
    assert 'status' not in doc
    assert doc['spec']['template']['spec']['containers'] == [{'name': 'api'}]


def test_emptied_metadata_is_removed():
    data = b"items:\n- kind: Service\n  metadata:\n    creationTimestamp: null\n"
    doc = yaml.safe_load(normalize('application/yaml', data))
    assert doc['items'] == [{'kind': 'Service'}]


def test_template_metadata_cascade():
    data = textwrap.dedent("""
    items:
    - kind: DaemonSet
      spec:
        template:
          metadata:
            creationTimestamp: null
          spec:
            containers:
            - name: c
    """).encode()
    doc = yaml.safe_load(normalize('application/yaml', data))
    assert doc['items'][0]['spec']['template'] == {'spec': {'containers': [{'name': 'c'}]}}


def test_non_empty_values_are_kept():
    data = textwrap.dedent("""
    metadata:
      resourceVersion: "1"
    items:
    - metadata:
        creationTimestamp: "2017-03-01T10:00:00Z"
      status:
        loadBalancer:
          ingress:
          - ip: 10.0.0.1
      spec:
        strategy:
          type: Recreate
        template:
          metadata:
            creationTimestamp: "2017-03-01T10:00:00Z"
          spec:
            containers:
            - name: c
              resources:
                limits:
                  cpu: "1"
              securityContext:
                privileged: false
    """).encode()
    assert yaml.safe_load(normalize('application/yaml', data)) == yaml.safe_load(data)


def test_predicates_do_not_cross():
    # empty-map paths keep nulls, null paths keep empty maps
    data = textwrap.dedent("""
    items:
    - metadata:
        creationTimestamp: {}
      status:
        loadBalancer: null
      spec:
        strategy: []
        template:
          spec:
            containers:
            - name: c
              resources: null
              securityContext: ""
    """).encode()
    doc = yaml.safe_load(normalize('application/yaml', data))
    item = doc['items'][0]
    assert item['metadata'] == {'creationTimestamp': {}}
    assert item['status'] == {'loadBalancer': None}
    assert item['spec']['strategy'] == []
    container = item['spec']['template']['spec']['containers'][0]
    assert container == {'name': 'c', 'resources': None, 'securityContext': ''}


def test_normalization_is_idempotent():
    once = normalize('application/yaml', DEPLOYMENT_LIST)
    assert normalize('application/yaml', once) == once


def test_timestamps_are_kept_verbatim():
    data = b"metadata:\n  creationTimestamp: 2017-03-01T10:00:00Z\n  name: x\n"
    once = normalize('application/yaml', data)
    assert b'2017-03-01T10:00:00Z' in once
    assert normalize('application/yaml', once) == once


@pytest.mark.parametrize('content_type', ['application/json', 'application/vnd.kubernetes.protobuf'])
def test_other_formats_pass_through(content_type):
    data = b'{"metadata":{},"items":[{"metadata":{"creationTimestamp":null}}]}'
    assert normalize(content_type, data) is data


def test_empty_input_becomes_empty_mapping():
    assert normalize('application/yaml', b'') == b'{}\n'


def test_invalid_yaml_is_a_decode_error():
    with pytest.raises(DecodeError, match='kubegen/normalize'):
        normalize('application/yaml', b'items: [unclosed')


@pytest.mark.parametrize('data', [
    b'- just\n- a list\n',
    b'items: 3\n',
    b'items:\n- 3\n',
    b'items:\n- spec: oops\n',
    b'items:\n- spec:\n    template:\n      spec:\n        containers: {}\n',
    b'items:\n- spec:\n    template:\n      spec:\n        containers:\n        - oops\n',
])
def test_shape_errors_are_decode_errors(data):
    with pytest.raises(DecodeError):
        normalize('application/yaml', data)


def test_null_parents_are_left_alone():
    data = b"items:\n- metadata: null\n  spec: null\n- null\n"
    doc = yaml.safe_load(normalize('application/yaml', data))
    assert doc['items'] == [{'metadata': None, 'spec': None}, None]


def test_strip_noise_returns_a_copy():
    doc = {'metadata': {}, 'items': [{'status': {'loadBalancer': {}}}]}
    cleaned = strip_noise(doc)
    assert cleaned == {'items': [{}]}
    assert doc == {'metadata': {}, 'items': [{'status': {'loadBalancer': {}}}]}


def test_noise_rule_path_length():
    with pytest.raises(ValueError):
        NoiseRule(('a', 'b', 'c'), Predicate.IS_NULL)
    rule = NoiseRule(('status', 'loadBalancer'), Predicate.IS_EMPTY_MAP)
    obj = {'status': {'loadBalancer': {}, 'conditions': []}}
    rule.apply(obj)
    assert obj == {'status': {'conditions': []}}
    assert str(rule) == 'status.loadBalancer (empty-map)'
