"""Registry of typed Kubernetes models keyed by group/version and kind.

A ``Scheme`` is built once from ``STATIC_VERSION_TABLE`` and handed to the
format selector; tests build their own with different tables. It converts
``kubernetes.client`` model instances to plain documents at a negotiated
group/version, and plain documents back into model instances.
"""
from __future__ import annotations
import inspect
import json
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type
from kubernetes import client as k8s_client
from ..util import logging as log

# (group/version, {kind: model class name in kubernetes.client})
STATIC_VERSION_TABLE: List[Tuple[str, Dict[str, str]]] = [
    ('v1', {
        'Service': 'V1Service',
        'ConfigMap': 'V1ConfigMap',
        'Secret': 'V1Secret',
        'Pod': 'V1Pod',
        'ServiceAccount': 'V1ServiceAccount',
    }),
    ('apps/v1', {
        'Deployment': 'V1Deployment',
        'ReplicaSet': 'V1ReplicaSet',
        'DaemonSet': 'V1DaemonSet',
        'StatefulSet': 'V1StatefulSet',
    }),
    ('batch/v1', {
        'Job': 'V1Job',
        'CronJob': 'V1CronJob',
    }),
]

DEFAULT_VERSION_PRIORITY: Tuple[str, ...] = ('v1', 'apps/v1', 'batch/v1')

LIST_GROUP_VERSION = 'v1'
LIST_KIND = 'List'


def _takes_content_type(deserialize) -> bool:
    try:
        return 'content_type' in inspect.signature(deserialize).parameters
    except (TypeError, ValueError):
        return False


class Scheme:
    def __init__(self, api_client: Optional[k8s_client.ApiClient] = None):
        self._api_client = api_client or k8s_client.ApiClient()
        self._deserialize_takes_content_type = _takes_content_type(self._api_client.deserialize)
        # group/version -> kind -> model class, in registration order
        self._kinds: Dict[str, Dict[str, Type]] = {}
        # model class -> [(group/version, kind)]
        self._by_type: Dict[Type, List[Tuple[str, str]]] = {}

    def register(self, group_version: str, kind: str, model_cls: Type):
        self._kinds.setdefault(group_version, {})[kind] = model_cls
        entries = self._by_type.setdefault(model_cls, [])
        if (group_version, kind) not in entries:
            entries.append((group_version, kind))
        return model_cls

    def group_versions(self) -> List[str]:
        return list(self._kinds.keys())

    def kinds(self, group_version: str) -> List[str]:
        return list(self._kinds.get(group_version, {}).keys())

    def recognizes(self, api_version: str, kind: str) -> bool:
        return kind in self._kinds.get(api_version, {})

    def model_for(self, api_version: str, kind: str) -> Type:
        try:
            return self._kinds[api_version][kind]
        except KeyError:
            raise KeyError(f'no kind {kind!r} is registered for version {api_version!r}') from None

    def kind_of(self, obj: Any) -> str:
        entries = self._by_type.get(type(obj))
        if not entries:
            raise KeyError(f'type {type(obj).__name__} is not registered')
        return entries[0][1]

    def version_for(self, obj: Any, versions: Sequence[str]) -> Tuple[str, str]:
        """Pick the first group/version in ``versions`` that knows ``obj``'s type."""
        entries = self._by_type.get(type(obj))
        if not entries:
            raise KeyError(f'type {type(obj).__name__} is not registered')
        for gv in versions:
            for entry_gv, kind in entries:
                if entry_gv == gv:
                    return gv, kind
        known = ', '.join(gv for gv, _ in entries)
        raise KeyError(f'{type(obj).__name__} is registered for {known}, none of which is in {list(versions)}')

    def to_document(self, obj: Any, versions: Sequence[str]) -> Dict[str, Any]:
        gv, kind = self.version_for(obj, versions)
        log.debug('negotiated version', kind=kind, api_version=gv)
        body = self._api_client.sanitize_for_serialization(obj)
        if not isinstance(body, dict):
            raise ValueError(f'{type(obj).__name__} did not serialize to a mapping')
        doc: Dict[str, Any] = {'apiVersion': gv, 'kind': kind}
        for key, value in body.items():
            if key not in doc:
                doc[key] = value
        return doc

    def from_document(self, doc: Dict[str, Any]) -> Any:
        api_version = doc.get('apiVersion')
        kind = doc.get('kind')
        if not api_version or not kind:
            raise ValueError('document is missing apiVersion or kind')
        model_cls = self.model_for(api_version, kind)
        text = json.dumps(doc)
        if self._deserialize_takes_content_type:
            return self._api_client.deserialize(text, model_cls.__name__, 'application/json')
        # older clients expect a response-like object carrying the JSON text
        return self._api_client.deserialize(SimpleNamespace(data=text), model_cls.__name__)


def build_scheme(table: Iterable[Tuple[str, Dict[str, str]]] = STATIC_VERSION_TABLE,
                 api_client: Optional[k8s_client.ApiClient] = None) -> Scheme:
    scheme = Scheme(api_client)
    for group_version, kinds in table:
        for kind, class_name in kinds.items():
            model_cls = getattr(k8s_client, class_name, None)
            if model_cls is None:
                raise ValueError(f'kubernetes client has no model {class_name} for {group_version}/{kind}')
            scheme.register(group_version, kind, model_cls)
    return scheme
