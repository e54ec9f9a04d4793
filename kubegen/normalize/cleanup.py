"""Noise-field removal for encoded YAML documents.

The YAML encoder emits fields the object model always carries, such as a null
``creationTimestamp`` or an empty ``resources`` mapping. They carry no meaning
and would make reviewers read past them in every generated file. This pass
decodes the YAML, removes those fields at a fixed set of paths, and re-encodes
it. Other formats pass through unchanged.
"""
from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict
import yaml
from ..codec.serializers import YAML_MEDIA_TYPE, YAMLSerializer, canonical_media_type
from ..errors import DecodeError, EncodeError
from .rules import CONTAINER_RULES, DOCUMENT_RULES, ITEM_RULES, TEMPLATE_RULES, mapping_at, sequence_at

_YAML = YAMLSerializer()


def _strip_containers(pod_spec: Dict[str, Any], where: str):
    containers = sequence_at(pod_spec, 'containers', where)
    if not containers:
        return
    for i, container in enumerate(containers):
        path = f'{where}.containers[{i}]'
        if container is None:
            continue
        if not isinstance(container, dict):
            raise DecodeError(f'kubegen/normalize: expected a mapping at {path}, got {type(container).__name__}')
        if container:
            for rule in CONTAINER_RULES:
                rule.apply(container, path)


def _strip_item(item: Dict[str, Any], where: str):
    for rule in ITEM_RULES:
        rule.apply(item, where)
    spec = mapping_at(item, 'spec', where)
    if not spec:
        return
    spec_path = f'{where}.spec' if where else 'spec'
    template = mapping_at(spec, 'template', spec_path)
    if not template:
        return
    template_path = f'{spec_path}.template'
    pod_spec = mapping_at(template, 'spec', template_path)
    if pod_spec:
        _strip_containers(pod_spec, f'{template_path}.spec')
    for rule in TEMPLATE_RULES:
        rule.apply(template, template_path)


def strip_noise(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``doc`` with noise fields removed.

    A document with an ``items`` key is treated as a collection and the item
    rules run on each element; any other document is treated as a single
    item.
    """
    if not isinstance(doc, dict):
        raise DecodeError(f'kubegen/normalize: expected a mapping at the document root, got {type(doc).__name__}')
    base = deepcopy(doc)
    for rule in DOCUMENT_RULES:
        rule.apply(base)
    if 'items' not in base:
        _strip_item(base, '')
        return base
    items = sequence_at(base, 'items', '')
    if not items:
        return base
    for i, item in enumerate(items):
        path = f'items[{i}]'
        if item is None:
            continue
        if not isinstance(item, dict):
            raise DecodeError(f'kubegen/normalize: expected a mapping at {path}, got {type(item).__name__}')
        if item:
            _strip_item(item, path)
    return base


def normalize(content_type: str, data: bytes) -> bytes:
    if canonical_media_type(content_type) != YAML_MEDIA_TYPE:
        return data
    try:
        doc = _YAML.decode(data)
    except yaml.YAMLError as e:
        raise DecodeError(f'kubegen/normalize: error decoding {content_type!r} document: {e}') from e
    if doc is None:
        doc = {}
    cleaned = strip_noise(doc)
    try:
        return _YAML.encode(cleaned)
    except yaml.YAMLError as e:
        raise EncodeError(f'kubegen/normalize: error encoding {content_type!r} document: {e}') from e
