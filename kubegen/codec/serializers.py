"""Byte-level serializers for the supported media types.

Documents are plain ``dict``/``list``/scalar trees. Both formats sort keys so
the same document always produces the same bytes.
"""
from __future__ import annotations
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
import yaml

JSON_MEDIA_TYPE = 'application/json'
YAML_MEDIA_TYPE = 'application/yaml'


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as strings.

    Re-dumping a ``datetime`` changes its spelling, which would make
    normalization output differ from its input.
    """


_DocumentLoader.add_constructor('tag:yaml.org,2002:timestamp', yaml.SafeLoader.construct_yaml_str)


class Serializer(ABC):
    media_type: str

    @abstractmethod
    def encode(self, doc: Any) -> bytes:  # pragma: no cover - interface
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:  # pragma: no cover - interface
        pass

    def decode_all(self, data: bytes) -> List[Any]:
        return [self.decode(data)]


class JSONSerializer(Serializer):
    media_type = JSON_MEDIA_TYPE

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def encode(self, doc: Any) -> bytes:
        if self.pretty:
            text = json.dumps(doc, indent=2, sort_keys=True, ensure_ascii=False)
        else:
            text = json.dumps(doc, separators=(',', ':'), sort_keys=True, ensure_ascii=False)
        return (text + '\n').encode('utf-8')

    def decode(self, data: bytes) -> Any:
        return json.loads(data)


class YAMLSerializer(Serializer):
    media_type = YAML_MEDIA_TYPE

    def encode(self, doc: Any) -> bytes:
        return yaml.safe_dump(doc, sort_keys=True, default_flow_style=False, allow_unicode=True).encode('utf-8')

    def decode(self, data: bytes) -> Any:
        return yaml.load(data, Loader=_DocumentLoader)

    def decode_all(self, data: bytes) -> List[Any]:
        return list(yaml.load_all(data, Loader=_DocumentLoader))


@dataclass(frozen=True)
class SerializerInfo:
    media_type: str
    serializer: Serializer
    pretty_serializer: Optional[Serializer] = None


def supported_media_types() -> List[SerializerInfo]:
    return [
        SerializerInfo(JSON_MEDIA_TYPE, JSONSerializer(), JSONSerializer(pretty=True)),
        # YAML has no pretty variant; block style is already the readable form
        SerializerInfo(YAML_MEDIA_TYPE, YAMLSerializer()),
    ]


def canonical_media_type(content_type: str) -> str:
    return content_type.split(';', 1)[0].strip().lower()


def serializer_info_for_media_type(infos: Iterable[SerializerInfo], content_type: str) -> Optional[SerializerInfo]:
    wanted = canonical_media_type(content_type)
    for info in infos:
        if info.media_type == wanted:
            return info
    return None
