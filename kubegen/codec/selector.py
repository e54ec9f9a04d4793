from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from ..errors import UnsupportedFormat
from ..kube.scheme import DEFAULT_VERSION_PRIORITY, LIST_GROUP_VERSION, LIST_KIND, Scheme, build_scheme
from ..util import logging as log
from .serializers import Serializer, SerializerInfo, serializer_info_for_media_type, supported_media_types


@dataclass(frozen=True)
class Codec:
    """A serializer/deserializer pair bound to a version priority list."""
    media_type: str
    serializer: Serializer
    deserializer: Serializer
    versions: Tuple[str, ...]
    scheme: Scheme
    # True only when the pretty variant is the one actually in use
    pretty: bool = False

    def to_document(self, obj: Any) -> Dict[str, Any]:
        return self.scheme.to_document(obj, self.versions)

    def list_document(self, items: Sequence[Any]) -> Dict[str, Any]:
        return {
            'apiVersion': LIST_GROUP_VERSION,
            'kind': LIST_KIND,
            'metadata': {},
            'items': [self.to_document(item) for item in items],
        }

    def encode(self, obj: Any) -> bytes:
        return self.serializer.encode(self.to_document(obj))

    def encode_list(self, items: Sequence[Any]) -> bytes:
        return self.serializer.encode(self.list_document(items))

    def decode(self, data: bytes) -> Any:
        return self.scheme.from_document(self.deserializer.decode(data))


class FormatSelector:
    def __init__(self, scheme: Scheme, versions: Sequence[str] = DEFAULT_VERSION_PRIORITY,
                 media_types: Optional[List[SerializerInfo]] = None):
        known = set(scheme.group_versions())
        unknown = [gv for gv in versions if gv not in known]
        if unknown:
            raise ValueError(f'Unknown group versions in priority list: {", ".join(unknown)}')
        self.scheme = scheme
        self.versions: Tuple[str, ...] = tuple(versions)
        self._media_types = list(media_types) if media_types is not None else supported_media_types()

    def supported_media_types(self) -> List[SerializerInfo]:
        return list(self._media_types)

    def resolve(self, content_type: str, pretty: bool = False) -> Codec:
        info = serializer_info_for_media_type(self._media_types, content_type)
        if info is None:
            available = ', '.join(i.media_type for i in self._media_types)
            raise UnsupportedFormat(
                f'kubegen/codec: no serializer registered for {content_type!r} (available: {available})',
                content_type=content_type,
            )
        serializer = info.serializer
        use_pretty = False
        if pretty:
            if info.pretty_serializer is not None:
                serializer = info.pretty_serializer
                use_pretty = True
            else:
                log.debug('pretty serializer unavailable, using compact', media_type=info.media_type)
        return Codec(
            media_type=info.media_type,
            serializer=serializer,
            deserializer=info.serializer,
            versions=self.versions,
            scheme=self.scheme,
            pretty=use_pretty,
        )


_DEFAULT_SELECTOR: Optional[FormatSelector] = None


def default_selector() -> FormatSelector:
    """Selector over the static version table, built on first use."""
    global _DEFAULT_SELECTOR
    if _DEFAULT_SELECTOR is None:
        _DEFAULT_SELECTOR = FormatSelector(build_scheme())
    return _DEFAULT_SELECTOR
