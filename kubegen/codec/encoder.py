from __future__ import annotations
from typing import Any, Optional, Sequence
from ..errors import EncodeError, KubegenError, UnsupportedFormat
from ..normalize.cleanup import normalize
from ..util import logging as log
from .selector import Codec, FormatSelector, default_selector


class ObjectEncoder:
    """Encode typed objects to normalized bytes through a ``FormatSelector``."""

    def __init__(self, selector: Optional[FormatSelector] = None):
        self.selector = selector or default_selector()

    def _codec(self, content_type: str, pretty: bool) -> Codec:
        try:
            return self.selector.resolve(content_type, pretty)
        except UnsupportedFormat as e:
            raise UnsupportedFormat(
                f'kubegen/encoder: error creating codec for {content_type!r}: {e}',
                content_type=content_type,
            ) from e

    def encode(self, obj: Any, content_type: str, pretty: bool = False) -> bytes:
        codec = self._codec(content_type, pretty)
        try:
            data = codec.encode(obj)
        except KubegenError:
            raise
        except Exception as e:
            raise EncodeError(f'kubegen/encoder: error encoding object to {content_type!r}: {e}') from e
        log.debug('encoded object', type=type(obj).__name__, media_type=codec.media_type, size=len(data))
        return normalize(content_type, data)

    def encode_list(self, items: Sequence[Any], content_type: str, pretty: bool = False) -> bytes:
        codec = self._codec(content_type, pretty)
        try:
            data = codec.encode_list(list(items))
        except KubegenError:
            raise
        except Exception as e:
            raise EncodeError(f'kubegen/encoder: error encoding list to {content_type!r}: {e}') from e
        log.debug('encoded list', count=len(items), media_type=codec.media_type, size=len(data))
        return normalize(content_type, data)


def encode(obj: Any, content_type: str, pretty: bool = False) -> bytes:
    return ObjectEncoder().encode(obj, content_type, pretty)


def encode_list(items: Sequence[Any], content_type: str, pretty: bool = False) -> bytes:
    return ObjectEncoder().encode_list(items, content_type, pretty)
