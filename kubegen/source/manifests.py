from __future__ import annotations
import os
from typing import Any, Dict, List, Optional
import yaml
from ..codec.selector import FormatSelector, default_selector
from ..codec.serializers import JSON_MEDIA_TYPE, YAML_MEDIA_TYPE, serializer_info_for_media_type
from ..errors import DecodeError, UnsupportedFormat
from ..kube.scheme import LIST_KIND

SOURCE_EXTENSIONS = {
    '.yaml': YAML_MEDIA_TYPE,
    '.yml': YAML_MEDIA_TYPE,
    '.json': JSON_MEDIA_TYPE,
}


def content_type_for_path(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    try:
        return SOURCE_EXTENSIONS[ext]
    except KeyError:
        raise UnsupportedFormat(f'kubegen/source: cannot tell the format of {path!r} from its extension',
                                content_type=None) from None


def parse_source(data: bytes, content_type: str, selector: Optional[FormatSelector] = None) -> List[Dict[str, Any]]:
    """Parse source text into generic documents, skipping empty ones."""
    selector = selector or default_selector()
    info = serializer_info_for_media_type(selector.supported_media_types(), content_type)
    if info is None:
        raise UnsupportedFormat(f'kubegen/source: no parser registered for {content_type!r}', content_type=content_type)
    try:
        docs = info.serializer.decode_all(data)
    except (yaml.YAMLError, ValueError) as e:
        raise DecodeError(f'kubegen/source: error parsing {content_type!r} source: {e}') from e
    parsed = []
    for i, doc in enumerate(docs):
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise DecodeError(f'kubegen/source: document {i} is a {type(doc).__name__}, not a mapping')
        parsed.append(doc)
    return parsed


def _flatten(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    flat = []
    for doc in docs:
        if doc.get('kind') == LIST_KIND:
            items = doc.get('items') or []
            if not isinstance(items, list):
                raise DecodeError('kubegen/source: List document has non-sequence items')
            flat.extend(items)
        else:
            flat.append(doc)
    return flat


def populate(doc: Dict[str, Any], selector: Optional[FormatSelector] = None, index: int = 0) -> Any:
    """Build the typed object a generic document describes."""
    selector = selector or default_selector()
    if not isinstance(doc, dict):
        raise DecodeError(f'kubegen/source: document {index} is a {type(doc).__name__}, not a mapping')
    try:
        return selector.scheme.from_document(doc)
    except (KeyError, ValueError, TypeError) as e:
        raise DecodeError(f'kubegen/source: error constructing an object from document {index}: {e}') from e


def load_objects(data: bytes, content_type: str, selector: Optional[FormatSelector] = None) -> List[Any]:
    selector = selector or default_selector()
    docs = _flatten(parse_source(data, content_type, selector))
    return [populate(doc, selector, i) for i, doc in enumerate(docs)]


def load_file(path: str, selector: Optional[FormatSelector] = None) -> List[Any]:
    content_type = content_type_for_path(path)
    with open(path, 'rb') as f:
        data = f.read()
    return load_objects(data, content_type, selector)
