from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from ..errors import DecodeError
from ..util import logging as log


class Predicate(Enum):
    IS_NULL = "null"
    IS_EMPTY_MAP = "empty-map"

    def matches(self, value: Any) -> bool:
        if self is Predicate.IS_NULL:
            return value is None
        return isinstance(value, dict) and len(value) == 0


def mapping_at(obj: Dict[str, Any], key: str, where: str) -> Optional[Dict[str, Any]]:
    """Return ``obj[key]`` if it is a mapping, None if absent or null.

    Anything else present at ``key`` is a shape error.
    """
    value = obj.get(key)
    if value is None or isinstance(value, dict):
        return value
    raise DecodeError(f'kubegen/normalize: expected a mapping at {_join(where, key)}, got {type(value).__name__}')


def sequence_at(obj: Dict[str, Any], key: str, where: str) -> Optional[List[Any]]:
    value = obj.get(key)
    if value is None or isinstance(value, list):
        return value
    raise DecodeError(f'kubegen/normalize: expected a sequence at {_join(where, key)}, got {type(value).__name__}')


def _join(where: str, key: str) -> str:
    return f'{where}.{key}' if where else key


def _delete_if(obj: Dict[str, Any], key: str, predicate: Predicate, where: str) -> bool:
    if key in obj and predicate.matches(obj[key]):
        del obj[key]
        log.debug('removed noise field', path=_join(where, key), rule=predicate.value)
        return True
    return False


@dataclass(frozen=True)
class NoiseRule:
    """Delete ``path`` from a mapping when its value satisfies ``predicate``.

    A two-segment path ``(parent, child)`` only looks inside ``parent`` when it
    is a non-empty mapping, and afterwards deletes ``parent`` itself if it is an
    empty mapping.
    """
    path: Tuple[str, ...]
    predicate: Predicate

    def __post_init__(self):
        if len(self.path) not in (1, 2):
            raise ValueError(f'noise rule path must have one or two segments, got {self.path!r}')

    def apply(self, obj: Dict[str, Any], where: str = '') -> None:
        if len(self.path) == 1:
            _delete_if(obj, self.path[0], self.predicate, where)
            return
        parent_key, child_key = self.path
        parent = mapping_at(obj, parent_key, where)
        if parent:
            _delete_if(parent, child_key, self.predicate, _join(where, parent_key))
        _delete_if(obj, parent_key, Predicate.IS_EMPTY_MAP, where)

    def __str__(self) -> str:
        return f"{'.'.join(self.path)} ({self.predicate.value})"


# Order within each table matters: later rules see what earlier ones removed.
DOCUMENT_RULES: Tuple[NoiseRule, ...] = (
    NoiseRule(('metadata',), Predicate.IS_EMPTY_MAP),
)

ITEM_RULES: Tuple[NoiseRule, ...] = (
    NoiseRule(('metadata', 'creationTimestamp'), Predicate.IS_NULL),
    NoiseRule(('status', 'loadBalancer'), Predicate.IS_EMPTY_MAP),
    NoiseRule(('spec', 'strategy'), Predicate.IS_EMPTY_MAP),
)

CONTAINER_RULES: Tuple[NoiseRule, ...] = (
    NoiseRule(('resources',), Predicate.IS_EMPTY_MAP),
    NoiseRule(('securityContext',), Predicate.IS_EMPTY_MAP),
)

TEMPLATE_RULES: Tuple[NoiseRule, ...] = (
    NoiseRule(('metadata', 'creationTimestamp'), Predicate.IS_NULL),
)
