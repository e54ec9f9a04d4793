"""Splitting a collection of objects into one generated file per object.

Each item is named from its kind and ``metadata.name`` and encoded on its own.
Encoding happens for every item before anything is written, so an encode
failure leaves the output directory untouched; a write failure stops at the
failing file and keeps whatever was already written.
"""
from __future__ import annotations
import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
from ..codec.encoder import ObjectEncoder
from ..codec.serializers import JSON_MEDIA_TYPE, YAML_MEDIA_TYPE, canonical_media_type
from ..errors import (ArtifactNameError, DuplicateName, InvalidName, MissingName, UnknownDiscriminator,
                      UnsupportedFormat, WriteError)
from ..util import logging as log

TOOL_NAME = 'kubegen'
BANNER_TEMPLATE = '# generated by {tool}\n# => {filename}\n---\n'
DEFAULT_FILE_MODE = 0o644

# DNS-1123 subdomain: dot-separated labels, no path separators
NAME_PATTERN = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$')
MAX_NAME_LENGTH = 253


def object_name(obj: Any) -> str:
    meta = getattr(obj, 'metadata', None)
    return getattr(meta, 'name', None) or ''


@dataclass(frozen=True)
class FilenameRule:
    suffix: str
    name_of: Callable[[Any], str] = object_name

    def filename(self, name: str, ext: str) -> str:
        return f'{name}-{self.suffix}.{ext}'


FILENAME_RULES: Dict[str, FilenameRule] = {
    'Service': FilenameRule('svc'),
    'Deployment': FilenameRule('dpl'),
    'ReplicaSet': FilenameRule('rs'),
    'DaemonSet': FilenameRule('ds'),
    'StatefulSet': FilenameRule('ss'),
}

FILE_EXTENSIONS: Dict[str, str] = {
    YAML_MEDIA_TYPE: 'yaml',
    JSON_MEDIA_TYPE: 'json',
}


@dataclass(frozen=True)
class Artifact:
    filename: str
    content: bytes
    kind: str


@dataclass
class PartitionResult:
    artifacts: List[Artifact] = field(default_factory=list)
    rejected: List[ArtifactNameError] = field(default_factory=list)

    @property
    def filenames(self) -> List[str]:
        return [a.filename for a in self.artifacts]


class ArtifactPartitioner:
    def __init__(self, encoder: Optional[ObjectEncoder] = None,
                 rules: Optional[Dict[str, FilenameRule]] = None,
                 extensions: Optional[Dict[str, str]] = None,
                 legacy_json_extension: bool = False,
                 tool_name: str = TOOL_NAME):
        """Create a partitioner.

        legacy_json_extension: name JSON artifacts ``.yaml`` like older
        releases did, instead of using the extension table.
        """
        self.encoder = encoder or ObjectEncoder()
        self.rules = dict(FILENAME_RULES if rules is None else rules)
        self.extensions = dict(FILE_EXTENSIONS if extensions is None else extensions)
        self.legacy_json_extension = legacy_json_extension
        self.tool_name = tool_name

    def extension_for(self, content_type: str) -> str:
        media_type = canonical_media_type(content_type)
        if self.legacy_json_extension and media_type == JSON_MEDIA_TYPE:
            return self.extensions[YAML_MEDIA_TYPE]
        try:
            return self.extensions[media_type]
        except KeyError:
            raise UnsupportedFormat(f'kubegen/export: no file extension registered for {content_type!r}',
                                    content_type=content_type) from None

    def kind_of(self, obj: Any) -> Optional[str]:
        try:
            return self.encoder.selector.scheme.kind_of(obj)
        except KeyError:
            return getattr(obj, 'kind', None)

    def filename_for(self, obj: Any, content_type: str, index: int = 0) -> str:
        kind = self.kind_of(obj)
        rule = self.rules.get(kind) if kind else None
        if rule is None:
            raise UnknownDiscriminator(
                f'kubegen/export: no filename rule for kind {kind or type(obj).__name__!r} (item {index})',
                kind=kind, index=index,
            )
        name = rule.name_of(obj)
        if not name:
            raise MissingName(f'kubegen/export: {kind} at item {index} has no metadata.name', kind=kind, index=index)
        if len(name) > MAX_NAME_LENGTH or not NAME_PATTERN.match(name):
            raise InvalidName(f'kubegen/export: {kind} at item {index} has an invalid metadata.name {name!r}',
                              kind=kind, index=index)
        return rule.filename(name, self.extension_for(content_type))

    def build(self, obj: Any, content_type: str, index: int = 0) -> Artifact:
        filename = self.filename_for(obj, content_type, index)
        data = self.encoder.encode(obj, content_type, pretty=True)
        if canonical_media_type(content_type) == YAML_MEDIA_TYPE:
            banner = BANNER_TEMPLATE.format(tool=self.tool_name, filename=filename)
            data = banner.encode('utf-8') + data
        return Artifact(filename=filename, content=data, kind=self.kind_of(obj) or '')

    def partition(self, items: Sequence[Any], content_type: str, strict: bool = False) -> PartitionResult:
        # fail before touching any item when the format itself is unusable
        self.extension_for(content_type)
        result = PartitionResult()
        seen: Dict[str, int] = {}
        for index, item in enumerate(items):
            try:
                artifact = self.build(item, content_type, index)
                if artifact.filename in seen:
                    raise DuplicateName(
                        f'kubegen/export: {artifact.kind} at item {index} would overwrite '
                        f'{artifact.filename!r} from item {seen[artifact.filename]}',
                        kind=artifact.kind, index=index,
                    )
            except ArtifactNameError as e:
                if strict:
                    raise
                log.warn('skipping item without a usable filename', index=index, kind=e.kind, reason=str(e))
                result.rejected.append(e)
                continue
            seen[artifact.filename] = index
            result.artifacts.append(artifact)
        return result

    def write(self, artifacts: Sequence[Artifact], out_dir: str = '.', mode: int = DEFAULT_FILE_MODE) -> List[str]:
        written: List[str] = []
        for artifact in artifacts:
            path = os.path.join(out_dir, artifact.filename)
            try:
                if out_dir:
                    os.makedirs(out_dir, exist_ok=True)
                with open(path, 'wb') as f:
                    f.write(artifact.content)
                os.chmod(path, mode)
            except OSError as e:
                log.error('failed writing artifact', filename=artifact.filename, error=str(e))
                raise WriteError(f'kubegen/export: error writing to file {artifact.filename!r}: {e}',
                                 filename=artifact.filename) from e
            log.info('wrote artifact', filename=artifact.filename, kind=artifact.kind, size=len(artifact.content))
            written.append(artifact.filename)
        return written

    def dump_to_files(self, items: Sequence[Any], content_type: str, out_dir: str = '.',
                      mode: int = DEFAULT_FILE_MODE, strict: bool = False) -> List[str]:
        result = self.partition(items, content_type, strict=strict)
        return self.write(result.artifacts, out_dir, mode)
