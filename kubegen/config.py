from __future__ import annotations
import os
import yaml
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from .codec.serializers import YAML_MEDIA_TYPE
from .export.partition import DEFAULT_FILE_MODE
from .kube.scheme import DEFAULT_VERSION_PRIORITY

DEFAULT_CONFIG_FILE = 'kubegen.yaml'
LOG_FORMATS = ('json', 'text')


@dataclass
class OutputConfig:
    dir: str = 'manifests'
    content_type: str = YAML_MEDIA_TYPE
    pretty: bool = True
    file_mode: int = DEFAULT_FILE_MODE
    legacy_json_extension: bool = False


@dataclass
class LoggingConfig:
    level: str = 'INFO'
    format: str = 'text'


@dataclass
class AppConfig:
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    versions: Tuple[str, ...] = DEFAULT_VERSION_PRIORITY


def _parse_file_mode(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f'Invalid file_mode: {value!r}')
    if isinstance(value, int):
        mode = value
    else:
        try:
            mode = int(str(value), 8)
        except ValueError:
            raise ValueError(f'Invalid file_mode: {value!r} (expected an octal string such as "0644")') from None
    if not 0 <= mode <= 0o777:
        raise ValueError(f'Invalid file_mode: {value!r} (out of range)')
    return mode


def _parse_bool(value, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f'Invalid {key}: {value!r} (expected true or false)')
    return value


def load_config(path: Optional[str] = None) -> AppConfig:
    if path is None:
        return AppConfig()
    if not os.path.exists(path):
        raise FileNotFoundError(f'Config file not found: {path}')
    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f'Config file {path} must contain a mapping')
    output_raw = raw.get('output', {}) or {}
    content_type = output_raw.get('content_type', YAML_MEDIA_TYPE)
    if not content_type:
        raise ValueError('output.content_type must not be empty')
    output = OutputConfig(
        dir=output_raw.get('dir', 'manifests'),
        content_type=content_type,
        pretty=_parse_bool(output_raw.get('pretty', True), 'output.pretty'),
        file_mode=_parse_file_mode(output_raw.get('file_mode', DEFAULT_FILE_MODE)),
        legacy_json_extension=_parse_bool(output_raw.get('legacy_json_extension', False),
                                          'output.legacy_json_extension')
    )
    logging_raw = raw.get('logging', {}) or {}
    logging_cfg = LoggingConfig(
        level=logging_raw.get('level', 'INFO'),
        format=str(logging_raw.get('format', 'text')).lower()
    )
    if logging_cfg.format not in LOG_FORMATS:
        raise ValueError(f'Unknown logging format: {logging_cfg.format}')
    versions_raw = raw.get('versions')
    if versions_raw is None:
        versions: List[str] = list(DEFAULT_VERSION_PRIORITY)
    elif isinstance(versions_raw, list) and versions_raw:
        versions = [str(v) for v in versions_raw]
    else:
        raise ValueError('versions must be a non-empty list of group versions')
    return AppConfig(output=output, logging=logging_cfg, versions=tuple(versions))
