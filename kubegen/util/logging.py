from __future__ import annotations
import json, sys, time
from typing import Any, Dict

_LEVELS: Dict[str, int] = {'DEBUG': 0, 'INFO': 1, 'WARN': 2, 'ERROR': 3}
_ALIASES = {'WARNING': 'WARN', 'CRITICAL': 'ERROR'}
_FORMATS = ('json', 'text')

_LOG_LEVEL = 'INFO'
_LOG_FORMAT = 'text'


def _canonical_level(level: str) -> str:
    lvl = level.upper()
    return _ALIASES.get(lvl, lvl)


def configure_logging(level: str = 'INFO', format: str = 'text'):
    global _LOG_LEVEL, _LOG_FORMAT
    lvl = _canonical_level(level)
    fmt = format.lower()
    if lvl not in _LEVELS:
        raise ValueError(f'Unknown log level: {level}')
    if fmt not in _FORMATS:
        raise ValueError(f'Unknown log format: {format}')
    _LOG_LEVEL = lvl
    _LOG_FORMAT = fmt


def _should_log(level: str) -> bool:
    return _LEVELS.get(_canonical_level(level), 1) >= _LEVELS.get(_LOG_LEVEL, 1)


def log(level: str, message: str, **fields: Any):
    if not _should_log(level):
        return
    ts = time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime())
    lvl = _canonical_level(level)
    if _LOG_FORMAT == 'json':
        rec = {'ts': ts, 'level': lvl, 'msg': message}
        if fields: rec.update(fields)
        print(json.dumps(rec, sort_keys=True, default=str), file=sys.stderr)
    else:
        extra = ' '.join(f'{k}={v}' for k, v in fields.items()) if fields else ''
        line = f"{ts} [{lvl}] {message}" + (f" {extra}" if extra else '')
        print(line, file=sys.stderr)


def debug(message: str, **fields: Any): log('debug', message, **fields)

def info(message: str, **fields: Any): log('info', message, **fields)

def warn(message: str, **fields: Any): log('warn', message, **fields)

def error(message: str, **fields: Any): log('error', message, **fields)
