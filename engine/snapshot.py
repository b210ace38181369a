"""engine.snapshot

Plain-data form of a GameState for an external persistence layer.

Encoding walks the dataclass tree; dates become ISO strings. Decoding is driven by the
dataclass type hints, so a round trip gives back an equal snapshot. Malformed input
decodes to None.
"""

from __future__ import annotations

import json
import sys
from dataclasses import fields, is_dataclass
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Union, get_args, get_origin, get_type_hints

from core.state import GameState

SNAPSHOT_VERSION = 1


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _encode(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def snapshot_to_dict(state: GameState) -> Dict[str, Any]:
    return _encode(state)


@lru_cache(maxsize=None)
def _hints(cls: type) -> Dict[str, Any]:
    # module namespace first: field names such as `date` must not shadow the type
    ns = vars(sys.modules[cls.__module__])
    return get_type_hints(cls, globalns=ns, localns=ns)


def _decode(tp: Any, raw: Any) -> Any:
    if tp is Any:
        return raw

    origin = get_origin(tp)
    if origin is Union:
        args = get_args(tp)
        if raw is None and type(None) in args:
            return None
        inner = [t for t in args if t is not type(None)]
        return _decode(inner[0], raw)
    if origin in (list, List):
        if not isinstance(raw, list):
            raise TypeError(f"expected list, got {type(raw).__name__}")
        (item,) = get_args(tp) or (Any,)
        return [_decode(item, x) for x in raw]
    if origin in (dict, Dict):
        if not isinstance(raw, Mapping):
            raise TypeError(f"expected mapping, got {type(raw).__name__}")
        _, val = get_args(tp) or (str, Any)
        return {str(k): _decode(val, v) for k, v in raw.items()}

    if isinstance(tp, type) and is_dataclass(tp):
        return _decode_dataclass(tp, raw)
    if tp is date:
        if not isinstance(raw, str):
            raise TypeError("date must be an ISO string")
        return date.fromisoformat(raw)
    if tp is bool:
        if not isinstance(raw, bool):
            raise TypeError("expected bool")
        return raw
    if tp in (int, float):
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise TypeError(f"expected number, got {type(raw).__name__}")
        if tp is int and float(raw) != int(raw):
            raise ValueError(f"expected integer, got {raw!r}")
        return tp(raw)
    if tp is str:
        if not isinstance(raw, str):
            raise TypeError("expected str")
        return raw
    return raw


def _decode_dataclass(cls: type, raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        raise TypeError(f"{cls.__name__}: expected mapping")
    hints = _hints(cls)
    unknown = set(raw) - {f.name for f in fields(cls)}
    if unknown:
        raise TypeError(f"{cls.__name__}: unknown fields {sorted(unknown)}")
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name in raw:
            kwargs[f.name] = _decode(hints[f.name], raw[f.name])
    # missing required fields raise TypeError from the constructor
    return cls(**kwargs)


def snapshot_from_dict(obj: Any) -> Optional[GameState]:
    try:
        return _decode_dataclass(GameState, obj)
    except (KeyError, TypeError, ValueError):
        return None


def dumps_snapshot(state: GameState) -> str:
    return json.dumps(
        {"version": SNAPSHOT_VERSION, "state": snapshot_to_dict(state)},
        ensure_ascii=False,
        sort_keys=True,
    )


def loads_snapshot(text: str) -> Optional[GameState]:
    try:
        obj = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(obj, dict) or obj.get("version") != SNAPSHOT_VERSION:
        return None
    return snapshot_from_dict(obj.get("state"))
