"""Request and response messages of the server API and their JSON form."""

from __future__ import annotations

import base64
import binascii
import enum
import json
import re
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, Union

T = TypeVar("T")

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class _Kind(enum.Enum):
    STR = "str"
    INT = "int"
    BOOL = "bool"
    BYTES = "bytes"
    TIME = "time"
    SET = "set"
    LIST = "list"


def _field(key: str, kind: Any, *, omitempty: bool = False, optional: bool = False) -> Any:
    """Declare a message field with its JSON key and encoding."""
    meta = {"json": key, "kind": kind, "omitempty": omitempty}
    if kind is _Kind.STR:
        return field(default="", metadata=meta)
    if kind is _Kind.INT:
        return field(default=0, metadata=meta)
    if kind is _Kind.BOOL:
        return field(default=False, metadata=meta)
    if kind is _Kind.BYTES:
        return field(default=None, metadata=meta)
    if kind is _Kind.TIME:
        return field(default=ZERO_TIME, metadata=meta)
    if kind is _Kind.SET:
        return field(default_factory=set, metadata=meta)
    if kind is _Kind.LIST:
        return field(default_factory=list, metadata=meta)
    if optional:
        return field(default=None, metadata=meta)
    return field(default_factory=kind, metadata=meta)


# Requests


@dataclass
class ImportKeyRequest:
    key: Optional[bytes] = _field("key", _Kind.BYTES)
    cipher: str = _field("cipher", _Kind.STR)


@dataclass
class EncryptKeyRequest:
    plaintext: Optional[bytes] = _field("plaintext", _Kind.BYTES)
    context: Optional[bytes] = _field("context", _Kind.BYTES)
    version: str = _field("version", _Kind.STR)


@dataclass
class GenerateKeyRequest:
    context: Optional[bytes] = _field("context", _Kind.BYTES)
    version: str = _field("version", _Kind.STR)


@dataclass
class DecryptKeyRequest:
    ciphertext: Optional[bytes] = _field("ciphertext", _Kind.BYTES)
    context: Optional[bytes] = _field("context", _Kind.BYTES)
    version: str = _field("version", _Kind.STR)


@dataclass
class HMACRequest:
    message: Optional[bytes] = _field("message", _Kind.BYTES)
    version: str = _field("version", _Kind.STR)


# Responses


@dataclass
class VersionResponse:
    version: str = _field("version", _Kind.STR)
    commit: str = _field("commit", _Kind.STR)


@dataclass
class StatusResponse:
    version: str = _field("version", _Kind.STR)
    os: str = _field("os", _Kind.STR)
    arch: str = _field("arch", _Kind.STR)
    uptime: int = _field("uptime", _Kind.INT)  # in seconds
    cpus: int = _field("num_cpu", _Kind.INT)
    usable_cpus: int = _field("num_cpu_used", _Kind.INT)
    heap_alloc: int = _field("mem_heap_used", _Kind.INT)
    stack_alloc: int = _field("mem_stack_used", _Kind.INT)
    keystore_latency: int = _field("keystore_latency", _Kind.INT, omitempty=True)  # in microseconds
    keystore_unreachable: bool = _field("keystore_unreachable", _Kind.BOOL, omitempty=True)


@dataclass
class DescribeRouteResponse:
    method: str = _field("method", _Kind.STR)
    path: str = _field("path", _Kind.STR)
    max_body: int = _field("max_body", _Kind.INT)
    timeout: int = _field("timeout", _Kind.INT)  # in seconds


@dataclass
class DescribeKeyResponse:
    name: str = _field("name", _Kind.STR)
    algorithm: str = _field("algorithm", _Kind.STR, omitempty=True)
    created_at: datetime = _field("created_at", _Kind.TIME, omitempty=True)
    created_by: str = _field("created_by", _Kind.STR, omitempty=True)


@dataclass
class ListKeysResponse:
    names: List[str] = _field("names", _Kind.LIST)
    continue_at: str = _field("continue_at", _Kind.STR, omitempty=True)


@dataclass
class EncryptKeyResponse:
    ciphertext: Optional[bytes] = _field("ciphertext", _Kind.BYTES)
    version: str = _field("version", _Kind.STR, omitempty=True)


@dataclass
class GenerateKeyResponse:
    plaintext: Optional[bytes] = _field("plaintext", _Kind.BYTES)
    ciphertext: Optional[bytes] = _field("ciphertext", _Kind.BYTES)
    version: str = _field("version", _Kind.STR, omitempty=True)


@dataclass
class DecryptKeyResponse:
    plaintext: Optional[bytes] = _field("plaintext", _Kind.BYTES)


@dataclass
class HMACResponse:
    hmac: Optional[bytes] = _field("hmac", _Kind.BYTES)
    version: str = _field("version", _Kind.STR, omitempty=True)


@dataclass
class ReadPolicyResponse:
    name: str = _field("name", _Kind.STR)
    allow: Set[str] = _field("allow", _Kind.SET, omitempty=True)
    deny: Set[str] = _field("deny", _Kind.SET, omitempty=True)
    created_at: datetime = _field("created_at", _Kind.TIME)
    created_by: str = _field("created_by", _Kind.STR)


@dataclass
class DescribePolicyResponse:
    name: str = _field("name", _Kind.STR)
    created_at: datetime = _field("created_at", _Kind.TIME)
    created_by: str = _field("created_by", _Kind.STR)


@dataclass
class ListPoliciesResponse:
    names: List[str] = _field("names", _Kind.LIST)
    continue_at: str = _field("continue_at", _Kind.STR)


@dataclass
class DescribeIdentityResponse:
    is_admin: bool = _field("admin", _Kind.BOOL, omitempty=True)
    policy: str = _field("policy", _Kind.STR, omitempty=True)
    created_at: datetime = _field("created_at", _Kind.TIME)
    created_by: str = _field("created_by", _Kind.STR, omitempty=True)


@dataclass
class ListIdentitiesResponse:
    identities: List[str] = _field("identities", _Kind.LIST)
    continue_at: str = _field("continue_at", _Kind.STR)


@dataclass
class SelfDescribeIdentityResponse:
    identity: str = _field("identity", _Kind.STR)
    is_admin: bool = _field("admin", _Kind.BOOL, omitempty=True)
    created_at: datetime = _field("created_at", _Kind.TIME)
    created_by: str = _field("created_by", _Kind.STR, omitempty=True)
    policy: Optional[ReadPolicyResponse] = _field(
        "policy", ReadPolicyResponse, omitempty=True, optional=True
    )


@dataclass
class AuditLogRequest:
    ip: str = _field("ip", _Kind.STR, omitempty=True)
    api_path: str = _field("path", _Kind.STR)
    identity: str = _field("identity", _Kind.STR, omitempty=True)


@dataclass
class AuditLogResponse:
    status_code: int = _field("code", _Kind.INT)
    time: int = _field("time", _Kind.INT)


@dataclass
class AuditLogEvent:
    time: datetime = _field("time", _Kind.TIME)
    request: AuditLogRequest = _field("request", AuditLogRequest)
    response: AuditLogResponse = _field("response", AuditLogResponse)


@dataclass
class ErrorLogEvent:
    message: str = _field("message", _Kind.STR)


# Time values


_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})\Z"
)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.match(text)
    if match is None:
        raise ValueError(f"invalid time '{text}'")
    year, month, day, hour, minute, second = (int(match.group(i)) for i in range(1, 7))
    micro = int((match.group(7) or "")[:6].ljust(6, "0"))
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        delta = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * delta)
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    except ValueError as exc:
        raise ValueError(f"invalid time '{text}'") from exc


# Encoding


def _is_empty(kind: Any, value: Any) -> bool:
    if kind is _Kind.TIME:
        return False
    if isinstance(kind, _Kind):
        return not value
    return value is None


def _encode_value(kind: Any, value: Any) -> Any:
    if value is None:
        return None
    if kind is _Kind.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if kind is _Kind.TIME:
        return _format_time(value)
    if kind is _Kind.SET:
        return {name: {} for name in sorted(value)}
    if kind is _Kind.LIST:
        return list(value)
    if isinstance(kind, _Kind):
        return value
    return _to_json(value)


def _to_json(message: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(message):
        kind = f.metadata["kind"]
        value = getattr(message, f.name)
        if f.metadata["omitempty"] and _is_empty(kind, value):
            continue
        out[f.metadata["json"]] = _encode_value(kind, value)
    return out


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_HTML_RE = re.compile("[<>&\u2028\u2029]")


def encode(message: Any) -> bytes:
    """Encode a message, or a list of messages, as compact JSON.

    Byte strings become base64, times RFC 3339 and sets of names
    objects with empty values. HTML-sensitive characters are escaped.
    """
    if isinstance(message, (list, tuple)):
        payload: Any = [_to_json(item) for item in message]
    elif is_dataclass(message) and not isinstance(message, type):
        payload = _to_json(message)
    else:
        raise TypeError(f"cannot encode {type(message).__name__}")
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    text = _HTML_RE.sub(lambda m: _HTML_ESCAPES[m.group(0)], text)
    return text.encode("utf-8", "replace")


# Decoding


def _default(f: Any) -> Any:
    if f.default is not MISSING:
        return f.default
    return f.default_factory()


def _decode_value(f: Any, value: Any) -> Any:
    kind = f.metadata["kind"]
    key = f.metadata["json"]
    if value is None:
        return _default(f)
    if kind is _Kind.STR:
        if isinstance(value, str):
            return value
    elif kind is _Kind.INT:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif kind is _Kind.BOOL:
        if isinstance(value, bool):
            return value
    elif kind is _Kind.BYTES:
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"field '{key}': invalid base64") from exc
    elif kind is _Kind.TIME:
        if isinstance(value, str):
            try:
                return _parse_time(value)
            except ValueError as exc:
                raise ValueError(f"field '{key}': {exc}") from exc
    elif kind is _Kind.SET:
        if isinstance(value, dict):
            return set(value)
    elif kind is _Kind.LIST:
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return list(value)
    elif isinstance(value, dict):
        return _from_json(kind, value)
    raise ValueError(f"field '{key}': unexpected value of type {type(value).__name__}")


def _from_json(cls: Type[T], obj: Any) -> T:
    if not isinstance(obj, dict):
        raise ValueError(f"cannot decode {type(obj).__name__} into {cls.__name__}")
    folded = {}
    for key, value in obj.items():
        folded.setdefault(key.lower(), value)
    kwargs = {}
    for f in fields(cls):
        key = f.metadata["json"]
        if key in obj:
            value = obj[key]
        elif key.lower() in folded:
            value = folded[key.lower()]
        else:
            continue
        kwargs[f.name] = _decode_value(f, value)
    return cls(**kwargs)


def decode(cls: Type[T], data: Union[bytes, bytearray, str]) -> T:
    """Decode JSON data into a message of type cls.

    Unknown fields are ignored and missing ones keep their defaults.
    Raises ValueError if the data is not valid for cls.
    """
    if not (isinstance(cls, type) and is_dataclass(cls)):
        raise TypeError(f"{cls!r} is not a message type")
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", "replace")
    try:
        obj = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    if obj is None:
        return cls()
    return _from_json(cls, obj)