"""Client-side helpers: server endpoints and PEM private keys."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

_BLOCK_RE = re.compile(
    r"-----BEGIN ([^\r\n]*?)-----[ \t]*\r?\n(.*?)-----END \1-----",
    re.DOTALL,
)


@dataclass
class PemBlock:
    """A decoded PEM block: its type, optional headers and raw bytes."""

    type: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: bytes = b""


def _parse_block(block_type: str, inner: str) -> PemBlock:
    lines = inner.splitlines()
    headers: Dict[str, str] = {}
    if lines and ":" in lines[0]:
        while lines:
            line = lines.pop(0)
            if not line.strip():
                break
            key, sep, value = line.partition(":")
            if not sep:
                raise ValueError("invalid PEM header")
            headers[key.strip()] = value.strip()
    payload = "".join(line.strip() for line in lines)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("invalid PEM body") from exc
    return PemBlock(type=block_type, headers=headers, data=data)


def _blocks(text: str) -> Iterator[PemBlock]:
    for match in _BLOCK_RE.finditer(text):
        try:
            yield _parse_block(match.group(1), match.group(2))
        except ValueError:
            continue


def decode_private_key(pem_data: Union[bytes, str]) -> PemBlock:
    """Return the first PEM private key block in pem_data.

    Any block whose type is 'PRIVATE KEY' or ends with ' PRIVATE KEY'
    counts. Raises ValueError if there is none.
    """
    if isinstance(pem_data, (bytes, bytearray)):
        pem_data = bytes(pem_data).decode("utf-8", "replace")
    for block in _blocks(pem_data):
        if block.type == "PRIVATE KEY" or block.type.endswith(" PRIVATE KEY"):
            return block
    raise ValueError("no PEM-encoded private key found")


def normalize_endpoints(endpoint: str, default: str = "") -> List[str]:
    """Split a comma-separated list of servers into HTTPS endpoints.

    An empty endpoint falls back to default. Each entry is trimmed,
    an 'http://' prefix is dropped and 'https://' is added if missing.
    """
    source = endpoint if endpoint else default
    endpoints = []
    for entry in source.split(","):
        entry = entry.strip()
        if entry.startswith("http://"):
            entry = entry[len("http://"):]
        if not entry.startswith("https://"):
            entry = "https://" + entry
        endpoints.append(entry)
    return endpoints