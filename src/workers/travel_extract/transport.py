"""
Compression transport: gzip + base64 framing for extraction payloads.

Producer side (page scripts) encodes JSON or NDJSON text; the host side
decodes it back. NDJSON is joined with single "\n" separators and no
trailing separator; decoding tolerates stray blank lines and padding.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import logging
import zlib
from collections.abc import Iterable
from typing import Any

from core.exceptions import TransportDecodeError

logger = logging.getLogger(__name__)


def encode(payload: str) -> str:
    """gzip the UTF-8 text and return it as standard base64."""
    compressed = gzip.compress(payload.encode("utf-8"))
    return base64.b64encode(compressed).decode("ascii")


def decode(data: str) -> str:
    """Inverse of encode(). Raises TransportDecodeError on corrupt input."""
    try:
        compressed = base64.b64decode(data, validate=True)
        return gzip.decompress(compressed).decode("utf-8")
    except (binascii.Error, OSError, EOFError, zlib.error, UnicodeDecodeError) as exc:
        raise TransportDecodeError(f"Corrupt or truncated payload: {exc}") from exc


def to_ndjson(records: Iterable[Any]) -> str:
    return "\n".join(
        json.dumps(record, ensure_ascii=False, separators=(",", ":"))
        for record in records
    )


def from_ndjson(text: str) -> list[Any]:
    records = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise TransportDecodeError(f"Invalid NDJSON at line {lineno}: {exc.msg}") from exc
    return records


def encode_ndjson(records: Iterable[Any]) -> str:
    return encode(to_ndjson(records))


def decode_ndjson(data: str) -> list[Any]:
    return from_ndjson(decode(data))


def encode_json(value: Any) -> str:
    return encode(json.dumps(value, ensure_ascii=False, separators=(",", ":")))


def decode_json(data: str) -> Any:
    text = decode(data)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise TransportDecodeError(f"Invalid JSON payload: {exc.msg}") from exc
