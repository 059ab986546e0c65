"""Tests for the gzip + base64 transport."""

import base64

import pytest

from core.exceptions import TransportDecodeError
from workers.travel_extract import transport


def test_text_round_trip_keeps_unicode():
    payload = '{"name":"Hôtel Zürich ☀","price":"€120"}'
    assert transport.decode(transport.encode(payload)) == payload


def test_ndjson_round_trip():
    rows = [{"name": "Hotel A", "price_text": "$120"}, {"name": "Hotel B"}]
    assert transport.decode_ndjson(transport.encode_ndjson(rows)) == rows


def test_ndjson_has_no_trailing_separator():
    text = transport.to_ndjson([{"a": 1}, {"b": 2}])
    assert text == '{"a":1}\n{"b":2}'


def test_ndjson_tolerates_blank_lines():
    text = '\n{"a":1}\n\n  {"b":2}  \n\n'
    assert transport.from_ndjson(text) == [{"a": 1}, {"b": 2}]


def test_empty_ndjson():
    assert transport.decode_ndjson(transport.encode_ndjson([])) == []


def test_json_round_trip():
    facts = [{"kind": "flight", "confidence": 0.95}]
    assert transport.decode_json(transport.encode_json(facts)) == facts


def test_invalid_base64_raises():
    with pytest.raises(TransportDecodeError):
        transport.decode("not base64 at all!!")


def test_base64_that_is_not_gzip_raises():
    with pytest.raises(TransportDecodeError):
        transport.decode(base64.b64encode(b"plain text").decode())


def test_truncated_payload_raises():
    encoded = transport.encode_ndjson([{"name": f"Hotel {i}"} for i in range(200)])
    with pytest.raises(TransportDecodeError):
        transport.decode(encoded[: len(encoded) // 2])


def test_bad_ndjson_line_reports_line_number():
    with pytest.raises(TransportDecodeError, match="line 2"):
        transport.from_ndjson('{"a":1}\n{broken')


def test_bad_json_payload_raises():
    with pytest.raises(TransportDecodeError):
        transport.decode_json(transport.encode("{not json"))
