"""
Host-side decoding of extraction envelopes.

Inflates the compressed payload, validates each record and maps hotel
rows to the outward-facing HotelDTO. Records that fail validation are
dropped and counted; they never fail the batch. A payload that cannot be
inflated at all raises TransportDecodeError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from core.exceptions import TransportDecodeError
from workers.travel_extract import transport
from workers.travel_extract.coerce import to_bool, to_number
from workers.travel_extract.models import ExtractionEnvelope, HotelDTO, HotelRow, travel_fact_adapter

logger = logging.getLogger(__name__)

EnvelopeLike = ExtractionEnvelope | Mapping[str, Any]


def _as_envelope(envelope: EnvelopeLike) -> ExtractionEnvelope:
    if isinstance(envelope, ExtractionEnvelope):
        return envelope
    try:
        return ExtractionEnvelope.model_validate(envelope)
    except ValidationError as exc:
        raise TransportDecodeError(f"Malformed envelope: {exc.error_count()} error(s)") from exc


def _sanitize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce typed optional fields; a value that cannot be read is dropped."""
    fields = dict(row)
    for key in ("lat", "lon"):
        if key in fields:
            fields[key] = to_number(fields[key])
    if "refundable" in fields:
        fields["refundable"] = to_bool(fields["refundable"])
    for key, value in list(fields.items()):
        if isinstance(value, (dict, list)):
            fields[key] = None
    return fields


def map_row_to_dto(row: Any) -> HotelDTO | None:
    """
    Map one decoded row to a HotelDTO, or None when it is not addressable.

    The id falls back to the detail URL, then to the name; a row without a
    name is dropped. Ratings and coordinates are coerced to numbers; a
    field that cannot be read is omitted and the row is kept.
    """
    if not isinstance(row, Mapping):
        return None
    try:
        parsed = HotelRow.model_validate(_sanitize_row(row))
    except ValidationError:
        return None

    name = parsed.name
    row_id = parsed.id or parsed.detail_url or name
    if not name or not row_id:
        return None

    fields = parsed.model_dump(exclude_none=True)
    fields["id"] = row_id
    for key in ("star_rating", "review_score"):
        if key in fields:
            fields[key] = to_number(fields[key]) if isinstance(fields[key], str) else fields[key]
            if fields[key] is None:
                del fields[key]
    try:
        return HotelDTO.model_validate(fields)
    except ValidationError:
        return None


def decode_raw_rows(envelope: EnvelopeLike) -> list[Any]:
    """Inflated NDJSON lines of a hotel results envelope, unmapped; [] for a failed or empty one."""
    env = _as_envelope(envelope)
    if not env.ok or not env.ndjson_gz_base64:
        return []
    return transport.decode_ndjson(env.ndjson_gz_base64)


def map_rows(rows: Iterable[Any]) -> tuple[list[HotelDTO], int]:
    """Map rows to DTOs, returning (dtos, dropped)."""
    dtos: list[HotelDTO] = []
    dropped = 0
    for row in rows:
        dto = map_row_to_dto(row)
        if dto is None:
            dropped += 1
        else:
            dtos.append(dto)
    if dropped:
        logger.warning("Dropped %d hotel rows that could not be mapped", dropped)
    return dtos, dropped


def decode_hotel_rows(envelope: EnvelopeLike) -> list[HotelDTO]:
    """HotelDTOs of a hotel results envelope; unaddressable rows are dropped."""
    dtos, _dropped = map_rows(decode_raw_rows(envelope))
    return dtos


def decode_travel_facts(envelope: EnvelopeLike) -> list:
    """Validated TravelFact models of a facts envelope; invalid entries are dropped."""
    env = _as_envelope(envelope)
    if not env.ok or not env.facts_gz_base64:
        return []
    payload = transport.decode_json(env.facts_gz_base64)
    if not isinstance(payload, list):
        raise TransportDecodeError("Facts payload is not a list")

    facts = []
    dropped = 0
    for item in payload:
        try:
            facts.append(travel_fact_adapter.validate_python(item))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.warning("Dropped %d travel facts that failed validation", dropped)
    return facts


def best_fact_per_kind(facts: Iterable[Any]) -> dict[str, Any]:
    """Highest-confidence fact of each kind; the first one wins a tie."""
    best: dict[str, Any] = {}
    for fact in facts:
        current = best.get(fact.kind)
        if current is None or fact.confidence > current.confidence:
            best[fact.kind] = fact
    return best
