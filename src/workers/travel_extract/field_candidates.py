"""
Field candidate tables.

Sites name the same thing in many ways (hotelId / propertyId / code,
price.display / lowestPrice.display / rate.display ...). Each canonical
field owns an ordered list of candidates; the first one that yields a
usable value wins. Supporting a new site shape means adding a candidate,
not another branch.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import urljoin

from workers.travel_extract.coerce import clean_text, scalar, to_bool, to_number

Path = tuple[Union[str, int], ...]
Candidate = Union[Path, Callable[[dict], Any]]

# Upper bound on nodes visited when searching a state tree by shape
_MAX_SHAPE_NODES = 5000


def dig(obj: Any, path: Path) -> Any:
    """Follow a key/index path through nested dicts and lists; None if absent."""
    current = obj
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


@dataclass(frozen=True)
class FieldRule:
    field: str
    candidates: tuple[Candidate, ...]
    coerce: Callable[[Any], Any] = clean_text

    def resolve(self, obj: dict) -> Any:
        for candidate in self.candidates:
            raw = candidate(obj) if callable(candidate) else dig(obj, candidate)
            value = self.coerce(raw)
            if value is not None and value != "":
                return value
        return None


def apply_rules(obj: dict, rules: tuple[FieldRule, ...]) -> dict[str, Any]:
    """Map an arbitrary object through a rule table, keeping only resolved fields."""
    out: dict[str, Any] = {}
    for rule in rules:
        value = rule.resolve(obj)
        if value is not None:
            out[rule.field] = value
    return out


# ── Hotel row candidates ──────────────────────────────────────────────

_ADDRESS_PARTS = ("full", "line1", "line2", "city", "region", "postalCode", "country")


def joined_address(obj: dict) -> str | None:
    """Join a structured address into one line, de-duplicating repeated parts."""
    address = obj.get("address")
    if not isinstance(address, dict):
        return None
    parts: list[str] = []
    for key in _ADDRESS_PARTS:
        part = clean_text(address.get(key))
        if part and part not in parts:
            parts.append(part)
    return ", ".join(parts) or None


def _slug_url(obj: dict) -> str | None:
    slug = clean_text(obj.get("slug"))
    return f"/hotels/{slug}" if slug else None


HOTEL_ROW_RULES: tuple[FieldRule, ...] = (
    FieldRule("id", (("id",), ("hotelId",), ("propertyId",), ("code",), ("slug",))),
    FieldRule("name", (("name",), ("propertyName",))),
    FieldRule("brand", (("brand", "name"), ("brand",), ("chain",), ("vendor",))),
    FieldRule("lat", (("geo", "lat"), ("latitude",)), coerce=to_number),
    FieldRule("lon", (("geo", "lng"), ("longitude",)), coerce=to_number),
    FieldRule("address", (joined_address, ("address",))),
    FieldRule("star_rating", (("starRating",), ("rating", "stars"), ("rating",)), coerce=scalar),
    FieldRule("review_score", (("review", "score"), ("reviewScore",)), coerce=scalar),
    FieldRule(
        "price_text",
        (
            ("price", "display"),
            ("price", "formatted"),
            ("lowestPrice", "display"),
            ("rate", "display"),
            ("price",),
        ),
    ),
    FieldRule("currency", (("price", "currency"), ("currency",))),
    FieldRule("taxes_fees_text", (("fees", "display"), ("taxesAndFees",), ("price", "taxesAndFees"))),
    FieldRule(
        "cancel_text",
        (("cancellationPolicy", "short"), ("cancellation", "summary"), ("refundability",)),
    ),
    FieldRule("refundable", (("cancellationPolicy", "refundable"), ("refundable",)), coerce=to_bool),
    FieldRule("package_type", (("packageType",), ("productType",))),
    FieldRule("image", (("images", 0, "url"), ("media", 0, "url"), ("images", 0), ("image",))),
    FieldRule("detail_url", (("url",), ("canonicalUrl",), _slug_url)),
)


def map_hotel_object(obj: Any, base_url: str | None = None) -> dict[str, Any]:
    """Map one hotel-like object from hydration state or an API body into a row."""
    if not isinstance(obj, dict):
        return {}
    row = apply_rules(obj, HOTEL_ROW_RULES)
    if base_url:
        for key in ("detail_url", "image"):
            if key in row:
                row[key] = urljoin(base_url, row[key])
    return row


# ── Shape detection ───────────────────────────────────────────────────

_NAME_RULE = HOTEL_ROW_RULES[1]


def looks_like_hotel(obj: Any) -> bool:
    return isinstance(obj, dict) and _NAME_RULE.resolve(obj) is not None


def is_hotel_array(value: Any) -> bool:
    """A non-empty list where most of the leading entries carry a name."""
    if not isinstance(value, list) or not value:
        return False
    head = value[:10]
    named = sum(1 for item in head if looks_like_hotel(item))
    return named * 2 >= len(head) and named > 0


def walk_containers(root: Any, max_depth: int) -> Iterator[Any]:
    """Breadth-first over nested containers, bounded in depth and node count."""
    queue: deque[tuple[Any, int]] = deque([(root, 0)])
    visited = 0
    while queue and visited < _MAX_SHAPE_NODES:
        node, depth = queue.popleft()
        visited += 1
        yield node
        if depth >= max_depth:
            continue
        if isinstance(node, dict):
            queue.extend((child, depth + 1) for child in node.values() if isinstance(child, (dict, list)))
        elif isinstance(node, list):
            queue.extend((child, depth + 1) for child in node[:50] if isinstance(child, (dict, list)))


def find_hotel_array(root: Any, max_depth: int = 6) -> list[dict] | None:
    """First list of hotel-shaped objects found anywhere under root."""
    for node in walk_containers(root, max_depth):
        if is_hotel_array(node):
            return node
    return None


def first_in_paths(obj: Any, paths: tuple[Path, ...]) -> list | None:
    """First hotel-shaped list found at one of the plausible paths."""
    for path in paths:
        items = dig(obj, path)
        if is_hotel_array(items):
            return items
    return None
