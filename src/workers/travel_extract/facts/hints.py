"""Kind hints: which fact kind the caller is after."""

from __future__ import annotations

import re
from collections.abc import Iterable

from workers.travel_extract.models import FactKind

_HINT_VOCABULARY: tuple[tuple[FactKind, re.Pattern[str]], ...] = (
    (FactKind.FLIGHT, re.compile(r"\b(?:flight|pnr|record locator|airline|segment)", re.IGNORECASE)),
    (FactKind.HOTEL, re.compile(r"\b(?:hotel|check[- ]?in|check[- ]?out|lodging|resort)", re.IGNORECASE)),
    (FactKind.RESERVATION, re.compile(r"\b(?:confirm|reservation|booking)", re.IGNORECASE)),
    (FactKind.EVENT, re.compile(r"\b(?:event|tour|ticket|museum|market|festival)", re.IGNORECASE)),
    (FactKind.PLACE, re.compile(r"\b(?:address|location|place|poi|market)", re.IGNORECASE)),
)

# Target kinds under which a structured-data fact of each kind is kept
KIND_COMPATIBILITY: dict[FactKind, frozenset[FactKind]] = {
    FactKind.FLIGHT: frozenset({FactKind.FLIGHT, FactKind.RESERVATION, FactKind.GENERIC}),
    FactKind.HOTEL: frozenset({FactKind.HOTEL, FactKind.RESERVATION, FactKind.GENERIC}),
    FactKind.RESERVATION: frozenset({FactKind.RESERVATION, FactKind.GENERIC}),
    FactKind.EVENT: frozenset({FactKind.EVENT, FactKind.GENERIC}),
    FactKind.PLACE: frozenset({FactKind.PLACE, FactKind.GENERIC, FactKind.EVENT}),
}


def valid_kinds(kinds: Iterable[str]) -> list[FactKind]:
    return [FactKind(k) for k in kinds if k in FactKind._value2member_map_]


def hint_mentions(kind: FactKind, hint: str) -> bool:
    for candidate, pattern in _HINT_VOCABULARY:
        if candidate is kind:
            return bool(pattern.search(hint))
    return False


def guess_target_kind(hint: str, prefer_kind: Iterable[str] = ()) -> FactKind:
    """First preferred kind, else the first kind whose vocabulary the hint uses."""
    preferred = valid_kinds(prefer_kind)
    if preferred:
        return preferred[0]
    for kind, pattern in _HINT_VOCABULARY:
        if pattern.search(hint):
            return kind
    return FactKind.GENERIC


def accepts(target: FactKind, kind: FactKind) -> bool:
    """Whether a structured-data fact of `kind` is kept when the caller targets `target`."""
    return target in KIND_COMPATIBILITY.get(kind, frozenset())
