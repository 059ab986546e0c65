"""
Fast heuristics to identify the booking platform behind a results page.

Only string tests against the hostname, title, first heading, asset URLs
and the head of the raw markup: no DOM traversal beyond what the page
context already exposes. The result picks the strategy order used by the
hotel results script.
"""

from __future__ import annotations

import logging
import re

from core.config import settings
from workers.travel_extract.models import PlatformTag
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
# Known signatures per platform, tested in insertion order.
# Each entry is a tuple (source, regex)
# source: "host" | "assets" | "title" | "markup"
# ──────────────────────────────────────────────────────────────────────

_PLATFORM_SIGNATURES: dict[PlatformTag, list[tuple[str, str]]] = {
    PlatformTag.WAD: [
        ("host", r"worldagentdirect|delta"),
        ("title", r"wad|world agent"),
    ],
    PlatformTag.VAX: [
        ("host", r"vacationaccess|vax"),
        ("assets", r"bookingservices|algv|funjet|mlt"),
    ],
    PlatformTag.NAVITRIP_CP: [
        ("host", r"navitrip|cpmaxx|cruiseplanners"),
        ("markup", r"__viewstate|aspnetform"),
    ],
}


class PlatformDetector:
    """
    Classifies a captured page into a PlatformTag.

    Usage:
        platform = PlatformDetector.detect(page, hint=args.page_type_hint)
    """

    @staticmethod
    def detect(page: PageContext, hint: str | None = None) -> str:
        """
        A caller-supplied hint is authoritative and returned as-is (it may
        name a platform outside the known set). Otherwise the first
        platform with a matching signature wins, falling back to GENERIC.
        """
        if hint:
            return PlatformTag(hint) if hint in PlatformTag._value2member_map_ else hint

        sources = {
            "host": page.hostname,
            "assets": " ".join(page.asset_urls),
            "title": f"{page.page_title} {page.heading_text}".lower(),
            "markup": page.markup_head(settings.markup_peek_chars),
        }

        for platform, signatures in _PLATFORM_SIGNATURES.items():
            for source, pattern in signatures:
                if re.search(pattern, sources[source], re.IGNORECASE):
                    logger.debug("Platform %s matched on %s /%s/", platform, source, pattern)
                    return platform

        return PlatformTag.GENERIC
