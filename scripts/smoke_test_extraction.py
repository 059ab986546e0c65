"""Smoke test: load a live page and run both extraction scripts against it.

Usage:
    python scripts/smoke_test_extraction.py https://example.com/hotels/search [--static] [--hint "hotel"]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import settings
from core.exceptions import PageLoadError
from workers.travel_extract.decoder import best_fact_per_kind
from workers.travel_extract.injector import PageInjector, inject_generic_facts, inject_smart_results
from workers.travel_extract.page_loader import load_page


async def main(url: str, render: bool, hint: str) -> int:
    print(f"🚀 Loading {url} ({'browser' if render else 'static'})")
    try:
        page = await load_page(url, render=render)
    except PageLoadError as exc:
        print(f"  ❌ {exc.message}")
        return 1

    injector = PageInjector(page)

    print("\n🏨 Hotel results...")
    hotels = await inject_smart_results(injector, {"url": url})
    raw = hotels.raw
    if raw["ok"]:
        print(f"  ✅ {raw['count']} rows via {raw['route']} (pageType={raw.get('pageType')})")
        print(f"  📦 {len(hotels.dtos)} mapped, {hotels.dropped} dropped")
        for dto in hotels.dtos[:5]:
            print(f"     - {dto.name} | {dto.price_text or '-'}")
    else:
        print(f"  ⚠️  {raw.get('error')}")
        print(f"     notes: {raw.get('meta', {}).get('notes')}")

    print("\n🧭 Travel facts...")
    facts = await inject_generic_facts(injector, {"url": url, "hint": hint})
    print(f"  ✅ {len(facts.facts)} facts via {facts.raw.get('meta', {}).get('route')}")
    for kind, fact in best_fact_per_kind(facts.facts).items():
        print(f"     [{kind}] {fact.confidence:.2f} {json.dumps(fact.to_wire(), ensure_ascii=False)[:160]}")

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url")
    parser.add_argument("--static", action="store_true", help="fetch without a browser")
    parser.add_argument("--hint", default="")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    sys.exit(asyncio.run(main(args.url, render=not args.static, hint=args.hint)))
