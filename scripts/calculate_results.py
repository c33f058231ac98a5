#!/usr/bin/env python3
"""
Score every answer sheet that has no result yet.
Usage:
    python scripts/calculate_results.py          # skip existing results
    python scripts/calculate_results.py --force  # recalculate everything
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.database import AsyncSessionLocal, engine
from app.services.result_service import calculate_all_results


async def run(force: bool) -> int:
    async with AsyncSessionLocal() as db:
        results = await calculate_all_results(db, force=force)
    for r in results:
        print(f"✓ {r.uli} {r.test_code}: {r.score}/{r.total_questions}")
    print(f"Generated {len(results)} result(s)")
    return len(results)


async def _main(force: bool):
    try:
        await run(force)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--force", action="store_true", help="recalculate results that already exist")
    args = parser.parse_args()
    asyncio.run(_main(args.force))


if __name__ == "__main__":
    main()
