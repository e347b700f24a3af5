"""Check that every correlative counter matches its issued records.

Usage: python scripts/verify_correlatives.py [--year 2025] [--tipo 3]
Exits with status 1 when any counter disagrees with its records.
"""

import sys, pathlib, asyncio, argparse
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from correlativos.core.db import SessionLocal, engine
from correlativos.services.issuance_log import verify_counter_integrity


async def main(year, activity_type_id) -> int:
    async with SessionLocal() as s:
        problems = await verify_counter_integrity(s, activity_type_id=activity_type_id, year=year)
    await engine.dispose()
    for p in problems:
        print(
            f"tipo={p.activity_type_id} año={p.year}: last_number={p.last_number} "
            f"records={p.record_count} distinct={p.distinct_numbers} max={p.max_number}"
        )
    print("counters-ok" if not problems else f"counters-broken: {len(problems)}")
    return 1 if problems else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--year", type=int)
    parser.add_argument("--tipo", type=int, dest="activity_type_id")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.year, args.activity_type_id)))
