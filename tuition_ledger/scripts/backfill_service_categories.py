"""
Populate service_types.category from the legacy designation heuristic.

Only rows still marked OTHER are reclassified, so it is safe to run again after
manual corrections to TUITION rows. Review the printed list before committing.
Usage: python -m tuition_ledger.scripts.backfill_service_categories [--dry-run]
"""

import argparse
import asyncio
from typing import List, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.enums import ServiceCategory
from tuition_ledger.core.models import ServiceType
from tuition_ledger.db.session import AsyncSessionLocal
from tuition_ledger.ledger.service_categories import classify_service_type


async def find_tuition_candidates(session: AsyncSession) -> List[Tuple[int, str]]:
    """Return (id, designation) of OTHER service types the heuristic would call tuition."""
    rows = (
        await session.execute(
            select(ServiceType.id, ServiceType.designation).where(
                ServiceType.category == ServiceCategory.OTHER.value
            )
        )
    ).all()
    return [(r[0], r[1]) for r in rows if classify_service_type(r[1]) is ServiceCategory.TUITION]


async def backfill_service_categories(session: AsyncSession, dry_run: bool = False) -> int:
    candidates = await find_tuition_candidates(session)
    if not candidates:
        print("No service types to reclassify.")
        return 0

    print(f"Found {len(candidates)} service type(s) matching the tuition heuristic:")
    for service_id, designation in candidates:
        print(f"  #{service_id} {designation}")
    if dry_run:
        print("Dry run: nothing written.")
        await session.rollback()
        return 0

    await session.execute(
        update(ServiceType)
        .where(ServiceType.id.in_([c[0] for c in candidates]))
        .values(category=ServiceCategory.TUITION.value)
    )
    await session.commit()
    print(f"Done. Marked {len(candidates)} service type(s) as TUITION.")
    return len(candidates)


async def run(dry_run: bool) -> None:
    async with AsyncSessionLocal() as session:
        await backfill_service_categories(session, dry_run=dry_run)


def main() -> None:
    parser = argparse.ArgumentParser(description="Classify legacy service types as TUITION or OTHER")
    parser.add_argument("--dry-run", action="store_true", help="List matches without writing")
    args = parser.parse_args()
    asyncio.run(run(dry_run=args.dry_run))


if __name__ == "__main__":
    main()
