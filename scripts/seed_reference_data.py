"""Seed report-6406 reference data: branches and data sources.

Usage:
    PYTHONPATH=src python scripts/seed_reference_data.py

Idempotent: safe to run multiple times. Existing branches (by code) and sources are kept.
"""

import asyncio
import logging
import sys

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logger = logging.getLogger("seed_reference_data")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

BRANCHES = [
    ("0001", "Head Office"),
    ("0101", "Branch North"),
    ("0102", "Branch, East"),
    ("0103", "Branch South"),
    ("0104", "Branch West"),
]

SOURCES = [
    ("ABS", "Automated Banking System", "RIS-ABS"),
    ("CARD", "Card Processing", "RIS-CARD"),
    ("TREASURY", "Treasury Ledger", None),
]


async def main() -> None:
    from reportdesk.config import settings
    from reportdesk.db.session import build_engine, build_session_factory

    logger.info("Database: %s:%s/%s", settings.db_host, settings.db_port, settings.db_name)

    engine = build_engine(settings.database_url, echo=False)
    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        try:
            await seed(session)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Seeding failed")
            sys.exit(1)

    await engine.dispose()


async def seed(session) -> None:
    from reportdesk.db.repos.reference_repo import ReferenceRepo

    repo = ReferenceRepo(session)
    for code, name in BRANCHES:
        branch = await repo.get_or_create_branch(code, name)
        logger.info("Branch %-6s %-20s id=%s", branch.code, branch.name, branch.id)
    for code, name, ris in SOURCES:
        source = await repo.get_or_create_source(code, name, ris)
        logger.info("Source %-9s %s", source.code, source.name)

    logger.info("Done. %d branches, %d sources ensured.", len(BRANCHES), len(SOURCES))


if __name__ == "__main__":
    asyncio.run(main())
