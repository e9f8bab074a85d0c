"""
Rewrite legacy workflow statuses to the five standard values.

Scans ``items`` and ``work_packages`` for rows whose status is one of the
known legacy values and updates each row, one at a time. Statuses that
are neither standard nor legacy are left untouched.

Usage::

    pmdesk-migrate-statuses
    python -m pmdesk.maintenance.migrate_statuses
"""

import logging
import sys
from dataclasses import dataclass, field

from pmdesk.maintenance.runner import run_script
from pmdesk.models import LEGACY_STATUS_MAP
from pmdesk.storage import BackendClient, BackendError, ProjectStore, eq, in_
from pmdesk.storage.repository import ITEMS, WORK_PACKAGES

logger = logging.getLogger(__name__)

MIGRATED_TABLES: tuple[str, ...] = (ITEMS, WORK_PACKAGES)


@dataclass
class MigrationReport:
    """Per-table counts of rewritten rows."""
    updated: dict[str, int] = field(default_factory=dict)
    failed: dict[str, int] = field(default_factory=dict)

    @property
    def total_updated(self) -> int:
        return sum(self.updated.values())


class StatusMigrator:
    def __init__(self, client: BackendClient):
        self.client = client

    async def migrate_table(self, table: str, report: MigrationReport) -> None:
        report.updated.setdefault(table, 0)
        report.failed.setdefault(table, 0)

        try:
            rows = await self.client.select(
                table,
                columns="id,title,status",
                filters=[in_("status", LEGACY_STATUS_MAP)],
            )
        except BackendError as exc:
            logger.error("Could not read %s: %s", table, exc)
            return

        logger.info("%s: %d row(s) with legacy status", table, len(rows))
        for row in rows:
            old = row["status"]
            new = LEGACY_STATUS_MAP[old].value
            try:
                await self.client.update(
                    table, {"status": new}, [eq("id", row["id"]), eq("status", old)]
                )
            except BackendError as exc:
                logger.error("Failed to update %s %s: %s", table, row["id"], exc)
                report.failed[table] += 1
                continue
            logger.info('%s "%s": %s -> %s', table, row.get("title", row["id"]), old, new)
            report.updated[table] += 1

    async def migrate(self) -> MigrationReport:
        report = MigrationReport()
        for table in MIGRATED_TABLES:
            await self.migrate_table(table, report)
        logger.info("Status migration finished: %d row(s) updated", report.total_updated)
        return report


async def migrate_statuses(store: ProjectStore) -> MigrationReport:
    return await StatusMigrator(store.client).migrate()


def main() -> int:
    return run_script(migrate_statuses)


if __name__ == "__main__":
    sys.exit(main())
