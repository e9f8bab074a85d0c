"""
Delete a fixed set of stray items by title.

Each title is matched case-insensitively as a substring of ``items.title``.
Every match has its ``item_artifacts`` rows removed first, then the item
row itself. Operations run one at a time; a failure is logged and the
script moves on to the next row. There is no rollback.

Usage::

    pmdesk-purge-items
    python -m pmdesk.maintenance.purge_items
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from pmdesk.maintenance.runner import run_script
from pmdesk.storage import BackendError, NotFoundError, ProjectStore

logger = logging.getLogger(__name__)

TARGET_TITLES: tuple[str, ...] = (
    "CR: 權利盤點作業的存取權限與外部法律團隊介入",
    "CR: 新增審議會議管理功能於後台典藏系統",
    "決議內容：前台網站視覺設計決議",
)


@dataclass
class PurgeReport:
    """Outcome of one purge run."""
    matched: list[dict[str, Any]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class ItemPurger:
    """Find items by title substring and delete them with their links."""

    def __init__(self, store: ProjectStore):
        self.store = store

    async def find_matches(self, titles: Iterable[str]) -> list[dict[str, Any]]:
        matches: list[dict[str, Any]] = []
        seen: set[str] = set()

        for title in titles:
            logger.info('Searching for "%s"...', title)
            try:
                rows = await self.store.find_items_by_title(title)
            except BackendError as exc:
                logger.error('Error searching for "%s": %s', title, exc)
                continue

            if not rows:
                logger.info('No match found for "%s"', title)
                continue

            logger.info('Found %d match(es) for "%s"', len(rows), title)
            for row in rows:
                if row["id"] in seen:
                    continue
                seen.add(row["id"])
                matches.append(row)
        return matches

    async def delete_match(self, row: dict[str, Any]) -> bool:
        item_id, title = row["id"], row.get("title", "")
        logger.info("Processing item: %s (%s)", title, item_id)

        try:
            await self.store.delete_item_artifact_links(item_id)
        except BackendError as exc:
            logger.warning("Artifact unlink warning for %s: %s", item_id, exc)

        try:
            await self.store.delete_item(item_id, unlink=False)
        except NotFoundError:
            # Row vanished, or row-level security hid it from the delete
            logger.warning("Item %s (%s) was not deleted", item_id, title)
            return False
        except BackendError as exc:
            logger.error("Failed to delete item %s (%s): %s", item_id, title, exc)
            return False

        logger.info("Deleted item: %s (%s)", title, item_id)
        return True

    async def purge(self, titles: Sequence[str] = TARGET_TITLES) -> PurgeReport:
        report = PurgeReport()
        report.matched = await self.find_matches(titles)

        if not report.matched:
            logger.info("No items found to delete.")
            return report

        logger.info("Found %d item(s) to delete.", len(report.matched))
        for row in report.matched:
            if await self.delete_match(row):
                report.deleted.append(row["id"])
            else:
                report.failed.append(row["id"])

        logger.info(
            "Purge finished: %d deleted, %d failed",
            len(report.deleted), len(report.failed),
        )
        return report


async def purge_items(store: ProjectStore) -> PurgeReport:
    return await ItemPurger(store).purge()


def main() -> int:
    return run_script(purge_items)


if __name__ == "__main__":
    sys.exit(main())
