"""Best-effort deletion of storybook assets."""

import logging
from typing import Iterable

from ..entities.results import CleanupReport
from ..interfaces.asset_storage import AssetStorage

logger = logging.getLogger(__name__)


async def delete_assets_best_effort(storage: AssetStorage, urls: Iterable[str]) -> CleanupReport:
    """Delete each asset, logging failures instead of raising them.

    Orphaned assets are an accepted cost; the caller's document mutation
    proceeds regardless of what this reports.
    """
    report = CleanupReport()
    for url in urls:
        if not url:
            continue
        report.attempted.append(url)
        try:
            await storage.delete(url)
        except Exception as e:
            logger.warning(f"Could not delete asset {url}: {e}")
            report.failed[url] = str(e) or e.__class__.__name__
    return report
