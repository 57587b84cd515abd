# vidtube/core/bootstrap.py
"""
Bootstrap module for application initialization.
Runs the startup reconciliation tasks once the database is ready:
  - rebuild subscription counters from the Subscription table
  - retry asset-store deletions that failed earlier
"""
import logging

from vidtube.services.asset_store import AssetStore, get_asset_store, retry_pending_deletions
from vidtube.services.toggles import reconcile_subscription_counters

logger = logging.getLogger("uvicorn.error")


async def run_startup_reconciliation(store: AssetStore | None = None) -> dict:
    """
    Bring stored counters and the asset store back in line with the database.

    Neither task aborts startup: failures are logged and the app keeps
    serving requests.

    Returns:
        dict with countersFixed and assetsDeleted (None when the task failed)
    """
    result = {"countersFixed": None, "assetsDeleted": None}
    try:
        result["countersFixed"] = await reconcile_subscription_counters()
    except Exception:
        logger.exception("[bootstrap] subscription counter reconciliation failed")

    store = store or get_asset_store()
    if store.is_available():
        try:
            result["assetsDeleted"] = await retry_pending_deletions(store)
        except Exception:
            logger.exception("[bootstrap] pending asset deletion retry failed")
    else:
        logger.warning("[bootstrap] asset store not configured -> skip pending deletion retry")
    return result
