import sys

from pydantic import ValidationError

from inventory_sync.errors import SheetSyncError
from inventory_sync.logger import setup_logger
from inventory_sync.pipelines.inventory import InventoryPipeline
from inventory_sync.transport import SheetSourceConfig


def run_sync(test_mode: bool = False) -> int:
    """Main orchestration function: one full sync of the sheet."""
    logger = setup_logger("inventory_sync")

    try:
        config = SheetSourceConfig.from_settings()
    except ValidationError as e:
        logger.error("❌ Sheet configuration is invalid. Set SHEET_ID in your .env file.")
        logger.error(e)
        return 2

    try:
        records = InventoryPipeline(config, test_mode=test_mode).run()
    except SheetSyncError as e:
        logger.error(f"❌ Sync failed ({type(e).__name__}): {e.message}")
        return 1

    logger.info(f"--- Sync Finished: {len(records)} records ---")
    return 0


if __name__ == "__main__":
    sys.exit(run_sync(test_mode="--test" in sys.argv[1:]))
