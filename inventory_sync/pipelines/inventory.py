import logging
from typing import Optional

import requests

from inventory_sync import data_handler, settings, utils
from inventory_sync.aggregation import consolidate_records, summarize_branches
from inventory_sync.parsers import normalize_tab
from inventory_sync.pipeline import DataPipeline
from inventory_sync.schemas import InventoryRecord, RawTab
from inventory_sync.transport import SheetSourceConfig, select_transport

logger = logging.getLogger(__name__)


class InventoryPipeline(DataPipeline):
    """
    Sheet -> normalized InventoryRecords.

    Every run starts from scratch: the transport is chosen from the config,
    every tab is normalized with that transport's branch strategy, and the
    candidates of all tabs are consolidated together.
    """

    def __init__(
        self,
        config: SheetSourceConfig,
        session: Optional[requests.Session] = None,
        save_outputs: bool = True,
        test_mode: bool = False,
    ):
        super().__init__("inventory", test_mode=test_mode)
        self.config = config
        self.transport = select_transport(config, session)
        self.save_outputs = save_outputs
        self.status_summary: dict[str, int] = {}

    def extract(self) -> list[RawTab]:
        logger.info(f"--- Fetching sheet via {self.transport.mode.upper()} mode ---")
        return self.transport.fetch_tabs()

    def transform(self, tabs: list[RawTab]) -> list[InventoryRecord]:
        logger.info("\n--- Normalizing Tabs ---")
        candidates = []
        for tab in tabs:
            tab_records = normalize_tab(tab, self.transport.branch_strategy)
            if not tab_records:
                logger.info(f"  > Tab '{tab.name}': no product column or no quantities. Skipped.")
                continue
            logger.info(f"  > Tab '{tab.name}': {len(tab_records)} cells read.")
            candidates.extend(tab_records)

        records = consolidate_records(candidates)
        logger.info(f"✅ {len(records)} records after consolidation.")
        return records

    def load(self, validated_data: list[InventoryRecord]) -> None:
        branches = summarize_branches(validated_data)
        self.status_summary = {branch.branch_name: branch.total_items for branch in branches}

        if branches:
            logger.info("\n--- Branch Summary ---")
            for branch in branches:
                logger.info(
                    f"{branch.branch_name}: {branch.total_items} on hand "
                    f"(+{branch.total_stock_in} / -{branch.total_stock_out}) [{branch.status}]"
                )

        if self.save_outputs and validated_data:
            data_handler.save_outputs(validated_data, f"{settings.COMBINED_FILENAME_BASE}_report")
        elif not validated_data:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata={
                    "mode": self.transport.mode,
                    "syncedAt": utils.utc_timestamp(),
                    "branches": self.status_summary,
                },
                report_type=self.report_type,
                webhook_url=settings.WEBHOOK_URL,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")


def fetch_inventory_records(
    config: SheetSourceConfig, session: Optional[requests.Session] = None
) -> list[InventoryRecord]:
    """
    Extract + transform only: returns the full, consolidated record list or
    raises a SheetSyncError. Nothing is written or posted.
    """
    pipeline = InventoryPipeline(config, session=session, save_outputs=False, test_mode=True)
    return pipeline.transform(pipeline.extract())
