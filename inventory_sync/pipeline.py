import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for data pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode

    def run(self) -> list[Any]:
        """
        Orchestrates the pipeline execution and returns the transformed records.
        Extraction errors are not caught here; a failed sync never looks like an empty one.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} SYNC")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            records = []
        else:
            # --- 2. TRANSFORM ---
            records = self.transform(raw_data)

        # --- 3. LOAD ---
        self.load(records)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return records

    @abstractmethod
    def extract(self) -> list[Any]:
        """Fetches the raw source data."""
        pass

    @abstractmethod
    def transform(self, raw_data: list[Any]) -> list[Any]:
        """Normalizes raw data into validated pydantic models."""
        pass

    @abstractmethod
    def load(self, validated_data: list[Any]) -> None:
        """Hands the validated models to their consumers."""
        pass
