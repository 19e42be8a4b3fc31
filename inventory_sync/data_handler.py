import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests

from . import settings, utils
from .schemas import InventoryRecord

logger = logging.getLogger(__name__)


def save_outputs(
    validated_data: list[InventoryRecord],
    report_name: str,
    output_dir: Optional[Path] = None,
    save_json: bool = settings.SAVE_JSON_OUTPUT,
) -> list[Path]:
    """Saves the records to CSV and conditionally to JSON, with dated filenames."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{report_name}_{date_suffix}.csv"
    json_path = output_dir / f"{report_name}_{date_suffix}.json"

    rows = [item.model_dump(by_alias=True) for item in validated_data]
    csv_columns = [info.alias or name for name, info in InventoryRecord.model_fields.items()]
    df = pd.DataFrame(rows, columns=csv_columns + ["category"])
    df.to_csv(csv_path, index=False)
    logger.info(f"✅ Normalized report saved to: {csv_path}")
    written = [csv_path]

    if save_json:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, default=str)
        logger.info(f"✅ JSON output saved to: {json_path}")
        written.append(json_path)
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return written


def post_to_webhook(
    validated_data: list[InventoryRecord],
    metadata: dict[str, Any],
    report_type: str,
    webhook_url: Optional[str] = settings.WEBHOOK_URL,
) -> bool:
    """
    Posts the records and a metadata block to the webhook.
    Delivery failures are logged and reported through the return value.
    """
    if not webhook_url:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {len(validated_data)} {report_type} records to webhook.")

    payload = {
        "reportType": report_type,
        "reportData": [item.model_dump(mode="json", by_alias=True) for item in validated_data],
        "metadata": metadata,
    }

    try:
        response = requests.post(webhook_url, json=payload, timeout=15)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False

    logger.info("✅ Records and summary successfully posted to webhook.")
    return True
