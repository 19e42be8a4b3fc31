import logging
import re
from datetime import datetime
import pandas as pd

from . import settings
from .schemas import BranchInventory, BranchMetrics, DailyStats, InventoryRecord

logger = logging.getLogger(__name__)

RECORD_COLUMNS = list(InventoryRecord.model_fields.keys())


def consolidate_records(records: list[InventoryRecord]) -> list[InventoryRecord]:
    """
    Collapses records that share a (date, branch, device) key into one.

    - stock_in / stock_out are summed.
    - remarks keeps the last non-empty value seen.
    - current_count keeps the last positive balance; a later 0 never erases it.

    Groups come out in the order their key first appeared. Running this on
    its own output returns the same records.
    """
    merged: dict[tuple[str, str, str], InventoryRecord] = {}

    for record in records:
        existing = merged.get(record.key)
        if existing is None:
            merged[record.key] = record
            continue

        update = {
            "stock_in": existing.stock_in + record.stock_in,
            "stock_out": existing.stock_out + record.stock_out,
        }
        if record.remarks:
            update["remarks"] = record.remarks
        if record.current_count > 0:
            update["current_count"] = record.current_count
        merged[record.key] = existing.model_copy(update=update)

    if len(merged) < len(records):
        logger.debug(f"Consolidated {len(records)} candidates into {len(merged)} records.")
    return list(merged.values())


# --- Derived views ---


def records_to_dataframe(records: list[InventoryRecord]) -> pd.DataFrame:
    """Flattens records into a DataFrame with one column per field (plus category)."""
    rows = [record.model_dump() for record in records]
    return pd.DataFrame(rows, columns=RECORD_COLUMNS + ["category"])


def _date_sort_key(label: str) -> tuple[int, int, int]:
    """
    Orders period labels like "1/5", "Jan/5" or "1/5/2025" month-first.
    Labels that cannot be read (including "Recent") sort last.
    """
    match = re.fullmatch(r"(\w+)/(\d{1,2})(?:/(\d{2,4}))?", label.strip())
    if not match:
        return (9999, 99, 99)

    month_text, day, year = match.groups()
    if month_text.isdigit():
        month = int(month_text)
    else:
        try:
            month = datetime.strptime(month_text[:3].title(), "%b").month
        except ValueError:
            return (9999, 99, 99)

    year_value = int(year) if year else 0
    if year and len(year) == 2:
        year_value += 2000
    return (year_value, month, int(day))


def summarize_branches(
    records: list[InventoryRecord], low_stock_threshold: int = settings.LOW_STOCK_THRESHOLD
) -> list[BranchInventory]:
    """Per-branch totals and per-device balances, in order of first appearance."""
    df = records_to_dataframe(records)
    if df.empty:
        return []

    totals = df.groupby("branch_name", sort=False).agg(
        total_items=("current_count", "sum"),
        total_stock_in=("stock_in", "sum"),
        total_stock_out=("stock_out", "sum"),
    )
    device_counts = df.groupby(["branch_name", "device_name"], sort=False)["current_count"].sum()
    items_by_branch: dict[str, dict[str, int]] = {}
    for (branch_name, device_name), count in device_counts.items():
        items_by_branch.setdefault(branch_name, {})[str(device_name)] = int(count)

    summaries = []
    for branch_name, row in totals.iterrows():
        items = items_by_branch.get(branch_name, {})
        total_items = int(row["total_items"])
        summaries.append(
            BranchInventory(
                branch_name=str(branch_name),
                total_items=total_items,
                total_stock_in=int(row["total_stock_in"]),
                total_stock_out=int(row["total_stock_out"]),
                items=items,
                status="Healthy" if total_items > low_stock_threshold else "Low Stock",
            )
        )
    return summaries


def summarize_daily(records: list[InventoryRecord]) -> list[DailyStats]:
    """Per-date flow and balance totals, oldest period first."""
    df = records_to_dataframe(records)
    if df.empty:
        return []

    daily = df.groupby("date", sort=False).agg(
        stock_in=("stock_in", "sum"),
        stock_out=("stock_out", "sum"),
        count=("current_count", "sum"),
    )
    ordered_dates = sorted(daily.index, key=lambda label: _date_sort_key(str(label)))

    return [
        DailyStats(
            date=str(label),
            stock_in=int(daily.at[label, "stock_in"]),
            stock_out=int(daily.at[label, "stock_out"]),
            count=int(daily.at[label, "count"]),
        )
        for label in ordered_dates
    ]


def branch_metrics(records: list[InventoryRecord]) -> list[BranchMetrics]:
    """Per-branch flow totals and remaining stock, busiest inbound branch first."""
    df = records_to_dataframe(records)
    if df.empty:
        return []

    metrics = (
        df.groupby("branch_name", sort=False)
        .agg(
            stock_in=("stock_in", "sum"),
            stock_out=("stock_out", "sum"),
            stock_remaining=("current_count", "sum"),
        )
        .sort_values("stock_in", ascending=False, kind="stable")
    )

    return [
        BranchMetrics(
            branch_name=str(branch_name),
            stock_in=int(row["stock_in"]),
            stock_out=int(row["stock_out"]),
            stock_remaining=int(row["stock_remaining"]),
        )
        for branch_name, row in metrics.iterrows()
    ]
