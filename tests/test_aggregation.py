"""
Tests for record consolidation and the derived branch / daily views.
"""
import pytest

from inventory_sync.aggregation import (
    branch_metrics,
    consolidate_records,
    records_to_dataframe,
    summarize_branches,
    summarize_daily,
)
from inventory_sync.parsers import normalize_tab
from inventory_sync.schemas import InventoryRecord, RawTab


def record(device="AC180", branch="Lagos", date="1/5", **quantities):
    return InventoryRecord(date=date, branch_name=branch, device_name=device, **quantities)


@pytest.fixture
def mixed_records():
    return [
        record(stock_in=4),
        record(current_count=10),
        record(branch="Abuja", stock_out=2),
        record(device="Charger Cable", stock_in=1, current_count=3),
        record(stock_out=1, current_count=0, remarks="to Ikeja"),
        record(branch="Abuja", date="1/6", current_count=8),
        record(stock_in=2, current_count=12),
    ]


# =============================================================================
# CONSOLIDATION
# =============================================================================


def test_flows_are_summed_and_last_positive_balance_wins(mixed_records):
    merged = consolidate_records(mixed_records)
    lagos = next(r for r in merged if r.key == ("1/5", "Lagos", "AC180"))
    assert lagos.stock_in == 6
    assert lagos.stock_out == 1
    assert lagos.current_count == 12
    assert lagos.remarks == "to Ikeja"


def test_zero_balance_does_not_erase_earlier_balance():
    merged = consolidate_records([record(current_count=5), record(current_count=0)])
    assert len(merged) == 1
    assert merged[0].current_count == 5


def test_remarks_keep_last_non_empty_value():
    merged = consolidate_records(
        [record(remarks="Supplier A"), record(remarks="Supplier B"), record(remarks=None)]
    )
    assert merged[0].remarks == "Supplier B"


def test_keys_are_unique_and_in_first_seen_order(mixed_records):
    merged = consolidate_records(mixed_records)
    keys = [r.key for r in merged]
    assert len(keys) == len(set(keys))
    assert keys == [
        ("1/5", "Lagos", "AC180"),
        ("1/5", "Abuja", "AC180"),
        ("1/5", "Lagos", "Charger Cable"),
        ("1/6", "Abuja", "AC180"),
    ]


def test_consolidation_is_idempotent(mixed_records):
    once = consolidate_records(mixed_records)
    assert consolidate_records(once) == once


def test_quantities_stay_non_negative(lagos_rows):
    rows = lagos_rows + [["3", "Widget C", "-7", "-2"]]
    merged = consolidate_records(normalize_tab(RawTab("Lagos", rows)))
    for r in merged:
        assert min(r.stock_in, r.stock_out, r.current_count) >= 0


def test_empty_input():
    assert consolidate_records([]) == []


# =============================================================================
# DERIVED VIEWS
# =============================================================================


def test_records_to_dataframe_has_category_column(mixed_records):
    df = records_to_dataframe(mixed_records)
    assert len(df) == len(mixed_records)
    assert "category" in df.columns
    assert set(df["category"]) == {"Main Unit", "Accessory"}


def test_summarize_branches(mixed_records):
    merged = consolidate_records(mixed_records)
    branches = summarize_branches(merged, low_stock_threshold=10)

    assert [b.branch_name for b in branches] == ["Lagos", "Abuja"]
    lagos, abuja = branches
    assert lagos.total_items == 15
    assert lagos.total_stock_in == 7
    assert lagos.total_stock_out == 1
    assert lagos.items == {"AC180": 12, "Charger Cable": 3}
    assert lagos.status == "Healthy"
    assert abuja.total_items == 8
    assert abuja.total_stock_out == 2
    assert abuja.status == "Low Stock"


def test_summarize_daily_orders_periods():
    records = [
        record(date="Recent", current_count=1),
        record(date="1/12", stock_in=3),
        record(date="1/5", stock_out=2),
        record(date="Jan/7", current_count=4),
        record(date="1/12", branch="Abuja", stock_in=1),
    ]
    daily = summarize_daily(records)
    assert [d.date for d in daily] == ["1/5", "Jan/7", "1/12", "Recent"]
    twelfth = daily[2]
    assert (twelfth.stock_in, twelfth.stock_out, twelfth.count) == (4, 0, 0)


def test_branch_metrics_sorted_by_inbound():
    records = [
        record(branch="Lagos", stock_in=2, current_count=5),
        record(branch="Abuja", stock_in=9, stock_out=1),
        record(branch="Kano", stock_in=2),
    ]
    metrics = branch_metrics(records)
    assert [(m.branch_name, m.stock_in) for m in metrics] == [("Abuja", 9), ("Lagos", 2), ("Kano", 2)]
    assert metrics[1].stock_remaining == 5


def test_views_of_empty_record_list():
    assert summarize_branches([]) == []
    assert summarize_daily([]) == []
    assert branch_metrics([]) == []
