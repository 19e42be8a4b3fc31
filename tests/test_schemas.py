import pytest
from pydantic import ValidationError

from inventory_sync.schemas import InventoryRecord, categorize_device


def test_aliases_and_field_names_both_populate():
    by_alias = InventoryRecord(**{"branchName": "Lagos", "deviceName": "AC180", "stockIn": 3})
    by_name = InventoryRecord(branch_name="Lagos", device_name="AC180", stock_in=3)
    assert by_alias == by_name
    assert by_alias.date == "Recent"


def test_dump_uses_consumer_keys():
    dumped = InventoryRecord(device_name="AC180", current_count=2).model_dump(by_alias=True)
    assert dumped == {
        "date": "Recent",
        "branchName": "Unknown",
        "deviceName": "AC180",
        "stockIn": 0,
        "stockOut": 0,
        "currentCount": 2,
        "remarks": None,
        "category": "Main Unit",
    }


@pytest.mark.parametrize("device", ["", "   ", "Total", "S/N", "sn"])
def test_device_name_must_be_a_real_device(device):
    with pytest.raises(ValidationError):
        InventoryRecord(device_name=device)


@pytest.mark.parametrize("field", ["stock_in", "stock_out", "current_count"])
def test_quantities_cannot_be_negative(field):
    with pytest.raises(ValidationError):
        InventoryRecord(device_name="AC180", **{field: -1})


def test_blank_remarks_become_none():
    assert InventoryRecord(device_name="AC180", remarks="  ").remarks is None


@pytest.mark.parametrize(
    "name, category",
    [
        ("AC180 Power Station", "Main Unit"),
        ("PV200 Solar Panel", "Main Unit"),
        ("Solar Charging Cable", "Accessory"),
        ("Carrying Case", "Accessory"),
        ("car charger", "Accessory"),
        ("Showcase Unit", "Main Unit"),
    ],
)
def test_categorize_device(name, category):
    assert categorize_device(name) == category
