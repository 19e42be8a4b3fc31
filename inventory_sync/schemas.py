import re
from typing import NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from . import settings

_ACCESSORY_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(word) for word in settings.ACCESSORY_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def categorize_device(device_name: str) -> str:
    """Classifies a device label as a 'Main Unit' or an 'Accessory' from its name."""
    if _ACCESSORY_PATTERN.search(device_name):
        return "Accessory"
    return "Main Unit"


class RawTab(NamedTuple):
    """One tab as fetched: its title and the rectangular matrix of string cells."""

    name: str
    rows: list[list[str]]


class InventoryRecord(BaseModel):
    """
    Defines the data contract for a single normalized stock movement:
    one device, at one branch, for one period.
    Aliases match the camelCase keys the dashboards consume.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(default=settings.RECENT_DATE_LABEL, alias="date")
    branch_name: str = Field(default=settings.UNKNOWN_BRANCH_LABEL, alias="branchName")
    device_name: str = Field(..., alias="deviceName")
    stock_in: int = Field(default=0, ge=0, alias="stockIn")
    stock_out: int = Field(default=0, ge=0, alias="stockOut")
    current_count: int = Field(default=0, ge=0, alias="currentCount")
    remarks: Optional[str] = Field(default=None, alias="remarks")

    @field_validator("device_name")
    @classmethod
    def _check_device_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("deviceName must not be empty")
        if value.lower() in settings.AGGREGATE_TOKENS:
            raise ValueError(f"'{value}' is a total/header label, not a device")
        return value

    @field_validator("remarks")
    @classmethod
    def _blank_remarks_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @computed_field
    @property
    def category(self) -> str:
        return categorize_device(self.device_name)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.date, self.branch_name, self.device_name)


class BranchInventory(BaseModel):
    """Per-branch rollup of a record list. Rebuilt on demand, never stored."""

    model_config = ConfigDict(populate_by_name=True)

    branch_name: str = Field(..., alias="branchName")
    total_items: int = Field(default=0, ge=0, alias="totalItems")
    total_stock_in: int = Field(default=0, ge=0, alias="totalStockIn")
    total_stock_out: int = Field(default=0, ge=0, alias="totalStockOut")
    items: dict[str, int] = Field(default_factory=dict, alias="items")
    status: str = Field(default="Low Stock", alias="status")


class DailyStats(BaseModel):
    """Per-date totals used for trend charts."""

    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(..., alias="date")
    stock_in: int = Field(default=0, ge=0, alias="stockIn")
    stock_out: int = Field(default=0, ge=0, alias="stockOut")
    count: int = Field(default=0, ge=0, alias="count")


class BranchMetrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    branch_name: str = Field(..., alias="branchName")
    stock_in: int = Field(default=0, ge=0, alias="stockIn")
    stock_out: int = Field(default=0, ge=0, alias="stockOut")
    stock_remaining: int = Field(default=0, ge=0, alias="stockRemaining")
