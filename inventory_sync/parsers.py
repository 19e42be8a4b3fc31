"""
Turns raw sheet tabs into candidate InventoryRecords.

Sheets are edited by hand, so nothing about their layout is fixed: the header
row may sit under a banner, product and remarks columns move around, and each
quantity column announces its meaning (and usually its date) in the header text.
The functions here infer that layout and classify every header before the rows
are walked.
"""

import logging
import re
from enum import Enum
from typing import NamedTuple, Optional

from . import settings
from .schemas import InventoryRecord, RawTab

logger = logging.getLogger(__name__)


class ColumnRole(str, Enum):
    """What a quantity column holds. Values are the InventoryRecord field each role fills."""

    INBOUND = "stock_in"
    OUTBOUND = "stock_out"
    BALANCE = "current_count"
    IGNORED = "ignored"


class BranchStrategy(str, Enum):
    """
    Where a record's branch comes from.
    TAB_NAME: every record of a tab belongs to the branch named by the tab.
    HEADER_TEXT: the branch is written in the column header next to the date.
    """

    TAB_NAME = "tab_name"
    HEADER_TEXT = "header_text"


class HeaderClass(NamedTuple):
    role: ColumnRole
    date: str


class TabSchema(NamedTuple):
    header_row: int
    product_column: Optional[int]
    remarks_column: Optional[int]
    header: list[str]


def _keyword_pattern(keywords: list[str]) -> re.Pattern:
    # Multi-word keywords also match when hyphenated ("stock-in", "on-hand"), and a
    # plural ending is allowed ("Balances", "Suppliers"). Words never match mid-word.
    alternatives = [r"[\s-]+".join(map(re.escape, word.split())) for word in keywords]
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")(?:e?s)?\b", re.IGNORECASE)


DATE_TOKEN_PATTERN = re.compile(r"\b(?:\d{1,2}|[A-Za-z]{3,9})/\d{1,2}(?:/(?:\d{4}|\d{2}))?\b")
INBOUND_PATTERN = _keyword_pattern(settings.INBOUND_KEYWORDS)
OUTBOUND_PATTERN = _keyword_pattern(settings.OUTBOUND_KEYWORDS)
BALANCE_PATTERN = _keyword_pattern(settings.BALANCE_KEYWORDS)
# A lone "+" or "-" (optionally in brackets) marks a flow column, e.g. "Lagos (+)".
PLUS_PATTERN = re.compile(r"(?:^|[\s(])\+(?:$|[\s)])")
MINUS_PATTERN = re.compile(r"(?:^|[\s(])-(?:$|[\s)])")

PRODUCT_COLUMN_PATTERN = re.compile(
    "|".join(map(re.escape, settings.PRODUCT_COLUMN_KEYWORDS)), re.IGNORECASE
)
REMARKS_COLUMN_PATTERN = _keyword_pattern(settings.REMARKS_COLUMN_KEYWORDS)
BRANCH_STOPWORD_PATTERN = _keyword_pattern(settings.BRANCH_HEADER_STOPWORDS)


# --- CSV ---


def parse_csv(text: str) -> list[list[str]]:
    """
    Splits CSV text into a rectangular matrix of trimmed string cells.

    Commas inside double quotes do not split a cell. Quote characters are
    dropped rather than unescaped, so a doubled quote ("") inside a quoted
    field disappears instead of becoming a literal quote. Malformed quoting
    never raises; characters are simply accumulated as they come.
    Blank lines produce no row, and short rows are padded with "".
    """
    rows = []
    for line in re.split(r"\r?\n", text):
        if not line.strip():
            continue

        row = []
        current = []
        in_quotes = False
        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            elif char == "," and not in_quotes:
                row.append("".join(current).strip())
                current = []
            else:
                current.append(char)
        row.append("".join(current).strip())
        rows.append(row)

    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


# --- Cell and header classification ---


def clean_number(value: str) -> int:
    """
    Keeps only the digits of a cell and reads them as an integer; anything
    unreadable becomes 0. The minus sign is stripped with everything else,
    so quantities can never come out negative.
    """
    digits = re.sub(r"\D", "", value or "")
    return int(digits) if digits else 0


def is_empty_cell(value: Optional[str]) -> bool:
    return value is None or value.strip().lower() in settings.EMPTY_CELL_TOKENS


def extract_date(header: str) -> Optional[str]:
    match = DATE_TOKEN_PATTERN.search(header or "")
    return match.group(0) if match else None


def classify_header(header: str) -> HeaderClass:
    """
    Maps a column header to the kind of quantity it holds and the period it covers.

    Flow keywords are checked before balance keywords because "stock" alone
    means a balance while "stock in" / "stock out" are flows. The bare +/-
    markers are checked last, on the header with its date removed.
    """
    header = header or ""
    date = extract_date(header) or settings.RECENT_DATE_LABEL
    undated = DATE_TOKEN_PATTERN.sub(" ", header)

    if INBOUND_PATTERN.search(undated):
        role = ColumnRole.INBOUND
    elif OUTBOUND_PATTERN.search(undated):
        role = ColumnRole.OUTBOUND
    elif BALANCE_PATTERN.search(undated):
        role = ColumnRole.BALANCE
    elif PLUS_PATTERN.search(undated):
        role = ColumnRole.INBOUND
    elif MINUS_PATTERN.search(undated):
        role = ColumnRole.OUTBOUND
    else:
        role = ColumnRole.IGNORED

    return HeaderClass(role=role, date=date)


def branch_from_header(header: str, fallback: str) -> str:
    """
    Reads a branch label out of a header like "Ikeja 1/5 Inbound": the date,
    the quantity keywords and the +/- markers are removed and what is left is
    the branch. Descriptive words such as "Closing" or "Opening" are dropped
    too. Falls back to the tab name when nothing is left.
    """
    text = DATE_TOKEN_PATTERN.sub(" ", header or "")
    for pattern in (INBOUND_PATTERN, OUTBOUND_PATTERN, BALANCE_PATTERN, BRANCH_STOPWORD_PATTERN):
        text = pattern.sub(" ", text)
    text = re.sub(r"[+()\[\]:|]", " ", text)
    text = " ".join(text.split()).strip(" -–—,.")
    return text or fallback or settings.UNKNOWN_BRANCH_LABEL


def resolve_branch(strategy: BranchStrategy, header: str, tab_name: str) -> str:
    if strategy is BranchStrategy.HEADER_TEXT:
        return branch_from_header(header, tab_name)
    return tab_name or settings.UNKNOWN_BRANCH_LABEL


# --- Schema inference ---


def find_header_row(rows: list[list[str]], lookahead: int = settings.HEADER_LOOKAHEAD) -> int:
    """Returns the index of the first row mentioning a product-ish keyword, or 0."""
    for index, row in enumerate(rows[:lookahead]):
        joined = " ".join(row).lower()
        if any(keyword in joined for keyword in settings.HEADER_ROW_KEYWORDS):
            return index
    return 0


def _find_column(header: list[str], pattern: re.Pattern) -> Optional[int]:
    for index, cell in enumerate(header):
        if pattern.search(cell):
            return index
    return None


def _find_remarks_column(header: list[str], product_column: Optional[int]) -> Optional[int]:
    # "Qty to Ikeja 1/5" is a quantity column, not a remarks column.
    for index, cell in enumerate(header):
        if index == product_column or not REMARKS_COLUMN_PATTERN.search(cell):
            continue
        if extract_date(cell) is None and classify_header(cell).role is ColumnRole.IGNORED:
            return index
    return None


def infer_schema(rows: list[list[str]], lookahead: int = settings.HEADER_LOOKAHEAD) -> TabSchema:
    """Locates the header row and the product and remarks columns of one tab."""
    if not rows:
        return TabSchema(header_row=0, product_column=None, remarks_column=None, header=[])

    header_row = find_header_row(rows, lookahead)
    header = rows[header_row]
    product_column = _find_column(header, PRODUCT_COLUMN_PATTERN)
    remarks_column = _find_remarks_column(header, product_column)

    return TabSchema(
        header_row=header_row,
        product_column=product_column,
        remarks_column=remarks_column,
        header=header,
    )


# --- Row normalization ---


def _cell(row: list[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return (row[index] or "").strip()


def _is_skippable_device(device: str, product_label: str) -> bool:
    lowered = device.lower()
    return not device or lowered in settings.AGGREGATE_TOKENS or lowered == product_label


def normalize_tab(
    tab: RawTab,
    strategy: BranchStrategy = BranchStrategy.TAB_NAME,
    lookahead: int = settings.HEADER_LOOKAHEAD,
) -> list[InventoryRecord]:
    """
    Walks every data row of a tab and emits one candidate record per
    (row, quantity column) pair that holds a value. Each candidate carries
    only the quantity its column was classified as; duplicates are left for
    the consolidator to merge.
    """
    schema = infer_schema(tab.rows, lookahead)
    if schema.product_column is None:
        logger.debug(f"  > Tab '{tab.name}' has no product column. Skipping.")
        return []

    header = schema.header
    product_label = header[schema.product_column].strip().lower()
    header_classes = [classify_header(text) for text in header]
    quantity_columns = [
        index
        for index, header_class in enumerate(header_classes)
        if header_class.role is not ColumnRole.IGNORED
        and index not in (schema.product_column, schema.remarks_column)
    ]

    candidates = []
    for row in tab.rows[schema.header_row + 1 :]:
        device = _cell(row, schema.product_column)
        if _is_skippable_device(device, product_label):
            continue

        remarks = _cell(row, schema.remarks_column) or None

        for index in quantity_columns:
            value = _cell(row, index)
            if is_empty_cell(value):
                continue

            header_class = header_classes[index]
            candidates.append(
                InventoryRecord(
                    date=header_class.date,
                    branch_name=resolve_branch(strategy, header[index], tab.name),
                    device_name=device,
                    remarks=remarks,
                    **{header_class.role.value: clean_number(value)},
                )
            )

    logger.debug(f"  > Tab '{tab.name}': {len(candidates)} candidate records.")
    return candidates
