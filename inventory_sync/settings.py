import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Sheet Source ---
SHEET_ID = os.getenv("SHEET_ID", "")
# Tab exported by the public CSV fallback.
SHEET_GID = os.getenv("SHEET_GID", "0")
# Branch label used for records from the CSV export when headers carry none.
CSV_TAB_NAME = os.getenv("CSV_TAB_NAME", "Main Hub")

# --- Credentials (either one switches to the authenticated API) ---
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or None
GOOGLE_ACCESS_TOKEN = os.getenv("GOOGLE_ACCESS_TOKEN") or None

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export"

# --- Outputs ---
COMBINED_FILENAME_BASE = os.getenv("COMBINED_FILENAME", "inventory")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Shared Business Logic ---
# Tabs that hold dashboards or notes rather than stock movements.
IGNORED_TABS = [
    "summary",
    "config",
    "dashboard",
    "settings",
    "instructions",
    "template",
]

# How many rows from the top of a tab are searched for the header row.
HEADER_LOOKAHEAD = 10

HEADER_ROW_KEYWORDS = ["product", "sku", "device", "item"]
PRODUCT_COLUMN_KEYWORDS = ["product", "device", "sku", "item", "name"]
REMARKS_COLUMN_KEYWORDS = [
    "remark",
    "remarks",
    "source",
    "destination",
    "from",
    "to",
    "recipient",
    "supplier",
]

INBOUND_KEYWORDS = ["inbound", "stock in", "received"]
OUTBOUND_KEYWORDS = ["outbound", "stock out", "issued", "sold"]
BALANCE_KEYWORDS = ["balance", "qty", "count", "stock", "on hand"]

# Product cells that mark footers, totals or a repeated serial-number header.
AGGREGATE_TOKENS = ["total", "grand total", "subtotal", "s/n", "sn"]

# Cell values that mean "nothing recorded".
EMPTY_CELL_TOKENS = ["", "-", "--", "–", "—", "n/a", "na"]

ACCESSORY_KEYWORDS = [
    "accessory",
    "accessories",
    "cable",
    "charger",
    "adapter",
    "bag",
    "case",
    "connector",
    "extension",
    "mount",
    "kit",
    "fuse",
    "remote",
]

RECENT_DATE_LABEL = "Recent"
UNKNOWN_BRANCH_LABEL = "Unknown"

# Branches holding more units than this are reported as healthy.
LOW_STOCK_THRESHOLD = 100

# Descriptive header words that never name a branch ("Closing Balance", "Opening Stock").
BRANCH_HEADER_STOPWORDS = ["opening", "closing", "total", "current", "available", "daily"]
