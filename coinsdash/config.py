"""
CoinsDash — Configuration: paths, constants, header aliases, action labels.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths — override with COINSDASH_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("COINSDASH_DATA_DIR", str(Path.home() / "Desktop" / "CoinsDash")))
BASE_FOLDER = _data_dir
EXPORTS_FOLDER = _data_dir / "exports"

# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------
SUPPORTED_EXTENSIONS = {".csv", ".xlsx"}

# Rows per step when decoding large files and accumulating per-user totals.
# Only bounds per-step work; results never depend on it.
CHUNK_SIZE = int(os.environ.get("COINSDASH_CHUNK_SIZE", "10000"))

# ---------------------------------------------------------------------------
# Header aliases → canonical field names
# Matched case-insensitively with all whitespace removed. First alias present wins.
# ---------------------------------------------------------------------------
COLUMN_ALIASES = {
    "pk": ["pk", "id", "userid", "user_id", "sk"],
    "coins": ["coins", "coin", "amount", "value"],
    "action": ["action", "type", "event", "actiontype"],
    "timestamp": ["timestamp", "ts", "time", "epoch"],
}

REQUIRED_FIELDS = ["pk", "coins", "action"]

# Canonical field → record column
FIELD_COLUMNS = {
    "pk": "user_id",
    "coins": "coins",
    "action": "action",
    "timestamp": "timestamp",
}

# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------
BONUS_ACTION = "redeem_bonus"

# Unknown codes are shown as-is
ACTION_LABELS = {
    "redeem_bonus": "Welcome Bonus",
    "buy_gift": "Gift Sent",
    "grant_widget_bonus": "Poll Vote",
}

# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
PERCENTILE_TARGETS = (25, 50, 70, 90)
QUANTILE_BUCKET_NAMES = ("0-25%", "25-50%", "50-70%", "70-90%", "90-100%")
TIMELINE_BUCKET_SECONDS = 60

# ---------------------------------------------------------------------------
# Report naming
# ---------------------------------------------------------------------------
DEFAULT_SUMMARY_NAME = "Combined Summary"
META_SUMMARY_NAME = "Combined Overall Summary"
