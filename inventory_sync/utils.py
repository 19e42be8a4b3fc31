from datetime import datetime, timezone


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def utc_timestamp() -> str:
    """ISO-8601 timestamp of 'now' in UTC, used to stamp each sync."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
