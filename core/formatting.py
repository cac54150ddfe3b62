# =============================================================================
# core/formatting.py  -  Date, JSON & Text Formatting
# =============================================================================
#
# Pure functions behind formatDateTime, formatJSON and textStats.
# Nothing here touches the network or the secret store.
# =============================================================================

import json
import re
import time
from collections import Counter
from datetime import datetime
from typing import Any, Optional

from core.errors import ArgumentValidationError

# Tokens are case-sensitive: MM is the month, mm the minute.
_DATE_TOKENS = ("YYYY", "MM", "DD", "HH", "mm", "ss")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

_NAMED_CHARS = {" ": "space", "\n": "newline", "\t": "tab"}


def format_datetime(fmt: str, timestamp_ms: Optional[float] = None) -> str:
    """Substitute YYYY/MM/DD/HH/mm/ss in `fmt` with local-time values.

    `timestamp_ms` is milliseconds since the Unix epoch; None means "now".
    """
    if timestamp_ms is None:
        timestamp_ms = time.time() * 1000
    try:
        moment = datetime.fromtimestamp(timestamp_ms / 1000)
    except (OverflowError, OSError, ValueError):
        raise ArgumentValidationError(f"Invalid timestamp: {timestamp_ms}") from None

    values = {
        "YYYY": f"{moment.year:04d}",
        "MM": f"{moment.month:02d}",
        "DD": f"{moment.day:02d}",
        "HH": f"{moment.hour:02d}",
        "mm": f"{moment.minute:02d}",
        "ss": f"{moment.second:02d}",
    }
    result = fmt
    for token in _DATE_TOKENS:
        result = result.replace(token, values[token])
    return result


def format_json(text: str, indent: Optional[int] = None) -> str:
    """Parse `text` as JSON and pretty-print it.

    indent defaults to 2 and is clamped to 0..10; 0 produces compact output.
    """
    try:
        parsed: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ArgumentValidationError(f"JSON parse error: {exc}") from None

    indent = 2 if indent is None else max(0, min(int(indent), 10))
    if indent == 0:
        return json.dumps(parsed, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(parsed, ensure_ascii=False, indent=indent)


def text_stats(text: str) -> dict:
    """Character, word and line counts plus the ten most common characters."""
    stripped = text.strip()
    # Counter.most_common keeps first-seen order among equal counts.
    top = Counter(text).most_common(10)
    return {
        "characters": len(text),
        "words": len(stripped.split()) if stripped else 0,
        "lines": len(_LINE_BREAK.split(text)),
        "top_characters": ", ".join(f'"{_NAMED_CHARS.get(ch, ch)}": {count}' for ch, count in top),
    }
