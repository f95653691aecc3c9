"""Byte-size accounting helpers.

File records may carry their size as a number of bytes or as a human string
such as ``"1.5 KB"``. Totals are always computed in bytes; formatting is left
to the presentation boundary.
"""

import math
import re
from collections.abc import Mapping
from numbers import Real
from typing import Any, Iterable, Optional

# 1024-based multiples. Index doubles as the exponent.
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

_SIZE_PATTERN = re.compile(r"^([\d.]+)\s*(B|KB|MB|GB|TB)$", re.IGNORECASE)


def parse_size(value: Any) -> Optional[float]:
    """Return *value* in bytes, or ``None`` when it cannot be read as a size."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        number = float(value)
        return None if math.isnan(number) else value
    if not isinstance(value, str):
        return None

    match = _SIZE_PATTERN.match(value.strip())
    if not match:
        return None
    number, unit = match.groups()
    try:
        amount = float(number)
    except ValueError:  # "1.2.3"
        return None
    return amount * 1024 ** SIZE_UNITS.index(unit.upper())


def _size_of(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("size")
    return getattr(entry, "size", None)


def calculate_folder_size(files: Iterable[Any]) -> float:
    """Sum the sizes of *files* in bytes.

    Entries without a readable size count as 0. Never raises.
    """
    total = 0
    for entry in files or ():
        size = parse_size(_size_of(entry))
        if size:
            total += size
    return total


def format_size(num_bytes: float) -> str:
    """Human-readable size, e.g. ``1048576 -> "1.00 MB"``; ``0 -> "0 B"``."""
    if not num_bytes:
        return "0 B"
    # Exact powers of 1024 must land on the larger unit; no float logs.
    index = 0
    magnitude = abs(num_bytes)
    while magnitude >= 1024 and index < len(SIZE_UNITS) - 1:
        magnitude /= 1024
        index += 1
    return f"{num_bytes / 1024 ** index:.2f} {SIZE_UNITS[index]}"
