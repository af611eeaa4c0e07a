"""
Canonical month ordering.

The upstream API keys monthly values by lowercase three-letter codes and
makes no promise about their order. Everything that lines months up or
labels them uses these two tuples.
"""

from typing import Tuple

MONTH_KEYS: Tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

MONTH_LABELS: Tuple[str, ...] = tuple(key.capitalize() for key in MONTH_KEYS)
