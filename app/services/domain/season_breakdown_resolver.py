"""
Domain service: Per-tree yield lookup in a season's breakdown map.

Season records have been written by several generations of clients, so the
entry stored for a tree may be a bare number, a numeric string, or an object
carrying the count under one of several key names (some misspelled). This
module is the single place where those shapes are normalized.
"""
import logging
import math
import re
from typing import Any, Hashable, Mapping

logger = logging.getLogger(__name__)

# Checked in order; the first key present wins
COUNT_KEYS: tuple[str, ...] = (
    "count",
    "total",
    "fruitCount",
    "numberOFfrust",
    "numberOfFrust",
    "frustCount",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_count(value: Any) -> int:
    """
    Coerce a scalar yield value to a non-negative integer.

    Args:
        value: A number or numeric-looking string

    Returns:
        The integer count, or 0 when the value is not numeric
    """
    # bool is an int subclass but never a count
    if isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return max(0, int(value))

    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return 0
        return max(0, int(match.group(1)))

    return 0


def resolve_count(breakdown: Any, plant_id: Hashable) -> int:
    """
    Resolve the prior-season count for a tree.

    Args:
        breakdown: Mapping of tree id to yield entry
        plant_id: Tree identifier

    Returns:
        Non-negative integer count (0 for anything unrecognized)
    """
    if not isinstance(breakdown, Mapping):
        return 0

    entry = breakdown.get(plant_id)
    if entry is None and not isinstance(plant_id, str):
        entry = breakdown.get(str(plant_id))
    if entry is None:
        return 0

    if isinstance(entry, Mapping):
        for key in COUNT_KEYS:
            if key in entry:
                return coerce_count(entry[key])
        logger.debug(f"No known count key for tree {plant_id}: {sorted(map(str, entry))}")
        return 0

    return coerce_count(entry)
