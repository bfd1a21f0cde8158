"""Entity type statistics."""
from collections import Counter

from .models import StatRow

ALL_LABEL = "All"
UNKNOWN_LABEL = "Unknown"


def aggregate_entity_types(entities) -> list[StatRow]:
    """
    Count entities per ``type``.

    The "All" row comes first, the remaining rows follow by descending
    count (ties keep first-encounter order). Empty input gives a single
    "All" row with count 0.
    """
    entities = list(entities or [])
    total = len(entities)
    if not total:
        return [StatRow(ALL_LABEL, 0, "0.0")]

    counts = Counter(
        (e.get("type") if hasattr(e, "get") else None) or UNKNOWN_LABEL
        for e in entities
    )
    rows = [
        StatRow(entity_type, count, f"{count / total * 100:.1f}")
        for entity_type, count in counts.items()
    ]
    rows.sort(key=lambda r: r.count, reverse=True)
    return [StatRow(ALL_LABEL, total, "100.0"), *rows]
