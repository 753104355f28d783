"""
Name matching of resource identifiers against a free-text query.
"""
from typing import List

from .models import MatchSet, ResourceStat


DEFAULT_MAX_BORDER = 30


def match_resources(query: str, universe: List[ResourceStat], threshold: int = DEFAULT_MAX_BORDER) -> MatchSet:
    """Filter resources whose name contains the query.

    An exact name match wins over every partial match and ends the scan, so the
    result holds only that resource. An empty query matches everything.

    Args:
        query: Text fragment typed by the user
        universe: Resources from the provider listing
        threshold: Match count above which only names are rendered; 0 or
                   less falls back to the default

    Returns:
        MatchSet in listing order
    """
    if threshold <= 0:
        threshold = DEFAULT_MAX_BORDER

    matched: List[ResourceStat] = []
    for stat in universe:
        if query not in stat.name:
            continue
        if stat.name == query:
            matched = [stat]
            break
        matched.append(stat)

    return MatchSet(query=query, threshold=threshold, resources=matched)
