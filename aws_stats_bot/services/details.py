"""
Detail fetching for matched resources.
"""
import logging

from .base import BaseResourceCatalog
from .models import MatchSet


logger = logging.getLogger(__name__)


def fetch_details(catalog: BaseResourceCatalog, match_set: MatchSet) -> MatchSet:
    """Describe every matched resource.

    The first failure aborts the batch so a report never mixes described and
    undescribed resources.

    Args:
        catalog: Resource catalog used for describe calls
        match_set: Matches within the cardinality threshold

    Returns:
        The same MatchSet with attributes filled in

    Raises:
        FetchFailed: If any describe call fails
    """
    for stat in match_set.resources:
        catalog.describe_resource(stat)
    logger.info(f"Described {len(match_set)} {catalog.service_name} resources")
    return match_set
