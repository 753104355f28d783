"""
Data models for the stats and cost reporting pipeline.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..core.exceptions import StatsBotError


class AggregationRule(Enum):
    """How a window of raw samples is folded into one value."""
    SUM = 'Sum'
    AVERAGE = 'Average'
    MAXIMUM = 'Maximum'

    @property
    def statistic(self) -> str:
        """CloudWatch statistic name read from each sample."""
        return self.value


@dataclass
class SubResourceStat:
    """Secondary resource shown beneath its parent (e.g. a DynamoDB GSI)."""
    name: str
    status: Optional[str] = None
    item_count: Optional[int] = None
    size_mb: Optional[int] = None


@dataclass
class ResourceStat:
    """Per-resource detail collected for the stats report."""
    name: str                        # Queue name, table name, ...
    url: Optional[str] = None        # Provider locator when it differs from the name
    status: Optional[str] = None
    item_count: Optional[int] = None  # Items for tables, visible messages for queues
    size_mb: Optional[int] = None
    in_flight_count: Optional[int] = None  # Messages not visible
    sub_resources: List[SubResourceStat] = field(default_factory=list)


@dataclass
class MatchSet:
    """Resources matching one query, in provider listing order."""
    query: str
    threshold: int
    resources: List[ResourceStat] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.resources)

    @property
    def is_empty(self) -> bool:
        return len(self.resources) == 0

    @property
    def has_too_many(self) -> bool:
        """Whether only names should be rendered."""
        return len(self.resources) > self.threshold

    @property
    def is_single(self) -> bool:
        return len(self.resources) == 1

    @property
    def names(self) -> List[str]:
        return [r.name for r in self.resources]

    def first_name(self) -> str:
        if not self.resources:
            return ''
        return self.resources[0].name


@dataclass
class Datapoint:
    """One reduced CloudWatch sample."""
    metric_name: str
    value: float
    timestamp: datetime


# Provider response order, concatenated per metric; never re-sorted by time.
DatapointSeries = List[Datapoint]


def first_value(series: DatapointSeries) -> float:
    """Current value of a series: its first datapoint, or 0 when empty."""
    if not series:
        return 0.0
    return series[0].value


def current_values(series: DatapointSeries) -> Dict[str, float]:
    """First value of each metric, keyed in first-seen order."""
    values: Dict[str, float] = {}
    for point in series:
        if point.metric_name not in values:
            values[point.metric_name] = point.value
    return values


@dataclass
class CostBreakdown:
    """Daily cost of the whole account and of individual services."""
    total: float
    other: float                # total minus the listed services; may be negative
    services: Dict[str, float] = field(default_factory=dict)

    def sorted_services(self) -> List[tuple]:
        """Services ordered by cost descending, then name ascending."""
        return sorted(self.services.items(), key=lambda kv: (-kv[1], kv[0]))


@dataclass
class OutboundMessage:
    """Text sent back through the reply channel."""
    text: str
    is_error: bool = False
    kind: Optional[str] = None

    @classmethod
    def from_error(cls, error: StatsBotError) -> 'OutboundMessage':
        stage = error.stage or 'unknown'
        text = f"[ERROR]\t[{error.kind}]\t[{stage}]\t`{error.message}`"
        return cls(text=text, is_error=True, kind=error.kind)

    def __str__(self) -> str:
        return self.text
