"""
CloudWatch metric fetching and per-metric reduction.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .models import AggregationRule, Datapoint, DatapointSeries
from ..core.exceptions import FetchFailed


logger = logging.getLogger(__name__)


_SUM_METRICS = (
    'ConditionalCheckFailedRequests',
    'ConsumedReadCapacityUnits',
    'ConsumedWriteCapacityUnits',
    'OnlineIndexConsumedWriteCapacity',
    'OnlineIndexPercentageProgress',
    'OnlineIndexThrottleEvents',
    'ReadThrottleEvents',
    'ReturnedItemCount',
    'SystemErrors',
    'TimeToLiveDeletedItemCount',
    'ThrottledRequests',
    'TransactionConflict',
    'UserErrors',
    'WriteThrottleEvents',
)

_AVERAGE_METRICS = (
    'SuccessfulRequestLatency',
)

# Counters sum, latencies average; anything else is a gauge and takes the maximum.
METRIC_AGGREGATION_RULES: Mapping[str, AggregationRule] = MappingProxyType({
    **{name: AggregationRule.SUM for name in _SUM_METRICS},
    **{name: AggregationRule.AVERAGE for name in _AVERAGE_METRICS},
})


def rule_for(metric_name: str) -> AggregationRule:
    return METRIC_AGGREGATION_RULES.get(metric_name, AggregationRule.MAXIMUM)


def reduce_samples(metric_name: str, samples: Iterable[Dict[str, Any]]) -> DatapointSeries:
    """Turn raw CloudWatch samples into Datapoints, keeping response order.

    Each sample yields one value for its own period; no running totals.
    """
    statistic = rule_for(metric_name).statistic
    return [
        Datapoint(
            metric_name=metric_name,
            value=float(sample.get(statistic, 0.0)),
            timestamp=sample['Timestamp'],
        )
        for sample in samples
    ]


@dataclass
class MetricWindow:
    """Trailing time window and sampling period of a metric query."""
    duration: timedelta
    period: int
    statistics: Tuple[str, ...] = ('Maximum',)

    @classmethod
    def trailing_minutes(cls, minutes: int = 300, period: int = 300, statistics: Iterable[str] = ('Maximum',)) -> 'MetricWindow':
        return cls(duration=timedelta(minutes=minutes), period=period, statistics=tuple(statistics))

    def bounds(self, end_time: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Start and end of the window ending at end_time (now by default)."""
        end_time = end_time or datetime.now(timezone.utc)
        return end_time - self.duration, end_time

    @property
    def minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)


class MetricReducer:
    """Fetches CloudWatch statistics and reduces them per metric name."""

    def __init__(self, clients):
        """Initialize the reducer.

        Args:
            clients: Object exposing get_client(service_name)
        """
        self.clients = clients

    @property
    def client(self):
        return self.clients.get_client('cloudwatch')

    def ensure_client(self) -> None:
        self.clients.get_client('cloudwatch')

    def fetch_statistics(
        self,
        namespace: str,
        metric_name: str,
        dimensions: Dict[str, str],
        start_time: datetime,
        end_time: datetime,
        period: int,
        statistics: Iterable[str],
    ) -> List[Dict[str, Any]]:
        """Raw samples of one metric, in provider order.

        Raises:
            FetchFailed: If the CloudWatch call fails
        """
        try:
            response = self.client.get_metric_statistics(
                Namespace=namespace,
                MetricName=metric_name,
                Dimensions=[{'Name': k, 'Value': v} for k, v in dimensions.items()],
                StartTime=start_time,
                EndTime=end_time,
                Period=period,
                Statistics=list(statistics),
            )
        except (ClientError, BotoCoreError) as e:
            raise FetchFailed(
                f"AWS cloudwatch get_metric_statistics failed for {namespace}/{metric_name}: {e}",
                details=str(e),
                stage='get_metric_statistics',
            ) from e
        return response.get('Datapoints', [])

    def fetch_and_reduce(
        self,
        namespace: str,
        dimensions: Dict[str, str],
        metric_names: List[str],
        window: MetricWindow,
        end_time: Optional[datetime] = None,
    ) -> DatapointSeries:
        """Fetch every metric over the window and concatenate the reduced series.

        A metric without samples contributes nothing. Any failure aborts the
        whole call.

        Args:
            namespace: CloudWatch namespace
            dimensions: Dimension name to value
            metric_names: Metrics in fetch order
            window: Time window, period and statistics to request
            end_time: Window end; defaults to now

        Returns:
            Datapoints grouped by metric in fetch order

        Raises:
            FetchFailed: If any metric fetch fails
        """
        start_time, end_time = window.bounds(end_time)
        series: DatapointSeries = []
        for metric_name in metric_names:
            samples = self.fetch_statistics(
                namespace, metric_name, dimensions, start_time, end_time,
                window.period, window.statistics,
            )
            logger.debug(f"{namespace}/{metric_name}: {len(samples)} samples")
            series.extend(reduce_samples(metric_name, samples))
        return series
