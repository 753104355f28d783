"""AWS stats and cost reporting package."""

from .base import BaseResourceCatalog
from .models import (
    AggregationRule, CostBreakdown, Datapoint, MatchSet, OutboundMessage, ResourceStat, SubResourceStat
)
from .sqs import SQSQueueCatalog
from .dynamodb import DynamoDBTableCatalog
from .matcher import match_resources
from .metrics import MetricReducer, MetricWindow
from .costs import CloudWatchCostSource, CostExplorerCostSource
from .chart import ChartDelegate
from .pipeline import CostReportPipeline, StatsReportPipeline
from .purge import PurgePolicy, QueuePurgePipeline

__all__ = [
    'BaseResourceCatalog',
    'AggregationRule',
    'CostBreakdown',
    'Datapoint',
    'MatchSet',
    'OutboundMessage',
    'ResourceStat',
    'SubResourceStat',
    'SQSQueueCatalog',
    'DynamoDBTableCatalog',
    'match_resources',
    'MetricReducer',
    'MetricWindow',
    'CloudWatchCostSource',
    'CostExplorerCostSource',
    'ChartDelegate',
    'CostReportPipeline',
    'StatsReportPipeline',
    'PurgePolicy',
    'QueuePurgePipeline',
]
