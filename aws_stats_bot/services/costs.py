"""
Daily AWS cost from cumulative billing metrics or Cost Explorer.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional
import logging
import re

from botocore.exceptions import BotoCoreError, ClientError

from .metrics import MetricReducer, MetricWindow
from .models import CostBreakdown, first_value
from ..core.exceptions import FetchFailed, ValidationFailed
from ..core.i18n import DEFAULT_LANGUAGE, message


logger = logging.getLogger(__name__)


DEFAULT_COST_SERVICES = [
    'AmazonApiGateway',
    'AmazonCloudWatch',
    'AmazonEC2',
    'AmazonECR',
    'AmazonDynamoDB',
    'AmazonElastiCache',
    'AmazonES',
    'AmazonGuardDuty',
    'AmazonInspector',
    'AmazonKinesis',
    'AmazonKinesisFirehose',
    'AmazonRDS',
    'AmazonRekognition',
    'AmazonRoute53',
    'AmazonS3',
    'AmazonSageMaker',
    'AmazonSES',
    'AmazonSNS',
    'AWSDataTransfer',
    'AWSIoT',
    'AWSLambda',
    'AWSQueueService',
    'CodeBuild',
]

BILLING_NAMESPACE = 'AWS/Billing'
BILLING_METRIC = 'EstimatedCharges'
BILLING_CURRENCY = 'USD'
DATE_FORMAT = '%Y-%m-%d'
DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


def end_of_day(day) -> datetime:
    """23:59:59 UTC of the given date."""
    return datetime.combine(date(day.year, day.month, day.day), time(23, 59, 59), tzinfo=timezone.utc)


def parse_report_date(text: str, now: Optional[datetime] = None, language: str = DEFAULT_LANGUAGE) -> datetime:
    """Resolve the report date typed by the user.

    Args:
        text: YYYY-MM-DD, or empty for yesterday (UTC)
        now: Reference time used for the empty case
        language: Language of the error message

    Returns:
        End of the requested day in UTC

    Raises:
        ValidationFailed: If the text is not a zero-padded valid date
    """
    text = (text or '').strip()
    if not text:
        now = now or datetime.now(timezone.utc)
        return end_of_day(now.astimezone(timezone.utc) - timedelta(days=1))
    error_message = message("Invalid date format: [%s]", text, language=language)
    if not DATE_PATTERN.fullmatch(text):
        raise ValidationFailed(error_message, details=f"expected {DATE_FORMAT}", stage='parse_report_date')
    try:
        return end_of_day(datetime.strptime(text, DATE_FORMAT))
    except ValueError as e:
        raise ValidationFailed(error_message, details=str(e), stage='parse_report_date') from e


def resolve_services(services: Optional[List[str]]) -> List[str]:
    if not services:
        return list(DEFAULT_COST_SERVICES)
    return list(services)


class CloudWatchCostSource:
    """Per-day cost computed from the month-to-date EstimatedCharges metric."""

    def __init__(self, reducer: MetricReducer):
        self.reducer = reducer
        self.window = MetricWindow(duration=timedelta(days=1), period=86400, statistics=('Maximum',))

    def ensure_client(self) -> None:
        self.reducer.ensure_client()

    def cumulative_cost(self, end_time: datetime, service_name: Optional[str] = None) -> float:
        """Month-to-date charges reported at end_time.

        Raises:
            FetchFailed: If the metric fetch fails
        """
        dimensions = {'Currency': BILLING_CURRENCY}
        if service_name:
            dimensions['ServiceName'] = service_name
        series = self.reducer.fetch_and_reduce(
            BILLING_NAMESPACE, dimensions, [BILLING_METRIC], self.window, end_time=end_time,
        )
        return first_value(series)

    def daily_cost(self, end_date, service_name: Optional[str] = None) -> float:
        """Cost incurred on one day.

        Charges reset at the start of each month, so the 1st uses the raw
        reading and every other day subtracts the previous day's reading.

        Raises:
            FetchFailed: If either reading cannot be fetched
        """
        end_time = end_of_day(end_date)
        cost_today = self.cumulative_cost(end_time, service_name)
        if end_time.day == 1:
            return cost_today

        cost_yesterday = self.cumulative_cost(end_time - timedelta(days=1), service_name)
        return cost_today - cost_yesterday

    def fetch_all_costs(self, end_date, services: Optional[List[str]] = None) -> CostBreakdown:
        """Account total, listed services and the remainder for one day.

        Raises:
            FetchFailed: If any fetch fails; no partial breakdown is returned
        """
        total = self.daily_cost(end_date)
        service_costs: Dict[str, float] = {}
        for service_name in resolve_services(services):
            service_costs[service_name] = self.daily_cost(end_date, service_name)

        logger.info(f"Fetched costs of {len(service_costs)} services for {end_date:%Y-%m-%d}")
        return CostBreakdown(
            total=total,
            other=total - sum(service_costs.values()),
            services=service_costs,
        )


class CostExplorerCostSource:
    """Per-day cost grouped by service from Cost Explorer."""

    metric = 'UnblendedCost'

    def __init__(self, clients):
        self.clients = clients

    @property
    def client(self):
        return self.clients.get_client('ce')

    def ensure_client(self) -> None:
        self.clients.get_client('ce')

    def fetch_service_costs(self, end_date) -> Dict[str, float]:
        """Cost of every service billed on the day, following pagination.

        Raises:
            FetchFailed: If the Cost Explorer call fails
        """
        day = end_of_day(end_date)
        request = {
            'TimePeriod': {
                'Start': day.strftime(DATE_FORMAT),
                'End': (day + timedelta(days=1)).strftime(DATE_FORMAT),
            },
            'Granularity': 'DAILY',
            'Metrics': [self.metric],
            'GroupBy': [{'Type': 'DIMENSION', 'Key': 'SERVICE'}],
        }

        costs: Dict[str, float] = {}
        while True:
            try:
                response = self.client.get_cost_and_usage(**request)
            except (ClientError, BotoCoreError) as e:
                raise FetchFailed(
                    f"AWS ce get_cost_and_usage failed: {e}", details=str(e), stage='get_cost_and_usage',
                ) from e

            for result in response.get('ResultsByTime', []):
                for group in result.get('Groups', []):
                    name = group['Keys'][0]
                    amount = float(group['Metrics'][self.metric]['Amount'])
                    costs[name] = costs.get(name, 0.0) + amount

            token = response.get('NextPageToken')
            if not token:
                return costs
            request['NextPageToken'] = token

    def fetch_all_costs(self, end_date, services: Optional[List[str]] = None) -> CostBreakdown:
        """Breakdown of requested services, or of every billed service when none are given."""
        costs = self.fetch_service_costs(end_date)
        total = sum(costs.values())
        if services:
            service_costs = {name: costs.get(name, 0.0) for name in services}
        else:
            service_costs = costs
        return CostBreakdown(
            total=total,
            other=total - sum(service_costs.values()),
            services=service_costs,
        )
