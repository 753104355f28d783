"""
SQS catalog for listing and describing queues.
"""
from typing import Dict, List, Tuple
import logging

from .base import AWS_ERRORS, BaseResourceCatalog, paginate
from .models import ResourceStat


logger = logging.getLogger(__name__)


DEFAULT_SQS_METRICS = [
    'NumberOfEmptyReceives',
    'NumberOfMessagesDeleted',
    'NumberOfMessagesReceived',
    'NumberOfMessagesSent',
    'ApproximateNumberOfMessagesVisible',
    'ApproximateNumberOfMessagesNotVisible',
    'ApproximateAgeOfOldestMessage',
    'ApproximateNumberOfMessagesDelayed',
]

VISIBLE_ATTRIBUTE = 'ApproximateNumberOfMessages'
NOT_VISIBLE_ATTRIBUTE = 'ApproximateNumberOfMessagesNotVisible'


def queue_name_from_url(url: str) -> str:
    """Queue name is the last path segment of its URL."""
    return url.rstrip('/').split('/')[-1]


class SQSQueueCatalog(BaseResourceCatalog):
    """Catalog of SQS queues."""

    @property
    def service_name(self) -> str:
        return 'sqs'

    @property
    def metric_namespace(self) -> str:
        return 'AWS/SQS'

    @property
    def dimension_name(self) -> str:
        return 'QueueName'

    @property
    def default_metrics(self) -> List[str]:
        return list(DEFAULT_SQS_METRICS)

    @property
    def detail_header(self) -> Tuple[str, ...]:
        return ('Name', 'Visible (NotVisible)')

    @property
    def not_found_message(self) -> str:
        return "[%s] does not match any queues."

    @property
    def progress_message(self) -> str:
        return "Getting sqs stats of [%s] ..."

    @property
    def chart_title(self) -> str:
        return "SQS Metrics (Maximum): %s"

    def list_resources(self) -> List[ResourceStat]:
        """List every queue in the region.

        Returns:
            Queues in listing order, named by the last URL segment

        Raises:
            FetchFailed: If listing fails
        """
        try:
            urls = paginate(self.client, 'list_queues', 'QueueUrls')
        except AWS_ERRORS as e:
            self._handle_aws_error(e, 'list_queues')

        logger.info(f"Listed {len(urls)} sqs queues")
        return [ResourceStat(name=queue_name_from_url(url), url=url) for url in urls]

    def describe_resource(self, stat: ResourceStat) -> ResourceStat:
        """Fetch visible and in-flight message counts of a queue."""
        try:
            url = stat.url or self.get_queue_url(stat.name)
            response = self.client.get_queue_attributes(
                QueueUrl=url,
                AttributeNames=[VISIBLE_ATTRIBUTE, NOT_VISIBLE_ATTRIBUTE],
            )
        except AWS_ERRORS as e:
            self._handle_aws_error(e, 'get_queue_attributes', stat.name)

        attributes = response.get('Attributes', {})
        stat.url = url
        stat.item_count = int(attributes.get(VISIBLE_ATTRIBUTE, 0))
        stat.in_flight_count = int(attributes.get(NOT_VISIBLE_ATTRIBUTE, 0))
        return stat

    def get_queue_url(self, queue_name: str) -> str:
        response = self.client.get_queue_url(QueueName=queue_name)
        return response['QueueUrl']

    def get_message_counts(self, queue_name: str) -> Dict[str, int]:
        """Visible and not-visible counts of a queue looked up by name.

        Raises:
            FetchFailed: If the queue cannot be resolved or described
        """
        stat = self.describe_resource(ResourceStat(name=queue_name))
        return {'visible': stat.item_count, 'not_visible': stat.in_flight_count}

    def purge(self, queue_name: str) -> None:
        """Delete every message of a queue.

        Raises:
            FetchFailed: If the purge call fails
        """
        try:
            self.client.purge_queue(QueueUrl=self.get_queue_url(queue_name))
        except AWS_ERRORS as e:
            self._handle_aws_error(e, 'purge_queue', queue_name)
        logger.info(f"Purged sqs queue {queue_name}")
