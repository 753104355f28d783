"""
Base resource catalog interface for AWS services.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .models import ResourceStat
from ..core.exceptions import FetchFailed


class BaseResourceCatalog(ABC):
    """Abstract base class describing one kind of reportable resource.

    A catalog knows how to list identifiers, describe one resource and which
    CloudWatch namespace, dimension and metric set belong to it. The stats
    pipeline is written once against this interface.
    """

    # Seconds between samples and trailing window length for live stats.
    metric_period = 300
    metric_window_minutes = 300

    def __init__(self, clients):
        """Initialize the catalog with a client provider.

        Args:
            clients: Object exposing get_client(service_name), usually a
                     ClientRegistry
        """
        self.clients = clients

    @property
    def client(self):
        """AWS service client, created on first use by the provider."""
        return self.clients.get_client(self.service_name)

    def ensure_client(self) -> None:
        """Build the client up front so construction errors surface once.

        Raises:
            ProviderUnavailable: If the client cannot be created
        """
        self.clients.get_client(self.service_name)

    @property
    @abstractmethod
    def service_name(self) -> str:
        """AWS service name (e.g., 'sqs', 'dynamodb')."""
        pass

    @property
    @abstractmethod
    def metric_namespace(self) -> str:
        """CloudWatch namespace of this resource kind."""
        pass

    @property
    @abstractmethod
    def dimension_name(self) -> str:
        """CloudWatch dimension identifying one resource."""
        pass

    @property
    @abstractmethod
    def default_metrics(self) -> List[str]:
        """Metrics fetched when the caller does not choose any."""
        pass

    @property
    def statistics(self) -> List[str]:
        """Statistics requested from CloudWatch."""
        return ['Maximum']

    @property
    @abstractmethod
    def detail_header(self) -> Tuple[str, ...]:
        """Column titles of the detail report."""
        pass

    @property
    @abstractmethod
    def not_found_message(self) -> str:
        """Catalogue key rendered when nothing matches."""
        pass

    @property
    @abstractmethod
    def progress_message(self) -> str:
        """Catalogue key rendered before the listing starts."""
        pass

    @property
    @abstractmethod
    def chart_title(self) -> str:
        """Catalogue key for the chart title."""
        pass

    @abstractmethod
    def list_resources(self) -> List[ResourceStat]:
        """List every resource of this kind, following pagination.

        Returns:
            Bare ResourceStat entries carrying only name and locator

        Raises:
            FetchFailed: If listing fails
        """
        pass

    @abstractmethod
    def describe_resource(self, stat: ResourceStat) -> ResourceStat:
        """Fill in attributes and sub-resources of one resource.

        Raises:
            FetchFailed: If the describe call fails
        """
        pass

    def metric_dimensions(self, stat: ResourceStat) -> Dict[str, str]:
        return {self.dimension_name: stat.name}

    def _handle_aws_error(self, error: Exception, operation: str, resource_id: str = None) -> None:
        """Convert AWS API errors into FetchFailed.

        Raises:
            FetchFailed: Wrapped error with context
        """
        resource_context = f" for resource {resource_id}" if resource_id else ""
        error_message = f"AWS {self.service_name} {operation} failed{resource_context}: {str(error)}"
        raise FetchFailed(error_message, details=str(error), stage=operation) from error


AWS_ERRORS = (ClientError, BotoCoreError)


def paginate(client: Any, operation: str, result_key: str, **kwargs) -> List[Any]:
    """Collect every page of a paginated list call into one list."""
    items: List[Any] = []
    paginator = client.get_paginator(operation)
    for page in paginator.paginate(**kwargs):
        items.extend(page.get(result_key, []))
    return items
