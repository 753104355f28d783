"""
Chart creation through an external chart service.
"""
from typing import Any, Dict, Optional
import logging
import os

import httpx

from .models import DatapointSeries
from ..core.config import CHART_ENDPOINT_ENV
from ..core.exceptions import ChartFailed


logger = logging.getLogger(__name__)

TIMESTAMP_LABEL_FORMAT = '%Y-%m-%d %H:%M:%S'


def build_chart_payload(title: str, series: DatapointSeries) -> Dict[str, Any]:
    """Line chart payload with one category per metric, keyed by timestamp label."""
    data: Dict[str, Dict[str, float]] = {}
    for point in series:
        category = data.setdefault(point.metric_name, {})
        category[point.timestamp.strftime(TIMESTAMP_LABEL_FORMAT)] = point.value
    return {
        'title': title,
        'label_x': 'time',
        'label_y': 'value',
        'type': 'line',
        'data': data,
    }


class ChartDelegate:
    """Posts metric series to the chart service and returns the chart URL."""

    def __init__(self, default_endpoint: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        """Initialize the delegate.

        Args:
            default_endpoint: Endpoint used when a call does not name one
            http_client: Optional preconfigured httpx client
        """
        self.default_endpoint = default_endpoint
        self._client = http_client

    @classmethod
    def from_environment(cls, http_client: Optional[httpx.Client] = None) -> 'ChartDelegate':
        return cls(default_endpoint=os.environ.get(CHART_ENDPOINT_ENV) or None, http_client=http_client)

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=None)
        return self._client

    def resolve_endpoint(self, endpoint: Optional[str] = None) -> Optional[str]:
        return endpoint or self.default_endpoint or None

    def can_create_chart(self, endpoint: Optional[str] = None) -> bool:
        return self.resolve_endpoint(endpoint) is not None

    def create_chart_url(self, title: str, series: DatapointSeries, endpoint: Optional[str] = None) -> str:
        """Post the series and return the HTML URL of the chart.

        Raises:
            ChartFailed: On transport error, non-success status or a body
                         without a string html_url
        """
        url = self.resolve_endpoint(endpoint)
        if url is None:
            raise ChartFailed("No chart endpoint configured", stage='create_chart_url')

        payload = build_chart_payload(title, series)
        try:
            response = self.client.post(url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise ChartFailed(f"Chart request failed: {e}", details=str(e), stage='create_chart_url') from e
        except ValueError as e:
            raise ChartFailed(f"Chart response is not valid JSON: {e}", details=str(e), stage='create_chart_url') from e

        html_url = body.get('html_url') if isinstance(body, dict) else None
        if not isinstance(html_url, str):
            raise ChartFailed("Chart response has no html_url", details=str(body), stage='create_chart_url')

        logger.info(f"Created chart {html_url}")
        return html_url
