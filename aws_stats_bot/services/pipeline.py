"""
Report pipelines: one synchronous entry point per report type.

Each stage either returns a result or raises a StatsBotError subclass. The
pipeline turns the first error into one outbound error message and stops;
messages already emitted stand and nothing is retried.
"""
from typing import Callable, List, Optional
import logging

from .base import BaseResourceCatalog
from .chart import ChartDelegate
from .costs import parse_report_date
from .details import fetch_details
from .matcher import DEFAULT_MAX_BORDER, match_resources
from .metrics import MetricReducer, MetricWindow
from .models import DatapointSeries, MatchSet, OutboundMessage
from .render import render_cost_report, render_metric_summary, render_names_only, render_resource_stats
from ..core.exceptions import StatsBotError
from ..core.i18n import DEFAULT_LANGUAGE, message


logger = logging.getLogger(__name__)

Sink = Callable[[OutboundMessage], None]


class Outbox:
    """Collects outbound messages and forwards each to an optional sink."""

    def __init__(self, sink: Optional[Sink] = None):
        self.messages: List[OutboundMessage] = []
        self.sink = sink

    def send(self, text: str) -> None:
        self._emit(OutboundMessage(text=text))

    def error(self, error: StatsBotError) -> None:
        logger.warning(f"{error.kind} at {error.stage}: {error.message}")
        self._emit(OutboundMessage.from_error(error))

    def _emit(self, outbound: OutboundMessage) -> None:
        self.messages.append(outbound)
        if self.sink is not None:
            self.sink(outbound)


class StatsReportPipeline:
    """Stats report for one resource kind (queues, tables, ...)."""

    def __init__(
        self,
        catalog: BaseResourceCatalog,
        reducer: Optional[MetricReducer] = None,
        chart_delegate: Optional[ChartDelegate] = None,
        max_border: int = DEFAULT_MAX_BORDER,
        metrics: Optional[List[str]] = None,
        chart_endpoint: Optional[str] = None,
        show_metrics: bool = True,
        language: str = DEFAULT_LANGUAGE,
    ):
        """Initialize the pipeline.

        Args:
            catalog: Resource kind being reported on
            reducer: Metric reducer used for single-resource resolutions
            chart_delegate: Optional chart delegate
            max_border: Cardinality threshold for detail rendering
            metrics: Metrics to fetch; empty uses the catalog defaults
            chart_endpoint: Endpoint overriding the delegate's default
            show_metrics: Render a current-value summary for single matches
            language: Message language
        """
        self.catalog = catalog
        self.reducer = reducer
        self.chart_delegate = chart_delegate
        self.max_border = max_border
        self.metrics = list(metrics or [])
        self.chart_endpoint = chart_endpoint
        self.show_metrics = show_metrics
        self.language = language
        self.window = MetricWindow.trailing_minutes(
            minutes=catalog.metric_window_minutes,
            period=catalog.metric_period,
            statistics=catalog.statistics,
        )

    def _t(self, key: str, *args) -> str:
        return message(key, *args, language=self.language)

    def should_chart(self, match_set: MatchSet) -> bool:
        """Charts are only drawn for exactly one resolved resource with an endpoint."""
        return (
            match_set.is_single
            and self.reducer is not None
            and self.chart_delegate is not None
            and self.chart_delegate.can_create_chart(self.chart_endpoint)
        )

    def run_stats_report(self, query: str, sink: Optional[Sink] = None) -> List[OutboundMessage]:
        """Resolve the query and report on the matching resources.

        Args:
            query: Free-text resource name fragment
            sink: Optional callable receiving each message as it is produced

        Returns:
            Every message produced, in order
        """
        outbox = Outbox(sink)
        query = (query or '').strip()

        try:
            self.catalog.ensure_client()
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(self._t(self.catalog.progress_message, query))

        try:
            universe = self.catalog.list_resources()
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        match_set = match_resources(query, universe, self.max_border)
        logger.info(f"[{query}] matched {len(match_set)} {self.catalog.service_name} resources")

        if match_set.is_empty:
            outbox.send(self._t(self.catalog.not_found_message, query))
            return outbox.messages
        if match_set.has_too_many:
            outbox.send(render_names_only(match_set))
            return outbox.messages

        try:
            fetch_details(self.catalog, match_set)
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages
        outbox.send(render_resource_stats(match_set, self.catalog.detail_header))

        if not match_set.is_single or self.reducer is None:
            return outbox.messages
        charting = self.should_chart(match_set)
        if not (self.show_metrics or charting):
            return outbox.messages

        try:
            series = self.fetch_metrics(match_set)
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages
        if not series:
            return outbox.messages

        if self.show_metrics:
            title = self._t("[Metrics] %s (last %d minutes)", match_set.first_name(), self.window.minutes)
            outbox.send(render_metric_summary(series, title))

        if charting:
            try:
                url = self.chart_delegate.create_chart_url(
                    self._t(self.catalog.chart_title, match_set.first_name()),
                    series,
                    endpoint=self.chart_endpoint,
                )
            except StatsBotError as e:
                outbox.error(e)
                return outbox.messages
            outbox.send(url)

        return outbox.messages

    def fetch_metrics(self, match_set: MatchSet) -> DatapointSeries:
        """Reduced metric series of the single resolved resource.

        Raises:
            FetchFailed: If any metric fetch fails
        """
        stat = match_set.resources[0]
        return self.reducer.fetch_and_reduce(
            self.catalog.metric_namespace,
            self.catalog.metric_dimensions(stat),
            self.metrics or self.catalog.default_metrics,
            self.window,
        )


class CostReportPipeline:
    """Daily cost report."""

    def __init__(self, cost_source, services: Optional[List[str]] = None, language: str = DEFAULT_LANGUAGE):
        """Initialize the pipeline.

        Args:
            cost_source: CloudWatchCostSource or CostExplorerCostSource
            services: Services listed individually; empty uses the source default
            language: Message language
        """
        self.cost_source = cost_source
        self.services = list(services or [])
        self.language = language

    def run_cost_report(
        self, date_text: str = '', services: Optional[List[str]] = None, sink: Optional[Sink] = None,
    ) -> List[OutboundMessage]:
        """Report the cost of one day (yesterday when no date is given).

        Args:
            date_text: YYYY-MM-DD, or empty for yesterday
            services: Services overriding the pipeline default for this report
            sink: Optional callable receiving each message as it is produced
        """
        outbox = Outbox(sink)

        try:
            end_time = parse_report_date(date_text, language=self.language)
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        try:
            self.cost_source.ensure_client()
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(message("Getting costs on [%s]...", end_time.strftime('%Y-%m-%d'), language=self.language))

        try:
            costs = self.cost_source.fetch_all_costs(
                end_time, services if services is not None else self.services,
            )
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(render_cost_report(costs, end_time, language=self.language))
        return outbox.messages
