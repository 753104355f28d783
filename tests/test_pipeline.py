"""End-to-end tests for the report pipelines with fake providers."""

from datetime import date, datetime, timezone
from unittest.mock import Mock

import pytest

from aws_stats_bot.core.exceptions import ChartFailed, FetchFailed, ProviderUnavailable
from aws_stats_bot.services.costs import CloudWatchCostSource
from aws_stats_bot.services.dynamodb import DynamoDBTableCatalog
from aws_stats_bot.services.models import CostBreakdown, Datapoint, ResourceStat
from aws_stats_bot.services.pipeline import CostReportPipeline, StatsReportPipeline
from aws_stats_bot.services.sqs import SQSQueueCatalog


T0 = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


class FakeCatalog(SQSQueueCatalog):
    """SQS-shaped catalog over an in-memory listing."""

    def __init__(self, names, fail_on=None):
        super().__init__(Mock())
        self.names = names
        self.fail_on = fail_on
        self.described = []

    def list_resources(self):
        return [ResourceStat(name=n, url=f"https://queue/{n}") for n in self.names]

    def describe_resource(self, stat):
        if stat.name == self.fail_on:
            raise FetchFailed(f"cannot describe {stat.name}", stage="get_queue_attributes")
        self.described.append(stat.name)
        stat.item_count = 1000
        stat.in_flight_count = 2
        return stat


@pytest.fixture
def reducer():
    reducer = Mock()
    reducer.fetch_and_reduce.return_value = [
        Datapoint("NumberOfMessagesSent", 5.0, T0),
        Datapoint("ApproximateAgeOfOldestMessage", 30.0, T0),
    ]
    return reducer


@pytest.fixture
def chart():
    chart = Mock()
    chart.can_create_chart.return_value = True
    chart.create_chart_url.return_value = "https://chart.example.com/c/1"
    return chart


UNIVERSE = ["orders-prod", "orders-dev", "billing"]


class TestStatsReport:

    def test_partial_query_describes_all_matches_without_chart(self, reducer, chart):
        catalog = FakeCatalog(UNIVERSE)
        pipeline = StatsReportPipeline(catalog, reducer=reducer, chart_delegate=chart)

        messages = pipeline.run_stats_report("orders")

        assert catalog.described == ["orders-prod", "orders-dev"]
        assert messages[0].text == "Getting sqs stats of [orders] ..."
        assert "orders-prod\t|\t1,000 (2)" in messages[1].text
        assert "orders-dev\t|\t1,000 (2)" in messages[1].text
        assert len(messages) == 2
        reducer.fetch_and_reduce.assert_not_called()
        chart.create_chart_url.assert_not_called()

    def test_exact_query_runs_details_metrics_and_chart(self, reducer, chart):
        catalog = FakeCatalog(UNIVERSE)
        pipeline = StatsReportPipeline(catalog, reducer=reducer, chart_delegate=chart, metrics=["NumberOfMessagesSent"])

        messages = pipeline.run_stats_report("orders-prod")

        assert catalog.described == ["orders-prod"]
        namespace, dimensions, metric_names, window = reducer.fetch_and_reduce.call_args[0]
        assert namespace == "AWS/SQS"
        assert dimensions == {"QueueName": "orders-prod"}
        assert metric_names == ["NumberOfMessagesSent"]
        assert window.period == 300 and window.minutes == 300
        title, series = chart.create_chart_url.call_args[0]
        assert title == "SQS Metrics (Maximum): orders-prod"
        assert [m.text for m in messages][-1] == "https://chart.example.com/c/1"
        assert "NumberOfMessagesSent\t:\t5" in messages[2].text

    def test_single_match_without_endpoint_skips_chart(self, reducer, chart):
        chart.can_create_chart.return_value = False
        pipeline = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer, chart_delegate=chart)

        messages = pipeline.run_stats_report("billing")

        reducer.fetch_and_reduce.assert_called_once()
        chart.create_chart_url.assert_not_called()
        assert not any(m.is_error for m in messages)

    def test_default_metrics_used_when_none_configured(self, reducer):
        catalog = FakeCatalog(UNIVERSE)

        StatsReportPipeline(catalog, reducer=reducer).run_stats_report("billing")

        assert reducer.fetch_and_reduce.call_args[0][2] == catalog.default_metrics

    def test_no_match_message(self, reducer):
        messages = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer).run_stats_report("payments")

        assert messages[-1].text == "[payments] does not match any queues."
        assert not messages[-1].is_error

    def test_too_many_matches_renders_names_only(self, reducer, chart):
        catalog = FakeCatalog([f"orders-{i}" for i in range(5)])
        pipeline = StatsReportPipeline(catalog, reducer=reducer, chart_delegate=chart, max_border=3)

        messages = pipeline.run_stats_report("orders")

        assert messages[-1].text == "```\n" + "\n".join(f"orders-{i}" for i in range(5)) + "\n```"
        assert catalog.described == []

    def test_detail_failure_aborts_report(self, reducer):
        catalog = FakeCatalog(UNIVERSE, fail_on="orders-dev")

        messages = StatsReportPipeline(catalog, reducer=reducer).run_stats_report("orders")

        assert len(messages) == 2
        assert messages[-1].is_error
        assert messages[-1].text == "[ERROR]\t[FetchFailed]\t[get_queue_attributes]\t`cannot describe orders-dev`"

    def test_chart_failure_keeps_stats_report(self, reducer, chart):
        chart.create_chart_url.side_effect = ChartFailed("Chart request failed: 500", stage="create_chart_url")

        messages = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer, chart_delegate=chart).run_stats_report("billing")

        assert "billing" in messages[1].text
        assert messages[-1].is_error
        assert messages[-1].kind == "ChartFailed"

    def test_metric_failure_is_reported_after_stats(self, reducer):
        reducer.fetch_and_reduce.side_effect = FetchFailed("throttled", stage="get_metric_statistics")

        messages = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer).run_stats_report("billing")

        assert [m.is_error for m in messages] == [False, False, True]

    def test_provider_unavailable_reported_once(self):
        clients = Mock()
        clients.get_client.side_effect = ProviderUnavailable("no region", stage="get_dynamodb_client")

        messages = StatsReportPipeline(DynamoDBTableCatalog(clients)).run_stats_report("users")

        assert len(messages) == 1
        assert messages[0].kind == "ProviderUnavailable"

    def test_sink_receives_messages_as_produced(self, reducer):
        received = []

        messages = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer).run_stats_report("orders", sink=received.append)

        assert received == messages

    def test_japanese_messages(self, reducer):
        pipeline = StatsReportPipeline(FakeCatalog(UNIVERSE), reducer=reducer, language="ja")

        messages = pipeline.run_stats_report("payments")

        assert messages[-1].text == "[payments] に一致するキューはありません。"


class TestCostReport:

    def test_reports_costs_for_date(self):
        source = Mock()
        source.fetch_all_costs.return_value = CostBreakdown(total=30.0, other=5.0, services={"EC2": 10.0, "S3": 10.0, "RDS": 5.0})

        messages = CostReportPipeline(source, services=["EC2", "S3", "RDS"]).run_cost_report("2024-03-15")

        assert messages[0].text == "Getting costs on [2024-03-15]..."
        end_time, services = source.fetch_all_costs.call_args[0]
        assert end_time == datetime(2024, 3, 15, 23, 59, 59, tzinfo=timezone.utc)
        assert services == ["EC2", "S3", "RDS"]
        body = messages[1].text
        assert body.index("- EC2:") < body.index("- S3:") < body.index("- RDS:")

    def test_invalid_date_short_circuits(self):
        source = Mock()

        messages = CostReportPipeline(source).run_cost_report("15/03/2024")

        assert len(messages) == 1
        assert messages[0].kind == "ValidationFailed"
        assert "Invalid date format: [15/03/2024]" in messages[0].text
        source.ensure_client.assert_not_called()
        source.fetch_all_costs.assert_not_called()

    def test_unpadded_date_is_rejected_in_report_language(self):
        source = Mock()

        messages = CostReportPipeline(source, language="ja").run_cost_report("2024-3-5")

        assert len(messages) == 1
        assert messages[0].text == "[ERROR]\t[ValidationFailed]\t[parse_report_date]\t`日付の指定が不正です: [2024-3-5]`"
        source.fetch_all_costs.assert_not_called()

    def test_fetch_failure_after_progress(self):
        source = Mock()
        source.fetch_all_costs.side_effect = FetchFailed("denied", stage="get_metric_statistics")

        messages = CostReportPipeline(source).run_cost_report("2024-03-15")

        assert [m.is_error for m in messages] == [False, True]

    def test_first_of_month_through_cloudwatch_source(self):
        reducer = Mock()
        reducer.fetch_and_reduce.return_value = [Datapoint("EstimatedCharges", 7.5, T0)]
        source = CloudWatchCostSource(reducer)

        messages = CostReportPipeline(source, services=["AmazonEC2"]).run_cost_report("2024-03-01")

        assert reducer.fetch_and_reduce.call_count == 2
        assert "- Total:\t$7.50" in messages[-1].text
        assert "- (Other):\t$0.00" in messages[-1].text
        assert date(2024, 3, 1).strftime("%Y-%m-%d") in messages[-1].text
