"""End-to-end tests for the CLI entry point."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from aws_stats_bot.cli.main import EXIT_CONFIG_ERROR, EXIT_SUCCESS, main
from aws_stats_bot.services.models import OutboundMessage


def _invoke(args, tmp_path):
    runner = CliRunner()
    return runner.invoke(main, ["--config-dir", str(tmp_path)] + args)


class TestCLIMainEntryPoint:

    def test_sqs_report_against_moto(self, registry, tmp_path):
        # Queues created through the moto backend are visible to the CLI's own registry.
        sqs = registry.get_client("sqs")
        for name in ["orders-prod", "orders-dev", "billing"]:
            sqs.create_queue(QueueName=name)

        result = _invoke(["sqs", "orders"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        assert "Getting sqs stats of [orders] ..." in result.output
        assert "orders-prod" in result.output
        assert "orders-dev" in result.output
        assert "billing" not in result.output

    def test_dynamodb_no_match(self, mock_aws_services, tmp_path):
        result = _invoke(["dynamodb", "users"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        assert "[users] does not match any tables." in result.output

    def test_awscost_invalid_date(self, tmp_path):
        result = _invoke(["awscost", "yesterday"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        assert "Invalid date format: [yesterday]" in result.output

    def test_awscost_uses_configured_services(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"cost_services": ["AmazonEC2"], "language": "ja"}))

        with patch("aws_stats_bot.cli.main.CostReportPipeline") as MockPipeline:
            MockPipeline.return_value.run_cost_report.return_value = []
            result = _invoke(["awscost", "2024-03-15"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        _, kwargs = MockPipeline.call_args
        assert kwargs["services"] == ["AmazonEC2"]
        assert kwargs["language"] == "ja"
        MockPipeline.return_value.run_cost_report.assert_called_once()
        assert MockPipeline.return_value.run_cost_report.call_args[0][0] == "2024-03-15"

    def test_chart_endpoint_option_reaches_pipeline(self, tmp_path):
        with patch("aws_stats_bot.cli.main.StatsReportPipeline") as MockPipeline:
            result = _invoke(["--chart-endpoint", "https://chart.example.com", "sqs", "orders"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        assert MockPipeline.call_args[1]["chart_endpoint"] == "https://chart.example.com"

    def test_invalid_chart_endpoint_exits_with_config_error(self, tmp_path):
        result = _invoke(["--chart-endpoint", "chart.example.com", "sqs", "orders"], tmp_path)

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_corrupted_config_exits_with_config_error(self, tmp_path):
        (tmp_path / "config.json").write_text("{broken")

        result = _invoke(["sqs", "orders"], tmp_path)

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Configuration error" in result.output

    def test_error_messages_are_printed(self, tmp_path):
        error = OutboundMessage(text="[ERROR]\t[FetchFailed]\t[list_tables]\t`denied`", is_error=True, kind="FetchFailed")

        def run(query, sink=None):
            sink(error)
            return [error]

        with patch("aws_stats_bot.cli.main.StatsReportPipeline") as MockPipeline:
            MockPipeline.return_value.run_stats_report.side_effect = run
            result = _invoke(["dynamodb", "users"], tmp_path)

        assert "[FetchFailed]" in result.output
        assert "denied" in result.output

    def test_purge_requires_confirmation(self, tmp_path):
        with patch("aws_stats_bot.cli.main.QueuePurgePipeline") as MockPipeline:
            result = CliRunner().invoke(main, ["--config-dir", str(tmp_path), "sqs-purge", "jobs"], input="n\n")

        assert result.exit_code == EXIT_SUCCESS
        assert "Purge cancelled" in result.output
        MockPipeline.return_value.run_purge.assert_not_called()

    def test_purge_with_yes(self, tmp_path):
        with patch("aws_stats_bot.cli.main.QueuePurgePipeline") as MockPipeline:
            MockPipeline.return_value.run_purge.return_value = []
            result = _invoke(["sqs-purge", "jobs", "--yes"], tmp_path)

        assert result.exit_code == EXIT_SUCCESS
        MockPipeline.return_value.run_purge.assert_called_once()
