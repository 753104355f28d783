"""
Main CLI entry point for AWS Stats Bot.

Wires the report pipelines to a terminal: each command builds its pipeline from
the shared client registry and prints every outbound message as it arrives.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from aws_stats_bot import __version__
from aws_stats_bot.core.clients import ClientRegistry
from aws_stats_bot.core.config import Config, ConfigManager
from aws_stats_bot.core.exceptions import ConfigurationError
from aws_stats_bot.core.i18n import resolve_language
from aws_stats_bot.services.chart import ChartDelegate
from aws_stats_bot.services.costs import CloudWatchCostSource, CostExplorerCostSource
from aws_stats_bot.services.dynamodb import DynamoDBTableCatalog
from aws_stats_bot.services.metrics import MetricReducer
from aws_stats_bot.services.models import OutboundMessage
from aws_stats_bot.services.pipeline import CostReportPipeline, StatsReportPipeline
from aws_stats_bot.services.purge import PurgePolicy, QueuePurgePipeline
from aws_stats_bot.services.sqs import SQSQueueCatalog


console = Console()

# Exit codes for different error types
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 2


class BotContext:
    """Process-lifetime state shared by every command."""

    def __init__(self, config: Config, registry: ClientRegistry, chart_endpoint: Optional[str], language: str):
        self.config = config
        self.registry = registry
        self.chart_endpoint = chart_endpoint
        self.language = language
        self.reducer = MetricReducer(registry)
        self.chart_delegate = ChartDelegate(default_endpoint=config.effective_chart_endpoint())


def print_message(outbound: OutboundMessage) -> None:
    """Reply sink writing one message to the console."""
    if outbound.is_error:
        console.print(outbound.text, style="red", markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(outbound.text, markup=False, highlight=False, soft_wrap=True)


def _stats_pipeline(bot: BotContext, catalog, metrics) -> StatsReportPipeline:
    return StatsReportPipeline(
        catalog,
        reducer=bot.reducer,
        chart_delegate=bot.chart_delegate,
        max_border=bot.config.max_border,
        metrics=metrics,
        chart_endpoint=bot.chart_endpoint,
        show_metrics=bot.config.show_metrics,
        language=bot.language,
    )


@click.group()
@click.option("--region", help="AWS region (defaults to configured region)")
@click.option("--profile", help="AWS profile used to build the session")
@click.option("--chart-endpoint", help="Chart service endpoint for single-resource reports")
@click.option("--lang", type=click.Choice(["en", "ja"]), help="Report language")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Configuration directory (defaults to ~/.aws-stats-bot)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
    region: Optional[str] = None,
    profile: Optional[str] = None,
    chart_endpoint: Optional[str] = None,
    lang: Optional[str] = None,
    config_dir: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """
    AWS Stats Bot - stats and cost reports for AWS resources.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ConfigManager(config_dir).load_or_default()
    except ConfigurationError as e:
        console.print(f"❌ [red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(EXIT_CONFIG_ERROR)

    if chart_endpoint and not chart_endpoint.startswith(("http://", "https://")):
        console.print(f"❌ [red]Invalid chart endpoint: {escape(chart_endpoint)}[/red]")
        sys.exit(EXIT_CONFIG_ERROR)

    registry = ClientRegistry(
        region=region or config.default_region,
        profile_name=profile or config.profile_name,
    )
    ctx.obj = BotContext(
        config=config,
        registry=registry,
        chart_endpoint=chart_endpoint,
        language=resolve_language(lang or config.language),
    )


@main.command()
@click.argument("query", default="")
@click.option("--metric", "metrics", multiple=True, help="Metric to fetch (repeatable)")
@click.pass_obj
def sqs(bot: BotContext, query: str, metrics) -> None:
    """Get stats of SQS queues whose name contains QUERY."""
    pipeline = _stats_pipeline(bot, SQSQueueCatalog(bot.registry), list(metrics) or bot.config.sqs_metrics)
    pipeline.run_stats_report(query, sink=print_message)


@main.command()
@click.argument("query", default="")
@click.option("--metric", "metrics", multiple=True, help="Metric to fetch (repeatable)")
@click.pass_obj
def dynamodb(bot: BotContext, query: str, metrics) -> None:
    """Get stats of DynamoDB tables whose name contains QUERY."""
    pipeline = _stats_pipeline(bot, DynamoDBTableCatalog(bot.registry), list(metrics) or bot.config.dynamodb_metrics)
    pipeline.run_stats_report(query, sink=print_message)


@main.command()
@click.argument("date", default="")
@click.option("--service", "services", multiple=True, help="Billed service to list (repeatable)")
@click.option("--source", type=click.Choice(["cloudwatch", "costexplorer"]), help="Cost data source")
@click.pass_obj
def awscost(bot: BotContext, date: str, services, source: Optional[str]) -> None:
    """Get AWS cost of DATE (YYYY-MM-DD, yesterday by default)."""
    if (source or bot.config.cost_source) == "costexplorer":
        cost_source = CostExplorerCostSource(bot.registry)
    else:
        cost_source = CloudWatchCostSource(bot.reducer)
    pipeline = CostReportPipeline(
        cost_source,
        services=list(services) or bot.config.cost_services,
        language=bot.language,
    )
    pipeline.run_cost_report(date, sink=print_message)


@main.command(name="sqs-purge")
@click.argument("queue_name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def sqs_purge(bot: BotContext, queue_name: str, yes: bool) -> None:
    """Purge every message in the SQS queue QUEUE_NAME."""
    if not yes and not click.confirm(f"Purge all messages in [{queue_name}]?", default=False):
        console.print("⚠️  [yellow]Purge cancelled[/yellow]")
        return
    pipeline = QueuePurgePipeline(
        SQSQueueCatalog(bot.registry),
        policy=PurgePolicy.from_config(bot.config),
        language=bot.language,
    )
    pipeline.run_purge(queue_name, sink=print_message)


if __name__ == "__main__":
    main()
