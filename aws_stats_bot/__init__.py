"""
AWS Stats Bot - Chat-operated stats and cost reports for AWS accounts.

Resolves SQS queues, DynamoDB tables and billed services by name, reduces their
CloudWatch metrics and renders compact text reports suitable for a chat channel.
"""

__version__ = "1.0.0"

from aws_stats_bot.core.exceptions import StatsBotError

__all__ = ["StatsBotError"]
