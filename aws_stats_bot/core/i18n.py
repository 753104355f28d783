"""Message catalogue for user-facing report text."""

import os
from typing import Dict


DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "ja")

# English text is the key; other languages map it to a translation.
_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "Getting sqs stats of [%s] ...": {
        "ja": "[%s] のSQS情報を取得中...",
    },
    "Getting dynamodb stats of [%s] ...": {
        "ja": "[%s] のDynamoDB情報を取得中...",
    },
    "[%s] does not match any queues.": {
        "ja": "[%s] に一致するキューはありません。",
    },
    "[%s] does not match any tables.": {
        "ja": "[%s] に一致するテーブルはありません。",
    },
    "SQS Metrics (Maximum): %s": {
        "ja": "SQSメトリクス (最大値): %s",
    },
    "DynamoDB Metrics (Maximum): %s": {
        "ja": "DynamoDBメトリクス (最大値): %s",
    },
    "[Metrics] %s (last %d minutes)": {
        "ja": "[メトリクス] %s (直近%d分)",
    },
    "Invalid date format: [%s]": {
        "ja": "日付の指定が不正です: [%s]",
    },
    "Getting costs on [%s]...": {
        "ja": "[%s] のコストを取得中...",
    },
    "[AWS Estimate Costs] %s": {
        "ja": "[AWS概算コスト] %s",
    },
    "Queue Name: [%s] is not permitted to be purged": {
        "ja": "キュー: [%s] のパージは許可されていません",
    },
    "SQS: [%s] has been purged!": {
        "ja": "SQS: [%s] をパージしました!",
    },
}


def resolve_language(language: str = None) -> str:
    """Pick the message language, falling back to AWS_STATS_BOT_LANG then English."""
    language = language or os.environ.get("AWS_STATS_BOT_LANG", DEFAULT_LANGUAGE)
    if language not in SUPPORTED_LANGUAGES:
        return DEFAULT_LANGUAGE
    return language


def message(key: str, *args, language: str = DEFAULT_LANGUAGE) -> str:
    """Translate a catalogue key and interpolate printf-style arguments.

    Args:
        key: English message text, also used as the lookup key
        *args: Values substituted into the message
        language: Target language code

    Returns:
        Translated message, or the English text when no translation exists
    """
    template = _TRANSLATIONS.get(key, {}).get(language, key)
    if args:
        return template % args
    return template


def comma_number(value: int) -> str:
    """Format an integer with thousands separators."""
    return "{:,}".format(int(value))
