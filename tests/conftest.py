"""
Pytest configuration and shared fixtures for AWS Stats Bot tests.
"""

import os
from datetime import datetime, timezone
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

from aws_stats_bot.core.clients import ClientRegistry
from aws_stats_bot.services.models import ResourceStat


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so no test can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("CHART_ANGEL_ENDPOINT", raising=False)
    monkeypatch.delenv("AWS_STATS_BOT_LANG", raising=False)


@pytest.fixture
def mock_aws_services():
    """Mock all AWS services used by the application."""
    with mock_aws():
        yield


@pytest.fixture
def registry(mock_aws_services):
    """Client registry backed by moto."""
    return ClientRegistry(session_factory=lambda: boto3.Session(region_name="us-east-1"), region="us-east-1")


@pytest.fixture
def fake_clients():
    """Client provider returning one Mock client per service name."""
    clients = {}

    def get_client(service_name):
        return clients.setdefault(service_name, Mock(name=f"{service_name}-client"))

    provider = Mock()
    provider.get_client.side_effect = get_client
    provider.clients = clients
    return provider


@pytest.fixture
def sample_universe():
    """Listing used by the end-to-end scenarios."""
    return [ResourceStat(name=name) for name in ["orders-prod", "orders-dev", "billing"]]


@pytest.fixture
def now():
    return datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
