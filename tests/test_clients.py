"""Tests for the once-initialized client registry."""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from botocore.exceptions import NoRegionError

from aws_stats_bot.core.clients import ClientRegistry
from aws_stats_bot.core.exceptions import ProviderUnavailable


def _slow_session(created):
    session = Mock()
    barrier = threading.Event()

    def client(service_name, region_name=None):
        barrier.wait(0.05)
        created.append(service_name)
        return Mock(name=service_name)

    session.client.side_effect = client
    return session


class TestClientRegistry:

    def test_concurrent_first_use_creates_one_client(self):
        created = []
        registry = ClientRegistry(session_factory=lambda: _slow_session(created))

        with ThreadPoolExecutor(max_workers=8) as executor:
            clients = list(executor.map(lambda _: registry.get_client("sqs"), range(16)))

        assert created == ["sqs"]
        assert all(c is clients[0] for c in clients)

    def test_clients_are_per_service(self):
        created = []
        registry = ClientRegistry(session_factory=lambda: _slow_session(created))

        registry.get_client("sqs")
        registry.get_client("cloudwatch")
        registry.get_client("sqs")

        assert created == ["sqs", "cloudwatch"]

    def test_construction_error_is_remembered(self):
        session = Mock()
        session.client.side_effect = NoRegionError()
        registry = ClientRegistry(session_factory=lambda: session)

        with pytest.raises(ProviderUnavailable) as first:
            registry.get_client("dynamodb")
        with pytest.raises(ProviderUnavailable) as second:
            registry.get_client("dynamodb")

        assert first.value is second.value
        assert first.value.stage == "get_dynamodb_client"
        assert session.client.call_count == 1

    def test_builds_real_boto3_client(self, mock_aws_services):
        client = ClientRegistry(region="eu-west-1").get_client("sqs")

        assert client.meta.region_name == "eu-west-1"
