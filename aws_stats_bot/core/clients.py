"""Once-initialized boto3 clients shared across report requests."""

import logging
import threading
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError

from aws_stats_bot.core.exceptions import ProviderUnavailable


logger = logging.getLogger(__name__)


class ClientRegistry:
    """Creates each AWS service client at most once and reuses it.

    A failed construction is remembered too, so every caller racing on the first
    use sees either the same client or the same ProviderUnavailable error.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile_name: Optional[str] = None,
        session_factory: Optional[Callable[[], boto3.Session]] = None,
    ):
        """Initialize the registry.

        Args:
            region: AWS region passed to every client
            profile_name: Optional boto3 profile
            session_factory: Optional callable returning a boto3 session,
                             used instead of region/profile when given
        """
        self.region = region
        self.profile_name = profile_name
        self._session_factory = session_factory
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[str, Any] = {}
        self._errors: Dict[str, ProviderUnavailable] = {}
        self._lock = threading.Lock()

    def get_client(self, service_name: str) -> Any:
        """Return the memoized client for a service, creating it on first use.

        Raises:
            ProviderUnavailable: If the session or client cannot be built
        """
        with self._lock:
            if service_name in self._clients:
                return self._clients[service_name]
            if service_name in self._errors:
                raise self._errors[service_name]

            try:
                client = self._get_session().client(service_name, region_name=self.region)
            except BotoCoreError as e:
                error = ProviderUnavailable(
                    f"Failed to create {service_name} client: {e}",
                    details=str(e),
                    stage=f"get_{service_name}_client",
                )
                self._errors[service_name] = error
                logger.error(error.message)
                raise error

            logger.debug(f"Created {service_name} client (region={self.region})")
            self._clients[service_name] = client
            return client

    def _get_session(self) -> boto3.Session:
        if self._session is None:
            if self._session_factory is not None:
                self._session = self._session_factory()
            else:
                self._session = boto3.Session(profile_name=self.profile_name, region_name=self.region)
        return self._session
