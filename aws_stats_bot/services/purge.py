"""
SQS queue purge guarded by allow and deny lists.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Pattern
import logging
import re

from .models import OutboundMessage
from .pipeline import Sink, Outbox
from .render import SEPARATOR, code_block
from .sqs import SQSQueueCatalog
from ..core.exceptions import StatsBotError
from ..core.i18n import DEFAULT_LANGUAGE, message


logger = logging.getLogger(__name__)


@dataclass
class PurgePolicy:
    """Which queue names may be purged."""
    use_blacklist: bool = False
    blacklist: List[str] = field(default_factory=list)
    use_whitelist: bool = False
    whitelist: List[str] = field(default_factory=list)
    whitelist_patterns: List[Pattern] = field(default_factory=list)

    @classmethod
    def from_config(cls, config) -> 'PurgePolicy':
        return cls(
            use_blacklist=config.purge_use_blacklist,
            blacklist=list(config.purge_blacklist),
            use_whitelist=config.purge_use_whitelist,
            whitelist=list(config.purge_whitelist),
            whitelist_patterns=[re.compile(p) for p in config.purge_whitelist_patterns],
        )

    def is_blacklisted(self, name: str) -> bool:
        return self.use_blacklist and name in self.blacklist

    def is_whitelisted(self, name: str) -> bool:
        if not self.use_whitelist:
            return True
        if name in self.whitelist:
            return True
        return any(pattern.search(name) for pattern in self.whitelist_patterns)

    def is_permitted(self, name: str) -> bool:
        return bool(name) and not self.is_blacklisted(name) and self.is_whitelisted(name)


class QueuePurgePipeline:
    """Shows a queue's message counts, then purges it."""

    def __init__(self, catalog: SQSQueueCatalog, policy: Optional[PurgePolicy] = None, language: str = DEFAULT_LANGUAGE):
        self.catalog = catalog
        self.policy = policy or PurgePolicy()
        self.language = language

    def run_purge(self, queue_name: str, sink: Optional[Sink] = None) -> List[OutboundMessage]:
        """Purge one queue named exactly.

        Args:
            queue_name: Exact queue name
            sink: Optional callable receiving each message as it is produced

        Returns:
            Every message produced, in order
        """
        outbox = Outbox(sink)
        queue_name = (queue_name or '').strip()

        if not self.policy.is_permitted(queue_name):
            logger.warning(f"Refused to purge queue [{queue_name}]")
            outbox.send(message("Queue Name: [%s] is not permitted to be purged", queue_name, language=self.language))
            return outbox.messages

        try:
            self.catalog.ensure_client()
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(message("Getting sqs stats of [%s] ...", queue_name, language=self.language))

        try:
            counts = self.catalog.get_message_counts(queue_name)
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(code_block([
            f"[{queue_name}]",
            SEPARATOR,
            f"Visible\t:\t{counts['visible']}",
            f"NotVisible\t:\t{counts['not_visible']}",
        ]))

        try:
            self.catalog.purge(queue_name)
        except StatsBotError as e:
            outbox.error(e)
            return outbox.messages

        outbox.send(message("SQS: [%s] has been purged!", queue_name, language=self.language))
        return outbox.messages
