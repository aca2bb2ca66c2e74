"""Chat with the owner of the site open in a tab."""

import logging

from .models import SiteStatus, Speaker, Tab, TranscriptEntry
from .navigation import NavigationController
from .services import NegotiationEngine, NegotiationReply, ServiceError, fallback_negotiation_reply

logger = logging.getLogger(__name__)


class Negotiator:
    """Sends regulator messages and records owner replies.

    Both sides of every exchange are persisted to the site record, including
    failed ones. An owner agreeing to remove content moves the site to
    CONTENT_REMOVED and drops its cached page so it is regenerated.
    """

    def __init__(self, navigator: NavigationController, engine: NegotiationEngine):
        self.navigator = navigator
        self.store = navigator.store
        self.engine = engine

    def can_negotiate(self, tab: Tab) -> bool:
        return not tab.is_home and tab.status is not SiteStatus.UNDER_APPEAL

    def _accepts_messages(self, tab: Tab, url: str) -> bool:
        if url == tab.current_url:
            return self.can_negotiate(tab)
        record = self.store.get(url)
        return record is not None and record.status is not SiteStatus.UNDER_APPEAL

    async def send_message(self, tab: Tab, text: str, url: str | None = None) -> NegotiationReply | None:
        """Send a message to the owner of `url` (the tab's current site by default).

        The tab only mirrors the exchange while it is showing that site.
        """
        text = text.strip()
        url = url or tab.current_url
        if not text or not self._accepts_messages(tab, url):
            return None

        message = TranscriptEntry(Speaker.REGULATOR, text)
        record = self.store.append_transcript(url, message)
        if tab.current_url == url:
            tab.transcript = list(record.transcript)
            tab.reply_pending = True
            self.navigator.notify(tab)

        try:
            reply = await self.engine.negotiate(url, list(record.transcript))
        except ServiceError as e:
            logger.warning(f"Negotiation with {url} failed: {e}")
            reply = fallback_negotiation_reply()

        record = self.store.append_transcript(url, TranscriptEntry(Speaker.OWNER, reply.reply))
        if reply.agreed_to_remove:
            logger.info(f"Owner of {url} agreed to remove content")
            record = self.store.upsert(url, status=SiteStatus.CONTENT_REMOVED, content=None)

        # The tab may have moved on while waiting for the reply.
        tab.reply_pending = False
        if tab.current_url != url:
            self.navigator.notify(tab)
            return reply

        tab.refresh_from_record(record)
        self.navigator.notify(tab)
        if reply.agreed_to_remove:
            await self.navigator.resolve(tab)
        return reply
