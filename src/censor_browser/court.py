"""Appeals court: adjudicates sites under appeal."""

import logging

from .models import CourtVerdict, SiteStatus, Tab, Verdict
from .navigation import NavigationController
from .services import Adjudicator, ServiceError, fallback_verdict

logger = logging.getLogger(__name__)

CONTENT_PLACEHOLDER = "Empty content"


class Court:
    """State of the court view and the transitions it can cause.

    A verdict is only held for display until the user accepts it with
    close_court(); only then does the appealed site's status change. The
    site is the one open when the court was convened, wherever the tab has
    gone since.
    """

    def __init__(self, navigator: NavigationController, adjudicator: Adjudicator):
        self.navigator = navigator
        self.store = navigator.store
        self.adjudicator = adjudicator
        self.tab: Tab | None = None
        self.url: str | None = None
        self.is_open = False
        self.loading = False
        self.verdict: CourtVerdict | None = None

    async def open_court(self, tab: Tab) -> CourtVerdict | None:
        """Hear the appeal for the tab's site. No-op unless it is under appeal."""
        if tab.is_home or tab.status is not SiteStatus.UNDER_APPEAL:
            return None

        self.tab = tab
        url = tab.current_url
        self.url = url
        self.is_open = True
        self.loading = True
        self.verdict = None

        try:
            verdict = await self.adjudicator.adjudicate(
                tab.title, tab.content or CONTENT_PLACEHOLDER, list(tab.transcript)
            )
        except ServiceError as e:
            logger.warning(f"Adjudication failed for {url}, upholding by default: {e}")
            verdict = fallback_verdict()

        logger.info(f"Court verdict for {url}: {verdict.verdict.value} ({verdict.judge_name})")
        self.verdict = verdict
        self.loading = False
        return verdict

    async def close_court(self, final_verdict: Verdict) -> SiteStatus | None:
        """Accept a verdict: UPHOLD blocks the site, OVERTURN restores it."""
        tab, url = self.tab, self.url
        if tab is None or url is None or self.loading:
            return None

        status = SiteStatus.BLOCKED if final_verdict is Verdict.UPHOLD else SiteStatus.NORMAL
        self.is_open = False
        self.tab = None
        self.url = None
        self.verdict = None

        self.store.upsert(url, status=status)
        logger.info(f"Court ruling applied to {url}: {status.value}")
        if tab.current_url == url:
            self.navigator.refresh_from_record(tab)
            await self.navigator.resolve(tab)
        return status
