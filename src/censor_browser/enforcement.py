"""Regulator actions against the site open in a tab."""

import logging
import random

from .court import Court
from .models import CourtVerdict, SiteStatus, Tab
from .navigation import NavigationController

logger = logging.getLogger(__name__)

DEFAULT_APPEAL_PROBABILITY = 0.4


class Enforcement:
    """Block, throttle and restore sites.

    Every action writes the record, refreshes the tab's snapshot and then
    re-resolves the tab's content, even if the status did not change.
    """

    def __init__(
        self,
        navigator: NavigationController,
        court: Court,
        appeal_probability: float = DEFAULT_APPEAL_PROBABILITY,
        rng: random.Random | None = None,
    ):
        self.navigator = navigator
        self.store = navigator.store
        self.court = court
        self.appeal_probability = appeal_probability
        self.rng = rng or random.Random()

    async def block(self, tab: Tab) -> SiteStatus | None:
        """Block the site. The owner may file an emergency appeal instead."""
        if tab.is_home or tab.status is SiteStatus.UNDER_APPEAL:
            return None
        if self.rng.random() < self.appeal_probability:
            status = SiteStatus.UNDER_APPEAL
            logger.info(f"Owner of {tab.current_url} filed an emergency appeal")
        else:
            status = SiteStatus.BLOCKED
        await self._set_status(tab, status)
        return status

    async def throttle(self, tab: Tab) -> SiteStatus | None:
        if tab.is_home or tab.status is SiteStatus.UNDER_APPEAL:
            return None
        await self._set_status(tab, SiteStatus.SLOWED)
        return SiteStatus.SLOWED

    async def restore(self, tab: Tab) -> SiteStatus | None:
        if tab.is_home:
            return None
        await self._set_status(tab, SiteStatus.NORMAL)
        return SiteStatus.NORMAL

    async def open_appeal(self, tab: Tab) -> CourtVerdict | None:
        """Take a site under appeal to court."""
        if tab.is_home or tab.status is not SiteStatus.UNDER_APPEAL:
            return None
        return await self.court.open_court(tab)

    async def _set_status(self, tab: Tab, status: SiteStatus) -> None:
        url = tab.current_url
        self.store.upsert(url, status=status)
        logger.info(f"Set {url} to {status.value}")
        self.navigator.refresh_from_record(tab)
        await self.navigator.resolve(tab)
