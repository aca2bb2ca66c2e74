"""Browser session: the open tabs and the regulator's tools."""

import asyncio
import logging
import random
from typing import Awaitable, Callable

from .config import Config
from .court import Court
from .enforcement import Enforcement
from .llm import (
    LLMAdjudicator,
    LLMClient,
    LLMContentGenerator,
    LLMNegotiationEngine,
    LLMSearchProvider,
)
from .models import HOME_URL, SearchResult, Tab
from .navigation import NavigationController
from .negotiation import Negotiator
from .services import (
    Adjudicator,
    ContentGenerator,
    NegotiationEngine,
    SearchProvider,
    ServiceError,
    fallback_search_results,
)
from .store import JsonFileBackend, MemoryBackend, SiteRecordStore
from .urls import parse_address, resolve_href

logger = logging.getLogger(__name__)


class BrowserSession:
    """Owns the tab set and routes user actions to the right component."""

    def __init__(
        self,
        config: Config,
        store: SiteRecordStore,
        generator: ContentGenerator,
        search_provider: SearchProvider,
        negotiation_engine: NegotiationEngine,
        adjudicator: Adjudicator,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.store = store
        self.search_provider = search_provider
        self.navigator = NavigationController(store, generator, config.delays, sleep=sleep)
        self.court = Court(self.navigator, adjudicator)
        self.enforcement = Enforcement(
            self.navigator, self.court, config.appeal_probability, rng=rng
        )
        self.negotiator = Negotiator(self.navigator, negotiation_engine)

        first = Tab()
        self.tabs: list[Tab] = [first]
        self.active_tab_id = first.id
        self.searching = False
        self.search_results: list[SearchResult] = []

    @classmethod
    def from_config(cls, config: Config, persist: bool = True) -> "BrowserSession":
        """Build a session backed by the configured LLM endpoint."""
        backend = JsonFileBackend(config.store_path) if persist else MemoryBackend()
        llm = LLMClient(config)
        return cls(
            config,
            SiteRecordStore(backend),
            LLMContentGenerator(llm),
            LLMSearchProvider(llm),
            LLMNegotiationEngine(llm),
            LLMAdjudicator(llm),
        )

    # Tabs

    @property
    def active_tab(self) -> Tab:
        return self.get_tab(self.active_tab_id) or self.tabs[0]

    def get_tab(self, tab_id: str) -> Tab | None:
        for tab in self.tabs:
            if tab.id == tab_id:
                return tab
        return None

    def new_tab(self) -> Tab:
        tab = Tab()
        self.tabs.append(tab)
        self.active_tab_id = tab.id
        return tab

    def close_tab(self, tab_id: str) -> bool:
        """Close a tab. The last remaining tab cannot be closed."""
        tab = self.get_tab(tab_id)
        if tab is None or len(self.tabs) == 1:
            return False
        self.navigator.discard(tab)
        self.tabs.remove(tab)
        if self.active_tab_id == tab_id:
            self.active_tab_id = self.tabs[-1].id
        return True

    def switch_tab(self, tab_id: str) -> bool:
        if self.get_tab(tab_id) is None:
            return False
        self.active_tab_id = tab_id
        return True

    def cycle_tab(self, offset: int) -> Tab:
        index = self.tabs.index(self.active_tab)
        tab = self.tabs[(index + offset) % len(self.tabs)]
        self.active_tab_id = tab.id
        return tab

    # Navigation

    async def navigate(self, url: str, tab: Tab | None = None) -> None:
        await self.navigator.navigate(tab or self.active_tab, url)

    async def submit_address(self, text: str) -> None:
        """Handle input from the address bar: either a URL or a search."""
        parsed = parse_address(text)
        if parsed is None:
            return
        kind, value = parsed
        if kind == "search":
            await self.search(value)
        else:
            await self.navigate(value)

    async def follow_link(self, href: str) -> bool:
        """Follow a link found on the active tab's page."""
        tab = self.active_tab
        url = resolve_href(tab.current_url, href)
        if url is None:
            return False
        await self.navigator.navigate(tab, url)
        return True

    async def search(self, query: str) -> list[SearchResult]:
        """Search from the start page; falls back to a fixed list on failure."""
        tab = self.active_tab
        if not tab.is_home:
            await self.navigator.navigate(tab, HOME_URL)

        self.searching = True
        self.search_results = []
        self.navigator.notify(tab)
        try:
            results = await self.search_provider.search(query)
        except ServiceError as e:
            logger.warning(f"Search for {query!r} failed: {e}")
            results = fallback_search_results()
        finally:
            self.searching = False

        self.search_results = results[:self.config.max_search_results]
        self.navigator.notify(tab)
        return self.search_results
