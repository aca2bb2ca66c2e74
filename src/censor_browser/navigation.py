"""Navigation controller: resolves what a tab shows for its current URL."""

import asyncio
import logging
from typing import Awaitable, Callable

from .config import DelayConfig
from .models import HOME_URL, FaultCode, SiteRecord, SiteStatus, Tab
from .services import ContentGenerator, ServiceError
from .store import SiteRecordStore

logger = logging.getLogger(__name__)

Listener = Callable[[Tab], None]


class NavigationController:
    """Drives tab state from the site record store and the content generator.

    Every load takes a fresh generation number from the tab. Simulated delays
    run as plain awaits; when one finishes, the result is applied only if the
    tab has not started another load since. At most one generation call per
    URL and removal flag is in flight; concurrent loads share it.
    """

    def __init__(
        self,
        store: SiteRecordStore,
        generator: ContentGenerator,
        delays: DelayConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.generator = generator
        self.delays = delays or DelayConfig()
        self.sleep = sleep
        self._listeners: list[Listener] = []
        self._inflight: dict[tuple[str, bool], asyncio.Future] = {}

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked after every tab state change."""
        self._listeners.append(listener)

    def notify(self, tab: Tab) -> None:
        for listener in self._listeners:
            listener(tab)

    # Public operations

    async def navigate(self, tab: Tab, url: str) -> None:
        """Open a URL in the tab, adding it to history."""
        tab.push(url)
        if url == HOME_URL:
            tab.next_generation()
            tab.show_home()
            self.notify(tab)
            return
        await self._load(tab, reset_status=True)

    async def back(self, tab: Tab) -> bool:
        return await self._step(tab, -1)

    async def forward(self, tab: Tab) -> bool:
        return await self._step(tab, 1)

    async def reload(self, tab: Tab) -> None:
        """Retry the current URL; cached content is still reused."""
        if tab.is_home:
            return
        await self._load(tab)

    async def resolve(self, tab: Tab) -> None:
        """Re-resolve the tab's content after its site's status changed."""
        await self.reload(tab)

    def refresh_from_record(self, tab: Tab) -> SiteRecord | None:
        """Sync the tab's status/transcript snapshot with the store."""
        if tab.is_home:
            return None
        record = self.store.get(tab.current_url)
        if record is not None:
            tab.refresh_from_record(record)
            self.notify(tab)
        return record

    def discard(self, tab: Tab) -> None:
        """Drop any pending completions for a tab that is being closed."""
        tab.next_generation()

    # Internals

    async def _step(self, tab: Tab, offset: int) -> bool:
        if not tab.step(offset):
            return False
        if tab.is_home:
            tab.next_generation()
            tab.show_home()
            self.notify(tab)
        else:
            await self._load(tab)
        return True

    async def _load(self, tab: Tab, reset_status: bool = False) -> None:
        url = tab.current_url
        record = self.store.get(url) or self.store.upsert(url)
        generation = tab.next_generation()

        tab.loading = True
        tab.error = None
        tab.content = None
        tab.refresh_from_record(record)
        self.notify(tab)

        status = record.status
        if status is SiteStatus.BLOCKED:
            await self.sleep(self.delays.blocked)
            self._apply(tab, generation, loading=False, error=FaultCode.CONNECTION_RESET)
            return

        slowed = status is SiteStatus.SLOWED
        if record.content is not None:
            logger.debug(f"Serving {url} from cache")
            await self.sleep(self.delays.cached_slowed if slowed else self.delays.cached)
            self._apply(tab, generation, loading=False, content=record.content, title=record.title)
            return

        try:
            content = await self._generate(record, reset_status)
        except ServiceError as e:
            logger.warning(f"Content generation failed for {url}: {e}")
            await self.sleep(self.delays.failure)
            self._apply(tab, generation, loading=False, error=FaultCode.GENERATION_FAILED)
            return

        await self.sleep(self.delays.generated_slowed if slowed else self.delays.generated)
        self._apply(tab, generation, loading=False, content=content, title=record.title)

    async def _generate(self, record: SiteRecord, reset_status: bool) -> str:
        status = record.status
        key = (record.url, status is SiteStatus.CONTENT_REMOVED)
        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._generate_and_cache(record, status, reset_status))
            self._inflight[key] = future
            future.add_done_callback(lambda _: self._inflight.pop(key, None))
        else:
            logger.debug(f"Joining in-flight generation for {record.url}")
        return await asyncio.shield(future)

    async def _generate_and_cache(self, record: SiteRecord, status: SiteStatus, reset_status: bool) -> str:
        url = record.url
        removed = status is SiteStatus.CONTENT_REMOVED
        content = await self.generator.generate(url, record.title, removed)

        current = self.store.get(url)
        if not removed and current is not None and current.status is SiteStatus.CONTENT_REMOVED:
            # Content was taken down while this call was pending.
            logger.info(f"Not caching pre-removal content for {url}")
            return current.content if current.content is not None else content

        fields = {"content": content}
        if (
            reset_status
            and status is not SiteStatus.CONTENT_REMOVED
            and current is not None
            and current.status is status
        ):
            fields["status"] = SiteStatus.NORMAL
        self.store.upsert(url, **fields)
        logger.info(f"Cached generated content for {url}")
        return content

    def _apply(self, tab: Tab, generation: int, **fields) -> bool:
        if tab.generation != generation:
            logger.debug(f"Discarding stale completion for {tab.id}")
            return False
        for name, value in fields.items():
            setattr(tab, name, value)
        if "status" not in fields and not tab.is_home:
            record = self.store.get(tab.current_url)
            if record is not None:
                tab.status = record.status
        self.notify(tab)
        return True
