"""Tests for block, throttle and restore."""

import random

import pytest
import pytest_asyncio

from censor_browser.court import Court
from censor_browser.enforcement import Enforcement
from censor_browser.models import FaultCode, SiteStatus, Tab

URL = "https://example.com/"


@pytest_asyncio.fixture
async def loaded_tab(navigator, tab):
    await navigator.navigate(tab, URL)
    return tab


@pytest.mark.asyncio
async def test_block_appeal_rate_is_about_forty_percent(navigator, adjudicator):
    enforcement = Enforcement(navigator, Court(navigator, adjudicator), 0.4, rng=random.Random(42))
    outcomes = []
    for _ in range(1000):
        tab = Tab()
        tab.push(URL)
        outcomes.append(await enforcement.block(tab))

    appeals = outcomes.count(SiteStatus.UNDER_APPEAL)
    assert 350 <= appeals <= 450
    assert outcomes.count(SiteStatus.BLOCKED) == 1000 - appeals


@pytest.mark.asyncio
async def test_block_without_appeal_shows_connection_reset(navigator, adjudicator, store, loaded_tab):
    enforcement = Enforcement(navigator, Court(navigator, adjudicator), appeal_probability=0.0)

    status = await enforcement.block(loaded_tab)

    assert status is SiteStatus.BLOCKED
    assert store.get(URL).status is SiteStatus.BLOCKED
    assert loaded_tab.status is SiteStatus.BLOCKED
    assert loaded_tab.error is FaultCode.CONNECTION_RESET
    assert loaded_tab.content is None


@pytest.mark.asyncio
async def test_block_with_appeal_keeps_site_reachable(navigator, adjudicator, store, loaded_tab):
    enforcement = Enforcement(navigator, Court(navigator, adjudicator), appeal_probability=1.0)

    status = await enforcement.block(loaded_tab)

    assert status is SiteStatus.UNDER_APPEAL
    assert store.get(URL).status is SiteStatus.UNDER_APPEAL
    assert loaded_tab.status is SiteStatus.UNDER_APPEAL
    assert loaded_tab.content == "<p>Hello</p>"


@pytest.mark.asyncio
async def test_throttle_uses_long_delay_on_next_load(session, store, sleep, loaded_tab):
    status = await session.enforcement.throttle(loaded_tab)

    assert status is SiteStatus.SLOWED
    assert store.get(URL).status is SiteStatus.SLOWED
    assert loaded_tab.status is SiteStatus.SLOWED
    assert sleep.delays[-1] == 5.0
    assert loaded_tab.content == "<p>Hello</p>"


@pytest.mark.asyncio
async def test_restore_unblocks(session, store, loaded_tab):
    store.upsert(URL, status=SiteStatus.BLOCKED)
    await session.navigator.reload(loaded_tab)
    assert loaded_tab.error is FaultCode.CONNECTION_RESET

    status = await session.enforcement.restore(loaded_tab)

    assert status is SiteStatus.NORMAL
    assert loaded_tab.error is None
    assert loaded_tab.content == "<p>Hello</p>"


@pytest.mark.asyncio
async def test_repeated_action_re_resolves_each_time(session, sleep, loaded_tab):
    before = len(sleep.delays)
    await session.enforcement.throttle(loaded_tab)
    await session.enforcement.throttle(loaded_tab)

    assert loaded_tab.status is SiteStatus.SLOWED
    assert len(sleep.delays) == before + 2


@pytest.mark.asyncio
async def test_actions_on_home_tab_are_noops(session, store, tab):
    assert await session.enforcement.block(tab) is None
    assert await session.enforcement.throttle(tab) is None
    assert await session.enforcement.restore(tab) is None
    assert await session.enforcement.open_appeal(tab) is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_block_and_throttle_locked_under_appeal(session, store, loaded_tab):
    store.upsert(URL, status=SiteStatus.UNDER_APPEAL)
    session.navigator.refresh_from_record(loaded_tab)

    assert await session.enforcement.block(loaded_tab) is None
    assert await session.enforcement.throttle(loaded_tab) is None
    assert store.get(URL).status is SiteStatus.UNDER_APPEAL


@pytest.mark.asyncio
async def test_open_appeal_requires_under_appeal(session, adjudicator, loaded_tab):
    assert await session.enforcement.open_appeal(loaded_tab) is None
    assert adjudicator.calls == []
