"""Tests for the appeals court."""

import pytest
import pytest_asyncio

from censor_browser.court import CONTENT_PLACEHOLDER
from censor_browser.models import FaultCode, SiteStatus, Speaker, TranscriptEntry, Verdict

URL = "https://example.com/"


@pytest_asyncio.fixture
async def appealed_tab(session, store, navigator, tab):
    await navigator.navigate(tab, URL)
    store.upsert(URL, status=SiteStatus.UNDER_APPEAL)
    store.append_transcript(URL, TranscriptEntry(Speaker.REGULATOR, "Remove it.", 1.0))
    navigator.refresh_from_record(tab)
    return tab


@pytest.mark.asyncio
async def test_open_court_passes_case_to_adjudicator(session, adjudicator, appealed_tab):
    verdict = await session.court.open_court(appealed_tab)

    assert verdict == adjudicator.verdict
    title, content, transcript = adjudicator.calls[0]
    assert title == "example.com"
    assert content == "<p>Hello</p>"
    assert [e.text for e in transcript] == ["Remove it."]
    assert session.court.is_open is True
    assert session.court.loading is False
    assert session.court.verdict == verdict


@pytest.mark.asyncio
async def test_verdict_is_not_applied_until_accepted(session, store, appealed_tab):
    await session.court.open_court(appealed_tab)

    assert store.get(URL).status is SiteStatus.UNDER_APPEAL


@pytest.mark.asyncio
async def test_uphold_blocks_site(session, store, appealed_tab):
    await session.court.open_court(appealed_tab)

    status = await session.court.close_court(Verdict.UPHOLD)

    assert status is SiteStatus.BLOCKED
    assert store.get(URL).status is SiteStatus.BLOCKED
    assert appealed_tab.status is SiteStatus.BLOCKED
    assert appealed_tab.error is FaultCode.CONNECTION_RESET
    assert session.court.is_open is False


@pytest.mark.asyncio
async def test_overturn_restores_site(session, store, sleep, appealed_tab):
    await session.court.open_court(appealed_tab)
    loads = len(sleep.delays)

    status = await session.court.close_court(Verdict.OVERTURN)

    assert status is SiteStatus.NORMAL
    assert store.get(URL).status is SiteStatus.NORMAL
    assert appealed_tab.status is SiteStatus.NORMAL
    assert appealed_tab.content == "<p>Hello</p>"
    assert len(sleep.delays) == loads + 1


@pytest.mark.asyncio
async def test_adjudicator_failure_upholds_by_default(session, adjudicator, appealed_tab):
    adjudicator.fail = True

    verdict = await session.court.open_court(appealed_tab)

    assert verdict.verdict is Verdict.UPHOLD
    assert verdict.reasoning
    assert session.court.loading is False


@pytest.mark.asyncio
async def test_missing_content_uses_placeholder(session, store, adjudicator, tab):
    store.upsert(URL, status=SiteStatus.UNDER_APPEAL)
    tab.push(URL)
    session.navigator.refresh_from_record(tab)

    await session.court.open_court(tab)

    assert adjudicator.calls[0][1] == CONTENT_PLACEHOLDER


@pytest.mark.asyncio
async def test_court_refuses_sites_not_under_appeal(session, navigator, adjudicator, tab):
    await navigator.navigate(tab, URL)

    assert await session.court.open_court(tab) is None
    assert session.court.is_open is False
    assert await session.court.close_court(Verdict.UPHOLD) is None
    assert adjudicator.calls == []


@pytest.mark.asyncio
async def test_ruling_applies_to_appealed_site_after_tab_moves(session, store, navigator, tab):
    other = "https://other.example/"
    await navigator.navigate(tab, other)
    await navigator.navigate(tab, URL)
    store.upsert(URL, status=SiteStatus.UNDER_APPEAL)
    navigator.refresh_from_record(tab)
    await session.court.open_court(tab)

    await navigator.back(tab)
    status = await session.court.close_court(Verdict.UPHOLD)

    assert status is SiteStatus.BLOCKED
    assert store.get(URL).status is SiteStatus.BLOCKED
    assert store.get(other).status is SiteStatus.NORMAL
    assert tab.current_url == other
    assert tab.status is SiteStatus.NORMAL
    assert tab.error is None


@pytest.mark.asyncio
async def test_ruling_after_tab_went_home_leaves_tab_alone(session, store, navigator, sleep, appealed_tab):
    await session.court.open_court(appealed_tab)
    await navigator.back(appealed_tab)
    loads = len(sleep.delays)

    await session.court.close_court(Verdict.OVERTURN)

    assert store.get(URL).status is SiteStatus.NORMAL
    assert appealed_tab.is_home
    assert len(sleep.delays) == loads
