"""Tests for tab management, the address bar and search."""

import pytest

from censor_browser.models import HOME_URL, SearchResult
from censor_browser.services import FALLBACK_SEARCH_RESULTS
from censor_browser.urls import hostname, parse_address, resolve_href

URL = "https://example.com/news/1"


def test_session_starts_with_one_home_tab(session):
    assert len(session.tabs) == 1
    assert session.active_tab.is_home
    assert session.active_tab.history == [HOME_URL]


def test_new_tab_becomes_active(session):
    tab = session.new_tab()

    assert session.active_tab is tab
    assert len(session.tabs) == 2


def test_last_tab_cannot_be_closed(session):
    assert session.close_tab(session.active_tab_id) is False
    assert len(session.tabs) == 1


def test_closing_active_tab_activates_last(session):
    first = session.active_tab
    second = session.new_tab()
    third = session.new_tab()
    session.switch_tab(second.id)

    assert session.close_tab(second.id) is True
    assert session.active_tab is third
    assert session.tabs == [first, third]


def test_switch_and_cycle_tabs(session):
    first = session.active_tab
    second = session.new_tab()

    assert session.switch_tab("missing") is False
    assert session.switch_tab(first.id) is True
    assert session.cycle_tab(1) is second
    assert session.cycle_tab(1) is first
    assert session.cycle_tab(-1) is second


@pytest.mark.asyncio
async def test_closed_tab_ignores_pending_completion(session, navigator):
    session.new_tab()
    tab = session.active_tab
    generation = tab.generation

    session.close_tab(tab.id)

    assert tab.generation == generation + 1


@pytest.mark.asyncio
async def test_submit_address_navigates_to_url(session, generator):
    await session.submit_address("example.com")

    assert session.active_tab.current_url == "https://example.com"
    assert generator.calls[0][0] == "https://example.com"


@pytest.mark.asyncio
async def test_submit_address_searches_for_words(session, search_provider):
    await session.submit_address("cat videos")

    assert search_provider.queries == ["cat videos"]


@pytest.mark.asyncio
async def test_search_returns_to_home_and_truncates(session, config, search_provider):
    search_provider.results = [
        SearchResult(f"Site {i}", f"https://site{i}.example/", "...") for i in range(8)
    ]
    await session.navigate(URL)

    results = await session.search("news")

    assert session.active_tab.is_home
    assert len(results) == config.max_search_results
    assert session.search_results == results
    assert session.searching is False


@pytest.mark.asyncio
async def test_search_failure_falls_back(session, search_provider):
    search_provider.fail = True

    results = await session.search("anything")

    assert results == list(FALLBACK_SEARCH_RESULTS)
    assert session.searching is False


@pytest.mark.asyncio
async def test_follow_link_resolves_relative_href(session):
    await session.navigate(URL)

    assert await session.follow_link("/about") is True
    assert session.active_tab.current_url == "https://example.com/about"
    assert await session.follow_link("javascript:void(0)") is False


@pytest.mark.parametrize("text, expected", [
    ("", None),
    ("   ", None),
    ("weather", ("search", "weather")),
    ("news.com today", ("search", "news.com today")),
    ("bbc.com", ("url", "https://bbc.com")),
    ("http://bbc.com", ("url", "http://bbc.com")),
    (HOME_URL, ("url", HOME_URL)),
])
def test_parse_address(text, expected):
    assert parse_address(text) == expected


@pytest.mark.parametrize("current, href, expected", [
    ("https://a.example/x/y", "/login", "https://a.example/login"),
    ("https://a.example/x/y", "z", "https://a.example/x/z"),
    ("https://a.example/", "https://b.example/", "https://b.example/"),
    (HOME_URL, "/about", "https://example.com/about"),
    ("https://a.example/", "#top", None),
    ("https://a.example/", "", None),
    ("https://a.example/", None, None),
])
def test_resolve_href(current, href, expected):
    assert resolve_href(current, href) == expected


def test_hostname():
    assert hostname("https://store.steampowered.com/app/1") == "store.steampowered.com"
    assert hostname(HOME_URL) == HOME_URL
