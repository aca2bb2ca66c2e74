"""Shared fixtures and fake collaborators."""

import random

import pytest

from censor_browser.config import Config
from censor_browser.models import CourtVerdict, Verdict
from censor_browser.services import (
    Adjudicator,
    ContentGenerator,
    NegotiationEngine,
    NegotiationReply,
    SearchProvider,
    ServiceError,
)
from censor_browser.session import BrowserSession
from censor_browser.store import MemoryBackend, SiteRecordStore


class FakeGenerator(ContentGenerator):
    def __init__(self, content="<p>Hello</p>"):
        self.content = content
        self.calls = []
        self.fail = False
        self.gate = None

    async def generate(self, url, title, is_content_removed):
        self.calls.append((url, title, is_content_removed))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ServiceError("generator down")
        return self.content


class FakeSearch(SearchProvider):
    def __init__(self, results=None):
        self.results = results or []
        self.fail = False
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if self.fail:
            raise ServiceError("search down")
        return list(self.results)


class FakeNegotiation(NegotiationEngine):
    def __init__(self, reply="No.", agreed=False):
        self.reply = NegotiationReply(reply, agreed)
        self.fail = False
        self.calls = []

    async def negotiate(self, url, transcript):
        self.calls.append((url, list(transcript)))
        if self.fail:
            raise ServiceError("chat down")
        return self.reply


class FakeAdjudicator(Adjudicator):
    def __init__(self, verdict=Verdict.OVERTURN):
        self.verdict = CourtVerdict(verdict, "Reasons.", "Judge Dredd")
        self.fail = False
        self.calls = []
        self.gate = None

    async def adjudicate(self, title, content, transcript):
        self.calls.append((title, content, list(transcript)))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ServiceError("court down")
        return self.verdict


class RecordingSleep:
    """Stands in for asyncio.sleep: records delays, optionally holds long ones."""

    def __init__(self):
        self.delays = []
        self.hold_from = None
        self.release = None

    async def __call__(self, delay):
        self.delays.append(delay)
        if self.hold_from is not None and delay >= self.hold_from:
            await self.release.wait()


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend, clock):
    return SiteRecordStore(backend, clock=clock)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def search_provider():
    return FakeSearch()


@pytest.fixture
def negotiation_engine():
    return FakeNegotiation()


@pytest.fixture
def adjudicator():
    return FakeAdjudicator()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def session(config, store, generator, search_provider, negotiation_engine, adjudicator, sleep):
    return BrowserSession(
        config,
        store,
        generator,
        search_provider,
        negotiation_engine,
        adjudicator,
        rng=random.Random(1234),
        sleep=sleep,
    )


@pytest.fixture
def navigator(session):
    return session.navigator


@pytest.fixture
def tab(session):
    return session.active_tab
