"""Collaborator interfaces for generated content, search, chat and court.

Implementations raise ServiceError on any failure. Fallback values are
applied by the callers, not hidden inside the implementations.
"""

import re
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from .models import CourtVerdict, SearchResult, TranscriptEntry, Verdict


class ServiceError(Exception):
    """A collaborator call failed or returned something unusable."""


class ContentGenerator(ABC):
    @abstractmethod
    async def generate(self, url: str, title: str, is_content_removed: bool) -> str:
        """Return an HTML-like body for the page."""


class SearchProvider(ABC):
    @abstractmethod
    async def search(self, query: str) -> list[SearchResult]:
        """Return an ordered list of search hits."""


@dataclass
class NegotiationReply:
    """Owner's answer in a negotiation."""
    reply: str
    agreed_to_remove: bool = False


class NegotiationEngine(ABC):
    @abstractmethod
    async def negotiate(self, url: str, transcript: list[TranscriptEntry]) -> NegotiationReply:
        """Answer the last regulator message of the transcript."""


class Adjudicator(ABC):
    @abstractmethod
    async def adjudicate(
        self, title: str, content: str, transcript: list[TranscriptEntry]
    ) -> CourtVerdict:
        """Decide an appeal against a block."""


# Fallbacks

FALLBACK_SEARCH_RESULTS = (
    SearchResult("Twitch", "https://www.twitch.tv/", "Live streaming platform."),
    SearchResult("Steam", "https://store.steampowered.com/", "Welcome to Steam."),
    SearchResult("Epic Games Store", "https://store.epicgames.com/", "Download and play PC games."),
    SearchResult("Roblox", "https://www.roblox.com/", "Online game platform and game creation system."),
    SearchResult("WikiLeaks Archive", "https://leaks.org/docs", "Archive of classified documents."),
)


def fallback_search_results() -> list[SearchResult]:
    return list(FALLBACK_SEARCH_RESULTS)


def fallback_negotiation_reply() -> NegotiationReply:
    return NegotiationReply(reply="Connection error...", agreed_to_remove=False)


def fallback_verdict() -> CourtVerdict:
    return CourtVerdict(
        verdict=Verdict.UPHOLD,
        reasoning=(
            "Due to a technical failure of the justice system, "
            "the block is upheld automatically."
        ),
        judge_name="Automated Court System",
    )


# Scenario selection for generated pages

class SiteCategory(Enum):
    GAMING_STORE = "gaming_store"
    NEWS = "news"
    SOCIAL = "social"
    GENERIC = "generic"


class Scenario(Enum):
    """What kind of page the generator should produce."""
    COMPLIANT = "compliant"
    CONTENT_REMOVED = "content_removed"
    VIOLATION_GAMING = "violation_gaming"
    VIOLATION_POLITICAL = "violation_political"
    VIOLATION_BLOG = "violation_blog"


_CATEGORY_PATTERNS = [
    (SiteCategory.GAMING_STORE, re.compile(
        r"steampowered\.com|roblox\.com|epicgames\.com|play\.google\.com|"
        r"store\.playstation\.com|xbox\.com|twitch\.tv"
    )),
    (SiteCategory.NEWS, re.compile(
        r"bbc\.com|cnn\.com|meduza\.io|dw\.com|tvrain\.tv|nytimes\.com|wiki"
    )),
    (SiteCategory.SOCIAL, re.compile(
        r"facebook\.com|twitter\.com|instagram\.com|vk\.com|ok\.ru|discord\.com|telegram"
    )),
]


def classify_url(url: str) -> SiteCategory:
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(url):
            return category
    return SiteCategory.GENERIC


def is_risky(url: str, ratio: float) -> bool:
    """Stable per-URL draw: the same URL is always risky or always safe."""
    return zlib.crc32(url.encode("utf-8")) % 100 < ratio * 100


def pick_scenario(url: str, is_content_removed: bool, risky_ratio: float = 0.4) -> Scenario:
    """Choose the page scenario for a URL."""
    if is_content_removed:
        return Scenario.CONTENT_REMOVED
    if not is_risky(url, risky_ratio):
        return Scenario.COMPLIANT

    category = classify_url(url)
    if category is SiteCategory.GAMING_STORE:
        return Scenario.VIOLATION_GAMING
    if category in (SiteCategory.NEWS, SiteCategory.SOCIAL):
        return Scenario.VIOLATION_POLITICAL
    return Scenario.VIOLATION_BLOG
