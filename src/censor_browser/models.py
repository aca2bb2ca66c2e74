"""Data models for sites, tabs and court cases."""

import itertools
import time
from dataclasses import dataclass, field
from enum import Enum

HOME_URL = "about:home"
HOME_TITLE = "New Tab"


class SiteStatus(Enum):
    """Enforcement status of a site."""
    NORMAL = "NORMAL"
    SLOWED = "SLOWED"
    BLOCKED = "BLOCKED"
    CONTENT_REMOVED = "CONTENT_REMOVED"
    UNDER_APPEAL = "UNDER_APPEAL"


class Speaker(Enum):
    """Author of a transcript entry."""
    REGULATOR = "regulator"
    OWNER = "owner"


class FaultCode(Enum):
    """Error shown in place of page content."""
    CONNECTION_RESET = "ERR_CONNECTION_RESET"  # deliberate, site is blocked
    GENERATION_FAILED = "ERR_FAILED"


class Verdict(Enum):
    """Outcome of an appeal."""
    UPHOLD = "UPHOLD"
    OVERTURN = "OVERTURN"


@dataclass(frozen=True)
class TranscriptEntry:
    """One message of a negotiation with a site owner."""
    speaker: Speaker
    text: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {"speaker": self.speaker.value, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "TranscriptEntry":
        return cls(
            speaker=Speaker(data["speaker"]),
            text=data["text"],
            timestamp=data.get("timestamp", 0.0),
        )


@dataclass
class SiteRecord:
    """Cached, persisted state of a single URL."""
    url: str
    title: str
    content: str | None = None
    status: SiteStatus = SiteStatus.NORMAL
    transcript: list[TranscriptEntry] = field(default_factory=list)
    last_accessed: float = field(default_factory=time.time)

    @property
    def is_cached(self) -> bool:
        """Whether content was generated successfully before."""
        return self.content is not None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "status": self.status.value,
            "transcript": [entry.to_dict() for entry in self.transcript],
            "last_accessed": self.last_accessed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SiteRecord":
        return cls(
            url=data["url"],
            title=data.get("title", data["url"]),
            content=data.get("content"),
            status=SiteStatus(data.get("status", SiteStatus.NORMAL.value)),
            transcript=[TranscriptEntry.from_dict(e) for e in data.get("transcript", [])],
            last_accessed=data.get("last_accessed", 0.0),
        )


_tab_ids = itertools.count(1)


def _next_tab_id() -> str:
    return f"tab-{next(_tab_ids)}"


@dataclass
class Tab:
    """A browser tab.

    ``status`` and ``transcript`` are a snapshot of the site record taken at
    the last sync; they can lag behind the record until the tab is refreshed.
    """
    id: str = field(default_factory=_next_tab_id)
    history: list[str] = field(default_factory=lambda: [HOME_URL])
    history_position: int = 0
    title: str = HOME_TITLE
    loading: bool = False
    error: FaultCode | None = None
    content: str | None = None
    status: SiteStatus = SiteStatus.NORMAL
    transcript: list[TranscriptEntry] = field(default_factory=list)
    reply_pending: bool = False

    # Bumped on every navigation; delayed completions carrying an older
    # value are discarded.
    generation: int = 0

    @property
    def current_url(self) -> str:
        return self.history[self.history_position]

    @property
    def is_home(self) -> bool:
        return self.current_url == HOME_URL

    @property
    def can_go_back(self) -> bool:
        return self.history_position > 0

    @property
    def can_go_forward(self) -> bool:
        return self.history_position < len(self.history) - 1

    def push(self, url: str) -> None:
        """Add a URL to history, dropping any forward entries."""
        del self.history[self.history_position + 1:]
        self.history.append(url)
        self.history_position = len(self.history) - 1

    def step(self, offset: int) -> bool:
        """Move within history. Returns False if the move is out of bounds."""
        position = self.history_position + offset
        if not 0 <= position < len(self.history):
            return False
        self.history_position = position
        return True

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def show_home(self) -> None:
        """Reset the view to the start page."""
        self.title = HOME_TITLE
        self.loading = False
        self.content = None
        self.error = None
        self.status = SiteStatus.NORMAL
        self.transcript = []
        self.reply_pending = False

    def refresh_from_record(self, record: SiteRecord) -> None:
        """Copy the record's status and transcript onto the tab."""
        self.title = record.title
        self.status = record.status
        self.transcript = list(record.transcript)


@dataclass
class SearchResult:
    """A single search hit shown on the start page."""
    title: str
    url: str
    snippet: str


@dataclass
class CourtVerdict:
    """Decision of the court on an appeal."""
    verdict: Verdict
    reasoning: str
    judge_name: str
