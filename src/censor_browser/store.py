"""Persistent cache of generated sites, keyed by URL."""

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable

from .models import SiteRecord, TranscriptEntry
from .urls import hostname

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({"title", "content", "status", "transcript"})


class MemoryBackend:
    """Keeps the serialized mapping in memory. Used for tests and --no-persist."""

    def __init__(self, data: dict | None = None):
        self.data = data or {}
        self.saves = 0

    def load(self) -> dict:
        return json.loads(json.dumps(self.data))

    def save(self, data: dict) -> None:
        self.data = data
        self.saves += 1


class JsonFileBackend:
    """Stores the whole mapping as one JSON document, rewritten on every save."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> dict:
        """Load the mapping; a missing or unreadable file yields an empty one."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load site cache from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed site cache in {self.path}")
            return {}
        return data

    def save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".sites-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


class SiteRecordStore:
    """Mapping from URL to SiteRecord with field-level merge semantics.

    Every mutation flushes the full mapping to the backend. Updates merge only
    the fields they name, so a late content write never clobbers a status
    change made in the meantime (and vice versa).
    """

    def __init__(self, backend, clock: Callable[[], float] = time.time):
        self.backend = backend
        self.clock = clock
        self._records: dict[str, SiteRecord] = {}
        self.load()

    def load(self) -> None:
        """(Re)load all records from the backend."""
        self._records = {}
        for url, data in self.backend.load().items():
            try:
                self._records[url] = SiteRecord.from_dict({**data, "url": url})
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable record for {url}: {e}")
        logger.info(f"Loaded {len(self._records)} cached sites")

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, url: str) -> bool:
        return url in self._records

    def urls(self) -> list[str]:
        return list(self._records)

    def get(self, url: str) -> SiteRecord | None:
        """Return the record for a URL, refreshing its access time."""
        record = self._records.get(url)
        if record is not None:
            record.last_accessed = self.clock()
        return record

    def upsert(self, url: str, **fields) -> SiteRecord:
        """Merge the given fields into the record, creating it if absent."""
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown site record fields: {', '.join(sorted(unknown))}")

        record = self._records.get(url)
        if record is None:
            record = SiteRecord(url=url, title=hostname(url), last_accessed=self.clock())
            self._records[url] = record
            logger.debug(f"Created site record for {url}")

        for name, value in fields.items():
            if name == "transcript":
                value = list(value)
            setattr(record, name, value)
        record.last_accessed = self.clock()

        self.flush()
        return record

    def append_transcript(self, url: str, *entries: TranscriptEntry) -> SiteRecord:
        """Append entries to a record's transcript without replacing it."""
        record = self._records.get(url) or self.upsert(url)
        record.transcript.extend(entries)
        record.last_accessed = self.clock()
        self.flush()
        return record

    def flush(self) -> None:
        self.backend.save({url: record.to_dict() for url, record in self._records.items()})
