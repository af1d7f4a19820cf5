"""Last-modified cache for sitemap pages.

Working out when a sitemap page last changed means listing every object
on that page, which is too slow to do while rendering the index. Values
are therefore cached in the option store, one key per
(provider, sub-type, page), and recomputed out of band by a scheduled job
whenever a key is missing.

A stored empty string means "computed, nothing to report" and is not
recomputed again. A missing key means "never computed".
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, TYPE_CHECKING

from sitemaps.store.base import OptionStore

if TYPE_CHECKING:
    from sitemaps.scheduler import Scheduler

logger = logging.getLogger(__name__)


OPTION_PREFIX = "sitemaps_lastmod_"
CALCULATE_LASTMOD_JOB = "sitemaps_calculate_lastmod"

_in_job: ContextVar[bool] = ContextVar("sitemaps_in_job", default=False)


@contextmanager
def job_context() -> Iterator[None]:
    """Mark the current call stack as running inside a scheduled job."""
    token = _in_job.set(True)
    try:
        yield
    finally:
        _in_job.reset(token)


def in_job_context() -> bool:
    """True while a scheduled job is running on this call stack."""
    return _in_job.get()


def to_w3c(dt: datetime) -> str:
    """Format a datetime as a W3C datetime, assuming UTC when naive."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="seconds")


def from_w3c(value: str) -> datetime:
    """Parse a W3C datetime written by to_w3c."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class LastmodCacheEntry:
    """Result of a cache lookup."""
    key: str
    value: datetime | None
    present: bool


class LastmodCache:
    """Option-store backed lastmod values with deferred recomputation."""

    def __init__(
        self,
        store: OptionStore,
        scheduler: "Scheduler | None" = None,
        delay: float = 500.0,
    ):
        self.store = store
        self.scheduler = scheduler
        self.delay = delay

    @staticmethod
    def key(name: str, sub_type: str | None, page: int) -> str:
        """Option key for a sitemap page. Empty parts are skipped."""
        suffix = "_".join(p for p in (name, sub_type, str(page)) if p)
        return f"{OPTION_PREFIX}{suffix}"

    def get(self, name: str, sub_type: str | None, page: int) -> LastmodCacheEntry:
        key = self.key(name, sub_type, page)
        raw = self.store.get_option(key)

        if raw is None:
            return LastmodCacheEntry(key=key, value=None, present=False)
        if not raw:
            return LastmodCacheEntry(key=key, value=None, present=True)

        try:
            value = from_w3c(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable lastmod value for {key}: {raw!r}")
            return LastmodCacheEntry(key=key, value=None, present=False)
        return LastmodCacheEntry(key=key, value=value, present=True)

    def set(self, name: str, sub_type: str | None, page: int, value: datetime | None) -> None:
        """Store a lastmod value. None stores the known-empty marker."""
        key = self.key(name, sub_type, page)
        self.store.set_option(key, to_w3c(value) if value else "")
        logger.debug(f"Stored lastmod {key} = {value}")

    def lookup(self, name: str, sub_type: str | None, page: int) -> datetime | None:
        """Cached value for a page, scheduling a recompute on a miss.

        Never blocks on the recompute: a miss returns None for this call.
        No job is scheduled from inside a running job.
        """
        entry = self.get(name, sub_type, page)
        if entry.present:
            return entry.value

        if self.scheduler is None:
            logger.debug(f"Lastmod miss for {entry.key}, no scheduler configured")
        elif in_job_context():
            logger.debug(f"Lastmod miss for {entry.key} inside a job, not rescheduling")
        else:
            logger.debug(f"Lastmod miss for {entry.key}, scheduling recompute")
            self.scheduler.schedule_once(self.delay, CALCULATE_LASTMOD_JOB, (name, sub_type, page))
        return None

    def clear(self) -> int:
        """Delete every cached value. Returns how many were removed."""
        keys = list(self.store.list_options(OPTION_PREFIX))
        for key in keys:
            self.store.delete_option(key)
        logger.info(f"Cleared {len(keys)} lastmod values")
        return len(keys)
