"""Per-identifier daily message quota.

Every ``check`` counts as one use. Counters live in process memory and
start over when the UTC date changes, so a restart also resets them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from config import DAILY_LIMIT, DAILY_LIMIT_AUTH
from companion.defaults import USAGE_WARNING_REMAINING

logger = logging.getLogger(__name__)


def _utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


@dataclass(slots=True)
class UsageCheck:
    allowed: bool
    remaining: int
    is_warning: bool

    def to_dict(self) -> dict[str, object]:
        return {"allowed": self.allowed, "remaining": self.remaining, "isWarning": self.is_warning}


@dataclass(slots=True)
class _DailyCounter:
    date: str
    count: int = 0


class DailyUsageLimiter:
    def __init__(
        self,
        daily_limit: int = DAILY_LIMIT,
        daily_limit_auth: int = DAILY_LIMIT_AUTH,
        *,
        today: Callable[[], str] = _utc_today,
    ) -> None:
        self.daily_limit = daily_limit
        self.daily_limit_auth = daily_limit_auth
        self._today = today
        self._counters: dict[str, _DailyCounter] = {}

    def limit_for(self, is_authenticated: bool) -> int:
        return self.daily_limit_auth if is_authenticated else self.daily_limit

    def check(self, identifier: str, is_authenticated: bool = False) -> UsageCheck:
        today = self._today()
        limit = self.limit_for(is_authenticated)

        counter = self._counters.get(identifier)
        if counter is None or counter.date != today:
            self._prune(today)
            self._counters[identifier] = _DailyCounter(date=today, count=1)
            # The first use of a day never warns.
            return UsageCheck(allowed=limit >= 1, remaining=max(0, limit - 1), is_warning=False)
        counter.count += 1

        remaining = limit - counter.count
        allowed = counter.count <= limit
        if not allowed:
            logger.warning("Daily quota exhausted for %s (limit=%d)", identifier, limit)
        return UsageCheck(
            allowed=allowed,
            remaining=max(0, remaining),
            is_warning=0 < remaining <= USAGE_WARNING_REMAINING,
        )

    def _prune(self, today: str) -> None:
        stale = [key for key, counter in self._counters.items() if counter.date != today]
        for key in stale:
            del self._counters[key]

    def reset(self, identifier: str) -> None:
        self._counters.pop(identifier, None)
