# app/utils/rate_limiter.py

import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from config.logging_config import get_logger
from config.settings import ANALYSIS_DAILY_LIMIT, ANALYSIS_HOURLY_LIMIT

logger = get_logger(__name__)

ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(hours=24)

# só a cota diária vale para a checagem de marcos
DAILY_ONLY_CATEGORIES = {"milestone"}


class AnalysisRateLimiter:
    """Janela deslizante de requisições por categoria (última hora / últimas 24h)."""

    def __init__(
        self,
        hourly_limit: int = ANALYSIS_HOURLY_LIMIT,
        daily_limit: int = ANALYSIS_DAILY_LIMIT,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.hourly_limit = hourly_limit
        self.daily_limit = daily_limit
        self._clock = clock
        self._timestamps: Dict[str, List[datetime]] = {}
        self._lock = threading.Lock()

    def allow_request(self, category: str) -> bool:
        now = self._clock()
        with self._lock:
            timestamps = self._timestamps.get(category)
            if not timestamps:
                return True

            timestamps = [ts for ts in timestamps if ts > now - ONE_DAY]
            self._timestamps[category] = timestamps

            hourly_count = sum(1 for ts in timestamps if ts > now - ONE_HOUR)
            daily_count = len(timestamps)

        allowed = hourly_count < self.hourly_limit and daily_count < self.daily_limit
        if not allowed:
            logger.info(
                "rate_limit_hit",
                category=category,
                hourly_count=hourly_count,
                daily_count=daily_count,
            )
        return allowed

    def record_request(self, category: str) -> None:
        now = self._clock()
        with self._lock:
            self._timestamps.setdefault(category, []).append(now)

    def _usage(self, window: timedelta) -> int:
        cutoff = self._clock() - window
        with self._lock:
            return sum(
                1
                for timestamps in self._timestamps.values()
                for ts in timestamps
                if ts > cutoff
            )

    def hourly_usage(self) -> int:
        return self._usage(ONE_HOUR)

    def daily_usage(self) -> int:
        return self._usage(ONE_DAY)

    def quota_status(self) -> Dict[str, int]:
        return {
            "hourly_remaining": max(0, self.hourly_limit - self.hourly_usage()),
            "daily_remaining": max(0, self.daily_limit - self.daily_usage()),
        }

    def has_available_quota(self, category: str) -> bool:
        status = self.quota_status()
        if category in DAILY_ONLY_CATEGORIES:
            return status["daily_remaining"] > 0
        return status["hourly_remaining"] > 0 and status["daily_remaining"] > 0

    def reset(self) -> None:
        with self._lock:
            self._timestamps.clear()
