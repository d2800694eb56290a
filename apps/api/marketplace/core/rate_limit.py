# marketplace/core/rate_limit.py
#
# ログイン試行回数の制限（プロセス内・IP単位の固定ウィンドウ）
# - ウィンドウ内で max_attempts 回を超えたら TooManyRequestsError
# - 複数プロセス構成ではプロセスごとにカウントされる
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from marketplace.core.errors import TooManyRequestsError


@dataclass
class _Window:
    count: int
    reset_at: float


class LoginRateLimiter:
    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [key for key, w in self._windows.items() if now >= w.reset_at]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str) -> None:
        """1回分の試行を記録する。上限に達していれば記録せずに例外"""
        with self._lock:
            now = self._clock()
            self._prune(now)

            window = self._windows.get(key)
            if window is None:
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._windows[key] = window

            if window.count >= self.max_attempts:
                retry_after = max(1, math.ceil(window.reset_at - now))
                minutes = math.ceil(retry_after / 60)
                raise TooManyRequestsError(
                    f"Too many login attempts. Please try again in {minutes} minutes.",
                    retry_after=retry_after,
                )

            window.count += 1

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
