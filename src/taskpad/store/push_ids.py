# src/taskpad/store/push_ids.py

from __future__ import annotations

import random
import threading
import time

# Same alphabet and layout as Firebase push ids, so keys sort chronologically.
PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class PushIdGenerator:
    """
    20-char keys: 8 chars of millisecond timestamp + 12 random chars.

    Within the same millisecond the random part is incremented instead of
    regenerated, so ids stay strictly increasing.
    """

    def __init__(self, clock=time.time, rng: random.Random | None = None) -> None:
        self._clock = clock
        self._rng = rng or random.Random()
        self._last_ms = -1
        self._last_rand = [0] * 12
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now = int(self._clock() * 1000)
            same_ms = now == self._last_ms
            self._last_ms = now

            ts_chars = []
            for _ in range(8):
                ts_chars.append(PUSH_CHARS[now % 64])
                now //= 64
            ts_chars.reverse()

            if not same_ms:
                self._last_rand = [self._rng.randrange(64) for _ in range(12)]
            else:
                # carry-increment from the last position
                i = 11
                while i >= 0 and self._last_rand[i] == 63:
                    self._last_rand[i] = 0
                    i -= 1
                if i >= 0:
                    self._last_rand[i] += 1

            return "".join(ts_chars) + "".join(PUSH_CHARS[n] for n in self._last_rand)
