import logging
from collections import deque
from typing import Deque, Optional

import numpy as np

from .base import ConfigError


logger = logging.getLogger(__name__)


class BlinkDetector:
    """
    Counts blinks against an adaptive baseline.

    The baseline is the mean of the last `rolling_average_count` averaged EAR
    samples, so it follows slow drift in lighting and distance. A frame whose
    EAR falls more than `blink_threshold` (a fraction) below the baseline is
    "closed". Counting is edge-triggered: a blink is counted on the transition
    into closed, and the detector re-arms only once a frame is back at or
    above the threshold.

    With `exclude_current_from_baseline` the sample being classified is left
    out of the mean it is compared against. Off by default, which keeps the
    self-referential behavior where a long closure drags the baseline down.
    """

    def __init__(
        self,
        blink_threshold: float = 0.12,
        rolling_average_count: int = 50,
        blink_duration_ms: float = 3000,
        exclude_current_from_baseline: bool = False,
    ):
        if not 0.0 < blink_threshold < 1.0:
            raise ConfigError(f"blink_threshold must be in (0, 1), got {blink_threshold}")
        if int(rolling_average_count) < 1:
            raise ConfigError(f"rolling_average_count must be >= 1, got {rolling_average_count}")
        if blink_duration_ms <= 0:
            raise ConfigError(f"blink_duration_ms must be > 0, got {blink_duration_ms}")
        self.blink_threshold = float(blink_threshold)
        self.rolling_average_count = int(rolling_average_count)
        self.blink_duration_ms = float(blink_duration_ms)
        self.exclude_current_from_baseline = bool(exclude_current_from_baseline)

        self.history: Deque[float] = deque(maxlen=self.rolling_average_count)
        self.is_blinking = False
        self.last_blink_time_ms: Optional[float] = None
        self.blink_count = 0

    def reset(self) -> None:
        self.history.clear()
        self.is_blinking = False
        self.last_blink_time_ms = None
        self.blink_count = 0

    def rolling_average(self) -> Optional[float]:
        if not self.history:
            return None
        return float(np.mean(self.history))

    def update(self, left_ear: float, right_ear: float, now_ms: float) -> bool:
        """Feed one frame. Returns True if this frame starts a new blink."""
        avg_ear = (left_ear + right_ear) / 2.0

        if self.exclude_current_from_baseline:
            baseline = self.rolling_average()
            self.history.append(avg_ear)
            if baseline is None:
                baseline = avg_ear
        else:
            self.history.append(avg_ear)
            baseline = self.rolling_average()

        logger.debug("EAR %.4f rolling average %.4f", avg_ear, baseline)

        if avg_ear < baseline * (1.0 - self.blink_threshold):
            if not self.is_blinking:
                self.is_blinking = True
                self.last_blink_time_ms = now_ms
                self.blink_count += 1
                logger.info("Blink detected, count=%d", self.blink_count)
                return True
            return False
        self.is_blinking = False
        return False

    def ms_since_last_blink(self, now_ms: float) -> Optional[float]:
        if self.last_blink_time_ms is None:
            return None
        return now_ms - self.last_blink_time_ms

    def is_recent(self, now_ms: float) -> bool:
        elapsed = self.ms_since_last_blink(now_ms)
        return elapsed is not None and elapsed < self.blink_duration_ms
