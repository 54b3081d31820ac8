"""Scroll/pause timer driving the teleprompter position.

The timer is advanced once per display frame with the wall-clock time of the
frame. It owns no Qt objects so the render loop, the tests and the headless
tools can all drive it the same way.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .headings import Heading

logger = logging.getLogger(__name__)

if os.getenv("MARKPROMPTER_DEBUG_SCROLL", "0") not in ("0", "false", "False", ""):
    logger.setLevel(logging.DEBUG)

LINE_HEIGHT_FACTOR = 1.5

DEFAULT_SPEED = 50.0
MIN_SPEED = 10.0
MAX_SPEED = 500.0
SPEED_STEP = 10.0

DEFAULT_FONT_SIZE = 18.0
MIN_FONT_SIZE = 8.0
MAX_FONT_SIZE = 72.0
FONT_SIZE_STEP = 1.0

DEFAULT_HEADING_PAUSE = 2.0
MIN_HEADING_PAUSE = 0.5
MAX_HEADING_PAUSE = 10.0


class ScrollPhase(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED_AT_HEADING = "paused_at_heading"


@dataclass(frozen=True)
class ScrollState:
    position: float
    speed: float
    playing: bool
    pending_pause: Optional[float]
    last_resolved_heading: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ScrollTimer:
    """State machine for auto-scroll with optional holds at headings."""

    def __init__(
        self,
        *,
        speed: float = DEFAULT_SPEED,
        font_size: float = DEFAULT_FONT_SIZE,
        pause_at_headings: bool = False,
        heading_pause_duration: float = DEFAULT_HEADING_PAUSE,
        auto_restart: bool = False,
    ) -> None:
        self.position = 0.0
        self.speed = _clamp(float(speed), MIN_SPEED, MAX_SPEED)
        self.font_size = _clamp(float(font_size), MIN_FONT_SIZE, MAX_FONT_SIZE)
        self.playing = False
        self.pending_pause: Optional[float] = None
        self.last_resolved_heading = 0
        self.pause_at_headings = pause_at_headings
        self.heading_pause_duration = _clamp(
            float(heading_pause_duration), MIN_HEADING_PAUSE, MAX_HEADING_PAUSE
        )
        self.auto_restart = auto_restart
        self._headings: list[Heading] = []
        self._last_tick: Optional[float] = None

    # ------------------------------------------------------------------ state
    @property
    def phase(self) -> ScrollPhase:
        if not self.playing:
            return ScrollPhase.STOPPED
        if self.pending_pause is not None:
            return ScrollPhase.PAUSED_AT_HEADING
        return ScrollPhase.PLAYING

    @property
    def state(self) -> ScrollState:
        return ScrollState(
            position=self.position,
            speed=self.speed,
            playing=self.playing,
            pending_pause=self.pending_pause,
            last_resolved_heading=self.last_resolved_heading,
        )

    @property
    def headings(self) -> list[Heading]:
        return list(self._headings)

    def set_headings(self, headings: Sequence[Heading]) -> None:
        self._headings = list(headings)
        # A reload can shrink the table; never point past its end.
        self.last_resolved_heading = min(self.last_resolved_heading, len(self._headings))

    @property
    def line_height(self) -> float:
        return self.font_size * LINE_HEIGHT_FACTOR

    def approximate_line(self) -> int:
        return int(math.floor(self.position / self.line_height))

    # -------------------------------------------------------------- commands
    def toggle_play(self, now: float) -> bool:
        self.playing = not self.playing
        self._last_tick = now
        if not self.playing:
            self.pending_pause = None
        logger.debug("Playback %s at position %.1f", "started" if self.playing else "stopped", self.position)
        return self.playing

    def restart(self) -> None:
        self.position = 0.0
        self.last_resolved_heading = 0
        self.pending_pause = None

    def seek(self, position: float) -> None:
        self.position = max(0.0, float(position))

    def adjust_speed(self, delta: float = SPEED_STEP) -> float:
        self.speed = _clamp(self.speed + delta, MIN_SPEED, MAX_SPEED)
        return self.speed

    def adjust_font_size(self, delta: float = FONT_SIZE_STEP) -> float:
        self.font_size = _clamp(self.font_size + delta, MIN_FONT_SIZE, MAX_FONT_SIZE)
        return self.font_size

    def set_heading_pause_duration(self, seconds: float) -> float:
        self.heading_pause_duration = _clamp(float(seconds), MIN_HEADING_PAUSE, MAX_HEADING_PAUSE)
        return self.heading_pause_duration

    # ------------------------------------------------------------------ time
    def tick(self, now: float) -> float:
        """Advance by the wall-clock time elapsed since the previous tick."""
        if self._last_tick is None:
            self._last_tick = now
        elapsed = max(0.0, now - self._last_tick)
        self._last_tick = now
        self.advance(elapsed)
        return elapsed

    def advance(self, elapsed: float) -> None:
        if not self.playing:
            return
        elapsed = max(0.0, elapsed)

        if self.pending_pause is not None:
            self.pending_pause -= elapsed
            if self.pending_pause > 0:
                return
            # Hold expired: scrolling resumes on this same tick.
            self.pending_pause = None
            logger.debug("Heading pause finished at position %.1f", self.position)

        self.position += self.speed * elapsed

        if self.pause_at_headings:
            self._check_heading()

    def _check_heading(self) -> None:
        idx = self.last_resolved_heading
        if idx >= len(self._headings):
            return
        heading = self._headings[idx]
        if self.approximate_line() >= heading.line:
            self.pending_pause = self.heading_pause_duration
            self.last_resolved_heading = idx + 1
            logger.debug(
                "Pausing %.1fs at heading %d (line %d, level %d)",
                self.heading_pause_duration,
                idx,
                heading.line,
                heading.level,
            )

    def check_end(self, content_height: float, viewport_height: float) -> bool:
        """Apply the end-of-content policy; return True when it fired."""
        if not self.playing:
            return False
        if self.position + viewport_height < content_height:
            return False
        if self.auto_restart:
            self.position = 0.0
            self.last_resolved_heading = 0
            logger.debug("End of content reached; restarting from the top")
        else:
            self.position = max(content_height - viewport_height, 0.0)
            self.playing = False
            self.pending_pause = None
            logger.debug("End of content reached; playback stopped at %.1f", self.position)
        return True
