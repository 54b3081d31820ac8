from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from markprompter.core.document import Document, FileReadError, load_document
from markprompter.core.headings import split_heading
from markprompter.core.inline import RunStyle, StyledRun, tokenize
from markprompter.core.reload_monitor import ReloadMonitor
from markprompter.core.scroll import ScrollTimer
from markprompter.core.themes import DEFAULT_THEME, RGB, Theme

logger = logging.getLogger(__name__)

# H1..H6 font size relative to body text
HEADING_SIZE_FACTORS = (2.0, 1.8, 1.6, 1.4, 1.2, 1.1)
EMPTY_PLACEHOLDER = "Open a markdown file to begin."


@dataclass(frozen=True)
class RenderedLine:
    heading_level: int
    runs: List[StyledRun]
    color: RGB
    size_factor: float = 1.0

    @property
    def is_heading(self) -> bool:
        return self.heading_level > 0


class PrompterSession:
    """Owns the open document, its scroll timer and its reload monitor.

    Everything here runs on the render loop; the monitor thread only raises
    its pending flag, which :meth:`check_file_updates` drains once per frame.
    """

    def __init__(
        self,
        timer: Optional[ScrollTimer] = None,
        *,
        theme: Theme = DEFAULT_THEME,
        monitor_factory: Callable[[Path], ReloadMonitor] = ReloadMonitor,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timer = timer or ScrollTimer()
        self.theme = theme
        self.document = Document.empty()
        self.monitor: Optional[ReloadMonitor] = None
        self.last_error: Optional[str] = None
        self.revision = 0  # bumped whenever the displayed document is replaced
        self._monitor_factory = monitor_factory
        self._clock = clock

    # ----------------------------------------------------------------- files
    def open_file(self, path: Path | str) -> bool:
        """Load a document and start watching it; keep the current one on failure."""
        try:
            document = load_document(path)
        except FileReadError as exc:
            self.last_error = str(exc)
            logger.error("Error loading file: %s", exc)
            return False
        self.last_error = None
        self._stop_monitor()
        self.document = document
        self.timer.set_headings(document.headings)
        self.revision += 1
        self.timer.restart()
        self.monitor = self._monitor_factory(document.path)
        self.monitor.start()
        logger.info("Opened %s (%d lines, %d headings)", document.path, len(document.lines), len(document.headings))
        return True

    def reload(self) -> bool:
        path = self.document.path
        if path is None:
            return False
        try:
            document = load_document(path)
        except FileReadError as exc:
            self.last_error = str(exc)
            logger.warning("Reload failed, keeping previous content: %s", exc)
            return False
        self.last_error = None
        self.document = document
        self.timer.set_headings(document.headings)
        self.revision += 1
        logger.info("Reloaded %s", path)
        return True

    def check_file_updates(self) -> bool:
        if self.monitor is None or not self.monitor.try_take_pending_change():
            return False
        return self.reload()

    def _stop_monitor(self) -> None:
        if self.monitor is not None:
            self.monitor.stop()
            self.monitor = None

    def close(self) -> None:
        self._stop_monitor()
        self.document = Document.empty()
        self.timer.set_headings([])
        self.revision += 1
        self.timer.restart()

    # -------------------------------------------------------------- playback
    def toggle_play(self) -> bool:
        return self.timer.toggle_play(self._clock())

    def restart(self) -> None:
        self.timer.restart()

    def frame(self, content_height: float, viewport_height: float, now: Optional[float] = None) -> float:
        """Advance scrolling by one render-loop step and return the offset to display.

        Reload notifications are drained separately through
        :meth:`check_file_updates`, once per frame, before rendering.
        """
        self.timer.tick(self._clock() if now is None else now)
        self.timer.check_end(content_height, viewport_height)
        return self.timer.position

    # ------------------------------------------------------------- rendering
    def render_lines(self) -> List[RenderedLine]:
        if self.document.is_empty:
            return [RenderedLine(0, [StyledRun(EMPTY_PLACEHOLDER)], self.theme.text_rgb)]
        rendered: List[RenderedLine] = []
        for line in self.document.lines:
            level, text = split_heading(line)
            if level:
                rendered.append(
                    RenderedLine(
                        heading_level=level,
                        runs=[StyledRun(text, RunStyle.PLAIN)],
                        color=self.theme.heading_color(level),
                        size_factor=HEADING_SIZE_FACTORS[level - 1],
                    )
                )
            else:
                rendered.append(RenderedLine(0, tokenize(line), self.theme.text_rgb))
        return rendered
