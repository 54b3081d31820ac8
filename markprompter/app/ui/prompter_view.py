from __future__ import annotations

import logging
from typing import Optional, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontDatabase,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
)
from PySide6.QtWidgets import QFrame, QTextEdit

from markprompter.app.session import RenderedLine
from markprompter.core.inline import RunStyle
from markprompter.core.themes import DEFAULT_THEME, RGB, Theme

logger = logging.getLogger(__name__)

BOLD_SIZE_FACTOR = 1.15
ITALIC_SIZE_FACTOR = 0.95
ITALIC_COLOR_FACTOR = 0.9
CODE_SIZE_FACTOR = 0.9
CODE_BACKGROUND = QColor(80, 80, 80, 40)
LINE_SPACING_PX = 5


def _mono_family() -> str:
    mono_font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
    return mono_font.family() or "Courier New"


def char_format_for(
    style: RunStyle,
    color: RGB,
    size: float,
    *,
    heading: bool = False,
    mono_family: Optional[str] = None,
) -> QTextCharFormat:
    """Return the character format used to paint one styled run."""
    fmt = QTextCharFormat()
    fmt.setForeground(QColor(*color))
    fmt.setFontPointSize(max(1.0, size))
    if heading:
        fmt.setFontWeight(QFont.Weight.DemiBold)
        return fmt
    if style is RunStyle.BOLD:
        fmt.setFontPointSize(max(1.0, size * BOLD_SIZE_FACTOR))
        fmt.setFontWeight(QFont.Weight.Bold)
    elif style is RunStyle.ITALIC:
        dimmed = tuple(int(channel * ITALIC_COLOR_FACTOR) for channel in color)
        fmt.setForeground(QColor(*dimmed))
        fmt.setFontPointSize(max(1.0, size * ITALIC_SIZE_FACTOR))
        fmt.setFontItalic(True)
    elif style is RunStyle.CODE:
        fmt.setFontFamily(mono_family or _mono_family())
        fmt.setFontFixedPitch(True)
        fmt.setFontStyleHint(QFont.StyleHint.Monospace)
        fmt.setFontPointSize(max(1.0, size * CODE_SIZE_FACTOR))
        fmt.setBackground(CODE_BACKGROUND)
    return fmt


class PrompterView(QTextEdit):
    """Read-only text surface whose scroll offset is driven by the scroll timer."""

    manualScroll = Signal(float)  # Emits the new offset when the user drags the scrollbar

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setReadOnly(True)
        self.setFrameShape(QFrame.NoFrame)
        self.setLineWrapMode(QTextEdit.WidgetWidth)
        self.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._theme = DEFAULT_THEME
        self._mono_family = _mono_family()
        self._applying_offset = False
        self.verticalScrollBar().valueChanged.connect(self._on_scroll_value_changed)
        self.apply_theme(self._theme)

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        bg = "rgb({}, {}, {})".format(*theme.background_rgb)
        fg = "rgb({}, {}, {})".format(*theme.text_rgb)
        self.setStyleSheet(f"QTextEdit {{ background: {bg}; color: {fg}; border: none; }}")

    def render_lines(self, lines: Sequence[RenderedLine], font_size: float) -> None:
        offset = self.verticalScrollBar().value()
        self._applying_offset = True
        try:
            self._fill_document(lines, font_size)
        finally:
            self._applying_offset = False
        self.set_scroll_offset(offset)

    def _fill_document(self, lines: Sequence[RenderedLine], font_size: float) -> None:
        self.clear()
        cursor = QTextCursor(self.document())
        block_fmt = QTextBlockFormat()
        block_fmt.setBottomMargin(LINE_SPACING_PX)
        base_fmt = char_format_for(RunStyle.PLAIN, self._theme.text_rgb, font_size)
        cursor.beginEditBlock()
        for idx, line in enumerate(lines):
            if idx:
                cursor.insertBlock(block_fmt, base_fmt)
            else:
                cursor.setBlockFormat(block_fmt)
                cursor.setBlockCharFormat(base_fmt)
            size = font_size * line.size_factor
            for run in line.runs:
                if not run.text:
                    continue
                fmt = char_format_for(
                    run.style,
                    line.color,
                    size,
                    heading=line.is_heading,
                    mono_family=self._mono_family,
                )
                cursor.insertText(run.text, fmt)
        cursor.endEditBlock()

    def content_height(self) -> float:
        return float(self.document().size().height())

    def viewport_height(self) -> float:
        return float(self.viewport().height())

    def set_scroll_offset(self, position: float) -> None:
        self._applying_offset = True
        try:
            self.verticalScrollBar().setValue(int(position))
        finally:
            self._applying_offset = False

    def _on_scroll_value_changed(self, value: int) -> None:
        if self._applying_offset:
            return
        self.manualScroll.emit(float(value))
