from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from markprompter.app import config
from markprompter.app.session import PrompterSession
from markprompter.app.ui.prompter_view import PrompterView
from markprompter.core import scroll
from markprompter.core.document import MARKDOWN_SUFFIXES
from markprompter.core.themes import Theme, ThemeLoadError, ThemeStore, load_themes_or_default

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16
PLAY_TEXT = "▶"
PAUSE_TEXT = "⏸"


class MainWindow(QMainWindow):
    """Controls column on the left, scrolling prompter on the right."""

    def __init__(self, session: Optional[PrompterSession] = None, theme_store: Optional[ThemeStore] = None, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("MarkPrompter")
        self.setMinimumSize(800, 600)
        self.session = session or PrompterSession()
        self.theme_store = theme_store or ThemeStore(config.themes_path())
        self.themes, theme = load_themes_or_default(self.theme_store)
        self.session.theme = theme
        self._rendered_key: Optional[tuple] = None
        self._shortcuts: list[QShortcut] = []

        self._build_ui()
        self._wire_shortcuts()
        self._sync_controls()
        self.apply_theme(theme)

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

    # ------------------------------------------------------------------ UI
    def _build_ui(self) -> None:
        container = QWidget()
        root = QHBoxLayout(container)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        controls = QWidget()
        controls.setFixedWidth(300)
        panel = QVBoxLayout(controls)
        panel.setContentsMargins(0, 0, 0, 0)
        panel.setSpacing(8)

        title = QLabel("MP")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        panel.addWidget(title)

        self._open_button = self._big_button("Open…", 80)
        self._open_button.setToolTip("Open a markdown file (Ctrl+O)")
        self._open_button.clicked.connect(self.open_file_dialog)
        panel.addWidget(self._open_button)
        panel.addWidget(self._separator())

        panel.addWidget(self._section_label("Playback"))
        playback = QHBoxLayout()
        self._play_button = self._big_button(PLAY_TEXT, 80)
        self._play_button.setToolTip("Play/pause (Space)")
        self._play_button.clicked.connect(self.toggle_play)
        playback.addWidget(self._play_button)
        self._restart_button = self._big_button("⏮", 80)
        self._restart_button.setToolTip("Back to the top (R)")
        self._restart_button.clicked.connect(self.restart)
        playback.addWidget(self._restart_button)
        playback.addStretch(1)
        panel.addLayout(playback)

        panel.addWidget(QLabel("Scroll Speed"))
        speed_row = QHBoxLayout()
        slower = self._big_button("−", 60)
        slower.clicked.connect(lambda: self.adjust_speed(-scroll.SPEED_STEP))
        speed_row.addWidget(slower)
        self._speed_label = QLabel()
        self._speed_label.setAlignment(Qt.AlignCenter)
        self._speed_label.setStyleSheet("font-size: 20px;")
        speed_row.addWidget(self._speed_label, 1)
        faster = self._big_button("+", 60)
        faster.clicked.connect(lambda: self.adjust_speed(scroll.SPEED_STEP))
        speed_row.addWidget(faster)
        panel.addLayout(speed_row)
        panel.addWidget(self._separator())

        panel.addWidget(self._section_label("Settings"))
        self._pause_checkbox = QCheckBox("Pause at Headings")
        self._pause_checkbox.toggled.connect(self._on_pause_toggled)
        panel.addWidget(self._pause_checkbox)

        self._duration_row = QWidget()
        duration_layout = QHBoxLayout(self._duration_row)
        duration_layout.setContentsMargins(0, 0, 0, 0)
        duration_layout.addWidget(QLabel("Duration:"))
        self._duration_spin = QDoubleSpinBox()
        self._duration_spin.setRange(scroll.MIN_HEADING_PAUSE, scroll.MAX_HEADING_PAUSE)
        self._duration_spin.setSingleStep(0.5)
        self._duration_spin.setSuffix(" s")
        self._duration_spin.valueChanged.connect(self._on_duration_changed)
        duration_layout.addWidget(self._duration_spin, 1)
        panel.addWidget(self._duration_row)

        self._restart_checkbox = QCheckBox("Auto Restart")
        self._restart_checkbox.toggled.connect(self._on_auto_restart_toggled)
        panel.addWidget(self._restart_checkbox)

        font_row = QHBoxLayout()
        smaller = self._big_button("A−", 50)
        smaller.clicked.connect(lambda: self.adjust_font_size(-scroll.FONT_SIZE_STEP))
        font_row.addWidget(smaller)
        self._font_label = QLabel()
        self._font_label.setAlignment(Qt.AlignCenter)
        self._font_label.setStyleSheet("font-size: 20px;")
        font_row.addWidget(self._font_label, 1)
        larger = self._big_button("A+", 50)
        larger.clicked.connect(lambda: self.adjust_font_size(scroll.FONT_SIZE_STEP))
        font_row.addWidget(larger)
        panel.addLayout(font_row)
        panel.addWidget(self._separator())

        panel.addWidget(self._section_label("Theme"))
        self._theme_combo = QComboBox()
        self._theme_combo.blockSignals(True)
        for theme in self.themes:
            self._theme_combo.addItem(theme.name)
        self._theme_combo.blockSignals(False)
        self._theme_combo.currentIndexChanged.connect(self._on_theme_selected)
        panel.addWidget(self._theme_combo)
        panel.addStretch(1)
        root.addWidget(controls)
        root.addWidget(self._separator(vertical=True))

        content = QVBoxLayout()
        content.setSpacing(6)
        self._file_label = QLabel()
        self._file_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        content.addWidget(self._file_label)
        self.view = PrompterView()
        self.view.manualScroll.connect(self._on_manual_scroll)
        content.addWidget(self.view, 1)
        root.addLayout(content, 1)

        self.setCentralWidget(container)

    @staticmethod
    def _big_button(text: str, size: int) -> QPushButton:
        btn = QPushButton(text)
        btn.setFixedSize(size, size)
        btn.setFocusPolicy(Qt.NoFocus)
        btn.setStyleSheet(f"font-size: {max(14, size // 3)}px;")
        return btn

    @staticmethod
    def _section_label(text: str) -> QLabel:
        label = QLabel(text)
        label.setStyleSheet("font-size: 18px; font-weight: 600;")
        return label

    @staticmethod
    def _separator(vertical: bool = False) -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.VLine if vertical else QFrame.HLine)
        line.setFrameShadow(QFrame.Sunken)
        return line

    def _wire_shortcuts(self) -> None:
        bindings = [
            ("Space", self.toggle_play),
            ("R", self.restart),
            ("Ctrl+O", self.open_file_dialog),
            ("Up", lambda: self.adjust_speed(scroll.SPEED_STEP)),
            ("Down", lambda: self.adjust_speed(-scroll.SPEED_STEP)),
            ("Ctrl+=", lambda: self.adjust_font_size(scroll.FONT_SIZE_STEP)),
            ("Ctrl+-", lambda: self.adjust_font_size(-scroll.FONT_SIZE_STEP)),
        ]
        for seq, handler in bindings:
            shortcut = QShortcut(QKeySequence(seq), self)
            shortcut.setContext(Qt.WindowShortcut)
            shortcut.activated.connect(handler)
            self._shortcuts.append(shortcut)

    def _sync_controls(self) -> None:
        timer = self.session.timer
        self._play_button.setText(PAUSE_TEXT if timer.playing else PLAY_TEXT)
        self._speed_label.setText(f"{int(timer.speed)}px/s")
        self._font_label.setText(f"{timer.font_size:.0f}px")
        for widget, value in (
            (self._pause_checkbox, timer.pause_at_headings),
            (self._restart_checkbox, timer.auto_restart),
        ):
            widget.blockSignals(True)
            widget.setChecked(value)
            widget.blockSignals(False)
        self._duration_spin.blockSignals(True)
        self._duration_spin.setValue(timer.heading_pause_duration)
        self._duration_spin.blockSignals(False)
        self._duration_row.setVisible(timer.pause_at_headings)
        self._file_label.setText(self.session.document.title)

    def _status_message(self, msg: str, duration: int = 4000) -> None:
        self.statusBar().showMessage(msg, duration)

    # ------------------------------------------------------------- commands
    def open_file_dialog(self) -> None:
        patterns = " ".join(f"*{suffix}" for suffix in MARKDOWN_SUFFIXES)
        path, _ = QFileDialog.getOpenFileName(self, "Open Markdown", "", f"Markdown ({patterns});;All files (*)")
        if path:
            self.open_file(path)

    def open_file(self, path: str | Path) -> bool:
        if not self.session.open_file(path):
            self._status_message(self.session.last_error or f"Unable to open {path}")
            return False
        try:
            config.save_last_file(str(self.session.document.path))
        except OSError:
            logger.exception("Failed to remember last opened file")
        self._sync_controls()
        self._render_if_needed()
        return True

    def toggle_play(self) -> None:
        self.session.toggle_play()
        self._sync_controls()

    def restart(self) -> None:
        self.session.restart()
        self.view.set_scroll_offset(self.session.timer.position)

    def adjust_speed(self, delta: float) -> None:
        speed = self.session.timer.adjust_speed(delta)
        self._save_pref(config.save_scroll_speed, speed)
        self._sync_controls()

    def adjust_font_size(self, delta: float) -> None:
        size = self.session.timer.adjust_font_size(delta)
        self._save_pref(config.save_font_size, size)
        self._sync_controls()
        self._render_if_needed()

    def _save_pref(self, saver, value) -> None:
        try:
            saver(value)
        except OSError:
            logger.exception("Failed to save preference")

    def _on_pause_toggled(self, checked: bool) -> None:
        self.session.timer.pause_at_headings = checked
        self._save_pref(config.save_pause_at_headings, checked)
        self._duration_row.setVisible(checked)

    def _on_duration_changed(self, value: float) -> None:
        seconds = self.session.timer.set_heading_pause_duration(value)
        self._save_pref(config.save_heading_pause_duration, seconds)

    def _on_auto_restart_toggled(self, checked: bool) -> None:
        self.session.timer.auto_restart = checked
        self._save_pref(config.save_auto_restart, checked)

    def _on_theme_selected(self, index: int) -> None:
        if index < 0 or index >= len(self.themes):
            return
        theme = self.themes[index]
        self.apply_theme(theme)
        try:
            self.theme_store.save_selection(theme.name)
        except ThemeLoadError as exc:
            logger.error("Failed to save theme preference: %s", exc)

    def apply_theme(self, theme: Theme) -> None:
        self.session.theme = theme
        idx = self._theme_combo.findText(theme.name)
        if idx >= 0 and idx != self._theme_combo.currentIndex():
            self._theme_combo.blockSignals(True)
            self._theme_combo.setCurrentIndex(idx)
            self._theme_combo.blockSignals(False)
        self.view.apply_theme(theme)
        self.centralWidget().setStyleSheet(
            "background: rgb({}, {}, {});".format(*theme.background_rgb)
        )
        self._render_if_needed()

    def _on_manual_scroll(self, offset: float) -> None:
        self.session.timer.seek(offset)

    # ---------------------------------------------------------- frame loop
    def _render_if_needed(self) -> None:
        key = (self.session.revision, self.session.theme.name, self.session.timer.font_size)
        if key == self._rendered_key:
            return
        self._rendered_key = key
        self.view.render_lines(self.session.render_lines(), self.session.timer.font_size)
        self._file_label.setText(self.session.document.title)

    def _on_frame(self) -> None:
        was_playing = self.session.timer.playing
        self.session.check_file_updates()
        self._render_if_needed()
        if self.session.timer.playing:
            offset = self.session.frame(self.view.content_height(), self.view.viewport_height())
            self.view.set_scroll_offset(offset)
        if was_playing != self.session.timer.playing:
            self._sync_controls()

    def closeEvent(self, event):  # type: ignore[override]
        self._frame_timer.stop()
        self.session.close()
        super().closeEvent(event)
