import json
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from markprompter.app.session import PrompterSession
from markprompter.app.ui.main_window import MainWindow
from markprompter.core.reload_monitor import ReloadMonitor
from markprompter.core.scroll import ScrollTimer
from markprompter.core.themes import ThemeStore


@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(app, tmp_path, monkeypatch):
    monkeypatch.setenv("MARKPROMPTER_CONFIG_DIR", str(tmp_path))
    session = PrompterSession(
        ScrollTimer(speed=50.0),
        monitor_factory=lambda path: ReloadMonitor(path, interval=3600),
    )
    win = MainWindow(session=session, theme_store=ThemeStore(tmp_path / "themes.json"))
    win.resize(1200, 800)
    win.show()
    yield win
    win.close()


def test_starts_with_placeholder(window):
    assert "Open a markdown file" in window.view.toPlainText()


def test_open_file_renders_document(window, tmp_path):
    doc = tmp_path / "talk.md"
    doc.write_text("# Intro\nsay **hello**\n", encoding="utf-8")
    assert window.open_file(doc)
    assert window.view.toPlainText() == "Intro\nsay hello"
    saved = json.loads((tmp_path / ".markprompter_config.json").read_text(encoding="utf-8"))
    assert saved["last_file"] == str(doc)


def test_open_missing_file_shows_status(window, tmp_path):
    assert not window.open_file(tmp_path / "missing.md")
    assert "missing.md" in window.statusBar().currentMessage()


def test_speed_and_font_controls_persist(window, tmp_path):
    window.adjust_speed(10)
    window.adjust_font_size(2)
    assert window.session.timer.speed == 60.0
    assert window.session.timer.font_size == 20.0
    saved = json.loads((tmp_path / ".markprompter_config.json").read_text(encoding="utf-8"))
    assert saved["scroll_speed"] == 60.0
    assert saved["font_size"] == 20.0


def test_theme_selection_is_saved(window, tmp_path):
    window._theme_combo.setCurrentIndex(2)
    assert window.session.theme.name == "Solarized"
    payload = json.loads((tmp_path / "themes.json").read_text(encoding="utf-8"))
    assert payload["selected_theme"] == "Solarized"


def test_toggle_play_updates_button(window):
    window.toggle_play()
    assert window.session.timer.playing
    assert window._play_button.text() == "⏸"
    window.toggle_play()
    assert window._play_button.text() == "▶"


def test_close_stops_monitor(window, tmp_path):
    doc = tmp_path / "talk.md"
    doc.write_text("text\n", encoding="utf-8")
    window.open_file(doc)
    monitor = window.session.monitor
    window.close()
    assert not monitor.is_running
    assert window.session.monitor is None


def test_frame_drains_reload_flag_once(window, tmp_path, monkeypatch):
    doc = tmp_path / "talk.md"
    doc.write_text("text\n", encoding="utf-8")
    window.open_file(doc)
    window.toggle_play()
    calls = []

    def take():
        calls.append(True)
        return False

    monkeypatch.setattr(window.session.monitor, "try_take_pending_change", take)
    window._on_frame()
    assert calls == [True]
