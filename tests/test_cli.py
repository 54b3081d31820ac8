import pytest
from PySide6.QtCore import QtMsgType

from markprompter.app import config
from markprompter.app.main import _build_timer, _parse_args, _qt_message_handler, _run_export


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("MARKPROMPTER_CONFIG_DIR", str(tmp_path))
    return tmp_path


def test_timer_uses_saved_preferences():
    config.save_scroll_speed(80)
    config.save_pause_at_headings(True)
    timer = _build_timer(_parse_args([]))
    assert timer.speed == 80.0
    assert timer.pause_at_headings is True
    assert timer.auto_restart is False


def test_command_line_overrides_preferences():
    config.save_scroll_speed(80)
    timer = _build_timer(_parse_args(["--speed", "1000", "--font-size", "30", "--auto-restart"]))
    assert timer.speed == 500.0
    assert timer.font_size == 30.0
    assert timer.auto_restart is True


def test_export_writes_page(tmp_path, capsys):
    source = tmp_path / "talk.md"
    source.write_text("# Intro\n\n- [x] done\n", encoding="utf-8")
    out = tmp_path / "talk.html"
    rc = _run_export(_parse_args([str(source), "--export", str(out), "--theme", "Forest"]))
    assert rc == 0
    page = out.read_text(encoding="utf-8")
    assert "<h1>Intro</h1>" in page
    assert "rgb(5, 46, 22)" in page
    assert "Exported talk.md" in capsys.readouterr().out


def test_export_without_file_fails(tmp_path):
    assert _run_export(_parse_args(["--export", str(tmp_path / "x.html")])) == 2


def test_export_missing_source_fails(tmp_path, capsys):
    rc = _run_export(_parse_args([str(tmp_path / "gone.md"), "--export", str(tmp_path / "x.html")]))
    assert rc == 1
    assert "Error" in capsys.readouterr().err


def test_qt_messages_go_to_stderr_except_size_hint_noise(capsys):
    _qt_message_handler(QtMsgType.QtWarningMsg, None, "This plugin does not support propagateSizeHints()")
    assert capsys.readouterr().err == ""
    _qt_message_handler(QtMsgType.QtWarningMsg, None, "QFont::setPointSizeF: Point size <= 0")
    assert "Qt Warning: QFont::setPointSizeF" in capsys.readouterr().err
