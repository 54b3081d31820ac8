import logging
import os
import time

from markprompter.core.reload_monitor import FAILURE_WARNING_THRESHOLD, ReloadMonitor


def _write(path, text, mtime_ns):
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(mtime_ns, mtime_ns))


BASE_NS = 1_700_000_000 * 1_000_000_000


def test_three_writes_in_one_interval_make_one_notification(tmp_path):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc)

    _write(doc, "v2", BASE_NS + 100_000_000)
    _write(doc, "v3", BASE_NS + 200_000_000)
    _write(doc, "v4", BASE_NS + 300_000_000)

    assert monitor.poll_once() is True
    assert monitor.try_take_pending_change() is True
    assert monitor.try_take_pending_change() is False


def test_changes_across_polls_coalesce_until_drained(tmp_path):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc)
    _write(doc, "v2", BASE_NS + 1_000_000_000)
    monitor.poll_once()
    _write(doc, "v3", BASE_NS + 2_000_000_000)
    monitor.poll_once()
    assert monitor.try_take_pending_change() is True
    assert monitor.try_take_pending_change() is False


def test_unchanged_or_older_mtime_is_not_a_change(tmp_path):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc)
    assert monitor.poll_once() is False
    os.utime(doc, ns=(BASE_NS - 5, BASE_NS - 5))
    assert monitor.poll_once() is False
    assert monitor.try_take_pending_change() is False


def test_deleted_file_is_not_a_change(tmp_path, caplog):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc)
    doc.unlink()
    caplog.set_level(logging.DEBUG, logger="markprompter.core.reload_monitor")
    for _ in range(FAILURE_WARNING_THRESHOLD + 3):
        assert monitor.poll_once() is False
    assert monitor.try_take_pending_change() is False
    assert monitor.consecutive_failures == FAILURE_WARNING_THRESHOLD + 3
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1


def test_recovery_resets_failures_and_detects_new_content(tmp_path):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc)
    doc.unlink()
    monitor.poll_once()
    _write(doc, "v2", BASE_NS + 1_000_000_000)
    assert monitor.poll_once() is True
    assert monitor.consecutive_failures == 0


def test_missing_at_start_records_baseline_first(tmp_path):
    doc = tmp_path / "later.md"
    monitor = ReloadMonitor(doc)
    _write(doc, "v1", BASE_NS)
    assert monitor.poll_once() is False
    _write(doc, "v2", BASE_NS + 1_000_000_000)
    assert monitor.poll_once() is True


def test_worker_thread_flags_change_and_stops(tmp_path):
    doc = tmp_path / "talk.md"
    _write(doc, "v1", BASE_NS)
    monitor = ReloadMonitor(doc, interval=0.05)
    monitor.start()
    try:
        assert monitor.is_running
        _write(doc, "v2", BASE_NS + 1_000_000_000)
        deadline = time.monotonic() + 3.0
        seen = False
        while time.monotonic() < deadline and not seen:
            seen = monitor.try_take_pending_change()
            time.sleep(0.02)
        assert seen
    finally:
        monitor.stop()
    assert not monitor.is_running
