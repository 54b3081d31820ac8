from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtWidgets import QApplication

from markprompter.app import config
from markprompter.app.session import PrompterSession
from markprompter.app.ui.main_window import MainWindow
from markprompter.core.document import FileReadError, load_document
from markprompter.core.export import export_html
from markprompter.core.scroll import ScrollTimer
from markprompter.core.themes import ThemeStore, load_themes_or_default, pick_theme


# ============================================================================
# DEBUG CONFIGURATION - Environment Variables
# ============================================================================
# Set these environment variables to "1" or "true" to enable detailed logging
#
# MARKPROMPTER_DEBUG_SCROLL  - Play/pause, heading holds, end-of-content policy
# MARKPROMPTER_DEBUG_RELOAD  - File monitor polling and reload notifications
# MARKPROMPTER_VERBOSE       - INFO level for every module (file open, themes)
# ============================================================================


def _qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Route Qt messages to stderr, dropping the platform plugin's size-hint noise."""
    # Emitted by the offscreen/wayland plugins on every window resize.
    if "does not support propagateSizeHints" in message:
        return
    if mode == QtMsgType.QtDebugMsg:
        print(f"Qt Debug: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtWarningMsg:
        print(f"Qt Warning: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtCriticalMsg:
        print(f"Qt Critical: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtFatalMsg:
        print(f"Qt Fatal: {message}", file=sys.stderr)
        sys.exit(1)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MarkPrompter markdown teleprompter.")
    parser.add_argument("file", nargs="?", help="Markdown file to open at startup.")
    parser.add_argument("--speed", type=float, help="Scroll speed in px/s (10-500).")
    parser.add_argument("--font-size", type=float, help="Body font size (8-72).")
    parser.add_argument("--pause-at-headings", action="store_true", default=None, help="Hold at each heading.")
    parser.add_argument("--pause-duration", type=float, help="Seconds to hold at each heading (0.5-10).")
    parser.add_argument("--auto-restart", action="store_true", default=None, help="Wrap to the top at the end.")
    parser.add_argument("--theme", help="Theme name to use for this run.")
    parser.add_argument("--export", metavar="OUT.html", help="Render FILE to a standalone HTML page and exit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level.")
    return parser.parse_args(argv)


def _diag(msg: str) -> None:
    """Lightweight diagnostic logger for startup/teardown events."""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    print(f"[MarkPrompterDiag {timestamp}] {msg}", file=sys.stderr)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose or config.debug_enabled("MARKPROMPTER_VERBOSE") else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_timer(args: argparse.Namespace) -> ScrollTimer:
    """Saved preferences, overridden by whatever was given on the command line."""
    return ScrollTimer(
        speed=args.speed if args.speed is not None else config.load_scroll_speed(),
        font_size=args.font_size if args.font_size is not None else config.load_font_size(),
        pause_at_headings=(
            args.pause_at_headings if args.pause_at_headings is not None else config.load_pause_at_headings()
        ),
        heading_pause_duration=(
            args.pause_duration if args.pause_duration is not None else config.load_heading_pause_duration()
        ),
        auto_restart=args.auto_restart if args.auto_restart is not None else config.load_auto_restart(),
    )


def _run_export(args: argparse.Namespace) -> int:
    """Headless export: no window, no monitor."""
    if not args.file:
        print("Error: --export needs a FILE to render.", file=sys.stderr)
        return 2
    try:
        document = load_document(args.file)
    except FileReadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    themes, theme = load_themes_or_default(ThemeStore(config.themes_path()))
    if args.theme:
        theme = pick_theme(themes, args.theme)
    font_size = args.font_size if args.font_size is not None else config.load_font_size()
    try:
        out = export_html(document, args.export, theme=theme, font_size=font_size)
    except OSError as exc:
        print(f"Error: unable to write {args.export}: {exc}", file=sys.stderr)
        return 1
    print(f"Exported {document.title} -> {out}")
    return 0


def main() -> None:
    args = _parse_args(sys.argv[1:])
    _configure_logging(args.verbose)
    config.init_settings()

    if args.export:
        sys.exit(_run_export(args))

    start_ts = time.time()
    _diag("Application starting.")
    qInstallMessageHandler(_qt_message_handler)
    qt_app = QApplication(sys.argv)
    qt_app.aboutToQuit.connect(lambda: _diag("QApplication aboutToQuit emitted."))

    session = PrompterSession(_build_timer(args))
    window = MainWindow(session=session)
    if args.theme:
        window.apply_theme(pick_theme(window.themes, args.theme))
    window.resize(1200, 800)
    if args.file:
        window.open_file(args.file)
    else:
        last_file = config.load_last_file()
        if last_file and Path(last_file).exists():
            window.open_file(last_file)
    try:
        window.show()
        _diag("Main window shown; entering Qt event loop.")
        rc = qt_app.exec()
        uptime = time.time() - start_ts
        _diag(f"Qt event loop exited with code {rc} after {uptime:.2f}s.")
        session.close()
        sys.exit(rc)
    except Exception as exc:
        uptime = time.time() - start_ts
        _diag(f"Unhandled exception after {uptime:.2f}s: {exc}")
        traceback.print_exc()
        session.close()
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
