from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List


class RunStyle(Enum):
    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: RunStyle = RunStyle.PLAIN


EMPHASIS_MARKERS = ("*", "_")
CODE_MARKER = "`"


def tokenize(line: str) -> List[StyledRun]:
    """Split one line into styled runs (plain, **bold**, *italic*, `code`).

    Single forward pass with one character of lookahead. Styles do not nest:
    while looking for a closer, every other character is content. An opener
    with no closer falls back to literal text, including everything scanned
    after it, and joins the surrounding plain run.
    """
    runs: List[StyledRun] = []
    pending: List[str] = []
    idx = 0
    length = len(line)

    def flush() -> None:
        if pending:
            runs.append(StyledRun("".join(pending)))
            pending.clear()

    while idx < length:
        ch = line[idx]
        if ch in EMPHASIS_MARKERS:
            if idx + 1 >= length:
                pending.append(ch)
                idx += 1
                continue
            if line[idx + 1] == ch:
                content, end, closed = _scan_double(line, idx + 2, ch)
                if closed:
                    flush()
                    runs.append(StyledRun(content, RunStyle.BOLD))
                else:
                    pending.append(ch * 2 + content)
            else:
                content, end, closed = _scan_single(line, idx + 1, ch)
                if closed:
                    flush()
                    runs.append(StyledRun(content, RunStyle.ITALIC))
                else:
                    pending.append(ch + content)
            idx = end
        elif ch == CODE_MARKER:
            content, end, closed = _scan_single(line, idx + 1, ch)
            if closed:
                flush()
                runs.append(StyledRun(content, RunStyle.CODE))
            else:
                pending.append(ch + content)
            idx = end
        else:
            pending.append(ch)
            idx += 1

    flush()
    return runs


def _scan_single(line: str, start: int, marker: str) -> tuple[str, int, bool]:
    """Return (content, next index, closed) for a span closed by one marker."""
    close = line.find(marker, start)
    if close < 0:
        return line[start:], len(line), False
    return line[start:close], close + 1, True


def _scan_double(line: str, start: int, marker: str) -> tuple[str, int, bool]:
    """Return (content, next index, closed) for a span closed by a doubled marker."""
    idx = start
    length = len(line)
    while idx < length:
        if line[idx] == marker and idx + 1 < length and line[idx + 1] == marker:
            return line[start:idx], idx + 2, True
        idx += 1
    return line[start:], length, False


def plain_text(runs: Iterable[StyledRun]) -> str:
    return "".join(run.text for run in runs)
