from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

HEADING_MAX_LEVEL = 6


@dataclass(frozen=True)
class Heading:
    line: int  # 0-based line number in the document
    level: int  # 1-6


def heading_level(line: str) -> int:
    """Return the ATX heading level of a line, or 0 when it is not a heading.

    Leading/trailing whitespace is ignored. A heading is 1-6 ``#`` characters
    followed by a space; ``####### x`` and ``#x`` are body text.
    """
    stripped = line.strip()
    hashes = len(stripped) - len(stripped.lstrip("#"))
    if 1 <= hashes <= HEADING_MAX_LEVEL and stripped[hashes:hashes + 1] == " ":
        return hashes
    return 0


def split_heading(line: str) -> tuple[int, str]:
    """Return (level, display text) with the marker prefix removed."""
    level = heading_level(line)
    if not level:
        return 0, line
    return level, line.strip()[level + 1:]


def extract_headings(lines: Iterable[str]) -> List[Heading]:
    items: List[Heading] = []
    for idx, line in enumerate(lines):
        level = heading_level(line)
        if level:
            items.append(Heading(line=idx, level=level))
    return items
