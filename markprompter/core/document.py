from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .headings import Heading, extract_headings

MARKDOWN_SUFFIXES = (".md", ".markdown")


class FileReadError(RuntimeError):
    pass


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` and the final empty line."""
    if not text:
        return []
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if text.endswith("\n"):
        lines.pop()
    return lines


@dataclass(frozen=True)
class Document:
    text: str = ""
    path: Optional[Path] = None
    lines: List[str] = field(default_factory=list)
    headings: List[Heading] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, path: Optional[Path] = None) -> "Document":
        lines = split_lines(text)
        return cls(text=text, path=path, lines=lines, headings=extract_headings(lines))

    @classmethod
    def empty(cls) -> "Document":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def title(self) -> str:
        return self.path.name if self.path else ""


def load_document(path: Path | str) -> Document:
    """Read a UTF-8 text file into a Document."""
    target = Path(path)
    try:
        text = target.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(f"{target} is not UTF-8 encoded text.") from exc
    except OSError as exc:
        raise FileReadError(f"Unable to read {target}: {exc.strerror or exc}") from exc
    return Document.from_text(text, target)
