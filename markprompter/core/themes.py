from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


class ThemeLoadError(RuntimeError):
    pass


@dataclass(frozen=True)
class Theme:
    name: str
    background_rgb: RGB
    text_rgb: RGB
    heading_rgb: Tuple[RGB, ...] = field(default_factory=tuple)

    def heading_color(self, level: int) -> RGB:
        """Return the color for a heading level, or the body color when the palette is short."""
        if 1 <= level <= len(self.heading_rgb):
            return self.heading_rgb[level - 1]
        return self.text_rgb

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "background_color": list(self.background_rgb),
            "text_color": list(self.text_rgb),
            "heading_colors": [list(color) for color in self.heading_rgb],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "Theme":
        if not isinstance(payload, dict):
            raise ThemeLoadError("Theme entries must be objects")
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ThemeLoadError("Theme is missing a name")
        headings = payload.get("heading_colors", [])
        if not isinstance(headings, list):
            raise ThemeLoadError(f"Theme {name!r} heading_colors must be a list")
        try:
            return cls(
                name=name,
                background_rgb=_rgb(payload["background_color"]),
                text_rgb=_rgb(payload["text_color"]),
                heading_rgb=tuple(_rgb(color) for color in headings),
            )
        except KeyError as exc:
            raise ThemeLoadError(f"Theme {name!r} is missing {exc.args[0]}") from exc


def _rgb(value) -> RGB:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ThemeLoadError(f"Expected an [r, g, b] triple, got {value!r}")
    try:
        channels = tuple(int(channel) for channel in value)
    except (TypeError, ValueError) as exc:
        raise ThemeLoadError(f"Invalid color {value!r}") from exc
    if any(channel < 0 or channel > 255 for channel in channels):
        raise ThemeLoadError(f"Color channel out of range in {value!r}")
    return channels  # type: ignore[return-value]


DEFAULT_THEME = Theme(
    name="Default",
    background_rgb=(40, 44, 52),
    text_rgb=(220, 223, 228),
    heading_rgb=(
        (255, 180, 100),
        (230, 160, 90),
        (210, 140, 80),
        (190, 120, 70),
        (170, 100, 60),
        (150, 80, 50),
    ),
)

# Accent/info/success/warning shared by the tinted palettes.
_ACCENT = (254, 243, 199)
_INFO = (125, 211, 252)
_SUCCESS = (167, 243, 208)
_WARNING = (254, 240, 138)


def _tinted(name: str, background: RGB, primary: RGB, secondary: RGB) -> Theme:
    return Theme(
        name=name,
        background_rgb=background,
        text_rgb=secondary,
        heading_rgb=(_ACCENT, primary, secondary, _INFO, _SUCCESS, _WARNING),
    )


BUILTIN_THEMES: List[Theme] = [
    Theme(
        name="Light",
        background_rgb=(240, 240, 245),
        text_rgb=(60, 60, 70),
        heading_rgb=((100, 100, 180), (90, 90, 170), (80, 80, 160), (70, 70, 150), (60, 60, 140), (50, 50, 130)),
    ),
    Theme(
        name="Dark",
        background_rgb=DEFAULT_THEME.background_rgb,
        text_rgb=DEFAULT_THEME.text_rgb,
        heading_rgb=DEFAULT_THEME.heading_rgb,
    ),
    Theme(
        name="Solarized",
        background_rgb=(0, 43, 54),
        text_rgb=(131, 148, 150),
        heading_rgb=((181, 137, 0), (203, 75, 22), (220, 50, 47), (211, 54, 130), (108, 113, 196), (38, 139, 210)),
    ),
    _tinted("After Dark", (32, 29, 101), (123, 121, 181), (172, 171, 213)),
    _tinted("Her", (101, 29, 29), (181, 121, 121), (213, 171, 171)),
    _tinted("Forest", (5, 46, 22), (74, 222, 128), (134, 239, 172)),
    Theme(
        name="Sky",
        background_rgb=(8, 47, 73),
        text_rgb=(125, 211, 252),
        heading_rgb=(_ACCENT, (56, 189, 248), (125, 211, 252), _SUCCESS, _WARNING, (252, 165, 165)),
    ),
    _tinted("Clays", (69, 26, 3), (217, 119, 6), (245, 158, 11)),
    _tinted("Stones", (41, 37, 36), (107, 114, 128), (156, 163, 175)),
]


class ThemeStore:
    """JSON file holding the theme list and the selected theme name."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> tuple[List[Theme], Optional[str]]:
        """Return (themes, selected name); write the built-ins when the file is missing."""
        if not self.path.exists():
            self._write(BUILTIN_THEMES, None)
            logger.info("Created theme file %s with %d themes", self.path, len(BUILTIN_THEMES))
            return list(BUILTIN_THEMES), None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            raise ThemeLoadError(f"Unable to read {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ThemeLoadError(f"{self.path} must contain an object")
        entries = payload.get("themes")
        if not isinstance(entries, list) or not entries:
            raise ThemeLoadError(f"{self.path} defines no themes")
        themes = [Theme.from_dict(entry) for entry in entries]
        # Older files carry no selection.
        selected = payload.get("selected_theme")
        return themes, selected if isinstance(selected, str) else None

    def save_selection(self, name: str) -> None:
        themes, _ = self.load()
        self._write(themes, name)

    def _write(self, themes: Sequence[Theme], selected: Optional[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"selected_theme": selected, "themes": [theme.to_dict() for theme in themes]}
        try:
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise ThemeLoadError(f"Unable to write {self.path}: {exc}") from exc


def pick_theme(themes: Sequence[Theme], selected: Optional[str]) -> Theme:
    if not themes:
        return DEFAULT_THEME
    if selected:
        wanted = selected.strip()
        for theme in themes:
            if theme.name == wanted:
                return theme
    return themes[0]


def load_themes_or_default(store: ThemeStore) -> tuple[List[Theme], Theme]:
    """Load themes from the store, falling back to the built-in default on any error."""
    try:
        themes, selected = store.load()
    except ThemeLoadError as exc:
        logger.warning("Error loading themes: %s; using the default theme", exc)
        return [DEFAULT_THEME], DEFAULT_THEME
    logger.info("Themes loaded successfully: %d themes", len(themes))
    return themes, pick_theme(themes, selected)
