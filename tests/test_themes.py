import json

import pytest

from markprompter.core.themes import (
    BUILTIN_THEMES,
    DEFAULT_THEME,
    Theme,
    ThemeLoadError,
    ThemeStore,
    load_themes_or_default,
    pick_theme,
)


def test_missing_file_is_created_with_builtins(tmp_path):
    store = ThemeStore(tmp_path / "themes.json")
    themes, selected = store.load()
    assert selected is None
    assert [t.name for t in themes] == [t.name for t in BUILTIN_THEMES]
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert len(payload["themes"]) == 9
    assert payload["themes"][0]["background_color"] == list(BUILTIN_THEMES[0].background_rgb)


def test_selection_round_trips(tmp_path):
    store = ThemeStore(tmp_path / "themes.json")
    store.load()
    store.save_selection("Forest")
    themes, selected = store.load()
    assert selected == "Forest"
    assert pick_theme(themes, selected).name == "Forest"


def test_file_without_selection_is_accepted(tmp_path):
    path = tmp_path / "themes.json"
    path.write_text(
        json.dumps(
            {
                "themes": [
                    {"name": "Mono", "background_color": [0, 0, 0], "text_color": [255, 255, 255]},
                ]
            }
        ),
        encoding="utf-8",
    )
    themes, selected = ThemeStore(path).load()
    assert selected is None
    assert themes == [Theme("Mono", (0, 0, 0), (255, 255, 255))]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"themes": []}),
        json.dumps({"themes": [{"name": "x", "background_color": [0, 0], "text_color": [1, 1, 1]}]}),
        json.dumps({"themes": [{"name": "x", "background_color": [0, 0, 300], "text_color": [1, 1, 1]}]}),
        json.dumps({"themes": [{"background_color": [0, 0, 0], "text_color": [1, 1, 1]}]}),
    ],
)
def test_bad_files_raise(tmp_path, content):
    path = tmp_path / "themes.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ThemeLoadError):
        ThemeStore(path).load()


def test_bad_file_falls_back_to_default(tmp_path):
    path = tmp_path / "themes.json"
    path.write_text("{broken", encoding="utf-8")
    themes, theme = load_themes_or_default(ThemeStore(path))
    assert themes == [DEFAULT_THEME]
    assert theme is DEFAULT_THEME


def test_pick_theme_trims_and_falls_back():
    assert pick_theme(BUILTIN_THEMES, "  Solarized ").name == "Solarized"
    assert pick_theme(BUILTIN_THEMES, "Unknown").name == BUILTIN_THEMES[0].name
    assert pick_theme(BUILTIN_THEMES, None).name == BUILTIN_THEMES[0].name
    assert pick_theme([], "Dark") is DEFAULT_THEME


def test_heading_color_falls_back_to_text():
    theme = Theme("Short", (0, 0, 0), (9, 9, 9), ((1, 2, 3), (4, 5, 6)))
    assert theme.heading_color(1) == (1, 2, 3)
    assert theme.heading_color(2) == (4, 5, 6)
    assert theme.heading_color(3) == (9, 9, 9)
    assert theme.heading_color(0) == (9, 9, 9)


def test_builtins_have_full_palettes():
    assert len(BUILTIN_THEMES) == 9
    assert len({t.name for t in BUILTIN_THEMES}) == 9
    assert all(len(t.heading_rgb) == 6 for t in BUILTIN_THEMES)


@pytest.mark.parametrize("headings", [None, "red", {"h1": [1, 2, 3]}])
def test_non_list_heading_colors_fall_back_to_default(tmp_path, headings):
    path = tmp_path / "themes.json"
    entry = {"name": "x", "background_color": [0, 0, 0], "text_color": [1, 1, 1], "heading_colors": headings}
    path.write_text(json.dumps({"themes": [entry]}), encoding="utf-8")
    with pytest.raises(ThemeLoadError):
        ThemeStore(path).load()
    themes, theme = load_themes_or_default(ThemeStore(path))
    assert themes == [DEFAULT_THEME]
    assert theme is DEFAULT_THEME


def test_non_utf8_theme_file_falls_back_to_default(tmp_path):
    path = tmp_path / "themes.json"
    path.write_bytes(b'\xff\xfe{"themes": []}')
    with pytest.raises(ThemeLoadError):
        ThemeStore(path).load()
    themes, theme = load_themes_or_default(ThemeStore(path))
    assert themes == [DEFAULT_THEME]
    assert theme is DEFAULT_THEME
