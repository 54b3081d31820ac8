import pytest

from markprompter.core.document import Document, FileReadError, load_document, split_lines


@pytest.mark.parametrize(
    ("text", "lines"),
    [
        ("", []),
        ("one", ["one"]),
        ("one\n", ["one"]),
        ("one\n\n", ["one", ""]),
        ("a\r\nb\r\n", ["a", "b"]),
        ("a\n\nb", ["a", "", "b"]),
    ],
)
def test_split_lines(text, lines):
    assert split_lines(text) == lines


def test_load_document_indexes_headings(tmp_path):
    path = tmp_path / "talk.md"
    path.write_text("# Intro\nhello\n## Part\n", encoding="utf-8")
    doc = load_document(path)
    assert doc.path == path
    assert doc.title == "talk.md"
    assert [(h.line, h.level) for h in doc.headings] == [(0, 1), (2, 2)]
    assert not doc.is_empty


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileReadError):
        load_document(tmp_path / "nope.md")


def test_non_utf8_file_raises(tmp_path):
    path = tmp_path / "latin.md"
    path.write_bytes("café".encode("latin-1"))
    with pytest.raises(FileReadError, match="UTF-8"):
        load_document(path)


def test_empty_document():
    doc = Document.empty()
    assert doc.is_empty
    assert doc.lines == []
    assert doc.title == ""
