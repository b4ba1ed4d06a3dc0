from __future__ import annotations

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tex_jp_formatter.models import (
    CommandResult,
    FormatterConfig,
    MessageLevel,
    Position,
    Range,
    TextDocument,
    TextEdit,
)


def test_document_lines_and_ranges() -> None:
    document = TextDocument("一行目、\n二行目。\n", language_id="latex")

    assert document.language_id == "latex"
    # Trailing newline yields a final empty line
    assert document.line_count == 3
    line = document.line_at(1)
    assert line.text == "二行目。"
    assert line.range == Range.from_coords(1, 0, 1, 4)
    assert document.line_at(2).text == ""


def test_document_preserves_mixed_line_breaks() -> None:
    text = "a\r\nb\nc\rd"
    document = TextDocument(text)

    assert document.line_count == 4
    assert [document.line_at(i).text for i in range(4)] == ["a", "b", "c", "d"]
    assert document.get_text() == text
    assert len(document) == len(text)


def test_empty_document_has_one_line() -> None:
    document = TextDocument("")
    assert document.line_count == 1
    assert document.line_at(0).text == ""


def test_line_at_out_of_range() -> None:
    document = TextDocument("only")
    with pytest.raises(IndexError):
        document.line_at(1)


def test_offset_at() -> None:
    document = TextDocument("ab\r\ncd")
    assert document.offset_at(Position(0, 2)) == 2
    assert document.offset_at(Position(1, 0)) == 4
    assert document.offset_at(Position(1, 2)) == 6
    with pytest.raises(ValueError):
        document.offset_at(Position(1, 3))
    with pytest.raises(ValueError):
        document.offset_at(Position(2, 0))


def test_document_requires_text() -> None:
    with pytest.raises(TypeError):
        TextDocument(None)  # type: ignore[arg-type]


def test_document_names(tmp_path: Path) -> None:
    path = tmp_path / "paper.tex"
    document = TextDocument("", language_id="latex", path=path)
    assert document.file_name == "paper.tex"
    assert document.uri.startswith("file://")
    assert TextDocument("").file_name == "untitled"


def test_range_validation() -> None:
    with pytest.raises(ValueError):
        Range(Position(2, 0), Position(1, 0))
    with pytest.raises(ValueError):
        Position(-1, 0)


def test_text_edit_replace_line() -> None:
    line = TextDocument("これは、テスト").line_at(0)
    edit = TextEdit.replace_line(line, "これは，テスト")
    assert edit.range == line.range
    assert edit.new_text == "これは，テスト"


def test_formatter_config_defaults() -> None:
    config = FormatterConfig()
    assert config.enabled is True
    assert config.format_on_save is True
    assert config.target_languages == ("latex",)


def test_formatter_config_accepts_setting_keys() -> None:
    config = FormatterConfig(
        enabled=False, formatOnSave=False, targetLanguages=[" latex ", "", "markdown"]
    )
    assert config.enabled is False
    assert config.format_on_save is False
    assert config.target_languages == ("latex", "markdown")


def test_formatter_config_snapshot_is_immutable() -> None:
    config = FormatterConfig(targetLanguages=["latex"])
    with pytest.raises(AttributeError):
        config.target_languages.append("markdown")  # type: ignore[attr-defined]
    with pytest.raises(ValidationError):
        config.enabled = False  # type: ignore[misc]
    assert config.target_languages == ("latex",)


def test_formatter_config_none_means_default() -> None:
    config = FormatterConfig(enabled=None, formatOnSave=None, targetLanguages=None)
    assert config == FormatterConfig()


def test_formatter_config_single_language_string() -> None:
    assert FormatterConfig(targetLanguages="markdown").target_languages == ("markdown",)


def test_formatter_config_rejects_bad_values() -> None:
    with pytest.raises(ValueError):
        FormatterConfig(enabled="sometimes")
    with pytest.raises(ValueError):
        FormatterConfig(targetLanguages=42)


def test_message_level_values() -> None:
    assert MessageLevel("warning") is MessageLevel.WARNING
    assert CommandResult(MessageLevel.INFO, "done").ok
    assert not CommandResult(MessageLevel.ERROR, "failed").ok
