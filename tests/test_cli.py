"""Tests for the ``tex-jp-format`` command-line interface."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tex_jp_formatter.cli import collect_files, main, parse_args

ENV_VARS = (
    "TEX_JAPANESE_FORMATTER_ENABLED",
    "TEX_JAPANESE_FORMATTER_FORMAT_ON_SAVE",
    "TEX_JAPANESE_FORMATTER_TARGET_LANGUAGES",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv (rather than delenv) so monkeypatch also undoes values load_dotenv writes
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")


def _settings(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "thesis"
    (root / "chapters").mkdir(parents=True)
    (root / "main.tex").write_text("\\section{序論}\n本稿では、次を示す。\n", encoding="utf-8")
    (root / "chapters" / "done.tex").write_text("完了，済み．\n", encoding="utf-8")
    (root / "README.md").write_text("説明、です。\n", encoding="utf-8")
    return root


def test_parse_args_defaults() -> None:
    args = parse_args(["paper.tex"])
    assert args.paths == [Path("paper.tex")]
    assert args.check is False
    assert args.on_save is False
    assert args.log_level == "WARNING"


def test_collect_files(tmp_path: Path) -> None:
    root = _project(tmp_path)
    files, missing = collect_files([root, root / "main.tex", tmp_path / "nope"])

    assert files == [root / "chapters" / "done.tex", root / "main.tex"]
    assert missing == [tmp_path / "nope"]


def test_formats_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)

    exit_code = main([str(root), "--settings", str(tmp_path / "none.json")])

    assert exit_code == 0
    assert (root / "main.tex").read_text(encoding="utf-8") == (
        "\\section{序論}\n本稿では，次を示す．\n"
    )
    assert (root / "README.md").read_text(encoding="utf-8") == "説明、です。\n"
    output = capsys.readouterr().out
    assert "Japanese punctuation formatted!" in output
    assert "No Japanese punctuation found to format." in output
    assert "1 of 2 file(s) reformatted." in output


def test_check_mode_does_not_write(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)

    exit_code = main([str(root), "--check", "--settings", str(tmp_path / "none.json")])

    assert exit_code == 1
    assert "本稿では、次を示す。" in (root / "main.tex").read_text(encoding="utf-8")
    assert "would reformat 1 line(s)" in capsys.readouterr().out


def test_check_mode_clean(tmp_path: Path) -> None:
    root = _project(tmp_path)
    assert main([str(root / "chapters"), "--check", "--settings", str(tmp_path / "x.json")]) == 0


def test_on_save_respects_format_on_save(tmp_path: Path) -> None:
    root = _project(tmp_path)
    settings = _settings(tmp_path, {"texJapaneseFormatter.formatOnSave": False})

    assert main([str(root / "main.tex"), "--on-save", "--settings", str(settings)]) == 0
    assert "本稿では、次を示す。" in (root / "main.tex").read_text(encoding="utf-8")

    assert main([str(root / "main.tex"), "--settings", str(settings)]) == 0
    assert "本稿では，次を示す．" in (root / "main.tex").read_text(encoding="utf-8")


def test_explicit_file_uses_language_from_suffix(tmp_path: Path) -> None:
    root = _project(tmp_path)
    readme = root / "README.md"
    settings = _settings(
        tmp_path, {"texJapaneseFormatter": {"targetLanguages": ["latex", "markdown"]}}
    )

    assert main([str(readme), "--settings", str(tmp_path / "none.json")]) == 0
    assert readme.read_text(encoding="utf-8") == "説明、です。\n"

    assert main([str(readme), "--settings", str(settings)]) == 0
    assert readme.read_text(encoding="utf-8") == "説明，です．\n"


def test_language_id_override(tmp_path: Path) -> None:
    path = tmp_path / "draft.txt"
    path.write_text("下書き、です。", encoding="utf-8")

    assert main([str(path), "--language-id", "latex", "--settings", str(tmp_path / "n.json")]) == 0
    assert path.read_text(encoding="utf-8") == "下書き，です．"


def test_dotenv_settings(tmp_path: Path) -> None:
    root = _project(tmp_path)
    env_file = tmp_path / "formatter.env"
    env_file.write_text("TEX_JAPANESE_FORMATTER_ENABLED=false\n", encoding="utf-8")

    exit_code = main(
        [str(root), "--dotenv", str(env_file), "--settings", str(tmp_path / "none.json")]
    )

    assert exit_code == 0
    assert "本稿では、次を示す。" in (root / "main.tex").read_text(encoding="utf-8")


def test_missing_dotenv_file(tmp_path: Path) -> None:
    root = _project(tmp_path)
    assert main([str(root), "--dotenv", str(tmp_path / "missing.env")]) == 1


def test_missing_paths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "missing.tex")]) == 1
    assert "No LaTeX files found" in capsys.readouterr().out


def test_partially_missing_paths(tmp_path: Path) -> None:
    root = _project(tmp_path)
    exit_code = main(
        [str(root / "main.tex"), str(tmp_path / "gone.tex"), "--settings", str(tmp_path / "n.json")]
    )
    assert exit_code == 1
    assert "本稿では，次を示す．" in (root / "main.tex").read_text(encoding="utf-8")


def test_invalid_settings_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)
    settings = tmp_path / "settings.json"
    settings.write_text("{broken", encoding="utf-8")

    assert main([str(root), "--settings", str(settings)]) == 1
    assert "Could not load settings" in capsys.readouterr().out


def test_commented_workspace_settings(tmp_path: Path) -> None:
    root = _project(tmp_path)
    settings = tmp_path / ".vscode" / "settings.json"
    settings.parent.mkdir()
    settings.write_text('{ // editor prefs\n "editor.tabSize": 2, }', encoding="utf-8")

    assert main([str(root / "main.tex"), "--settings", str(settings)]) == 0
    assert "本稿では，次を示す．" in (root / "main.tex").read_text(encoding="utf-8")


def test_unreadable_file_counts_as_failure(tmp_path: Path) -> None:
    path = tmp_path / "binary.tex"
    path.write_bytes(b"\xff\xfe\x00broken")

    assert main([str(path), "--settings", str(tmp_path / "n.json")]) == 2


@pytest.mark.parametrize("mode", [[], ["--on-save"]])
def test_write_failure_counts_as_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], mode: list[str]
) -> None:
    path = tmp_path / "paper.tex"
    path.write_text("一、", encoding="utf-8")

    with patch(
        "tex_jp_formatter.workspace.write_text_atomic",
        side_effect=OSError("disk full"),
    ):
        exit_code = main([str(path), *mode, "--settings", str(tmp_path / "n.json")])

    assert exit_code == 2
    assert path.read_text(encoding="utf-8") == "一、"
    output = capsys.readouterr().out
    assert "Formatting failed: could not apply edits." in output
    assert "0 of 1 file(s) reformatted." in output
