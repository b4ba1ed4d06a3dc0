"""Command-line entrypoint for the TeX Japanese formatter.

Runs the format command (or the save hook with ``--on-save``) over LaTeX
files on disk, using the same settings namespace as the editor integration.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

from .config.settings import SettingsError, SettingsManager, SettingsStore
from .extension import ActivationError, FormatterExtension
from .workspace import iter_latex_files, open_document

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DEFAULT_SETTINGS_FILE = Path(".vscode") / "settings.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tex-jp-format",
        description=(
            "Convert Japanese punctuation (、。) into fullwidth comma and full stop "
            "(，．) in LaTeX files."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        metavar="PATH",
        help="LaTeX files or directories (directories are scanned recursively).",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=DEFAULT_SETTINGS_FILE,
        help=f"JSON settings file (default: {DEFAULT_SETTINGS_FILE}; missing files are ignored).",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Load TEX_JAPANESE_FORMATTER_* settings from this .env file (overrides the environment).",
    )
    parser.add_argument(
        "--language-id",
        default=None,
        help="Language identifier to assume for every file (default: inferred from the suffix).",
    )
    parser.add_argument(
        "--on-save",
        action="store_true",
        help="Behave like the save hook: only format when formatOnSave is enabled.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report files that would change without writing them.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


def collect_files(paths: Iterable[Path]) -> tuple[list[Path], list[Path]]:
    """Expand ``paths`` into files, returning (files, missing paths)."""
    files: list[Path] = []
    missing: list[Path] = []
    for path in paths:
        if not path.exists():
            missing.append(path)
            continue
        for file_path in iter_latex_files(path):
            if file_path not in files:
                files.append(file_path)
    return files, missing


def run_cli(args: argparse.Namespace) -> int:
    if args.dotenv is not None:
        if not args.dotenv.is_file():
            print(f"Dotenv file not found: {args.dotenv}")
            return 1
        load_dotenv(dotenv_path=str(args.dotenv), override=True)
    else:
        load_dotenv()

    files, missing = collect_files(args.paths)
    if missing:
        print("Warning: some paths were not found:")
        for item in missing:
            print(f"  - {item}")
    if not files:
        print("No LaTeX files found. Exiting.")
        return 1

    try:
        store = SettingsStore(args.settings)
    except SettingsError as exc:
        LOGGER.error("%s", exc)
        print(f"Could not load settings: {exc}")
        return 1

    extension = FormatterExtension(SettingsManager(store))
    try:
        extension.activate()
    except ActivationError as exc:
        print(str(exc))
        return 2

    changed = 0
    failures = 0
    try:
        for path in files:
            try:
                document = open_document(path, args.language_id)
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.error("Could not read %s: %s", path, exc)
                print(f"{path}: could not read file ({exc})")
                failures += 1
                continue

            if args.check:
                edits = extension.check(document, on_save=args.on_save)
                if edits:
                    changed += 1
                    print(f"{path}: would reformat {len(edits)} line(s)")
            elif args.on_save:
                result = extension.save_hook(document)
                if not result.ok:
                    failures += 1
                    print(f"{path}: {result.message}")
                elif result.edits_applied:
                    changed += 1
                    print(f"{path}: formatted on save")
            else:
                result = extension.format_command(document)
                print(f"{path}: {result.message}")
                if not result.ok:
                    failures += 1
                elif result.edits_applied:
                    changed += 1
    finally:
        extension.deactivate()

    verb = "would be reformatted" if args.check else "reformatted"
    print(f"\n{changed} of {len(files)} file(s) {verb}.")
    if failures:
        print(f"Encountered {failures} error(s); see log output for details.")
        return 2
    if missing or (args.check and changed):
        return 1
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)
    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
