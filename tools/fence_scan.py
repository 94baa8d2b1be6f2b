#!/usr/bin/env python3
"""Find (and optionally repair) fenced code blocks without a language.

Only triple-backtick lines starting in column 0 count as fences. Fences do not
nest: the scan strictly alternates open/close, so a third marker simply opens
the next block. Indented fences (list items, blockquotes) are never recognized.
"""
from __future__ import annotations

import argparse
import pathlib
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple


FENCE = "```"
MAX_CODE_PREVIEW = 50
DEFAULT_LANGUAGE = "python"

OPEN_FENCE = re.compile(r"^```(\S*)")
BARE_FENCE = re.compile(r"^```\s*$")

MARKDOWN_SUFFIXES = {".md", ".markdown"}


@dataclass(frozen=True)
class Violation:
    line: int
    preview: str

    def format(self) -> str:
        return f'Line {self.line}: Missing language for code block. Code starts with: "{self.preview}"'


def code_preview(lines: Sequence[str], start: int) -> str:
    """Return the first meaningful line at or after *start*, clipped for display."""

    preview = ""
    for line in lines[start:]:
        if line.strip() and not line.startswith(FENCE):
            preview = line.strip()
            break
    if len(preview) > MAX_CODE_PREVIEW:
        preview = preview[:MAX_CODE_PREVIEW] + "..."
    return preview


def scan(body: str) -> List[Violation]:
    lines = body.split("\n")
    inside_code = False
    violations: List[Violation] = []
    for index, line in enumerate(lines):
        match = OPEN_FENCE.match(line)
        if not match:
            continue
        if inside_code:
            inside_code = False
            continue
        if not match.group(1):
            violations.append(Violation(index + 1, code_preview(lines, index + 1)))
        inside_code = True
    return violations


def autofix(body: str, language: str = DEFAULT_LANGUAGE) -> Tuple[str, bool]:
    """Tag every bare opening fence with *language*.

    Closing fences and block contents are left alone. Openers carrying text after
    whitespace (```` ``` foo ````) are reported by :func:`scan` but not rewritten.
    """

    lines = body.split("\n")
    inside_code = False
    changed = False
    for index, line in enumerate(lines):
        if not line.startswith(FENCE):
            continue
        if inside_code:
            inside_code = False
            continue
        inside_code = True
        if BARE_FENCE.match(line):
            ending = "\r" if line.endswith("\r") else ""
            lines[index] = f"{FENCE}{language}{ending}"
            changed = True
    return "\n".join(lines), changed


def iter_markdown_files(paths: Sequence[pathlib.Path]) -> Iterable[pathlib.Path]:
    for path in paths:
        if path.is_file():
            yield path
        elif path.is_dir():
            for sub in sorted(path.rglob("*")):
                if not sub.is_file() or sub.suffix.lower() not in MARKDOWN_SUFFIXES:
                    continue
                if ".git" in sub.relative_to(path).parts:
                    continue
                yield sub


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Report fenced code blocks that do not declare a language.")
    parser.add_argument("paths", nargs="*", default=["."], help="Markdown files or directories to scan")
    parser.add_argument("--fix", action="store_true", help=f"Tag bare opening fences with '{DEFAULT_LANGUAGE}' in place")
    parser.add_argument("--language", default=DEFAULT_LANGUAGE, help="Language used by --fix")
    args = parser.parse_args(argv)

    found = 0
    for file_path in iter_markdown_files([pathlib.Path(p) for p in args.paths]):
        with file_path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            text = handle.read()
        if args.fix:
            fixed_text, changed = autofix(text, args.language)
            if changed:
                with file_path.open("w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
                    handle.write(fixed_text)
                print(f"Patched fence opening language in {file_path}")
                text = fixed_text
        for violation in scan(text):
            # Undecodable bytes survive as surrogates; keep them off stdout.
            message = violation.format().encode("utf-8", "replace").decode("utf-8")
            print(f"{file_path}:{message}")
            found += 1

    if found:
        print(f"Found {found} code block(s) without a language.")
        return 1

    print("No missing code block languages found.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
