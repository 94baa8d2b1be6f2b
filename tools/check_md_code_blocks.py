#!/usr/bin/env python3
"""Check the triggering issue/pull request body for code blocks without a language.

Runs inside GitHub Actions on ``issues`` and ``pull_request_target`` events:

* scan-only mode posts a status comment listing every offending block and exits 1
  so the workflow blocks;
* ``--fix`` mode tags bare opening fences with a default language, writes the body
  back, posts a notice asking the author to double-check, and exits 0.

Once the body is clean, a previously posted status comment is deleted.

Requires env: GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_EVENT_PATH. GITHUB_ACTOR
and GITHUB_API_URL are optional. Settings may also come from a YAML file passed
with ``--config`` or CODE_BLOCK_CHECKER_CONFIG.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import yaml

from tools.fence_scan import DEFAULT_LANGUAGE, autofix, scan
from tools.github_api import DEFAULT_API_URL, GitHubClient
from tools.status_comment import (
    COMMENTS_PER_PAGE,
    NoOp,
    apply_decision,
    build_fix_notice,
    build_report_comment,
    find_status_comment,
    reconcile,
)


CONFIG_ENV = "CODE_BLOCK_CHECKER_CONFIG"
CONFIG_KEYS = {"autofix", "default_language", "comments_per_page"}


class ConfigError(ValueError):
    pass


def debug(msg: str) -> None:
    print(msg, file=sys.stderr)


@dataclass
class Settings:
    token: str
    repository: str
    event_path: Path
    actor: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    autofix: bool = False
    default_language: str = DEFAULT_LANGUAGE
    comments_per_page: int = COMMENTS_PER_PAGE

    @property
    def owner(self) -> str:
        return self.repository.split("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/")[1]


@dataclass
class Thread:
    number: int
    body: str
    kind: str


def load_config_file(path: Path) -> Dict[str, object]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"{path}: unknown setting(s): {', '.join(unknown)}")
    return data


def load_settings(args: argparse.Namespace, environ: Mapping[str, str]) -> Settings:
    token = environ.get("GITHUB_TOKEN")
    repository = environ.get("GITHUB_REPOSITORY")
    event_path = environ.get("GITHUB_EVENT_PATH")
    if not token or not repository or not event_path:
        raise ConfigError("Missing required environment variables.")
    if repository.count("/") != 1 or not all(repository.split("/")):
        raise ConfigError(f"GITHUB_REPOSITORY must look like owner/repo, got {repository!r}")

    config: Dict[str, object] = {}
    config_path = args.config or environ.get(CONFIG_ENV)
    if config_path:
        config = load_config_file(Path(config_path))

    autofix_enabled = bool(config.get("autofix", False))
    if args.fix is not None:
        autofix_enabled = args.fix

    per_page = config.get("comments_per_page", COMMENTS_PER_PAGE)
    if not isinstance(per_page, int) or isinstance(per_page, bool) or not 1 <= per_page <= 100:
        raise ConfigError(f"comments_per_page must be an integer between 1 and 100, got {per_page!r}")

    language = str(config.get("default_language") or DEFAULT_LANGUAGE)
    if not language.strip() or any(ch.isspace() for ch in language):
        raise ConfigError(f"default_language must be a single token, got {language!r}")

    return Settings(
        token=token,
        repository=repository,
        event_path=Path(event_path),
        actor=environ.get("GITHUB_ACTOR") or None,
        api_url=environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
        autofix=autofix_enabled,
        default_language=language,
        comments_per_page=per_page,
    )


def load_thread(event_path: Path) -> Thread:
    event = json.loads(event_path.read_text(encoding="utf-8"))
    if not isinstance(event, dict):
        raise ValueError(f"{event_path}: event payload is not a JSON object")

    if isinstance(event.get("issue"), dict):
        payload, kind = event["issue"], "issue"
    elif isinstance(event.get("pull_request"), dict):
        payload, kind = event["pull_request"], "pull request"
    else:
        raise ValueError(f"{event_path}: event carries neither an issue nor a pull request")

    number = payload.get("number")
    if not isinstance(number, int) or isinstance(number, bool):
        raise ValueError(f"{event_path}: {kind} number is missing")
    # GitHub sends null for an empty description.
    return Thread(number=number, body=payload.get("body") or "", kind=kind)


def run(settings: Settings, thread: Thread, client) -> int:
    owner, repo = settings.owner, settings.repo
    violations = scan(thread.body)
    debug(f"Scanned {thread.kind} #{thread.number}: {len(violations)} code block(s) without a language")

    existing = find_status_comment(
        client, owner, repo, thread.number, settings.actor, settings.comments_per_page
    )
    if existing is not None:
        debug(f"Found status comment {existing.id}")

    if violations and settings.autofix:
        fixed_body, changed = autofix(thread.body, settings.default_language)
        if changed:
            client.update_thread_body(owner, repo, thread.number, fixed_body, thread.kind)
            debug(f"Updated {thread.kind} #{thread.number} body")
            decision = reconcile(build_fix_notice(thread.kind, settings.default_language), existing)
            apply_decision(client, owner, repo, thread.number, decision)
            print("Fixed missing code block languages and notified the user.")
            return 0
        debug("No bare opening fence could be rewritten; reporting instead")

    if violations:
        decision = reconcile(build_report_comment(violations, thread.kind), existing)
        apply_decision(client, owner, repo, thread.number, decision)
        for violation in violations:
            print(violation.format())
        print(f"Found {len(violations)} code block(s) without a language.")
        return 1

    decision = reconcile(None, existing)
    apply_decision(client, owner, repo, thread.number, decision)
    if isinstance(decision, NoOp):
        print("All code blocks have language specified.")
    else:
        print("All code blocks have language specified. Thank you.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check issue/pull request bodies for code blocks without a language.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--fix", dest="fix", action="store_true", default=None, help="Tag bare fences and update the body")
    mode.add_argument("--no-fix", dest="fix", action="store_false", help="Only report; exit 1 on findings")
    parser.add_argument("--config", help=f"YAML settings file (defaults to ${CONFIG_ENV})")
    parser.set_defaults(fix=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args, os.environ)
    except (ConfigError, OSError, yaml.YAMLError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    try:
        thread = load_thread(settings.event_path)
        client = GitHubClient(settings.token, api_url=settings.api_url)
        return run(settings, thread, client)
    except Exception:  # surfaced in the workflow log
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
