"""Locate and reconcile the checker's single status comment on a thread.

The status comment is recognized by :data:`MARKER`, an HTML comment that does not
render. Only the first matching bot comment is managed; later duplicates are left
alone.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from tools.fence_scan import DEFAULT_LANGUAGE, Violation


MARKER = "<!-- markdown-code-block-checker -->"
COMMENTS_PER_PAGE = 10
BOT_LOGIN = "github-actions[bot]"


@dataclass(frozen=True)
class ThreadComment:
    id: int
    author_login: str
    author_type: str
    body: str

    @classmethod
    def from_api(cls, payload: Dict[str, object]) -> "ThreadComment":
        user = payload.get("user")
        if not isinstance(user, dict):
            user = {}
        return cls(
            id=int(payload.get("id") or 0),
            author_login=str(user.get("login") or ""),
            author_type=str(user.get("type") or ""),
            body=str(payload.get("body") or ""),
        )

    def author_kind(self, actor: Optional[str]) -> str:
        if self.author_type == "Bot" or self.author_login == BOT_LOGIN:
            return "bot"
        if actor and self.author_login == actor:
            return "workflow"
        return "other"


def is_status_comment(comment: ThreadComment, actor: Optional[str], marker: str = MARKER) -> bool:
    return comment.author_kind(actor) != "other" and marker in comment.body


def find_status_comment(
    client,
    owner: str,
    repo: str,
    number: int,
    actor: Optional[str],
    per_page: int = COMMENTS_PER_PAGE,
) -> Optional[ThreadComment]:
    page = 1
    while True:
        payload = client.list_comments(owner, repo, number, page, per_page)
        if not payload:
            return None
        for raw in payload:
            comment = ThreadComment.from_api(raw)
            if is_status_comment(comment, actor):
                return comment
        if len(payload) < per_page:
            return None
        page += 1


@dataclass(frozen=True)
class Create:
    text: str


@dataclass(frozen=True)
class Update:
    comment_id: int
    text: str


@dataclass(frozen=True)
class Delete:
    comment_id: int


@dataclass(frozen=True)
class NoOp:
    pass


Decision = Union[Create, Update, Delete, NoOp]


def reconcile(text: Optional[str], existing: Optional[ThreadComment]) -> Decision:
    """Decide the single comment mutation that brings the thread up to date.

    ``text`` is the desired status comment, or ``None`` when the thread is clean.
    """

    if text is None:
        if existing is None:
            return NoOp()
        return Delete(existing.id)
    if existing is None:
        return Create(text)
    if existing.body != text:
        return Update(existing.id, text)
    return NoOp()


def apply_decision(client, owner: str, repo: str, number: int, decision: Decision) -> None:
    if isinstance(decision, Create):
        client.create_comment(owner, repo, number, decision.text)
    elif isinstance(decision, Update):
        client.update_comment(owner, repo, decision.comment_id, decision.text)
    elif isinstance(decision, Delete):
        client.delete_comment(owner, repo, decision.comment_id)


def build_report_comment(violations: Iterable[Violation], kind: str) -> str:
    lines: List[str] = [
        MARKER,
        f":warning: Some code blocks in this {kind} description do not specify a language.",
        "",
        "Please add the language after the opening triple backticks of each block listed below.",
        "",
        "```text",
    ]
    lines.extend(violation.format() for violation in violations)
    lines.append("```")
    return "\n".join(lines)


def build_fix_notice(kind: str, language: str = DEFAULT_LANGUAGE) -> str:
    return "\n".join(
        [
            MARKER,
            f":information_source: All code blocks without a language in this {kind} description "
            f"were set to `{language}` by default.",
            "",
            "**You must check if the language was guessed correctly.**",
            "",
            "> In the future, please specify the language after the opening triple backticks in your code snippets.",
            "",
            "Example:",
            "````markdown",
            f"```{language}",
            'print("hello world")',
            "```",
            "````",
        ]
    )
