from __future__ import annotations

from typing import Dict, List, Optional

import pytest


class FakeGitHub:
    """In-memory stand-in for ``GitHubClient`` that records every call."""

    def __init__(self, comments: Optional[List[Dict[str, object]]] = None) -> None:
        self.comments: List[Dict[str, object]] = list(comments or [])
        self.calls: List[tuple] = []
        self.next_id = 1000

    def list_comments(self, owner, repo, number, page, per_page):
        self.calls.append(("list", page, per_page))
        start = (page - 1) * per_page
        return self.comments[start : start + per_page]

    def create_comment(self, owner, repo, number, text):
        self.calls.append(("create", number, text))
        self.next_id += 1
        comment = {"id": self.next_id, "user": {"login": "github-actions[bot]", "type": "Bot"}, "body": text}
        self.comments.append(comment)
        return comment

    def update_comment(self, owner, repo, comment_id, text):
        self.calls.append(("update", comment_id, text))

    def delete_comment(self, owner, repo, comment_id):
        self.calls.append(("delete", comment_id))

    def update_thread_body(self, owner, repo, number, text, kind):
        self.calls.append(("body", number, text, kind))

    def mutations(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "list"]


def _make_comment(comment_id: int, body: str, login: str = "someone", user_type: str = "User") -> Dict[str, object]:
    return {"id": comment_id, "user": {"login": login, "type": user_type}, "body": body}


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def make_comment():
    return _make_comment
