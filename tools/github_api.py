"""Minimal GitHub REST client for issue/pull request comments and bodies."""
from __future__ import annotations

from typing import Dict, List, Optional

import requests


DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "md-code-block-checker"


class GitHubAPIError(RuntimeError):
    def __init__(self, method: str, url: str, status: int, detail: str) -> None:
        super().__init__(f"{method} {url} failed: HTTP {status}: {detail[:200]}")
        self.method = method
        self.url = url
        self.status = status


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": USER_AGENT,
            }
        )

    def _request(self, method: str, path: str, expected: int, **kwargs) -> requests.Response:
        url = f"{self.api_url}{path}"
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code != expected:
            raise GitHubAPIError(method, url, response.status_code, response.text)
        return response

    def list_comments(self, owner: str, repo: str, number: int, page: int, per_page: int) -> List[Dict[str, object]]:
        response = self._request(
            "GET",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            200,
            params={"page": page, "per_page": per_page},
        )
        payload = response.json()
        if not isinstance(payload, list):
            return []
        return payload

    def create_comment(self, owner: str, repo: str, number: int, text: str) -> Dict[str, object]:
        response = self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/comments", 201, json={"body": text})
        return response.json()

    def update_comment(self, owner: str, repo: str, comment_id: int, text: str) -> None:
        self._request("PATCH", f"/repos/{owner}/{repo}/issues/comments/{comment_id}", 200, json={"body": text})

    def delete_comment(self, owner: str, repo: str, comment_id: int) -> None:
        self._request("DELETE", f"/repos/{owner}/{repo}/issues/comments/{comment_id}", 204)

    def update_thread_body(self, owner: str, repo: str, number: int, text: str, kind: str) -> None:
        # Pull request bodies live on the pulls endpoint; issues (and issue_comment
        # payloads for PRs) go through the issues endpoint.
        collection = "pulls" if kind == "pull request" else "issues"
        self._request("PATCH", f"/repos/{owner}/{repo}/{collection}/{number}", 200, json={"body": text})
