"""GitHub REST client for the git-object endpoints (refs, blobs, trees, commits).

Only the calls needed to read an owners file and land a single commit on a
branch are implemented. Every non-2xx response is raised as ``GitHubError``
carrying GitHub's own ``message`` text.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from ownersync import __version__
from ownersync.config.schema import DEFAULT_API_URL
from ownersync.github.models import (
    Blob,
    CommitAuthor,
    GitCommit,
    Ref,
    RepositoryCommit,
    Tree,
    TreeEntry,
)

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Raised when the GitHub API is unreachable or returns an error."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code} from {response.request.method} {response.request.url.path}"


class GitHubClient:
    """Client for the GitHub git database API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize GitHub client.

        Args:
            token: Personal access token or app installation token
            base_url: API root, override for GitHub Enterprise
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"ownersync/{__version__}",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubError(f"{method} {url} failed: {exc}") from exc
        if response.is_error:
            raise GitHubError(_error_message(response), status_code=response.status_code)
        return response.json()

    # ---- refs ----

    def get_ref(self, owner: str, repo: str, ref: str) -> Ref:
        """Resolve *ref* (e.g. ``heads/main``) to the commit it points at."""
        data = self._request("GET", f"/repos/{owner}/{repo}/git/ref/{ref}")
        return Ref(ref=data["ref"], sha=data["object"]["sha"])

    def update_ref(self, owner: str, repo: str, ref: str, sha: str, *, force: bool = False) -> Ref:
        """Move *ref* to *sha*. Without *force* GitHub rejects non fast-forwards."""
        data = self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/git/refs/{ref}",
            json={"sha": sha, "force": force},
        )
        return Ref(ref=data["ref"], sha=data["object"]["sha"])

    # ---- blobs / trees / commits ----

    def create_blob(self, owner: str, repo: str, content: bytes) -> Blob:
        """Upload raw bytes as a blob, for content that is not valid UTF-8."""
        data = self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/blobs",
            json={"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"},
        )
        return Blob(sha=data["sha"])

    def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> Tree:
        data = self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/trees",
            json={"base_tree": base_tree, "tree": [e.to_dict() for e in entries]},
        )
        return Tree(sha=data["sha"])

    def get_commit(self, owner: str, repo: str, sha: str) -> RepositoryCommit:
        data = self._request("GET", f"/repos/{owner}/{repo}/commits/{sha}")
        return RepositoryCommit.from_api(data)

    def create_commit(
        self,
        owner: str,
        repo: str,
        *,
        message: str,
        tree_sha: str,
        parent_shas: List[str],
        author: CommitAuthor,
        committer: CommitAuthor,
        signature: Optional[str] = None,
    ) -> GitCommit:
        payload: Dict[str, Any] = {
            "message": message,
            "tree": tree_sha,
            "parents": parent_shas,
            "author": author.to_dict(),
            "committer": committer.to_dict(),
        }
        if signature:
            payload["signature"] = signature
        data = self._request("POST", f"/repos/{owner}/{repo}/git/commits", json=payload)
        return GitCommit.from_api(data)

    # ---- contents ----

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[bytes]:
        """Return the raw bytes of *path* at *ref*, or None if it does not exist."""
        try:
            data = self._request(
                "GET", f"/repos/{owner}/{repo}/contents/{quote(path)}", params={"ref": ref}
            )
        except GitHubError as exc:
            if exc.is_not_found:
                return None
            raise
        if not isinstance(data, dict) or data.get("type") != "file":
            raise GitHubError(f"{path} is not a file in {owner}/{repo}@{ref}")
        if data.get("encoding") == "base64":
            return base64.b64decode(data.get("content", ""))
        return str(data.get("content", "")).encode("utf-8")
