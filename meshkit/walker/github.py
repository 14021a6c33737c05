"""Walk a repository through the GitHub contents API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

_API_URL = "https://api.github.com/repos/{owner}/{repo}/contents/{path}?ref={branch}"
_FORBIDDEN = "[GithubWalker]: GithubAPI responded with: forbidden"


@dataclass
class GithubContent:
    """One entry of a GitHub contents API response."""

    name: str = ""
    path: str = ""
    sha: str = ""
    size: int = 0
    url: str = ""
    html_url: str = ""
    git_url: str = ""
    download_url: str = ""
    type: str = ""
    content: str = ""
    encoding: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> GithubContent:
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object for a content entry")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


FileInterceptor = Callable[[GithubContent], None]
DirInterceptor = Callable[[list[GithubContent]], None]


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


class GithubWalker:
    """Visits files and directories of a repository through the GitHub API.

    Directory entries are visited concurrently, so interceptors must be thread safe.
    """

    def __init__(self) -> None:
        self._owner = ""
        self._repo = ""
        self._branch = "main"
        self._root = ""
        self._recurse = False
        self._file_interceptor: Optional[FileInterceptor] = None
        self._dir_interceptor: Optional[DirInterceptor] = None

    def owner(self, owner: str) -> GithubWalker:
        self._owner = owner
        return self

    def repo(self, repo: str) -> GithubWalker:
        self._repo = repo
        return self

    def branch(self, branch: str) -> GithubWalker:
        self._branch = branch
        return self

    def root(self, root: str) -> GithubWalker:
        """Set the node to start from; a trailing ``/**`` walks all subdirectories."""
        self._root = root
        if root.endswith("/**"):
            self._recurse = True
            self._root = root[: -len("/**")]
        return self

    def register_file_interceptor(self, interceptor: FileInterceptor) -> GithubWalker:
        self._file_interceptor = interceptor
        return self

    def register_dir_interceptor(self, interceptor: DirInterceptor) -> GithubWalker:
        self._dir_interceptor = interceptor
        return self

    def walk(self) -> None:
        """Start the traversal at the root; a root with an extension is one file."""
        is_file = bool(self._root) and bool(_extension(self._root))
        self._walk(self._root, is_file)

    def _fetch(self, path: str) -> Any:
        url = _API_URL.format(
            owner=self._owner, repo=self._repo, path=path, branch=self._branch
        )
        with requests.get(url) as response:
            if response.status_code != 200:
                if response.status_code == 403:
                    try:
                        message = response.json().get("message")
                    except (ValueError, AttributeError):
                        message = None
                    if not isinstance(message, str):
                        message = _FORBIDDEN
                    raise requests.HTTPError(message, response=response)
                raise requests.HTTPError("file not found", response=response)
            try:
                return response.json()
            except ValueError:
                logger.error("[GithubWalker]: failed to decode API response")
                raise

    def _walk(self, path: str, is_file: bool) -> None:
        body = self._fetch(path)
        if is_file:
            content = GithubContent.from_dict(body)
            if self._file_interceptor is not None:
                self._file_interceptor(content)
            return

        if not isinstance(body, list):
            logger.error("[GithubWalker]: failed to decode API response")
            raise ValueError("expected a JSON array for a directory listing")
        entries = [GithubContent.from_dict(item) for item in body]

        to_visit = [e for e in entries if self._recurse or e.type == "file"]
        if to_visit:
            with ThreadPoolExecutor(max_workers=min(len(to_visit), 16)) as pool:
                for _ in pool.map(self._visit_entry, to_visit):
                    pass

        if self._dir_interceptor is not None:
            try:
                self._dir_interceptor(entries)
            except Exception as exc:
                logger.error(
                    "[GithubWalker]: error occurred while executing directory interceptor function %s",
                    exc,
                )
                raise

    def _visit_entry(self, entry: GithubContent) -> None:
        try:
            self._walk(entry.path, entry.type == "file")
        except Exception as exc:
            logger.error(
                "[GithubWalker]: error occurred while processing github node %s", exc
            )