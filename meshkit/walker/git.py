"""Walk the files of a git repository cloned into a temporary directory."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from ..errors import err_cloning_repo, err_invalid_size_file

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://github.com"
_DEFAULT_BRANCH = "master"
_DEFAULT_MAX_FILE_SIZE = 50_000_000


@dataclass
class File:
    name: str = ""
    content: str = ""
    path: str = ""


@dataclass
class Directory:
    name: str = ""
    path: str = ""


FileInterceptor = Callable[[File], None]
DirInterceptor = Callable[[Directory], None]


class GitWalker:
    """Clones a repository and hands its files and directories to interceptors.

    The setters return the walker itself so that calls can be chained.
    """

    def __init__(self) -> None:
        self._base_url = _DEFAULT_BASE_URL
        self._owner = ""
        self._repo = ""
        self._branch = _DEFAULT_BRANCH
        self._root = ""
        self._recurse = False
        self._show_logs = False
        self._max_file_size = _DEFAULT_MAX_FILE_SIZE
        self._file_interceptor: Optional[FileInterceptor] = None
        self._dir_interceptor: Optional[DirInterceptor] = None

    def base_url(self, url: str) -> GitWalker:
        self._base_url = url
        return self

    def max_file_size(self, size: int) -> GitWalker:
        self._max_file_size = size
        return self

    def show_logs(self) -> GitWalker:
        """Let the clone progress go to the terminal."""
        self._show_logs = True
        return self

    def owner(self, owner: str) -> GitWalker:
        self._owner = owner
        return self

    def repo(self, repo: str) -> GitWalker:
        self._repo = repo
        return self

    def branch(self, branch: str) -> GitWalker:
        self._branch = branch
        return self

    def root(self, root: str) -> GitWalker:
        """Set the directory to start from; a trailing ``/**`` walks all subdirectories."""
        if not root.startswith("/"):
            root = "/" + root
        self._root = root
        if root.endswith("/**"):
            self._recurse = True
            self._root = root[: -len("/**")]
        return self

    def register_file_interceptor(self, interceptor: FileInterceptor) -> GitWalker:
        self._file_interceptor = interceptor
        return self

    def register_dir_interceptor(self, interceptor: DirInterceptor) -> GitWalker:
        self._dir_interceptor = interceptor
        return self

    def walk(self) -> None:
        """Clone the repository and visit the configured root."""
        if self._max_file_size == 0:
            raise err_invalid_size_file(
                ValueError("Max file size passed as 0. Will not read any file")
            )
        clone_path = os.path.join(tempfile.gettempdir(), self._repo, str(time.time_ns()))
        try:
            self._clone(clone_path)
            start = os.path.join(clone_path, self._root.lstrip("/"))
            if self._recurse:
                self._walk_recursive(start)
            else:
                self._walk_flat(start)
        finally:
            shutil.rmtree(clone_path, ignore_errors=True)

    def _clone(self, destination: str) -> None:
        url = f"{self._base_url}/{self._owner}/{self._repo}"
        try:
            subprocess.run(
                ["git", "clone", url, destination],
                check=True,
                capture_output=not self._show_logs,
            )
        except (subprocess.CalledProcessError, OSError) as exc:
            raise err_cloning_repo(exc) from exc

    def _walk_recursive(self, path: str) -> None:
        if self._dir_interceptor is not None:
            self._dir_interceptor(Directory(name=os.path.basename(path), path=path))
        with os.scandir(path) as entries:
            ordered = sorted(entries, key=lambda entry: entry.name)
        for entry in ordered:
            if entry.is_dir(follow_symlinks=False):
                self._walk_recursive(entry.path)
            else:
                self._read_file(entry.name, entry.path, entry.stat().st_size)

    def _walk_flat(self, path: str) -> None:
        with os.scandir(path) as entries:
            ordered = sorted(entries, key=lambda entry: entry.name)
        for entry in ordered:
            if entry.is_dir():
                if self._dir_interceptor is not None:
                    try:
                        self._dir_interceptor(Directory(name=entry.name, path=entry.path))
                    except Exception as exc:  # interceptor failures do not stop the walk
                        logger.error("%s", exc)
                continue
            try:
                self._read_file(entry.name, entry.path, entry.stat().st_size)
            except Exception as exc:
                logger.error("%s", exc)

    def _read_file(self, name: str, path: str, size: int) -> None:
        if size > self._max_file_size:
            raise err_invalid_size_file(ValueError("File exceeding size limit"))
        with open(path, "rb") as handle:
            content = handle.read().decode("utf-8", errors="replace")
        if self._file_interceptor is None:
            return
        try:
            self._file_interceptor(File(name=name, content=content, path=path))
        except Exception:
            logger.error("Could not intercept the file %s", name)
            raise