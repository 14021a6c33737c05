"""General helpers: JSON, files, remote sources, release tags and ids."""

from __future__ import annotations

import json
import os
import re
import uuid
from collections.abc import Callable, Mapping
from typing import Any, Union

import requests

from .versions import sort_dotted_strings_by_digits

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_RELEASE_TAG = re.compile(r'/releases/tag/(.*?)"')
_JSON_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class UtilsError(Exception):
    """Raised when a utility operation fails."""


class InvalidProtocolError(UtilsError):
    """Raised when a file source uses a protocol other than http(s) or file."""

    def __init__(self, uri: str = "") -> None:
        self.uri = uri
        super().__init__(f"invalid protocol: only http, https and file are valid: {uri}")


class RemoteFileNotFoundError(UtilsError):
    """Raised when a remote file answers with 404."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"remote file not found at {url}")


class UnmarshalError(UtilsError):
    """Raised when JSON text cannot be decoded."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)


def transform_map_keys(
    data: Mapping[str, Any], transform: Callable[[str], str]
) -> dict[str, Any]:
    """Return a copy of data with every key, at every mapping depth, transformed."""
    return {
        transform(key): transform_map_keys(value, transform) if isinstance(value, Mapping) else value
        for key, value in data.items()
    }


def unmarshal(text: str) -> Any:
    """Decode JSON text, ignoring surrounding whitespace."""
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError as exc:
        raise UnmarshalError(f"unable to unmarshal JSON: {exc}", exc.pos) from exc


def get_bool(key: str) -> bool:
    """Parse a boolean word such as 1, t, TRUE, 0, f or False."""
    if key in _TRUE_WORDS:
        return True
    if key in _FALSE_WORDS:
        return False
    raise UtilsError(f"unable to parse {key!r} as a boolean")


def str_concat(*args: str) -> str:
    return "".join(args)


def marshal(obj: Any) -> str:
    """Encode obj as compact JSON with sorted keys and HTML-safe escapes."""
    try:
        text = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise UtilsError(f"unable to marshal: {exc}") from exc
    for char, replacement in _JSON_HTML_ESCAPES.items():
        text = text.replace(char, replacement)
    return text


def download_file(path: Union[str, os.PathLike], url: str) -> None:
    """Download url into the file at path."""
    with requests.get(url, stream=True) as response:
        if response.status_code != 200:
            raise UtilsError(
                f"failed to get the file {response.status_code} status code for {url} file"
            )
        with open(path, "wb") as out:
            for chunk in response.iter_content(chunk_size=65536):
                out.write(chunk)


def get_home() -> str:
    return os.path.expanduser("~")


def create_file(
    contents: Union[bytes, str], filename: str, location: Union[str, os.PathLike]
) -> None:
    """Append contents to location/filename, creating it with mode 0644 if needed."""
    data = contents.encode("utf-8") if isinstance(contents, str) else contents
    fd = os.open(
        os.path.join(location, filename), os.O_APPEND | os.O_CREAT | os.O_WRONLY, 0o644
    )
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def read_file_source(uri: str) -> str:
    """Read the content behind an http, https or file URI."""
    if uri.startswith("http"):
        return read_remote_file(uri)
    if uri.startswith("file"):
        return read_local_file(uri)
    raise InvalidProtocolError(uri)


def read_remote_file(url: str) -> str:
    response = requests.get(url)
    if response.status_code == 404:
        raise RemoteFileNotFoundError(url)
    return response.text


def read_local_file(location: str) -> str:
    path = location.removeprefix("file://")
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise UtilsError(f"unable to read local file: {exc}") from exc
    return data.decode("utf-8", errors="replace")


def get_latest_release_tags_sorted(org: str, repo: str) -> list[str]:
    """Return the release tags listed on the repository's releases page, sorted."""
    url = f"https://github.com/{org}/{repo}/releases"
    try:
        response = requests.get(url)
    except requests.RequestException as exc:
        raise UtilsError(f"unable to get latest release tag: {exc}") from exc
    if response.status_code != 200:
        raise UtilsError(
            f"unable to get latest release tag: status code {response.status_code}"
        )
    tags = _RELEASE_TAG.findall(response.text)
    if not tags:
        raise UtilsError(
            "unable to get latest release tag: no release found in this repository"
        )
    return sort_dotted_strings_by_digits(tag.replace('"', "") for tag in tags)


def new_uuid() -> str:
    return str(uuid.uuid4())