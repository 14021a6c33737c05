"""A small HTML-escaping template engine for field substitution."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Union

from markupsafe import escape

_ACTION = re.compile(r"\{\{(?P<ltrim>- )?(?P<body>.*?)(?P<rtrim> -)?\}\}", re.DOTALL)
_FIELD_CHAIN = re.compile(r"(?:\.[A-Za-z_]\w*)+")
_SPACE = " \t\r\n"


class TemplateError(Exception):
    """Raised when a template cannot be parsed or executed."""


def _parse_action(body: str) -> tuple[str, ...] | None:
    body = body.strip()
    if not body:
        raise TemplateError("missing value for command")
    if body.startswith("/*") and body.endswith("*/"):
        return None
    if body == ".":
        return ()
    if _FIELD_CHAIN.fullmatch(body):
        return tuple(body[1:].split("."))
    raise TemplateError(f"unsupported action: {body!r}")


def _parse(source: str) -> list[str | tuple[str, ...]]:
    nodes: list[str | tuple[str, ...]] = []
    pos = 0
    trim_next = False
    for match in _ACTION.finditer(source):
        text = source[pos:match.start()]
        if trim_next:
            text = text.lstrip(_SPACE)
        if match["ltrim"]:
            text = text.rstrip(_SPACE)
        if "{{" in text:
            raise TemplateError("unclosed action")
        if text:
            nodes.append(text)
        path = _parse_action(match["body"])
        if path is not None:
            nodes.append(path)
        trim_next = bool(match["rtrim"])
        pos = match.end()
    tail = source[pos:]
    if trim_next:
        tail = tail.lstrip(_SPACE)
    if "{{" in tail:
        raise TemplateError("unclosed action")
    if tail:
        nodes.append(tail)
    return nodes


def _resolve(data: Any, path: tuple[str, ...]) -> Any:
    value = data
    for name in path:
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(name)
            continue
        try:
            value = getattr(value, name)
        except AttributeError:
            raise TemplateError(
                f"can't evaluate field {name} in type {type(value).__name__}"
            ) from None
    return value


def _format(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    if isinstance(value, Mapping):
        items = " ".join(f"{key}:{_format(value[key])}" for key in sorted(value))
        return f"map[{items}]"
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def merge_to_template(tpl: Union[bytes, str], data: Any) -> bytes:
    """Merge data into the template and return the rendered bytes.

    Actions of the form ``{{.field}}`` or ``{{.a.b}}`` are replaced with the
    HTML-escaped value; missing mapping keys render as nothing.
    """
    source = tpl.decode("utf-8") if isinstance(tpl, (bytes, bytearray)) else tpl
    parts = []
    for node in _parse(source):
        if isinstance(node, str):
            parts.append(node)
        else:
            parts.append(str(escape(_format(_resolve(data, node)))))
    return "".join(parts).encode("utf-8")