"""Conversion between identifiers and human-readable titles."""

from __future__ import annotations

import re

_DICTIONARY = {
    "MeshSync": "MeshSync",
    "additionalProperties": "additionalProperties",
    "caBundle": "CA Bundle",
    "mtls": "mTLS",
    "mTLS": "mTLS",
}
_TEMPLATE_EXPRESSION = re.compile(r"\{\{.+\}\}")
_SEPARATOR = "\n---\n"


def _use_dictionary(text: str, invert: bool) -> tuple[str, bool]:
    for word, readable in _DICTIONARY.items():
        if (readable if invert else word) == text:
            return (word if invert else readable), True
    return text, False


def _is_big(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_small(ch: str) -> bool:
    return "a" <= ch <= "z"


def _is_exception(text: str, i: int) -> bool:
    following = text[i + 1]
    if i + 1 == len(text) - 1:
        return _is_small(following)
    return _is_big(text[i]) and _is_small(following) and _is_big(text[i + 2])


def _piece(text: str, i: int) -> str:
    ch = text[i]
    if _is_exception(text, i):
        return ch
    previous, following = text[i - 1], text[i + 1]
    if _is_small(ch) and _is_big(following):
        return ch + " "
    if _is_big(ch) and _is_big(previous) and _is_small(following):
        return " " + ch
    return ch


def format_to_readable_string(text: str) -> str:
    """Split a camel-case identifier into words, e.g. APIService -> API Service."""
    if not text:
        return ""
    text, found = _use_dictionary(text, invert=False)
    if found:
        return text
    middle = "".join(_piece(text, i) for i in range(1, len(text) - 1))
    return " ".join((text[0] + middle + text[-1]).split())


def deformat_readable_string(text: str) -> str:
    """Undo format_to_readable_string by removing the inserted spaces."""
    output, found = _use_dictionary(text, invert=True)
    if found:
        return output
    return output.replace(" ", "")


def remove_helm_templating_from_crd(crd_yaml: str) -> str:
    """Replace helm template expressions with a placeholder and drop empty documents."""
    return _SEPARATOR.join(
        _TEMPLATE_EXPRESSION.sub("meshery", document)
        for document in crd_yaml.split(_SEPARATOR)
        if document
    )