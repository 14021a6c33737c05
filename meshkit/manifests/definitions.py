"""Configuration for component generation and lookup of values inside CRDs."""

from __future__ import annotations

import enum
import json
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

Extractor = Callable[[Any], Any]

_SELECTOR_PATTERN = re.compile(
    r'"(?P<quoted>(?:[^"\\]|\\.)*)"|\[(?P<index>\d+)\]|(?P<label>[^.\[\]"\s]+)'
)


class ResourceType(enum.IntEnum):
    """Kind of resource a component is generated for."""

    SERVICE_MESH = 0
    K8S = 1
    MESHERY = 2


@dataclass
class Component:
    """Schemas and workload definitions generated from a manifest."""

    schemas: list[str] = field(default_factory=list)
    definitions: list[str] = field(default_factory=list)


@dataclass
class CrdFilter:
    """Functions that pull the values needed for a component out of one parsed CRD."""

    name_extractor: Optional[Extractor] = None
    group_extractor: Optional[Extractor] = None
    version_extractor: Optional[Extractor] = None
    spec_extractor: Optional[Extractor] = None
    is_json: bool = False
    identifier_extractor: Optional[Extractor] = None


@dataclass
class Config:
    """Everything needed to turn a manifest into components.

    ``modify_def_schema`` receives the definition and the schema and returns
    the pair to keep; ``extract_crds`` splits a manifest into CRD documents.
    """

    name: str = ""
    type: str = ""
    mesh_version: str = ""
    k8s_version: str = ""
    modify_def_schema: Optional[Callable[[str, str], tuple[str, str]]] = None
    crd_filter: CrdFilter = field(default_factory=CrdFilter)
    extract_crds: Optional[Callable[[str], list[str]]] = None


@dataclass
class ExtractorPaths:
    """Paths, in dotted selector syntax, to the values a CrdFilter extracts."""

    name_path: str = ""
    group_path: str = ""
    version_path: str = ""
    spec_path: str = ""
    id_path: str = ""


def _parse_path(path: str) -> list[Union[str, int]]:
    selectors: list[Union[str, int]] = []
    pos = 0
    need_separator = False
    while pos < len(path):
        if need_separator:
            if path[pos] == ".":
                pos += 1
                need_separator = False
                if pos == len(path):
                    raise ValueError(f"invalid path {path!r}: trailing separator")
                continue
            if path[pos] != "[":
                raise ValueError(f"invalid path {path!r} at offset {pos}")
        match = _SELECTOR_PATTERN.match(path, pos)
        if match is None:
            raise ValueError(f"invalid path {path!r} at offset {pos}")
        if match["quoted"] is not None:
            selectors.append(json.loads(f'"{match["quoted"]}"'))
        elif match["index"] is not None:
            selectors.append(int(match["index"]))
        else:
            selectors.append(match["label"])
        pos = match.end()
        need_separator = True
    return selectors


def lookup_path(value: Any, path: str) -> Any:
    """Return the value found by following a path such as ``spec.versions[0].name``.

    Labels may be quoted (``metadata."a.b"``). Raises KeyError when nothing is
    found and ValueError when the path is malformed.
    """
    for selector in _parse_path(path):
        if isinstance(selector, int):
            if (
                isinstance(value, Sequence)
                and not isinstance(value, (str, bytes))
                and selector < len(value)
            ):
                value = value[selector]
                continue
        elif isinstance(value, Mapping) and selector in value:
            value = value[selector]
            continue
        raise KeyError(f"Could not find the value at {path!r}")
    return value


def _extractor(path: str) -> Extractor:
    def extract(root: Any) -> Any:
        return lookup_path(root, path)

    return extract


def new_crd_filter(paths: ExtractorPaths, is_json: bool) -> CrdFilter:
    """Build a CrdFilter whose extractors look up the given paths."""
    return CrdFilter(
        name_extractor=_extractor(paths.name_path),
        group_extractor=_extractor(paths.group_path),
        version_extractor=_extractor(paths.version_path),
        spec_extractor=_extractor(paths.spec_path),
        is_json=is_json,
        identifier_extractor=_extractor(paths.id_path),
    )