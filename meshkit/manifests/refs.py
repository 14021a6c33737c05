"""Resolution of OpenAPI ``$ref`` pointers against a definitions mapping."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..utils import marshal
from .definitions import lookup_path

JSON_SCHEMA_PROPS_REF = "JSONSchemaProps"


class ResolveOpenApiRefs:
    """Replaces every ``$ref`` in a JSON schema by the definition it points to.

    A JSONSchemaProps reference met while already resolving one is replaced by
    ``{"$ref": "string"}`` so that the self-reference does not recurse forever.
    """

    def __init__(self) -> None:
        self._inside_json_schema_props = False

    def resolve_references(
        self,
        manifest: Union[bytes, str],
        definitions: Mapping[str, Any],
        cache: Optional[dict[str, Any]] = None,
    ) -> bytes:
        """Return the manifest, as JSON bytes, with all references resolved.

        Resolved definitions are stored in cache under their reference name.
        """
        if cache is None:
            cache = {}
        value = json.loads(manifest)
        if not isinstance(value, dict):
            raise ValueError("manifest must be a JSON object")
        return marshal(self._resolve(value, definitions, cache)).encode("utf-8")

    def _resolve(
        self, node: dict[str, Any], definitions: Mapping[str, Any], cache: dict[str, Any]
    ) -> dict[str, Any]:
        ref = node.get("$ref")
        if isinstance(ref, str):
            return self._resolve_ref(node, ref, definitions, cache)
        for key, value in list(node.items()):
            if isinstance(value, list):
                node[key] = [
                    self._resolve(item, definitions, cache) if isinstance(item, dict) else item
                    for item in value
                ]
            elif isinstance(value, dict):
                node[key] = self._resolve(value, definitions, cache)
        return node

    def _resolve_ref(
        self,
        node: dict[str, Any],
        ref: str,
        definitions: Mapping[str, Any],
        cache: dict[str, Any],
    ) -> dict[str, Any]:
        is_schema_props = ref.rsplit(".", 1)[-1] == JSON_SCHEMA_PROPS_REF
        if is_schema_props and self._inside_json_schema_props:
            node["$ref"] = "string"
            return node
        if is_schema_props:
            self._inside_json_schema_props = True
        try:
            name = ref.rsplit("/", 1)[-1]
            if name not in cache:
                target = lookup_path(definitions, json.dumps(name))
                if not isinstance(target, Mapping):
                    raise ValueError(f"definition {name!r} is not an object")
                cache[name] = self._resolve(json.loads(marshal(target)), definitions, cache)
            return copy.deepcopy(cache[name])
        finally:
            if is_schema_props:
                self._inside_json_schema_props = False