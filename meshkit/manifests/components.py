"""Generation of workload definitions and schemas from CRD manifests."""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..errors import (
    MeshkitError,
    err_absent_filter,
    err_get_api_group,
    err_get_api_version,
    err_get_resource_identifier,
    err_get_schemas,
    err_populating_yaml,
)
from ..utils import read_file_source
from .definitions import Component, Config, Extractor, ResourceType
from .formatting import format_to_readable_string

_DEFINITION_SUFFIX = ".meshery.layer5.io"
_API_VERSION = "core.oam.dev/v1alpha1"
_KIND = "WorkloadDefinition"

ErrorFactory = Callable[[BaseException], MeshkitError]


def _extract(extractor: Optional[Extractor], crd: Any, error: ErrorFactory) -> Any:
    if extractor is None:
        raise err_absent_filter(ValueError("extractor is not configured"))
    try:
        return extractor(crd)
    except (LookupError, ValueError) as exc:
        raise error(exc) from exc


def _extract_string(extractor: Optional[Extractor], crd: Any, error: ErrorFactory) -> str:
    value = _extract(extractor, crd, error)
    if not isinstance(value, str):
        raise error(TypeError(f"expected a string, found {type(value).__name__}"))
    return value


def get_definition(parsed_crd: Any, resource: int, cfg: Config) -> str:
    """Return the workload definition of one parsed CRD as indented JSON."""
    crd_filter = cfg.crd_filter
    resource_id = _extract_string(
        crd_filter.identifier_extractor, parsed_crd, err_get_resource_identifier
    )
    api_version = _extract_string(crd_filter.version_extractor, parsed_crd, err_get_api_version)
    api_group = _extract_string(crd_filter.group_extractor, parsed_crd, err_get_api_group)
    k8s_api_version = f"{api_group}/{api_version}" if api_group else api_version

    name = resource_id
    definition_ref = resource_id.lower() + _DEFINITION_SUFFIX
    metadata: Optional[dict[str, str]] = None
    if resource == ResourceType.SERVICE_MESH:
        metadata = {
            "@type": "pattern.meshery.io/mesh/workload",
            "k8sAPIVersion": k8s_api_version,
            "k8sKind": resource_id,
            "meshName": cfg.name,
            "meshVersion": cfg.mesh_version,
        }
        definition_ref = resource_id.lower()
        if cfg.type:
            name += "." + cfg.type
            definition_ref += "." + cfg.type
        definition_ref += _DEFINITION_SUFFIX
    elif resource == ResourceType.K8S:
        metadata = {
            "@type": "pattern.meshery.io/k8s",
            "k8sAPIVersion": k8s_api_version,
            "k8sKind": resource_id,
            "version": cfg.k8s_version,
        }
        name += ".K8s"
        definition_ref = resource_id.lower() + ".k8s" + _DEFINITION_SUFFIX
    elif resource == ResourceType.MESHERY:
        metadata = {"@type": "pattern.meshery.io/core"}

    spec: dict[str, Any] = {"definitionRef": {"name": definition_ref}}
    if metadata is not None:
        spec["metadata"] = metadata
    definition = {
        "apiVersion": _API_VERSION,
        "kind": _KIND,
        "metadata": {"name": name},
        "spec": spec,
    }
    return json.dumps(definition, indent=" ", ensure_ascii=False)


def get_schema(parsed_crd: Any, cfg: Config) -> str:
    """Return the JSON schema of one parsed CRD, titled after its identifier."""
    crd_filter = cfg.crd_filter
    spec = _extract(crd_filter.spec_extractor, parsed_crd, err_get_schemas)
    if not isinstance(spec, Mapping):
        raise err_get_schemas(TypeError("schema is not an object"))
    try:
        schema = json.loads(json.dumps(spec))
    except (TypeError, ValueError) as exc:
        raise err_get_schemas(exc) from exc
    resource_id = _extract_string(
        crd_filter.identifier_extractor, parsed_crd, err_get_resource_identifier
    )
    schema["title"] = format_to_readable_string(resource_id)
    return json.dumps(schema, indent=" ", sort_keys=True, ensure_ascii=False)


def generate_components(manifest: str, resource: int, cfg: Config) -> Component:
    """Generate a definition and a schema for every usable CRD in the manifest.

    CRDs that cannot be parsed or lack the configured values are skipped.
    """
    if cfg.extract_crds is None:
        raise err_absent_filter(ValueError("no CRD extractor configured"))
    component = Component()
    for crd in cfg.extract_crds(manifest):
        try:
            parsed = json.loads(crd) if cfg.crd_filter.is_json else yaml.safe_load(crd)
            definition = get_definition(parsed, resource, cfg)
            schema = get_schema(parsed, cfg)
        except (yaml.YAMLError, ValueError, MeshkitError):
            continue
        if cfg.modify_def_schema is not None:
            definition, schema = cfg.modify_def_schema(definition, schema)
        component.definitions.append(definition)
        component.schemas.append(schema)
    return component


def get_from_manifest(url: str, resource: int, cfg: Config) -> Component:
    """Read a manifest from an http(s) or file URL and generate its components."""
    return generate_components(read_file_source(url), resource, cfg)


def get_crd_names(text: str) -> list[str]:
    """Extract CRD names from the JSON-array output of the schema tool."""
    for unwanted in ('"', " ", ","):
        text = text.replace(unwanted, "")
    lines = text.split("\n")
    if len(lines) <= 2:
        return []
    return lines[1:-2]


def filter_yaml(
    yaml_path: Union[str, os.PathLike],
    filters: Sequence[str],
    bin_path: Union[str, os.PathLike],
    input_format: str,
) -> Path:
    """Run the schema tool with the filters and store its YAML output.

    Returns the path of the file in the temporary directory that holds it.
    Raises CalledProcessError when the tool fails.
    """
    args = [
        os.fspath(bin_path),
        "--location",
        os.fspath(yaml_path),
        "-t",
        input_format,
        "--filter",
        *filters,
        "-o",
        "yaml",
    ]
    result = subprocess.run(args, capture_output=True, text=True, check=True)
    output = Path(tempfile.gettempdir()) / "test.yaml"
    try:
        output.write_text(result.stdout)
    except OSError as exc:
        raise err_populating_yaml(exc) from exc
    return output