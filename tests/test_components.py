import json
import os
import subprocess

import pytest
import yaml

from meshkit.errors import (
    ERR_ABSENT_FILTER_CODE,
    ERR_GET_API_VERSION_CODE,
    ERR_GET_RESOURCE_IDENTIFIER_CODE,
    ERR_GET_SCHEMAS_CODE,
    MeshkitError,
)
from meshkit.manifests.components import (
    filter_yaml,
    generate_components,
    get_crd_names,
    get_definition,
    get_from_manifest,
    get_schema,
)
from meshkit.manifests.definitions import (
    Config,
    CrdFilter,
    ExtractorPaths,
    ResourceType,
    new_crd_filter,
)
from meshkit.utils import InvalidProtocolError

CRD_YAML = """\
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
spec:
  group: example.com
  names:
    kind: TrafficSplit
  versions:
    - name: v1alpha1
      schema:
        openAPIV3Schema:
          type: object
          properties:
            spec:
              type: object
"""

PATHS = ExtractorPaths(
    name_path="spec.names.kind",
    group_path="spec.group",
    version_path="spec.versions[0].name",
    spec_path="spec.versions[0].schema.openAPIV3Schema",
    id_path="spec.names.kind",
)
SUFFIX = ".meshery.layer5.io"


def make_config(is_json=False, **kwargs):
    return Config(
        crd_filter=new_crd_filter(PATHS, is_json),
        extract_crds=lambda manifest: manifest.split("\n---\n"),
        **kwargs,
    )


@pytest.fixture
def parsed():
    return yaml.safe_load(CRD_YAML)


def test_definition_for_k8s(parsed):
    cfg = make_config(k8s_version="v1.26.0")
    definition = json.loads(get_definition(parsed, ResourceType.K8S, cfg))
    assert definition["apiVersion"] == "core.oam.dev/v1alpha1"
    assert definition["kind"] == "WorkloadDefinition"
    assert definition["metadata"]["name"] == "TrafficSplit.K8s"
    assert definition["spec"]["definitionRef"]["name"] == "trafficsplit.k8s" + SUFFIX
    assert definition["spec"]["metadata"] == {
        "@type": "pattern.meshery.io/k8s",
        "k8sAPIVersion": "example.com/v1alpha1",
        "k8sKind": "TrafficSplit",
        "version": "v1.26.0",
    }


def test_definition_for_service_mesh(parsed):
    cfg = make_config(name="istio", type="Istio", mesh_version="1.12.0")
    definition = json.loads(get_definition(parsed, ResourceType.SERVICE_MESH, cfg))
    assert definition["metadata"]["name"] == "TrafficSplit.Istio"
    assert definition["spec"]["definitionRef"]["name"] == "trafficsplit.Istio" + SUFFIX
    metadata = definition["spec"]["metadata"]
    assert metadata["@type"] == "pattern.meshery.io/mesh/workload"
    assert metadata["meshName"] == "istio"
    assert metadata["meshVersion"] == "1.12.0"


def test_definition_for_meshery(parsed):
    definition = json.loads(get_definition(parsed, ResourceType.MESHERY, make_config()))
    assert definition["metadata"]["name"] == "TrafficSplit"
    assert definition["spec"]["definitionRef"]["name"] == "trafficsplit" + SUFFIX
    assert definition["spec"]["metadata"] == {"@type": "pattern.meshery.io/core"}


def test_definition_without_group(parsed):
    parsed["spec"]["group"] = ""
    definition = json.loads(get_definition(parsed, ResourceType.K8S, make_config()))
    assert definition["spec"]["metadata"]["k8sAPIVersion"] == "v1alpha1"


def test_definition_missing_identifier(parsed):
    del parsed["spec"]["names"]
    with pytest.raises(MeshkitError) as info:
        get_definition(parsed, ResourceType.K8S, make_config())
    assert info.value.code == ERR_GET_RESOURCE_IDENTIFIER_CODE


def test_definition_non_string_version(parsed):
    parsed["spec"]["versions"][0]["name"] = 3
    with pytest.raises(MeshkitError) as info:
        get_definition(parsed, ResourceType.K8S, make_config())
    assert info.value.code == ERR_GET_API_VERSION_CODE


def test_definition_absent_extractor(parsed):
    cfg = Config(crd_filter=CrdFilter())
    with pytest.raises(MeshkitError) as info:
        get_definition(parsed, ResourceType.K8S, cfg)
    assert info.value.code == ERR_ABSENT_FILTER_CODE


def test_schema_is_titled(parsed):
    schema = json.loads(get_schema(parsed, make_config()))
    expected = dict(parsed["spec"]["versions"][0]["schema"]["openAPIV3Schema"])
    expected["title"] = "Traffic Split"
    assert schema == expected


def test_schema_must_be_object(parsed):
    parsed["spec"]["versions"][0]["schema"]["openAPIV3Schema"] = "text"
    with pytest.raises(MeshkitError) as info:
        get_schema(parsed, make_config())
    assert info.value.code == ERR_GET_SCHEMAS_CODE


def test_generate_components_skips_bad_crds(parsed):
    cfg = make_config()
    manifest = CRD_YAML + "\n---\nkind: Broken\n---\n: [unclosed"
    component = generate_components(manifest, ResourceType.K8S, cfg)
    assert component.definitions == [get_definition(parsed, ResourceType.K8S, cfg)]
    assert component.schemas == [get_schema(parsed, cfg)]


def test_generate_components_applies_modifier():
    cfg = make_config(modify_def_schema=lambda d, s: (d.upper(), s + "!"))
    component = generate_components(CRD_YAML, ResourceType.K8S, cfg)
    assert component.definitions[0].startswith("{")
    assert "WORKLOADDEFINITION" in component.definitions[0]
    assert component.schemas[0].endswith("!")


def test_generate_components_from_json(parsed):
    cfg = make_config(is_json=True)
    component = generate_components(json.dumps(parsed), ResourceType.MESHERY, cfg)
    assert component.definitions == [get_definition(parsed, ResourceType.MESHERY, cfg)]


def test_generate_components_requires_extractor():
    with pytest.raises(MeshkitError) as info:
        generate_components(CRD_YAML, ResourceType.K8S, Config())
    assert info.value.code == ERR_ABSENT_FILTER_CODE


def test_get_from_manifest_reads_file(tmp_path, parsed):
    path = tmp_path / "crds.yaml"
    path.write_text(CRD_YAML)
    cfg = make_config()
    component = get_from_manifest(f"file://{path}", ResourceType.K8S, cfg)
    assert component.schemas == [get_schema(parsed, cfg)]


def test_get_from_manifest_invalid_protocol():
    with pytest.raises(InvalidProtocolError):
        get_from_manifest("ftp://example.com/crds.yaml", ResourceType.K8S, make_config())


def test_get_crd_names():
    assert get_crd_names('[\n"a",\n"b",\n]\n') == ["a", "b"]


def test_get_crd_names_too_short():
    assert get_crd_names("[]") == []


def _script(tmp_path, body):
    script = tmp_path / "tool.sh"
    script.write_text("#!/bin/sh\n" + body)
    os.chmod(script, 0o755)
    return script


def test_filter_yaml_writes_tool_output(tmp_path):
    script = _script(tmp_path, "printf '%s\\n' \"$@\"\n")
    output = filter_yaml("crds.yaml", ["$[0]"], script, "yaml")
    expected_args = ["--location", "crds.yaml", "-t", "yaml", "--filter", "$[0]", "-o", "yaml"]
    assert output.read_text().splitlines() == expected_args


def test_filter_yaml_tool_failure(tmp_path):
    script = _script(tmp_path, "exit 1\n")
    with pytest.raises(subprocess.CalledProcessError):
        filter_yaml("crds.yaml", [], script, "yaml")