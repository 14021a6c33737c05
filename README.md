# meshkit

Utilities for tools that work with Kubernetes custom resources and the
repositories that publish them.

## Installation

```
pip install meshkit
```

To install the test dependencies as well:

```
pip install "meshkit[test]"
```

## What is inside

- `meshkit.versions.sort_dotted_strings_by_digits` sorts version-like strings
  such as `v1.0.0-rc.1`, `stable-2.11.0` or `istio-1.12.0` by their numeric
  dotted parts. Only digits and dots count, plus the markers `alpha`, `beta`,
  `rc` and `stable`, which order as `alpha < beta < rc < stable` for the same
  version.
- `meshkit.template.merge_to_template` fills `{{.key}}` and `{{.a.b}}`
  placeholders with values from a mapping or object, escaping them for HTML.
  Missing mapping keys render as nothing; anything else in `{{ }}` raises
  `TemplateError`.
- `meshkit.utils` holds small helpers: JSON `marshal` / `unmarshal`,
  `transform_map_keys`, `get_bool`, `str_concat`, `get_home`,
  `read_file_source` (and `read_remote_file` / `read_local_file`) for
  `http(s)://` and `file://` locations, `download_file`, `create_file`
  (appends, creating the file with mode 0644), `get_latest_release_tags_sorted`
  and `new_uuid`. Failures raise `UtilsError` or one of its subclasses
  `InvalidProtocolError`, `RemoteFileNotFoundError` and `UnmarshalError`.
- `meshkit.network` describes endpoints (`HostPort`, `Endpoint`) and
  `tcp_check` tells whether a `HostPort` accepts TCP connections within five
  seconds; given `MockOptions` it only compares `address:port` with the
  desired endpoint.
- `meshkit.errors` defines `MeshkitError`, which carries a code, a `Severity`,
  and descriptions, causes and remediations, plus the factory functions used
  by the other modules (`err_get_schemas`, `err_cloning_repo`, ...).
- `meshkit.manifests` turns CRD manifests into workload definitions and JSON
  schemas:
  - `definitions`: `Config`, `CrdFilter`, `ExtractorPaths`, `Component`,
    `ResourceType`, `lookup_path` (paths such as `spec.versions[0].name` or
    `metadata."a.b"`) and `new_crd_filter`.
  - `components`: `generate_components`, `get_from_manifest`,
    `get_definition`, `get_schema`, `get_crd_names` and `filter_yaml`.
  - `formatting`: `format_to_readable_string` (CamelCase to readable title),
    `deformat_readable_string` and `remove_helm_templating_from_crd`.
  - `refs`: `ResolveOpenApiRefs`, which replaces OpenAPI `$ref` entries with
    the definitions they point to.
- `meshkit.walker` walks the files of a repository, either by cloning it
  (`git.GitWalker`, which runs the `git` executable) or through the GitHub
  contents API (`github.GithubWalker`, which visits directory entries
  concurrently).

## Examples

```python
from meshkit.versions import sort_dotted_strings_by_digits

sort_dotted_strings_by_digits(["v1.0.0-rc.2", "v1.0.0-rc.1", "v0.11.0-rc.1"])
# ['v0.11.0-rc.1', 'v1.0.0-rc.1', 'v1.0.0-rc.2']
```

```python
from meshkit.template import merge_to_template

merge_to_template(b"{{.namespace}}", {"namespace": "meshery"})
# b'meshery'
```

```python
from meshkit.manifests.formatting import format_to_readable_string

format_to_readable_string("IPFamiliesWithIPs")
# 'IP Families With IPs'
```

```python
from meshkit.manifests.definitions import Config, ExtractorPaths, ResourceType, new_crd_filter
from meshkit.manifests.components import generate_components

paths = ExtractorPaths(
    name_path="spec.names.kind",
    group_path="spec.group",
    version_path="spec.versions[0].name",
    spec_path="spec.versions[0].schema.openAPIV3Schema",
    id_path="spec.names.kind",
)
cfg = Config(
    name="Istio",
    mesh_version="1.18.0",
    crd_filter=new_crd_filter(paths, False),
    extract_crds=lambda manifest: manifest.split("\n---\n"),
)
with open("crds.yaml") as handle:
    manifest_text = handle.read()
component = generate_components(manifest_text, ResourceType.SERVICE_MESH, cfg)
print(component.definitions, component.schemas)
```

CRDs that cannot be parsed or lack one of the configured values are skipped.

```python
from meshkit.walker.github import GithubWalker

def on_file(content):
    print(content.path)

(GithubWalker()
    .owner("some-org")
    .repo("some-repo")
    .root("manifests/**")
    .register_file_interceptor(on_file)
    .walk())
```

## What it does not do

- There is no command-line program; everything is used as a library.
- Manifests are read only from `http(s)://` and `file://` locations; Helm
  charts are not rendered.
- `filter_yaml` does not filter anything itself: it runs an external schema
  tool whose path you pass in and stores its output.
- `GitWalker` needs `git` to be installed and on the `PATH`.

## Running the tests

```
pytest
```