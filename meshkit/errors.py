"""Structured errors raised by the manifest and walker helpers."""

from __future__ import annotations

import enum
from collections.abc import Iterable

ERR_GET_CRD_NAMES_CODE = "1001"
ERR_GET_SCHEMAS_CODE = "1002"
ERR_GET_API_VERSION_CODE = "1003"
ERR_GET_API_GROUP_CODE = "1004"
ERR_POPULATING_YAML_CODE = "1005"
ERR_ABSENT_FILTER_CODE = "1006"
ERR_CREATING_DIRECTORY_CODE = "1007"
ERR_GET_RESOURCE_IDENTIFIER_CODE = "11075"
ERR_INVALID_SIZE_FILE_CODE = "11072"
ERR_CLONING_REPO_CODE = "11073"


class Severity(enum.IntEnum):
    """How serious an error is."""

    NONE = 0
    ALERT = 1
    CRITICAL = 2
    FATAL = 3


class MeshkitError(Exception):
    """An error carrying a code, a severity and human-readable guidance."""

    def __init__(
        self,
        code: str,
        severity: Severity,
        short_description: Iterable[str],
        long_description: Iterable[str],
        probable_cause: Iterable[str],
        suggested_remediation: Iterable[str],
    ) -> None:
        self.code = code
        self.severity = severity
        self.short_description = list(short_description)
        self.long_description = list(long_description)
        self.probable_cause = list(probable_cause)
        self.suggested_remediation = list(suggested_remediation)
        super().__init__(str(self))

    def __str__(self) -> str:
        return " ".join(self.short_description + self.long_description)


def err_get_resource_identifier(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_GET_RESOURCE_IDENTIFIER_CODE,
        Severity.ALERT,
        ["Error extracting the resource identifier name"],
        [str(err)],
        ["Could not extract the value with the given filter configuration"],
        [
            "Make sure to input a valid manifest",
            "Make sure to provide the right filter configurations",
            "Make sure the filters are appropriate for the given manifest",
        ],
    )


def err_get_crd_names(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_GET_CRD_NAMES_CODE,
        Severity.ALERT,
        ["Error getting crd names"],
        [str(err)],
        ["Could not execute kubeopenapi-jsonschema correctly"],
        ["Make sure the binary is valid and correct", "Make sure the filter passed is correct"],
    )


def err_get_schemas(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_GET_SCHEMAS_CODE,
        Severity.ALERT,
        ["Error getting schemas"],
        [str(err)],
        ["Schemas Json could not be produced from given crd."],
        ["Make sure the filter passed is correct"],
    )


def err_get_api_version(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_GET_API_VERSION_CODE,
        Severity.ALERT,
        ["Error getting api version"],
        [str(err)],
        ["Api version could not be parsed"],
        ["Make sure the filter passed is correct"],
    )


def err_get_api_group(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_GET_API_GROUP_CODE,
        Severity.ALERT,
        ["Error getting api group"],
        [str(err)],
        ["Api group could not be parsed"],
        ["Make sure the filter passed is correct"],
    )


def err_populating_yaml(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_POPULATING_YAML_CODE,
        Severity.ALERT,
        ["Error populating yaml"],
        [str(err)],
        ["Yaml could not be populated with the returned manifests"],
        [""],
    )


def err_absent_filter(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_ABSENT_FILTER_CODE,
        Severity.ALERT,
        ["Error with passed filters"],
        [str(err)],
        ["ItrFilter or ItrSpecFilter is either not passed or empty"],
        ["Pass the correct ItrFilter and ItrSpecFilter"],
    )


def err_creating_directory(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_CREATING_DIRECTORY_CODE,
        Severity.ALERT,
        ["could not create directory"],
        [str(err)],
        ["proper file permissions were not set"],
        ["check the appropriate file permissions"],
    )


def err_cloning_repo(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_CLONING_REPO_CODE,
        Severity.ALERT,
        ["could not clone the repo"],
        [str(err)],
        [],
        [],
    )


def err_invalid_size_file(err: BaseException) -> MeshkitError:
    return MeshkitError(
        ERR_INVALID_SIZE_FILE_CODE,
        Severity.ALERT,
        [str(err)],
        ["Could not read the file while walking the repo"],
        ["Given file size is either 0 or exceeds the limit of 50 MB"],
        [""],
    )