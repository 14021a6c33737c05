import pytest

from meshkit import errors


@pytest.mark.parametrize(
    "factory, code, short",
    [
        (errors.err_get_crd_names, "1001", "Error getting crd names"),
        (errors.err_get_schemas, "1002", "Error getting schemas"),
        (errors.err_get_api_version, "1003", "Error getting api version"),
        (errors.err_get_api_group, "1004", "Error getting api group"),
        (errors.err_populating_yaml, "1005", "Error populating yaml"),
        (errors.err_absent_filter, "1006", "Error with passed filters"),
        (errors.err_creating_directory, "1007", "could not create directory"),
        (
            errors.err_get_resource_identifier,
            "11075",
            "Error extracting the resource identifier name",
        ),
        (errors.err_cloning_repo, "11073", "could not clone the repo"),
    ],
)
def test_manifest_and_walker_errors(factory, code, short):
    err = factory(ValueError("boom"))
    assert err.code == code
    assert err.severity is errors.Severity.ALERT
    assert err.short_description == [short]
    assert err.long_description == ["boom"]
    assert "boom" in str(err)


def test_invalid_size_file_uses_cause_as_short_description():
    err = errors.err_invalid_size_file(ValueError("File exceeding size limit"))
    assert err.code == "11072"
    assert err.short_description == ["File exceeding size limit"]
    assert err.long_description == ["Could not read the file while walking the repo"]
    assert err.probable_cause == ["Given file size is either 0 or exceeds the limit of 50 MB"]


def test_errors_can_be_raised_and_caught():
    err = errors.err_get_schemas(RuntimeError("bad spec"))
    assert err.suggested_remediation == ["Make sure the filter passed is correct"]
    assert err.probable_cause == ["Schemas Json could not be produced from given crd."]
    with pytest.raises(errors.MeshkitError) as info:
        raise err
    assert info.value.code == "1002"


def test_cloning_error_has_empty_guidance():
    err = errors.err_cloning_repo(OSError("network down"))
    assert err.probable_cause == []
    assert err.suggested_remediation == []