import pytest

from meshkit.versions import sort_dotted_strings_by_digits

CASES = [
    (["1.0.0", "0.5.6", "8.9.6"], ["0.5.6", "1.0.0", "8.9.6"]),
    (["v1.0.0", "0.5.6", "fasdfv8.9.6"], ["0.5.6", "v1.0.0", "fasdfv8.9.6"]),
    (
        ["v1.0.0-alpha", "v1.0.0-alpha-beta", "v1.0.0-alpha-rc", "1.0.0-rc", "1.0.0"],
        ["v1.0.0-alpha-beta", "v1.0.0-alpha-rc", "v1.0.0-alpha", "1.0.0-rc", "1.0.0"],
    ),
    (["v1.0.0.0", "1.0.0"], ["v1.0.0.0", "1.0.0"]),
    (
        ["v1.0.0.0-alpha", "asffdsafgaga1.sag0.0######"],
        ["v1.0.0.0-alpha", "asffdsafgaga1.sag0.0######"],
    ),
    (["1.0.0-alpha.beta", "1.0.0-alpha.1"], ["1.0.0-alpha.beta", "1.0.0-alpha.1"]),
    (
        ["v1.0.0-stable", "0.9.8", "1.0.0-alpha.1", "v1.0.0-alpha"],
        ["0.9.8", "1.0.0-alpha.1", "v1.0.0-alpha", "v1.0.0-stable"],
    ),
    (["1.0.0", "stable-1.0.0"], ["1.0.0", "stable-1.0.0"]),
    (
        ["v1.12.0-rc.1", "1.12.0-beta.2", "1.12.0-beta.1"],
        ["1.12.0-beta.1", "1.12.0-beta.2", "v1.12.0-rc.1"],
    ),
    (
        ["edge-21.12.1", "edge-21.11.4", "stable-2.11.0"],
        ["stable-2.11.0", "edge-21.11.4", "edge-21.12.1"],
    ),
    (
        ["istio-1.10.6", "istio-1.12.0", "0.0.0"],
        ["0.0.0", "istio-1.10.6", "istio-1.12.0"],
    ),
    (
        ["v1.0.0-rc.2", "v1.0.0-rc.1", "v0.11.0-rc.1"],
        ["v0.11.0-rc.1", "v1.0.0-rc.1", "v1.0.0-rc.2"],
    ),
]


@pytest.mark.parametrize("passed, expected", CASES)
def test_sort(passed, expected):
    assert sort_dotted_strings_by_digits(passed) == expected


def test_sort_does_not_lose_items():
    versions = ["v2.0.0", "v1.0.0", "v1.0.0", "v0.1.0"]
    result = sort_dotted_strings_by_digits(versions)
    assert sorted(result) == sorted(versions)
    assert result[0] == "v0.1.0"
    assert result[-1] == "v2.0.0"


def test_empty_input():
    assert sort_dotted_strings_by_digits([]) == []