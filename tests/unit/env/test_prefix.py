import pytest

from envtree.env.prefix import PREFIX_PATTERN, check_prefix, root_name
from envtree.errors.errors import InvalidPrefixError


@pytest.mark.parametrize("prefix", ["TRAEFIK_", "A_", "1_", "my_app_", "a__", "App2_X_"])
def test_valid_prefixes(prefix):
    check_prefix(prefix)


@pytest.mark.parametrize(
    "prefix",
    [
        "",
        "_",
        "TRAEFIK",
        "_TRAEFIK_",
        "-A_",
        "A-B_",
        "TRAEFIK_\n",
        "TRA EFIK_",
    ],
)
def test_invalid_prefixes_name_the_prefix_and_pattern(prefix):
    with pytest.raises(InvalidPrefixError) as exc:
        check_prefix(prefix)

    assert repr(prefix) in str(exc.value)
    assert PREFIX_PATTERN in str(exc.value)
    assert exc.value.prefix == prefix
    assert exc.value.details["pattern"] == PREFIX_PATTERN


def test_invalid_prefix_is_a_value_error():
    with pytest.raises(ValueError):
        check_prefix("nope")


def test_non_string_prefix_is_rejected():
    with pytest.raises(InvalidPrefixError):
        check_prefix(None)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "prefix,expected",
    [("TRAEFIK_", "traefik"), ("My_App_", "my_app"), ("X_", "x")],
)
def test_root_name(prefix, expected):
    assert root_name(prefix) == expected
