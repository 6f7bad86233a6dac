"""
Tests for the decode direction: environment entries -> typed configuration.
"""

import pytest

from envtree.config.configs import EnvCodecConfig
from envtree.env.codec import EnvCodec, decode, encode, select_env_vars
from envtree.errors.errors import FieldValueError, InvalidPrefixError, MetadataError
from tests.fixtures.models import LogLevel, SampleConfig, populated_config


class TestSelectEnvVars:
    """Selection and normalization of raw entries."""

    def test_filters_by_prefix(self) -> None:
        """Entries outside the namespace are dropped."""
        variables = select_env_vars(["TRAEFIK_FOO=1", "OTHER_FOO=2"], "TRAEFIK_")
        assert variables == {"traefik.foo": "1"}

    def test_case_insensitive_keys(self) -> None:
        """Lower and upper case keys map to the same canonical path."""
        assert select_env_vars(["traefik_foo=1"], "TRAEFIK_") == {"traefik.foo": "1"}
        assert select_env_vars(["TRAEFIK_FOO=1"], "TRAEFIK_") == {"traefik.foo": "1"}

    def test_lowercase_prefix_matches_uppercase_keys(self) -> None:
        assert select_env_vars(["TRAEFIK_FOO=1"], "traefik_") == {"traefik.foo": "1"}

    def test_underscores_become_dots(self) -> None:
        variables = select_env_vars(["TRAEFIK_SERVERS_0_URL=http://x"], "TRAEFIK_")
        assert variables == {"traefik.servers.0.url": "http://x"}

    def test_entry_without_separator_has_empty_value(self) -> None:
        assert select_env_vars(["TRAEFIK_FOO"], "TRAEFIK_") == {"traefik.foo": ""}

    def test_value_keeps_further_separators(self) -> None:
        variables = select_env_vars(["TRAEFIK_FOO=a=b=c"], "TRAEFIK_")
        assert variables == {"traefik.foo": "a=b=c"}

    def test_later_duplicates_win(self) -> None:
        variables = select_env_vars(["TRAEFIK_FOO=1", "traefik_foo=2"], "TRAEFIK_")
        assert variables == {"traefik.foo": "2"}

    def test_empty_environment(self) -> None:
        assert select_env_vars([], "TRAEFIK_") == {}

    def test_invalid_prefix_fails_before_processing(self) -> None:
        def entries():
            raise AssertionError("entries must not be read")
            yield  # pragma: no cover

        with pytest.raises(InvalidPrefixError):
            select_env_vars(entries(), "TRAEFIK")


class TestDecode:
    """Decoding into a typed model."""

    def test_scalar_fields(self) -> None:
        config = SampleConfig()
        decode(
            ["TRAEFIK_FOO=bar", "TRAEFIK_DEBUG=true", "TRAEFIK_RETRIES=5", "OTHER_FOO=x"],
            "TRAEFIK_",
            config,
        )
        assert config.foo == "bar"
        assert config.debug is True
        assert config.retries == 5

    def test_nested_fields(self) -> None:
        config = SampleConfig()
        decode(
            [
                "TRAEFIK_LOG_LEVEL=debug",
                "TRAEFIK_LOG_FILEPATH=/var/log/app.log",
                "traefik_log_maxsize=7",
            ],
            "TRAEFIK_",
            config,
        )
        assert config.log.level == LogLevel.DEBUG
        assert config.log.file_path == "/var/log/app.log"
        assert config.log.max_size == 7

    def test_list_of_models_by_index(self) -> None:
        config = SampleConfig()
        decode(
            [
                "TRAEFIK_SERVERS_0_URL=http://a",
                "TRAEFIK_SERVERS_1_URL=http://b",
                "TRAEFIK_SERVERS_1_WEIGHT=4",
            ],
            "TRAEFIK_",
            config,
        )
        assert [s.url for s in config.servers] == ["http://a", "http://b"]
        assert [s.weight for s in config.servers] == [1, 4]

    def test_list_of_scalars_splits_on_commas(self) -> None:
        config = SampleConfig()
        decode(["TRAEFIK_TAGS=blue, green"], "TRAEFIK_", config)
        assert config.tags == ["blue", "green"]

    def test_maps(self) -> None:
        config = SampleConfig()
        decode(
            [
                "TRAEFIK_LABELS_TEAM=core",
                "TRAEFIK_BACKENDS_WEB_ADDRESS=10.0.0.1:80",
                "TRAEFIK_BACKENDS_WEB_TIMEOUT=2.5",
            ],
            "TRAEFIK_",
            config,
        )
        assert config.labels == {"team": "core"}
        assert config.backends["web"].address == "10.0.0.1:80"
        assert config.backends["web"].timeout == 2.5

    def test_allow_empty_model_toggle(self) -> None:
        config = SampleConfig()
        decode(["TRAEFIK_API=true"], "TRAEFIK_", config)
        assert config.api is not None
        assert config.api.base_path == "/"

        decode(["TRAEFIK_API=false"], "TRAEFIK_", config)
        assert config.api is None

    def test_optional_model_with_children(self) -> None:
        config = SampleConfig()
        decode(["TRAEFIK_METRICS_BASEPATH=/m"], "TRAEFIK_", config)
        assert config.metrics is not None
        assert config.metrics.base_path == "/m"
        assert config.metrics.insecure is False

    def test_standalone_optional_model_without_label_fails(self) -> None:
        with pytest.raises(MetadataError) as exc:
            decode(["TRAEFIK_METRICS=true"], "TRAEFIK_", SampleConfig())
        assert "standalone" in str(exc.value)

    def test_empty_value_clears_optional_scalar(self) -> None:
        config = SampleConfig(retries=3)
        decode(["TRAEFIK_RETRIES="], "TRAEFIK_", config)
        assert config.retries is None

    def test_entry_without_separator_sets_empty_string(self) -> None:
        config = SampleConfig(foo="before")
        decode(["TRAEFIK_FOO"], "TRAEFIK_", config)
        assert config.foo == ""

    def test_empty_environment_leaves_element_untouched(self) -> None:
        config = SampleConfig(foo="kept")
        decode([], "TRAEFIK_", config)
        assert config.model_dump() == SampleConfig(foo="kept").model_dump()

    def test_unknown_field_fails(self) -> None:
        with pytest.raises(MetadataError) as exc:
            decode(["TRAEFIK_UNKNOWN=1"], "TRAEFIK_", SampleConfig())
        assert "unknown" in str(exc.value)

    def test_underscored_field_names_are_joined(self) -> None:
        """``file_path`` is addressed as FILEPATH, FILE_PATH splits into two segments."""
        with pytest.raises(MetadataError):
            decode(["TRAEFIK_LOG_FILE_PATH=/x"], "TRAEFIK_", SampleConfig())

    def test_hidden_field_cannot_be_set(self) -> None:
        with pytest.raises(MetadataError):
            decode(["TRAEFIK_SECRET=x"], "TRAEFIK_", SampleConfig())

    def test_invalid_scalar_fails(self) -> None:
        with pytest.raises(FieldValueError) as exc:
            decode(["TRAEFIK_LOG_MAXSIZE=lots"], "TRAEFIK_", SampleConfig())
        assert exc.value.path == "traefik.log.maxsize"
        assert exc.value.__cause__ is not None

    def test_invalid_prefix(self) -> None:
        with pytest.raises(InvalidPrefixError):
            decode(["TRAEFIK_FOO=1"], "TRAEFIK", SampleConfig())

    def test_prefix_with_inner_underscore(self) -> None:
        config = SampleConfig()
        decode(["MY_APP_FOO=bar", "TRAEFIK_FOO=other"], "MY_APP_", config)
        assert config.foo == "bar"

    def test_prefix_with_doubled_trailing_underscore(self) -> None:
        """``A__`` leaves an empty segment after the root, which belongs to it."""
        config = SampleConfig()
        decode(["A__FOO=x", "A__LOG_MAXSIZE=4"], "A__", config)
        assert config.foo == "x"
        assert config.log.max_size == 4

    def test_prefix_with_doubled_trailing_underscore_round_trip(self) -> None:
        original = populated_config()
        decoded = SampleConfig()
        decode([flat.as_env() for flat in encode("A__", original)], "A__", decoded)
        assert decoded.model_dump() == original.model_dump()

    def test_failed_decode_leaves_element_untouched(self) -> None:
        """Fields decoded before the failing one are not written either."""
        config = SampleConfig(foo="kept")
        before = config.model_dump()

        with pytest.raises(FieldValueError):
            decode(
                [
                    "TRAEFIK_DEBUG=true",
                    "TRAEFIK_FOO=set",
                    "TRAEFIK_LOG_LEVEL=debug",
                    "TRAEFIK_LOG_MAXSIZE=lots",
                ],
                "TRAEFIK_",
                config,
            )

        assert config.model_dump() == before

    def test_non_ascii_digit_index_fails(self) -> None:
        with pytest.raises(MetadataError) as exc:
            decode(["TRAEFIK_SERVERS_²_URL=x"], "TRAEFIK_", SampleConfig())
        assert "not a valid list index" in str(exc.value)

    def test_index_far_beyond_list_fails(self) -> None:
        config = SampleConfig()
        with pytest.raises(MetadataError) as exc:
            decode(["TRAEFIK_SERVERS_200000_URL=x"], "TRAEFIK_", config)
        assert "out of range" in str(exc.value)
        assert config.servers == []

    def test_index_may_leave_a_gap_per_new_item(self) -> None:
        config = SampleConfig()
        decode(["TRAEFIK_SERVERS_2_URL=c", "TRAEFIK_SERVERS_0_URL=a"], "TRAEFIK_", config)
        assert [s.url for s in config.servers] == ["a", "", "c"]

    def test_invalid_prefix_fails_before_reading_entries(self) -> None:
        def entries():
            raise AssertionError("entries must not be read")
            yield  # pragma: no cover

        with pytest.raises(InvalidPrefixError):
            decode(entries(), "A-B_", SampleConfig())


class TestEnvCodec:
    """The codec bound to an explicit configuration."""

    def test_custom_prefix(self) -> None:
        codec = EnvCodec(EnvCodecConfig(prefix="APP_"))
        config = SampleConfig()
        codec.decode(["APP_FOO=1", "TRAEFIK_FOO=2"], config)
        assert config.foo == "1"
        assert codec.root_name == "app"

    def test_default_config(self) -> None:
        codec = EnvCodec()
        assert codec.config.prefix == "TRAEFIK_"

    def test_lists_of_models_can_be_disallowed(self) -> None:
        codec = EnvCodec(EnvCodecConfig(allow_slice_as_struct=False))
        with pytest.raises(MetadataError):
            codec.decode(["TRAEFIK_SERVERS_0_URL=http://a"], SampleConfig())
