"""
Unit tests for port, volume and environment normalization.
"""
import pytest
from c2ci.PARSERS.port_parser import parse_port, parse_ports
from c2ci.PARSERS.volume_parser import parse_volume, parse_volumes, derive_volume_name
from c2ci.PARSERS.environment_parser import parse_environment
from c2ci.MODELS.service_definition import ScalarPort, RangeStringPort, ObjectPort


class TestPorts:
    """Tests for port spec variants."""

    def test_scalar(self):
        port = parse_port(8080)
        assert isinstance(port, ScalarPort)
        assert port.container_port() == 8080

    @pytest.mark.parametrize("raw, expected", [
        ("80", 80),
        ("8080:80", 80),
        ("127.0.0.1:8080:80", 80),
        ("8000-8005", 8000),
        ("53/udp", 53),
        ("9090:9090/tcp", 9090),
    ])
    def test_strings(self, raw, expected):
        port = parse_port(raw)
        assert isinstance(port, RangeStringPort)
        assert port.container_port() == expected

    def test_object(self):
        port = parse_port({'target': 80, 'published': 8080, 'protocol': 'tcp'})
        assert isinstance(port, ObjectPort)
        assert port.container_port() == 80

    def test_object_without_target(self):
        assert parse_port({'published': 8080}).container_port() is None

    @pytest.mark.parametrize("raw", [
        {'target': 5432, 'protocol': 6},
        {'target': [5432]},
        {'target': 80, 'published': {'host': 8080}},
    ])
    def test_malformed_object_dropped(self, raw):
        assert parse_port(raw) is None

    def test_malformed_object_does_not_fail_the_document(self):
        from c2ci.PARSERS.compose_parser import ComposeParser
        doc = ComposeParser().parse_from_string(
            "services:\n  db:\n    image: postgres\n    ports:\n      - target: 5432\n        protocol: 6\n"
        )
        assert doc.services['db'].ports == []

    def test_unparseable_string(self):
        assert parse_port("http").container_port() is None

    def test_unsupported_types_dropped(self):
        assert parse_port(True) is None
        assert parse_port(None) is None
        assert parse_ports([80, None, "90"]) == [ScalarPort(value=80), RangeStringPort(raw="90")]

    def test_non_list(self):
        assert parse_ports("80") == []


class TestVolumes:
    """Tests for volume naming."""

    def test_named_volume(self):
        vol = parse_volume("db_data:/var/lib/postgresql/data")
        assert vol.name == "db_data"
        assert vol.mount_path == "/var/lib/postgresql/data"

    def test_named_volume_with_mode(self):
        vol = parse_volume("cache:/cache:ro")
        assert (vol.name, vol.mount_path) == ("cache", "/cache")

    def test_bind_mount(self):
        vol = parse_volume("/srv/app/data:/data")
        assert vol.name == "volume-srv-app-data"
        assert vol.mount_path == "/data"

    def test_relative_bind_mount(self):
        vol = parse_volume("./conf:/etc/app")
        assert vol.name == "volume-.-conf"

    def test_anonymous_volume(self):
        vol = parse_volume("/var/cache")
        assert vol.name == "volume-var-cache"
        assert vol.mount_path == "/var/cache"

    def test_leading_colon_anonymous_volume(self):
        vol = parse_volume(":/var/cache")
        assert (vol.name, vol.mount_path) == ("volume-var-cache", "/var/cache")

    def test_long_syntax(self):
        assert parse_volume({'type': 'volume', 'source': 'data', 'target': '/data'}).name == 'data'
        assert parse_volume({'type': 'bind', 'source': '/host/x', 'target': '/x'}).name == 'volume-host-x'
        assert parse_volume({'target': '/tmp/scratch'}).name == 'volume-tmp-scratch'
        assert parse_volume({'source': 'data'}) is None

    def test_naming_is_deterministic(self):
        path = "/opt/data/store"
        assert derive_volume_name(path) == derive_volume_name(path)
        assert parse_volume(path) == parse_volume(path)

    def test_only_one_leading_dash_stripped(self):
        assert derive_volume_name("//double") == "volume--double"

    def test_parse_volumes_skips_bad_entries(self):
        vols = parse_volumes(["a:/a", 42, {'type': 'tmpfs'}])
        assert [v.name for v in vols] == ["a"]


class TestEnvironment:
    """Tests for environment normalization."""

    def test_list_value_with_equals(self):
        env, skipped = parse_environment(["KEY=VAL=1"])
        assert env == {"KEY": "VAL=1"}
        assert skipped == []

    def test_mapping_coercion(self):
        env, _ = parse_environment({"A": 1, "B": False, "C": None, "D": "x"})
        assert env == {"A": "1", "B": "false", "C": "", "D": "x"}

    def test_list_without_value(self):
        env, skipped = parse_environment(["ONLY_KEY", "A="])
        assert env == {"A": ""}
        assert skipped == ["ONLY_KEY"]

    def test_missing(self):
        assert parse_environment(None) == ({}, [])
