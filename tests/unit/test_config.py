"""
Unit tests for configuration tree models.

Tests values and their typed accessors, keys and the round-robin cursor,
headers, and the configuration query surface.
"""

import math

import pytest
from pydantic import ValidationError

from irisconf.errors import CoercionError, ConfigurationError, NoValuesError
from irisconf.models.config import (
    Header,
    IrisConfig,
    Key,
    Value,
    to_value,
)


class TestValue:
    """Test cases for Value."""

    def test_string_form(self):
        """Test string accessors return the raw token."""
        value = Value("0.0.0.0")

        assert value.as_string() == "0.0.0.0"
        assert str(value) == "0.0.0.0"
        assert value.token == "0.0.0.0"

    def test_numeric_accessors(self):
        """Test numeric views of an integer token."""
        value = Value("80")

        assert value.as_int() == 80
        assert value.as_long() == 80
        assert value.as_double() == 80.0
        assert value.as_float() == 80.0

    def test_signed_integers(self):
        """Test explicit signs are accepted."""
        assert Value("-5").as_int() == -5
        assert Value("+5").as_int() == 5

    def test_int_range(self):
        """Test 32-bit bounds for int and 64-bit bounds for long."""
        assert Value("2147483647").as_int() == 2147483647
        assert Value("-2147483648").as_int() == -2147483648

        with pytest.raises(CoercionError, match="as int"):
            Value("2147483648").as_int()

        assert Value("2147483648").as_long() == 2147483648
        assert Value("9223372036854775807").as_long() == 9223372036854775807

        with pytest.raises(CoercionError, match="as long"):
            Value("9223372036854775808").as_long()

    def test_malformed_integers(self):
        """Test malformed integer tokens fail loudly."""
        for token in ["abc", "1.5", "", "1_000", "0x10", " 7"]:
            with pytest.raises(CoercionError):
                Value(token).as_int()

    def test_coercion_error_kinds(self):
        """Test coercion errors are both domain errors and ValueErrors."""
        with pytest.raises(CoercionError) as exc_info:
            Value("abc").as_long()

        assert isinstance(exc_info.value, ConfigurationError)
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.token == "abc"
        assert exc_info.value.target == "long"

    def test_double(self):
        """Test double parsing."""
        assert Value("1e3").as_double() == 1000.0
        assert Value("-0.25").as_double() == -0.25

        with pytest.raises(CoercionError, match="as double"):
            Value("fast").as_double()

    def test_malformed_decimals(self):
        """Test underscores and loose spellings of special values are rejected."""
        for token in ["1_000", "1_0.5", "nan", "inf", "infinity", "INFINITY", "0x1p3", "1e", ".", ""]:
            with pytest.raises(CoercionError):
                Value(token).as_double()
            with pytest.raises(CoercionError):
                Value(token).as_float()

    def test_special_decimals(self):
        """Test the exact NaN and Infinity spellings."""
        assert math.isnan(Value("NaN").as_double())
        assert Value("Infinity").as_double() == float("inf")
        assert Value("-Infinity").as_float() == float("-inf")
        assert Value(".5").as_double() == 0.5
        assert Value("5.").as_float() == 5.0

    def test_float_single_precision(self):
        """Test float values are rounded to single precision."""
        assert Value("0.1").as_float() != 0.1
        assert Value("0.1").as_float() == pytest.approx(0.1, rel=1e-7)
        assert Value("0.5").as_float() == 0.5
        assert Value("1e300").as_float() == float("inf")
        assert Value("-1e300").as_float() == float("-inf")

        with pytest.raises(CoercionError, match="as float"):
            Value("slow").as_float()

    def test_boolean_is_lenient(self):
        """Test only 'true' in any case is truthy and nothing raises."""
        assert Value("true").as_boolean() is True
        assert Value("TRUE").as_boolean() is True
        assert Value("True").as_boolean() is True
        assert Value("false").as_boolean() is False
        assert Value("yes").as_boolean() is False
        assert Value("1").as_boolean() is False

    def test_value_is_immutable(self):
        """Test values cannot be modified after construction."""
        value = Value("a")

        with pytest.raises(ValidationError):
            value.token = "b"

    def test_value_equality_and_hash(self):
        """Test values compare and hash by token."""
        assert Value("a") == Value("a")
        assert Value("a") != Value("b")
        assert len({Value("a"), Value("a")}) == 1

    def test_to_value(self):
        """Test wrapping raw tokens."""
        value = Value("x")

        assert to_value(value) is value
        assert to_value("y") == Value("y")


class TestKey:
    """Test cases for Key."""

    def test_empty_key(self):
        """Test a new key has no values."""
        key = Key("bind")

        assert key.name == "bind"
        assert not key.has_values()
        assert key.values() == ()
        assert len(key) == 0

    def test_name_required(self):
        """Test key names must not be empty."""
        with pytest.raises(ValidationError):
            Key("")

    def test_add_values_preserves_order(self):
        """Test values keep insertion order without de-duplication."""
        key = Key("key")
        key.add_value(Value("b"))
        key.add_value("a")
        key.add_value("b")

        assert key.has_values()
        assert key.tokens() == ["b", "a", "b"]
        assert key.values() == (Value("b"), Value("a"), Value("b"))

    def test_construct_with_values(self):
        """Test passing initial values."""
        key = Key("bind", ["0.0.0.0", Value("80")])

        assert key.tokens() == ["0.0.0.0", "80"]

    def test_get_value(self):
        """Test positional access returns the same value every time."""
        key = Key("key", ["value1", "value2"])

        assert key.get_value(0).as_string() == "value1"
        assert key.get_value(1).as_string() == "value2"
        assert key.get_value(1) is key.get_value(1)

    def test_get_value_out_of_range(self):
        """Test out of range positions raise IndexError."""
        key = Key("key", ["value1"])

        with pytest.raises(IndexError):
            key.get_value(1)
        with pytest.raises(IndexError):
            key.get_value(-1)

    def test_values_view_is_read_only(self):
        """Test the values view cannot change the key."""
        key = Key("key", ["a"])
        view = key.values()

        assert isinstance(view, tuple)
        assert key.tokens() == ["a"]

    def test_next_round_robin(self):
        """Test next() cycles through values in order."""
        key = Key("key", ["value1", "value2"])

        assert key.next().as_string() == "value1"
        assert key.next().as_string() == "value2"
        assert key.next().as_string() == "value1"
        assert key.next_string() == "value2"

    def test_next_full_cycle(self):
        """Test n calls visit every position and the next one wraps."""
        tokens = ["a", "b", "c", "d"]
        key = Key("key", tokens)

        assert [key.next_string() for _ in tokens] == tokens
        assert key.next_string() == "a"

    def test_next_single_value(self):
        """Test a single value is returned repeatedly."""
        key = Key("other", ["40"])

        assert key.next_int() == 40
        assert key.next_int() == 40

    def test_next_sees_appended_values(self):
        """Test values appended mid-cycle join the rotation."""
        key = Key("key", ["a"])

        assert key.next_string() == "a"
        key.add_value("b")
        assert key.next_string() == "b"
        assert key.next_string() == "a"

    def test_next_on_empty_key(self):
        """Test next() on a key without values raises NoValuesError."""
        key = Key("empty")

        with pytest.raises(NoValuesError, match="has no values"):
            key.next()

        with pytest.raises(LookupError):
            key.next_string()

    def test_typed_next(self):
        """Test typed next variants."""
        key = Key("other", ["40"])

        assert key.next_int() == 40
        assert key.next_long() == 40
        assert key.next_double() == 40.0
        assert key.next_float() == 40.0

        flag = Key("debug", ["true"])
        assert flag.next_boolean() is True

    def test_reset(self):
        """Test reset() restarts the cycle."""
        key = Key("key", ["a", "b"])
        key.next()
        key.reset()

        assert key.next_string() == "a"


class TestHeader:
    """Test cases for Header."""

    def test_add_and_get_key(self):
        """Test keys are addressed by name."""
        header = Header("server")
        bind = Key("bind", ["0.0.0.0"])
        header.add_key(bind)

        assert header.name == "server"
        assert header.has_key("bind")
        assert header.get_key("bind") is bind
        assert header.keys() == (bind,)

    def test_missing_key(self):
        """Test missing keys return None."""
        header = Header("server")

        assert not header.has_key("bind")
        assert header.get_key("bind") is None

    def test_replace_key(self):
        """Test adding a key with an existing name replaces it."""
        header = Header("test")
        header.add_key(Key("key", ["a"]))
        header.add_key(Key("key", ["b"]))

        assert len(header) == 1
        assert header.get_key("key").tokens() == ["b"]

    def test_empty_name_allowed(self):
        """Test headers may have an empty name."""
        assert Header("").name == ""

    def test_to_dict(self):
        """Test conversion to dictionary."""
        header = Header("test", [Key("key", ["a", "b"]), Key("flag")])

        assert header.to_dict() == {"key": ["a", "b"], "flag": []}


class TestIrisConfig:
    """Test cases for IrisConfig."""

    @pytest.fixture
    def config(self):
        config = IrisConfig(source="example.cp")
        config.add_header(Header("test", [Key("key", ["value1", "value2"])]))
        config.add_header(Header("server", [Key("bind", ["0.0.0.0", "80"])]))
        return config

    def test_has_header(self, config):
        """Test header presence checks."""
        assert config.has_header("test")
        assert config.has_header("server")
        assert not config.has_header("random")

    def test_get_header(self, config):
        """Test a present header is returned by name and missing ones are None."""
        for header in config.headers():
            assert config.has_header(header.name)
            assert config.get_header(header.name) is header

        assert config.get_header("random") is None

    def test_has_header_and_key(self, config):
        """Test combined header and key lookup."""
        assert config.has_header_and_key("test", "key")
        assert config.has_header_and_key("server", "bind")
        assert not config.has_header_and_key("test", "bind")
        assert not config.has_header_and_key("random", "key")

    def test_get_key_and_values(self, config):
        """Test direct key and value lookups."""
        assert config.get_key("server", "bind").tokens() == ["0.0.0.0", "80"]
        assert config.get_key("server", "port") is None
        assert config.get_key("random", "bind") is None
        assert config.get_values("test", "key") == (Value("value1"), Value("value2"))
        assert config.get_values("test", "missing") == ()

    def test_to_dict(self, config):
        """Test conversion to nested dictionaries."""
        assert config.to_dict() == {
            "test": {"key": ["value1", "value2"]},
            "server": {"bind": ["0.0.0.0", "80"]},
        }

    def test_str(self, config):
        """Test string representation."""
        assert str(config) == "IrisConfig(source=example.cp, headers=2, keys=2)"
        assert "source=<memory>" in str(IrisConfig())
