"""Tests for flag declaration, parsing and help rendering."""

import pytest

from cmdwire.exceptions import FlagParseError, RegistrationError
from cmdwire.flags import (
    NO_OPTIONS,
    Flag,
    FlagKind,
    FlagSpec,
    bool_flag,
    int_flag,
    string_flag,
)


@pytest.fixture
def flag_spec():
    return FlagSpec([
        bool_flag("verbose"),
        string_flag("target", default="all", help="build target"),
        int_flag("jobs", default=1),
    ])


def test_bool_flag_present_is_true():
    result = FlagSpec([bool_flag("verbose")]).parse(["--verbose", "build"])
    assert dict(result.values) == {"verbose": True}
    assert result.positional == ("build",)


def test_defaults_filled_for_absent_flags(flag_spec):
    result = flag_spec.parse(["build"])
    assert dict(result.values) == {"verbose": False, "target": "all", "jobs": 1}
    assert result.positional == ("build",)


def test_value_as_next_token(flag_spec):
    result = flag_spec.parse(["--target", "docs", "--jobs", "4", "x"])
    assert result["target"] == "docs"
    assert result["jobs"] == 4
    assert result.positional == ("x",)


def test_value_after_equals(flag_spec):
    result = flag_spec.parse(["--target=a b", "--jobs=-2"])
    assert result["target"] == "a b"
    assert result["jobs"] == -2
    assert result.positional == ()


def test_string_value_may_be_empty(flag_spec):
    assert flag_spec.parse(["--target="])["target"] == ""


@pytest.mark.parametrize("raw,expected", [
    ("true", True), ("FALSE", False), ("1", True), ("0", False),
    ("yes", True), ("off", False),
])
def test_bool_with_explicit_value(flag_spec, raw, expected):
    assert flag_spec.parse([f"--verbose={raw}"])["verbose"] is expected


def test_parsing_stops_at_first_positional(flag_spec):
    result = flag_spec.parse(["a", "--verbose"])
    assert result["verbose"] is False
    assert result.positional == ("a", "--verbose")


def test_separator_ends_flags_and_is_consumed(flag_spec):
    result = flag_spec.parse(["--verbose", "--", "--jobs", "3"])
    assert result["verbose"] is True
    assert result["jobs"] == 1
    assert result.positional == ("--jobs", "3")


def test_single_dash_tokens_are_positional(flag_spec):
    result = flag_spec.parse(["-v", "-"])
    assert result.positional == ("-v", "-")


def test_unknown_flag_names_token(flag_spec):
    with pytest.raises(FlagParseError) as exc_info:
        flag_spec.parse(["--nope", "x"])
    assert exc_info.value.token == "--nope"
    assert "--nope" in str(exc_info.value)


def test_missing_value(flag_spec):
    with pytest.raises(FlagParseError, match="flag needs an argument: --target"):
        flag_spec.parse(["--target"])


def test_invalid_int(flag_spec):
    with pytest.raises(FlagParseError) as exc_info:
        flag_spec.parse(["--jobs", "many"])
    assert exc_info.value.token == "--jobs"
    assert "many" in str(exc_info.value)


def test_invalid_bool_value(flag_spec):
    with pytest.raises(FlagParseError):
        flag_spec.parse(["--verbose=maybe"])


def test_empty_spec_rejects_any_flag():
    with pytest.raises(FlagParseError):
        FlagSpec().parse(["--x"])


def test_parse_leaves_input_untouched(flag_spec):
    tokens = ["--verbose", "a"]
    flag_spec.parse(tokens)
    assert tokens == ["--verbose", "a"]


def test_parsed_values_are_read_only(flag_spec):
    result = flag_spec.parse([])
    with pytest.raises(TypeError):
        result.values["verbose"] = True


# --- declaration ---

def test_duplicate_flag_rejected():
    with pytest.raises(RegistrationError, match="declared twice"):
        FlagSpec([bool_flag("v"), string_flag("v")])


def test_default_must_match_kind():
    with pytest.raises(RegistrationError):
        Flag("jobs", FlagKind.INT, default="3")
    with pytest.raises(RegistrationError):
        Flag("jobs", FlagKind.INT, default=True)


@pytest.mark.parametrize("name", ["", "-v", "a b", "x=y"])
def test_invalid_flag_names(name):
    with pytest.raises(RegistrationError):
        bool_flag(name)


def test_kind_given_as_string():
    flag = Flag("n", "int")
    assert flag.kind is FlagKind.INT
    assert flag.default == 0


# --- help rendering ---

def test_render_help_lines(flag_spec):
    assert flag_spec.render_help() == "\n".join([
        "  --verbose  (bool, default=false)",
        '  --target  (string, default="all")  build target',
        "  --jobs  (int, default=1)",
    ])


def test_render_help_without_flags():
    assert FlagSpec().render_help() == NO_OPTIONS
    assert "No options defined." in NO_OPTIONS
