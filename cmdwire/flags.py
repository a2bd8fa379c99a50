"""Per-command option flags.

A command declares its options as a FlagSpec: an ordered set of typed
flags with defaults. At dispatch time the FlagSpec consumes leading
``--name`` / ``--name=value`` / ``--name value`` tokens and hands the
rest over as positional arguments.

Key classes:
    FlagKind: The value kinds a flag can carry (bool, string, int).
    Flag: One declared option.
    FlagSpec: Ordered, immutable set of flags with parse/help rendering.
    ParsedFlags: Flag values plus the positional tokens left over.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from .exceptions import FlagParseError, RegistrationError

FLAG_MARKER = "--"
SEPARATOR = "--"
NO_OPTIONS = "  No options defined."

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class FlagKind(str, Enum):
    """Value kind of a flag."""
    BOOL = "bool"
    STRING = "string"
    INT = "int"


_ZERO_VALUES = {FlagKind.BOOL: False, FlagKind.STRING: "", FlagKind.INT: 0}


def _default_matches(kind: FlagKind, value: Any) -> bool:
    if kind is FlagKind.BOOL:
        return isinstance(value, bool)
    if kind is FlagKind.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, str)


@dataclass(frozen=True)
class Flag:
    """A single declared option.

    Attributes:
        name: Flag name without the leading ``--``.
        kind: Value kind; decides whether a value token is consumed.
        default: Value used when the flag is absent. None means the
            kind's zero value (False, "", 0).
        help: Optional one-line description shown in command help.
    """
    name: str
    kind: FlagKind = FlagKind.BOOL
    default: Any = None
    help: str = ""

    def __post_init__(self):
        if not isinstance(self.name, str) or not _NAME_RE.match(self.name):
            raise RegistrationError(f"invalid flag name: {self.name!r}", name=self.name)
        kind = FlagKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if self.default is None:
            object.__setattr__(self, "default", _ZERO_VALUES[kind])
        elif not _default_matches(kind, self.default):
            raise RegistrationError(
                f"default {self.default!r} for flag --{self.name} is not a {kind.value}",
                name=self.name,
            )

    def convert(self, raw: str, token: str) -> Any:
        """Convert a raw value string to this flag's kind.

        Args:
            raw: The value text.
            token: The flag token as typed, used in the error message.

        Raises:
            FlagParseError: If raw is not a valid value for the kind.
        """
        if self.kind is FlagKind.STRING:
            return raw
        if self.kind is FlagKind.INT:
            if _INT_RE.match(raw):
                return int(raw)
        else:
            lowered = raw.lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
        raise FlagParseError(
            f"invalid value {raw!r} for flag {token}: expected {self.kind.value}",
            token=token,
        )

    def format_default(self) -> str:
        if self.kind is FlagKind.BOOL:
            return "true" if self.default else "false"
        if self.kind is FlagKind.STRING:
            return f'"{self.default}"'
        return str(self.default)

    def render_help(self) -> str:
        line = f"  --{self.name}  ({self.kind.value}, default={self.format_default()})"
        if self.help:
            line += f"  {self.help}"
        return line


def bool_flag(name: str, default: bool = False, help: str = "") -> Flag:
    return Flag(name, FlagKind.BOOL, default, help)


def string_flag(name: str, default: str = "", help: str = "") -> Flag:
    return Flag(name, FlagKind.STRING, default, help)


def int_flag(name: str, default: int = 0, help: str = "") -> Flag:
    return Flag(name, FlagKind.INT, default, help)


@dataclass(frozen=True)
class ParsedFlags:
    """Outcome of parsing a command's argument vector.

    Attributes:
        values: Every declared flag name mapped to its parsed value or
            its default when the flag was not given.
        positional: Tokens left after flag parsing, in order.
    """
    values: Mapping[str, Any] = field(default_factory=dict)
    positional: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "positional", tuple(self.positional))

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)


class FlagSpec:
    """Ordered, immutable set of flags for one command.

    Args:
        flags: Flags in the order they should appear in help output.

    Raises:
        RegistrationError: If two flags share a name.
    """

    def __init__(self, flags: Iterable[Flag] = ()):
        declared: Dict[str, Flag] = {}
        for flag in flags:
            if flag.name in declared:
                raise RegistrationError(
                    f"flag --{flag.name} declared twice", name=flag.name
                )
            declared[flag.name] = flag
        self._flags = MappingProxyType(declared)

    def __iter__(self) -> Iterator[Flag]:
        return iter(self._flags.values())

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __repr__(self) -> str:
        return f"FlagSpec({list(self._flags.values())!r})"

    def get(self, name: str) -> Optional[Flag]:
        return self._flags.get(name)

    def defaults(self) -> Dict[str, Any]:
        return {flag.name: flag.default for flag in self}

    def parse(self, tokens: Sequence[str]) -> ParsedFlags:
        """Consume leading flag tokens.

        Parsing stops at the first token that does not look like
        ``--name``, or just after a bare ``--`` separator. Everything
        from there on is positional, including later ``--name`` tokens.

        Args:
            tokens: Arguments after the command name.

        Returns:
            ParsedFlags with defaults filled in for absent flags.

        Raises:
            FlagParseError: On an unknown flag, a missing value for a
                string/int flag, or a value of the wrong kind.
        """
        tokens = list(tokens)
        values = self.defaults()
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token == SEPARATOR:
                index += 1
                break
            if not token.startswith(FLAG_MARKER):
                break

            name, has_value, raw = token[len(FLAG_MARKER):].partition("=")
            flag = self._flags.get(name)
            if flag is None:
                raise FlagParseError(
                    f"flag provided but not defined: {token}", token=token
                )
            index += 1

            if flag.kind is FlagKind.BOOL:
                values[name] = flag.convert(raw, token) if has_value else True
                continue
            if not has_value:
                if index >= len(tokens):
                    raise FlagParseError(
                        f"flag needs an argument: {token}", token=token
                    )
                raw = tokens[index]
                index += 1
            values[name] = flag.convert(raw, token)

        return ParsedFlags(values, tuple(tokens[index:]))

    def render_help(self) -> str:
        """Render the OPTIONS block for command help."""
        if not self._flags:
            return NO_OPTIONS
        return "\n".join(flag.render_help() for flag in self)


EMPTY_FLAGS = FlagSpec()
