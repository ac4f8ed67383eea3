"""Argument statements and the literal values they carry."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from .errors import Pos

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_COMPONENT = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?(?P<unit>[^0-9.]*)")
_INTEGER = re.compile(r"[+-]?[0-9]+")


class ConstantType(enum.Enum):
    """Kind of the values held by an argument."""

    INTEGER = 0
    STRING = 1
    BOOLEAN = 2
    DURATION = 3


def parse_duration(text: str) -> int:
    """Parse a duration such as ``1h30m`` or ``1.5s`` into nanoseconds."""
    invalid = ValueError(f'time: invalid duration "{text}"')
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return 0
    if not rest:
        raise invalid

    total = 0
    while rest:
        match = _COMPONENT.match(rest)
        whole, frac, unit = match.group("whole"), match.group("frac") or "", match.group("unit")
        if not whole and not frac:
            raise invalid
        if not unit:
            raise ValueError(f'time: missing unit in duration "{text}"')
        if unit not in _UNITS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{text}"')
        scale = _UNITS[unit]
        value = int(whole or "0") * scale
        if frac:
            value += int(frac) * scale // 10 ** len(frac)
        total += value
        if total > 1 << 63:
            raise invalid
        rest = rest[match.end():]

    if negative:
        return -total
    if total > _INT64_MAX:
        raise invalid
    return total


def _with_fraction(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    if not frac:
        return str(whole)
    return f"{whole}." + str(frac).rjust(digits, "0").rstrip("0")


def format_duration(nanos: int) -> str:
    """Render nanoseconds in the canonical ``72h3m0.5s`` form."""
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    amount = abs(nanos)
    if amount < _SECOND:
        if amount < _MICROSECOND:
            return f"{sign}{amount}ns"
        if amount < _MILLISECOND:
            return f"{sign}{_with_fraction(amount, 3)}\u00b5s"
        return f"{sign}{_with_fraction(amount, 6)}ms"

    text = _with_fraction(amount % _MINUTE, 9) + "s"
    minutes = amount // _MINUTE
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


def parse_string_literal(text: str) -> str:
    """Strip the surrounding quotes from a string literal."""
    return text[1:-1] if len(text) > 2 else ""


def parse_bool_literal(text: str) -> bool:
    """Interpret a boolean literal; anything but ``true`` is false."""
    return text.lower() == "true"


def parse_integer_literal(text: str) -> int:
    """Parse a signed 64-bit decimal integer literal."""
    if not _INTEGER.fullmatch(text):
        raise ValueError(f'invalid integer literal "{text}"')
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f'integer literal "{text}" out of range')
    return value


@dataclass
class ArgStmt:
    """A single ``key=value`` or ``key=[v1, v2]`` argument."""

    key: str
    kind: ConstantType = ConstantType.INTEGER
    integer_values: list[int] = field(default_factory=list)
    string_values: list[str] = field(default_factory=list)
    boolean_values: list[bool] = field(default_factory=list)
    duration_values: list[int] = field(default_factory=list)

    def accept_integer(self, value: int) -> None:
        self.integer_values.append(value)
        self.kind = ConstantType.INTEGER

    def accept_string(self, value: str) -> None:
        self.string_values.append(value)
        self.kind = ConstantType.STRING

    def accept_bool(self, value: bool) -> None:
        self.boolean_values.append(value)
        self.kind = ConstantType.BOOLEAN

    def accept_duration(self, value: int) -> None:
        self.duration_values.append(value)
        self.kind = ConstantType.DURATION

    def description(self, indent: str = "") -> str:
        if self.kind is ConstantType.INTEGER:
            body = _bracketed([str(v) for v in self.integer_values])
        elif self.kind is ConstantType.STRING:
            body = _bracketed([f'"{v}"' for v in self.string_values])
        elif self.kind is ConstantType.BOOLEAN:
            body = _bracketed(["true" if v else "false" for v in self.boolean_values])
        else:
            count = len(self.duration_values)
            body = "".join(
                format_duration(v) + ("," if idx < count - 1 else "")
                for idx, v in enumerate(self.duration_values)
                if v > 0
            )
            if count > 1:
                body += "]"
        return f"{self.key}={body}"


def _bracketed(items: list[str]) -> str:
    text = ",".join(items)
    return f"[{text}]" if len(items) > 1 else text


@dataclass
class ArgsStmt:
    """An ordered collection of uniquely keyed arguments."""

    pos: Pos = field(default_factory=Pos)
    args: list[ArgStmt] = field(default_factory=list)
    arg_map: dict[str, ArgStmt] = field(default_factory=dict)

    def accept_arg(self, arg: ArgStmt) -> None:
        if arg.key in self.arg_map:
            raise ValueError(f'arg "{arg.key}" already exists')
        self.args.append(arg)
        self.arg_map[arg.key] = arg

    def description(self, indent: str = "") -> str:
        return ", \n".join(arg.description("") for arg in self.args)