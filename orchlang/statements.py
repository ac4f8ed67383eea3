"""Execution statements: operators, waits, skips, serial, concurrent and wrap forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from .args import ArgsStmt
from .errors import Pos


class Descriptor(Protocol):
    """Anything that can render itself back into source form."""

    def description(self, indent: str = "") -> str: ...


@dataclass
class WaitDirective:
    """``WAIT("name", timeout=..., ...)`` attached to an operator."""

    go_name: str = ""
    pos: Pos = field(default_factory=Pos)
    timeout: int = 0
    total_timeout: int = 0
    not_check_start: bool = False
    ignore_error: bool = False
    _args: Optional[ArgsStmt] = field(default=None, repr=False)

    def accept_args(self, args: ArgsStmt) -> None:
        """Take the wait options from an argument list."""
        self._args = args
        timeout = args.arg_map.get("timeout")
        if timeout is not None and timeout.duration_values:
            self.timeout = timeout.duration_values[0]
        total = args.arg_map.get("totalTimeout")
        if total is not None and total.duration_values:
            self.total_timeout = total.duration_values[0]
        check = args.arg_map.get("notCheckStart")
        if check is not None and check.boolean_values:
            self.not_check_start = check.boolean_values[0]

    def description(self, indent: str = "") -> str:
        text = f'WAIT("{self.go_name}"'
        if self._args is not None:
            text += ", " + self._args.description(indent)
        return text + ")"


@dataclass
class OperatorStmt:
    """A call of a registered operator, with optional arguments and waits."""

    name: str
    pos: Pos = field(default_factory=Pos)
    ignore_error: bool = False
    args: Optional[ArgsStmt] = None
    waits: list[WaitDirective] = field(default_factory=list)

    def accept_args(self, args: ArgsStmt) -> None:
        self.args = args

    def accept_wait(self, wait: WaitDirective) -> None:
        self.waits.append(wait)

    def description(self, indent: str = "") -> str:
        text = ("@" if self.ignore_error else "") + self.name
        if self.args is None and not self.waits:
            return text
        parts = []
        if self.args is not None:
            parts.append(self.args.description(""))
        if self.waits:
            parts.append(", ".join(wait.description("") for wait in self.waits))
        return f"{text}({', '.join(parts)})"

    def __str__(self) -> str:
        return self.description("")


@dataclass
class SkipDirective:
    """``SKIP(operator)``: an operator that is declared but not run."""

    operator: OperatorStmt
    pos: Pos = field(default_factory=Pos)

    def description(self, indent: str = "") -> str:
        return f"SKIP({self.operator.description('')})"


@dataclass
class LeafSnippet:
    """One element of a serial or concurrent sequence."""

    leaf: Descriptor

    def description(self, indent: str = "") -> str:
        return self.leaf.description(indent)


@dataclass
class SerialStmt:
    """Leaves run one after another: ``a -> b -> c``."""

    pos: Pos = field(default_factory=Pos)
    leaves: list[LeafSnippet] = field(default_factory=list)

    def accept_leaf(self, leaf: LeafSnippet) -> None:
        self.leaves.append(leaf)

    def accept_skip(self, skip: SkipDirective) -> None:
        self.leaves.append(LeafSnippet(skip))

    def description(self, indent: str = "") -> str:
        separator = ("\n" + indent if len(self.leaves) > 3 else " ") + "-> "
        return separator.join(leaf.description("") for leaf in self.leaves)


@dataclass
class SerialBracketStmt:
    """A parenthesised serial sequence used as a single leaf."""

    serial: SerialStmt
    ignore_error: bool = False

    def description(self, indent: str = "") -> str:
        return f"({self.serial.description(indent)})"


@dataclass
class ConcurrentStmt:
    """Leaves run at the same time: ``[a, b, c]``."""

    pos: Pos = field(default_factory=Pos)
    ignore_error: bool = False
    leaves: list[LeafSnippet] = field(default_factory=list)

    def accept_leaf(self, leaf: LeafSnippet) -> None:
        self.leaves.append(leaf)

    def description(self, indent: str = "") -> str:
        separator = ("\n" + indent if len(self.leaves) > 3 else "") + ", "
        return "[" + separator.join(leaf.description(indent) for leaf in self.leaves) + "]"


@dataclass
class WrapStmt:
    """Operators wrapping a leaf: ``w1 | w2 | leaf``."""

    leaf: LeafSnippet
    pos: Pos = field(default_factory=Pos)
    wrappers: list[OperatorStmt] = field(default_factory=list)

    def accept_operator(self, operator: OperatorStmt) -> None:
        self.wrappers.append(operator)

    def description(self, indent: str = "") -> str:
        prefix = "".join(op.description(indent) + " | " for op in self.wrappers)
        return prefix + self.leaf.description(indent)


@dataclass
class WrapBracketStmt:
    """A parenthesised wrap statement used as a single leaf."""

    wrap: WrapStmt
    ignore_error: bool = False

    def description(self, indent: str = "") -> str:
        return f"({self.wrap.description(indent)})"