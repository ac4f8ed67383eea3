"""Operator registration directives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .errors import ParseError, Pos


@dataclass
class OperatorDirective:
    """One ``OPERATOR(pkg, struct[, name], seq)`` registration."""

    pos: Pos = field(default_factory=Pos)
    seq: int = 0
    pkg_path: str = ""
    struct_name: str = ""
    name: str = ""

    @classmethod
    def from_literals(cls, pkg_path, struct_name, operator_name=None, seq=0, pos=None):
        """Build a directive from quoted string literals as written in source."""
        directive = cls(pos=pos if pos is not None else Pos(), seq=seq)
        if pkg_path is not None:
            if len(pkg_path) <= 2:
                raise ParseError("register operator syntax error", directive.pos)
            directive.pkg_path = pkg_path[1:-1]
        if struct_name is not None:
            if len(struct_name) <= 2:
                raise ParseError("register operator struct empty", directive.pos)
            directive.struct_name = struct_name[1:-1]
        if operator_name is not None:
            if len(operator_name) < 2:
                raise ParseError("register operator name empty", directive.pos)
            directive.name = operator_name[1:-1]
        if not directive.name:
            directive.name = directive.struct_name
        return directive

    def description(self, indent: str = "") -> str:
        text = f'{indent}OPERATOR("{self.pkg_path}", "{self.struct_name}"'
        if self.name and self.name != self.struct_name:
            text += f', "{self.name}"'
        return f"{text}, {self.seq})"


@dataclass
class Operators:
    """Registered operators, unique by name and by sequence number."""

    directives: list[OperatorDirective] = field(default_factory=list)
    names: set[str] = field(default_factory=set)
    _seqs: set[int] = field(default_factory=set, repr=False)

    def append(self, directive: OperatorDirective) -> None:
        if directive.name in self.names:
            raise ParseError(
                "register operator duplicate name", directive.pos, {"name": directive.name}
            )
        if directive.seq in self._seqs:
            raise ParseError(
                "register operator duplicate seq", directive.pos, {"seq": str(directive.seq)}
            )
        self._seqs.add(directive.seq)
        self.names.add(directive.name)
        self.directives.append(directive)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.directives)

    def __iter__(self) -> Iterator[OperatorDirective]:
        return iter(self.directives)


@dataclass
class RegisterDirective:
    """A ``REGISTER(pkg) { ... }`` block."""

    pos: Pos = field(default_factory=Pos)
    pkg: str = ""
    operators: Operators = field(default_factory=Operators)

    def accept_operator(self, directive: OperatorDirective) -> None:
        self.operators.append(directive)

    def description(self, indent: str = "") -> str:
        lines = "".join(op.description("  ") + "\n" for op in self.operators)
        return f'REGISTER("{self.pkg}") {{\n{lines}}}\n'


@dataclass
class RegisterDirectives:
    """All register blocks of a program and the union of their operators."""

    directives: list[RegisterDirective] = field(default_factory=list)
    all_operators: Operators = field(default_factory=Operators)

    def append(self, directive: RegisterDirective) -> None:
        self.directives.append(directive)
        for operator in directive.operators:
            self.all_operators.append(operator)

    def description(self, indent: str = "") -> str:
        return "".join(d.description(indent) for d in self.directives)