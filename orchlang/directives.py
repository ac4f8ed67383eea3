"""Switch, go, unfold and on-finish directives, and the execution body holder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ParseError, Pos
from .statements import Descriptor, LeafSnippet, OperatorStmt, WrapBracketStmt


@dataclass
class ExedescStmt:
    """The execution description of a START, FRAGMENT, GO or ON_FINISH body."""

    stmt: Descriptor
    pos: Pos = field(default_factory=Pos)

    def __post_init__(self) -> None:
        # A bracketed wrap used as a whole body is stored as the bare wrap.
        if isinstance(self.stmt, WrapBracketStmt):
            self.stmt = self.stmt.wrap

    def description(self, indent: str = "") -> str:
        return indent + self.stmt.description(indent)


@dataclass
class SwitchCaseDirective:
    """``CASE "name" => leaf`` inside a SWITCH."""

    case_name: str
    leaf: LeafSnippet
    pos: Pos = field(default_factory=Pos)

    def description(self, indent: str = "") -> str:
        return f'{indent}CASE "{self.case_name}" => {self.leaf.description(indent)}'


@dataclass
class SwitchDirective:
    """``SWITCH(operator) { CASE ... }``: the operator picks one case to run."""

    operator: OperatorStmt
    pos: Pos = field(default_factory=Pos)
    cases: list[SwitchCaseDirective] = field(default_factory=list)
    case_map: dict[str, SwitchCaseDirective] = field(default_factory=dict)

    def accept_case(self, case: SwitchCaseDirective) -> None:
        """Add a case; case names must be unique within the switch."""
        if case.case_name in self.case_map:
            raise ParseError(
                "duplicate switch case name", case.pos, {"name": case.case_name}
            )
        self.cases.append(case)
        self.case_map[case.case_name] = case

    def description(self, indent: str = "") -> str:
        inner = indent + " "
        body = ",\n".join(case.description(inner) for case in self.cases)
        return f"SWITCH(\n{self.operator.description('')}){{\n{body}\n}}\n"


@dataclass
class GoDirective:
    """``GO(body, "name")``: runs a body in the background under a name."""

    exedesc: ExedescStmt
    go_name: str = ""
    pos: Pos = field(default_factory=Pos)

    def description(self, indent: str = "") -> str:
        return f'GO({self.exedesc.description("")}, "{self.go_name}")'


@dataclass
class UnfoldDirective:
    """``UNFOLD("fragment")``: a reference to a named fragment."""

    name: str
    pos: Pos = field(default_factory=Pos)
    # Filled in once all fragments of the program are known.
    fragment: Optional[Any] = None

    def description(self, indent: str = "") -> str:
        return f'UNFOLD("{self.name}")'

    def __str__(self) -> str:
        return self.description("")


@dataclass
class UnfoldDirectives:
    """Every UNFOLD in a directive, in order of appearance and grouped by name."""

    order: list[str] = field(default_factory=list)
    by_name: dict[str, list[UnfoldDirective]] = field(default_factory=dict)

    def append(self, directive: UnfoldDirective) -> None:
        self.by_name.setdefault(directive.name, []).append(directive)
        self.order.append(directive.name)


@dataclass
class OnFinishStmt:
    """``ON_FINISH() { ... }``: a body that always runs when a START ends."""

    exedesc: ExedescStmt
    pos: Pos = field(default_factory=Pos)

    def description(self, indent: str = "") -> str:
        body = self.exedesc.description(indent + "  ")
        return f"{indent}ON_FINISH() {{\n{body}\n{indent}}}\n\n"