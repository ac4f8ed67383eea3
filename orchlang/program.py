"""Top-level program structure: START and FRAGMENT directives and the whole program."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .args import ArgsStmt
from .directives import ExedescStmt, GoDirective, OnFinishStmt, UnfoldDirective, UnfoldDirectives
from .errors import ParseError, Pos
from .registry import Operators, RegisterDirective, RegisterDirectives
from .statements import OperatorStmt


@dataclass
class FragmentDirective:
    """``FRAGMENT("name") { ... }``: a reusable body that START directives unfold."""

    name: str
    pos: Pos = field(default_factory=Pos)
    exedesc: Optional[ExedescStmt] = None
    unfolds: UnfoldDirectives = field(default_factory=UnfoldDirectives)
    go_directives: dict[str, GoDirective] = field(default_factory=dict)
    wait_names: set[str] = field(default_factory=set)
    expected_operators: set[str] = field(default_factory=set)

    def append_unfold(self, unfold: UnfoldDirective) -> None:
        self.unfolds.append(unfold)

    def append_go(self, go: GoDirective) -> None:
        """Record a GO directive; names must be unique within the fragment."""
        if go.go_name in self.go_directives:
            raise ParseError("duplicate goDirective", self.pos, {"name": go.go_name})
        self.go_directives[go.go_name] = go

    def append_wait_name(self, name: str) -> None:
        self.wait_names.add(name)

    def accept_operator(self, operator: OperatorStmt) -> None:
        self.expected_operators.add(operator.name)

    def description(self, indent: str = "") -> str:
        body = self.exedesc.description(indent + "  ") if self.exedesc is not None else ""
        return f'FRAGMENT("{self.name}"){{\n\n{body}\n\n}}\n'

    def __str__(self) -> str:
        return f'FRAGMENT("{self.name}"):{self.pos.start_line}:{self.pos.start_column}'


@dataclass
class FragmentDirectives:
    """All fragments of a program, unique by name, in order of definition."""

    order: list[str] = field(default_factory=list)
    by_name: dict[str, FragmentDirective] = field(default_factory=dict)

    def append(self, fragment: FragmentDirective) -> None:
        if fragment.name in self.by_name:
            raise ParseError(
                "duplicate fragmentDirective", fragment.pos, {"name": fragment.name}
            )
        self.by_name[fragment.name] = fragment
        self.order.append(fragment.name)

    def description(self, indent: str = "") -> str:
        return "\n".join(self.by_name[name].description(indent) for name in self.order)

    def self_check(self) -> None:
        """Reject fragments that unfold themselves, directly or through others."""
        for name in self.order:
            root = self.by_name[name]
            self._check_cycle(root, root, set())

    def _check_cycle(
        self, fragment: FragmentDirective, root: FragmentDirective, seen: set[str]
    ) -> None:
        for dep_name in fragment.unfolds.order:
            dep = self.by_name.get(dep_name)
            if dep is None:
                continue
            if root.name in dep.unfolds.by_name:
                raise ValueError(
                    f"fragment directive import cycle error: {root}, conflict {dep}"
                )
            if dep.name in seen:
                continue
            seen.add(dep.name)
            self._check_cycle(dep, root, seen)


@dataclass
class StartDirective:
    """``START("name") { ... }``: an entry point of the program."""

    name: str
    pos: Pos = field(default_factory=Pos)
    args: Optional[ArgsStmt] = None
    on_finish: Optional[OnFinishStmt] = None
    exedesc: Optional[ExedescStmt] = None
    no_check_miss: bool = False
    expected_operators: set[str] = field(default_factory=set)
    go_directives: dict[str, GoDirective] = field(default_factory=dict)
    wait_names: set[str] = field(default_factory=set)
    unfolds: UnfoldDirectives = field(default_factory=UnfoldDirectives)
    # Own GO directives together with those of every unfolded fragment.
    all_go_directives: dict[str, GoDirective] = field(default_factory=dict, repr=False)

    def accept_exedesc(self, exedesc: ExedescStmt) -> None:
        self.exedesc = exedesc
        if isinstance(exedesc.stmt, OperatorStmt):
            self.expected_operators.add(exedesc.stmt.name)

    def accept_operator(self, operator: OperatorStmt) -> None:
        self.expected_operators.add(operator.name)

    def append_unfold(self, unfold: UnfoldDirective) -> None:
        self.unfolds.append(unfold)

    def append_go(self, go: GoDirective) -> None:
        """Record a GO directive; names must be unique within the start."""
        if go.go_name in self.go_directives:
            raise ParseError("duplicate goDirective", go.pos, {"name": go.go_name})
        self.go_directives[go.go_name] = go

    def append_wait_name(self, name: str) -> None:
        self.wait_names.add(name)

    def description(self, indent: str = "") -> str:
        text = f'START("{self.name}"'
        if self.args is not None:
            text += ",\n" + self.args.description(indent)
        text += "){\n\n"
        if self.on_finish is not None:
            text += self.on_finish.description("  ")
        if self.no_check_miss:
            text += "\nNO_CHECK_MISS()\n"
        if self.exedesc is not None:
            text += self.exedesc.description("  ")
        return text + "\n\n}\n"

    def __str__(self) -> str:
        return f'START("{self.name}"):{self.pos.start_line}:{self.pos.start_column}'


def _collect_go(unfolds: UnfoldDirectives, collected: dict[str, GoDirective]) -> None:
    for directives in unfolds.by_name.values():
        fragment = directives[0].fragment
        if fragment is None:
            continue
        _collect_go(fragment.unfolds, collected)
        for go in fragment.go_directives.values():
            if go.go_name in collected:
                raise ParseError("duplicate goDirective", go.pos, {"name": go.go_name})
            collected[go.go_name] = go


def _collect_waits(unfolds: UnfoldDirectives, collected: set[str]) -> None:
    for directives in unfolds.by_name.values():
        fragment = directives[0].fragment
        if fragment is None:
            continue
        _collect_waits(fragment.unfolds, collected)
        collected.update(fragment.wait_names)


@dataclass
class StartDirectives:
    """All START directives of a program, unique by name, in order of definition."""

    order: list[str] = field(default_factory=list)
    by_name: dict[str, StartDirective] = field(default_factory=dict)

    def append(self, start: StartDirective) -> None:
        if start.name in self.by_name:
            raise ParseError("duplicate startDirective", start.pos, {"name": start.name})
        self.by_name[start.name] = start
        self.order.append(start.name)

    def description(self, indent: str = "") -> str:
        return "\n".join(self.by_name[name].description(indent) for name in self.order)

    def _starts(self):
        return (self.by_name[name] for name in self.order)

    def self_check(self) -> None:
        """Check GO names are unique per start and every WAIT has a matching GO."""
        for start in self._starts():
            collected = dict(start.go_directives)
            try:
                _collect_go(start.unfolds, collected)
            except ParseError as exc:
                raise ValueError(f'start `"{start.name}"` has {exc}') from exc
            start.all_go_directives = collected

        for start in self._starts():
            _collect_waits(start.unfolds, start.wait_names)

        for start in self._starts():
            for wait_name in sorted(start.wait_names):
                if wait_name not in start.all_go_directives:
                    raise ValueError(
                        f'START "{start.name}": WAIT("{wait_name}") '
                        "not find matched GO directive"
                    )

    def check_operator_miss(self, operators: Operators) -> None:
        """Raise if a start uses an operator that was never registered."""
        for start in self._starts():
            if start.no_check_miss:
                continue
            for name in sorted(start.expected_operators):
                if name not in operators:
                    raise ValueError(
                        f'in start "{start.name}", operator "{name}" not register'
                    )


@dataclass
class Primary:
    """A whole program: its starts, fragments and operator registrations."""

    starters: StartDirectives = field(default_factory=StartDirectives)
    fragments: FragmentDirectives = field(default_factory=FragmentDirectives)
    registers: RegisterDirectives = field(default_factory=RegisterDirectives)

    def accept_register(self, register: RegisterDirective) -> None:
        self.registers.append(register)

    def accept_fragment(self, fragment: FragmentDirective) -> None:
        self.fragments.append(fragment)

    def accept_start(self, start: StartDirective) -> None:
        self.starters.append(start)

    def description(self) -> str:
        return (
            self.starters.description("")
            + "\n"
            + self.fragments.description("")
            + self.registers.description("")
        )

    def self_check(self) -> None:
        """Resolve UNFOLD references and validate the program as a whole."""
        self._fill_fragments()
        self.fragments.self_check()
        self.starters.self_check()
        self.starters.check_operator_miss(self.registers.all_operators)

    def _fill_fragments(self) -> None:
        owners = [self.starters.by_name[n] for n in self.starters.order]
        owners += [self.fragments.by_name[n] for n in self.fragments.order]
        for owner in owners:
            for name in owner.unfolds.order:
                for unfold in owner.unfolds.by_name[name]:
                    fragment = self.fragments.by_name.get(name)
                    if fragment is None:
                        raise ParseError("fragment not found", unfold.pos, {"name": name})
                    unfold.fragment = fragment