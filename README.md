# orchlang

`orchlang` models the syntax tree of a small orchestration language. The
language says how registered *operators* run. They can run one after another,
side by side, wrapped by other operators, chosen by case, or started in the
background and waited for later. With this package you build such programs
as Python objects. You can then render them back in the language's own
notation and check them for semantic mistakes.

## Installation

```
pip install .
```

The package has no run-time dependencies. To run the tests:

```
pip install ".[test]"
pytest
```

## What the package does not do

The package does not read program text. It has no lexer or parser, and it has
no command-line tool. You build trees directly from the classes below, and
`description()` turns them back into text.

## The language in brief

| Notation | Class |
| --- | --- |
| `REGISTER("pkg") { OPERATOR("path", "Struct", "name", 1) }` | `RegisterDirective`, `OperatorDirective` |
| `START("name") { ... }` | `StartDirective` |
| `FRAGMENT("name") { ... }` / `UNFOLD("name")` | `FragmentDirective` / `UnfoldDirective` |
| `a -> b -> c` | `SerialStmt` (`SerialBracketStmt` when parenthesised) |
| `[a, b, c]` | `ConcurrentStmt` |
| `w1 \| w2 \| a` | `WrapStmt` (`WrapBracketStmt` when parenthesised) |
| `SWITCH(op) { CASE "x" => a, ... }` | `SwitchDirective`, `SwitchCaseDirective` |
| `GO(a, "bg")` / `WAIT("bg", timeout=1s)` | `GoDirective` / `WaitDirective` |
| `SKIP(a)` | `SkipDirective` |
| `@a` | `OperatorStmt(ignore_error=True)` |
| `ON_FINISH() { ... }` | `OnFinishStmt` |

Each element of a serial or concurrent sequence is wrapped in a `LeafSnippet`.
The body of a start, fragment, `GO` or `ON_FINISH` is an `ExedescStmt`.

## Modules

| Module | Contents |
| --- | --- |
| `orchlang.errors` | `Pos` (source position), `ParseError` |
| `orchlang.args` | `ConstantType`, `ArgStmt`, `ArgsStmt`, `parse_duration`, `format_duration`, `parse_string_literal`, `parse_bool_literal`, `parse_integer_literal` |
| `orchlang.registry` | `OperatorDirective`, `Operators`, `RegisterDirective`, `RegisterDirectives` |
| `orchlang.statements` | `OperatorStmt`, `WaitDirective`, `SkipDirective`, `LeafSnippet`, `SerialStmt`, `SerialBracketStmt`, `ConcurrentStmt`, `WrapStmt`, `WrapBracketStmt` |
| `orchlang.directives` | `ExedescStmt`, `SwitchCaseDirective`, `SwitchDirective`, `GoDirective`, `UnfoldDirective`, `UnfoldDirectives`, `OnFinishStmt` |
| `orchlang.program` | `FragmentDirective`, `FragmentDirectives`, `StartDirective`, `StartDirectives`, `Primary` |

## Arguments and literals

```python
from orchlang.args import ArgStmt, ArgsStmt, parse_duration, format_duration

arg = ArgStmt(key="timeout")
arg.accept_duration(parse_duration("1.5s"))
args = ArgsStmt()
args.accept_arg(arg)
print(args.description(""))          # timeout=1.5s
print(format_duration(90 * 10**9))  # 1m30s
```

Durations are integer nanoseconds. They use the units `h`, `m`, `s`, `ms`,
`us`, `µs` and `ns`, and fractions are allowed, as in `1.5s`.

- `parse_integer_literal` accepts signed decimal integers that fit in 64 bits.
- `parse_bool_literal` returns `True` only for `true`, in any letter case.
- `parse_string_literal` strips the surrounding quotes.

Invalid input raises `ValueError`. Adding the same argument key to an
`ArgsStmt` twice also raises `ValueError`.

A `WaitDirective` takes its `timeout`, `totalTimeout` and `notCheckStart`
options from the `ArgsStmt` given to `accept_args`.

## Registering operators

```python
from orchlang.registry import OperatorDirective, RegisterDirective, RegisterDirectives

reg = RegisterDirective(pkg="demo")
reg.accept_operator(OperatorDirective.from_literals('"demo/ops"', '"Fetch"', None, 1))
registers = RegisterDirectives()
registers.append(reg)
"Fetch" in registers.all_operators   # True
```

`from_literals` takes the quoted literals as they are written in a program.
When no operator name is given, the struct name is used. Empty literals raise
`ParseError`, and so do duplicate operator names or sequence numbers.

## Whole programs

```python
from orchlang.directives import ExedescStmt
from orchlang.program import Primary, StartDirective
from orchlang.registry import OperatorDirective, RegisterDirective
from orchlang.statements import LeafSnippet, OperatorStmt, SerialStmt

reg = RegisterDirective(pkg="demo")
reg.accept_operator(OperatorDirective.from_literals('"demo/ops"', '"Fetch"', None, 1))
reg.accept_operator(OperatorDirective.from_literals('"demo/ops"', '"Store"', None, 2))

fetch, store = OperatorStmt("Fetch"), OperatorStmt("Store")
serial = SerialStmt()
serial.accept_leaf(LeafSnippet(fetch))
serial.accept_leaf(LeafSnippet(store))

start = StartDirective("main")
start.accept_exedesc(ExedescStmt(serial))
start.accept_operator(fetch)
start.accept_operator(store)

program = Primary()
program.accept_register(reg)
program.accept_start(start)
program.self_check()
print(start.description())
# START("main"){
#
#   Fetch -> Store
#
# }
```

A start or fragment learns which operators it runs only through
`accept_operator`. The one exception is `accept_exedesc` when the body is a
single operator. GO directives and WAIT names are recorded in the same way,
with `append_go` and `append_wait_name`. UNFOLD references are recorded with
`append_unfold`.

`Primary.self_check()` stops at the first problem it finds. It works in this
order:

1. It links every `UNFOLD` to its fragment. A missing fragment raises
   `ParseError("fragment not found")`.
2. It rejects fragments that unfold each other in a cycle (`ValueError`).
3. It looks for duplicate `GO` names within a start, counting the GO
   directives of every fragment the start unfolds (`ValueError`).
4. It looks for `WAIT` names that have no matching `GO` in their start
   (`ValueError`).
5. It looks for operators that are used but never registered (`ValueError`).
   A start with `no_check_miss=True` is skipped.

`Primary.description()` renders all starts, then all fragments, then all
register blocks.

## Errors

The package raises `orchlang.errors.ParseError` for errors tied to a source
position. Its text has the form `message, file=path(line:column) key=value`.
The whole-program checks described above raise `ValueError` instead.