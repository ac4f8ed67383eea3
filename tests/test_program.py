import pytest

from orchlang.directives import ExedescStmt, GoDirective, UnfoldDirective
from orchlang.errors import ParseError, Pos
from orchlang.program import (
    FragmentDirective,
    FragmentDirectives,
    Primary,
    StartDirective,
    StartDirectives,
)
from orchlang.registry import OperatorDirective, Operators, RegisterDirective
from orchlang.statements import OperatorStmt


def _body(name):
    return ExedescStmt(OperatorStmt(name))


def _go(name, op="x"):
    return GoDirective(exedesc=_body(op), go_name=name)


def _start(name, op="a"):
    start = StartDirective(name)
    start.accept_exedesc(_body(op))
    return start


def _fragment(name, op="f"):
    return FragmentDirective(name, exedesc=_body(op))


def _register(*names):
    reg = RegisterDirective(pkg="pkg")
    for seq, name in enumerate(names, start=1):
        reg.accept_operator(OperatorDirective(name=name, struct_name=name, seq=seq))
    return reg


def test_start_description():
    assert _start("main").description("") == 'START("main"){\n\n  a\n\n}\n'


def test_start_str_uses_position():
    start = StartDirective("main", pos=Pos(start_line=3, start_column=4))
    assert str(start) == 'START("main"):3:4'


def test_fragment_str_and_description():
    frag = FragmentDirective("f1", pos=Pos(start_line=7, start_column=0), exedesc=_body("b"))
    assert str(frag) == 'FRAGMENT("f1"):7:0'
    assert frag.description("") == 'FRAGMENT("f1"){\n\n  b\n\n}\n'


def test_accept_exedesc_records_operator():
    start = _start("s", op="op1")
    start.accept_operator(OperatorStmt("op2"))
    assert start.expected_operators == {"op1", "op2"}


def test_duplicate_start_rejected():
    starts = StartDirectives()
    starts.append(_start("s"))
    with pytest.raises(ParseError) as info:
        starts.append(_start("s"))
    assert info.value.msg == "duplicate startDirective"
    assert info.value.kv == {"name": "s"}


def test_duplicate_fragment_rejected():
    frags = FragmentDirectives()
    frags.append(_fragment("f"))
    with pytest.raises(ParseError) as info:
        frags.append(_fragment("f"))
    assert info.value.msg == "duplicate fragmentDirective"


def test_duplicate_go_in_start_and_fragment_directive():
    start = _start("s")
    start.append_go(_go("g"))
    with pytest.raises(ParseError):
        start.append_go(_go("g"))
    frag = _fragment("f")
    frag.append_go(_go("g"))
    with pytest.raises(ParseError) as info:
        frag.append_go(_go("g"))
    assert info.value.msg == "duplicate goDirective"


def test_fragment_cycle_detected():
    frags = FragmentDirectives()
    f1, f2 = _fragment("f1"), _fragment("f2")
    f1.append_unfold(UnfoldDirective("f2"))
    f2.append_unfold(UnfoldDirective("f1"))
    frags.append(f1)
    frags.append(f2)
    with pytest.raises(ValueError, match="import cycle"):
        frags.self_check()


def test_fragment_self_reference_detected():
    frags = FragmentDirectives()
    f1 = _fragment("f1")
    f1.append_unfold(UnfoldDirective("f1"))
    frags.append(f1)
    with pytest.raises(ValueError, match="import cycle"):
        frags.self_check()


def test_self_check_resolves_unfolds():
    primary = Primary()
    start = _start("s")
    unfold = UnfoldDirective("f")
    start.append_unfold(unfold)
    frag = _fragment("f")
    primary.accept_start(start)
    primary.accept_fragment(frag)
    primary.accept_register(_register("a", "f"))
    primary.self_check()
    assert unfold.fragment is frag


def test_self_check_missing_fragment():
    primary = Primary()
    start = _start("s")
    start.append_unfold(UnfoldDirective("nope"))
    primary.accept_start(start)
    with pytest.raises(ParseError) as info:
        primary.self_check()
    assert info.value.msg == "fragment not found"
    assert info.value.kv == {"name": "nope"}


def test_go_duplicate_between_start_and_fragment():
    primary = Primary()
    start = _start("s")
    start.append_go(_go("g"))
    start.append_unfold(UnfoldDirective("f"))
    frag = _fragment("f")
    frag.append_go(_go("g"))
    primary.accept_start(start)
    primary.accept_fragment(frag)
    primary.accept_register(_register("a"))
    with pytest.raises(ValueError, match="duplicate goDirective"):
        primary.self_check()


def test_shared_nested_fragment_in_two_starts_is_fine():
    primary = Primary()
    for name in ("s1", "s2"):
        start = _start(name)
        start.append_unfold(UnfoldDirective("outer"))
        primary.accept_start(start)
    outer = _fragment("outer")
    outer.append_unfold(UnfoldDirective("inner"))
    inner = _fragment("inner")
    inner.append_go(_go("g"))
    primary.accept_fragment(outer)
    primary.accept_fragment(inner)
    primary.accept_register(_register("a"))
    primary.self_check()
    for name in ("s1", "s2"):
        assert set(primary.starters.by_name[name].all_go_directives) == {"g"}


def test_wait_without_go_rejected():
    primary = Primary()
    start = _start("s")
    start.append_wait_name("w")
    primary.accept_start(start)
    primary.accept_register(_register("a"))
    with pytest.raises(ValueError, match="not find matched GO"):
        primary.self_check()


def test_wait_in_fragment_matches_go_in_start():
    primary = Primary()
    start = _start("s")
    start.append_go(_go("g"))
    start.append_unfold(UnfoldDirective("f"))
    frag = _fragment("f")
    frag.append_wait_name("g")
    primary.accept_start(start)
    primary.accept_fragment(frag)
    primary.accept_register(_register("a"))
    primary.self_check()
    assert "g" in start.wait_names


def test_check_operator_miss():
    starts = StartDirectives()
    starts.append(_start("s", op="missing"))
    ops = Operators()
    ops.append(OperatorDirective(name="a", seq=1))
    with pytest.raises(ValueError, match='operator "missing" not register'):
        starts.check_operator_miss(ops)


def test_no_check_miss_skips_operator_check():
    starts = StartDirectives()
    start = _start("s", op="missing")
    start.no_check_miss = True
    starts.append(start)
    starts.check_operator_miss(Operators())
    assert start.expected_operators == {"missing"}


def test_primary_description_contains_parts():
    primary = Primary()
    primary.accept_start(_start("s"))
    primary.accept_fragment(_fragment("f"))
    primary.accept_register(_register("a"))
    text = primary.description()
    assert text.index('START("s")') < text.index('FRAGMENT("f")') < text.index("REGISTER(")
    assert text.startswith(primary.starters.description(""))
    assert text.endswith(primary.registers.description(""))


def test_start_description_with_no_check_miss():
    start = _start("s")
    start.no_check_miss = True
    assert "\nNO_CHECK_MISS()\n" in start.description("")