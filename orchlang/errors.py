"""Source positions and the error raised for malformed programs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Pos:
    """Location of a construct inside a source file."""

    file: str = ""
    start_line: int = 0
    start_column: int = 0
    stop_line: int = 0
    stop_column: int = 0

    def __str__(self) -> str:
        return f"{self.file} {self.start_line}"


class ParseError(Exception):
    """A semantic error found while building or checking a program."""

    def __init__(self, msg: str, pos: Pos | None = None, kv: dict[str, str] | None = None):
        self.msg = msg
        self.pos = pos if pos is not None else Pos()
        self.kv = dict(kv) if kv else {}
        super().__init__(msg)

    def __str__(self) -> str:
        details = "".join(f"{key}={value}, " for key, value in self.kv.items()).rstrip(", ")
        return (
            f"{self.msg}, file={self.pos.file}"
            f"({self.pos.start_line}:{self.pos.start_column}) {details}"
        )