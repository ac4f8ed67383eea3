"""Syntax tree, rendering and semantic checks for an operator orchestration language."""

__version__ = "0.1.0"

__all__ = ["args", "directives", "errors", "program", "registry", "statements"]