"""
Result type for operations that may fail without raising.

Callers branch on is_ok() instead of catching exceptions.
"""

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


@dataclass(frozen=True)
class ParseError:
    """Why a piece of text could not be parsed."""

    message: str
    position: int = 0


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [line for line in lines[1:] if not line.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned


def try_parse_json(text: str) -> "Result[Any, ParseError]":
    """Parse JSON text, tolerating a markdown fence around it."""
    if not isinstance(text, str):
        return Err(ParseError(f"expected text, got {type(text).__name__}"))
    cleaned = strip_code_fences(text)
    if not cleaned:
        return Err(ParseError("empty text"))
    try:
        return Ok(json.loads(cleaned))
    except json.JSONDecodeError as e:
        return Err(ParseError(e.msg, e.pos))
