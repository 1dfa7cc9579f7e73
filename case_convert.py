#!/usr/bin/env python3
"""
case_convert.py — String case conversion for CaseCommand.

Turns free text into camelCase, kebab-case or dot.case:

    convert("hello world", "camel")            → "helloWorld"
    convert("Hello World", "kebab")            → "hello-world"
    convert(" multiple Words_here!", "dot")    → "multiple.words.here"

Steps: validate → drop punctuation → split on whitespace/hyphens/underscores
(and, with split_case, at lower→UPPER boundaries) → lowercase → join.

Words are split on explicit delimiters only by default, so acronym-heavy or
already-camelCased input collapses into one word ("HTTPSConnection" →
"httpsconnection"). Pass split_case=True to keep existing camelCase humps.
"""

import re

CAMEL = "camel"
KEBAB = "kebab"
DOT   = "dot"
STYLES = (CAMEL, KEBAB, DOT)

# InvalidInputError reasons
NULL_OR_UNDEFINED   = "null-or-undefined"
NOT_A_STRING        = "not-a-string"
EMPTY_OR_WHITESPACE = "empty-or-whitespace"
NO_VALID_WORDS      = "no-valid-words"

_NOISE      = re.compile(r"[^A-Za-z0-9\s_-]")
_DELIMITERS = re.compile(r"[\s_-]+")
_HUMP       = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class InvalidInputError(ValueError):
    """Raised when the input cannot be turned into at least one word."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason  = reason
        self.message = message


def _validate(value) -> str:
    if value is None:
        raise InvalidInputError(
            NULL_OR_UNDEFINED, "Input cannot be null or undefined"
        )
    if not isinstance(value, str):
        raise InvalidInputError(
            NOT_A_STRING,
            f"Input must be a string, received {type(value).__name__}"
        )
    if not value.strip():
        raise InvalidInputError(
            EMPTY_OR_WHITESPACE,
            "Input cannot be an empty or whitespace-only string"
        )
    return value.strip()


def split_words(text: str, split_case: bool = False) -> list:
    """
    Break text into lowercase words. Characters other than letters, digits,
    whitespace, '-' and '_' are removed before splitting.
    """
    cleaned = _NOISE.sub("", text)
    words = []
    for chunk in _DELIMITERS.split(cleaned):
        if split_case:
            words.extend(_HUMP.split(chunk))
        else:
            words.append(chunk)
    return [w.lower() for w in words if w]


def _join(words: list, style: str) -> str:
    if style == CAMEL:
        return words[0] + "".join(w[:1].upper() + w[1:] for w in words[1:])
    if style == KEBAB:
        return "-".join(words)
    return ".".join(words)


def convert(value, style: str, split_case: bool = False) -> str:
    """
    Convert value to the given style ("camel", "kebab" or "dot").

    Raises InvalidInputError for None, non-string, blank input, or input with
    no words left once punctuation is removed. Raises ValueError for an
    unknown style.
    """
    if style not in STYLES:
        raise ValueError(
            f"Unknown style {style!r} — expected one of: {', '.join(STYLES)}"
        )
    text  = _validate(value)
    words = split_words(text, split_case)
    if not words:
        raise InvalidInputError(
            NO_VALID_WORDS, "Input must contain at least one valid word"
        )
    return _join(words, style)


def to_camel_case(value, split_case: bool = False) -> str:
    return convert(value, CAMEL, split_case)


def to_kebab_case(value, split_case: bool = False) -> str:
    return convert(value, KEBAB, split_case)


def to_dot_case(value, split_case: bool = False) -> str:
    return convert(value, DOT, split_case)
