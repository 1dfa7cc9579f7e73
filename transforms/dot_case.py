#!/usr/bin/env python3
"""
Convert text to dot.case — lowercase words joined by periods.
Punctuation is dropped; spaces, hyphens and underscores split words.

Example:
    " multiple Words_here!" → "multiple.words.here"

Set split_case = true under [transform:dot_case] in transforms.ini to also
split at lower→UPPER boundaries (keeps existing camelCase humps).
"""
from case_convert import convert

SPLIT_CASE = False


def transform(text: str) -> str:
    if SPLIT_CASE not in (True, False):
        raise ValueError(f"split_case must be true or false, got {SPLIT_CASE!r}")
    return convert(text, "dot", split_case=bool(SPLIT_CASE))
