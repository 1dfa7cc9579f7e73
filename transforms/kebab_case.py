#!/usr/bin/env python3
"""
Convert text to kebab-case — lowercase words joined by hyphens.
Punctuation is dropped; spaces, hyphens and underscores split words.

Example:
    "Hello World" → "hello-world"

Set split_case = true under [transform:kebab_case] in transforms.ini to also
split at lower→UPPER boundaries (keeps existing camelCase humps).
"""
from case_convert import convert

SPLIT_CASE = False


def transform(text: str) -> str:
    if SPLIT_CASE not in (True, False):
        raise ValueError(f"split_case must be true or false, got {SPLIT_CASE!r}")
    return convert(text, "kebab", split_case=bool(SPLIT_CASE))
