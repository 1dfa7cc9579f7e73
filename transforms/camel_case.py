#!/usr/bin/env python3
"""
Convert text to camelCase — first word lowercase, later words capitalised, no separators.
Punctuation is dropped; spaces, hyphens and underscores split words.

Example:
    "SCREEN_NAME" → "screenName"

Set split_case = true under [transform:camel_case] in transforms.ini to also
split at lower→UPPER boundaries (keeps existing camelCase humps).
"""
from case_convert import convert

SPLIT_CASE = False


def transform(text: str) -> str:
    if SPLIT_CASE not in (True, False):
        raise ValueError(f"split_case must be true or false, got {SPLIT_CASE!r}")
    return convert(text, "camel", split_case=bool(SPLIT_CASE))
